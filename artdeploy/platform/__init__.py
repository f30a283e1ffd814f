"""Platform abstraction layer."""

from .detection import Platform, detect_platform
from .paths import home, user_cache_dir
from .files import (
    apply_ownership,
    atomic_write_text,
    copy_file,
    ensure_directory,
    remove_tree,
    switch_symlink,
)
from .process import ProcessError, run

__all__ = [
    # detection
    "Platform",
    "detect_platform",
    # files
    "apply_ownership",
    "atomic_write_text",
    "copy_file",
    "ensure_directory",
    "remove_tree",
    "switch_symlink",
    # paths
    "home",
    "user_cache_dir",
    # process
    "ProcessError",
    "run",
]
