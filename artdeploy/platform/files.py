"""Filesystem primitives used by the release lifecycle."""

from __future__ import annotations

import os
import shutil
import tempfile
from pathlib import Path

from .detection import Platform

__all__ = [
    "atomic_write_text",
    "apply_ownership",
    "copy_file",
    "ensure_directory",
    "remove_tree",
    "switch_symlink",
]


def atomic_write_text(path: Path, content: str, *, encoding: str = "utf-8") -> None:
    """Write text to path atomically using temp file + replace."""
    path.parent.mkdir(parents=True, exist_ok=True)

    fd, tmp_name = tempfile.mkstemp(
        prefix=f".{path.name}.",
        suffix=".tmp",
        dir=str(path.parent),
    )
    tmp_path = Path(tmp_name)

    try:
        with os.fdopen(fd, "w", encoding=encoding, newline="") as handle:
            handle.write(content)
            handle.flush()
            os.fsync(handle.fileno())
        os.replace(tmp_path, path)
    finally:
        if tmp_path.exists():
            tmp_path.unlink(missing_ok=True)


def apply_ownership(
    path: Path,
    platform: Platform,
    *,
    owner: str | None,
    group: str | None,
) -> None:
    """chown path when an owner or group is configured.

    No-op on platforms without POSIX ownership. Raises OSError (or LookupError
    for an unknown user/group) on failure.
    """
    if owner is None and group is None:
        return
    if not platform.supports_chown:
        return
    shutil.chown(path, user=owner, group=group)


def ensure_directory(
    path: Path,
    platform: Platform,
    *,
    owner: str | None = None,
    group: str | None = None,
    mode: int = 0o755,
) -> None:
    """Create path (and parents) if missing; pre-existing is fine."""
    path.mkdir(mode=mode, parents=True, exist_ok=True)
    apply_ownership(path, platform, owner=owner, group=group)


def switch_symlink(link: Path, target: Path, platform: Platform) -> None:
    """Point link at target without a window where link is missing.

    A temporary link is created next to `link` and renamed over it. Where the
    platform cannot rename over a directory link, the old link is removed
    first.
    """
    link.parent.mkdir(parents=True, exist_ok=True)

    if not platform.supports_atomic_symlink_replace:
        if link.is_symlink():
            # Directory junctions need rmdir, plain links need unlink.
            try:
                link.unlink()
            except (IsADirectoryError, PermissionError):
                os.rmdir(link)
        link.symlink_to(target, target_is_directory=True)
        return

    tmp_link = link.with_name(f".{link.name}.tmp")
    if tmp_link.is_symlink() or tmp_link.exists():
        tmp_link.unlink()
    tmp_link.symlink_to(target, target_is_directory=True)
    try:
        os.replace(tmp_link, link)
    finally:
        if tmp_link.is_symlink():
            tmp_link.unlink(missing_ok=True)


def remove_tree(path: Path) -> bool:
    """Remove a directory tree, file or link.

    Returns:
        True if something was removed, False if path was already absent.
    """
    if path.is_symlink() or path.is_file():
        path.unlink(missing_ok=True)
        return True
    if not path.exists():
        return False
    shutil.rmtree(path)
    return True


def copy_file(source: Path, destination_dir: Path) -> Path:
    """Copy source into destination_dir, keeping its name and metadata."""
    destination_dir.mkdir(parents=True, exist_ok=True)
    target = destination_dir / source.name
    if target.is_symlink():
        target.unlink()
    shutil.copy2(source, target)
    return target
