"""Which OS we deploy on.

Code that behaves differently per OS takes a Platform argument instead of
inspecting sys.platform itself: replacing the `current` link and changing
ownership are the two places that care.
"""

from __future__ import annotations

import sys
from enum import Enum, auto
from functools import lru_cache

__all__ = [
    "Platform",
    "detect_platform",
]


class Platform(Enum):
    LINUX = auto()
    MACOS = auto()
    WINDOWS = auto()
    UNKNOWN = auto()

    def __str__(self) -> str:
        return self.name.lower()

    @property
    def is_unix(self) -> bool:
        return self in (Platform.LINUX, Platform.MACOS)

    @property
    def is_windows(self) -> bool:
        return self is Platform.WINDOWS

    @property
    def supports_atomic_symlink_replace(self) -> bool:
        """True if os.replace() can swap a link over an existing directory link.

        Windows refuses; the old link has to be removed first.
        """
        return not self.is_windows

    @property
    def supports_chown(self) -> bool:
        return self.is_unix


# sys.platform prefixes, checked in order
_PREFIXES: tuple[tuple[tuple[str, ...], Platform], ...] = (
    (("linux",), Platform.LINUX),
    (("darwin",), Platform.MACOS),
    (("win32", "cygwin", "msys"), Platform.WINDOWS),
)


@lru_cache(maxsize=1)
def detect_platform() -> Platform:
    name = sys.platform.lower()
    for prefixes, platform in _PREFIXES:
        if name.startswith(prefixes):
            return platform
    return Platform.UNKNOWN
