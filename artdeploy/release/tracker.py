"""Release bookkeeping under a deploy root.

Layout:
    <deploy_to>/current -> releases/<version>
    <deploy_to>/releases/<version>/

All methods are reads; nothing here changes the filesystem.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

__all__ = ["CURRENT_LINK", "RELEASES_DIR", "SHARED_DIR", "Release", "VersionTracker"]

CURRENT_LINK = "current"
RELEASES_DIR = "releases"
SHARED_DIR = "shared"


@dataclass(frozen=True, slots=True)
class Release:
    """A release directory and its modification time."""

    path: Path
    mtime: float

    @property
    def version(self) -> str:
        return self.path.name


class VersionTracker:
    """Answers "what is active" and "what else is installed" for a deploy root."""

    def __init__(self, deploy_to: Path) -> None:
        self._deploy_to = deploy_to

    @property
    def deploy_to(self) -> Path:
        return self._deploy_to

    @property
    def releases_dir(self) -> Path:
        return self._deploy_to / RELEASES_DIR

    @property
    def shared_dir(self) -> Path:
        return self._deploy_to / SHARED_DIR

    @property
    def current_path(self) -> Path:
        return self._deploy_to / CURRENT_LINK

    def release_path(self, version: str) -> Path:
        return self.releases_dir / version

    def current_version(self) -> str | None:
        """Basename of the directory `current` points at.

        None when there is no pointer, when `current` is not a symlink, or
        when its target no longer exists.
        """
        link = self.current_path
        if not link.is_symlink():
            return None
        try:
            target = Path(os.readlink(link))
        except OSError:
            return None
        if not target.is_absolute():
            target = link.parent / target
        if not target.exists():
            return None
        return target.name or None

    def releases(self) -> list[Release]:
        """Every release directory, oldest first (ties broken by name)."""
        root = self.releases_dir
        if not root.is_dir():
            return []
        found: list[Release] = []
        for entry in root.iterdir():
            if entry.is_symlink() or not entry.is_dir():
                continue
            found.append(Release(path=entry, mtime=entry.stat().st_mtime))
        found.sort(key=lambda r: (r.mtime, r.version))
        return found

    def history(self) -> list[Release]:
        """Installed releases other than the active one, oldest first."""
        active = self.current_version()
        return [r for r in self.releases() if r.version != active]

    def previous_version_numbers(self) -> set[str]:
        return {r.version for r in self.history()}
