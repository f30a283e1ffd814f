"""Staging artifacts into a release directory.

ArchiveExtractor unpacks tar and zip family archives into the release
directory, or copies a non-archive artifact into it unchanged. The release
directory is not emptied first: a redeploy overwrites files in place.

Members with absolute paths, ".." components, drive prefixes, or that are
links or devices are skipped rather than written.
"""

from __future__ import annotations

import contextlib
import os
import shutil
import stat
import tarfile
import zipfile
from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from typing import Protocol

from artdeploy.core.result import Err, Ok, Result
from artdeploy.platform.detection import Platform
from artdeploy.platform.files import apply_ownership, copy_file

__all__ = [
    "ArchiveExtractor",
    "ExtractError",
    "ExtractResult",
    "Extractor",
    "TAR_SUFFIXES",
    "ZIP_SUFFIXES",
    "archive_kind",
]

TAR_SUFFIXES = (".tar.gz", ".tgz", ".tar", ".tar.bz2", ".tbz", ".tbz2", ".tar.xz", ".txz")
ZIP_SUFFIXES = (".zip", ".war", ".jar")


@dataclass(frozen=True, slots=True)
class ExtractError:
    """Extraction error details.

    Attributes:
        archive: Path to the artifact that failed
        message: Human-readable error message
        unsupported: True when the file type is not an archive we can open
    """

    archive: Path
    message: str
    unsupported: bool = False

    def __str__(self) -> str:
        return f"{self.message}: {self.archive}"


@dataclass(frozen=True, slots=True)
class ExtractResult:
    """Result of staging an artifact.

    Attributes:
        destination: The release directory
        files_count: Number of files written
    """

    destination: Path
    files_count: int


class Extractor(Protocol):
    def extract(
        self,
        archive: Path,
        destination: Path,
        *,
        owner: str | None = None,
        group: str | None = None,
    ) -> Result[ExtractResult, ExtractError]: ...

    def copy(
        self,
        artifact: Path,
        destination: Path,
        *,
        owner: str | None = None,
        group: str | None = None,
    ) -> Result[ExtractResult, ExtractError]: ...


def archive_kind(name: str) -> str | None:
    """"tar", "zip", or None for an unsupported file name."""
    # Path.suffixes splits on every dot ("app-1.2.3.tgz"), so match on the name.
    lowered = name.lower()
    if lowered.endswith(TAR_SUFFIXES):
        return "tar"
    if lowered.endswith(ZIP_SUFFIXES):
        return "zip"
    return None


class ArchiveExtractor:
    """Default extraction collaborator.

    Usage:
        extractor = ArchiveExtractor(detect_platform())
        result = extractor.extract(cached, release_path, owner="app", group="app")
    """

    def __init__(self, platform: Platform) -> None:
        self._platform = platform

    def extract(
        self,
        archive: Path,
        destination: Path,
        *,
        owner: str | None = None,
        group: str | None = None,
    ) -> Result[ExtractResult, ExtractError]:
        if not archive.is_file():
            return Err(ExtractError(archive=archive, message="Archive not found"))

        match archive_kind(archive.name):
            case "tar":
                return self._extract_tar(archive, destination, owner, group)
            case "zip":
                return self._extract_zip(archive, destination, owner, group)
            case _:
                return Err(
                    ExtractError(
                        archive=archive,
                        message="Unsupported archive type (expected one of "
                        f"{' '.join(TAR_SUFFIXES + ZIP_SUFFIXES)})",
                        unsupported=True,
                    )
                )

    def copy(
        self,
        artifact: Path,
        destination: Path,
        *,
        owner: str | None = None,
        group: str | None = None,
    ) -> Result[ExtractResult, ExtractError]:
        """Place a non-archive artifact into destination as-is."""
        if not artifact.is_file():
            return Err(ExtractError(archive=artifact, message="Artifact not found"))
        try:
            target = copy_file(artifact, destination)
            apply_ownership(target, self._platform, owner=owner, group=group)
        except (OSError, LookupError) as e:
            return Err(ExtractError(archive=artifact, message=f"Copy failed: {e}"))
        return Ok(ExtractResult(destination=destination, files_count=1))

    def _safe_relative_path(self, member_name: str) -> Path | None:
        """Return a sanitized relative extraction path, or None if unsafe."""
        normalized = member_name.replace("\\", "/")
        if normalized.startswith("/"):
            return None

        parts = [p for p in PurePosixPath(normalized).parts if p != "."]
        if not parts:
            return None
        if any(part in {"", ".."} for part in parts):
            return None
        if parts[0].endswith(":"):
            return None

        return Path(*parts)

    def _is_within_root(self, root: Path, target: Path) -> bool:
        try:
            return target.resolve().is_relative_to(root)
        except OSError:
            return False

    def _prepare_parent(
        self, root: Path, path: Path, owner: str | None, group: str | None
    ) -> None:
        """mkdir -p for path's parent, chowning each directory created."""
        missing: list[Path] = []
        parent = path.parent
        while parent != root and not parent.exists():
            missing.append(parent)
            parent = parent.parent
        for directory in reversed(missing):
            directory.mkdir(exist_ok=True)
            apply_ownership(directory, self._platform, owner=owner, group=group)

    def _extract_tar(
        self,
        archive: Path,
        destination: Path,
        owner: str | None,
        group: str | None,
    ) -> Result[ExtractResult, ExtractError]:
        try:
            destination.mkdir(parents=True, exist_ok=True)
            root = destination.resolve()
            files_count = 0

            # "r:*" lets tarfile detect gzip/bz2/xz/uncompressed itself.
            with tarfile.open(archive, "r:*") as tar:
                for member in tar.getmembers():
                    rel_path = self._safe_relative_path(member.name)
                    if rel_path is None:
                        continue
                    full_path = destination / rel_path
                    if not self._is_within_root(root, full_path):
                        continue

                    if member.isdir():
                        self._prepare_parent(root, full_path / "_", owner, group)
                        continue
                    # Skip symlink, hardlink, device, fifo entries
                    if not member.isreg():
                        continue

                    src = tar.extractfile(member)
                    if src is None:
                        continue

                    self._prepare_parent(root, full_path, owner, group)
                    if full_path.is_symlink():
                        full_path.unlink()
                    with src, open(full_path, "wb") as dst:
                        shutil.copyfileobj(src, dst)

                    mode = member.mode & 0o777
                    if mode:
                        with contextlib.suppress(OSError):
                            os.chmod(full_path, mode)
                    apply_ownership(full_path, self._platform, owner=owner, group=group)

                    files_count += 1

            return Ok(ExtractResult(destination=destination, files_count=files_count))

        except tarfile.TarError as e:
            return Err(ExtractError(archive=archive, message=f"Tar extraction failed: {e}"))
        except (OSError, LookupError) as e:
            return Err(ExtractError(archive=archive, message=f"IO error: {e}"))

    def _extract_zip(
        self,
        archive: Path,
        destination: Path,
        owner: str | None,
        group: str | None,
    ) -> Result[ExtractResult, ExtractError]:
        try:
            destination.mkdir(parents=True, exist_ok=True)
            root = destination.resolve()
            files_count = 0

            with zipfile.ZipFile(archive, "r") as zf:
                for info in zf.infolist():
                    rel_path = self._safe_relative_path(info.filename)
                    if rel_path is None:
                        continue
                    full_path = destination / rel_path
                    if not self._is_within_root(root, full_path):
                        continue

                    if info.is_dir():
                        self._prepare_parent(root, full_path / "_", owner, group)
                        continue

                    unix_attrs = info.external_attr >> 16
                    if (unix_attrs & 0o170000) == stat.S_IFLNK:
                        continue

                    self._prepare_parent(root, full_path, owner, group)
                    if full_path.is_symlink():
                        full_path.unlink()
                    with zf.open(info) as src, open(full_path, "wb") as dst:
                        shutil.copyfileobj(src, dst)

                    # Preserve Unix permissions if available
                    if unix_attrs & 0o777:
                        with contextlib.suppress(OSError):
                            full_path.chmod(unix_attrs & 0o777)
                    apply_ownership(full_path, self._platform, owner=owner, group=group)

                    files_count += 1

            return Ok(ExtractResult(destination=destination, files_count=files_count))

        except zipfile.BadZipFile as e:
            return Err(ExtractError(archive=archive, message=f"Invalid zip file: {e}"))
        except (OSError, LookupError) as e:
            return Err(ExtractError(archive=archive, message=f"IO error: {e}"))
