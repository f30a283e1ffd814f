"""Artifact retrieval into the local cache.

ArtifactFetcher dispatches on the classified location (HTTP, repository,
local path), verifies the SHA-256 checksum when one is given, and treats an
already-present, checksum-matching destination as done.
"""

from __future__ import annotations

import hashlib
import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from artdeploy.core.result import Err, Ok, Result
from artdeploy.fetch.http import HttpClient
from artdeploy.fetch.location import (
    HttpLocation,
    LocalLocation,
    Location,
    RepositoryLocation,
    is_latest,
)
from artdeploy.fetch.repository import MavenRepository

__all__ = [
    "ArtifactFetcher",
    "FetchError",
    "FetchResult",
    "Fetcher",
    "checksum_matches",
    "sha256_file",
]


@dataclass(frozen=True, slots=True)
class FetchError:
    """Retrieval failure.

    Attributes:
        location: The location that could not be fetched
        message: Human-readable reason
        checksum_mismatch: True when the bytes arrived but did not verify
    """

    location: str
    message: str
    checksum_mismatch: bool = False

    def __str__(self) -> str:
        return f"{self.message} ({self.location})"


@dataclass(frozen=True, slots=True)
class FetchResult:
    """Result of a fetch.

    Attributes:
        path: Path to the cached artifact
        from_cache: True if the destination already held a valid copy
        size: File size in bytes
    """

    path: Path
    from_cache: bool
    size: int


class Fetcher(Protocol):
    """What the lifecycle needs from a retrieval collaborator."""

    def fetch(
        self,
        location: Location,
        dest: Path,
        checksum: str | None,
    ) -> Result[FetchResult, FetchError]: ...

    def resolve_version(self, location: Location, version: str) -> Result[str, FetchError]: ...


def sha256_file(path: Path, chunk_size: int = 64 * 1024) -> str:
    digest = hashlib.sha256()
    with path.open("rb") as f:
        while chunk := f.read(chunk_size):
            digest.update(chunk)
    return digest.hexdigest()


def _normalize_checksum(checksum: str) -> str:
    value = checksum.strip().lower()
    if value.startswith("sha256:"):
        value = value[len("sha256:") :]
    return value


def checksum_matches(path: Path, checksum: str | None) -> bool:
    """True if checksum is None or equals the SHA-256 of path."""
    if checksum is None:
        return True
    return sha256_file(path) == _normalize_checksum(checksum)


class ArtifactFetcher:
    """Default fetch collaborator.

    Usage:
        fetcher = ArtifactFetcher(RealHttpClient(), repository=repo)
        result = fetcher.fetch(location, cache_dir / "app.tgz", checksum)
    """

    def __init__(self, http: HttpClient, repository: MavenRepository | None = None) -> None:
        self._http = http
        self._repository = repository

    def resolve_version(self, location: Location, version: str) -> Result[str, FetchError]:
        """Turn "latest" into a concrete version where the source can answer."""
        if not is_latest(version):
            return Ok(version)

        match location:
            case RepositoryLocation():
                if self._repository is None:
                    return Err(
                        FetchError(
                            location=str(location),
                            message="No repository url configured to resolve 'latest'",
                        )
                    )
                res = self._repository.latest_version(location)
                if isinstance(res, Err):
                    return Err(FetchError(location=str(location), message=res.error.message))
                return Ok(res.value)
            case HttpLocation():
                return Err(
                    FetchError(
                        location=str(location),
                        message="Cannot resolve 'latest' for an http(s) location",
                    )
                )
            case LocalLocation():
                return Ok(version)

    def fetch(
        self,
        location: Location,
        dest: Path,
        checksum: str | None,
    ) -> Result[FetchResult, FetchError]:
        if dest.is_file() and checksum_matches(dest, checksum):
            return Ok(FetchResult(path=dest, from_cache=True, size=dest.stat().st_size))

        dest.parent.mkdir(parents=True, exist_ok=True)

        res = self._retrieve(location, dest)
        if isinstance(res, Err):
            # Clean up partial download
            dest.unlink(missing_ok=True)
            return res

        if not checksum_matches(dest, checksum):
            actual = sha256_file(dest)
            dest.unlink(missing_ok=True)
            return Err(
                FetchError(
                    location=str(location),
                    message=f"Checksum mismatch: expected {checksum}, got {actual}",
                    checksum_mismatch=True,
                )
            )

        return Ok(FetchResult(path=dest, from_cache=False, size=dest.stat().st_size))

    def _retrieve(self, location: Location, dest: Path) -> Result[None, FetchError]:
        match location:
            case HttpLocation(url=url):
                hres = self._http.download(url, dest)
                if isinstance(hres, Err):
                    return Err(FetchError(location=url, message=hres.error.message))
                return Ok(None)
            case RepositoryLocation():
                if self._repository is None:
                    return Err(
                        FetchError(
                            location=str(location),
                            message="No repository url configured",
                        )
                    )
                rres = self._repository.download(location, dest)
                if isinstance(rres, Err):
                    return Err(FetchError(location=str(location), message=rres.error.message))
                return Ok(None)
            case LocalLocation(path=path):
                if not path.is_file():
                    return Err(FetchError(location=str(path), message="Local artifact not found"))
                try:
                    shutil.copy2(path, dest)
                except OSError as e:
                    return Err(FetchError(location=str(path), message=f"Copy failed: {e}"))
                return Ok(None)
