"""Artifact locations.

A location string is classified once into one of three variants and the
variant is threaded through the rest of the run:

- HttpLocation: an http(s) URL
- RepositoryLocation: a Maven-style coordinate "group:artifact:version[:ext]"
- LocalLocation: a path on this machine
"""

from __future__ import annotations

import re
from dataclasses import dataclass, replace
from pathlib import Path, PurePosixPath
from urllib.parse import unquote, urlparse

from artdeploy.core.result import Err, Ok, Result

__all__ = [
    "LATEST",
    "ArtifactReference",
    "HttpLocation",
    "LatestOverHttp",
    "LocalLocation",
    "LocalSourceMissing",
    "Location",
    "LocationError",
    "RepositoryLocation",
    "classify",
    "derive_cache_filename",
    "is_latest",
    "validate_reference",
]

LATEST = "latest"
DEFAULT_REPOSITORY_EXTENSION = "jar"

_HTTP_RE = re.compile(r"^https?://[^\s/?#]+", re.IGNORECASE)


@dataclass(frozen=True, slots=True)
class HttpLocation:
    url: str

    def __str__(self) -> str:
        return self.url


@dataclass(frozen=True, slots=True)
class RepositoryLocation:
    """A binary-repository coordinate.

    Attributes:
        group_id: Dotted group, e.g. "com.example"
        artifact_id: Artifact name, e.g. "my-app"
        version: Version segment as written (may be "latest")
        extension: Packaging extension, "jar" when omitted
    """

    group_id: str
    artifact_id: str
    version: str
    extension: str = DEFAULT_REPOSITORY_EXTENSION

    @property
    def coordinate(self) -> str:
        return ":".join((self.group_id, self.artifact_id, self.version, self.extension))

    def with_version(self, version: str) -> RepositoryLocation:
        return replace(self, version=version)

    def __str__(self) -> str:
        return self.coordinate


@dataclass(frozen=True, slots=True)
class LocalLocation:
    path: Path

    def __str__(self) -> str:
        return str(self.path)


type Location = HttpLocation | RepositoryLocation | LocalLocation


@dataclass(frozen=True, slots=True)
class ArtifactReference:
    """What to deploy: where it lives, which version, and its SHA-256."""

    location: str
    version: str
    checksum: str | None = None


@dataclass(frozen=True, slots=True)
class LatestOverHttp:
    """"latest" was requested for a plain URL, which cannot list versions."""

    location: str


@dataclass(frozen=True, slots=True)
class LocalSourceMissing:
    path: Path


type LocationError = LatestOverHttp | LocalSourceMissing


def is_latest(version: str) -> bool:
    """True when version is the "latest" sentinel (case-insensitive)."""
    return version.strip().casefold() == LATEST


def is_http(location: str) -> bool:
    return _HTTP_RE.match(location.strip()) is not None


def classify(location: str) -> Location:
    """Classify a location string.

    HTTP wins over everything; otherwise three or more colon-separated
    segments make a repository coordinate; anything else is a local path.
    """
    location = location.strip()
    if is_http(location):
        return HttpLocation(url=location)

    parts = location.split(":")
    if len(parts) > 2:
        group_id, artifact_id, version = parts[0], parts[1], parts[2]
        extension = parts[3] if len(parts) > 3 and parts[3] else DEFAULT_REPOSITORY_EXTENSION
        return RepositoryLocation(
            group_id=group_id,
            artifact_id=artifact_id,
            version=version,
            extension=extension,
        )

    return LocalLocation(path=Path(location).expanduser())


def derive_cache_filename(location: Location, version: str) -> str:
    """Name of the cached artifact file for location at version.

    Examples:
        "com.example:my-app:1.0.0:tgz" -> "my-app-1.0.0.tgz"
        "https://host/dl/my-app.jar"    -> "my-app.jar"
        "/srv/builds/my-app.zip"        -> "my-app.zip"
    """
    match location:
        case RepositoryLocation(artifact_id=artifact_id, extension=extension):
            return f"{artifact_id}-{version}.{extension}"
        case HttpLocation(url=url):
            name = PurePosixPath(unquote(urlparse(url).path)).name
            return name or "artifact"
        case LocalLocation(path=path):
            return path.name


def validate_reference(reference: ArtifactReference) -> Result[Location, LocationError]:
    """Classify the reference and reject invalid combinations before any I/O."""
    location = classify(reference.location)

    if isinstance(location, HttpLocation) and is_latest(reference.version):
        return Err(LatestOverHttp(location=reference.location))

    if isinstance(location, LocalLocation) and not location.path.exists():
        return Err(LocalSourceMissing(path=location.path))

    return Ok(location)
