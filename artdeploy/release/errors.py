"""Error types for the release lifecycle.

Collaborators return Err(...) payloads; the lifecycle converts them into one
of the variants below and raises DeployAborted so that nothing after the
failing step runs.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

__all__ = [
    "ConfigInvalid",
    "DeployAborted",
    "DeployError",
    "DirectorySetupFailed",
    "ExtractFailed",
    "FetchFailed",
    "InvalidName",
    "LatestOverHttp",
    "LocalSourceMissing",
    "SymlinkFailed",
    "UnsupportedArchive",
    "describe",
]


@dataclass(frozen=True, slots=True)
class LatestOverHttp:
    location: str


@dataclass(frozen=True, slots=True)
class UnsupportedArchive:
    path: Path


@dataclass(frozen=True, slots=True)
class LocalSourceMissing:
    path: Path


@dataclass(frozen=True, slots=True)
class InvalidName:
    name: str


@dataclass(frozen=True, slots=True)
class ConfigInvalid:
    reason: str
    path: Path | None = None


@dataclass(frozen=True, slots=True)
class DirectorySetupFailed:
    path: Path
    reason: str


@dataclass(frozen=True, slots=True)
class FetchFailed:
    location: str
    reason: str
    checksum_mismatch: bool = False


@dataclass(frozen=True, slots=True)
class ExtractFailed:
    archive: Path
    reason: str


@dataclass(frozen=True, slots=True)
class SymlinkFailed:
    link: Path
    target: Path
    reason: str


DeployError = (
    LatestOverHttp
    | UnsupportedArchive
    | LocalSourceMissing
    | InvalidName
    | ConfigInvalid
    | DirectorySetupFailed
    | FetchFailed
    | ExtractFailed
    | SymlinkFailed
)


def describe(error: DeployError) -> str:
    """One-line human-readable message for error."""
    match error:
        case LatestOverHttp(location=location):
            return f"'latest' cannot be resolved for http(s) location: {location}"
        case UnsupportedArchive(path=path):
            return f"unsupported archive type: {path.name}"
        case LocalSourceMissing(path=path):
            return f"local artifact not found: {path}"
        case InvalidName(name=name):
            return f"artifact name must not contain whitespace: {name!r}"
        case ConfigInvalid(reason=reason, path=path):
            return f"invalid config: {reason}" + (f" ({path})" if path else "")
        case DirectorySetupFailed(path=path, reason=reason):
            return f"cannot create directory {path}: {reason}"
        case FetchFailed(location=location, reason=reason, checksum_mismatch=mismatch):
            prefix = "checksum verification failed" if mismatch else "fetch failed"
            return f"{prefix} for {location}: {reason}"
        case ExtractFailed(archive=archive, reason=reason):
            return f"cannot extract {archive.name}: {reason}"
        case SymlinkFailed(link=link, target=target, reason=reason):
            return f"cannot link {link} -> {target}: {reason}"


class DeployAborted(Exception):
    """Raised by the lifecycle when a fatal step fails.

    Attributes:
        error: The typed failure
    """

    def __init__(self, error: DeployError) -> None:
        super().__init__(describe(error))
        self.error = error
