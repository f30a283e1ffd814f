"""Release manifests.

A manifest maps every regular file under a release directory to the SHA-1
hex digest of its bytes. Keys are POSIX paths relative to the release root.
Symlinks (to files or directories) and the manifest file itself are left
out, so shared links created during staging never show up as drift.

The manifest is stored as YAML next to the files it describes:

    releases/<version>/manifest.yaml
"""

from __future__ import annotations

import hashlib
import os
from dataclasses import dataclass
from pathlib import Path

import yaml

from artdeploy.core.result import Err, Ok, Result
from artdeploy.core.structured import as_str_map
from artdeploy.platform.files import atomic_write_text

__all__ = [
    "MANIFEST_FILENAME",
    "Manifest",
    "ManifestDiff",
    "ManifestError",
    "diff",
    "generate",
    "load",
    "manifests_equal",
    "persist",
    "read_manifest",
    "sha1_file",
]

MANIFEST_FILENAME = "manifest.yaml"

type Manifest = dict[str, str]


@dataclass(frozen=True, slots=True)
class ManifestError:
    """A manifest file exists but cannot be used."""

    path: Path
    message: str


@dataclass(frozen=True, slots=True)
class ManifestDiff:
    """Structural difference between two manifests.

    Attributes:
        added: Paths only in the new manifest
        removed: Paths only in the old manifest
        changed: Paths present in both with different digests
    """

    added: tuple[str, ...] = ()
    removed: tuple[str, ...] = ()
    changed: tuple[str, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not (self.added or self.removed or self.changed)

    def __bool__(self) -> bool:
        return not self.is_empty


def sha1_file(path: Path, chunk_size: int = 64 * 1024) -> str:
    digest = hashlib.sha1()
    with path.open("rb") as f:
        while chunk := f.read(chunk_size):
            digest.update(chunk)
    return digest.hexdigest()


def generate(release_root: Path) -> Manifest:
    """Hash every regular file under release_root.

    Symlinked directories are not descended into; the result is sorted by
    path so two walks of the same tree compare and serialize identically.
    """
    manifest: Manifest = {}
    for dirpath, _dirnames, filenames in os.walk(release_root, followlinks=False):
        base = Path(dirpath)
        for filename in filenames:
            path = base / filename
            if path.is_symlink() or not path.is_file():
                continue
            rel = path.relative_to(release_root).as_posix()
            if rel == MANIFEST_FILENAME:
                continue
            manifest[rel] = sha1_file(path)
    return dict(sorted(manifest.items()))


def persist(manifest: Manifest, release_root: Path) -> Path:
    """Write manifest to release_root/manifest.yaml, replacing any previous one."""
    path = release_root / MANIFEST_FILENAME
    content = yaml.safe_dump(dict(sorted(manifest.items())), default_flow_style=False)
    atomic_write_text(path, content)
    return path


def read_manifest(release_root: Path) -> Result[Manifest | None, ManifestError]:
    """Read the stored manifest.

    Returns:
        Ok(None) when no manifest exists, Ok(manifest) when it parses,
        Err(ManifestError) when it exists but is unreadable or malformed.
    """
    path = release_root / MANIFEST_FILENAME
    try:
        content = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return Ok(None)
    except (OSError, UnicodeDecodeError) as e:
        return Err(ManifestError(path=path, message=f"cannot read manifest: {e}"))

    try:
        data: object = yaml.safe_load(content)
    except yaml.YAMLError as e:
        return Err(ManifestError(path=path, message=f"invalid YAML: {e}"))

    # An empty release dumps to "{}"; an empty file loads as None.
    if data is None:
        return Ok({})
    manifest = as_str_map(data)
    if manifest is None:
        return Err(ManifestError(path=path, message="manifest is not a path -> digest mapping"))
    return Ok(manifest)


def load(release_root: Path) -> Manifest | None:
    """Stored manifest, or None when missing or unusable."""
    result = read_manifest(release_root)
    if isinstance(result, Err):
        return None
    return result.value


def diff(old: Manifest, new: Manifest) -> ManifestDiff:
    old_keys = old.keys()
    new_keys = new.keys()
    return ManifestDiff(
        added=tuple(sorted(new_keys - old_keys)),
        removed=tuple(sorted(old_keys - new_keys)),
        changed=tuple(sorted(k for k in old_keys & new_keys if old[k] != new[k])),
    )


def manifests_equal(a: Manifest, b: Manifest) -> bool:
    return diff(a, b).is_empty
