"""Typed deploy configuration.

A deploy is described by a TOML file:

    [artifact]     name, location, version, checksum, is_archive
    [deploy]       deploy_to, cache_path, owner, group, keep, force,
                   should_migrate, shared_directories, [deploy.symlinks]
    [repository]   url, ssl_verify, timeout
    [hooks]        <hook name> = "command" | ["argv", ...]

Relative paths are resolved against the directory containing the file.
"""

from __future__ import annotations

import shlex
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from pathlib import Path, PurePath

from .result import Err, Ok, Result
from .structured import (
    StrDict,
    as_str_dict,
    as_str_map,
    get_bool,
    get_float,
    get_int,
    get_str,
    get_str_list,
    get_table,
)

__all__ = [
    "ArtifactConfig",
    "ConfigError",
    "DeployConfig",
    "RepositoryConfig",
    "TargetConfig",
    "DEFAULT_KEEP",
    "DEFAULT_TIMEOUT",
    "load_config",
    "nested_path_problem",
]

DEFAULT_KEEP = 2
DEFAULT_TIMEOUT = 30.0


@dataclass(frozen=True, slots=True)
class ConfigError:
    """Error when config cannot be loaded or parsed."""

    message: str
    path: Path | None = None


@dataclass(frozen=True, slots=True)
class ArtifactConfig:
    """What to deploy.

    Attributes:
        name: Artifact name; names the cache directory. No whitespace.
        location: URL, repository coordinate, or local path.
        version: Version to deploy, or "latest" (non-HTTP only).
        checksum: Expected SHA-256 of the artifact file.
        is_archive: Extract the artifact (True) or copy it as a single file.
    """

    name: str
    location: str
    version: str
    checksum: str | None = None
    is_archive: bool = True


def nested_path_problem(value: str) -> str | None:
    """Why value cannot name an entry strictly below a directory, or None."""
    path = PurePath(value)
    if not value:
        return "is empty"
    if not path.parts:
        return "names the directory itself"
    if path.is_absolute() or path.anchor:
        return "is absolute"
    if ".." in path.parts:
        return "contains .."
    return None


def _empty_symlinks() -> dict[str, str]:
    return {}


@dataclass(frozen=True, slots=True)
class TargetConfig:
    """Where and how to deploy.

    Attributes:
        deploy_to: Root holding releases/, shared/ and the current link.
        cache_path: Artifact cache root; platform default when None.
        keep: Number of previous releases to retain.
        symlinks: shared/<key> is linked from releases/<version>/<value>.
    """

    deploy_to: Path
    cache_path: Path | None = None
    owner: str | None = None
    group: str | None = None
    keep: int = DEFAULT_KEEP
    force: bool = False
    should_migrate: bool = False
    shared_directories: tuple[str, ...] = ()
    symlinks: dict[str, str] = field(default_factory=_empty_symlinks)

    def path_problems(self) -> list[str]:
        """Shared directory and symlink entries that do not name a path below their root."""
        problems: list[str] = []
        for entry in self.shared_directories:
            if problem := nested_path_problem(entry):
                problems.append(f"[deploy].shared_directories entry {entry!r} {problem}")
        for key, value in self.symlinks.items():
            if problem := nested_path_problem(key):
                problems.append(f"[deploy.symlinks] key {key!r} {problem}")
            if problem := nested_path_problem(value):
                problems.append(f"[deploy.symlinks].{key} value {value!r} {problem}")
        return problems


@dataclass(frozen=True, slots=True)
class RepositoryConfig:
    """Binary repository and transport settings."""

    url: str | None = None
    ssl_verify: bool = True
    timeout: float = DEFAULT_TIMEOUT


def _empty_hooks() -> dict[str, tuple[str, ...]]:
    return {}


@dataclass(frozen=True, slots=True)
class DeployConfig:
    """Main configuration container."""

    artifact: ArtifactConfig
    target: TargetConfig
    repository: RepositoryConfig = field(default_factory=RepositoryConfig)
    hooks: dict[str, tuple[str, ...]] = field(default_factory=_empty_hooks)

    def with_overrides(
        self,
        *,
        version: str | None = None,
        force: bool | None = None,
        should_migrate: bool | None = None,
    ) -> DeployConfig:
        """Return a copy with command-line overrides applied."""
        artifact = self.artifact
        target = self.target
        if version is not None:
            artifact = replace(artifact, version=version)
        if force is not None:
            target = replace(target, force=force)
        if should_migrate is not None:
            target = replace(target, should_migrate=should_migrate)
        return replace(self, artifact=artifact, target=target)

    @classmethod
    def from_dict(cls, data: Mapping[str, object], base_dir: Path) -> DeployConfig:
        """Create DeployConfig from a parsed TOML mapping.

        Raises:
            ValueError: A required key is missing or a value has the wrong type.
        """
        artifact: StrDict = get_table(data, "artifact") or {}
        deploy: StrDict = get_table(data, "deploy") or {}
        repository: StrDict = get_table(data, "repository") or {}
        hooks: StrDict = get_table(data, "hooks") or {}

        name = _required_str(artifact, "artifact", "name")
        location = _required_str(artifact, "artifact", "location")
        version = _required_str(artifact, "artifact", "version")
        deploy_to = _required_str(deploy, "deploy", "deploy_to")

        keep = get_int(deploy, "keep")
        if keep is None:
            if "keep" in deploy:
                raise ValueError("[deploy].keep must be an integer")
            keep = DEFAULT_KEEP
        if keep < 0:
            raise ValueError("[deploy].keep must be >= 0")

        shared_directories = get_str_list(deploy, "shared_directories")
        if shared_directories is None and "shared_directories" in deploy:
            raise ValueError("[deploy].shared_directories must be a list of strings")

        symlinks = as_str_map(deploy.get("symlinks", {}))
        if symlinks is None:
            raise ValueError("[deploy.symlinks] values must be strings")

        cache_path = get_str(deploy, "cache_path")

        timeout = get_float(repository, "timeout")
        if timeout is None:
            if "timeout" in repository:
                raise ValueError("[repository].timeout must be a number")
            timeout = DEFAULT_TIMEOUT
        if timeout <= 0:
            raise ValueError("[repository].timeout must be > 0")

        config = cls(
            artifact=ArtifactConfig(
                name=name,
                location=_resolve_location(location, base_dir),
                version=version,
                checksum=get_str(artifact, "checksum"),
                is_archive=get_bool(artifact, "is_archive", default=True),
            ),
            target=TargetConfig(
                deploy_to=_resolve_path(deploy_to, base_dir),
                cache_path=_resolve_path(cache_path, base_dir) if cache_path else None,
                owner=get_str(deploy, "owner"),
                group=get_str(deploy, "group"),
                keep=keep,
                force=get_bool(deploy, "force"),
                should_migrate=get_bool(deploy, "should_migrate"),
                shared_directories=tuple(shared_directories or ()),
                symlinks=symlinks,
            ),
            repository=RepositoryConfig(
                url=get_str(repository, "url"),
                ssl_verify=get_bool(repository, "ssl_verify", default=True),
                timeout=timeout,
            ),
            hooks=_parse_hooks(hooks),
        )
        if problems := config.target.path_problems():
            raise ValueError(problems[0])
        return config


def _required_str(table: StrDict, section: str, key: str) -> str:
    value = get_str(table, key)
    if value is None:
        raise ValueError(f"Missing [{section}].{key}")
    return value


def _resolve_path(value: str, base_dir: Path) -> Path:
    path = Path(value).expanduser()
    if not path.is_absolute():
        path = base_dir / path
    return path


def _resolve_location(location: str, base_dir: Path) -> str:
    """Anchor relative local paths to the config directory.

    URLs and repository coordinates are returned unchanged.
    """
    if "://" in location or location.count(":") >= 2:
        return location
    return str(_resolve_path(location, base_dir))


def _parse_hooks(table: StrDict) -> dict[str, tuple[str, ...]]:
    out: dict[str, tuple[str, ...]] = {}
    for name, value in table.items():
        if isinstance(value, str):
            argv = shlex.split(value)
        else:
            items = get_str_list(table, name)
            if items is None:
                raise ValueError(f"[hooks].{name} must be a string or a list of strings")
            argv = items
        if not argv:
            raise ValueError(f"[hooks].{name} is empty")
        out[name] = tuple(argv)
    return out


def _parse_toml(path: Path) -> Result[StrDict, ConfigError]:
    """Parse a TOML file, handling read and parse errors."""
    import tomllib

    try:
        content = path.read_bytes()
        data_obj: object = tomllib.loads(content.decode("utf-8"))
        data = as_str_dict(data_obj)
        if data is None:
            return Err(ConfigError("Config root must be a TOML table", path=path))
        return Ok(data)
    except FileNotFoundError:
        return Err(ConfigError(f"Config file not found: {path}", path=path))
    except PermissionError:
        return Err(ConfigError(f"Permission denied reading: {path}", path=path))
    except tomllib.TOMLDecodeError as e:
        return Err(ConfigError(f"Invalid TOML syntax: {e}", path=path))
    except UnicodeDecodeError as e:
        return Err(ConfigError(f"Error reading config: {e}", path=path))


def load_config(path: Path) -> Result[DeployConfig, ConfigError]:
    """Load and parse a deploy configuration file.

    Args:
        path: Path to the TOML file

    Returns:
        Ok(DeployConfig) on success, Err(ConfigError) on failure
    """
    result = _parse_toml(path)
    if isinstance(result, Err):
        return result

    try:
        config = DeployConfig.from_dict(result.value, base_dir=path.parent.resolve())
        return Ok(config)
    except (KeyError, TypeError, ValueError) as e:
        return Err(ConfigError(f"Invalid config: {e}", path=path))
