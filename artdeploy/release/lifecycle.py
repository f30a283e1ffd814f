"""Release lifecycle.

One deploy run is a single, strictly sequential pass:

    Init -> DirectoriesReady -> Fetched -> Staged | SkippedStaging
         -> Configured -> Migrated | SkippedMigrate
         -> Symlinked | SkippedSymlink -> Pruned -> Done

Whether to stage is decided once, before any directory is created. The
configure hook and pruning run on every pass, even when nothing changed.
A fatal step raises DeployAborted; a hook that raises propagates unchanged.
Either way, filesystem changes made before the failure stay in place.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from pathlib import Path

from artdeploy.core.config import DeployConfig
from artdeploy.core.result import Err
from artdeploy.fetch.location import (
    ArtifactReference,
    LatestOverHttp as LocationLatestOverHttp,
    LocalSourceMissing as LocationSourceMissing,
    Location,
    RepositoryLocation,
    derive_cache_filename,
    validate_reference,
)
from artdeploy.fetch.retriever import Fetcher
from artdeploy.output.console import ConsoleProtocol, Style
from artdeploy.platform.detection import Platform
from artdeploy.platform.files import (
    apply_ownership,
    ensure_directory,
    remove_tree,
    switch_symlink,
)
from artdeploy.platform.paths import user_cache_dir
from artdeploy.release.decision import Decision, DecisionEngine
from artdeploy.release.errors import (
    ConfigInvalid,
    DeployAborted,
    DirectorySetupFailed,
    ExtractFailed,
    FetchFailed,
    InvalidName,
    LatestOverHttp,
    LocalSourceMissing,
    SymlinkFailed,
    UnsupportedArchive,
)
from artdeploy.release.extract import ArchiveExtractor, Extractor
from artdeploy.release.hooks import CommandHook, Hook, Hooks, parse_hook
from artdeploy.release.manifest import generate, persist
from artdeploy.release.tracker import RELEASES_DIR, Release, VersionTracker

__all__ = [
    "DeployReport",
    "LifecycleState",
    "PreSeedReport",
    "PreparedRelease",
    "ReleaseLifecycle",
    "ReleasePaths",
]


class LifecycleState(Enum):
    INIT = auto()
    DIRECTORIES_READY = auto()
    FETCHED = auto()
    STAGED = auto()
    SKIPPED_STAGING = auto()
    CONFIGURED = auto()
    MIGRATED = auto()
    SKIPPED_MIGRATE = auto()
    SYMLINKED = auto()
    SKIPPED_SYMLINK = auto()
    PRUNED = auto()
    DONE = auto()


@dataclass(frozen=True, slots=True)
class ReleasePaths:
    """Every path one run touches.

    Attributes:
        release: <deploy_to>/releases/<version>
        cache_root: <cache_path>/<name>; holds one directory per version
        cached_artifact: <cache_root>/<version>/<artifact file>
    """

    deploy_to: Path
    release: Path
    shared: Path
    current: Path
    cache_root: Path
    cached_artifact: Path

    @property
    def cache_version_dir(self) -> Path:
        return self.cached_artifact.parent


@dataclass(frozen=True, slots=True)
class PreparedRelease:
    """A validated run: concrete version, classified location, paths, hooks."""

    name: str
    version: str
    location: Location
    paths: ReleasePaths
    hooks: Hooks


def _empty_hooks_run() -> list[Hook]:
    return []


def _empty_states() -> list[LifecycleState]:
    return []


def _empty_pruned() -> list[str]:
    return []


def _strictly_inside(path: Path, root: Path) -> bool:
    """True if path sits below root; the last component is not followed."""
    if path.name in {"", ".."}:
        return False
    return root.resolve() in (path.parent.resolve() / path.name).parents


@dataclass(slots=True)
class DeployReport:
    """What a deploy run did."""

    name: str
    version: str
    release_path: Path
    deployed: bool = False
    reason: str = ""
    restarted: bool = False
    migrated: bool = False
    manifest_written: bool = False
    pruned: list[str] = field(default_factory=_empty_pruned)
    hooks_run: list[Hook] = field(default_factory=_empty_hooks_run)
    states: list[LifecycleState] = field(default_factory=_empty_states)


@dataclass(frozen=True, slots=True)
class PreSeedReport:
    name: str
    version: str
    artifact: Path
    fetched: bool


class ReleaseLifecycle:
    """Runs deploys for one configured artifact.

    Usage:
        lifecycle = ReleaseLifecycle(
            config,
            fetcher=ArtifactFetcher(RealHttpClient()),
            platform=detect_platform(),
            console=RichConsole(),
        )
        report = lifecycle.deploy()

    Args:
        hooks: Python callables; they take precedence over command hooks from
            the config for the same hook name.
        extractor: Staging collaborator, ArchiveExtractor when omitted.
    """

    def __init__(
        self,
        config: DeployConfig,
        *,
        fetcher: Fetcher,
        platform: Platform,
        console: ConsoleProtocol,
        hooks: Hooks | None = None,
        extractor: Extractor | None = None,
    ) -> None:
        self._config = config
        self._fetcher = fetcher
        self._platform = platform
        self._console = console
        self._hooks = hooks or Hooks()
        self._extractor = extractor or ArchiveExtractor(platform)
        self._tracker = VersionTracker(config.target.deploy_to)
        self._engine = DecisionEngine(self._tracker, console)

    @property
    def tracker(self) -> VersionTracker:
        return self._tracker

    def prepare(self) -> PreparedRelease:
        """Validate the configured artifact and resolve its version.

        Touches nothing on disk apart from a repository lookup for "latest".

        Raises:
            DeployAborted: Invalid name, location, version, or hook table.
        """
        artifact = self._config.artifact
        if not artifact.name or any(ch.isspace() for ch in artifact.name):
            raise DeployAborted(InvalidName(name=artifact.name))

        reference = ArtifactReference(
            location=artifact.location,
            version=artifact.version,
            checksum=artifact.checksum,
        )
        validated = validate_reference(reference)
        if isinstance(validated, Err):
            match validated.error:
                case LocationLatestOverHttp(location=location):
                    raise DeployAborted(LatestOverHttp(location=location))
                case LocationSourceMissing(path=path):
                    raise DeployAborted(LocalSourceMissing(path=path))
        location = validated.value

        resolved = self._fetcher.resolve_version(location, artifact.version)
        if isinstance(resolved, Err):
            raise DeployAborted(
                FetchFailed(location=resolved.error.location, reason=resolved.error.message)
            )
        version = resolved.value
        if version != artifact.version:
            self._console.info(f"resolved {artifact.version} to {version}")
        if isinstance(location, RepositoryLocation):
            location = location.with_version(version)

        if version in {"", ".", ".."} or "/" in version or "\\" in version:
            raise DeployAborted(
                ConfigInvalid(reason=f"version is not a directory name: {version!r}")
            )

        target = self._config.target
        if problems := target.path_problems():
            raise DeployAborted(ConfigInvalid(reason=problems[0]))
        cache_base = target.cache_path or user_cache_dir(self._platform)
        cache_root = cache_base / artifact.name
        paths = ReleasePaths(
            deploy_to=target.deploy_to,
            release=self._tracker.release_path(version),
            shared=self._tracker.shared_dir,
            current=self._tracker.current_path,
            cache_root=cache_root,
            cached_artifact=cache_root / version / derive_cache_filename(location, version),
        )

        return PreparedRelease(
            name=artifact.name,
            version=version,
            location=location,
            paths=paths,
            hooks=self._command_hooks(artifact.name, version, paths).merged(self._hooks),
        )

    def deploy(self) -> DeployReport:
        """Run the full lifecycle once.

        Raises:
            DeployAborted: A fatal step failed.
            Exception: Whatever a hook raised.
        """
        prepared = self.prepare()
        paths = prepared.paths
        hooks = prepared.hooks
        target = self._config.target
        report = DeployReport(
            name=prepared.name,
            version=prepared.version,
            release_path=paths.release,
            states=[LifecycleState.INIT],
        )
        self._console.header(f"Deploying {prepared.name} {prepared.version}")

        # Pruning and the decision both work from what was installed before this
        # run touched anything; setting up directories creates releases/<version>.
        history = self._tracker.history()
        decision: Decision = self._engine.decide(prepared.version, force=target.force)
        report.deployed = decision.deploy
        report.reason = decision.reason

        def run_hook(hook: Hook) -> None:
            if hooks.run(hook, self._console):
                report.hooks_run.append(hook)

        self._setup_directories(paths, shared_directories=target.shared_directories)
        report.states.append(LifecycleState.DIRECTORIES_READY)

        self._retrieve(prepared)
        report.states.append(LifecycleState.FETCHED)

        run_hook(Hook.BEFORE_DEPLOY)

        if decision.deploy:
            run_hook(Hook.BEFORE_EXTRACT)
            self._stage(paths)
            run_hook(Hook.AFTER_EXTRACT)
            run_hook(Hook.BEFORE_SYMLINK)
            self._link_shared(paths)
            run_hook(Hook.AFTER_SYMLINK)
            report.states.append(LifecycleState.STAGED)
        else:
            report.states.append(LifecycleState.SKIPPED_STAGING)

        run_hook(Hook.CONFIGURE)
        report.states.append(LifecycleState.CONFIGURED)

        if decision.deploy and target.should_migrate:
            run_hook(Hook.BEFORE_MIGRATE)
            run_hook(Hook.MIGRATE)
            run_hook(Hook.AFTER_MIGRATE)
            report.migrated = True
            report.states.append(LifecycleState.MIGRATED)
        else:
            report.states.append(LifecycleState.SKIPPED_MIGRATE)

        if self._needs_switch(decision, prepared):
            self._switch_current(paths, prepared.version)
            report.states.append(LifecycleState.SYMLINKED)
            run_hook(Hook.RESTART)
            report.restarted = True
        else:
            self._console.print("current release unchanged; not restarting", Style.DIM)
            report.states.append(LifecycleState.SKIPPED_SYMLINK)

        run_hook(Hook.AFTER_DEPLOY)

        report.pruned = self._prune(history, paths, keep=target.keep)
        report.states.append(LifecycleState.PRUNED)

        if decision.deploy:
            report.manifest_written = self._write_manifest(paths)
        report.states.append(LifecycleState.DONE)

        if decision.deploy:
            self._console.success(f"{prepared.name} {prepared.version} deployed")
        else:
            self._console.success(f"{prepared.name} {prepared.version} already up to date")
        return report

    def pre_seed(self) -> PreSeedReport:
        """Create directories and fetch the artifact without deploying it."""
        prepared = self.prepare()
        self._console.header(f"Pre-seeding {prepared.name} {prepared.version}")
        self._setup_directories(prepared.paths, shared_directories=())
        fetched = self._retrieve(prepared)
        self._console.success(f"cached {prepared.paths.cached_artifact}")
        return PreSeedReport(
            name=prepared.name,
            version=prepared.version,
            artifact=prepared.paths.cached_artifact,
            fetched=fetched,
        )

    def _command_hooks(self, name: str, version: str, paths: ReleasePaths) -> Hooks:
        env = {
            "ARTDEPLOY_NAME": name,
            "ARTDEPLOY_VERSION": version,
            "ARTDEPLOY_RELEASE_PATH": str(paths.release),
            "ARTDEPLOY_DEPLOY_TO": str(paths.deploy_to),
            "ARTDEPLOY_SHARED_PATH": str(paths.shared),
            "ARTDEPLOY_CURRENT_PATH": str(paths.current),
        }
        hooks = Hooks()
        for hook_name, argv in self._config.hooks.items():
            hook = parse_hook(hook_name)
            if hook is None:
                raise DeployAborted(ConfigInvalid(reason=f"unknown hook: {hook_name}"))
            hooks.register(hook, CommandHook(hook, argv, cwd=paths.release, env=env))
        return hooks

    def _setup_directories(
        self, paths: ReleasePaths, *, shared_directories: tuple[str, ...]
    ) -> None:
        target = self._config.target
        wanted = [paths.cache_version_dir, paths.release, paths.shared]
        wanted.extend(paths.shared / d for d in shared_directories)
        for path in wanted:
            self._console.print(f"creating {path}", Style.DIM)
            try:
                ensure_directory(path, self._platform, owner=target.owner, group=target.group)
            except (OSError, LookupError) as e:
                raise DeployAborted(DirectorySetupFailed(path=path, reason=str(e))) from e

    def _retrieve(self, prepared: PreparedRelease) -> bool:
        """Fetch into the cache unless already there. True if a fetch happened."""
        cached = prepared.paths.cached_artifact
        if cached.exists():
            self._console.print(f"using cached artifact {cached}", Style.DIM)
            return False

        self._console.info(f"retrieving {prepared.location}")
        result = self._fetcher.fetch(prepared.location, cached, self._config.artifact.checksum)
        if isinstance(result, Err):
            raise DeployAborted(
                FetchFailed(
                    location=result.error.location,
                    reason=result.error.message,
                    checksum_mismatch=result.error.checksum_mismatch,
                )
            )
        target = self._config.target
        try:
            apply_ownership(cached, self._platform, owner=target.owner, group=target.group)
        except (OSError, LookupError) as e:
            raise DeployAborted(DirectorySetupFailed(path=cached, reason=str(e))) from e
        return True

    def _stage(self, paths: ReleasePaths) -> None:
        target = self._config.target
        artifact = paths.cached_artifact
        if self._config.artifact.is_archive:
            self._console.info(f"extracting {artifact.name} to {paths.release}")
            result = self._extractor.extract(
                artifact, paths.release, owner=target.owner, group=target.group
            )
        else:
            self._console.info(f"copying {artifact.name} to {paths.release}")
            result = self._extractor.copy(
                artifact, paths.release, owner=target.owner, group=target.group
            )
        if isinstance(result, Err):
            if result.error.unsupported:
                raise DeployAborted(UnsupportedArchive(path=artifact))
            raise DeployAborted(ExtractFailed(archive=artifact, reason=result.error.message))
        self._console.print(f"{result.value.files_count} file(s) staged", Style.DIM)

    def _link_shared(self, paths: ReleasePaths) -> None:
        """Create shared/<key> and link releases/<version>/<value> to it."""
        target = self._config.target
        for key, value in target.symlinks.items():
            shared_target = paths.shared / key
            link = paths.release / value
            self._console.print(f"linking {link} -> {shared_target}", Style.DIM)
            if not _strictly_inside(link, paths.release):
                raise DeployAborted(
                    SymlinkFailed(
                        link=link, target=shared_target, reason="link is not inside the release"
                    )
                )
            try:
                ensure_directory(
                    shared_target, self._platform, owner=target.owner, group=target.group
                )
                link.parent.mkdir(parents=True, exist_ok=True)
                remove_tree(link)
                link.symlink_to(shared_target, target_is_directory=True)
            except (OSError, LookupError) as e:
                raise DeployAborted(
                    SymlinkFailed(link=link, target=shared_target, reason=str(e))
                ) from e

    def _needs_switch(self, decision: Decision, prepared: PreparedRelease) -> bool:
        if decision.deploy:
            return True
        if self._tracker.current_version() != prepared.version:
            self._console.info(f"current will move to {prepared.version}")
            return True
        # A configure hook may have modified the release in place.
        return self._engine.has_manifest_changed(prepared.paths.release)

    def _switch_current(self, paths: ReleasePaths, version: str) -> None:
        relative = Path(RELEASES_DIR) / version
        self._console.info(f"linking {paths.current} -> {relative}")
        try:
            switch_symlink(paths.current, relative, self._platform)
        except OSError as e:
            raise DeployAborted(
                SymlinkFailed(link=paths.current, target=paths.release, reason=str(e))
            ) from e

    def _prune(self, history: list[Release], paths: ReleasePaths, *, keep: int) -> list[str]:
        active = self._tracker.current_version()
        candidates = [r for r in history if r.version != active]
        excess = len(candidates) - keep
        if excess <= 0:
            return []

        self._console.info(
            f"deleting {excess} of {len(candidates)} old versions (keeping: {keep})"
        )
        pruned: list[str] = []
        for release in candidates[:excess]:
            failed = False
            for path in (paths.cache_root / release.version, release.path):
                try:
                    remove_tree(path)
                except OSError as e:
                    failed = True
                    self._console.warning(f"could not delete {path}: {e}")
            if not failed:
                self._console.print(f"{release.version} deleted", Style.DIM)
                pruned.append(release.version)
        return pruned

    def _write_manifest(self, paths: ReleasePaths) -> bool:
        target = self._config.target
        try:
            path = persist(generate(paths.release), paths.release)
            apply_ownership(path, self._platform, owner=target.owner, group=target.group)
        except (OSError, LookupError) as e:
            # A missing manifest only forces a redeploy on the next run.
            self._console.warning(f"could not write manifest in {paths.release}: {e}")
            return False
        self._console.print(f"wrote {path}", Style.DIM)
        return True
