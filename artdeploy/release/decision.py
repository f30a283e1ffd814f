"""Whether a run should (re)stage a release.

Rules, first match wins:

1. force                                     -> deploy
2. nothing active                            -> deploy
3. desired != active, never installed        -> deploy
4. desired != active, installed before       -> compare manifests
5. desired == active                         -> compare manifests

Manifest comparison regenerates the manifest of releases/<desired> and
compares it with the stored one; a missing or unreadable stored manifest
counts as a difference.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from artdeploy.core.result import Err
from artdeploy.output.console import ConsoleProtocol, Style
from artdeploy.release.manifest import diff, generate, read_manifest
from artdeploy.release.tracker import VersionTracker

__all__ = ["Decision", "DecisionEngine"]


@dataclass(frozen=True, slots=True)
class Decision:
    deploy: bool
    reason: str

    def __bool__(self) -> bool:
        return self.deploy


class DecisionEngine:
    def __init__(self, tracker: VersionTracker, console: ConsoleProtocol) -> None:
        self._tracker = tracker
        self._console = console

    def decide(self, desired_version: str, *, force: bool = False) -> Decision:
        if force:
            return self._deploying(desired_version, "force is set")

        current = self._tracker.current_version()
        if current is None:
            return self._deploying(desired_version, "no version is currently active")

        self._console.print(f"active version: {current}", Style.DIM)
        release_path = self._tracker.release_path(desired_version)

        if desired_version != current:
            if desired_version not in self._tracker.previous_version_numbers():
                return self._deploying(
                    desired_version, f"version {desired_version} has not been installed before"
                )
            self._console.print(
                f"version {desired_version} was installed before; checking its manifest",
                Style.DIM,
            )
        else:
            self._console.print(
                f"version {desired_version} is already active; checking its manifest",
                Style.DIM,
            )

        if self.has_manifest_changed(release_path):
            return self._deploying(desired_version, "release contents differ from manifest")

        self._console.info(f"version {desired_version} is unchanged; not deploying")
        return Decision(deploy=False, reason="release contents match manifest")

    def should_deploy(self, desired_version: str, *, force: bool = False) -> bool:
        return self.decide(desired_version, force=force).deploy

    def has_manifest_changed(self, release_path: Path) -> bool:
        """Compare release_path on disk against its stored manifest."""
        stored = read_manifest(release_path)
        if isinstance(stored, Err):
            self._console.warning(
                f"cannot load manifest for {release_path}: {stored.error.message}; redeploying"
            )
            return True
        if stored.value is None:
            self._console.print(f"no manifest in {release_path}", Style.DIM)
            return True

        changes = diff(stored.value, generate(release_path))
        if changes:
            self._console.print(
                f"manifest drift in {release_path}: "
                f"{len(changes.added)} added, {len(changes.removed)} removed, "
                f"{len(changes.changed)} changed",
                Style.DIM,
            )
            return True
        return False

    def _deploying(self, version: str, reason: str) -> Decision:
        self._console.info(f"deploying version {version}: {reason}")
        return Decision(deploy=True, reason=reason)
