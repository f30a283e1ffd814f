"""Tests for release/decision.py - the deploy decision table."""

from __future__ import annotations

import os
import sys
from pathlib import Path

import pytest

from artdeploy.output.console import MockConsole
from artdeploy.release.decision import Decision, DecisionEngine
from artdeploy.release.manifest import MANIFEST_FILENAME, generate, persist
from artdeploy.release.tracker import VersionTracker

pytestmark = pytest.mark.skipif(sys.platform == "win32", reason="needs POSIX symlinks")


def _install(deploy_to: Path, version: str, *, mtime: float, manifest: bool = True) -> Path:
    release = deploy_to / "releases" / version
    release.mkdir(parents=True)
    (release / "app.txt").write_text(f"app {version}", encoding="utf-8")
    if manifest:
        persist(generate(release), release)
    os.utime(release, (mtime, mtime))
    return release


def _activate(deploy_to: Path, version: str) -> None:
    link = deploy_to / "current"
    if link.is_symlink():
        link.unlink()
    link.symlink_to(Path("releases") / version, target_is_directory=True)


def _engine(deploy_to: Path) -> tuple[DecisionEngine, MockConsole]:
    console = MockConsole()
    return DecisionEngine(VersionTracker(deploy_to), console), console


class TestDecisionTable:
    def test_force_always_deploys(self, tmp_path: Path) -> None:
        _install(tmp_path, "1.0.0", mtime=1000)
        _activate(tmp_path, "1.0.0")
        engine, _ = _engine(tmp_path)

        decision = engine.decide("1.0.0", force=True)

        assert decision == Decision(deploy=True, reason="force is set")

    def test_first_deploy(self, tmp_path: Path) -> None:
        engine, console = _engine(tmp_path)

        decision = engine.decide("1.0.0")

        assert decision.deploy
        assert "no version is currently active" in decision.reason
        assert console.find("deploying version 1.0.0")

    def test_new_version(self, tmp_path: Path) -> None:
        _install(tmp_path, "1.0.0", mtime=1000)
        _activate(tmp_path, "1.0.0")
        engine, _ = _engine(tmp_path)

        decision = engine.decide("1.1.0")

        assert decision.deploy
        assert "has not been installed before" in decision.reason

    def test_same_version_unchanged(self, tmp_path: Path) -> None:
        _install(tmp_path, "1.0.0", mtime=1000)
        _activate(tmp_path, "1.0.0")
        engine, console = _engine(tmp_path)

        assert engine.should_deploy("1.0.0") is False
        assert console.find("unchanged; not deploying")

    def test_same_version_modified(self, tmp_path: Path) -> None:
        release = _install(tmp_path, "1.0.0", mtime=1000)
        _activate(tmp_path, "1.0.0")
        (release / "app.txt").write_text("tampered", encoding="utf-8")
        engine, _ = _engine(tmp_path)

        decision = engine.decide("1.0.0")

        assert decision.deploy
        assert "differ" in decision.reason

    def test_rollback_to_intact_previous_version(self, tmp_path: Path) -> None:
        _install(tmp_path, "0.9.0", mtime=1000)
        _install(tmp_path, "1.0.0", mtime=2000)
        _activate(tmp_path, "1.0.0")
        engine, _ = _engine(tmp_path)

        assert engine.should_deploy("0.9.0") is False

    def test_rollback_to_damaged_previous_version(self, tmp_path: Path) -> None:
        old = _install(tmp_path, "0.9.0", mtime=1000)
        _install(tmp_path, "1.0.0", mtime=2000)
        _activate(tmp_path, "1.0.0")
        (old / "app.txt").unlink()
        engine, _ = _engine(tmp_path)

        assert engine.should_deploy("0.9.0") is True

    def test_previous_version_without_manifest(self, tmp_path: Path) -> None:
        _install(tmp_path, "0.9.0", mtime=1000, manifest=False)
        _install(tmp_path, "1.0.0", mtime=2000)
        _activate(tmp_path, "1.0.0")
        engine, _ = _engine(tmp_path)

        assert engine.should_deploy("0.9.0") is True


class TestHasManifestChanged:
    def test_missing_manifest(self, tmp_path: Path) -> None:
        release = _install(tmp_path, "1.0.0", mtime=1000, manifest=False)
        engine, _ = _engine(tmp_path)

        assert engine.has_manifest_changed(release) is True

    def test_corrupt_manifest_warns(self, tmp_path: Path) -> None:
        release = _install(tmp_path, "1.0.0", mtime=1000)
        (release / MANIFEST_FILENAME).write_text("app.txt: [unclosed", encoding="utf-8")
        engine, console = _engine(tmp_path)

        assert engine.has_manifest_changed(release) is True
        assert console.has_warning()

    def test_unchanged(self, tmp_path: Path) -> None:
        release = _install(tmp_path, "1.0.0", mtime=1000)
        engine, _ = _engine(tmp_path)

        assert engine.has_manifest_changed(release) is False

    def test_added_file(self, tmp_path: Path) -> None:
        release = _install(tmp_path, "1.0.0", mtime=1000)
        (release / "new.txt").write_text("x", encoding="utf-8")
        engine, _ = _engine(tmp_path)

        assert engine.has_manifest_changed(release) is True


class TestDecision:
    def test_truthiness(self) -> None:
        assert Decision(deploy=True, reason="x")
        assert not Decision(deploy=False, reason="x")
