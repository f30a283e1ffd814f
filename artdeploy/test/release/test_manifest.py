"""Tests for release/manifest.py - manifest generation and comparison."""

from __future__ import annotations

import hashlib
import sys
from pathlib import Path

import pytest
import yaml

from artdeploy.core.result import Err, Ok
from artdeploy.release.manifest import (
    MANIFEST_FILENAME,
    ManifestDiff,
    diff,
    generate,
    load,
    manifests_equal,
    persist,
    read_manifest,
    sha1_file,
)

posix_only = pytest.mark.skipif(sys.platform == "win32", reason="needs POSIX symlinks")


def _sha1(data: bytes) -> str:
    return hashlib.sha1(data).hexdigest()


def _release(tmp_path: Path) -> Path:
    root = tmp_path / "releases" / "1.0.0"
    (root / "bin").mkdir(parents=True)
    (root / "app.txt").write_bytes(b"hello")
    (root / "bin" / "run").write_bytes(b"#!/bin/sh\n")
    return root


class TestGenerate:
    def test_hashes_every_file(self, tmp_path: Path) -> None:
        root = _release(tmp_path)

        manifest = generate(root)

        assert manifest == {
            "app.txt": _sha1(b"hello"),
            "bin/run": _sha1(b"#!/bin/sh\n"),
        }

    def test_sha1_file(self, tmp_path: Path) -> None:
        path = tmp_path / "f"
        path.write_bytes(b"x" * 200_000)
        assert sha1_file(path) == _sha1(b"x" * 200_000)
        assert len(sha1_file(path)) == 40

    def test_excludes_manifest_file(self, tmp_path: Path) -> None:
        root = _release(tmp_path)
        (root / MANIFEST_FILENAME).write_text("{}", encoding="utf-8")

        assert MANIFEST_FILENAME not in generate(root)

    def test_nested_manifest_named_file_is_included(self, tmp_path: Path) -> None:
        root = _release(tmp_path)
        (root / "bin" / MANIFEST_FILENAME).write_text("x", encoding="utf-8")

        assert "bin/manifest.yaml" in generate(root)

    def test_empty_directories_do_not_appear(self, tmp_path: Path) -> None:
        root = _release(tmp_path)
        (root / "empty").mkdir()

        assert set(generate(root)) == {"app.txt", "bin/run"}

    @posix_only
    def test_excludes_symlinks(self, tmp_path: Path) -> None:
        root = _release(tmp_path)
        shared = tmp_path / "shared" / "log"
        shared.mkdir(parents=True)
        (shared / "app.log").write_text("log", encoding="utf-8")
        (root / "log").symlink_to(shared, target_is_directory=True)
        (root / "app-link.txt").symlink_to(root / "app.txt")

        assert set(generate(root)) == {"app.txt", "bin/run"}

    def test_deterministic(self, tmp_path: Path) -> None:
        root = _release(tmp_path)
        assert list(generate(root)) == list(generate(root)) == sorted(generate(root))

    def test_empty_release(self, tmp_path: Path) -> None:
        assert generate(tmp_path) == {}


class TestPersistAndLoad:
    def test_round_trip(self, tmp_path: Path) -> None:
        root = _release(tmp_path)
        manifest = generate(root)

        path = persist(manifest, root)

        assert path == root / MANIFEST_FILENAME
        assert load(root) == manifest
        assert manifests_equal(load(root) or {}, generate(root))

    def test_written_as_yaml_mapping(self, tmp_path: Path) -> None:
        root = _release(tmp_path)
        persist(generate(root), root)

        data = yaml.safe_load((root / MANIFEST_FILENAME).read_text(encoding="utf-8"))
        assert data["app.txt"] == _sha1(b"hello")

    def test_overwrites(self, tmp_path: Path) -> None:
        root = _release(tmp_path)
        persist({"old": "0" * 40}, root)
        persist(generate(root), root)

        assert "old" not in (load(root) or {})

    def test_missing_is_none(self, tmp_path: Path) -> None:
        assert read_manifest(tmp_path) == Ok(None)
        assert load(tmp_path) is None

    def test_empty_manifest(self, tmp_path: Path) -> None:
        persist({}, tmp_path)
        assert load(tmp_path) == {}

    def test_corrupt_yaml_is_error(self, tmp_path: Path) -> None:
        (tmp_path / MANIFEST_FILENAME).write_text("app.txt: [unclosed", encoding="utf-8")

        result = read_manifest(tmp_path)

        assert isinstance(result, Err)
        assert "invalid YAML" in result.error.message
        assert load(tmp_path) is None

    def test_wrong_shape_is_error(self, tmp_path: Path) -> None:
        (tmp_path / MANIFEST_FILENAME).write_text("- a\n- b\n", encoding="utf-8")

        result = read_manifest(tmp_path)

        assert isinstance(result, Err)
        assert "mapping" in result.error.message


class TestDiff:
    def test_identical(self) -> None:
        a = {"app.txt": "1"}
        assert diff(a, dict(a)) == ManifestDiff()
        assert not diff(a, dict(a))
        assert manifests_equal(a, dict(a))

    def test_modified(self) -> None:
        changes = diff({"app.txt": "1"}, {"app.txt": "2"})
        assert changes.changed == ("app.txt",)
        assert changes

    def test_added(self) -> None:
        changes = diff({"app.txt": "1"}, {"app.txt": "1", "new.txt": "3"})
        assert changes.added == ("new.txt",)
        assert not manifests_equal({"app.txt": "1"}, {"app.txt": "1", "new.txt": "3"})

    def test_removed(self) -> None:
        changes = diff({"app.txt": "1", "gone.txt": "2"}, {"app.txt": "1"})
        assert changes.removed == ("gone.txt",)
        assert not changes.is_empty


class TestSensitivity:
    """Regenerated manifests notice every kind of on-disk change."""

    def test_modify(self, tmp_path: Path) -> None:
        root = _release(tmp_path)
        persist(generate(root), root)
        (root / "app.txt").write_bytes(b"changed")

        assert not manifests_equal(load(root) or {}, generate(root))

    def test_add(self, tmp_path: Path) -> None:
        root = _release(tmp_path)
        persist(generate(root), root)
        (root / "extra.txt").write_bytes(b"new")

        assert diff(load(root) or {}, generate(root)).added == ("extra.txt",)

    def test_remove(self, tmp_path: Path) -> None:
        root = _release(tmp_path)
        persist(generate(root), root)
        (root / "bin" / "run").unlink()

        assert diff(load(root) or {}, generate(root)).removed == ("bin/run",)
