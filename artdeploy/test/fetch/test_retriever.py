"""Tests for fetch/retriever.py - cache-aware artifact fetching."""

from __future__ import annotations

import hashlib
from pathlib import Path

import pytest

from artdeploy.core.result import Err, Ok
from artdeploy.fetch.http import HttpError, MockHttpClient
from artdeploy.fetch.location import HttpLocation, LocalLocation, RepositoryLocation
from artdeploy.fetch.repository import MavenRepository
from artdeploy.fetch.retriever import ArtifactFetcher, checksum_matches, sha256_file

URL = "https://example.com/dl/my-app.tgz"
BASE = "https://repo.example.com/maven2"


def _sha256(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


class TestChecksum:
    def test_sha256_file(self, tmp_path: Path) -> None:
        path = tmp_path / "a"
        path.write_bytes(b"abc")
        assert sha256_file(path) == _sha256(b"abc")

    def test_none_always_matches(self, tmp_path: Path) -> None:
        path = tmp_path / "a"
        path.write_bytes(b"abc")
        assert checksum_matches(path, None)

    @pytest.mark.parametrize("prefix", ["", "sha256:", "SHA256:"])
    def test_prefix_and_case(self, tmp_path: Path, prefix: str) -> None:
        path = tmp_path / "a"
        path.write_bytes(b"abc")
        assert checksum_matches(path, prefix + _sha256(b"abc").upper())

    def test_mismatch(self, tmp_path: Path) -> None:
        path = tmp_path / "a"
        path.write_bytes(b"abc")
        assert not checksum_matches(path, _sha256(b"other"))


class TestFetchHttp:
    def test_downloads(self, tmp_path: Path) -> None:
        http = MockHttpClient()
        http.set_download(URL, b"payload")
        dest = tmp_path / "cache" / "my-app.tgz"

        result = ArtifactFetcher(http).fetch(HttpLocation(URL), dest, _sha256(b"payload"))

        assert isinstance(result, Ok)
        assert result.value.from_cache is False
        assert result.value.size == len(b"payload")
        assert dest.read_bytes() == b"payload"

    def test_cached_matching_file_is_reused(self, tmp_path: Path) -> None:
        http = MockHttpClient()
        dest = tmp_path / "my-app.tgz"
        dest.write_bytes(b"payload")

        result = ArtifactFetcher(http).fetch(HttpLocation(URL), dest, _sha256(b"payload"))

        assert isinstance(result, Ok)
        assert result.value.from_cache is True
        assert http.calls == []

    def test_cached_mismatching_file_is_refetched(self, tmp_path: Path) -> None:
        http = MockHttpClient()
        http.set_download(URL, b"fresh")
        dest = tmp_path / "my-app.tgz"
        dest.write_bytes(b"stale")

        result = ArtifactFetcher(http).fetch(HttpLocation(URL), dest, _sha256(b"fresh"))

        assert isinstance(result, Ok)
        assert dest.read_bytes() == b"fresh"

    def test_checksum_mismatch_removes_file(self, tmp_path: Path) -> None:
        http = MockHttpClient()
        http.set_download(URL, b"tampered")
        dest = tmp_path / "my-app.tgz"

        result = ArtifactFetcher(http).fetch(HttpLocation(URL), dest, _sha256(b"payload"))

        assert isinstance(result, Err)
        assert result.error.checksum_mismatch is True
        assert not dest.exists()

    def test_transport_error(self, tmp_path: Path) -> None:
        http = MockHttpClient()
        http.set_download(URL, HttpError(url=URL, status=500, message="boom"))

        result = ArtifactFetcher(http).fetch(HttpLocation(URL), tmp_path / "a.tgz", None)

        assert isinstance(result, Err)
        assert result.error.checksum_mismatch is False
        assert result.error.location == URL


class TestFetchRepository:
    def test_downloads_from_repository(self, tmp_path: Path) -> None:
        http = MockHttpClient()
        http.set_download(f"{BASE}/com/example/my-app/1.0.0/my-app-1.0.0.tgz", b"tgz")
        fetcher = ArtifactFetcher(http, repository=MavenRepository(http, BASE))
        dest = tmp_path / "my-app-1.0.0.tgz"

        location = RepositoryLocation("com.example", "my-app", "1.0.0", "tgz")
        result = fetcher.fetch(location, dest, None)

        assert isinstance(result, Ok)
        assert dest.read_bytes() == b"tgz"

    def test_requires_repository(self, tmp_path: Path) -> None:
        location = RepositoryLocation("com.example", "my-app", "1.0.0", "tgz")
        result = ArtifactFetcher(MockHttpClient()).fetch(location, tmp_path / "x", None)

        assert isinstance(result, Err)
        assert "No repository url" in result.error.message


class TestFetchLocal:
    def test_copies_local_file(self, tmp_path: Path) -> None:
        source = tmp_path / "builds" / "my-app.tgz"
        source.parent.mkdir()
        source.write_bytes(b"local")
        dest = tmp_path / "cache" / "my-app.tgz"

        result = ArtifactFetcher(MockHttpClient()).fetch(LocalLocation(source), dest, None)

        assert isinstance(result, Ok)
        assert dest.read_bytes() == b"local"

    def test_missing_local_file(self, tmp_path: Path) -> None:
        location = LocalLocation(tmp_path / "nope.tgz")
        result = ArtifactFetcher(MockHttpClient()).fetch(location, tmp_path / "c" / "x", None)

        assert isinstance(result, Err)
        assert "not found" in result.error.message


class TestResolveVersion:
    def test_concrete_version_passes_through(self) -> None:
        fetcher = ArtifactFetcher(MockHttpClient())
        assert fetcher.resolve_version(HttpLocation(URL), "1.0.0") == Ok("1.0.0")

    def test_latest_from_repository(self) -> None:
        http = MockHttpClient()
        http.set_text(
            f"{BASE}/com/example/my-app/maven-metadata.xml",
            "<metadata><versioning><release>2.0.0</release></versioning></metadata>",
        )
        fetcher = ArtifactFetcher(http, repository=MavenRepository(http, BASE))
        location = RepositoryLocation("com.example", "my-app", "latest", "tgz")

        assert fetcher.resolve_version(location, "latest") == Ok("2.0.0")

    def test_latest_over_http(self) -> None:
        result = ArtifactFetcher(MockHttpClient()).resolve_version(HttpLocation(URL), "latest")
        assert isinstance(result, Err)

    def test_latest_without_repository(self) -> None:
        location = RepositoryLocation("com.example", "my-app", "latest", "tgz")
        result = ArtifactFetcher(MockHttpClient()).resolve_version(location, "LATEST")
        assert isinstance(result, Err)

    def test_local_keeps_literal(self, tmp_path: Path) -> None:
        location = LocalLocation(tmp_path / "a.tgz")
        result = ArtifactFetcher(MockHttpClient()).resolve_version(location, "latest")
        assert result == Ok("latest")
