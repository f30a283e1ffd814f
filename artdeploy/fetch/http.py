"""HTTP transport used by the artifact fetchers.

HttpClient is the seam: RealHttpClient talks to the network through urllib,
MockHttpClient serves canned bodies so fetch logic is testable offline.
Neither raises for transport problems; both return Result[..., HttpError].
"""

from __future__ import annotations

import os
import ssl
import urllib.error
import urllib.request
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, BinaryIO, Protocol, runtime_checkable

from artdeploy import __version__
from artdeploy.core.result import Err, Ok, Result

if TYPE_CHECKING:
    from collections.abc import Callable

__all__ = [
    "HttpClient",
    "RealHttpClient",
    "MockHttpClient",
    "HttpError",
]

type Progress = Callable[[int, int], None]

_CHUNK_SIZE = 64 * 1024


@dataclass(frozen=True, slots=True)
class HttpError:
    """Why a request failed.

    Attributes:
        status: Response status, 0 when no response arrived (DNS, TLS, timeout)
    """

    url: str
    status: int
    message: str

    def __str__(self) -> str:
        if self.status:
            return f"HTTP {self.status}: {self.message} ({self.url})"
        return f"{self.message} ({self.url})"


@runtime_checkable
class HttpClient(Protocol):
    def get_text(self, url: str) -> Result[str, HttpError]:
        """GET url and decode the body as UTF-8."""
        ...

    def download(
        self,
        url: str,
        dest: Path,
        progress: Progress | None = None,
    ) -> Result[Path, HttpError]:
        """Stream url into dest; progress receives (bytes_so_far, content_length)."""
        ...


def _as_http_error(url: str, exc: Exception) -> HttpError:
    match exc:
        case urllib.error.HTTPError(code=code, reason=reason):
            return HttpError(url=url, status=code, message=str(reason))
        case urllib.error.URLError(reason=reason):
            return HttpError(url=url, status=0, message=str(reason))
        case TimeoutError():
            return HttpError(url=url, status=0, message="timed out")
        case _:
            return HttpError(url=url, status=0, message=str(exc))


class RealHttpClient:
    """urllib-backed client.

    Args:
        timeout: Per-request socket timeout, in seconds.
        ssl_verify: Set to False only for internal repositories serving
            self-signed certificates.
    """

    def __init__(
        self,
        timeout: float = 30.0,
        *,
        ssl_verify: bool = True,
        user_agent: str = f"artdeploy/{__version__}",
    ) -> None:
        self.timeout = timeout
        self.user_agent = user_agent
        self._ssl_context = (
            ssl.create_default_context()
            if ssl_verify
            else ssl._create_unverified_context()  # noqa: S323
        )

    def _open(self, url: str):  # noqa: ANN202
        request = urllib.request.Request(url, headers={"User-Agent": self.user_agent})
        return urllib.request.urlopen(request, timeout=self.timeout, context=self._ssl_context)

    def get_text(self, url: str) -> Result[str, HttpError]:
        try:
            with self._open(url) as response:
                body: bytes = response.read()
            return Ok(body.decode("utf-8"))
        except UnicodeDecodeError as e:
            return Err(HttpError(url=url, status=0, message=f"body is not UTF-8: {e}"))
        except (urllib.error.URLError, TimeoutError, ValueError, OSError) as e:
            return Err(_as_http_error(url, e))

    def download(
        self,
        url: str,
        dest: Path,
        progress: Progress | None = None,
    ) -> Result[Path, HttpError]:
        # Bytes land in a sibling .part file; dest only appears once complete.
        partial = dest.with_name(dest.name + ".part")
        try:
            dest.parent.mkdir(parents=True, exist_ok=True)
            with self._open(url) as response, open(partial, "wb") as out:
                total = int(response.headers.get("Content-Length") or 0)
                _copy_stream(response, out, total, progress)
            os.replace(partial, dest)
        except (urllib.error.URLError, TimeoutError, ValueError, OSError) as e:
            partial.unlink(missing_ok=True)
            return Err(_as_http_error(url, e))
        return Ok(dest)


def _copy_stream(
    source: BinaryIO, out: BinaryIO, total: int, progress: Progress | None
) -> None:
    done = 0
    while chunk := source.read(_CHUNK_SIZE):
        out.write(chunk)
        done += len(chunk)
        if progress:
            progress(done, total)


class MockHttpClient:
    """Offline HttpClient; unknown URLs answer 404.

    Usage:
        http = MockHttpClient()
        http.set_download("https://example.com/dl/app-1.0.0.tgz", tarball_bytes)
        http.set_text("https://repo/com/example/app/maven-metadata.xml", "<metadata/>")

    Every request is appended to `calls` as (method, url).
    """

    def __init__(self) -> None:
        self._texts: dict[str, str | HttpError] = {}
        self._downloads: dict[str, bytes | HttpError] = {}
        self.calls: list[tuple[str, str]] = []

    def set_text(self, url: str, response: str | HttpError) -> None:
        self._texts[url] = response

    def set_download(self, url: str, response: bytes | HttpError) -> None:
        self._downloads[url] = response

    def _lookup[T](self, table: dict[str, T | HttpError], url: str) -> Result[T, HttpError]:
        if url not in table:
            return Err(HttpError(url=url, status=404, message="Not found (mock)"))
        response = table[url]
        if isinstance(response, HttpError):
            return Err(response)
        return Ok(response)

    def get_text(self, url: str) -> Result[str, HttpError]:
        self.calls.append(("get_text", url))
        return self._lookup(self._texts, url)

    def download(
        self,
        url: str,
        dest: Path,
        progress: Progress | None = None,
    ) -> Result[Path, HttpError]:
        self.calls.append(("download", url))
        found = self._lookup(self._downloads, url)
        if isinstance(found, Err):
            return found

        dest.parent.mkdir(parents=True, exist_ok=True)
        dest.write_bytes(found.value)
        if progress:
            progress(len(found.value), len(found.value))
        return Ok(dest)
