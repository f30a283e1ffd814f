"""Maven-layout binary repository client.

Resolves "latest" through the artifact's maven-metadata.xml and downloads
coordinates laid out as:

    <base>/<group/as/path>/<artifact>/<version>/<artifact>-<version>.<ext>
"""

from __future__ import annotations

import xml.etree.ElementTree as ET
from dataclasses import dataclass
from pathlib import Path

from artdeploy.core.result import Err, Ok, Result
from artdeploy.fetch.http import HttpClient
from artdeploy.fetch.location import RepositoryLocation, is_latest

__all__ = ["MavenRepository", "RepositoryError"]


@dataclass(frozen=True, slots=True)
class RepositoryError:
    coordinate: str
    message: str

    def __str__(self) -> str:
        return f"{self.message} ({self.coordinate})"


class MavenRepository:
    """Read-only view of a Maven-layout repository over HTTP.

    Usage:
        repo = MavenRepository(RealHttpClient(), "https://repo1.maven.org/maven2")
        version = repo.latest_version(location)
    """

    def __init__(self, http: HttpClient, base_url: str) -> None:
        self._http = http
        self._base_url = base_url.rstrip("/")

    @property
    def base_url(self) -> str:
        return self._base_url

    def _artifact_root(self, location: RepositoryLocation) -> str:
        group_path = location.group_id.replace(".", "/")
        return f"{self._base_url}/{group_path}/{location.artifact_id}"

    def metadata_url(self, location: RepositoryLocation) -> str:
        return f"{self._artifact_root(location)}/maven-metadata.xml"

    def artifact_url(self, location: RepositoryLocation) -> str:
        """URL of the artifact file for a coordinate with a concrete version."""
        v = location.version
        filename = f"{location.artifact_id}-{v}.{location.extension}"
        return f"{self._artifact_root(location)}/{v}/{filename}"

    def latest_version(self, location: RepositoryLocation) -> Result[str, RepositoryError]:
        """Newest version published for the coordinate's group/artifact.

        Prefers <release>, then <latest>, then the last listed <version>.
        """
        url = self.metadata_url(location)
        res = self._http.get_text(url)
        if isinstance(res, Err):
            return Err(RepositoryError(coordinate=location.coordinate, message=str(res.error)))

        try:
            root = ET.fromstring(res.value)
        except ET.ParseError as e:
            return Err(
                RepositoryError(
                    coordinate=location.coordinate,
                    message=f"Invalid maven-metadata.xml: {e}",
                )
            )

        for tag in ("versioning/release", "versioning/latest"):
            text = (root.findtext(tag) or "").strip()
            if text:
                return Ok(text)

        versions = [
            (v.text or "").strip() for v in root.findall("versioning/versions/version")
        ]
        versions = [v for v in versions if v]
        if versions:
            return Ok(versions[-1])

        return Err(
            RepositoryError(
                coordinate=location.coordinate,
                message="No versions listed in maven-metadata.xml",
            )
        )

    def download(
        self,
        location: RepositoryLocation,
        dest: Path,
    ) -> Result[Path, RepositoryError]:
        if is_latest(location.version):
            return Err(
                RepositoryError(
                    coordinate=location.coordinate,
                    message="Version must be resolved before download",
                )
            )

        res = self._http.download(self.artifact_url(location), dest)
        if isinstance(res, Err):
            return Err(RepositoryError(coordinate=location.coordinate, message=str(res.error)))
        return Ok(res.value)
