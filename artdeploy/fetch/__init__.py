"""Artifact retrieval.

- Location classification (location.py)
- HTTP client (http.py)
- Maven-layout repository (repository.py)
- Cache-aware, checksum-verifying fetcher (retriever.py)
"""

from artdeploy.fetch.http import HttpClient, HttpError, MockHttpClient, RealHttpClient
from artdeploy.fetch.location import (
    LATEST,
    ArtifactReference,
    HttpLocation,
    LatestOverHttp,
    LocalLocation,
    LocalSourceMissing,
    Location,
    RepositoryLocation,
    classify,
    derive_cache_filename,
    is_latest,
    validate_reference,
)
from artdeploy.fetch.repository import MavenRepository, RepositoryError
from artdeploy.fetch.retriever import (
    ArtifactFetcher,
    FetchError,
    Fetcher,
    FetchResult,
    sha256_file,
)

__all__ = [
    # HTTP
    "HttpClient",
    "HttpError",
    "MockHttpClient",
    "RealHttpClient",
    # Location
    "LATEST",
    "ArtifactReference",
    "HttpLocation",
    "LatestOverHttp",
    "LocalLocation",
    "LocalSourceMissing",
    "Location",
    "RepositoryLocation",
    "classify",
    "derive_cache_filename",
    "is_latest",
    "validate_reference",
    # Repository
    "MavenRepository",
    "RepositoryError",
    # Fetch
    "ArtifactFetcher",
    "FetchError",
    "Fetcher",
    "FetchResult",
    "sha256_file",
]
