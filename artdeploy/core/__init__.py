"""Core types: configuration, exit codes, results."""

from .config import (
    ArtifactConfig,
    ConfigError,
    DeployConfig,
    RepositoryConfig,
    TargetConfig,
    load_config,
)
from .errors import ErrorCode
from .result import Err, Ok, Result, is_err, is_ok

__all__ = [
    # config
    "ArtifactConfig",
    "ConfigError",
    "DeployConfig",
    "RepositoryConfig",
    "TargetConfig",
    "load_config",
    # errors
    "ErrorCode",
    # result
    "Err",
    "Ok",
    "Result",
    "is_err",
    "is_ok",
]
