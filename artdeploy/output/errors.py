"""Error presentation utilities.

Centralized error formatting and exit code mapping for consistent UX.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from artdeploy.core.errors import ErrorCode
from artdeploy.output.console import Style
from artdeploy.release.errors import (
    ConfigInvalid,
    DeployError,
    DirectorySetupFailed,
    ExtractFailed,
    FetchFailed,
    InvalidName,
    LatestOverHttp,
    LocalSourceMissing,
    SymlinkFailed,
    UnsupportedArchive,
    describe,
)

if TYPE_CHECKING:
    from artdeploy.output.console import ConsoleProtocol

__all__ = ["print_deploy_error", "deploy_error_exit_code"]


def print_deploy_error(error: DeployError, console: ConsoleProtocol) -> None:
    """Print deploy error to console with appropriate formatting."""
    console.error(describe(error))
    match error:
        case LatestOverHttp():
            console.print("hint: pin an explicit version for http(s) locations", Style.DIM)
        case UnsupportedArchive():
            console.print("hint: set [artifact].is_archive = false to copy it as-is", Style.DIM)
        case LocalSourceMissing():
            console.print("hint: relative paths are resolved from the config file", Style.DIM)
        case FetchFailed(checksum_mismatch=True):
            console.print("hint: check [artifact].checksum (sha256)", Style.DIM)
        case DirectorySetupFailed() | SymlinkFailed():
            console.print("hint: check permissions and [deploy].owner/group", Style.DIM)
        case _:
            pass


def deploy_error_exit_code(error: DeployError) -> int:
    """Get exit code for a deploy error."""
    match error:
        case LatestOverHttp() | UnsupportedArchive() | LocalSourceMissing():
            return int(ErrorCode.USER_ERROR)
        case InvalidName() | ConfigInvalid():
            return int(ErrorCode.USER_ERROR)
        case FetchFailed():
            return int(ErrorCode.NETWORK_ERROR)
        case DirectorySetupFailed() | ExtractFailed() | SymlinkFailed():
            return int(ErrorCode.IO_ERROR)
