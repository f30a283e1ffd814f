"""Exit codes for the artdeploy CLI.

Every fatal deploy error maps onto one of these codes so wrappers (cron,
configuration management, CI) can tell a bad config from a network outage.
"""

from enum import IntEnum

__all__ = ["ErrorCode"]


class ErrorCode(IntEnum):
    """Process exit codes. Values are stable.

    - 0: Success
    - 1: User error (invalid config, unsupported archive, bad location)
    - 2: Environment error (permissions, missing tools)
    - 3: Hook error (a lifecycle hook failed)
    - 4: Network error (download or repository lookup failed)
    - 5: I/O error (directory, extraction or symlink failure)
    """

    OK = 0
    USER_ERROR = 1
    ENV_ERROR = 2
    HOOK_ERROR = 3
    NETWORK_ERROR = 4
    IO_ERROR = 5

    def __str__(self) -> str:
        return self.name.lower().replace("_", " ")

    @property
    def is_success(self) -> bool:
        return self == ErrorCode.OK

    @property
    def is_error(self) -> bool:
        return self != ErrorCode.OK
