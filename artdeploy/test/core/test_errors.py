"""Tests for artdeploy.core.errors module."""

from artdeploy.core.errors import ErrorCode


class TestErrorCode:
    def test_values_are_stable(self) -> None:
        assert ErrorCode.OK == 0
        assert ErrorCode.USER_ERROR == 1
        assert ErrorCode.ENV_ERROR == 2
        assert ErrorCode.HOOK_ERROR == 3
        assert ErrorCode.NETWORK_ERROR == 4
        assert ErrorCode.IO_ERROR == 5

    def test_str(self) -> None:
        assert str(ErrorCode.NETWORK_ERROR) == "network error"

    def test_success_flags(self) -> None:
        assert ErrorCode.OK.is_success
        assert not ErrorCode.OK.is_error
        assert ErrorCode.IO_ERROR.is_error
        assert not ErrorCode.IO_ERROR.is_success

    def test_usable_as_exit_code(self) -> None:
        assert int(ErrorCode.HOOK_ERROR) == 3
