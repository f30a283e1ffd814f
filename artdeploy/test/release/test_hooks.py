"""Tests for release/hooks.py - hook registry and command hooks."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

from artdeploy.output.console import MockConsole, Style
from artdeploy.release.hooks import CommandHook, Hook, HookCommandFailed, Hooks, parse_hook


class TestHook:
    def test_eleven_extension_points(self) -> None:
        assert [str(h) for h in Hook] == [
            "before_deploy",
            "before_extract",
            "after_extract",
            "before_symlink",
            "after_symlink",
            "configure",
            "before_migrate",
            "migrate",
            "after_migrate",
            "restart",
            "after_deploy",
        ]

    def test_parse(self) -> None:
        assert parse_hook("restart") is Hook.RESTART
        assert parse_hook("reboot") is None


class TestHooks:
    def test_absent_hook_is_skipped(self) -> None:
        console = MockConsole()

        ran = Hooks().run(Hook.CONFIGURE, console)

        assert ran is False
        assert console.find("configure: not defined")[0].style == Style.DIM

    def test_present_hook_runs(self) -> None:
        calls: list[str] = []
        hooks = Hooks({Hook.RESTART: lambda: calls.append("restart")})

        assert hooks.run(Hook.RESTART, MockConsole()) is True
        assert calls == ["restart"]

    def test_exception_propagates(self) -> None:
        def boom() -> None:
            raise RuntimeError("hook exploded")

        hooks = Hooks()
        hooks.register(Hook.MIGRATE, boom)

        with pytest.raises(RuntimeError, match="hook exploded"):
            hooks.run(Hook.MIGRATE, MockConsole())

    def test_merged_prefers_other(self) -> None:
        calls: list[str] = []
        base = Hooks({Hook.RESTART: lambda: calls.append("base"), Hook.CONFIGURE: lambda: None})
        override = Hooks({Hook.RESTART: lambda: calls.append("override")})

        merged = base.merged(override)
        merged.run(Hook.RESTART, MockConsole())

        assert calls == ["override"]
        assert Hook.CONFIGURE in merged
        assert Hook.MIGRATE not in merged


class TestCommandHook:
    def test_runs_in_cwd_with_env(self, tmp_path: Path) -> None:
        code = (
            "import os, pathlib; "
            "pathlib.Path('out.txt').write_text("
            "os.environ['ARTDEPLOY_VERSION'] + ' ' + os.environ['ARTDEPLOY_HOOK'])"
        )
        hook = CommandHook(
            Hook.CONFIGURE,
            (sys.executable, "-c", code),
            cwd=tmp_path,
            env={"ARTDEPLOY_VERSION": "1.0.0"},
        )

        hook()

        assert (tmp_path / "out.txt").read_text() == "1.0.0 configure"

    def test_nonzero_exit_raises(self, tmp_path: Path) -> None:
        hook = CommandHook(
            Hook.RESTART,
            (sys.executable, "-c", "import sys; sys.exit(4)"),
            cwd=tmp_path,
        )

        with pytest.raises(HookCommandFailed) as exc:
            hook()

        assert exc.value.hook is Hook.RESTART
        assert exc.value.error.returncode == 4
        assert "restart hook failed" in str(exc.value)

    def test_repr(self, tmp_path: Path) -> None:
        hook = CommandHook(Hook.RESTART, ("systemctl", "restart", "app"), cwd=tmp_path)
        assert "systemctl restart app" in repr(hook)
