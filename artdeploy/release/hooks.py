"""Lifecycle extension points.

Each Hook is an optional zero-argument callable. Library users register
Python callables directly; the CLI registers CommandHook instances built from
the [hooks] table of the deploy config.

A hook that raises aborts the rest of the run; the exception reaches the
caller unchanged.
"""

from __future__ import annotations

import os
from collections.abc import Callable, Mapping
from enum import StrEnum
from pathlib import Path

from artdeploy.core.result import Err
from artdeploy.output.console import ConsoleProtocol, Style
from artdeploy.platform.process import ProcessError, run

__all__ = [
    "CommandHook",
    "Hook",
    "HookCommandFailed",
    "HookFn",
    "Hooks",
    "parse_hook",
]

type HookFn = Callable[[], None]


class Hook(StrEnum):
    """Extension points, in the order a full deploy reaches them."""

    BEFORE_DEPLOY = "before_deploy"
    BEFORE_EXTRACT = "before_extract"
    AFTER_EXTRACT = "after_extract"
    BEFORE_SYMLINK = "before_symlink"
    AFTER_SYMLINK = "after_symlink"
    CONFIGURE = "configure"
    BEFORE_MIGRATE = "before_migrate"
    MIGRATE = "migrate"
    AFTER_MIGRATE = "after_migrate"
    RESTART = "restart"
    AFTER_DEPLOY = "after_deploy"


def parse_hook(name: str) -> Hook | None:
    try:
        return Hook(name)
    except ValueError:
        return None


class HookCommandFailed(Exception):
    """A configured hook command exited non-zero or could not start."""

    def __init__(self, hook: Hook, error: ProcessError) -> None:
        super().__init__(f"{hook} hook failed: {error}")
        self.hook = hook
        self.error = error


class CommandHook:
    """Runs an external command as a hook.

    The command runs in `cwd` with the current environment plus `env`.
    """

    def __init__(
        self,
        hook: Hook,
        argv: tuple[str, ...],
        *,
        cwd: Path,
        env: Mapping[str, str] | None = None,
        timeout: float | None = None,
    ) -> None:
        self.hook = hook
        self.argv = argv
        self.cwd = cwd
        self.env = dict(env or {})
        self.timeout = timeout

    def __call__(self) -> None:
        env = {**os.environ, **self.env, "ARTDEPLOY_HOOK": str(self.hook)}
        result = run(list(self.argv), cwd=self.cwd, env=env, timeout=self.timeout)
        if isinstance(result, Err):
            raise HookCommandFailed(self.hook, result.error)

    def __repr__(self) -> str:
        return f"CommandHook({self.hook}, {' '.join(self.argv)!r})"


class Hooks:
    """Registry of hook callables.

    Usage:
        hooks = Hooks({Hook.RESTART: restart_service})
        hooks.register(Hook.CONFIGURE, write_settings)
    """

    def __init__(self, callables: Mapping[Hook, HookFn] | None = None) -> None:
        self._callables: dict[Hook, HookFn] = dict(callables or {})

    def register(self, hook: Hook, fn: HookFn) -> None:
        self._callables[hook] = fn

    def get(self, hook: Hook) -> HookFn | None:
        return self._callables.get(hook)

    def __contains__(self, hook: object) -> bool:
        return hook in self._callables

    def merged(self, other: Hooks) -> Hooks:
        """New registry with other's entries layered over this one."""
        return Hooks({**self._callables, **other._callables})

    def run(self, hook: Hook, console: ConsoleProtocol) -> bool:
        """Run hook if registered.

        Returns:
            True if a callable ran, False if the hook was not defined.
        """
        fn = self._callables.get(hook)
        if fn is None:
            console.print(f"{hook}: not defined, skipping", Style.DIM)
            return False
        console.print(f"{hook}: running", Style.DIM)
        fn()
        return True
