"""Shared helpers for CLI commands."""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, NoReturn

import typer

from artdeploy.core.errors import ErrorCode
from artdeploy.output.console import Style
from artdeploy.output.errors import deploy_error_exit_code, print_deploy_error
from artdeploy.release.errors import DeployAborted
from artdeploy.release.hooks import HookCommandFailed

if TYPE_CHECKING:
    from artdeploy.cli.context import CLIContext


def run_lifecycle[T](ctx: CLIContext, action: Callable[[], T]) -> T:
    """Run a lifecycle action, turning its failures into exit codes.

    This helper reduces boilerplate for the common pattern:
        try:
            report = ctx.lifecycle().deploy()
        except DeployAborted as e:
            print_deploy_error(e.error, ctx.console)
            raise typer.Exit(code=deploy_error_exit_code(e.error))
    """
    try:
        return action()
    except DeployAborted as e:
        print_deploy_error(e.error, ctx.console)
        exit_with_code(deploy_error_exit_code(e.error))
    except HookCommandFailed as e:
        ctx.console.error(str(e))
        output = (e.error.stderr or e.error.stdout).strip()
        if output:
            ctx.console.print(output, Style.DIM)
        exit_with_code(int(ErrorCode.HOOK_ERROR))


def exit_with_code(code: int) -> NoReturn:
    """Exit with given code. Explicit helper for clarity."""
    raise typer.Exit(code=code)
