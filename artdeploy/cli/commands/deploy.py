"""Deploy and pre-seed commands."""

from __future__ import annotations

from pathlib import Path

import typer

from artdeploy.cli.commands._helpers import run_lifecycle
from artdeploy.cli.context import build_context
from artdeploy.output.console import Style


def deploy(
    config: Path = typer.Argument(..., help="Deploy config (TOML)"),
    version: str | None = typer.Option(
        None, "--version", help="Version to deploy (overrides config)", show_default=False
    ),
    force: bool = typer.Option(False, "--force", help="Restage even if nothing changed"),
    migrate: bool = typer.Option(False, "--migrate", help="Run migrate hooks"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show every step"),
) -> None:
    """Deploy a release and switch `current` to it."""
    ctx = build_context(
        config,
        verbose=verbose,
        version=version,
        force=True if force else None,
        should_migrate=True if migrate else None,
    )
    lifecycle = ctx.lifecycle()
    report = run_lifecycle(ctx, lifecycle.deploy)

    if report.pruned:
        ctx.console.print(f"pruned: {', '.join(report.pruned)}", Style.DIM)
    if report.restarted:
        ctx.console.print("restart hook fired", Style.DIM)


def pre_seed(
    config: Path = typer.Argument(..., help="Deploy config (TOML)"),
    version: str | None = typer.Option(
        None, "--version", help="Version to fetch (overrides config)", show_default=False
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show every step"),
) -> None:
    """Fetch the artifact into the cache without deploying it."""
    ctx = build_context(config, verbose=verbose, version=version)
    lifecycle = ctx.lifecycle()
    report = run_lifecycle(ctx, lifecycle.pre_seed)
    if not report.fetched:
        ctx.console.print("already cached", Style.DIM)
