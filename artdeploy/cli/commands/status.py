"""Status command - show the active release, history and drift."""

from __future__ import annotations

from datetime import datetime
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from artdeploy.cli.context import build_context
from artdeploy.core.result import Err
from artdeploy.release.manifest import diff, generate, read_manifest
from artdeploy.release.tracker import VersionTracker

_console = Console()


def _drift_label(tracker: VersionTracker, version: str) -> str:
    release = tracker.release_path(version)
    stored = read_manifest(release)
    if isinstance(stored, Err):
        return "[red]manifest unreadable[/red]"
    if stored.value is None:
        return "[yellow]no manifest[/yellow]"
    changes = diff(stored.value, generate(release))
    if not changes:
        return "[green]clean[/green]"
    return (
        f"[yellow]{len(changes.added)} added, {len(changes.removed)} removed, "
        f"{len(changes.changed)} changed[/yellow]"
    )


def status(
    config: Path = typer.Argument(..., help="Deploy config (TOML)"),
) -> None:
    """Show installed releases for a deploy config."""
    ctx = build_context(config)
    tracker = VersionTracker(ctx.config.target.deploy_to)
    current = tracker.current_version()

    _console.print(f"\n[bold]{ctx.config.artifact.name}[/bold] in {tracker.deploy_to}")
    if current is None:
        _console.print("[dim]No active release[/dim]")
    else:
        _console.print(f"current: [cyan]{current}[/cyan] ({_drift_label(tracker, current)})")

    releases = tracker.releases()
    if not releases:
        return

    table = Table(show_header=True, header_style="bold")
    table.add_column("Version")
    table.add_column("Installed")
    table.add_column("")
    for release in reversed(releases):
        installed = datetime.fromtimestamp(release.mtime).strftime("%Y-%m-%d %H:%M")
        marker = "active" if release.version == current else ""
        table.add_row(release.version, installed, marker)
    _console.print(table)
