from __future__ import annotations

import typer

from artdeploy import __version__
from artdeploy.cli.commands.deploy import deploy, pre_seed
from artdeploy.cli.commands.status import status

app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    invoke_without_command=True,
    rich_markup_mode="rich",
)


# Commands
app.command()(deploy)
app.command("pre-seed")(pre_seed)
app.command()(status)


@app.callback()
def _main(  # pyright: ignore[reportUnusedFunction]
    version: bool = typer.Option(False, "--version", help="Show version and exit."),
) -> None:
    if version:
        typer.echo(__version__)
        raise typer.Exit(code=0)


def main() -> None:
    app()
