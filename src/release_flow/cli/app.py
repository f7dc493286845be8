"""Command-line entry point."""

from __future__ import annotations

import logging

import typer
from rich.console import Console
from rich.logging import RichHandler

from release_flow import __version__
from release_flow.cli.commands.check import run_check
from release_flow.cli.commands.release import run_release

app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    rich_markup_mode="rich",
    help="Semantic release pipeline: version, changelog, manifests, build, publish, commit.",
)

console = Console()
err_console = Console(stderr=True)


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"release-flow {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
) -> None:
    """release-flow."""


@app.command()
def release(
    path: str | None = typer.Option(None, "--path", "-p", help="Project directory."),
    branch: str | None = typer.Option(None, "--branch", "-b", help="Branch to release."),
    dry_run: bool = typer.Option(
        False, "--dry-run", help="Compute the version and notes without changing anything."
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logs."),
) -> None:
    """Release the current branch if it has releasable changes."""
    configure_logging(verbose)
    run_release(path, branch, dry_run, console, err_console)


@app.command()
def check(
    path: str | None = typer.Option(None, "--path", "-p", help="Project directory."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logs."),
) -> None:
    """Validate the configuration and show the pipeline."""
    configure_logging(verbose)
    run_check(path, console, err_console)


def main() -> None:
    app()
