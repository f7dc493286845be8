"""Implementation of the 'check' command.

Validates the configuration, loads every plugin and shows which plugins
run in each step, without touching the repository.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from rich.table import Table

from release_flow.cli.commands.release import EXIT_CONFIG_ERROR, build_releaser
from release_flow.interfaces import Step

if TYPE_CHECKING:
    from rich.console import Console


def run_check(path: str | None, console: Console, err_console: Console) -> None:
    project_path = Path(path) if path else Path.cwd()
    releaser = build_releaser(project_path, err_console)

    table = Table(title="Release pipeline")
    table.add_column("Step", style="cyan")
    table.add_column("Plugins")
    for step, names in releaser.registry.describe():
        table.add_row(str(step), ", ".join(names) or "[dim]-[/]")
    console.print(table)

    branches = ", ".join(releaser.config.branch_names)
    console.print(f"Release branches: [cyan]{branches}[/]")
    console.print(f"Tag format: [cyan]{releaser.config.tag_format}[/]")

    if not releaser.registry.for_step(Step.ANALYZE_COMMITS):
        err_console.print("[red]Error:[/] no plugin analyzes commits, nothing would be released")
        raise SystemExit(EXIT_CONFIG_ERROR)
    console.print("[green]Configuration OK[/]")
