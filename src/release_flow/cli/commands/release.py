"""Implementation of the 'release' command.

The release command runs the whole pipeline for the current branch:
analyze, notes, file updates, build, publish and commit back.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from rich.markup import escape
from rich.panel import Panel

from release_flow.config import load_config
from release_flow.core.lock import FileReleaseLock
from release_flow.core.pipeline import OutcomeStatus
from release_flow.core.release import Releaser
from release_flow.exceptions import ConfigurationError, PrepareError, ReleaseFlowError
from release_flow.forge.github import parse_github_repo
from release_flow.vcs import GitRepository

if TYPE_CHECKING:
    from rich.console import Console

    from release_flow.config.models import ReleaseFlowConfig
    from release_flow.core.pipeline import ReleaseOutcome

EXIT_OK = 0
EXIT_CONFIG_ERROR = 1
EXIT_PIPELINE_ERROR = 2


def build_releaser(project_path: Path, err_console: Console) -> Releaser:
    """Load configuration and the repository, exiting with code 1 on failure."""
    try:
        config = load_config(project_path)
    except ConfigurationError as e:
        err_console.print(f"[red]Error loading config:[/] {escape(str(e))}")
        raise SystemExit(EXIT_CONFIG_ERROR) from e

    try:
        repo = GitRepository(project_path)
    except ReleaseFlowError as e:
        err_console.print(f"[red]Error:[/] {escape(str(e))}")
        raise SystemExit(EXIT_CONFIG_ERROR) from e

    config = _with_repository_url(config, repo)

    try:
        return Releaser(config, repo, lock=FileReleaseLock(repo.path / ".git"))
    except ConfigurationError as e:
        err_console.print(f"[red]Configuration error:[/] {escape(str(e))}")
        raise SystemExit(EXIT_CONFIG_ERROR) from e


def _with_repository_url(config: ReleaseFlowConfig, repo: GitRepository) -> ReleaseFlowConfig:
    if config.repository_url:
        return config
    url = repo.remote_url()
    parsed = parse_github_repo(url) if url else None
    if parsed is None:
        return config
    owner, name = parsed
    return config.model_copy(update={"repository_url": f"https://github.com/{owner}/{name}"})


def run_release(
    path: str | None,
    branch: str | None,
    dry_run: bool,
    console: Console,
    err_console: Console,
) -> None:
    """Run the release command.

    Args:
        path: Optional path to project directory
        branch: Branch to release instead of the current one
        dry_run: Stop after computing the version and notes
        console: Console for standard output
        err_console: Console for error output
    """
    project_path = Path(path) if path else Path.cwd()
    releaser = build_releaser(project_path, err_console)

    try:
        outcome = releaser.run(branch, dry_run=dry_run or None)
    except ConfigurationError as e:
        err_console.print(f"[red]Configuration error:[/] {escape(str(e))}")
        raise SystemExit(EXIT_CONFIG_ERROR) from e
    except PrepareError as e:
        err_console.print(f"[red]Release failed:[/] {escape(str(e))}")
        if e.stdout:
            err_console.print(f"[dim]{escape(e.stdout.rstrip())}[/]")
        if e.stderr:
            err_console.print(f"[red]{escape(e.stderr.rstrip())}[/]")
        raise SystemExit(EXIT_PIPELINE_ERROR) from e
    except ReleaseFlowError as e:
        err_console.print(f"[red]Release failed:[/] {escape(str(e))}")
        raise SystemExit(EXIT_PIPELINE_ERROR) from e

    _report(outcome, console)


def _report(outcome: ReleaseOutcome, console: Console) -> None:
    if outcome.status == OutcomeStatus.NOT_ELIGIBLE:
        console.print(
            f"[yellow]Branch '{outcome.branch}' is not a release branch. No release needed.[/]"
        )
        return

    if outcome.status == OutcomeStatus.NO_RELEASE:
        console.print("[yellow]No releasable changes since the last release. No release needed.[/]")
        return

    context = outcome.context
    if outcome.status == OutcomeStatus.DRY_RUN:
        console.print(
            Panel(
                escape(outcome.notes or "(no release notes)"),
                title=f"[yellow]Dry Run: would release {outcome.tag}[/]",
                border_style="yellow",
            )
        )
        return

    lines = [f"[green]Released {outcome.tag}![/]"]
    if outcome.release and outcome.release.url:
        lines.append(f"\nRelease: [cyan]{outcome.release.url}[/]")
    if context and context.changed_files:
        lines.append("\nUpdated files:")
        lines.extend(f"  • {path}" for path in context.changed_files)
    if context and context.warnings:
        lines.append("\nWarnings:")
        lines.extend(f"  • {warning}" for warning in context.warnings)
    console.print(
        Panel(
            "\n".join(lines),
            title="[green]Release Complete[/]",
            border_style="green",
        )
    )
