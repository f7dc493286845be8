"""Commit the release changes back to the repository and tag the release."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING, ClassVar

from pydantic import Field

from release_flow.config.models import PluginOptions
from release_flow.core.templates import context_variables, render
from release_flow.exceptions import CommitBackError, ConfigurationError, ContextError, GitError
from release_flow.interfaces import Step
from release_flow.vcs.git import changed_paths

if TYPE_CHECKING:
    from release_flow.core.context import ReleaseContext
    from release_flow.interfaces import Services, VersionControl

logger = logging.getLogger(__name__)

DEFAULT_MESSAGE = "chore(release): ${version} [skip ci]"


class GitOptions(PluginOptions):
    assets: list[str] = Field(default_factory=list)
    message: str = DEFAULT_MESSAGE
    push: bool = True


def collect_files(patterns: list[str], cwd: Path) -> list[Path]:
    """Existing files matching ``patterns``; patterns matching nothing are skipped."""
    files: list[Path] = []
    for pattern in patterns:
        relative = pattern.removeprefix("./")
        # A trailing ``**`` only yields directories before Python 3.13.
        if relative == "**" or relative.endswith("/**"):
            relative += "/*"
        if any(ch in relative for ch in "*?["):
            matches = sorted(p for p in cwd.glob(relative) if p.is_file())
        else:
            candidate = cwd / relative
            matches = [candidate] if candidate.exists() else []
        for path in matches:
            if path not in files:
                files.append(path)
    return files


class GitPlugin:
    name: ClassVar[str] = "git"
    steps: ClassVar[frozenset[Step]] = frozenset({Step.COMMIT_BACK})
    Options: ClassVar[type[GitOptions]] = GitOptions

    def __init__(self, options: GitOptions, services: Services) -> None:
        if services.repo is None:
            raise ConfigurationError("git plugin needs a git repository")
        self.options = options
        self.repo: VersionControl = services.repo

    def commit_back(self, context: ReleaseContext) -> None:
        if context.next_tag is None:
            raise ContextError("Commit-back needs next_tag to be set")

        files = list(context.changed_files)
        for path in collect_files(self.options.assets, context.cwd):
            if path not in files:
                files.append(path)

        message = render(self.options.message, context_variables(context))
        # A hosted release already created the tag at the commit the run started from.
        ref = context.head if context.release is not None else None
        try:
            self.repo.commit_and_tag(
                changed_paths(self.repo.path, files),
                message,
                context.next_tag,
                ref=ref,
            )
            if self.options.push:
                self.repo.push(context.branch, context.next_tag)
        except GitError as e:
            raise CommitBackError(f"Cannot commit release {context.next_tag}: {e}") from e
        logger.info("Committed %d file(s) for %s", len(files), context.next_tag)
