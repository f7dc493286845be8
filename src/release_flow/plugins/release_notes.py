"""Render release notes for the computed version."""

from __future__ import annotations

from typing import TYPE_CHECKING, ClassVar

from pydantic import Field

from release_flow.config.models import CommitsConfig
from release_flow.core.changelog import DEFAULT_HIDDEN_TYPES, render_release_notes
from release_flow.core.commits import filter_skip_release_commits, parse_commits
from release_flow.exceptions import ContextError
from release_flow.interfaces import Step

if TYPE_CHECKING:
    from release_flow.core.context import ReleaseContext
    from release_flow.interfaces import Services


class ReleaseNotesOptions(CommitsConfig):
    hidden_types: list[str] = Field(default_factory=lambda: sorted(DEFAULT_HIDDEN_TYPES))
    include_scope: bool = True
    include_sha: bool = True


class ReleaseNotesPlugin:
    name: ClassVar[str] = "release-notes-generator"
    steps: ClassVar[frozenset[Step]] = frozenset({Step.GENERATE_NOTES})
    Options: ClassVar[type[ReleaseNotesOptions]] = ReleaseNotesOptions

    def __init__(self, options: ReleaseNotesOptions, services: Services) -> None:
        self.options = options
        self.repository_url = services.repository_url

    def generate_notes(self, context: ReleaseContext) -> None:
        if context.next_version is None:
            raise ContextError("Release notes need next_version to be set")
        commits = filter_skip_release_commits(context.commits, self.options.skip_release_patterns)
        notes = render_release_notes(
            context.next_version,
            parse_commits(commits, self.options),
            context.release_date,
            hidden_types=self.options.hidden_types,
            include_scope=self.options.include_scope,
            include_sha=self.options.include_sha,
            tag=context.next_tag,
            previous_tag=context.last_tag,
            repository_url=self.repository_url,
        )
        context.append_notes(notes)
