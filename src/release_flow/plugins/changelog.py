"""Prepend the release notes to the changelog file."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, ClassVar

from release_flow.config.models import PluginOptions
from release_flow.core.changelog import update_changelog_file
from release_flow.interfaces import Step

if TYPE_CHECKING:
    from pathlib import Path

    from release_flow.core.context import ReleaseContext
    from release_flow.interfaces import Services

logger = logging.getLogger(__name__)


class ChangelogOptions(PluginOptions):
    changelog_file: str = "CHANGELOG.md"
    changelog_title: str | None = None


class ChangelogPlugin:
    name: ClassVar[str] = "changelog"
    steps: ClassVar[frozenset[Step]] = frozenset({Step.UPDATE_FILES})
    Options: ClassVar[type[ChangelogOptions]] = ChangelogOptions

    def __init__(self, options: ChangelogOptions, services: Services) -> None:
        self.options = options

    def changelog_path(self, cwd: Path) -> Path:
        return cwd / self.options.changelog_file

    def update_files(self, context: ReleaseContext) -> None:
        if not context.notes:
            logger.warning(
                "No release notes generated, %s left unchanged", self.options.changelog_file
            )
            return
        path = update_changelog_file(
            self.changelog_path(context.cwd),
            context.notes,
            self.options.changelog_title,
        )
        context.record_changed_file(path)
