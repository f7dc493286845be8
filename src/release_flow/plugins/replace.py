"""Rewrite version strings in build manifests."""

from __future__ import annotations

from typing import TYPE_CHECKING, ClassVar

from pydantic import Field

from release_flow.config.models import PluginOptions, ReplacementRule
from release_flow.core.templates import context_variables
from release_flow.interfaces import Step
from release_flow.project.manifests import rewrite_manifests

if TYPE_CHECKING:
    from release_flow.core.context import ReleaseContext
    from release_flow.interfaces import Services


class ReplaceOptions(PluginOptions):
    replacements: list[ReplacementRule] = Field(min_length=1)


class ReplacePlugin:
    name: ClassVar[str] = "replace"
    steps: ClassVar[frozenset[Step]] = frozenset({Step.UPDATE_FILES})
    Options: ClassVar[type[ReplaceOptions]] = ReplaceOptions

    def __init__(self, options: ReplaceOptions, services: Services) -> None:
        self.options = options

    def update_files(self, context: ReleaseContext) -> None:
        paths = rewrite_manifests(
            self.options.replacements,
            context_variables(context),
            context.cwd,
        )
        for path in paths:
            context.record_changed_file(path)
