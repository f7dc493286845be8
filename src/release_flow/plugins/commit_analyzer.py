"""Decide the release type from the commits since the last release."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, ClassVar

from release_flow.config.models import CommitsConfig
from release_flow.core.commits import calculate_bump, filter_skip_release_commits, parse_commits
from release_flow.interfaces import Step

if TYPE_CHECKING:
    from release_flow.core.context import ReleaseContext
    from release_flow.interfaces import Services

logger = logging.getLogger(__name__)


class CommitAnalyzerPlugin:
    name: ClassVar[str] = "commit-analyzer"
    steps: ClassVar[frozenset[Step]] = frozenset({Step.ANALYZE_COMMITS})
    Options: ClassVar[type[CommitsConfig]] = CommitsConfig

    def __init__(self, options: CommitsConfig, services: Services) -> None:
        self.options = options

    def analyze_commits(self, context: ReleaseContext) -> None:
        commits = filter_skip_release_commits(context.commits, self.options.skip_release_patterns)
        parsed = parse_commits(commits, self.options)
        bump = calculate_bump(parsed, self.options)
        logger.info(
            "Analyzed %d commit(s) since %s: %s release",
            len(context.commits),
            context.last_tag or "the beginning of history",
            bump,
        )
        context.set_release_type(bump)
