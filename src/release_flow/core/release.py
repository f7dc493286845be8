"""Top-level release run: branch gate, lock, history read, pipeline."""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from release_flow.core.branches import match_branch
from release_flow.core.context import ReleaseContext
from release_flow.core.lock import ReleaseLock
from release_flow.core.pipeline import OutcomeStatus, Pipeline, ReleaseOutcome
from release_flow.core.registry import StageRegistry
from release_flow.core.version import latest_tagged_version
from release_flow.exceptions import AnalysisError, GitError
from release_flow.interfaces import Services

if TYPE_CHECKING:
    from collections.abc import Callable
    from pathlib import Path

    from release_flow.config.models import BranchConfig, ReleaseFlowConfig
    from release_flow.interfaces import ReleaseHost, VersionControl

logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    return datetime.now(UTC)


class Releaser:
    """Runs releases for one repository and configuration.

    Plugins are loaded and configured when the Releaser is created, so
    configuration errors surface before any run starts.
    """

    def __init__(
        self,
        config: ReleaseFlowConfig,
        repo: VersionControl,
        *,
        host: ReleaseHost | None = None,
        registry: StageRegistry | None = None,
        lock: ReleaseLock | None = None,
        clock: Callable[[], datetime] = utc_now,
        cwd: Path | None = None,
    ) -> None:
        self.config = config
        self.repo = repo
        self.cwd = cwd or repo.path
        self.lock = lock or ReleaseLock()
        self.clock = clock
        self.registry = registry or StageRegistry.from_bindings(
            config.plugins,
            Services(
                cwd=self.cwd,
                repo=repo,
                host=host,
                repository_url=config.repository_url,
            ),
        )
        self.pipeline = Pipeline(
            self.registry,
            tag_format=config.tag_format,
            initial_version=config.effective_initial_version,
        )

    def run(self, branch: str | None = None, *, dry_run: bool | None = None) -> ReleaseOutcome:
        """Release ``branch`` (the current branch by default).

        Raises:
            AnalysisError: If the repository history cannot be read
            ConcurrentReleaseError: If a release is already running for the branch
            ReleaseFlowError: Any failure raised by the pipeline
        """
        if dry_run is None:
            dry_run = self.config.dry_run
        if branch is None:
            try:
                branch = self.repo.current_branch()
            except GitError as e:
                raise AnalysisError(f"Cannot determine the current branch: {e}") from e

        channel = match_branch(branch, self.config.branches)
        if channel is None:
            logger.info(
                "Branch '%s' is not a release branch (%s)",
                branch,
                ", ".join(self.config.branch_names),
            )
            return ReleaseOutcome(OutcomeStatus.NOT_ELIGIBLE, branch)

        with self.lock.claim(branch):
            context = self.create_context(branch, channel, dry_run=dry_run)
            return self.pipeline.run(context, dry_run=dry_run)

    def create_context(
        self,
        branch: str,
        channel: BranchConfig | None = None,
        *,
        dry_run: bool = False,
    ) -> ReleaseContext:
        try:
            latest = latest_tagged_version(self.repo.list_tags(), self.config.tag_format)
            last_tag, last_version = latest if latest else (None, None)
            commits = self.repo.get_commits_since_tag(last_tag)
            head = self.repo.head_sha()
        except GitError as e:
            raise AnalysisError(f"Cannot read repository history: {e}") from e

        context = ReleaseContext(
            branch=branch,
            cwd=self.cwd,
            channel=channel,
            last_version=last_version,
            last_tag=last_tag,
            head=head,
            release_date=self.clock(),
            dry_run=dry_run,
        )
        context.add_commits(commits)
        logger.info(
            "Found %d commit(s) on %s since %s",
            len(commits),
            branch,
            last_tag or "the first commit",
        )
        return context
