"""The release pipeline.

Steps always run in the order of :data:`~release_flow.interfaces.STEP_ORDER`,
whatever order the plugins were configured in:

    analyze-commits -> generate-notes -> update-changelog-and-manifests
    -> prepare-assets -> publish-release -> commit-back

Within a step, plugins run one after another in registration order and
see each other's changes to the context. The first failure aborts the
run: nothing after it is invoked, so a failed build never publishes and
a failed publish never commits back.

Two outcomes end a run early without error:

* ``no_release`` when commit analysis yields release type ``none``;
* ``dry_run`` after release notes were generated, when requested.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

from release_flow.core.version import BumpType, Version, format_tag
from release_flow.exceptions import PluginError, ReleaseFlowError
from release_flow.interfaces import STEP_ORDER, Step

if TYPE_CHECKING:
    from release_flow.core.context import ReleaseContext
    from release_flow.core.registry import StageRegistry
    from release_flow.interfaces import ReleaseHandle

logger = logging.getLogger(__name__)


class OutcomeStatus(str, Enum):
    RELEASED = "released"
    NO_RELEASE = "no_release"
    NOT_ELIGIBLE = "not_eligible"
    DRY_RUN = "dry_run"

    def __str__(self) -> str:
        return self.value


@dataclass
class ReleaseOutcome:
    """Result of a run that did not fail."""

    status: OutcomeStatus
    branch: str
    context: ReleaseContext | None = None

    @property
    def version(self) -> Version | None:
        return self.context.next_version if self.context else None

    @property
    def tag(self) -> str | None:
        return self.context.next_tag if self.context else None

    @property
    def notes(self) -> str | None:
        return self.context.notes if self.context else None

    @property
    def release(self) -> ReleaseHandle | None:
        return self.context.release if self.context else None

    @property
    def released(self) -> bool:
        return self.status == OutcomeStatus.RELEASED


class Pipeline:
    """Runs registered plugins step by step against one context."""

    def __init__(
        self,
        registry: StageRegistry,
        *,
        tag_format: str = "v${version}",
        initial_version: Version = Version(1, 0, 0),
    ) -> None:
        self.registry = registry
        self.tag_format = tag_format
        self.initial_version = initial_version

    def run(self, context: ReleaseContext, *, dry_run: bool = False) -> ReleaseOutcome:
        """Execute all steps.

        Raises:
            ReleaseFlowError: The first failure of any plugin; the error is
                also recorded in ``context.errors``
        """
        for step in STEP_ORDER:
            self.run_step(step, context)

            if step == Step.ANALYZE_COMMITS and not self._resolve_next_version(context):
                logger.info("No release needed on %s", context.branch)
                return ReleaseOutcome(OutcomeStatus.NO_RELEASE, context.branch, context)

            if step == Step.GENERATE_NOTES and dry_run:
                logger.info("Dry run: stopping before %s is written", context.next_tag)
                return ReleaseOutcome(OutcomeStatus.DRY_RUN, context.branch, context)

        logger.info("Released %s", context.next_tag)
        return ReleaseOutcome(OutcomeStatus.RELEASED, context.branch, context)

    def run_step(self, step: Step, context: ReleaseContext) -> None:
        for entry in self.registry.for_step(step):
            logger.info("%s: %s", step, entry.name)
            try:
                getattr(entry.plugin, step.method)(context)
            except ReleaseFlowError as e:
                context.record_error(e)
                logger.error("%s failed in %s: %s", entry.name, step, e)
                raise
            except Exception as e:
                error = PluginError(entry.name, str(step), e)
                context.record_error(error)
                logger.error("%s", error)
                raise error from e

    def _resolve_next_version(self, context: ReleaseContext) -> bool:
        """Derive next version and tag from the release type.

        Returns:
            False when there is nothing to release
        """
        release_type = context.release_type
        if release_type is None:
            context.set_release_type(BumpType.NONE)
            release_type = BumpType.NONE
        if release_type == BumpType.NONE:
            return False

        if context.next_version is None:
            if context.last_version is None:
                next_version = self.initial_version
            else:
                next_version = context.last_version.bump(release_type)
            context.set_next_version(next_version)

        context.next_tag = format_tag(context.next_version, self.tag_format)
        logger.info(
            "Next version: %s (%s, previous %s)",
            context.next_version,
            release_type,
            context.last_version or "none",
        )
        return True
