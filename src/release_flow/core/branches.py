"""Release channel matching."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Sequence

    from release_flow.config.models import BranchConfig


def match_branch(branch: str, branches: Sequence[BranchConfig]) -> BranchConfig | None:
    """Return the channel configured for ``branch``, if any. Names match exactly."""
    for candidate in branches:
        if candidate.name == branch:
            return candidate
    return None


def is_releasable(branch: str, branches: Sequence[BranchConfig]) -> bool:
    return match_branch(branch, branches) is not None
