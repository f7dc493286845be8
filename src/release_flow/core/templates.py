"""``${name}`` placeholder rendering for commit messages, commands and manifests.

Dotted names such as ``${nextRelease.version}`` are accepted so that
configuration written for semantic-release keeps working. Placeholders
without a value are left as they are.
"""

from __future__ import annotations

from string import Template
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Mapping

    from release_flow.core.context import ReleaseContext


class _DottedTemplate(Template):
    idpattern = r"(?a:[_a-z][_a-z0-9]*(?:\.[_a-z][_a-z0-9]*)*)"


def render(template: str, variables: Mapping[str, object]) -> str:
    """Substitute ``${name}`` placeholders from ``variables``."""
    return _DottedTemplate(template).safe_substitute(
        {key: str(value) for key, value in variables.items() if value is not None}
    )


def context_variables(context: ReleaseContext) -> dict[str, object]:
    """Template variables describing the release in progress."""
    version = context.next_version
    last_version = context.last_version
    return {
        "version": version,
        "tag": context.next_tag,
        "last_version": last_version,
        "last_tag": context.last_tag,
        "branch": context.branch,
        "nextRelease.version": version,
        "nextRelease.gitTag": context.next_tag,
        "lastRelease.version": last_version,
        "lastRelease.gitTag": context.last_tag,
    }
