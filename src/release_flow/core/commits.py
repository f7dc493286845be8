"""Conventional commit classification.

Only the commit header (``type(scope)!: description``) and a breaking
change marker in the body are recognised. That is all the release type
decision and the release notes need.
"""

from __future__ import annotations

import re
from collections import defaultdict
from dataclasses import dataclass
from typing import TYPE_CHECKING

from release_flow.core.version import BumpType, max_bump

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from release_flow.config.models import CommitsConfig
    from release_flow.vcs.git import Commit

_HEADER_RE = re.compile(
    r"^(?P<type>[a-zA-Z]+)"
    r"(?:\((?P<scope>[^()\r\n]+)\))?"
    r"(?P<breaking>!)?"
    r":\s+(?P<description>\S.*)$"
)


@dataclass(frozen=True, slots=True)
class ParsedCommit:
    """A commit together with its classification."""

    commit: Commit
    commit_type: str | None
    scope: str | None
    description: str
    is_breaking: bool
    is_conventional: bool

    @property
    def sha(self) -> str:
        return self.commit.sha

    @classmethod
    def from_commit(cls, commit: Commit, breaking_pattern: str) -> ParsedCommit:
        """Classify a commit.

        Args:
            commit: Commit read from version control
            breaking_pattern: Regex marking a breaking change anywhere in the message
        """
        subject = commit.subject
        match = _HEADER_RE.match(subject)
        body_breaking = re.search(breaking_pattern, commit.message) is not None

        if match is None:
            return cls(
                commit=commit,
                commit_type=None,
                scope=None,
                description=subject,
                is_breaking=body_breaking,
                is_conventional=False,
            )

        return cls(
            commit=commit,
            commit_type=match.group("type").lower(),
            scope=match.group("scope"),
            description=match.group("description").strip(),
            is_breaking=bool(match.group("breaking")) or body_breaking,
            is_conventional=True,
        )

    def bump_type(self, config: CommitsConfig) -> BumpType:
        if self.is_breaking or self.commit_type in config.types_major:
            return BumpType.MAJOR
        if self.commit_type in config.types_minor:
            return BumpType.MINOR
        if self.commit_type in config.types_patch:
            return BumpType.PATCH
        return BumpType.NONE


def filter_skip_release_commits(
    commits: Sequence[Commit],
    patterns: Sequence[str],
) -> list[Commit]:
    """Drop commits whose message contains a skip marker (case-insensitive)."""
    if not patterns:
        return list(commits)
    lowered = [p.lower() for p in patterns]
    return [c for c in commits if not any(p in c.message.lower() for p in lowered)]


def parse_commits(commits: Iterable[Commit], config: CommitsConfig) -> list[ParsedCommit]:
    """Classify commits, keeping only those whose scope matches ``scope_regex``."""
    parsed = [ParsedCommit.from_commit(c, config.breaking_pattern) for c in commits]
    if config.scope_regex:
        scope_re = re.compile(config.scope_regex)
        parsed = [pc for pc in parsed if pc.scope is not None and scope_re.search(pc.scope)]
    return parsed


def calculate_bump(parsed: Iterable[ParsedCommit], config: CommitsConfig) -> BumpType:
    """Strongest release type across all commits (NONE for an empty list)."""
    bump = BumpType.NONE
    for pc in parsed:
        bump = max_bump(bump, pc.bump_type(config))
        if bump == BumpType.MAJOR:
            break
    return bump


def group_commits_by_type(parsed: Iterable[ParsedCommit]) -> dict[str, list[ParsedCommit]]:
    """Group commits by type; non-conventional commits go under ``other``."""
    grouped: dict[str, list[ParsedCommit]] = defaultdict(list)
    for pc in parsed:
        grouped[pc.commit_type or "other"].append(pc)
    return dict(grouped)


def get_breaking_changes(parsed: Iterable[ParsedCommit]) -> list[ParsedCommit]:
    return [pc for pc in parsed if pc.is_breaking]


def format_commit_for_changelog(
    pc: ParsedCommit,
    *,
    include_scope: bool = True,
    include_sha: bool = False,
) -> str:
    """Render one changelog bullet, e.g. ``* **api:** handle errors (abc1234)``."""
    parts = ["*"]
    if pc.is_breaking:
        parts.append("[BREAKING]")
    if include_scope and pc.scope:
        parts.append(f"**{pc.scope}:**")
    parts.append(pc.description)
    if include_sha:
        parts.append(f"({pc.commit.short_sha})")
    return " ".join(parts)
