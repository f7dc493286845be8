"""Core business logic for release-flow.

This package contains the fundamental building blocks:
- Version parsing and bumping
- Conventional commit classification
- Release notes and changelog rendering
- The release context, pipeline and stage registry
"""

from __future__ import annotations

from release_flow.core.changelog import render_release_notes, update_changelog_file
from release_flow.core.commits import (
    ParsedCommit,
    calculate_bump,
    filter_skip_release_commits,
    format_commit_for_changelog,
    get_breaking_changes,
    group_commits_by_type,
    parse_commits,
)
from release_flow.core.context import AssetRef, ReleaseContext
from release_flow.core.version import BumpType, Version, parse_version

__all__ = [
    "AssetRef",
    # Version
    "BumpType",
    # Commits
    "ParsedCommit",
    "ReleaseContext",
    "Version",
    "calculate_bump",
    "filter_skip_release_commits",
    "format_commit_for_changelog",
    "get_breaking_changes",
    "group_commits_by_type",
    "parse_commits",
    "parse_version",
    # Changelog
    "render_release_notes",
    "update_changelog_file",
]
