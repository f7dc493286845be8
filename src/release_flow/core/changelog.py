"""Release notes rendering and changelog file maintenance.

Notes are rendered from classified commits in a fixed section order, so
the same commits, version and date always produce the same text.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from release_flow.core.commits import (
    format_commit_for_changelog,
    get_breaking_changes,
    group_commits_by_type,
)
from release_flow.exceptions import ChangelogError

if TYPE_CHECKING:
    from collections.abc import Collection, Sequence
    from datetime import datetime
    from pathlib import Path

    from release_flow.core.commits import ParsedCommit
    from release_flow.core.version import Version

logger = logging.getLogger(__name__)

# Section order follows the conventionalcommits preset.
SECTION_TITLES: dict[str, str] = {
    "feat": "Features",
    "fix": "Bug Fixes",
    "perf": "Performance Improvements",
    "revert": "Reverts",
    "docs": "Documentation",
    "style": "Styles",
    "chore": "Miscellaneous Chores",
    "refactor": "Code Refactoring",
    "test": "Tests",
    "build": "Build System",
    "ci": "Continuous Integration",
}

DEFAULT_HIDDEN_TYPES = frozenset({"docs", "style", "chore", "refactor", "test", "build", "ci"})

BREAKING_TITLE = "### ⚠ BREAKING CHANGES"


def render_heading(
    version: Version,
    release_date: datetime,
    *,
    tag: str | None = None,
    previous_tag: str | None = None,
    repository_url: str | None = None,
) -> str:
    date = release_date.strftime("%Y-%m-%d")
    if repository_url and tag and previous_tag:
        url = f"{repository_url.rstrip('/')}/compare/{previous_tag}...{tag}"
        return f"## [{version}]({url}) ({date})"
    return f"## {version} ({date})"


def render_release_notes(
    version: Version,
    parsed: Sequence[ParsedCommit],
    release_date: datetime,
    *,
    hidden_types: Collection[str] = DEFAULT_HIDDEN_TYPES,
    include_scope: bool = True,
    include_sha: bool = True,
    tag: str | None = None,
    previous_tag: str | None = None,
    repository_url: str | None = None,
) -> str:
    """Render the notes for one release.

    Args:
        version: Version being released
        parsed: Classified commits, oldest first
        release_date: Date recorded in the heading
        hidden_types: Commit types left out of the notes
        include_scope: Prefix entries with their scope
        include_sha: Suffix entries with the short SHA

    Returns:
        Markdown starting with a ``##`` heading
    """
    lines = [
        render_heading(
            version,
            release_date,
            tag=tag,
            previous_tag=previous_tag,
            repository_url=repository_url,
        ),
        "",
    ]

    def entry(pc: ParsedCommit) -> str:
        return format_commit_for_changelog(
            pc,
            include_scope=include_scope,
            include_sha=include_sha,
        )

    breaking = get_breaking_changes(parsed)
    if breaking:
        lines.append(BREAKING_TITLE)
        lines.append("")
        for pc in breaking:
            lines.append(entry(pc).replace("[BREAKING] ", "", 1))
        lines.append("")

    grouped = group_commits_by_type(pc for pc in parsed if not pc.is_breaking)
    for commit_type, title in SECTION_TITLES.items():
        if commit_type in hidden_types:
            continue
        entries = grouped.get(commit_type, [])
        if not entries:
            continue
        lines.append(f"### {title}")
        lines.append("")
        lines.extend(entry(pc) for pc in entries)
        lines.append("")

    return "\n".join(lines).rstrip() + "\n"


def update_changelog_file(path: Path, notes: str, title: str | None = None) -> Path:
    """Insert ``notes`` at the top of a changelog file.

    The title line, when given, stays first; earlier entries follow the
    new notes. The file is created if missing.

    Raises:
        ChangelogError: If the file cannot be read or written
    """
    try:
        existing = path.read_text(encoding="utf-8") if path.exists() else ""
    except OSError as e:
        raise ChangelogError(f"Cannot read changelog {path}: {e}") from e

    rest = existing
    if title and rest.lstrip().startswith(title):
        rest = rest.lstrip()[len(title) :]

    parts = []
    if title:
        parts.append(title)
    parts.append(notes.strip())
    if rest.strip():
        parts.append(rest.strip())
    content = "\n\n".join(parts) + "\n"

    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
    except OSError as e:
        raise ChangelogError(f"Cannot write changelog {path}: {e}") from e
    logger.info("Updated %s", path)
    return path
