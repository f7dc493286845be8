"""Version string rewriting in build manifests.

Each rule names files (globs relative to the project root), a regex and
a replacement template. In every matched file only the first line the
regex matches is rewritten, and only the matched span of that line, so
formatting and comments elsewhere are preserved.

All rules are planned before any file is written. A rule that would do
nothing, because its glob matches no file or a file has no matching
line, is a configuration error rather than a silent success.
"""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING

from release_flow.core.templates import render
from release_flow.exceptions import ManifestRewriteError

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping
    from pathlib import Path

    from release_flow.config.models import ReplacementRule

logger = logging.getLogger(__name__)


def _has_magic(pattern: str) -> bool:
    return any(ch in pattern for ch in "*?[")


def expand_files(patterns: Iterable[str], cwd: Path) -> list[Path]:
    """Expand file globs, failing on any pattern that matches nothing.

    Raises:
        ManifestRewriteError: If a pattern matches no file
    """
    files: list[Path] = []
    for pattern in patterns:
        relative = pattern.removeprefix("./")
        if _has_magic(relative):
            matches = sorted(p for p in cwd.glob(relative) if p.is_file())
        else:
            candidate = cwd / relative
            matches = [candidate] if candidate.is_file() else []
        if not matches:
            raise ManifestRewriteError(f"No file matches '{pattern}'")
        for path in matches:
            if path not in files:
                files.append(path)
    return files


def replace_first_line(content: str, pattern: re.Pattern[str], replacement: str) -> str | None:
    """Rewrite the first line of ``content`` matching ``pattern``.

    Returns:
        The new content, or None if no line matches
    """
    lines = content.splitlines(keepends=True)
    for index, line in enumerate(lines):
        if pattern.search(line):
            lines[index] = pattern.sub(lambda _m: replacement, line, count=1)
            return "".join(lines)
    return None


def rewrite_manifests(
    rules: Iterable[ReplacementRule],
    variables: Mapping[str, object],
    cwd: Path,
) -> list[Path]:
    """Apply replacement rules to the working copy.

    Args:
        rules: Replacement rules from configuration
        variables: Template variables (``version`` and friends)
        cwd: Project root the globs are relative to

    Returns:
        Rewritten files, in the order they were first touched

    Raises:
        ManifestRewriteError: If a glob matches no file, a file cannot be
            read or written, or a file has no line matching the pattern
    """
    planned: dict[Path, str] = {}

    for rule in rules:
        try:
            pattern = re.compile(rule.from_, re.MULTILINE)
        except re.error as e:
            raise ManifestRewriteError(f"Invalid pattern {rule.from_!r}: {e}") from e
        replacement = render(rule.to, variables)

        for path in expand_files(rule.files, cwd):
            if path not in planned:
                try:
                    planned[path] = path.read_text(encoding="utf-8")
                except OSError as e:
                    raise ManifestRewriteError(f"Cannot read {path}: {e}") from e
            updated = replace_first_line(planned[path], pattern, replacement)
            if updated is None:
                raise ManifestRewriteError(f"Pattern {rule.from_!r} matches no line in {path}")
            planned[path] = updated

    for path, content in planned.items():
        try:
            path.write_text(content, encoding="utf-8")
        except OSError as e:
            raise ManifestRewriteError(f"Cannot write {path}: {e}") from e
        logger.info("Rewrote version in %s", path)

    return list(planned)
