"""Git repository access through the ``git`` executable.

Only the handful of operations a release run needs are exposed:
reading the branch, tags and commit history, and committing, tagging
and pushing the release changes.
"""

from __future__ import annotations

import logging
import subprocess
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING

from release_flow.exceptions import GitError

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

logger = logging.getLogger(__name__)

_FIELD_SEP = "\x1f"
_RECORD_SEP = "\x1e"
_LOG_FORMAT = _FIELD_SEP.join(["%H", "%an", "%ae", "%aI", "%B"]) + _RECORD_SEP


@dataclass(frozen=True, slots=True)
class Commit:
    """A commit as read from version control. Immutable."""

    sha: str
    message: str
    author_name: str
    author_email: str
    date: datetime

    @property
    def short_sha(self) -> str:
        return self.sha[:7]

    @property
    def subject(self) -> str:
        return self.message.split("\n", 1)[0].strip()


class GitRepository:
    """Thin wrapper over the git CLI rooted at ``path``."""

    def __init__(self, path: Path, *, remote: str = "origin") -> None:
        self.path = Path(path).resolve()
        self.remote = remote
        if not (self.path / ".git").exists():
            raise GitError(f"Not a git repository: {self.path}")

    def _run(self, *args: str, check: bool = True) -> subprocess.CompletedProcess[str]:
        cmd = ["git", *args]
        logger.debug("Running %s", " ".join(cmd))
        try:
            result = subprocess.run(
                cmd,
                cwd=self.path,
                capture_output=True,
                text=True,
                check=False,
            )
        except FileNotFoundError as e:
            raise GitError("git executable not found") from e
        if check and result.returncode != 0:
            raise GitError(
                f"git {args[0]} failed with exit code {result.returncode}",
                stderr=result.stderr,
            )
        return result

    # -------------------------------------------------------------------------
    # Read interface
    # -------------------------------------------------------------------------

    def current_branch(self) -> str:
        return self._run("rev-parse", "--abbrev-ref", "HEAD").stdout.strip()

    def head_sha(self) -> str | None:
        result = self._run("rev-parse", "--verify", "-q", "HEAD", check=False)
        if result.returncode != 0:
            return None
        return result.stdout.strip()

    def remote_url(self) -> str | None:
        result = self._run("remote", "get-url", self.remote, check=False)
        if result.returncode != 0:
            return None
        return result.stdout.strip() or None

    def list_tags(self) -> list[str]:
        output = self._run("tag", "--list").stdout
        return [line.strip() for line in output.splitlines() if line.strip()]

    def tag_exists(self, tag: str) -> bool:
        result = self._run("rev-parse", "--verify", "-q", f"refs/tags/{tag}", check=False)
        return result.returncode == 0

    def get_commits_since_tag(self, tag: str | None) -> list[Commit]:
        """Return commits after ``tag`` up to HEAD, oldest first.

        With ``tag=None`` the whole history reachable from HEAD is returned.
        """
        if self.head_sha() is None:
            return []
        rev_range = f"{tag}..HEAD" if tag else "HEAD"
        output = self._run("log", "--reverse", f"--format={_LOG_FORMAT}", rev_range).stdout
        return _parse_log(output)

    # -------------------------------------------------------------------------
    # Write interface
    # -------------------------------------------------------------------------

    def commit_and_tag(
        self,
        files: Sequence[Path],
        message: str,
        tag: str,
        *,
        ref: str | None = None,
    ) -> str | None:
        """Commit ``files`` and create ``tag``.

        The tag points at ``ref`` when given, otherwise at the new HEAD.
        When none of the files changed, no commit is created. An existing
        local tag is left untouched.

        Returns:
            SHA of the release commit, or None if nothing was committed
        """
        commit_sha: str | None = None
        if files:
            self._run("add", "--", *(str(f) for f in files))
            staged = self._run("diff", "--cached", "--quiet", check=False)
            if staged.returncode != 0:
                self._run("commit", "-m", message)
                commit_sha = self.head_sha()
            else:
                logger.info("No release changes to commit")

        if self.tag_exists(tag):
            logger.info("Tag %s already exists locally", tag)
        else:
            self._run("tag", tag, ref or "HEAD")
        return commit_sha

    def push(self, branch: str, tag: str | None = None) -> None:
        self._run("push", self.remote, f"HEAD:refs/heads/{branch}")
        if tag:
            self._run("push", self.remote, f"refs/tags/{tag}")


def _parse_log(output: str) -> list[Commit]:
    commits = []
    for record in output.split(_RECORD_SEP):
        record = record.strip("\n")
        if not record.strip():
            continue
        sha, author_name, author_email, date, message = record.split(_FIELD_SEP, 4)
        commits.append(
            Commit(
                sha=sha.strip(),
                message=message.strip(),
                author_name=author_name,
                author_email=author_email,
                date=datetime.fromisoformat(date),
            )
        )
    return commits


def changed_paths(repo_root: Path, paths: Iterable[Path]) -> list[Path]:
    """Express ``paths`` relative to ``repo_root`` for ``git add``."""
    root = repo_root.resolve()
    result = []
    for path in paths:
        resolved = path if path.is_absolute() else root / path
        try:
            result.append(resolved.resolve().relative_to(root))
        except ValueError:
            result.append(resolved)
    return result
