"""Version control access."""

from __future__ import annotations

from release_flow.vcs.git import Commit, GitRepository

__all__ = ["Commit", "GitRepository"]
