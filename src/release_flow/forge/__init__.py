"""Release hosting services."""

from __future__ import annotations

from release_flow.forge.github import GitHubReleaseHost, parse_github_repo

__all__ = ["GitHubReleaseHost", "parse_github_repo"]
