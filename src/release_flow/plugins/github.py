"""Publish the release and its assets to GitHub."""

from __future__ import annotations

import logging
import os
from typing import TYPE_CHECKING, Any, ClassVar

from pydantic import Field, model_validator

from release_flow.config.models import PluginOptions
from release_flow.core.assets import resolve_assets
from release_flow.core.context import AssetRef
from release_flow.core.templates import context_variables, render
from release_flow.exceptions import ConfigurationError, ContextError
from release_flow.forge.github import DEFAULT_API_URL, GitHubReleaseHost, parse_github_repo
from release_flow.interfaces import Step

if TYPE_CHECKING:
    from release_flow.core.context import ReleaseContext
    from release_flow.interfaces import ReleaseHost, Services

logger = logging.getLogger(__name__)

FALLBACK_TOKEN_ENV = "GH_TOKEN"


class GitHubAsset(PluginOptions):
    path: str
    label: str | None = None

    @model_validator(mode="before")
    @classmethod
    def _from_path(cls, value: Any) -> Any:
        if isinstance(value, str):
            return {"path": value}
        return value


class GitHubOptions(PluginOptions):
    assets: list[GitHubAsset] = Field(default_factory=list)
    owner: str | None = None
    repo: str | None = None
    api_url: str = DEFAULT_API_URL
    token_env: str = "GITHUB_TOKEN"
    release_name: str = "${tag}"


class GitHubPlugin:
    name: ClassVar[str] = "github"
    steps: ClassVar[frozenset[Step]] = frozenset({Step.PUBLISH})
    Options: ClassVar[type[GitHubOptions]] = GitHubOptions

    def __init__(self, options: GitHubOptions, services: Services) -> None:
        self.options = options
        self.host: ReleaseHost = services.host or self._create_host(services)

    def _create_host(self, services: Services) -> GitHubReleaseHost:
        owner, repo = self.options.owner, self.options.repo
        if not (owner and repo) and services.repository_url:
            parsed = parse_github_repo(services.repository_url)
            if parsed is not None:
                owner, repo = owner or parsed[0], repo or parsed[1]
        if not (owner and repo):
            raise ConfigurationError(
                "github plugin needs 'owner' and 'repo' options or a GitHub repository_url"
            )

        token = os.environ.get(self.options.token_env) or os.environ.get(FALLBACK_TOKEN_ENV)
        if not token:
            raise ConfigurationError(
                f"github plugin needs a token in ${self.options.token_env} or ${FALLBACK_TOKEN_ENV}"
            )
        return GitHubReleaseHost(owner, repo, token, api_url=self.options.api_url)

    def publish(self, context: ReleaseContext) -> None:
        if context.next_tag is None:
            raise ContextError("Publishing needs next_tag to be set")

        configured = [AssetRef(path=a.path, label=a.label) for a in self.options.assets]
        for asset in resolve_assets(configured, context.cwd):
            if not asset.files:
                context.warn(f"Asset pattern '{asset.path}' matched no files")
            context.add_asset(asset)

        name = render(self.options.release_name, context_variables(context))
        prerelease = bool(context.channel and context.channel.is_prerelease)
        context.release = self.host.publish(
            context.next_tag,
            name,
            context.notes or "",
            [asset for asset in context.assets if asset.files],
            prerelease=prerelease,
            target=context.head,
        )
        logger.info("Published %s", context.release.url or context.next_tag)
