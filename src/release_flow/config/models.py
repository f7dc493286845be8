"""Pydantic models for release-flow configuration.

Keys may be written in snake_case or in the camelCase used by
semantic-release configuration files (``tagFormat``, ``changelogFile``).
Unknown keys are rejected.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from release_flow.core.version import InvalidVersionError, Version


class PluginOptions(BaseModel):
    """Base class for configuration sections and plugin option models."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
    )


class CommitsConfig(PluginOptions):
    """How commits are classified into release types."""

    preset: Literal["conventionalcommits", "angular"] = "conventionalcommits"
    types_major: list[str] = Field(default_factory=list)
    types_minor: list[str] = Field(default_factory=lambda: ["feat"])
    types_patch: list[str] = Field(default_factory=lambda: ["fix", "perf"])
    breaking_pattern: str = r"BREAKING[ -]CHANGE:"
    skip_release_patterns: list[str] = Field(
        default_factory=lambda: ["[skip release]", "[release skip]", "[no release]"]
    )
    scope_regex: str | None = None


class ReplacementRule(PluginOptions):
    """Rewrite the first line matching ``from`` in each of ``files``."""

    files: list[str]
    from_: str = Field(alias="from")
    to: str

    @field_validator("files", mode="before")
    @classmethod
    def _single_file(cls, value: Any) -> Any:
        if isinstance(value, str):
            return [value]
        return value

    @field_validator("files")
    @classmethod
    def _not_empty(cls, value: list[str]) -> list[str]:
        if not value:
            raise ValueError("at least one file pattern is required")
        return value


class BranchConfig(PluginOptions):
    """A release channel: a branch allowed to produce releases."""

    name: str
    prerelease: bool | str = False
    channel: str | None = None

    @model_validator(mode="before")
    @classmethod
    def _from_name(cls, value: Any) -> Any:
        if isinstance(value, str):
            return {"name": value}
        return value

    @property
    def is_prerelease(self) -> bool:
        return bool(self.prerelease)


class PluginBinding(PluginOptions):
    """One entry of the ``plugins`` list.

    Accepts ``"name"``, ``["name", {options}]`` or
    ``{"name": ..., "options": {...}}``.
    """

    name: str
    options: dict[str, Any] = Field(default_factory=dict)

    @model_validator(mode="before")
    @classmethod
    def _from_shorthand(cls, value: Any) -> Any:
        if isinstance(value, str):
            return {"name": value}
        if isinstance(value, (list, tuple)):
            if not 1 <= len(value) <= 2:
                raise ValueError("plugin entry must be [name] or [name, options]")
            options = value[1] if len(value) == 2 else {}
            return {"name": value[0], "options": options or {}}
        return value


def _default_plugins() -> list[PluginBinding]:
    return [
        PluginBinding(name="commit-analyzer"),
        PluginBinding(name="release-notes-generator"),
    ]


class ReleaseFlowConfig(PluginOptions):
    """Top-level release-flow configuration."""

    branches: list[BranchConfig] = Field(
        default_factory=lambda: [BranchConfig(name="main")]
    )
    plugins: list[PluginBinding] = Field(default_factory=_default_plugins)
    tag_format: str = "v${version}"
    initial_version: str = "1.0.0"
    dry_run: bool = False
    repository_url: str | None = None

    @field_validator("branches", mode="before")
    @classmethod
    def _single_branch(cls, value: Any) -> Any:
        if isinstance(value, (str, dict)):
            return [value]
        return value

    @field_validator("tag_format")
    @classmethod
    def _check_tag_format(cls, value: str) -> str:
        if value.count("${version}") != 1:
            raise ValueError("tag_format must contain '${version}' exactly once")
        return value

    @field_validator("initial_version")
    @classmethod
    def _check_initial_version(cls, value: str) -> str:
        try:
            Version.parse(value)
        except InvalidVersionError as e:
            raise ValueError(str(e)) from e
        return value

    @property
    def effective_initial_version(self) -> Version:
        return Version.parse(self.initial_version)

    @property
    def branch_names(self) -> list[str]:
        return [branch.name for branch in self.branches]
