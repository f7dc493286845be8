"""Pipeline steps and the interfaces of everything the pipeline talks to.

Plugins are plain classes. A plugin takes part in a step by listing it in
its ``steps`` class attribute and providing the method named by
:attr:`Step.method`. The per-step protocols below document the expected
signature of each method and are checked when a plugin is registered.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, ClassVar, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Sequence
    from pathlib import Path

    from pydantic import BaseModel

    from release_flow.core.context import AssetRef, ReleaseContext
    from release_flow.vcs.git import Commit


class Step(str, Enum):
    """Pipeline steps. Declaration order is execution order."""

    ANALYZE_COMMITS = "analyze-commits"
    GENERATE_NOTES = "generate-notes"
    UPDATE_FILES = "update-changelog-and-manifests"
    PREPARE = "prepare-assets"
    PUBLISH = "publish-release"
    COMMIT_BACK = "commit-back"

    def __str__(self) -> str:
        return self.value

    @property
    def method(self) -> str:
        """Name of the plugin method implementing this step."""
        return _STEP_METHODS[self]

    @property
    def protocol(self) -> type:
        """Protocol a plugin must satisfy to take part in this step."""
        return _STEP_PROTOCOLS[self]


_STEP_METHODS = {
    Step.ANALYZE_COMMITS: "analyze_commits",
    Step.GENERATE_NOTES: "generate_notes",
    Step.UPDATE_FILES: "update_files",
    Step.PREPARE: "prepare",
    Step.PUBLISH: "publish",
    Step.COMMIT_BACK: "commit_back",
}

STEP_ORDER: tuple[Step, ...] = tuple(Step)


@dataclass(frozen=True, slots=True)
class ReleaseHandle:
    """A release as created on the hosting service."""

    id: int | str
    tag: str
    url: str | None = None
    asset_urls: tuple[str, ...] = field(default_factory=tuple)


# =============================================================================
# Collaborators
# =============================================================================


@runtime_checkable
class VersionControl(Protocol):
    path: Path

    def current_branch(self) -> str: ...

    def head_sha(self) -> str | None: ...

    def list_tags(self) -> list[str]: ...

    def get_commits_since_tag(self, tag: str | None) -> list[Commit]: ...

    def commit_and_tag(
        self,
        files: Sequence[Path],
        message: str,
        tag: str,
        *,
        ref: str | None = None,
    ) -> str | None: ...

    def push(self, branch: str, tag: str | None = None) -> None: ...


@runtime_checkable
class ReleaseHost(Protocol):
    def publish(
        self,
        tag: str,
        name: str,
        notes: str,
        assets: Sequence[AssetRef],
        *,
        prerelease: bool = False,
        target: str | None = None,
    ) -> ReleaseHandle:
        """Create the release for ``tag`` at commit ``target``.

        Must raise DuplicateReleaseError when a release for the tag exists.
        """
        ...


@dataclass
class Services:
    """Collaborators handed to plugins when they are constructed."""

    cwd: Path
    repo: VersionControl | None = None
    host: ReleaseHost | None = None
    repository_url: str | None = None


# =============================================================================
# Plugins
# =============================================================================


class Plugin(Protocol):
    name: ClassVar[str]
    steps: ClassVar[frozenset[Step]]
    Options: ClassVar[type[BaseModel]]


@runtime_checkable
class CommitAnalyzer(Protocol):
    def analyze_commits(self, context: ReleaseContext) -> None: ...


@runtime_checkable
class NotesGenerator(Protocol):
    def generate_notes(self, context: ReleaseContext) -> None: ...


@runtime_checkable
class FileMutator(Protocol):
    def update_files(self, context: ReleaseContext) -> None: ...


@runtime_checkable
class AssetPreparer(Protocol):
    def prepare(self, context: ReleaseContext) -> None: ...


@runtime_checkable
class Publisher(Protocol):
    def publish(self, context: ReleaseContext) -> None: ...


@runtime_checkable
class Finalizer(Protocol):
    def commit_back(self, context: ReleaseContext) -> None: ...


StepPlugin = CommitAnalyzer | NotesGenerator | FileMutator | AssetPreparer | Publisher | Finalizer

_STEP_PROTOCOLS: dict[Step, type] = {
    Step.ANALYZE_COMMITS: CommitAnalyzer,
    Step.GENERATE_NOTES: NotesGenerator,
    Step.UPDATE_FILES: FileMutator,
    Step.PREPARE: AssetPreparer,
    Step.PUBLISH: Publisher,
    Step.COMMIT_BACK: Finalizer,
}
