"""Mutable state shared by the steps of a single release run.

One :class:`ReleaseContext` is created per run and handed to every plugin
in turn. It enforces two invariants on behalf of the plugins:

* ``release_type`` and ``next_version`` can be written once. A second
  write raises :class:`~release_flow.exceptions.ContextError` so that one
  plugin cannot silently override another plugin's version decision.
* ``commits`` and ``assets`` only grow. Plugins may add entries but the
  read views are tuples, so entries already recorded cannot be removed
  or reordered.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import Path
from typing import TYPE_CHECKING

from release_flow.exceptions import ContextError

if TYPE_CHECKING:
    from collections.abc import Iterable

    from release_flow.config.models import BranchConfig
    from release_flow.core.version import BumpType, Version
    from release_flow.interfaces import ReleaseHandle
    from release_flow.vcs.git import Commit


@dataclass(frozen=True, slots=True)
class AssetRef:
    """A configured release asset and the files it resolved to."""

    path: str
    label: str | None = None
    files: tuple[Path, ...] = ()

    @property
    def is_wildcard(self) -> bool:
        return any(ch in self.path for ch in "*?[")


@dataclass
class ReleaseContext:
    """State of one release run."""

    branch: str
    cwd: Path
    channel: BranchConfig | None = None
    last_version: Version | None = None
    last_tag: str | None = None
    head: str | None = None
    release_date: datetime = field(default_factory=lambda: datetime.now(UTC))
    dry_run: bool = False
    next_tag: str | None = None
    notes: str | None = None
    release: ReleaseHandle | None = None
    warnings: list[str] = field(default_factory=list)
    errors: list[Exception] = field(default_factory=list)
    _commits: list[Commit] = field(default_factory=list, repr=False)
    _assets: list[AssetRef] = field(default_factory=list, repr=False)
    _changed_files: set[Path] = field(default_factory=set, repr=False)
    _release_type: BumpType | None = field(default=None, repr=False)
    _next_version: Version | None = field(default=None, repr=False)

    # -------------------------------------------------------------------------
    # Append-once fields
    # -------------------------------------------------------------------------

    @property
    def release_type(self) -> BumpType | None:
        return self._release_type

    def set_release_type(self, value: BumpType) -> None:
        if self._release_type is not None:
            raise ContextError(
                f"release_type already set to '{self._release_type}', refusing '{value}'"
            )
        self._release_type = value

    @property
    def next_version(self) -> Version | None:
        return self._next_version

    def set_next_version(self, value: Version) -> None:
        if self._next_version is not None:
            raise ContextError(
                f"next_version already set to {self._next_version}, refusing {value}"
            )
        if self.last_version is not None and value <= self.last_version:
            raise ContextError(f"next_version {value} is not greater than {self.last_version}")
        self._next_version = value

    # -------------------------------------------------------------------------
    # Append-only sequences
    # -------------------------------------------------------------------------

    @property
    def commits(self) -> tuple[Commit, ...]:
        return tuple(self._commits)

    def add_commits(self, commits: Iterable[Commit]) -> None:
        self._commits.extend(commits)

    @property
    def assets(self) -> tuple[AssetRef, ...]:
        return tuple(self._assets)

    def add_asset(self, asset: AssetRef) -> None:
        self._assets.append(asset)

    @property
    def changed_files(self) -> tuple[Path, ...]:
        return tuple(sorted(self._changed_files))

    def record_changed_file(self, path: Path) -> None:
        self._changed_files.add(path)

    # -------------------------------------------------------------------------
    # Notes, warnings, errors
    # -------------------------------------------------------------------------

    def append_notes(self, text: str) -> None:
        text = text.strip("\n")
        if not text:
            return
        self.notes = f"{self.notes}\n\n{text}" if self.notes else text

    def warn(self, message: str) -> None:
        self.warnings.append(message)

    def record_error(self, error: Exception) -> None:
        self.errors.append(error)
