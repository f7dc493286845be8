"""Per-branch release locks.

A release run claims its branch for the whole run. A second claim on the
same branch fails at once with :class:`ConcurrentReleaseError`; it never
waits.

:class:`ReleaseLock` coordinates runs inside one process (and is what
tests use). :class:`FileReleaseLock` coordinates separate processes
through lock files created with ``O_EXCL``. A lock file whose recorded
process has died is treated as stale and replaced.
"""

from __future__ import annotations

import contextlib
import logging
import os
import re
import threading
from pathlib import Path
from typing import TYPE_CHECKING

from release_flow.exceptions import ConcurrentReleaseError

if TYPE_CHECKING:
    from collections.abc import Iterator

logger = logging.getLogger(__name__)


class ReleaseLock:
    """In-process registry of branches with a release in flight."""

    def __init__(self) -> None:
        self._mutex = threading.Lock()
        self._held: set[str] = set()

    def acquire(self, branch: str) -> None:
        with self._mutex:
            if branch in self._held:
                raise ConcurrentReleaseError(
                    f"A release is already running for branch '{branch}'"
                )
            self._held.add(branch)

    def release(self, branch: str) -> None:
        with self._mutex:
            self._held.discard(branch)

    def is_held(self, branch: str) -> bool:
        with self._mutex:
            return branch in self._held

    @contextlib.contextmanager
    def claim(self, branch: str) -> Iterator[None]:
        self.acquire(branch)
        try:
            yield
        finally:
            self.release(branch)


def _is_stale(path: Path) -> bool:
    """True if the process recorded in ``path`` no longer exists."""
    try:
        pid = int(path.read_text().strip())
    except (OSError, ValueError):
        # Unreadable or still being written by its owner.
        return False
    try:
        os.kill(pid, 0)
    except ProcessLookupError:
        return True
    except PermissionError:
        # Alive, owned by another user.
        return False
    return False


class FileReleaseLock(ReleaseLock):
    """Lock files in ``directory``, one per branch."""

    def __init__(self, directory: Path) -> None:
        super().__init__()
        self.directory = directory

    def lock_path(self, branch: str) -> Path:
        safe = re.sub(r"[^A-Za-z0-9._-]", "_", branch)
        return self.directory / f"release-flow-{safe}.lock"

    def acquire(self, branch: str) -> None:
        super().acquire(branch)
        path = self.lock_path(branch)
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            fd = self._create(path, branch)
        except BaseException:
            super().release(branch)
            raise
        with os.fdopen(fd, "w") as f:
            f.write(str(os.getpid()))
        logger.debug("Acquired release lock %s", path)

    def _create(self, path: Path, branch: str) -> int:
        try:
            return os.open(path, os.O_CREAT | os.O_EXCL | os.O_WRONLY)
        except FileExistsError as e:
            if not _is_stale(path):
                raise ConcurrentReleaseError(
                    f"A release is already running for branch '{branch}' (lock file {path})"
                ) from e
        logger.warning("Removing stale release lock %s", path)
        with contextlib.suppress(FileNotFoundError):
            path.unlink()
        try:
            return os.open(path, os.O_CREAT | os.O_EXCL | os.O_WRONLY)
        except FileExistsError as e:
            raise ConcurrentReleaseError(
                f"A release is already running for branch '{branch}' (lock file {path})"
            ) from e

    def release(self, branch: str) -> None:
        path = self.lock_path(branch)
        with contextlib.suppress(FileNotFoundError):
            path.unlink()
        super().release(branch)

    def is_held(self, branch: str) -> bool:
        return super().is_held(branch) or self.lock_path(branch).exists()
