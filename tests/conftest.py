"""Shared fixtures: sample commits, in-memory collaborators and git repositories."""

from __future__ import annotations

import hashlib
import shutil
import subprocess
from datetime import UTC, datetime
from pathlib import Path
from typing import TYPE_CHECKING, Any

import pytest

from release_flow.config.models import ReleaseFlowConfig
from release_flow.core.lock import ReleaseLock
from release_flow.exceptions import DuplicateReleaseError, GitError
from release_flow.interfaces import ReleaseHandle
from release_flow.vcs.git import Commit

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from release_flow.core.context import AssetRef

COMMIT_DATE = datetime(2024, 1, 1, 12, 0, tzinfo=UTC)
RELEASE_DATE = datetime(2026, 10, 19, 9, 30, tzinfo=UTC)


def make_commit(message: str, sha: str | None = None) -> Commit:
    """Build a commit with a SHA derived from its message."""
    if sha is None:
        sha = hashlib.sha1(message.encode()).hexdigest()
    return Commit(sha, message, "Test", "test@test.com", COMMIT_DATE)


class FakeRepository:
    """In-memory stand-in for GitRepository.

    ``tags`` maps a tag name to the number of history entries it covers,
    so the commits since a tag are ``history[count:]``.
    """

    def __init__(
        self,
        path: Path,
        messages: Sequence[str] = (),
        *,
        tags: dict[str, int] | None = None,
        branch: str = "main",
    ) -> None:
        self.path = path
        self.branch = branch
        self.history: list[Commit] = []
        self.tags: dict[str, int] = dict(tags or {})
        self.commit_calls: list[dict[str, Any]] = []
        self.push_calls: list[tuple[str, str | None]] = []
        self.fail_reads = False
        for message in messages:
            self.add_commit(message)

    def add_commit(self, message: str) -> Commit:
        commit = make_commit(message, sha=f"{len(self.history):02d}" + "a" * 38)
        self.history.append(commit)
        return commit

    def tag_head(self, tag: str) -> None:
        self.tags[tag] = len(self.history)

    def current_branch(self) -> str:
        return self.branch

    def head_sha(self) -> str | None:
        return self.history[-1].sha if self.history else None

    def list_tags(self) -> list[str]:
        if self.fail_reads:
            raise GitError("git tag failed", stderr="fatal: unable to access repository")
        return list(self.tags)

    def get_commits_since_tag(self, tag: str | None) -> list[Commit]:
        if tag is None:
            return list(self.history)
        return self.history[self.tags[tag] :]

    def commit_and_tag(
        self,
        files: Sequence[Path],
        message: str,
        tag: str,
        *,
        ref: str | None = None,
    ) -> str | None:
        self.commit_calls.append({"files": list(files), "message": message, "tag": tag, "ref": ref})
        commit = self.add_commit(message)
        if tag not in self.tags:
            if ref is None:
                self.tags[tag] = len(self.history)
            else:
                shas = [c.sha for c in self.history]
                self.tags[tag] = shas.index(ref) + 1
        return commit.sha

    def push(self, branch: str, tag: str | None = None) -> None:
        self.push_calls.append((branch, tag))


class FakeHost:
    """Release host recording publish calls."""

    def __init__(self, existing: Sequence[str] = ()) -> None:
        self.existing = set(existing)
        self.calls: list[dict[str, Any]] = []

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
        self.calls.append(
            {
                "tag": tag,
                "name": name,
                "notes": notes,
                "assets": list(assets),
                "prerelease": prerelease,
                "target": target,
            }
        )
        if tag in self.existing:
            raise DuplicateReleaseError(f"A release for {tag} already exists")
        self.existing.add(tag)
        url = f"https://example.test/releases/{tag}"
        return ReleaseHandle(id=len(self.calls), tag=tag, url=url)


# =============================================================================
# Commit fixtures
# =============================================================================


@pytest.fixture
def feat_commit() -> Commit:
    return Commit("feat123abcdef", "feat: add user authentication", "T", "t@t.com", COMMIT_DATE)


@pytest.fixture
def fix_commit() -> Commit:
    return Commit("fix456abcdef", "fix(core): handle empty config", "T", "t@t.com", COMMIT_DATE)


@pytest.fixture
def breaking_commit() -> Commit:
    return Commit(
        "brk789abcdef",
        "feat(api)!: remove v1 endpoints\n\nBREAKING CHANGE: v1 is gone",
        "T",
        "t@t.com",
        COMMIT_DATE,
    )


@pytest.fixture
def sample_commits(
    feat_commit: Commit, fix_commit: Commit, breaking_commit: Commit
) -> list[Commit]:
    return [
        feat_commit,
        fix_commit,
        Commit("doc000abcdef", "docs: update readme", "T", "t@t.com", COMMIT_DATE),
        Commit("cho111abcdef", "chore: bump dependencies", "T", "t@t.com", COMMIT_DATE),
        breaking_commit,
    ]


# =============================================================================
# Pipeline fixtures
# =============================================================================


@pytest.fixture
def clock() -> Callable[[], datetime]:
    return lambda: RELEASE_DATE


@pytest.fixture
def release_lock() -> ReleaseLock:
    return ReleaseLock()


@pytest.fixture
def fake_host() -> FakeHost:
    return FakeHost()


@pytest.fixture
def workspace(tmp_path: Path) -> Path:
    """A working copy with two crate manifests."""
    for crate in ("alpha", "beta"):
        manifest = tmp_path / "crates" / crate / "Cargo.toml"
        manifest.parent.mkdir(parents=True)
        manifest.write_text(f'[package]\nname = "{crate}"\nversion = "1.2.3"\nedition = "2021"\n')
    return tmp_path


def full_config(**overrides: Any) -> ReleaseFlowConfig:
    """Configuration shaped like a real multi-crate release setup."""
    data: dict[str, Any] = {
        "branches": ["main", {"name": "next", "prerelease": "rc"}],
        "plugins": [
            ["@semantic-release/commit-analyzer", {"preset": "conventionalcommits"}],
            ["@semantic-release/release-notes-generator", {"preset": "conventionalcommits"}],
            [
                "@semantic-release/changelog",
                {"changelogFile": "CHANGELOG.md", "changelogTitle": "# Test project"},
            ],
            [
                "@google/semantic-release-replace-plugin",
                {
                    "replacements": [
                        {
                            "files": ["crates/*/Cargo.toml"],
                            "from": r'^version = "\d+\.\d+\.\d+"$',
                            "to": 'version = "${nextRelease.version}"',
                        }
                    ]
                },
            ],
            [
                "@semantic-release/exec",
                {"prepareCmd": "mkdir -p target && echo ${version} > target/app.wasm"},
            ],
            ["@semantic-release/github", {"assets": [{"path": "./target/app.wasm"}]}],
            [
                "@semantic-release/git",
                {
                    "assets": ["CHANGELOG.md", "crates/*/Cargo.toml"],
                    "message": "chore(release): perform release ${nextRelease.version}",
                },
            ],
        ],
    }
    data.update(overrides)
    return ReleaseFlowConfig.model_validate(data)


# =============================================================================
# Real git repositories
# =============================================================================

requires_git = pytest.mark.skipif(shutil.which("git") is None, reason="git is not installed")


def git(path: Path, *args: str) -> str:
    result = subprocess.run(
        ["git", *args],
        cwd=path,
        capture_output=True,
        text=True,
        check=True,
    )
    return result.stdout.strip()


def git_commit(path: Path, message: str, filename: str = "notes.txt") -> None:
    target = path / filename
    with target.open("a") as f:
        f.write(message + "\n")
    git(path, "add", filename)
    git(path, "commit", "-q", "-m", message)


@pytest.fixture
def temp_git_repo(tmp_path: Path) -> Path:
    """An initialised git repository on branch ``main`` with one commit tagged v1.2.3."""
    if shutil.which("git") is None:
        pytest.skip("git is not installed")
    repo = tmp_path / "repo"
    repo.mkdir()
    git(repo, "init", "-q")
    git(repo, "checkout", "-q", "-b", "main")
    git(repo, "config", "user.name", "Test")
    git(repo, "config", "user.email", "test@test.com")
    git(repo, "config", "commit.gpgsign", "false")
    git(repo, "config", "tag.gpgsign", "false")
    git_commit(repo, "chore: initial commit")
    git(repo, "tag", "v1.2.3")
    return repo
