"""Tests for conventional commit parsing."""

from __future__ import annotations

from datetime import datetime

from release_flow.config.models import CommitsConfig
from release_flow.core.commits import (
    ParsedCommit,
    calculate_bump,
    filter_skip_release_commits,
    format_commit_for_changelog,
    get_breaking_changes,
    group_commits_by_type,
    parse_commits,
)
from release_flow.core.version import BumpType
from release_flow.vcs.git import Commit

BREAKING = r"BREAKING[ -]CHANGE:"


def _commit(message: str, sha: str = "abc1234def") -> Commit:
    return Commit(
        sha=sha,
        message=message,
        author_name="Test",
        author_email="test@test.com",
        date=datetime.now(),
    )


class TestParsedCommit:
    """Tests for ParsedCommit.from_commit()."""

    def test_parse_simple_feat(self):
        """Parse a simple feat commit."""
        pc = ParsedCommit.from_commit(_commit("feat: add new feature"), BREAKING)

        assert pc.is_conventional
        assert pc.commit_type == "feat"
        assert pc.scope is None
        assert pc.description == "add new feature"
        assert not pc.is_breaking

    def test_parse_with_scope(self):
        """Parse commit with scope."""
        pc = ParsedCommit.from_commit(_commit("fix(api): handle null response"), BREAKING)

        assert pc.commit_type == "fix"
        assert pc.scope == "api"
        assert pc.description == "handle null response"

    def test_parse_breaking_with_exclamation(self):
        """Parse breaking change with ! indicator."""
        pc = ParsedCommit.from_commit(_commit("feat!: redesign API"), BREAKING)

        assert pc.is_breaking
        assert pc.commit_type == "feat"

    def test_parse_breaking_with_scope_and_exclamation(self):
        """Parse breaking change with scope and ! indicator."""
        pc = ParsedCommit.from_commit(_commit("feat(core)!: change config format"), BREAKING)

        assert pc.is_breaking
        assert pc.scope == "core"

    def test_parse_breaking_in_body(self):
        """A BREAKING CHANGE footer marks the commit as breaking."""
        message = "refactor: rework storage\n\nBREAKING CHANGE: old files are unreadable"
        pc = ParsedCommit.from_commit(_commit(message), BREAKING)

        assert pc.is_breaking
        assert pc.commit_type == "refactor"

    def test_parse_breaking_with_hyphen(self):
        """BREAKING-CHANGE is accepted as well."""
        message = "fix: rename option\n\nBREAKING-CHANGE: use new_name"
        pc = ParsedCommit.from_commit(_commit(message), BREAKING)

        assert pc.is_breaking

    def test_parse_type_is_lowercased(self):
        """Commit types are case-insensitive."""
        pc = ParsedCommit.from_commit(_commit("FEAT: shout"), BREAKING)

        assert pc.commit_type == "feat"

    def test_parse_non_conventional(self):
        """Non-conventional commits keep their subject as description."""
        pc = ParsedCommit.from_commit(_commit("Update README\n\nMore words"), BREAKING)

        assert not pc.is_conventional
        assert pc.commit_type is None
        assert pc.description == "Update README"

    def test_parse_missing_space_is_not_conventional(self):
        """The colon must be followed by whitespace."""
        pc = ParsedCommit.from_commit(_commit("feat:no space"), BREAKING)

        assert not pc.is_conventional


class TestBumpType:
    """Tests for per-commit release type classification."""

    def test_feat_is_minor(self):
        pc = ParsedCommit.from_commit(_commit("feat: x"), BREAKING)
        assert pc.bump_type(CommitsConfig()) == BumpType.MINOR

    def test_fix_and_perf_are_patch(self):
        config = CommitsConfig()
        for message in ("fix: x", "perf: y"):
            pc = ParsedCommit.from_commit(_commit(message), BREAKING)
            assert pc.bump_type(config) == BumpType.PATCH

    def test_breaking_is_major(self):
        pc = ParsedCommit.from_commit(_commit("fix!: x"), BREAKING)
        assert pc.bump_type(CommitsConfig()) == BumpType.MAJOR

    def test_chore_is_none(self):
        pc = ParsedCommit.from_commit(_commit("chore: x"), BREAKING)
        assert pc.bump_type(CommitsConfig()) == BumpType.NONE

    def test_custom_major_type(self):
        """types_major promotes a type to a major release."""
        config = CommitsConfig(types_major=["epic"])
        pc = ParsedCommit.from_commit(_commit("epic: rewrite"), BREAKING)
        assert pc.bump_type(config) == BumpType.MAJOR


class TestCalculateBump:
    """Tests for calculate_bump()."""

    def test_empty_is_none(self):
        assert calculate_bump([], CommitsConfig()) == BumpType.NONE

    def test_strongest_wins(self):
        """feat + fix yields minor."""
        config = CommitsConfig()
        parsed = parse_commits([_commit("fix: a"), _commit("feat: b"), _commit("docs: c")], config)
        assert calculate_bump(parsed, config) == BumpType.MINOR

    def test_breaking_anywhere_is_major(self):
        config = CommitsConfig()
        parsed = parse_commits(
            [_commit("fix: a"), _commit("docs: b\n\nBREAKING CHANGE: gone")], config
        )
        assert calculate_bump(parsed, config) == BumpType.MAJOR

    def test_non_conventional_only_is_none(self):
        config = CommitsConfig()
        parsed = parse_commits([_commit("WIP"), _commit("Merge branch 'x'")], config)
        assert calculate_bump(parsed, config) == BumpType.NONE

    def test_order_does_not_matter(self):
        """The release type is independent of commit order."""
        config = CommitsConfig()
        commits = [_commit("fix: a"), _commit("feat: b"), _commit("chore: c")]
        forward = calculate_bump(parse_commits(commits, config), config)
        backward = calculate_bump(parse_commits(list(reversed(commits)), config), config)
        assert forward == backward == BumpType.MINOR


class TestFilterSkipRelease:
    """Tests for filter_skip_release_commits()."""

    def test_filters_markers_case_insensitively(self):
        commits = [
            _commit("feat: keep me"),
            _commit("feat: drop me [skip release]"),
            _commit("fix: also drop\n\n[No Release]"),
        ]
        result = filter_skip_release_commits(commits, ["[skip release]", "[no release]"])

        assert [c.subject for c in result] == ["feat: keep me"]

    def test_no_patterns_keeps_everything(self):
        commits = [_commit("feat: a [skip release]")]
        assert filter_skip_release_commits(commits, []) == commits


class TestParseCommits:
    """Tests for parse_commits()."""

    def test_scope_regex_filters(self):
        """Only commits whose scope matches scope_regex are kept."""
        config = CommitsConfig(scope_regex=r"^core$")
        parsed = parse_commits(
            [_commit("feat(core): a"), _commit("feat(ui): b"), _commit("fix: c")],
            config,
        )

        assert [pc.description for pc in parsed] == ["a"]

    def test_keeps_order(self):
        config = CommitsConfig()
        parsed = parse_commits([_commit("fix: first"), _commit("feat: second")], config)
        assert [pc.description for pc in parsed] == ["first", "second"]


class TestGrouping:
    """Tests for grouping helpers."""

    def test_group_commits_by_type(self):
        config = CommitsConfig()
        parsed = parse_commits(
            [_commit("feat: a"), _commit("fix: b"), _commit("feat: c"), _commit("random")],
            config,
        )
        grouped = group_commits_by_type(parsed)

        assert [pc.description for pc in grouped["feat"]] == ["a", "c"]
        assert len(grouped["fix"]) == 1
        assert grouped["other"][0].description == "random"

    def test_get_breaking_changes(self, sample_commits):
        parsed = parse_commits(sample_commits, CommitsConfig())
        breaking = get_breaking_changes(parsed)

        assert [pc.sha for pc in breaking] == ["brk789abcdef"]


class TestFormatCommit:
    """Tests for format_commit_for_changelog()."""

    def test_format_with_scope(self, fix_commit):
        pc = ParsedCommit.from_commit(fix_commit, BREAKING)
        assert format_commit_for_changelog(pc) == "* **core:** handle empty config"

    def test_format_without_scope(self, fix_commit):
        pc = ParsedCommit.from_commit(fix_commit, BREAKING)
        assert format_commit_for_changelog(pc, include_scope=False) == "* handle empty config"

    def test_format_with_sha(self, feat_commit):
        pc = ParsedCommit.from_commit(feat_commit, BREAKING)
        assert (
            format_commit_for_changelog(pc, include_sha=True)
            == "* add user authentication (feat123)"
        )

    def test_format_breaking(self, breaking_commit):
        pc = ParsedCommit.from_commit(breaking_commit, BREAKING)
        assert format_commit_for_changelog(pc) == "* [BREAKING] **api:** remove v1 endpoints"
