"""Tests for the release context and template rendering."""

from __future__ import annotations

from pathlib import Path

import pytest

from release_flow.core.context import AssetRef, ReleaseContext
from release_flow.core.templates import context_variables, render
from release_flow.core.version import BumpType, Version
from release_flow.exceptions import ContextError


@pytest.fixture
def context(tmp_path: Path) -> ReleaseContext:
    return ReleaseContext(
        branch="main",
        cwd=tmp_path,
        last_version=Version(1, 2, 3),
        last_tag="v1.2.3",
    )


class TestAppendOnceFields:
    """release_type and next_version can only be written once."""

    def test_set_release_type(self, context):
        context.set_release_type(BumpType.MINOR)
        assert context.release_type == BumpType.MINOR

    def test_second_release_type_write_raises(self, context):
        context.set_release_type(BumpType.MINOR)

        with pytest.raises(ContextError):
            context.set_release_type(BumpType.MAJOR)
        assert context.release_type == BumpType.MINOR

    def test_second_next_version_write_raises(self, context):
        context.set_next_version(Version(1, 3, 0))

        with pytest.raises(ContextError):
            context.set_next_version(Version(2, 0, 0))
        assert context.next_version == Version(1, 3, 0)

    @pytest.mark.parametrize("version", [Version(1, 2, 3), Version(1, 0, 0)])
    def test_next_version_must_exceed_last(self, context, version):
        with pytest.raises(ContextError):
            context.set_next_version(version)
        assert context.next_version is None

    def test_first_release_accepts_any_version(self, tmp_path):
        context = ReleaseContext(branch="main", cwd=tmp_path)
        context.set_next_version(Version(0, 1, 0))
        assert context.next_version == Version(0, 1, 0)


class TestAppendOnlySequences:
    """commits and assets only grow."""

    def test_commits_accumulate_in_order(self, context, feat_commit, fix_commit):
        context.add_commits([feat_commit])
        context.add_commits([fix_commit])

        assert context.commits == (feat_commit, fix_commit)

    def test_views_are_immutable(self, context, feat_commit):
        context.add_commits([feat_commit])
        context.add_asset(AssetRef(path="dist/*.whl"))

        assert isinstance(context.commits, tuple)
        assert isinstance(context.assets, tuple)
        with pytest.raises(AttributeError):
            context.commits.append(feat_commit)  # type: ignore[attr-defined]

    def test_changed_files_are_unique_and_sorted(self, context, tmp_path):
        context.record_changed_file(tmp_path / "b.toml")
        context.record_changed_file(tmp_path / "a.toml")
        context.record_changed_file(tmp_path / "b.toml")

        assert context.changed_files == (tmp_path / "a.toml", tmp_path / "b.toml")


class TestNotes:
    """Tests for append_notes()."""

    def test_first_notes(self, context):
        context.append_notes("## 1.3.0\n")
        assert context.notes == "## 1.3.0"

    def test_notes_are_joined(self, context):
        context.append_notes("## 1.3.0\n")
        context.append_notes("Extra text\n")
        assert context.notes == "## 1.3.0\n\nExtra text"

    def test_blank_notes_ignored(self, context):
        context.append_notes("\n\n")
        assert context.notes is None


class TestAssetRef:
    """Tests for AssetRef."""

    @pytest.mark.parametrize(
        ("path", "expected"),
        [("dist/*.whl", True), ("build/app-?.zip", True), ("target/app.wasm", False)],
    )
    def test_is_wildcard(self, path, expected):
        assert AssetRef(path=path).is_wildcard is expected


class TestTemplates:
    """Tests for template rendering."""

    def test_render_simple(self):
        assert render("v${version}", {"version": Version(1, 3, 0)}) == "v1.3.0"

    def test_render_dotted_name(self):
        template = 'version = "${nextRelease.version}"'
        assert render(template, {"nextRelease.version": "1.3.0"}) == 'version = "1.3.0"'

    def test_unknown_placeholders_left_alone(self):
        assert render("${unknown} $HOME", {"version": "1"}) == "${unknown} $HOME"

    def test_none_values_left_alone(self):
        assert render("${last_tag}", {"last_tag": None}) == "${last_tag}"

    def test_context_variables(self, context):
        context.set_next_version(Version(1, 3, 0))
        context.next_tag = "v1.3.0"

        variables = context_variables(context)

        assert render("${version} ${tag} ${last_version} ${branch}", variables) == (
            "1.3.0 v1.3.0 1.2.3 main"
        )
        assert render("${nextRelease.gitTag} ${lastRelease.gitTag}", variables) == (
            "v1.3.0 v1.2.3"
        )
