"""Built-in plugins and plugin lookup.

A plugin binding names a built-in plugin (``changelog``), its
semantic-release package name (``@semantic-release/changelog``) or a
custom class as ``package.module:ClassName``.
"""

from __future__ import annotations

import importlib
from typing import TYPE_CHECKING, Any

from release_flow.exceptions import PluginNotFoundError
from release_flow.interfaces import Step
from release_flow.plugins.changelog import ChangelogPlugin
from release_flow.plugins.commit_analyzer import CommitAnalyzerPlugin
from release_flow.plugins.exec import ExecPlugin
from release_flow.plugins.git import GitPlugin
from release_flow.plugins.github import GitHubPlugin
from release_flow.plugins.release_notes import ReleaseNotesPlugin
from release_flow.plugins.replace import ReplacePlugin

if TYPE_CHECKING:
    from release_flow.interfaces import Plugin

BUILTIN_PLUGINS: dict[str, type[Plugin]] = {
    cls.name: cls
    for cls in (
        CommitAnalyzerPlugin,
        ReleaseNotesPlugin,
        ChangelogPlugin,
        ReplacePlugin,
        ExecPlugin,
        GitHubPlugin,
        GitPlugin,
    )
}

ALIASES: dict[str, str] = {
    "@semantic-release/commit-analyzer": "commit-analyzer",
    "@semantic-release/release-notes-generator": "release-notes-generator",
    "@semantic-release/changelog": "changelog",
    "@google/semantic-release-replace-plugin": "replace",
    "@semantic-release/exec": "exec",
    "@semantic-release/github": "github",
    "@semantic-release/git": "git",
}


def _check_plugin_class(name: str, cls: Any) -> type[Plugin]:
    steps = getattr(cls, "steps", None)
    if not isinstance(steps, frozenset) or not steps or not all(isinstance(s, Step) for s in steps):
        raise PluginNotFoundError(f"Plugin '{name}' does not declare its steps")
    if getattr(cls, "Options", None) is None:
        raise PluginNotFoundError(f"Plugin '{name}' does not declare an Options model")
    for step in steps:
        if not callable(getattr(cls, step.method, None)):
            raise PluginNotFoundError(
                f"Plugin '{name}' declares '{step}' but has no {step.method}()"
            )
    return cls


def load_plugin_class(name: str) -> type[Plugin]:
    """Resolve a plugin binding name to a plugin class.

    Raises:
        PluginNotFoundError: If the name is unknown or the class is not a plugin
    """
    canonical = ALIASES.get(name, name)
    if canonical in BUILTIN_PLUGINS:
        return BUILTIN_PLUGINS[canonical]

    if ":" not in canonical:
        known = ", ".join(sorted(BUILTIN_PLUGINS))
        raise PluginNotFoundError(f"Unknown plugin '{name}' (built-in plugins: {known})")

    module_name, _, attr = canonical.partition(":")
    try:
        module = importlib.import_module(module_name)
        cls = getattr(module, attr)
    except (ImportError, AttributeError) as e:
        raise PluginNotFoundError(f"Cannot load plugin '{name}': {e}") from e
    return _check_plugin_class(name, cls)


__all__ = [
    "ALIASES",
    "BUILTIN_PLUGINS",
    "ChangelogPlugin",
    "CommitAnalyzerPlugin",
    "ExecPlugin",
    "GitHubPlugin",
    "GitPlugin",
    "ReleaseNotesPlugin",
    "ReplacePlugin",
    "load_plugin_class",
]
