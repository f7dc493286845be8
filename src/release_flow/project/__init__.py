"""Working-copy file updates performed during a release."""

from __future__ import annotations

from release_flow.project.manifests import expand_files, rewrite_manifests

__all__ = ["expand_files", "rewrite_manifests"]
