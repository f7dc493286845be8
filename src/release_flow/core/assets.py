"""Expansion of configured release assets into concrete files."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from release_flow.core.context import AssetRef
from release_flow.exceptions import AssetNotFoundError

if TYPE_CHECKING:
    from collections.abc import Iterable

logger = logging.getLogger(__name__)


def resolve_asset(ref: AssetRef, cwd: Path) -> AssetRef:
    """Resolve one asset against the working copy.

    Wildcard paths expand to every matching file (sorted) and may match
    nothing. Literal paths must name an existing file.

    Raises:
        AssetNotFoundError: If a literal path does not exist
    """
    if ref.is_wildcard:
        pattern = ref.path.removeprefix("./")
        if Path(pattern).is_absolute():
            anchor = Path(Path(pattern).anchor)
            matches = anchor.glob(str(Path(pattern).relative_to(anchor)))
        else:
            matches = cwd.glob(pattern)
        files = tuple(sorted(p for p in matches if p.is_file()))
        return AssetRef(path=ref.path, label=ref.label, files=files)

    path = Path(ref.path)
    if not path.is_absolute():
        path = cwd / path
    if not path.is_file():
        raise AssetNotFoundError(f"Release asset not found: {ref.path}")
    return AssetRef(path=ref.path, label=ref.label, files=(path,))


def resolve_assets(refs: Iterable[AssetRef], cwd: Path) -> list[AssetRef]:
    """Resolve all assets; empty wildcard matches are logged as warnings."""
    resolved = []
    for ref in refs:
        asset = resolve_asset(ref, cwd)
        if not asset.files:
            logger.warning("Asset pattern '%s' matched no files", ref.path)
        resolved.append(asset)
    return resolved
