"""Configuration discovery and loading.

Configuration is looked up from the project directory upwards. In each
directory the first match wins, in this order:

1. ``.releaserc.yml`` / ``.releaserc.yaml``
2. ``.releaserc.toml``
3. ``pyproject.toml`` (``[tool.release-flow]`` section, defaults if absent)
"""

from __future__ import annotations

import logging
import tomllib
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from release_flow.config.models import ReleaseFlowConfig
from release_flow.exceptions import ConfigNotFoundError, ConfigValidationError

logger = logging.getLogger(__name__)

RELEASERC_NAMES = (".releaserc.yml", ".releaserc.yaml", ".releaserc.toml")
PYPROJECT_SECTION = "release-flow"


def find_config_file(start: Path | None = None) -> Path:
    """Find the nearest release-flow configuration file.

    Args:
        start: Directory to start searching from (defaults to cwd)

    Returns:
        Path to a ``.releaserc.*`` file or ``pyproject.toml``

    Raises:
        ConfigNotFoundError: If no candidate exists up to the filesystem root
    """
    current = (start or Path.cwd()).resolve()
    for directory in (current, *current.parents):
        for name in RELEASERC_NAMES:
            candidate = directory / name
            if candidate.is_file():
                return candidate
        pyproject = directory / "pyproject.toml"
        if pyproject.is_file():
            return pyproject
    raise ConfigNotFoundError(
        f"No .releaserc.yml, .releaserc.toml or pyproject.toml found from {current}"
    )


def find_pyproject_toml(start: Path | None = None) -> Path:
    """Find the nearest ``pyproject.toml`` walking up from ``start``."""
    current = (start or Path.cwd()).resolve()
    for directory in (current, *current.parents):
        candidate = directory / "pyproject.toml"
        if candidate.is_file():
            return candidate
    raise ConfigNotFoundError(f"No pyproject.toml found from {current}")


def load_pyproject_toml(path: Path) -> dict[str, Any]:
    """Parse a TOML file.

    Raises:
        ConfigNotFoundError: If the file does not exist
        ConfigValidationError: If the file is not valid TOML
    """
    if not path.is_file():
        raise ConfigNotFoundError(f"Config file not found: {path}")
    try:
        with path.open("rb") as f:
            return tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigValidationError(f"Invalid TOML in {path}: {e}") from e


def load_yaml(path: Path) -> dict[str, Any]:
    """Parse a YAML configuration file into a mapping."""
    if not path.is_file():
        raise ConfigNotFoundError(f"Config file not found: {path}")
    try:
        with path.open(encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigValidationError(f"Invalid YAML in {path}: {e}") from e
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigValidationError(f"{path} must contain a mapping at the top level")
    return data


def extract_release_flow_config(pyproject: dict[str, Any]) -> dict[str, Any]:
    """Return the ``[tool.release-flow]`` table, or an empty dict."""
    return pyproject.get("tool", {}).get(PYPROJECT_SECTION, {})


def read_config_file(path: Path) -> dict[str, Any]:
    """Read the raw configuration mapping from any supported file."""
    if path.suffix in (".yml", ".yaml"):
        return load_yaml(path)
    data = load_pyproject_toml(path)
    if path.name == "pyproject.toml":
        return extract_release_flow_config(data)
    return data


def parse_config(data: dict[str, Any], source: str = "<config>") -> ReleaseFlowConfig:
    """Validate a raw mapping into a :class:`ReleaseFlowConfig`."""
    try:
        return ReleaseFlowConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigValidationError(f"Invalid configuration in {source}:\n{e}") from e


def load_config(path: Path | None = None) -> ReleaseFlowConfig:
    """Locate, read and validate the configuration for a project.

    Args:
        path: Project directory or explicit config file

    Returns:
        Validated configuration (defaults if pyproject.toml has no section)
    """
    if path is not None and path.is_file():
        config_path = path
    else:
        config_path = find_config_file(path)
    logger.debug("Loading configuration from %s", config_path)
    return parse_config(read_config_file(config_path), str(config_path))
