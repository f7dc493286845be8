"""Configuration management for release-flow."""

from __future__ import annotations

from release_flow.config.loader import find_config_file, load_config
from release_flow.config.models import (
    BranchConfig,
    CommitsConfig,
    PluginBinding,
    PluginOptions,
    ReleaseFlowConfig,
    ReplacementRule,
)

__all__ = [
    "BranchConfig",
    "CommitsConfig",
    "PluginBinding",
    "PluginOptions",
    "ReleaseFlowConfig",
    "ReplacementRule",
    "find_config_file",
    "load_config",
]
