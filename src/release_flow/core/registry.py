"""Assembly of configured plugins into per-step lists.

The registry is built once at startup. Each plugin appears under every
step it declares, and within a step plugins keep the order in which they
were configured.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from release_flow.exceptions import ConfigurationError, ConfigValidationError
from release_flow.interfaces import STEP_ORDER, Step
from release_flow.plugins import load_plugin_class

if TYPE_CHECKING:
    from collections.abc import Iterable

    from release_flow.config.models import PluginBinding
    from release_flow.interfaces import Services, StepPlugin

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class StageEntry:
    step: Step
    name: str
    plugin: StepPlugin


class StageRegistry:
    """Ordered ``(step, plugin)`` entries."""

    def __init__(self) -> None:
        self._entries: list[StageEntry] = []

    def register(self, name: str, plugin: Any) -> None:
        """Add ``plugin`` under each step listed in its ``steps`` attribute."""
        steps = getattr(plugin, "steps", frozenset())
        if not steps:
            raise ConfigurationError(f"Plugin '{name}' implements no pipeline step")
        for step in STEP_ORDER:
            if step not in steps:
                continue
            if not isinstance(plugin, step.protocol) or not callable(getattr(plugin, step.method)):
                raise ConfigurationError(
                    f"Plugin '{name}' declares '{step}' but has no {step.method}()"
                )
            self._entries.append(StageEntry(step=step, name=name, plugin=plugin))
        logger.debug("Registered plugin %s for %s", name, ", ".join(str(s) for s in steps))

    def for_step(self, step: Step) -> list[StageEntry]:
        return [entry for entry in self._entries if entry.step == step]

    def describe(self) -> list[tuple[Step, list[str]]]:
        """Plugin names per step, in execution order."""
        return [(step, [e.name for e in self.for_step(step)]) for step in STEP_ORDER]

    def __len__(self) -> int:
        return len(self._entries)

    @classmethod
    def from_bindings(cls, bindings: Iterable[PluginBinding], services: Services) -> StageRegistry:
        """Load, configure and register the plugins named in configuration.

        Raises:
            PluginNotFoundError: If a plugin cannot be loaded
            ConfigValidationError: If a plugin's options are invalid
        """
        registry = cls()
        for binding in bindings:
            plugin_cls = load_plugin_class(binding.name)
            try:
                options = plugin_cls.Options.model_validate(binding.options)
            except ValidationError as e:
                raise ConfigValidationError(
                    f"Invalid options for plugin '{binding.name}':\n{e}"
                ) from e
            registry.register(binding.name, plugin_cls(options, services))
        return registry
