"""Run the external build command during the prepare step.

The command is a blocking shell invocation with a timeout. A non-zero
exit or a timeout aborts the release; captured output is only surfaced
in the resulting error.
"""

from __future__ import annotations

import logging
import subprocess
from typing import TYPE_CHECKING, ClassVar

from pydantic import Field

from release_flow.config.models import PluginOptions
from release_flow.core.templates import context_variables, render
from release_flow.exceptions import PrepareError
from release_flow.interfaces import Step

if TYPE_CHECKING:
    from release_flow.core.context import ReleaseContext
    from release_flow.interfaces import Services

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 600.0


class ExecOptions(PluginOptions):
    prepare_cmd: str = Field(min_length=1)
    timeout: float = Field(default=DEFAULT_TIMEOUT, gt=0)
    shell: str | None = None


def _text(output: str | bytes | None) -> str:
    if output is None:
        return ""
    if isinstance(output, bytes):
        return output.decode(errors="replace")
    return output


class ExecPlugin:
    name: ClassVar[str] = "exec"
    steps: ClassVar[frozenset[Step]] = frozenset({Step.PREPARE})
    Options: ClassVar[type[ExecOptions]] = ExecOptions

    def __init__(self, options: ExecOptions, services: Services) -> None:
        self.options = options

    def prepare(self, context: ReleaseContext) -> None:
        command = render(self.options.prepare_cmd, context_variables(context)).strip()
        logger.info("Running prepare command: %s", command)
        try:
            result = subprocess.run(
                command,
                shell=True,
                executable=self.options.shell,
                cwd=context.cwd,
                capture_output=True,
                text=True,
                timeout=self.options.timeout,
                check=False,
            )
        except subprocess.TimeoutExpired as e:
            raise PrepareError(
                f"Prepare command timed out after {self.options.timeout:g}s: {command}",
                stdout=_text(e.stdout),
                stderr=_text(e.stderr),
            ) from e

        if result.returncode != 0:
            raise PrepareError(
                f"Prepare command failed with exit code {result.returncode}: {command}",
                returncode=result.returncode,
                stdout=result.stdout,
                stderr=result.stderr,
            )
        if result.stdout:
            logger.debug("Prepare command output:\n%s", result.stdout.rstrip())
