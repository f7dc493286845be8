"""Exception hierarchy for release-flow.

Every error raised on purpose by release-flow derives from
:class:`ReleaseFlowError`. The CLI maps :class:`ConfigurationError`
to exit code 1 and every other release-flow error to exit code 2.
"""

from __future__ import annotations


class ReleaseFlowError(Exception):
    """Base class for all release-flow errors."""


# =============================================================================
# Configuration
# =============================================================================


class ConfigurationError(ReleaseFlowError):
    """Configuration is missing, malformed or references unknown plugins."""


class ConfigNotFoundError(ConfigurationError):
    """No configuration file could be located."""


class ConfigValidationError(ConfigurationError):
    """Configuration was found but failed validation."""


class PluginNotFoundError(ConfigurationError):
    """A plugin binding names a plugin that cannot be loaded."""


# =============================================================================
# Version control
# =============================================================================


class GitError(ReleaseFlowError):
    """A git command failed."""

    def __init__(self, message: str, stderr: str | None = None) -> None:
        super().__init__(message)
        self.stderr = stderr

    def __str__(self) -> str:
        base = super().__str__()
        if self.stderr:
            return f"{base}\n{self.stderr.strip()}"
        return base


class AnalysisError(ReleaseFlowError):
    """The commit history could not be read or analyzed."""


# =============================================================================
# Pipeline
# =============================================================================


class ContextError(ReleaseFlowError):
    """A plugin violated a release context invariant (e.g. wrote a field twice)."""


class ChangelogError(ReleaseFlowError):
    """The changelog file could not be updated."""


class ManifestRewriteError(ReleaseFlowError):
    """A configured version rewrite matched no file or no line."""


class AssetNotFoundError(ReleaseFlowError):
    """A required release asset does not exist."""


class PrepareError(ReleaseFlowError):
    """The external build command failed or timed out."""

    def __init__(
        self,
        message: str,
        *,
        returncode: int | None = None,
        stdout: str | None = None,
        stderr: str | None = None,
    ) -> None:
        super().__init__(message)
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr


class PublishError(ReleaseFlowError):
    """The release could not be published to the hosting service."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class DuplicateReleaseError(PublishError):
    """A release for the tag already exists on the hosting service."""


class CommitBackError(ReleaseFlowError):
    """Release changes could not be committed back to the repository."""


class ConcurrentReleaseError(ReleaseFlowError):
    """Another release run already owns the branch."""


class PluginError(ReleaseFlowError):
    """A plugin raised an unexpected exception."""

    def __init__(self, plugin: str, step: str, cause: BaseException) -> None:
        super().__init__(f"Plugin '{plugin}' failed during '{step}': {cause}")
        self.plugin = plugin
        self.step = step
        self.cause = cause
