"""Error taxonomy shared by the provider layer, the engines, and the CLI."""

from typing import Any


class DeployError(Exception):
    """Base class for every error this package raises on purpose."""


class ConfigError(DeployError):
    """Configuration file missing, unreadable, or invalid."""


class PreconditionError(DeployError):
    """Something required before any step can run is missing (e.g. AWS credentials)."""


class ProviderError(DeployError):
    """A provider call failed. Unclassified failures are fatal."""

    def __init__(self, operation: str, code: str, message: str) -> None:
        super().__init__(f"{operation} failed: {code}: {message}")
        self.operation = operation
        self.code = code
        self.message = message


class AlreadyExistsError(ProviderError):
    """Create called for something that already exists."""


class NotFoundError(ProviderError):
    """The target of a describe/delete call does not exist."""


class QuotaExceededError(ProviderError):
    """A provider quota is exhausted (e.g. two access keys per IAM user)."""


class DependencyConflictError(ProviderError):
    """Delete refused because something still depends on the target."""


class NotReadyError(ProviderError):
    """A dependency exists but has not reached a terminal state yet."""


class WaitTimeoutError(DeployError):
    """A bounded wait for a terminal state ran out of time."""

    def __init__(self, what: str, timeout: float) -> None:
        super().__init__(f"timed out after {timeout:g}s waiting for {what}")
        self.what = what
        self.timeout = timeout


class StepFailedError(DeployError):
    """A descriptor step failed; carries the partial report so callers can show progress."""

    def __init__(self, kind: Any, name: str, cause: Exception, report: Any = None) -> None:
        super().__init__(f"{kind} {name!r}: {cause}")
        self.kind = kind
        self.name = name
        self.cause = cause
        self.report = report
