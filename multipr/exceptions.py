"""multipr exception hierarchy."""

from typing import Any


class MultiPRError(Exception):
    """Base exception for all multipr errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message}: {self.details}"
        return self.message


class ConfigurationError(MultiPRError):
    """Error in multipr configuration."""

    pass


class ValidationError(MultiPRError):
    """Rejected input; raised before any state is mutated."""

    def __init__(
        self, message: str, field: str | None = None, details: dict[str, Any] | None = None
    ) -> None:
        super().__init__(message, details)
        self.field = field


class DuplicateNameError(ValidationError):
    """A bucket with the requested name already exists."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Bucket '{name}' already exists", field="name")
        self.name = name


class UnknownBucketError(ValidationError):
    """Referenced bucket does not exist."""

    def __init__(self, name: str) -> None:
        super().__init__(f"No bucket named '{name}'", field="bucket")
        self.name = name


class UnknownFileError(ValidationError):
    """Referenced path is neither in the pool nor in any bucket."""

    def __init__(self, path: str) -> None:
        super().__init__(f"No changed file '{path}'", field="path")
        self.path = path


class CycleDetectedError(MultiPRError):
    """Dependency graph contains a cycle.

    Only raised by the raw topological sort; the resolver catches it and
    breaks the cycle.
    """

    def __init__(self, cycle: list[str], closing_bucket: str) -> None:
        super().__init__(
            f"Circular dependency: {' -> '.join(cycle)} -> {cycle[0]}",
            details={"cycle": cycle, "closing_bucket": closing_bucket},
        )
        self.cycle = cycle
        self.closing_bucket = closing_bucket


class GitError(MultiPRError):
    """Error in git operations."""

    def __init__(
        self,
        message: str,
        command: str | None = None,
        exit_code: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details)
        self.command = command
        self.exit_code = exit_code


class HostingError(MultiPRError):
    """Hosting service rejected or failed a change-request operation."""

    def __init__(self, message: str, command: str | None = None, exit_code: int | None = None) -> None:
        super().__init__(message)
        self.command = command
        self.exit_code = exit_code


class ToolingUnavailableError(MultiPRError):
    """Hosting CLI is missing or not authenticated."""

    def __init__(self, message: str, tool: str, hint: str | None = None) -> None:
        super().__init__(message, details={"tool": tool, "hint": hint} if hint else {"tool": tool})
        self.tool = tool
        self.hint = hint


class UnsupportedHostError(MultiPRError):
    """Repository remote is not a recognised hosting service."""

    def __init__(self, remote_url: str | None) -> None:
        super().__init__(
            "Unsupported repository type. Only GitHub and Bitbucket are supported.",
            details={"remote_url": remote_url or ""},
        )
        self.remote_url = remote_url


class PipelineStepError(MultiPRError):
    """One step of a bucket's pipeline failed."""

    def __init__(self, message: str, step: str, bucket: str) -> None:
        super().__init__(message)
        self.step = step
        self.bucket = bucket


class StateError(MultiPRError):
    """Error in persisted bucket state."""

    pass
