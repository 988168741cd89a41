"""
debdeploy Exception Hierarchy

Every error is fatal to a deployment run: it is reported once and the
process exits non-zero.
"""

from typing import Optional


class DebDeployError(Exception):
    """Base exception for all debdeploy errors."""

    def __init__(self, message: str, context: Optional[str] = None):
        self.message = message
        self.context = context
        super().__init__(self.format_message())

    def format_message(self) -> str:
        """Format error message with optional context."""
        if self.context:
            return f"{self.message}\nContext: {self.context}"
        return self.message


class ConfigError(DebDeployError):
    """Raised when the env file is unreadable or a required field is missing."""

    pass


class StagingError(ConfigError):
    """Raised when the local staging directory cannot be prepared."""

    pass


class DependencyError(DebDeployError):
    """Raised when a local helper required by the transport is missing."""

    def __init__(self, helper: str, hint: Optional[str] = None):
        self.helper = helper
        super().__init__(f"{helper} not found", context=hint)


class TransferError(DebDeployError):
    """Raised when the remote temp dir cannot be created or files cannot be copied."""

    pass


class ExecutionError(DebDeployError):
    """Raised when the payload exits non-zero or the SSH session drops."""

    def __init__(
        self, message: str, returncode: int = 1, context: Optional[str] = None
    ):
        self.returncode = returncode
        super().__init__(message, context)


class ArgumentError(DebDeployError):
    """Raised for unrecognized command-line input."""

    pass


class StateError(DebDeployError):
    """Raised when a deployment run is driven out of order."""

    pass
