"""
Result Models

Dataclass models for validation outcomes and command outputs.
"""

from dataclasses import dataclass, field


@dataclass
class ValidationResult:
    """Result of a validation operation."""

    is_valid: bool
    errors: list[str] = field(default_factory=list)

    @property
    def has_errors(self) -> bool:
        """Check if validation has errors."""
        return len(self.errors) > 0

    def add_error(self, error: str) -> None:
        """Add an error to the validation result."""
        self.errors.append(error)
        self.is_valid = False

    def __repr__(self) -> str:
        return f"ValidationResult(valid={self.is_valid}, errors={len(self.errors)})"


@dataclass
class SSHResult:
    """Result of an ssh or scp invocation."""

    returncode: int
    stdout: str = ""
    stderr: str = ""
    host: str = ""
    command: str = ""
    duration_seconds: float = 0.0

    @property
    def is_success(self) -> bool:
        """Check if SSH command succeeded."""
        return self.returncode == 0

    @property
    def is_failure(self) -> bool:
        """Check if SSH command failed."""
        return self.returncode != 0

    def __repr__(self) -> str:
        return f"SSHResult(host={self.host}, returncode={self.returncode}, duration={self.duration_seconds:.2f}s)"
