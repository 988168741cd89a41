"""
Deployment Configuration Model

Immutable configuration built once from the env file and passed to every
component of a run.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from debdeploy.constants import DEFAULT_HOST_KEY_POLICY


@dataclass(frozen=True)
class DeploymentConfig:
    """Connection details and credentials for one remote host."""

    remote_host: str
    remote_port: int
    remote_username: str
    ssh_password: Optional[str] = field(default=None, repr=False)
    root_password: Optional[str] = field(default=None, repr=False)
    strict_host_key_checking: str = DEFAULT_HOST_KEY_POLICY
    source_path: Optional[Path] = None

    @property
    def destination(self) -> str:
        """Get SSH destination string (user@host)."""
        return f"{self.remote_username}@{self.remote_host}"

    @property
    def uses_password_auth(self) -> bool:
        """Password transport is used whenever an SSH password is configured."""
        return bool(self.ssh_password)

    @property
    def is_root_login(self) -> bool:
        return self.remote_username == "root"

    @property
    def secrets(self) -> tuple[str, ...]:
        """Secret values that must never reach a log line."""
        return tuple(s for s in (self.ssh_password, self.root_password) if s)

    def __repr__(self) -> str:
        auth = "password" if self.uses_password_auth else "key"
        return (
            f"DeploymentConfig(destination={self.destination}, "
            f"port={self.remote_port}, auth={auth})"
        )
