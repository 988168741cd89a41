"""
SSH Transport Models

Dataclass models for the ssh/scp command templates and the remote staging
session.
"""

import shlex
from dataclasses import dataclass, field
from typing import Dict, List


@dataclass(frozen=True)
class TransportCommands:
    """Command templates for interactive sessions and file copies.

    Both templates share one option set so the connect and copy paths never
    diverge.
    """

    ssh: List[str]
    scp: List[str]
    env: Dict[str, str] = field(default_factory=dict, repr=False)
    uses_password: bool = False

    def ssh_command(
        self, destination: str, remote_argv: List[str], tty: bool = False
    ) -> List[str]:
        """Build a full ssh argument vector running remote_argv on destination.

        ssh hands its command to the remote login shell as one string, so the
        remote argv is quoted here and nowhere else.
        """
        cmd = list(self.ssh)
        if tty:
            cmd.append("-tt")
        return cmd + [destination, "--", shlex.join(remote_argv)]

    def scp_command(self, source: str, target: str, recursive: bool = True) -> List[str]:
        """Build a full scp argument vector copying source to target."""
        cmd = list(self.scp)
        if recursive:
            cmd.append("-r")
        return cmd + [source, target]

    def __repr__(self) -> str:
        return f"TransportCommands(ssh={self.ssh[0]}, password={self.uses_password})"


@dataclass(frozen=True)
class RemoteSession:
    """Remote staging directory owned by a single run."""

    remote_dir: str
    staging_name: str

    @property
    def workdir(self) -> str:
        """Directory scp creates inside remote_dir for the staging bundle."""
        return f"{self.remote_dir}/{self.staging_name}"

    def payload_path(self, payload_name: str) -> str:
        return f"{self.workdir}/{payload_name}"

    def __repr__(self) -> str:
        return f"RemoteSession(workdir={self.workdir})"
