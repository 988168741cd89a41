"""
Escalation Strategy Model

The three ways a payload can be run as root. Selection happens on the remote
host at execution time by evaluating the probes in ESCALATION_ORDER; the first
match wins and exactly one arm runs.
"""

import shlex
from enum import Enum
from typing import Optional

from debdeploy.constants import ESCALATION_MARKER

# Root password is read from the shipped env file on the remote side
ROOT_PASSWORD_EXPANSION = '"${rootPassword:-${ROOT_PASSWORD:-}}"'


class EscalationStrategy(Enum):
    """Tagged variant: exactly one arm is selected per run."""

    DIRECT_ROOT = "direct_root"
    PASSWORDLESS_SUDO = "passwordless_sudo"
    INTERACTIVE_SU = "interactive_su"

    @property
    def probe(self) -> Optional[str]:
        """Remote shell predicate; None marks the unconditional fallback."""
        if self is EscalationStrategy.DIRECT_ROOT:
            return '[ "$(id -u)" -eq 0 ]'
        if self is EscalationStrategy.PASSWORDLESS_SUDO:
            return "sudo -n true 2>/dev/null"
        return None

    @property
    def marker(self) -> str:
        return f"{ESCALATION_MARKER}{self.value}"

    def shell_command(self, payload_name: str, payload_path: str) -> str:
        """
        Remote command line that runs the payload under this strategy.

        Args:
            payload_name: Payload file name, relative to the working directory
            payload_path: Absolute payload path on the remote host

        Returns:
            Shell-quoted command line
        """
        local = f"./{payload_name}"
        if self is EscalationStrategy.DIRECT_ROOT:
            return shlex.join([local])
        if self is EscalationStrategy.PASSWORDLESS_SUDO:
            return shlex.join(["sudo", local])
        # su hands its -c argument to root's login shell, so quote it twice
        su = shlex.join(["su", "-", "root", "-c", shlex.quote(payload_path)])
        return f"printf '%s\\n' {ROOT_PASSWORD_EXPANSION} | {su}"

    @classmethod
    def from_marker(cls, line: str) -> Optional["EscalationStrategy"]:
        """Parse a transcript line; returns None if it is not a marker."""
        text = line.strip()
        if not text.startswith(ESCALATION_MARKER):
            return None
        value = text[len(ESCALATION_MARKER) :].strip()
        try:
            return cls(value)
        except ValueError:
            return None


ESCALATION_ORDER = (
    EscalationStrategy.DIRECT_ROOT,
    EscalationStrategy.PASSWORDLESS_SUDO,
    EscalationStrategy.INTERACTIVE_SU,
)
