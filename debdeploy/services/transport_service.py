"""
Transport Selection Service

Decides between key-based and password-based SSH transport and builds the
ssh/scp command templates used by every later stage.
"""

import shutil
from typing import Callable, List, Optional

from debdeploy.constants import (
    PASSWORD_RELAY_ENV_VAR,
    PASSWORD_RELAY_HELPER,
    SSH_CONNECTION_TIMEOUT,
    SSH_LOG_LEVEL,
)
from debdeploy.exceptions import DependencyError
from debdeploy.models.config import DeploymentConfig
from debdeploy.models.ssh import TransportCommands


class TransportService:
    """
    Builds ssh/scp command templates for a deployment config.

    Features:
    - One shared option set for both templates
    - Password relay through sshpass, with the password kept off argv
    - Fails fast when the relay helper is missing
    """

    def __init__(
        self,
        config: DeploymentConfig,
        which: Callable[[str], Optional[str]] = shutil.which,
    ):
        """
        Initialize transport service.

        Args:
            config: Deployment configuration
            which: Executable lookup (shutil.which signature)
        """
        self.config = config
        self._which = which

    def ensure_password_relay(self) -> Optional[str]:
        """
        Check that sshpass is available when password transport is requested.

        Returns:
            Path to sshpass, or None for key-based transport

        Raises:
            DependencyError: If a password is configured but sshpass is missing
        """
        if not self.config.uses_password_auth:
            return None
        helper = self._which(PASSWORD_RELAY_HELPER)
        if not helper:
            raise DependencyError(
                PASSWORD_RELAY_HELPER,
                hint=f"Install {PASSWORD_RELAY_HELPER} or unset sshPassword",
            )
        return helper

    def common_options(self) -> List[str]:
        """SSH options shared by the session and copy templates."""
        options = [
            "-o",
            f"StrictHostKeyChecking={self.config.strict_host_key_checking}",
            "-o",
            f"ConnectTimeout={SSH_CONNECTION_TIMEOUT}",
            "-o",
            f"LogLevel={SSH_LOG_LEVEL}",
        ]
        if not self.config.uses_password_auth:
            # Key transport must fail rather than fall back to a prompt
            options += ["-o", "BatchMode=yes"]
        return options

    def build(self) -> TransportCommands:
        """
        Select the transport and build both command templates.

        Returns:
            TransportCommands for this config
        """
        helper = self.ensure_password_relay()
        prefix: List[str] = [helper, "-e"] if helper else []
        port = str(self.config.remote_port)
        options = self.common_options()

        env = {}
        if helper:
            env[PASSWORD_RELAY_ENV_VAR] = self.config.ssh_password

        return TransportCommands(
            ssh=prefix + ["ssh", "-p", port] + options,
            scp=prefix + ["scp", "-P", port] + options,
            env=env,
            uses_password=bool(helper),
        )


def select_transport(
    config: DeploymentConfig,
    which: Callable[[str], Optional[str]] = shutil.which,
) -> TransportCommands:
    """Build transport command templates for config."""
    return TransportService(config, which=which).build()
