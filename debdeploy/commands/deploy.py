"""
Deploy Command

Ship an env file and a setup payload to a remote host and run the payload
as root.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import click

from debdeploy.base import BaseCommand
from debdeploy.services.deployment_service import DeploymentService
from debdeploy.utils import ProjectUtils


@dataclass
class DeployCommandOptions:
    """Options for deploy command."""

    env_file: Path
    payload: Path
    verify_cleanup: bool = False
    log_dir: Optional[Path] = None


class DeployCommand(BaseCommand):
    """
    Deploy a setup payload to one remote host.

    Features:
    - Key or password (sshpass) transport
    - Root via direct login, passwordless sudo or su
    - Local and remote temp dirs removed on every exit path
    """

    def __init__(self, options: DeployCommandOptions, verbose: bool = False, **service_kwargs):
        """
        Initialize deploy command.

        Args:
            options: DeployCommandOptions with configuration
            verbose: Whether to show verbose output
            **service_kwargs: Extra DeploymentService arguments (process runners)
        """
        super().__init__(verbose=verbose)
        self.options = options
        self.service_kwargs = service_kwargs
        self.service: Optional[DeploymentService] = None

    def execute(self) -> None:
        """Execute deploy command."""
        self.show_header(
            title="Deploy",
            details={
                "Env file": self.options.env_file,
                "Payload": self.options.payload,
            },
        )

        self.service = DeploymentService(
            env_file=self.options.env_file,
            payload=self.options.payload,
            verbose=self.verbose,
            verify_cleanup=self.options.verify_cleanup,
            log_dir=self.options.log_dir,
            **self.service_kwargs,
        )
        run = self.service.run()

        if not self.verbose:
            self.console.print()
        self.print_success(f"Deployment complete ({run.strategy.value})")
        if self.service.logger and self.service.logger.log_path:
            self.print_dim(f"Logs saved to: {self.service.logger.log_path}")


@click.command(name="deploy", context_settings={"help_option_names": ["-h", "--help"]})
@click.option(
    "--env-file",
    type=click.Path(dir_okay=False, path_type=Path),
    default=ProjectUtils.default_env_file,
    show_default=".env in the project root",
    help="Path to the env file with remoteHost, remoteSshPort, remoteUsername",
)
@click.option(
    "--payload",
    type=click.Path(dir_okay=False, path_type=Path),
    default=ProjectUtils.default_payload,
    show_default="setup.sh in the project root",
    help="Setup script to run as root on the remote host",
)
@click.option(
    "--verify-cleanup",
    is_flag=True,
    help="Probe the remote host afterwards to confirm the temp dir is gone",
)
@click.option("--verbose", "-v", is_flag=True, help="Show all command output")
def deploy(env_file, payload, verify_cleanup, verbose):
    """
    Deploy a setup payload to a remote Debian host

    Copies the env file and the payload to a fresh temp dir on the remote
    host, then runs the payload as root (direct, sudo or su).

    Examples:
        # Bootstrap using ./.env and ./setup.sh
        debdeploy

        # Install the proxy with a different env file
        debdeploy --env-file hosts/edge.env --payload shadow_tls.sh
    """
    options = DeployCommandOptions(
        env_file=env_file,
        payload=payload,
        verify_cleanup=verify_cleanup,
    )
    cmd = DeployCommand(options, verbose=verbose)
    cmd.run()
