"""
Deployment Service

Runs one deployment end to end:
load config -> select transport -> stage locally -> transfer -> execute.
"""

import shutil
import subprocess
from pathlib import Path
from typing import Callable, Optional, Union

from debdeploy.core.config_loader import load_deployment_config
from debdeploy.exceptions import DebDeployError, ExecutionError
from debdeploy.logger import DeployLogger, report_error
from debdeploy.models.config import DeploymentConfig
from debdeploy.models.deployment import DeploymentPhase, DeploymentRun
from debdeploy.services.ssh_service import SSHService
from debdeploy.services.staging_service import LocalStagingArea, remote_temp_dir_name
from debdeploy.services.transport_service import select_transport


class DeploymentService:
    """
    Single-attempt deployment of a setup payload to one host.

    Every error is reported once (timestamped, on stderr) and re-raised.
    The local staging directory is removed on every exit path; the remote
    directory is removed by the remote session's exit trap.
    """

    def __init__(
        self,
        env_file: Union[str, Path],
        payload: Union[str, Path],
        verbose: bool = False,
        verify_cleanup: bool = False,
        log_dir: Optional[Path] = None,
        which: Callable[[str], Optional[str]] = shutil.which,
        runner: Callable[..., subprocess.CompletedProcess] = subprocess.run,
        popen: Callable[..., subprocess.Popen] = subprocess.Popen,
        dir_namer: Callable[[], str] = remote_temp_dir_name,
        staging_base_dir: Optional[Path] = None,
    ):
        self.env_file = Path(env_file)
        self.payload = Path(payload)
        self.verbose = verbose
        self.verify_cleanup = verify_cleanup
        self.log_dir = log_dir
        self.which = which
        self.runner = runner
        self.popen = popen
        self.dir_namer = dir_namer
        self.staging_base_dir = staging_base_dir
        self.state = DeploymentRun()
        self.logger: Optional[DeployLogger] = None

    def run(self) -> DeploymentRun:
        """
        Execute the pipeline.

        Returns:
            The finished DeploymentRun

        Raises:
            DebDeployError: On any failure, after it has been reported
        """
        try:
            config = load_deployment_config(self.env_file)
        except DebDeployError as e:
            report_error(e.format_message())
            raise
        self.state.advance(DeploymentPhase.CONFIG_LOADED)

        with DeployLogger(
            config.remote_host,
            "deploy",
            verbose=self.verbose,
            log_dir=self.log_dir,
            secrets=config.secrets,
        ) as logger:
            self.logger = logger
            try:
                self._deploy(config, logger)
            except DebDeployError as e:
                logger.log_error(e.message, context=e.context)
                raise

        return self.state

    def _deploy(self, config: DeploymentConfig, logger: DeployLogger) -> None:
        logger.log(f"Loaded {config!r} from {config.source_path}")
        if config.strict_host_key_checking == "no":
            logger.warning(
                "Host key verification is disabled (strictHostKeyChecking=no)"
            )

        logger.step("Selecting transport")
        transport = select_transport(config, which=self.which)
        logger.success(
            "Password transport via sshpass"
            if transport.uses_password
            else "Key-based transport"
        )

        logger.step("Staging files")
        with LocalStagingArea(
            config.source_path, self.payload, base_dir=self.staging_base_dir
        ) as staging:
            self.state.advance(DeploymentPhase.STAGED)
            logger.success(f"Staged {staging.env_name} and {staging.payload_name}")

            ssh = SSHService(
                config,
                transport,
                logger=logger,
                runner=self.runner,
                popen=self.popen,
                dir_namer=self.dir_namer,
            )

            logger.step(f"Transferring to {config.destination}")
            session = ssh.transfer(staging)
            self.state.remote_dir = session.remote_dir
            self.state.advance(DeploymentPhase.TRANSFERRED)
            logger.success(f"Copied to {session.workdir}")

            logger.step("Running setup as root")
            self.state.advance(DeploymentPhase.SESSION_OPEN)
            strategy = ssh.execute(session, staging)
            self.state.select_strategy(strategy)
            logger.success(f"Setup finished ({strategy.value})")

            if self.verify_cleanup:
                logger.step("Verifying remote cleanup")
                if ssh.remote_path_exists(session.remote_dir):
                    raise ExecutionError(
                        f"Remote temp dir still present: {session.remote_dir}"
                    )
                logger.success(f"{session.remote_dir} removed")

        self.state.advance(DeploymentPhase.DONE)
