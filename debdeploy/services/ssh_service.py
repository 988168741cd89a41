"""SSH service: ships the staging bundle and runs the payload as root."""

import os
import shlex
import subprocess
import time
from typing import Callable, List, Optional

from debdeploy.constants import SSH_DISCONNECT_EXIT_CODE
from debdeploy.exceptions import DependencyError, ExecutionError, TransferError
from debdeploy.logger import DeployLogger
from debdeploy.models.config import DeploymentConfig
from debdeploy.models.escalation import ESCALATION_ORDER, EscalationStrategy
from debdeploy.models.results import SSHResult
from debdeploy.models.ssh import RemoteSession, TransportCommands
from debdeploy.services.staging_service import LocalStagingArea, remote_temp_dir_name


def build_remote_script(session: RemoteSession, payload_name: str, env_name: str) -> str:
    """
    Build the script the remote session runs.

    The cleanup trap is installed before anything else so the remote
    directory goes away however the session ends. Every interpolated value
    is shell-quoted.

    Args:
        session: Remote staging session
        payload_name: Payload file name inside the working directory
        env_name: Env file name inside the working directory

    Returns:
        Bash script text
    """
    cleanup = shlex.join(["rm", "-rf", "--", session.remote_dir])
    payload_path = session.payload_path(payload_name)

    lines = [
        "set -euo pipefail",
        f"trap {shlex.quote(cleanup)} EXIT",
        shlex.join(["cd", "--", session.workdir]),
        "set -a",
        f". {shlex.quote('./' + env_name)}",
        "set +a",
        shlex.join(["chmod", "+x", "--", "./" + payload_name]),
    ]

    for index, strategy in enumerate(ESCALATION_ORDER):
        if strategy.probe is None:
            lines.append("else")
        else:
            keyword = "if" if index == 0 else "elif"
            lines.append(f"{keyword} {strategy.probe}; then")
        lines.append(f"  echo {shlex.quote(strategy.marker)}")
        lines.append(f"  {strategy.shell_command(payload_name, payload_path)}")
    lines.append("fi")

    return "\n".join(lines) + "\n"


class SSHService:
    """
    Service for SSH operations against one remote host.

    Features:
    - Remote temp dir creation and recursive copy (transfer engine)
    - Single-session payload execution with root escalation
    - Output streamed to console and log file
    """

    def __init__(
        self,
        config: DeploymentConfig,
        transport: TransportCommands,
        logger: Optional[DeployLogger] = None,
        runner: Callable[..., subprocess.CompletedProcess] = subprocess.run,
        popen: Callable[..., subprocess.Popen] = subprocess.Popen,
        dir_namer: Callable[[], str] = remote_temp_dir_name,
    ):
        """
        Initialize SSH service.

        Args:
            config: Deployment configuration
            transport: ssh/scp command templates
            logger: Optional deploy logger
            runner: subprocess.run-compatible callable
            popen: subprocess.Popen-compatible callable
            dir_namer: Remote temp dir name factory
        """
        self.config = config
        self.transport = transport
        self.logger = logger
        self._runner = runner
        self._popen = popen
        self._dir_namer = dir_namer

    @property
    def scp_host(self) -> str:
        host = self.config.remote_host
        if ":" in host:
            host = f"[{host}]"
        return f"{self.config.remote_username}@{host}"

    def _env(self) -> dict:
        return {**os.environ, **self.transport.env}

    def _log_command(self, argv: List[str]) -> None:
        if self.logger:
            self.logger.log_command(shlex.join(argv))

    def run_command(self, argv: List[str]) -> SSHResult:
        """
        Run a single ssh/scp invocation to completion.

        Args:
            argv: Full argument vector

        Returns:
            SSHResult with captured output

        Raises:
            DependencyError: If the ssh/scp client binary is missing
        """
        self._log_command(argv)
        start_time = time.time()
        try:
            result = self._runner(
                argv,
                capture_output=True,
                text=True,
                env=self._env(),
            )
        except FileNotFoundError as e:
            raise DependencyError(argv[0], hint=str(e)) from e

        ssh_result = SSHResult(
            returncode=result.returncode,
            stdout=result.stdout or "",
            stderr=result.stderr or "",
            host=self.config.remote_host,
            command=shlex.join(argv),
            duration_seconds=time.time() - start_time,
        )
        if self.logger:
            self.logger.log_output(ssh_result.stdout, "stdout")
            self.logger.log_output(ssh_result.stderr, "stderr")
        return ssh_result

    def remote_command(self, remote_argv: List[str]) -> SSHResult:
        """Run remote_argv on the host through a non-interactive session."""
        return self.run_command(
            self.transport.ssh_command(self.config.destination, remote_argv)
        )

    def create_remote_dir(self) -> str:
        """
        Create a uniquely named, private temp dir on the remote host.

        Raises:
            TransferError: If the directory cannot be created
        """
        remote_dir = self._dir_namer()
        result = self.remote_command(["mkdir", "-m", "700", "-p", "--", remote_dir])
        if result.is_failure:
            raise TransferError(
                "Failed to create remote temp dir",
                context=result.stderr.strip() or f"ssh exited {result.returncode}",
            )
        return remote_dir

    def remove_remote_dir(self, remote_dir: str) -> bool:
        """Best-effort removal used when a copy fails before the session starts."""
        result = self.remote_command(["rm", "-rf", "--", remote_dir])
        if result.is_failure and self.logger:
            self.logger.warning(f"Could not remove {remote_dir} on remote host")
        return result.is_success

    def remote_path_exists(self, path: str) -> bool:
        result = self.remote_command(["test", "-e", path])
        if result.returncode == SSH_DISCONNECT_EXIT_CODE:
            raise ExecutionError(
                "SSH session lost while probing remote path",
                returncode=result.returncode,
                context=result.stderr.strip() or None,
            )
        return result.is_success

    def transfer(self, staging: LocalStagingArea) -> RemoteSession:
        """
        Copy the staging directory into a fresh remote temp dir.

        Args:
            staging: Created local staging area

        Returns:
            RemoteSession describing where the bundle landed

        Raises:
            TransferError: If the remote dir cannot be created or the copy fails
        """
        remote_dir = self.create_remote_dir()
        if self.logger:
            self.logger.log(f"Remote temp dir: {remote_dir}")

        argv = self.transport.scp_command(
            f"{staging.path}", f"{self.scp_host}:{remote_dir}/"
        )
        result = self.run_command(argv)
        if result.is_failure:
            self.remove_remote_dir(remote_dir)
            raise TransferError(
                "Failed to copy files to remote host",
                context=result.stderr.strip() or f"scp exited {result.returncode}",
            )

        return RemoteSession(remote_dir=remote_dir, staging_name=staging.name)

    def execute(
        self, session: RemoteSession, staging: LocalStagingArea
    ) -> EscalationStrategy:
        """
        Run the payload as root in one remote session.

        Args:
            session: Remote session returned by transfer()
            staging: Staging area the session was created from

        Returns:
            The escalation strategy the remote host selected

        Raises:
            ExecutionError: If the payload fails or the session drops
        """
        script = build_remote_script(session, staging.payload_name, staging.env_name)
        tty = not self.config.is_root_login
        argv = self.transport.ssh_command(
            self.config.destination, ["bash", "-c", script], tty=tty
        )
        self._log_command(argv)

        try:
            process = self._popen(
                argv,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
                bufsize=1,
                env=self._env(),
            )
        except FileNotFoundError as e:
            raise DependencyError(argv[0], hint=str(e)) from e

        selected: Optional[EscalationStrategy] = None
        try:
            if process.stdout:
                for line in process.stdout:
                    line = line.rstrip("\r\n")
                    strategy = EscalationStrategy.from_marker(line)
                    if strategy is not None and selected is None:
                        selected = strategy
                        if self.logger:
                            self.logger.log(f"Escalation: {strategy.value}")
                        continue
                    if self.logger:
                        self.logger.log_output(line, "remote", echo=True)
            returncode = process.wait()
        finally:
            if process.poll() is None:
                process.kill()
                process.wait()

        if returncode == SSH_DISCONNECT_EXIT_CODE:
            raise ExecutionError(
                "SSH session lost during remote setup",
                returncode=returncode,
                context=f"Remote dir {session.remote_dir} is removed by its exit trap",
            )
        if returncode != 0:
            raise ExecutionError(
                f"Remote setup failed with exit code {returncode}",
                returncode=returncode,
                context=(
                    f"Escalation: {selected.value}" if selected else "No escalation selected"
                ),
            )
        if selected is None:
            raise ExecutionError(
                "Remote session ended before an escalation strategy was selected"
            )
        return selected
