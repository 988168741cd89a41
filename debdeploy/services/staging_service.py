"""
Staging Service

Local staging directory for the files shipped to the remote host, and the
naming scheme for the matching remote directory.
"""

import re
import secrets
import shlex
import shutil
import tempfile
from pathlib import Path
from typing import Mapping, Optional, Union

from debdeploy.constants import (
    LOCAL_STAGING_PREFIX,
    REMOTE_TEMP_PREFIX,
    REMOTE_TEMP_RANDOM_BYTES,
    STAGED_ENV_FILE_NAME,
)
from debdeploy.core.config_loader import read_env_file
from debdeploy.exceptions import ConfigError, StagingError

SHELL_NAME = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")


def remote_temp_dir_name() -> str:
    """Unpredictable remote directory, e.g. /tmp/tmp.setup.3f9a0c7d21be."""
    return f"{REMOTE_TEMP_PREFIX}{secrets.token_hex(REMOTE_TEMP_RANDOM_BYTES)}"


def render_env_file(values: Mapping[str, Optional[str]]) -> str:
    """
    Serialize parsed env values for `set -a; . ./.env` on the remote host.

    Every value is single-quoted, so the remote shell sees exactly the
    strings the local loader parsed. Bare keys (no value) are dropped.

    Raises:
        StagingError: If a key is not a valid shell variable name
    """
    lines = []
    for key, value in values.items():
        if value is None:
            continue
        if not SHELL_NAME.fullmatch(key):
            raise StagingError(f"Env key is not a valid shell variable name: '{key}'")
        lines.append(f"{key}={shlex.quote(value)}\n")
    return "".join(lines)


class LocalStagingArea:
    """
    Scoped temporary directory holding exactly the env file and the payload.

    Usage:
        with LocalStagingArea(env_file, payload) as staging:
            transfer(staging.path)

    The directory is removed when the block exits, whatever the reason.
    """

    def __init__(
        self,
        env_file: Union[str, Path],
        payload: Union[str, Path],
        base_dir: Optional[Union[str, Path]] = None,
    ):
        self.env_file = Path(env_file)
        self.payload = Path(payload)
        self.base_dir = Path(base_dir) if base_dir else None
        self.path: Optional[Path] = None

    @property
    def name(self) -> str:
        """Directory name; scp recreates it under the remote directory."""
        if self.path is None:
            raise StagingError("Staging area has not been created")
        return self.path.name

    @property
    def payload_name(self) -> str:
        return self.payload.name

    @property
    def env_name(self) -> str:
        return STAGED_ENV_FILE_NAME

    def create(self) -> Path:
        """
        Create the directory and copy both artifacts into it.

        Returns:
            Path to the staging directory

        Raises:
            StagingError: If the directory cannot be created or a copy fails
        """
        if self.path is not None:
            raise StagingError(f"Staging area already created: {self.path}")

        if not self.payload.is_file():
            raise StagingError(f"Setup payload not found: {self.payload}")
        if self.payload.name == STAGED_ENV_FILE_NAME:
            raise StagingError(
                f"Setup payload cannot be named {STAGED_ENV_FILE_NAME}"
            )

        try:
            env_text = render_env_file(read_env_file(self.env_file))
        except StagingError:
            raise
        except ConfigError as e:
            raise StagingError(e.message, context=e.context) from e

        try:
            self.path = Path(
                tempfile.mkdtemp(
                    prefix=LOCAL_STAGING_PREFIX,
                    dir=str(self.base_dir) if self.base_dir else None,
                )
            )
        except OSError as e:
            raise StagingError("Failed to create local temp dir", context=str(e)) from e

        try:
            (self.path / STAGED_ENV_FILE_NAME).write_text(env_text, encoding="utf-8")
            shutil.copy2(self.payload, self.path / self.payload.name)
        except OSError as e:
            self.cleanup()
            raise StagingError(
                "Failed to copy files to local temp dir", context=str(e)
            ) from e

        return self.path

    def cleanup(self) -> None:
        """Remove the staging directory. Safe to call more than once."""
        path, self.path = self.path, None
        if path is not None and path.exists():
            shutil.rmtree(path)

    def __enter__(self) -> "LocalStagingArea":
        self.create()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        self.cleanup()
        return False

    def __repr__(self) -> str:
        return f"LocalStagingArea(path={self.path}, payload={self.payload.name})"
