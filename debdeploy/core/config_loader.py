"""Credential/config loading for debdeploy runs"""

import os
from pathlib import Path
from typing import Dict, Optional, Union

from dotenv import dotenv_values

from debdeploy.constants import DEFAULT_HOST_KEY_POLICY, HOST_KEY_POLICIES
from debdeploy.exceptions import ConfigError
from debdeploy.models.config import DeploymentConfig
from debdeploy.utils import EnvironmentValidator

# Canonical key -> legacy upper-case alias
KEY_ALIASES = {
    "remoteHost": "REMOTE_HOST",
    "remoteSshPort": "REMOTE_SSH_PORT",
    "remoteUsername": "REMOTE_USERNAME",
    "sshPassword": "SSH_PASSWORD",
    "rootPassword": "ROOT_PASSWORD",
    "strictHostKeyChecking": "STRICT_HOST_KEY_CHECKING",
}

REQUIRED_KEYS = ["remoteHost", "remoteSshPort", "remoteUsername"]


def read_env_file(path: Path) -> Dict[str, Optional[str]]:
    """
    Parse a shell-style KEY=VALUE file.

    Args:
        path: Path to the env file

    Returns:
        Raw mapping of keys to values (None for bare keys)

    Raises:
        ConfigError: If the file is missing or unreadable
    """
    if not path.is_file() or not os.access(path, os.R_OK):
        raise ConfigError(f"Cannot read env file: {path}")

    try:
        return dict(dotenv_values(path, interpolate=False))
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigError(f"Cannot read env file: {path}", context=str(e)) from e


def normalize_keys(raw: Dict[str, Optional[str]]) -> Dict[str, str]:
    """
    Fold legacy upper-case names onto canonical keys.

    The canonical camelCase name wins when both forms are set. Empty values
    are dropped so optional fields read as absent.
    """
    normalized: Dict[str, str] = {}
    for key, alias in KEY_ALIASES.items():
        for candidate in (key, alias):
            value = raw.get(candidate)
            if value is not None and value.strip():
                normalized[key] = value
                break
    return normalized


def parse_port(value: str) -> int:
    try:
        port = int(value.strip())
    except ValueError:
        raise ConfigError(
            f"remoteSshPort must be an integer, got '{value}'"
        ) from None
    if not 1 <= port <= 65535:
        raise ConfigError(f"remoteSshPort out of range: {port}")
    return port


def parse_destination_part(key: str, value: str) -> str:
    """Reject values ssh would read as an option or split into words."""
    value = value.strip()
    if value.startswith("-") or any(ch.isspace() for ch in value):
        raise ConfigError(
            f"{key} must not start with '-' or contain whitespace: '{value}'"
        )
    return value


def load_deployment_config(path: Union[str, Path]) -> DeploymentConfig:
    """
    Load and validate a deployment config from an env file.

    Args:
        path: Path to the env file

    Returns:
        Immutable DeploymentConfig

    Raises:
        ConfigError: If the file is unreadable or required keys are missing
    """
    env_path = Path(path).expanduser()
    values = normalize_keys(read_env_file(env_path))

    validation = EnvironmentValidator.validate_env_vars(values, REQUIRED_KEYS)
    if validation.has_errors:
        raise ConfigError(
            f"Missing required settings in {env_path}",
            context="; ".join(validation.errors),
        )

    policy = values.get("strictHostKeyChecking", DEFAULT_HOST_KEY_POLICY).strip()
    if policy not in HOST_KEY_POLICIES:
        raise ConfigError(
            f"Invalid strictHostKeyChecking value: '{policy}'",
            context=f"Expected one of: {', '.join(HOST_KEY_POLICIES)}",
        )

    return DeploymentConfig(
        remote_host=parse_destination_part("remoteHost", values["remoteHost"]),
        remote_port=parse_port(values["remoteSshPort"]),
        remote_username=parse_destination_part(
            "remoteUsername", values["remoteUsername"]
        ),
        ssh_password=values.get("sshPassword"),
        root_password=values.get("rootPassword"),
        strict_host_key_checking=policy,
        source_path=env_path,
    )
