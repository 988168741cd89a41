"""Core config loading components"""

from .config_loader import (
    KEY_ALIASES,
    REQUIRED_KEYS,
    load_deployment_config,
    normalize_keys,
    read_env_file,
)

__all__ = [
    "KEY_ALIASES",
    "REQUIRED_KEYS",
    "load_deployment_config",
    "normalize_keys",
    "read_env_file",
]
