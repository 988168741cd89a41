"""
debdeploy Utilities

Project discovery and validation helpers shared by the CLI and services.
"""

from pathlib import Path
from typing import Dict, List, Optional

from debdeploy.constants import DEFAULT_ENV_FILE_NAME, DEFAULT_PAYLOAD_NAME
from debdeploy.models.results import ValidationResult

PACKAGE_DIR = Path(__file__).resolve().parent


class ProjectUtils:
    """Utilities for locating files relative to the project."""

    @staticmethod
    def get_project_root() -> Path:
        """
        Get debdeploy project root directory.

        A source checkout (setup.py beside the package) is its own root. An
        installed package lives in site-packages, so the current working
        directory is used instead.

        Returns:
            Path to the project root
        """
        checkout = PACKAGE_DIR.parent
        if (checkout / "setup.py").is_file():
            return checkout
        return Path.cwd()

    @staticmethod
    def default_env_file() -> Path:
        return ProjectUtils.get_project_root() / DEFAULT_ENV_FILE_NAME

    @staticmethod
    def default_payload() -> Path:
        return ProjectUtils.get_project_root() / DEFAULT_PAYLOAD_NAME


class EnvironmentValidator:
    """Validates env-file values."""

    @staticmethod
    def validate_env_vars(
        env: Dict[str, Optional[str]], required_keys: List[str]
    ) -> ValidationResult:
        """
        Validate required environment variables are present and non-empty.

        Args:
            env: Dictionary of environment variables
            required_keys: List of required variable names

        Returns:
            ValidationResult with errors for missing keys
        """
        result = ValidationResult(is_valid=True)
        missing = [key for key in required_keys if not (env.get(key) or "").strip()]

        for key in missing:
            result.add_error(f"{key} must be set")

        return result


def get_project_root() -> Path:
    """Get debdeploy project root."""
    return ProjectUtils.get_project_root()
