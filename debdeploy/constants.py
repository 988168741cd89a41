"""
debdeploy Constants

Centralized constants for magic values and defaults.
"""

# Default file locations (relative to the project root)
DEFAULT_ENV_FILE_NAME = ".env"
DEFAULT_PAYLOAD_NAME = "setup.sh"

# Name the env file always carries inside the staging directory
STAGED_ENV_FILE_NAME = ".env"

# Local staging
LOCAL_STAGING_PREFIX = "debdeploy."

# Remote staging: /tmp/tmp.setup.<12 hex chars>
REMOTE_TEMP_PREFIX = "/tmp/tmp.setup."
REMOTE_TEMP_RANDOM_BYTES = 6

# SSH Configuration
SSH_CONNECTION_TIMEOUT = 10
SSH_LOG_LEVEL = "ERROR"
SSH_DISCONNECT_EXIT_CODE = 255
PASSWORD_RELAY_HELPER = "sshpass"
PASSWORD_RELAY_ENV_VAR = "SSHPASS"

# Host key policy values accepted by OpenSSH StrictHostKeyChecking
HOST_KEY_POLICIES = ("yes", "no", "accept-new")
DEFAULT_HOST_KEY_POLICY = "no"

# Marker printed by the remote session before the selected escalation runs
ESCALATION_MARKER = "debdeploy: escalation="

# Log Configuration
LOG_DIR_NAME = "logs"
LOG_DATE_FORMAT = "%Y-%m-%d"
DIAGNOSTIC_TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%S%z"
REDACTED = "********"

# Exit codes
EXIT_SUCCESS = 0
EXIT_FAILURE = 1
EXIT_INTERRUPTED = 130
