"""
debdeploy Domain Models

Clean dataclass-based models for type-safe data handling.
"""

from .config import DeploymentConfig
from .deployment import DeploymentPhase, DeploymentRun
from .escalation import ESCALATION_ORDER, EscalationStrategy
from .results import SSHResult, ValidationResult
from .ssh import RemoteSession, TransportCommands

__all__ = [
    # Config
    "DeploymentConfig",
    # Deployment
    "DeploymentPhase",
    "DeploymentRun",
    # Escalation
    "ESCALATION_ORDER",
    "EscalationStrategy",
    # Results
    "SSHResult",
    "ValidationResult",
    # SSH
    "RemoteSession",
    "TransportCommands",
]
