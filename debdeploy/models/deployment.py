"""
Deployment State Models

A run is strictly linear and single-attempt:
IDLE -> CONFIG_LOADED -> STAGED -> TRANSFERRED -> SESSION_OPEN -> DONE
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Optional

from debdeploy.exceptions import StateError
from debdeploy.models.escalation import EscalationStrategy


class DeploymentPhase(Enum):
    """Phase of a single deployment run."""

    IDLE = 0
    CONFIG_LOADED = 1
    STAGED = 2
    TRANSFERRED = 3
    SESSION_OPEN = 4
    DONE = 5


@dataclass
class DeploymentRun:
    """State of one deployment run."""

    phase: DeploymentPhase = DeploymentPhase.IDLE
    strategy: Optional[EscalationStrategy] = None
    remote_dir: Optional[str] = None
    started_at: datetime = field(default_factory=datetime.now)
    history: List[DeploymentPhase] = field(
        default_factory=lambda: [DeploymentPhase.IDLE]
    )

    def advance(self, phase: DeploymentPhase) -> None:
        """
        Move to the next phase.

        Raises:
            StateError: If phase is not the immediate successor
        """
        if phase.value != self.phase.value + 1:
            raise StateError(
                f"Illegal transition {self.phase.name} -> {phase.name}",
                context="Deployment runs are strictly linear",
            )
        self.phase = phase
        self.history.append(phase)

    def select_strategy(self, strategy: EscalationStrategy) -> None:
        if self.phase is not DeploymentPhase.SESSION_OPEN:
            raise StateError(
                f"Cannot select escalation in phase {self.phase.name}"
            )
        if self.strategy is not None and self.strategy is not strategy:
            raise StateError(
                f"Escalation already selected: {self.strategy.value}",
                context=f"Second selection: {strategy.value}",
            )
        self.strategy = strategy

    @property
    def is_done(self) -> bool:
        return self.phase is DeploymentPhase.DONE

    def __repr__(self) -> str:
        strategy = self.strategy.value if self.strategy else None
        return f"DeploymentRun(phase={self.phase.name}, strategy={strategy})"
