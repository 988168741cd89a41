"""
debdeploy CLI Base Command Classes
"""

from .base_command import BaseCommand, exit_on_signals

__all__ = [
    "BaseCommand",
    "exit_on_signals",
]
