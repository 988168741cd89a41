"""
Base Command Class

Abstract base for debdeploy CLI commands.
Provides common output helpers and a single error funnel.
"""

import signal
from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Iterator, Optional

from rich.console import Console

from debdeploy.constants import EXIT_FAILURE, EXIT_INTERRUPTED
from debdeploy.exceptions import DebDeployError
from debdeploy.logger import report_error
from debdeploy.ui_components import show_header
from debdeploy.utils import get_project_root

# Signals that must unwind the stack so cleanup guards run
EXIT_SIGNALS = tuple(
    sig for sig in (getattr(signal, "SIGTERM", None), getattr(signal, "SIGHUP", None))
    if sig is not None
)


def _raise_system_exit(signum, _frame):
    raise SystemExit(128 + signum)


@contextmanager
def exit_on_signals() -> Iterator[None]:
    """Turn termination signals into SystemExit for the duration of the block."""
    previous = {}
    for sig in EXIT_SIGNALS:
        previous[sig] = signal.signal(sig, _raise_system_exit)
    try:
        yield
    finally:
        for sig, handler in previous.items():
            signal.signal(sig, handler)


class BaseCommand(ABC):
    """
    Abstract base command class.

    Provides:
    - Header display
    - Error handling (errors are reported exactly once)
    - Signal-safe cleanup
    """

    def __init__(self, verbose: bool = False, console: Optional[Console] = None):
        self.verbose = verbose
        self.console = console or Console()
        self.project_root = get_project_root()

    def show_header(
        self,
        title: str,
        subtitle: Optional[str] = None,
        host: Optional[str] = None,
        details: Optional[dict] = None,
    ) -> None:
        """Show command header (skip in verbose mode)."""
        if not self.verbose:
            show_header(
                title=title,
                subtitle=subtitle,
                host=host,
                details=details,
                console=self.console,
            )

    def print_success(self, message: str) -> None:
        self.console.print(f"[green]✓ {message}[/green]")

    def print_dim(self, message: str) -> None:
        self.console.print(f"[dim]{message}[/dim]")

    @abstractmethod
    def execute(self, **kwargs) -> None:
        """
        Execute command logic.

        Must be implemented by subclasses. DebDeployError subclasses raised
        here are expected to have been reported already.
        """
        pass

    def run(self, **kwargs) -> None:
        """
        Run command with error handling.

        Args:
            **kwargs: Command arguments
        """
        try:
            with exit_on_signals():
                self.execute(**kwargs)
        except KeyboardInterrupt:
            self.console.print("\n[yellow]⚠️  Operation cancelled by user[/yellow]")
            raise SystemExit(EXIT_INTERRUPTED)
        except SystemExit:
            raise
        except DebDeployError:
            raise SystemExit(EXIT_FAILURE)
        except Exception as e:
            report_error(f"{type(e).__name__}: {e}")
            raise SystemExit(EXIT_FAILURE)
