"""
Logging system for debdeploy
Provides real-time logging to files with clean console output
"""

import re
from datetime import datetime
from pathlib import Path
from typing import Iterable, Optional, TextIO

from rich.console import Console
from rich.text import Text

from debdeploy.constants import (
    DIAGNOSTIC_TIMESTAMP_FORMAT,
    LOG_DATE_FORMAT,
    LOG_DIR_NAME,
    REDACTED,
)

console = Console()
error_console = Console(stderr=True)

ANSI_ESCAPE = re.compile(r"\x1B(?:[@-Z\\-_]|\[[0-?]*[ -/]*[@-~])")


def diagnostic_timestamp() -> str:
    """Local time with UTC offset, e.g. 2024-05-01T12:00:00+0200."""
    return datetime.now().astimezone().strftime(DIAGNOSTIC_TIMESTAMP_FORMAT)


def report_error(message: str, target: Optional[Console] = None) -> None:
    """Print a single timestamped diagnostic line to stderr."""
    target = target or error_console
    target.print(
        Text(f"[{diagnostic_timestamp()}] ERROR: {message}", style="bold red"),
        soft_wrap=True,
    )


class DeployLogger:
    """
    Manages logging for deployment runs
    - Writes all output to a log file in real-time
    - Shows clean progress UI in console (unless verbose)
    - Never writes configured secret values anywhere
    """

    def __init__(
        self,
        host: str,
        operation: str,
        verbose: bool = False,
        log_dir: Optional[Path] = None,
        secrets: Iterable[str] = (),
        progress_console: Optional[Console] = None,
        diagnostic_console: Optional[Console] = None,
    ):
        """
        Initialize logger

        Args:
            host: Remote host the run targets
            operation: Operation name (e.g., 'deploy')
            verbose: If True, show all output in console
            log_dir: Base logs directory (defaults to <project root>/logs)
            secrets: Values to redact from every line
            progress_console: Console for progress output
            diagnostic_console: Console for diagnostics
        """
        self.host = host
        self.operation = operation
        self.verbose = verbose
        self.console = progress_console or console
        self.error_console = diagnostic_console or error_console
        self.log_file: Optional[TextIO] = None
        self.log_path: Optional[Path] = None
        self.current_step = ""
        self.has_errors = False
        self._secrets = sorted({s for s in secrets if s}, key=len, reverse=True)

        if log_dir is None:
            from debdeploy.utils import get_project_root

            log_dir = get_project_root() / LOG_DIR_NAME

        # Structure: logs/{host}/{date}/{time}_{operation}.log
        now = datetime.now()
        date_str = now.strftime(LOG_DATE_FORMAT)
        time_str = now.strftime("%H-%M-%S")

        host_logs_dir = Path(log_dir) / self._safe_name(host) / date_str
        log_path = host_logs_dir / f"{time_str}_{operation}.log"

        try:
            host_logs_dir.mkdir(parents=True, exist_ok=True)
            # Line-buffered for real-time
            self.log_file = open(log_path, "w", buffering=1, encoding="utf-8")
        except OSError as e:
            self.error_console.print(
                Text(f"Log file disabled: cannot write {log_path} ({e})", style="yellow"),
                soft_wrap=True,
            )
            return

        self.log_path = log_path
        self._write_log_header()

    @staticmethod
    def _safe_name(name: str) -> str:
        return re.sub(r"[^A-Za-z0-9._-]", "_", name) or "unknown"

    def redact(self, text: str) -> str:
        """Replace every registered secret in text."""
        for secret in self._secrets:
            text = text.replace(secret, REDACTED)
        return text

    def _write_log_header(self):
        """Write log file header"""
        header = f"""
{"=" * 80}
debdeploy Deployment Log
{"=" * 80}
Host: {self.host}
Operation: {self.operation}
Started: {datetime.now().isoformat()}
{"=" * 80}

"""
        self.log_file.write(header)
        self.log_file.flush()

    def log(self, message: str, level: str = "INFO"):
        """
        Log a message to file and optionally console

        Args:
            message: Message to log
            level: Log level (INFO, WARNING, ERROR, DEBUG)
        """
        message = self.redact(message)
        timestamp = datetime.now().strftime("%H:%M:%S")
        log_line = f"[{timestamp}] [{level}] {message}\n"

        if self.log_file:
            self.log_file.write(log_line)
            self.log_file.flush()

        if self.verbose:
            text = Text(message)
            if level == "ERROR":
                text.stylize("red")
            elif level == "WARNING":
                text.stylize("yellow")
            elif level == "DEBUG":
                text.stylize("dim")
            self.console.print(text)

    def log_command(self, command: str):
        """Log a command being executed"""
        self.log(f"Executing: {command}", "DEBUG")

    def log_output(self, output: str, stream: str = "stdout", echo: bool = False):
        """
        Log command output

        Always written to the log file; shown in console if verbose or echo.

        Args:
            output: Command output (single line or multiline)
            stream: Stream name (stdout, stderr)
            echo: Show in console even when not verbose
        """
        if not output:
            return

        output = self.redact(output)
        clean_output = ANSI_ESCAPE.sub("", output)

        if self.log_file:
            for line in clean_output.splitlines() or [clean_output]:
                self.log_file.write(f"  [{stream}] {line}\n")
            self.log_file.flush()

        if self.verbose or echo:
            self.console.print(Text.from_ansi(output))

    def log_error(self, error: str, context: Optional[str] = None):
        """
        Log an error with context

        The console line carries the diagnostic timestamp and goes to stderr.

        Args:
            error: Error message
            context: Additional context (e.g., command that failed)
        """
        self.has_errors = True
        error = self.redact(error)
        context = self.redact(context) if context else None

        error_block = f"""
{"!" * 80}
ERROR OCCURRED
{"!" * 80}
{error}
"""
        if context:
            error_block += f"\nContext: {context}\n"

        error_block += f"{'!' * 80}\n\n"

        if self.log_file:
            self.log_file.write(error_block)
            self.log_file.flush()

        report_error(error, target=self.error_console)
        if context:
            self.error_console.print(Text(f"  {context}", style="color(208)"))

    def step(self, step_name: str):
        """
        Start a new step

        Args:
            step_name: Name of the step
        """
        if self.current_step and not self.verbose:
            self.console.print()

        self.current_step = step_name
        self.log(f"Step: {step_name}", "INFO")

        if not self.verbose:
            self.console.print(
                f"[color(214)]▶[/color(214)] [white]{step_name}[/white]"
            )

    def success(self, message: str):
        """Log a success message"""
        self.log(message, "INFO")

        if not self.verbose:
            self.console.print(Text(f"  ✓ {self.redact(message)}", style="dim"))

    def warning(self, message: str):
        """Log a warning message"""
        self.log(message, "WARNING")

        if not self.verbose:
            text = Text("  ⚠ ", style="yellow")
            text.append(self.redact(message), style="dim")
            self.console.print(text)

    def close(self):
        """Close log file"""
        if self.log_file:
            footer = f"""
{"=" * 80}
Completed: {datetime.now().isoformat()}
Status: {"FAILED" if self.has_errors else "SUCCESS"}
{"=" * 80}
"""
            self.log_file.write(footer)
            self.log_file.close()
            self.log_file = None

    def __enter__(self):
        """Context manager entry"""
        return self

    def __exit__(self, exc_type, exc_val, _exc_tb):
        """Context manager exit"""
        if exc_type is not None and not issubclass(exc_type, SystemExit):
            # Errors already reported by the command only need the status flag
            self.has_errors = True
            if self.log_file:
                self.log_file.write(
                    f"[{datetime.now().strftime('%H:%M:%S')}] [ERROR] "
                    f"{exc_type.__name__}: {self.redact(str(exc_val))}\n"
                )
        self.close()
        return False  # Don't suppress exceptions
