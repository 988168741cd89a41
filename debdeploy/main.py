#!/usr/bin/env python3
"""debdeploy CLI - Main entry point"""

import functools
import sys

from rich.console import Console

import rich_click as click
from click.exceptions import Abort, ClickException, UsageError

from debdeploy.commands.deploy import deploy
from debdeploy.constants import EXIT_FAILURE, EXIT_INTERRUPTED, EXIT_SUCCESS
from debdeploy.exceptions import ArgumentError
from debdeploy.logger import error_console, report_error

click.rich_click.USE_RICH_MARKUP = True
click.rich_click.SHOW_ARGUMENTS = True
click.rich_click.MAX_WIDTH = 100

# COMMANDS / OPTIONS
click.rich_click.STYLE_COMMAND = "bold cyan"
click.rich_click.STYLE_OPTION = "bold magenta"
click.rich_click.STYLE_SWITCH = "bold green"

# HEADERS / USAGE
click.rich_click.STYLE_USAGE = "bold yellow"
click.rich_click.STYLE_USAGE_COMMAND = "bold cyan"

# DEFAULTS
click.rich_click.STYLE_OPTION_DEFAULT = "dim cyan"
click.rich_click.STYLE_OPTIONS_PANEL_BORDER = "cyan"

console = Console()

# The deploy command is the whole CLI, rendered with rich-click help
cli = click.RichCommand(
    name="debdeploy",
    callback=deploy.callback,
    params=deploy.params,
    help=deploy.help,
    context_settings=deploy.context_settings,
)


def handle_cli_errors(func):
    """Decorator mapping CLI errors to a single diagnostic and exit code 1."""

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except UsageError as e:
            error = ArgumentError(e.format_message())
            report_error(error.format_message())
            error_console.print(
                "[dim]Run[/dim] [cyan]debdeploy --help[/cyan] [dim]for usage information[/dim]"
            )
            sys.exit(EXIT_FAILURE)
        except ClickException as e:
            report_error(e.format_message())
            sys.exit(EXIT_FAILURE)
        except Abort:
            console.print("\n\n[yellow]⚠️  Operation cancelled by user[/yellow]")
            sys.exit(EXIT_INTERRUPTED)
        except KeyboardInterrupt:
            console.print("\n\n[yellow]⚠️  Operation cancelled by user[/yellow]")
            sys.exit(EXIT_INTERRUPTED)

    return wrapper


@handle_cli_errors
def main(args=None):
    """Main entry point with error handling."""
    code = cli.main(args=args, prog_name="debdeploy", standalone_mode=False)
    sys.exit(code if isinstance(code, int) else EXIT_SUCCESS)


if __name__ == "__main__":
    main()
