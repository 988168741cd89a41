"""
debdeploy - UI Components
Standardized headers and UI elements
"""

from typing import Optional

from rich.console import Console
from rich.markup import escape

LOGO = "debdeploy"

# Color scheme
BRAND_COLOR = "color(214)"


def show_header(
    title: str,
    subtitle: Optional[str] = None,
    host: Optional[str] = None,
    details: Optional[dict] = None,
    console: Optional[Console] = None,
):
    """
    Display a standardized debdeploy command header.

    Args:
        title: Main title (e.g., "Deploy")
        subtitle: Optional subtitle line
        host: Target host (if known)
        details: Additional key-value pairs to display
        console: Rich Console instance (creates new if None)

    Example:
        show_header(
            title="Deploy",
            details={"Env file": ".env", "Payload": "setup.sh"}
        )
    """
    if console is None:
        console = Console()

    prefix = f" [bold {BRAND_COLOR}]{LOGO}[/bold {BRAND_COLOR}] [dim]›[/dim]"

    console.print(f"{prefix} [bold white]{escape(title)}[/bold white]")

    if subtitle:
        console.print(f"{prefix} [dim]{escape(subtitle)}[/dim]")

    if host:
        console.print(f"{prefix} Host: [cyan]{escape(host)}[/cyan]")

    if details:
        for key, value in details.items():
            console.print(f"{prefix} {escape(str(key))}: [cyan]{escape(str(value))}[/cyan]")

    # Single blank line after header
    console.print()
