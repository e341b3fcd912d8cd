"""Output helpers for the CLI."""

from rich.console import Console
from rich.markup import escape

console = Console()
err_console = Console(stderr=True)


def print_success(message: str) -> None:
    """Print a success message."""
    console.print(f"[green]✓[/green] {message}")


def print_error(message: str) -> None:
    """Print an error message to stderr."""
    err_console.print(f"[red]✗[/red] {escape(message)}")


def print_warning(message: str) -> None:
    """Print a warning message."""
    console.print(f"[yellow]{message}[/yellow]")
