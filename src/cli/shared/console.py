"""Shared console utilities for CLI commands.

This module provides console output, error handling, and the operator
prompt used across the CLI.
"""

from collections.abc import Callable
from functools import wraps

import typer
from rich.console import Console, ConsoleRenderable
from rich.markup import escape
from rich.panel import Panel
from rich.status import Status

from src.infra.errors import DeploymentError


class CLIConsole:
    """Rich console wrapper for consistent CLI output."""

    def __init__(self, console: Console | None = None) -> None:
        """Initialize the CLI console.

        Args:
            console: Underlying rich console (a new one by default)
        """
        self.console = console or Console()

    def print(
        self, msg: ConsoleRenderable | str | None = None, *, soft_wrap: bool = False
    ) -> None:
        if msg is None:
            self.console.print()
            return
        self.console.print(msg, soft_wrap=soft_wrap)

    def status(self, status: str) -> Status:
        return self.console.status(status)

    def input(self, prompt: str) -> str:
        return self.console.input(prompt)

    def info(self, msg: str) -> None:
        self.console.print(f"[cyan]ℹ[/cyan]  {msg}")

    def ok(self, msg: str) -> None:
        self.console.print(f"[green]✅[/green] {msg}")

    def error(self, msg: str) -> None:
        self.console.print(f"[red]❌[/red] {msg}")

    def warn(self, msg: str) -> None:
        self.console.print(f"[yellow]⚠️[/yellow]  {msg}")

    def handle_error(
        self, message: str, details: str | None = None, exit_code: int = 1
    ) -> None:
        """Handle an error by printing a message and exiting.

        Args:
            message: Error message to display
            details: Optional additional details, shown verbatim
            exit_code: Exit code to use
        """
        self.console.print(f"\n[bold red]❌ {escape(message)}[/bold red]\n")
        if details:
            self.console.print(
                Panel(escape(details), title="Details", border_style="red")
            )
        raise typer.Exit(exit_code)

    def print_header(self, title: str, style: str = "blue") -> None:
        """Print a styled header panel.

        Args:
            title: Header title text
            style: Border style color
        """
        self.console.print(
            Panel.fit(
                f"[bold {style}]{title}[/bold {style}]",
                border_style=style,
            )
        )

    def print_subheader(self, title: str) -> None:
        """Print a subheader.

        Args:
            title: Subheader title text
        """
        self.console.print(f"\n[bold underline]{title}[/bold underline]\n")


def with_error_handling(func: Callable[..., None]) -> Callable[..., None]:
    """Decorator to wrap command functions with standard error handling.

    Catches deployment errors and formats them consistently.

    Args:
        func: The command function to wrap

    Returns:
        Wrapped function with error handling
    """

    @wraps(func)
    def wrapper(*args: object, **kwargs: object) -> None:
        try:
            func(*args, **kwargs)
        except DeploymentError as e:
            console.handle_error(e.message, e.details)
        except KeyboardInterrupt:
            console.print("\n[dim]Operation cancelled by user.[/dim]")
            raise typer.Exit(130) from None

    return wrapper


# Shared console instance for consistent output
console = CLIConsole()
