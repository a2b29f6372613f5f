"""
Errors raised by the ``vellum`` command line.

A CLI error knows how to present itself: it prints a rich panel naming the
settings file and, when the cause is a filter error, the filter involved,
then ends the command with its own exit code.
"""

from typing import NoReturn

import typer
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel

from vellum.exceptions import FilterError, VellumError

console = Console(stderr=True)


class VellumCLIError(VellumError):
    """Base class for errors reported to the user by a CLI command."""

    title = "Vellum CLI Error"

    def __init__(
        self,
        message: str,
        hint: str | None = None,
        code: int = 2,
        settings_file: str | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.hint = hint
        self.code = code
        self.settings_file = settings_file
        self.cause = cause

    @property
    def filter_name(self) -> str:
        """Name of the filter that caused the error, if any."""
        if isinstance(self.cause, FilterError):
            return self.cause.filter_name
        return ""

    def format_rich(self) -> str:
        """Build the panel body. Dynamic values are escaped so they never read as markup."""
        lines = [f"[red bold]Error:[/] {escape(self.message)}"]
        if self.settings_file:
            lines.append(f"[cyan]Settings file:[/] {escape(self.settings_file)}")
        if self.filter_name:
            lines.append(f"[cyan]Filter:[/] {escape(self.filter_name)}")
        if self.cause is not None:
            lines.append(f"[dim]Caused by {type(self.cause).__name__}[/]")
        if self.hint:
            lines.append(f"[yellow]Hint:[/] {escape(self.hint)}")
        return "\n".join(lines)

    def exit(self) -> NoReturn:
        """Print the error panel and end the command with ``self.code``."""
        console.print(Panel(self.format_rich(), title=f"[red]{self.title}[/]", border_style="red"))
        raise typer.Exit(code=self.code)


class CLIShowError(VellumCLIError):
    """Raised when the 'show' command cannot build or describe the registry."""

    title = "vellum show"
