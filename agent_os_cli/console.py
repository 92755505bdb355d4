"""Shared Rich console instances for CLI output."""

from rich.console import Console

from .utils.error_format import escape_markup
from .utils.error_format import format_error_message

console = Console()
error_console = Console(stderr=True)


def print_error(error: BaseException | str) -> None:
    """Print an error to stderr, escaping anything Rich would treat as markup."""
    message = format_error_message(error, include_type=False) if isinstance(error, BaseException) else error
    error_console.print(f"[red]Error:[/red] {escape_markup(message)}")


__all__ = ["console", "error_console", "print_error"]
