"""
Error reporting and exit codes for the prmerge CLI.

Each fatal condition is printed once, as a headline naming the step that
failed followed by the underlying error.
"""

from enum import IntEnum

from rich.console import Console
from rich.markup import escape

from prmerge.core.errors import (
    ApiError,
    MergeConflictError,
    PrMergeError,
)

err_console = Console(stderr=True)


class ExitCode(IntEnum):
    """Standard exit codes for prmerge."""

    SUCCESS = 0
    """Run completed."""

    GENERAL_ERROR = 1
    """Any fatal condition: setup, API, git or merge failure."""

    USER_ERROR = 2
    """Bad command-line usage (reported by typer)."""

    SIGINT = 130
    """Terminated by SIGINT (Ctrl+C) - Unix standard."""


def print_error(
    problem: str,
    *,
    reason: str | None = None,
    solution: str | None = None,
) -> None:
    """
    Print a standardized error message.

    Args:
        problem: Brief description of what went wrong
        reason: Optional detail, usually the exception text
        solution: Optional hint for fixing it
    """
    err_console.print(f"[red]Error:[/red] {problem}")

    if reason:
        err_console.print(f"[dim]{escape(reason)}[/dim]", highlight=False)

    if solution:
        err_console.print(f"[cyan]→ Try:[/cyan] {solution}")


def report_error(error: PrMergeError, headline: str) -> None:
    """Print a fatal error with its context."""
    solution = None
    if isinstance(error, MergeConflictError):
        solution = "--continue-on-failure to skip PRs that do not merge"
    elif isinstance(error, ApiError) and error.context.get("status_code") in (401, 403):
        solution = "--auth USER:TOKEN"
    print_error(headline, reason=str(error), solution=solution)
