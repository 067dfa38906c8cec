"""
Exceptions for prmerge.

Every failure in a run is reported through one of these exceptions. Each
carries a human-readable message plus keyword context (URL, status code,
PR number, command) so the CLI can report it once without retrying.

Exception Hierarchy:
    PrMergeError (base)
    ├── ConfigurationError (bad or missing local setup)
    ├── ApiError (GitHub API failures)
    │   ├── HttpError (non-200 response or transport failure)
    │   └── ParseError (response body is not a JSON array)
    ├── VcsCommandError (a git command exited non-zero)
    └── MergeConflictError (a PR could not be merged)

Example:
    >>> try:
    ...     raise HttpError("https://api.github.com/x", 404)
    ... except ApiError as e:
    ...     print(e.context["status_code"])
    404
"""

from __future__ import annotations


class PrMergeError(Exception):
    """
    Base exception for all prmerge errors.

    Attributes:
        message: Human-readable error message
        context: Dictionary of additional context
    """

    def __init__(self, message: str, **context: object) -> None:
        """
        Initialize an error with message and context.

        Args:
            message: Human-readable error message
            **context: Additional context as keyword arguments
        """
        super().__init__(message)
        self.message = message
        self.context = context

    def __str__(self) -> str:
        return self.message


class ConfigurationError(PrMergeError):
    """
    Raised when the local setup is unusable.

    Covers a missing folder, an unknown remote, a remote URL that does not
    point at GitHub, and invalid configuration values. Never retried.
    """


class ApiError(PrMergeError):
    """Base exception for GitHub API failures."""

    def __init__(self, url: str, message: str, **context: object) -> None:
        super().__init__(message, url=url, **context)
        self.url = url


class HttpError(ApiError):
    """
    Raised when an API request does not return HTTP 200.

    A transport failure (connection refused, timeout) is reported with a
    ``status_code`` of None and the underlying error chained as ``__cause__``.
    """

    def __init__(self, url: str, status_code: int | None, detail: str | None = None) -> None:
        if status_code is None:
            message = f"Request to '{url}' failed: {detail or 'no response'}"
        else:
            message = f"Request to '{url}' returned HTTP {status_code}, expected HTTP 200."
        super().__init__(url, message, status_code=status_code)
        self.status_code = status_code


class ParseError(ApiError):
    """Raised when an API response is not a well-formed JSON array."""

    def __init__(self, url: str, content: str) -> None:
        snippet = content if len(content) <= 200 else content[:200] + "..."
        super().__init__(
            url,
            f"Request to '{url}' returned '{snippet}', which is not a valid array.",
        )


class VcsCommandError(PrMergeError):
    """
    Raised when a git command fails.

    Attributes:
        operation: Short description of the step that failed
        command: The command line that was executed
        returncode: Exit status, or None if the command never ran
    """

    def __init__(
        self,
        operation: str,
        command: list[str] | None = None,
        returncode: int | None = None,
    ) -> None:
        super().__init__(operation, command=command, returncode=returncode)
        self.operation = operation
        self.command = command or []
        self.returncode = returncode


class MergeConflictError(PrMergeError):
    """Raised when merging a PR fails even with the ours-biased strategy."""

    def __init__(self, pr_number: int) -> None:
        super().__init__(
            f"Failed to merge PR {pr_number} (too many conflicts?)",
            pr_number=pr_number,
        )
        self.pr_number = pr_number


__all__ = [
    "PrMergeError",
    "ConfigurationError",
    "ApiError",
    "HttpError",
    "ParseError",
    "VcsCommandError",
    "MergeConflictError",
]
