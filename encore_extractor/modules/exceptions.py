"""Custom exceptions for the encore extraction pipeline.

This module defines a hierarchy of exceptions that allow each step to
communicate failures in a structured way. Every exception below is fatal
for the pipeline; the only locally recovered conditions (per-file copy
failures and missing optional artifacts) are reported through
:mod:`common.models` instead of being raised.
"""

from typing import Optional, Sequence


class ExtractionError(Exception):
    """
    Base exception for all extraction pipeline errors.

    This is the root of the exception hierarchy and is caught by the
    CLI for global error handling.
    """

    def __init__(self, message: str, cause: Optional[Exception] = None):
        """
        Initialize the exception.

        Args:
            message: Human-readable error message
            cause: The original exception that caused this error (if any)
        """
        super().__init__(message)
        self.message = message
        self.cause = cause

    def __str__(self) -> str:
        """Return a detailed string representation."""
        if self.cause:
            return f"{self.message} (caused by: {type(self.cause).__name__}: {str(self.cause)})"
        return self.message


class ExternalCommandError(ExtractionError):
    """
    Exception raised when an external program exits unsuccessfully
    or cannot be started at all.
    """

    def __init__(
        self,
        program: str,
        args: Sequence[str],
        stderr: str,
        returncode: Optional[int] = None,
        cause: Optional[Exception] = None,
    ):
        self.program = program
        self.args_list = list(args)
        self.stderr = stderr
        self.returncode = returncode
        super().__init__(
            f"Command {program} {self.args_list} failed: {stderr.strip()}",
            cause=cause,
        )


class ExecutableNotFoundError(ExternalCommandError):
    """Exception raised when a required executable is not on ``PATH``."""

    def __init__(self, name: str):
        self.name = name
        super().__init__("which", [name], f"Failed to locate '{name}'")


class ParseError(ExtractionError):
    """
    Exception raised when the image manifest cannot be read or decoded.
    """

    pass


class NoLayersFoundError(ExtractionError):
    """
    Exception raised when the manifest is well formed but lists no
    usable layer sources.
    """

    pass


class CopyError(ExtractionError):
    """
    Exception raised when a directory copy fails structurally
    (destination or intermediate directory creation, traversal I/O).
    """

    pass


class SourceNotFoundError(CopyError):
    """Exception raised when a copy source is missing or not a directory."""

    pass


class WorkspaceError(ExtractionError):
    """
    Exception raised for generic filesystem failures around the pipeline:
    stale output removal, temporary workspace creation and cleanup.
    """

    pass


# Convenience function for wrapping exceptions
def wrap_exception(
    exception_class: type[ExtractionError],
    message: str,
    cause: Exception
) -> ExtractionError:
    """
    Wrap a lower-level exception in a domain-specific exception.

    Args:
        exception_class: The custom exception class to use
        message: Descriptive message about what operation failed
        cause: The original exception that was caught

    Returns:
        An instance of the specified exception class

    Example:
        try:
            manifest_path.read_bytes()
        except OSError as e:
            raise wrap_exception(
                ParseError,
                "Unable to read manifest",
                e
            )
    """
    return exception_class(message, cause=cause)


__all__ = [
    "ExtractionError",
    "ExternalCommandError",
    "ExecutableNotFoundError",
    "ParseError",
    "NoLayersFoundError",
    "CopyError",
    "SourceNotFoundError",
    "WorkspaceError",
    "wrap_exception",
]
