import logging
from typing import Dict, Type

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel

logger = logging.getLogger(__name__)


class ChunkDupError(Exception):
    """Base exception class for chunkdup."""

    pass


class ConfigurationError(ChunkDupError):
    """Raised when command line or config values are invalid."""

    pass


class FileOperationError(ChunkDupError):
    """Raised when reading or decoding a corpus file fails."""

    def __init__(self, message: str, path: str, operation: str):
        self.reason = message
        self.path = path
        self.operation = operation
        super().__init__(f"{operation} failed for {path}: {message}")


class InvalidFileError(ChunkDupError):
    """Raised when a path given on the command line cannot be scanned."""

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Invalid file {path}: {reason}")


# Checked in order, so subclasses must come before their bases
EXIT_CODES: Dict[Type[Exception], int] = {
    ConfigurationError: 2,
    FileOperationError: 3,
    InvalidFileError: 4,
}


def exit_code_for(error: Exception) -> int:
    for error_type, code in EXIT_CODES.items():
        if isinstance(error, error_type):
            return code
    return 1


def handle_error(console: Console, error: Exception) -> int:
    """Print a red panel describing ``error`` and return the exit code."""
    console.print(
        Panel(
            format_error_message(error),
            title="Error",
            border_style="red",
            padding=(1, 2),
        )
    )

    code = exit_code_for(error)
    if code == 1:
        logger.exception("Unexpected error: %s", error)
    else:
        logger.error("%s (exit code %d)", error, code)
    return code


def format_error_message(error: Exception) -> str:
    """Describe an error for display, naming the file involved."""
    if isinstance(error, ConfigurationError):
        return f"[red]Invalid configuration[/red]\n{escape(str(error))}"
    if isinstance(error, FileOperationError):
        return (
            f"[red]Could not {error.operation} {escape(error.path)}[/red]\n"
            f"{escape(error.reason)}"
        )
    if isinstance(error, InvalidFileError):
        return f"[red]Invalid file[/red] {escape(error.path)}\n{escape(error.reason)}"
    return f"[red]Error: {escape(str(error))}[/red]"
