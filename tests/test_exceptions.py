from typing import Callable

import pytest
from rich.console import Console

from chunkdup.exceptions import (
    ChunkDupError,
    ConfigurationError,
    FileOperationError,
    InvalidFileError,
    exit_code_for,
    format_error_message,
    handle_error,
)


def test_file_operation_error_attributes() -> None:
    error = FileOperationError("denied", "src/a.py", "read")
    assert isinstance(error, ChunkDupError)
    assert error.path == "src/a.py"
    assert error.operation == "read"
    assert error.reason == "denied"
    assert str(error) == "read failed for src/a.py: denied"


def test_invalid_file_error_attributes() -> None:
    error = InvalidFileError("b.py", "path does not exist")
    assert error.path == "b.py"
    assert str(error) == "Invalid file b.py: path does not exist"


@pytest.mark.parametrize(
    "error, exit_code",
    [
        (ConfigurationError("bad"), 2),
        (FileOperationError("denied", "a.py", "read"), 3),
        (InvalidFileError("b.py", "missing"), 4),
        (ChunkDupError("other"), 1),
        (RuntimeError("boom"), 1),
    ],
)
def test_exit_code_for(error: Exception, exit_code: int) -> None:
    assert exit_code_for(error) == exit_code


@pytest.mark.parametrize(
    "error, exit_code, message",
    [
        (ConfigurationError("bad threshold"), 2, "Invalid configuration"),
        (FileOperationError("denied", "a.py", "decode"), 3, "Could not decode a.py"),
        (InvalidFileError("b.py", "path does not exist"), 4, "path does not exist"),
        (RuntimeError("boom"), 1, "Error: boom"),
    ],
)
def test_handle_error(
    error: Exception,
    exit_code: int,
    message: str,
    test_console: Console,
    console_text: Callable[[], str],
) -> None:
    assert handle_error(test_console, error) == exit_code
    assert message in console_text()


def test_format_error_message_names_the_file() -> None:
    message = format_error_message(FileOperationError("denied", "a.py", "read"))
    assert message == "[red]Could not read a.py[/red]\ndenied"

    message = format_error_message(InvalidFileError("b.py", "path does not exist"))
    assert message == "[red]Invalid file[/red] b.py\npath does not exist"


def test_format_error_message_escapes_markup() -> None:
    message = format_error_message(InvalidFileError("[bold]c.py", "missing"))
    assert "\\[bold]c.py" in message
