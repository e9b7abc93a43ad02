"""Common test fixtures."""

import random
import string
from io import StringIO
from pathlib import Path
from typing import Callable

import pytest
from rich.console import Console

ALPHABET = string.ascii_lowercase + string.digits


def make_text(seed: int, size: int, line_length: int = 40) -> str:
    """Random text that normalization leaves unchanged.

    Lines are lowercase alphanumerics without spaces or comment markers,
    each followed by a newline.
    """
    rng = random.Random(seed)
    lines = []
    total = 0
    while total < size:
        line = "".join(rng.choice(ALPHABET) for _ in range(line_length))
        lines.append(line + "\n")
        total += line_length + 1
    return "".join(lines)


@pytest.fixture
def random_text() -> Callable[..., str]:
    """Factory for deterministic, already-normalized random text."""
    return make_text


@pytest.fixture
def create_file_with_content(tmp_path: Path) -> Callable[[str, str], Path]:
    """Create a file with given content."""

    def _create(name: str, content: str) -> Path:
        file_path = tmp_path / name
        file_path.parent.mkdir(parents=True, exist_ok=True)
        file_path.write_text(content)
        return file_path

    return _create


@pytest.fixture
def test_console() -> Console:
    """Create a test console with consistent settings."""
    return Console(file=StringIO(), force_terminal=False, no_color=True, width=200)


@pytest.fixture
def console_text(test_console: Console) -> Callable[[], str]:
    """Return a reader for everything printed to ``test_console``."""

    def _read() -> str:
        file = test_console.file
        assert isinstance(file, StringIO)
        return file.getvalue()

    return _read
