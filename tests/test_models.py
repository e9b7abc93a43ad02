from pathlib import Path
from typing import Any, Callable

import pytest

from chunkdup.exceptions import FileOperationError
from chunkdup.models import (
    AnalyzerConfig,
    ChunkerConfig,
    CLIConfig,
    ScoreSelection,
    SourceFile,
)
from chunkdup.types import Strategy


def test_source_file_from_path(
    create_file_with_content: Callable[[str, str], Path],
) -> None:
    """Test SourceFile creation from path."""
    path = create_file_with_content("main.py", "Hello, World!")
    source = SourceFile.from_path(path)

    assert source.path == path
    assert source.size == len("Hello, World!")


def test_source_file_read_chunk(
    create_file_with_content: Callable[[str, str], Path],
) -> None:
    source = SourceFile.from_path(create_file_with_content("test.py", "abcdefg"))
    assert list(source.read_chunk(3)) == [b"abc", b"def", b"g"]


def test_source_file_read_chunk_missing(
    create_file_with_content: Callable[[str, str], Path],
) -> None:
    path = create_file_with_content("gone.py", "x")
    source = SourceFile.from_path(path)
    path.unlink()

    with pytest.raises(FileOperationError):
        list(source.read_chunk())


def test_chunker_config_defaults() -> None:
    config = ChunkerConfig()
    assert config.window_size == 32
    assert config.base == 257
    assert config.modulus == 1_000_000_007
    assert config.boundary_mask == 0xFF
    assert config.min_chunk_size == 20
    assert config.min_content_size == 100


def test_analyzer_config_defaults() -> None:
    config = AnalyzerConfig()
    assert not config.follow_symlinks
    assert not config.include_hidden
    assert config.use_gitignore


def test_analyzer_config_validation() -> None:
    with pytest.raises(ValueError):
        AnalyzerConfig(binary_sample_size=0)


def test_cli_config_defaults() -> None:
    config = CLIConfig()
    assert config.paths == ["."]
    assert config.strategy is Strategy.INDEXED
    assert config.output_format == "table"
    assert config.group_threshold == 0.5
    assert config.threshold is None
    assert not config.follow_symlinks
    assert config.selection == ScoreSelection()


@pytest.mark.parametrize(
    "kwargs, message",
    [
        ({"paths": []}, "At least one path"),
        ({"group_threshold": 0.0}, "Group threshold"),
        ({"group_threshold": 1.5}, "Group threshold"),
        ({"threshold": 0}, "Threshold must be between 1 and 100"),
        ({"threshold": 101}, "Threshold must be between 1 and 100"),
        ({"max_workers": 0}, "max_workers"),
        ({"top": 0}, "top"),
        ({"skip": -1}, "skip"),
        ({"min_score": 101}, "min_score"),
        ({"output_format": "xml"}, "Invalid format"),
    ],
)
def test_cli_config_validation(kwargs: Any, message: str) -> None:
    with pytest.raises(ValueError, match=message):
        CLIConfig(**kwargs)


def test_cli_config_analyzer_config() -> None:
    config = CLIConfig(
        include=["*.py"],
        exclude=["*/build/*"],
        no_noise=True,
        follow_symlinks=True,
        hidden=True,
        no_ignore=True,
    )
    analyzer = config.analyzer_config
    assert analyzer.include == ["*.py"]
    assert analyzer.exclude == ["*/build/*"]
    assert analyzer.skip_noise
    assert analyzer.follow_symlinks
    assert analyzer.include_hidden
    assert not analyzer.use_gitignore
    assert config.chunker_config == ChunkerConfig()


def test_cli_config_selection() -> None:
    config = CLIConfig(top=3, skip=1, min_score=10, threshold=50, show_all=True)
    assert config.selection == ScoreSelection(
        top=3, skip=1, min_score=10, threshold=50, keep_zero=True
    )
