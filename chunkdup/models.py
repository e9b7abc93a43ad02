"""Models for files, chunking parameters and CLI configuration."""

from argparse import Namespace
from dataclasses import dataclass, field
from pathlib import Path
from typing import Generator, List, Optional

from chunkdup.exceptions import FileOperationError
from chunkdup.types import Strategy

# Rolling hash parameters
WINDOW_SIZE = 32
BASE = 257
MODULUS = 1_000_000_007

# A boundary is declared when the low 8 bits of the window hash are zero
BOUNDARY_MASK = 0xFF

MIN_CHUNK_SIZE = 20
MIN_CONTENT_SIZE = 100

BINARY_SAMPLE_SIZE = 512


@dataclass(frozen=True)
class ChunkerConfig:
    """Parameters of the chunker and of the scoring short-circuits."""

    window_size: int = WINDOW_SIZE
    base: int = BASE
    modulus: int = MODULUS
    boundary_mask: int = BOUNDARY_MASK
    min_chunk_size: int = MIN_CHUNK_SIZE
    min_content_size: int = MIN_CONTENT_SIZE

    def __post_init__(self) -> None:
        """Validate numeric constraints."""
        if self.window_size <= 0:
            raise ValueError("window_size must be positive")
        if self.base <= 1:
            raise ValueError("base must be greater than 1")
        if self.modulus <= self.base:
            raise ValueError("modulus must be greater than base")
        if self.boundary_mask < 0:
            raise ValueError("boundary_mask must not be negative")
        if self.min_chunk_size <= 0:
            raise ValueError("min_chunk_size must be positive")
        if self.min_content_size < 0:
            raise ValueError("min_content_size must not be negative")


@dataclass
class AnalyzerConfig:
    """Configuration for corpus file selection."""

    include: List[str] = field(default_factory=list)
    exclude: List[str] = field(default_factory=list)
    skip_noise: bool = False
    follow_symlinks: bool = False
    include_hidden: bool = False
    use_gitignore: bool = True
    skip_empty: bool = False
    binary_sample_size: int = BINARY_SAMPLE_SIZE

    def __post_init__(self) -> None:
        if self.binary_sample_size <= 0:
            raise ValueError("binary_sample_size must be positive")


@dataclass
class SourceFile:
    """A corpus file with its basic metadata."""

    path: Path
    size: int

    @classmethod
    def from_path(cls, path: Path) -> "SourceFile":
        """Create a SourceFile instance from a path."""
        return cls(path=path, size=path.stat().st_size)

    def read_chunk(self, chunk_size: int = 8 * 1024) -> Generator[bytes, None, None]:
        """
        Read file in chunks to avoid memory issues.

        Args:
            chunk_size: Size of chunks to read

        Raises:
            FileOperationError: If file cannot be read
        """
        try:
            with self.path.open("rb") as f:
                while chunk := f.read(chunk_size):
                    yield chunk
        except OSError as e:
            raise FileOperationError(
                f"Failed to read file: {e}", str(self.path), "read"
            ) from e


@dataclass(frozen=True)
class ScoreSelection:
    """Which scores a listing shows.

    Filters apply in order: zero scores are dropped unless ``keep_zero``,
    then ``min_score``, then ``threshold`` (a percentage of the highest
    remaining score), then ``skip`` and finally ``top``.
    """

    top: Optional[int] = None
    skip: Optional[int] = None
    min_score: Optional[int] = None
    threshold: Optional[int] = None
    keep_zero: bool = False


@dataclass
class CLIConfig:
    """Configuration for CLI operation."""

    paths: List[str] = field(default_factory=lambda: ["."])
    include: List[str] = field(default_factory=list)
    exclude: List[str] = field(default_factory=list)
    no_noise: bool = False
    hidden: bool = False
    no_ignore: bool = False
    strategy: Strategy = Strategy.INDEXED
    max_workers: Optional[int] = None
    top: Optional[int] = None
    skip: Optional[int] = None
    min_score: Optional[int] = None
    threshold: Optional[int] = None
    show_all: bool = False
    summary: bool = False
    groups: bool = False
    group_threshold: float = 0.5
    output_format: str = "table"
    follow_symlinks: bool = False
    log_file: Optional[Path] = None
    log_json: bool = False
    verbose: bool = False

    VALID_FORMATS = {"table", "json"}

    @classmethod
    def from_args(cls, args: Namespace) -> "CLIConfig":
        """Create a CLIConfig from parsed command line arguments."""
        return cls(
            paths=args.paths or ["."],
            include=args.include or [],
            exclude=args.exclude or [],
            no_noise=args.no_noise,
            hidden=args.hidden,
            no_ignore=args.no_ignore,
            strategy=Strategy(args.strategy),
            max_workers=args.max_workers,
            top=args.top,
            skip=args.skip,
            min_score=args.min_score,
            threshold=args.threshold,
            show_all=args.all,
            summary=args.summary,
            groups=args.groups,
            group_threshold=args.group_threshold,
            output_format=args.format,
            follow_symlinks=args.follow_symlinks,
            log_file=args.log_file,
            log_json=args.log_json,
            verbose=args.verbose,
        )

    def __post_init__(self) -> None:
        """Validate configuration."""
        if not self.paths:
            raise ValueError("At least one path must be provided")
        if self.group_threshold <= 0 or self.group_threshold > 1:
            raise ValueError("Group threshold must be between 0 and 1")
        if self.threshold is not None and not 1 <= self.threshold <= 100:
            raise ValueError("Threshold must be between 1 and 100")
        if self.max_workers is not None and self.max_workers <= 0:
            raise ValueError("max_workers must be positive")
        if self.top is not None and self.top <= 0:
            raise ValueError("top must be positive")
        if self.skip is not None and self.skip < 0:
            raise ValueError("skip must not be negative")
        if self.min_score is not None and not 0 <= self.min_score <= 100:
            raise ValueError("min_score must be between 0 and 100")
        if self.output_format not in self.VALID_FORMATS:
            formats = ", ".join(sorted(self.VALID_FORMATS))
            raise ValueError(f"Invalid format. Must be one of: {formats}")

    @property
    def chunker_config(self) -> ChunkerConfig:
        """Create ChunkerConfig from settings."""
        return ChunkerConfig()

    @property
    def analyzer_config(self) -> AnalyzerConfig:
        """Create AnalyzerConfig from settings."""
        return AnalyzerConfig(
            include=list(self.include),
            exclude=list(self.exclude),
            skip_noise=self.no_noise,
            follow_symlinks=self.follow_symlinks,
            include_hidden=self.hidden,
            use_gitignore=not self.no_ignore,
        )

    @property
    def selection(self) -> ScoreSelection:
        """Create ScoreSelection from the listing options."""
        return ScoreSelection(
            top=self.top,
            skip=self.skip,
            min_score=self.min_score,
            threshold=self.threshold,
            keep_zero=self.show_all,
        )
