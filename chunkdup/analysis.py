"""File classification: binary sniffing, noise files and glob filters."""

from fnmatch import fnmatch
from pathlib import Path
from typing import Optional, Sequence

from chunkdup.exceptions import FileOperationError
from chunkdup.models import BINARY_SAMPLE_SIZE, AnalyzerConfig, SourceFile

__all__ = [
    "FileAnalyzer",
    "is_binary",
    "is_binary_sample",
    "is_noise_file",
    "matches_patterns",
]

# Substrings of the lowercased path that mark a file as noise
NOISE_PATTERNS = (
    # Config files
    ".json",
    ".xml",
    ".yaml",
    ".yml",
    ".toml",
    ".ini",
    ".cfg",
    ".conf",
    # Lock files
    "package-lock.json",
    "yarn.lock",
    "cargo.lock",
    "gemfile.lock",
    "composer.lock",
    "poetry.lock",
    # Generated/build files
    ".min.js",
    ".min.css",
    ".d.ts",
    ".map",
    # Documentation
    ".md",
    ".txt",
    ".rst",
    ".adoc",
    # Data files
    ".csv",
    ".sql",
    ".db",
    ".sqlite",
    # Assets
    ".png",
    ".jpg",
    ".jpeg",
    ".gif",
    ".svg",
    ".ico",
    ".woff",
    ".woff2",
    ".ttf",
    ".eot",
    # Vendor/dependencies
    "/vendor/",
    "/node_modules/",
    "/target/",
    "/build/",
    "/dist/",
    "/.git/",
    # Test fixtures
    "/fixtures/",
    "/mocks/",
    "/test/data/",
    "/testdata/",
)

# Prefixes of the lowercased file name that mark a file as noise
NOISE_FILES = (
    "readme",
    "license",
    "changelog",
    "makefile",
    "dockerfile",
    "docker-compose",
    "vagrantfile",
    ".gitignore",
    ".dockerignore",
    ".eslintrc",
    ".prettierrc",
    "tsconfig.json",
    "jest.config.js",
    "webpack.config.js",
    "rollup.config.js",
)


def is_binary_sample(sample: bytes) -> bool:
    """A sample is binary when more than 1% of its bytes are NUL."""
    if not sample:
        return False
    return sample.count(0) > len(sample) // 100


def is_binary(path: Path, sample_size: int = BINARY_SAMPLE_SIZE) -> bool:
    """Check whether a file looks binary from its first bytes.

    Raises:
        FileOperationError: If the file cannot be read
    """
    try:
        with path.open("rb") as f:
            sample = f.read(sample_size)
    except OSError as e:
        raise FileOperationError(
            f"Failed to read file: {e}", str(path), "read"
        ) from e
    return is_binary_sample(sample)


def is_noise_file(path: Path) -> bool:
    """Check if a path is a config, generated, vendored or documentation file."""
    path_str = path.as_posix().lower()
    filename = path.name.lower()
    return any(pattern in path_str for pattern in NOISE_PATTERNS) or any(
        filename.startswith(name) for name in NOISE_FILES
    )


def matches_patterns(
    path: Path, include: Sequence[str], exclude: Sequence[str]
) -> bool:
    """Apply include/exclude globs; exclusion always wins."""
    path_str = path.as_posix()
    if any(fnmatch(path_str, pattern) for pattern in exclude):
        return False
    if include:
        return any(fnmatch(path_str, pattern) for pattern in include)
    return True


class FileAnalyzer:
    """Decides whether a file belongs to the corpus."""

    def __init__(self, config: AnalyzerConfig) -> None:
        self.config = config

    def analyze_file(self, file_path: Path) -> Optional[SourceFile]:
        """Analyze a file and return a SourceFile if it should be scored."""
        try:
            if not self._is_candidate(file_path):
                return None

            source = SourceFile.from_path(file_path)
            if self.config.skip_empty and source.size == 0:
                return None
            if self._is_binary_content(source):
                return None
            return source
        except (OSError, FileOperationError):
            return None

    def _is_candidate(self, file_path: Path) -> bool:
        """Check path-level rules before touching file content."""
        if file_path.is_symlink() and not self.config.follow_symlinks:
            return False
        if not file_path.is_file():
            return False
        if not matches_patterns(file_path, self.config.include, self.config.exclude):
            return False
        if self.config.skip_noise and is_noise_file(file_path):
            return False
        return True

    def _is_binary_content(self, source: SourceFile) -> bool:
        sample = next(source.read_chunk(self.config.binary_sample_size), b"")
        return is_binary_sample(sample)
