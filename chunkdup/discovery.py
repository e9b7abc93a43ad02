"""Corpus discovery: walking paths and filtering candidate files."""

import os
import time
from pathlib import Path
from typing import Dict, List, Optional, Set, Tuple

from pathspec import GitIgnoreSpec

from chunkdup.analysis import FileAnalyzer
from chunkdup.exceptions import InvalidFileError
from chunkdup.logging import get_logger
from chunkdup.models import AnalyzerConfig, SourceFile
from chunkdup.types import FileIterator

logger = get_logger()

SKIPPED_DIRS = {".git", ".hg", ".svn"}
IGNORE_FILE = ".gitignore"

# An ignore file's directory paired with its compiled patterns
IgnoreRules = List[Tuple[Path, GitIgnoreSpec]]


def is_hidden(name: str) -> bool:
    return name.startswith(".")


def load_ignore_file(directory: Path) -> Optional[GitIgnoreSpec]:
    """Compile ``directory/.gitignore`` if there is one."""
    ignore_file = directory / IGNORE_FILE
    if not ignore_file.is_file():
        return None
    try:
        lines = ignore_file.read_text(encoding="utf-8", errors="replace").splitlines()
    except OSError as e:
        logger.warning_with_fields(
            "Failed to read ignore file",
            operation="load_ignore",
            path=str(ignore_file),
            error_message=str(e),
        )
        return None
    return GitIgnoreSpec.from_lines(lines)


def is_ignored(path: Path, is_dir: bool, rules: IgnoreRules) -> bool:
    """Check a path against every ignore file above it, nearest last."""
    ignored = False
    for base, spec in rules:
        relative = path.relative_to(base).as_posix()
        if is_dir:
            relative += "/"
        result = spec.check_file(relative)
        if result.include is not None:
            ignored = result.include
    return ignored


def walk_directory(
    root: Path,
    follow_symlinks: bool = False,
    include_hidden: bool = False,
    use_gitignore: bool = True,
) -> FileIterator:
    """Yield the files under ``root`` in sorted order.

    VCS directories are always skipped. Hidden entries are skipped unless
    ``include_hidden`` is set, and ``.gitignore`` files are honoured unless
    ``use_gitignore`` is off. With ``follow_symlinks`` every directory is
    entered at most once, so link cycles terminate.
    """
    rules_by_dir: Dict[Path, IgnoreRules] = {}
    visited: Set[Tuple[int, int]] = set()

    for dirpath, dirs, files in os.walk(root, followlinks=follow_symlinks):
        current = Path(dirpath)
        stat = current.stat()
        if (stat.st_dev, stat.st_ino) in visited:
            dirs[:] = []
            continue
        visited.add((stat.st_dev, stat.st_ino))

        rules = list(rules_by_dir.pop(current, []))
        if use_gitignore:
            spec = load_ignore_file(current)
            if spec is not None:
                rules.append((current, spec))

        kept_dirs = []
        for name in sorted(dirs):
            if name in SKIPPED_DIRS:
                continue
            if not include_hidden and is_hidden(name):
                continue
            if is_ignored(current / name, True, rules):
                continue
            kept_dirs.append(name)
            rules_by_dir[current / name] = rules
        dirs[:] = kept_dirs

        for name in sorted(files):
            if not include_hidden and is_hidden(name):
                continue
            path = current / name
            if is_ignored(path, False, rules):
                continue
            yield path


def collect_files(
    paths: List[str],
    follow_symlinks: bool = False,
    include_hidden: bool = False,
    use_gitignore: bool = True,
) -> FileIterator:
    """Collect all files from given paths.

    Paths named explicitly are always kept, even when hidden or ignored.
    """
    for path_str in paths:
        path = Path(path_str)
        if path.is_file():
            yield path
        elif path.is_dir():
            yield from walk_directory(
                path,
                follow_symlinks=follow_symlinks,
                include_hidden=include_hidden,
                use_gitignore=use_gitignore,
            )


def unique_files(paths: FileIterator) -> List[Path]:
    """Drop paths that resolve to a file already seen, keeping the first."""
    seen: Set[Path] = set()
    unique = []
    for path in paths:
        resolved = path.resolve()
        if resolved in seen:
            continue
        seen.add(resolved)
        unique.append(path)
    return unique


def scan_paths(
    paths: List[str], config: Optional[AnalyzerConfig] = None
) -> List[SourceFile]:
    """Scan paths and return the corpus, sorted by path.

    Every real file appears at most once, whatever links lead to it.

    Raises:
        InvalidFileError: If one of the given paths does not exist
    """
    for path_str in paths:
        if not Path(path_str).exists():
            raise InvalidFileError(path_str, "path does not exist")

    config = config or AnalyzerConfig()
    analyzer = FileAnalyzer(config)

    logger.info_with_fields(
        "Starting file scan",
        operation="scan_start",
        paths=paths,
        config={
            "include": config.include,
            "exclude": config.exclude,
            "skip_noise": config.skip_noise,
            "follow_symlinks": config.follow_symlinks,
            "include_hidden": config.include_hidden,
            "use_gitignore": config.use_gitignore,
            "skip_empty": config.skip_empty,
        },
    )

    start_time = time.perf_counter()
    candidates = unique_files(
        collect_files(
            paths,
            follow_symlinks=config.follow_symlinks,
            include_hidden=config.include_hidden,
            use_gitignore=config.use_gitignore,
        )
    )
    sources = [
        source
        for source in (analyzer.analyze_file(path) for path in candidates)
        if source is not None
    ]
    sources.sort(key=lambda s: s.path)

    logger.info_with_fields(
        "File scan completed",
        operation="scan_complete",
        total_input_files=len(candidates),
        corpus_files=len(sources),
        total_time=time.perf_counter() - start_time,
    )
    return sources
