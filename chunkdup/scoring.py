"""Duplication scoring for single files and whole corpora."""

import multiprocessing
import time
from concurrent.futures import ProcessPoolExecutor, as_completed
from dataclasses import dataclass
from functools import partial
from os import cpu_count
from pathlib import Path
from typing import Callable, List, Optional, Sequence, Tuple, TypeVar

from chunkdup.index import (
    CorpusChunkIndex,
    FileChunks,
    build_corpus_index,
    extract_file_chunks,
)
from chunkdup.logging import get_logger
from chunkdup.models import ChunkerConfig
from chunkdup.types import DuplicationScore, JsonDict, ScoreStatus, Strategy

logger = get_logger()

# Below this many files the pool start-up costs more than it saves
PARALLEL_THRESHOLD = 10

T = TypeVar("T")
A = TypeVar("A")
ProgressCallback = Callable[[int, int], None]


@dataclass(frozen=True)
class FileScore:
    """Duplication result for one file."""

    path: Path
    percent: int
    status: ScoreStatus = ScoreStatus.SCORED
    total_chunks: int = 0
    duplicate_chunks: int = 0

    @property
    def suffix(self) -> str:
        """Display suffix, e.g. ``37%``."""
        return f"{self.percent}%"

    @property
    def applicable(self) -> bool:
        """False when the file could not be analyzed at all."""
        return self.status is ScoreStatus.SCORED

    def to_dict(self) -> JsonDict:
        return {
            "path": str(self.path),
            "percent": self.percent,
            "status": self.status.value,
            "total_chunks": self.total_chunks,
            "duplicate_chunks": self.duplicate_chunks,
        }


def percentage(duplicates: int, total: int) -> DuplicationScore:
    """Floor percentage of duplicated chunks, clamped to [0, 100]."""
    if total <= 0:
        return DuplicationScore(0)
    return DuplicationScore(max(0, min(100, duplicates * 100 // total)))


def _score(
    target: FileChunks,
    config: ChunkerConfig,
    count_duplicates: Callable[[FileChunks], int],
) -> FileScore:
    status = target.target_status(config)
    if status is not ScoreStatus.SCORED:
        return FileScore(target.path, 0, status, len(target.fingerprints))

    total = len(target.fingerprints)
    duplicates = count_duplicates(target)
    return FileScore(
        target.path, percentage(duplicates, total), status, total, duplicates
    )


def score_file(
    target: Path,
    all_files: Sequence[Path],
    config: Optional[ChunkerConfig] = None,
) -> FileScore:
    """Score ``target`` against a corpus index rebuilt just for it."""
    config = config or ChunkerConfig()
    target_chunks = extract_file_chunks(target, config)

    def count_duplicates(chunks: FileChunks) -> int:
        index = build_corpus_index(target, all_files, config)
        return sum(1 for fp in chunks.fingerprints if fp in index)

    return _score(target_chunks, config, count_duplicates)


def score_duplication(
    target: Path,
    all_files: Sequence[Path],
    config: Optional[ChunkerConfig] = None,
) -> DuplicationScore:
    """Percentage of ``target``'s chunks that also occur in another corpus file.

    Binary, unreadable, too small and chunkless targets all score 0.
    """
    return DuplicationScore(score_file(target, all_files, config).percent)


class DuplicationScorer:
    """Scores files against a shared, prebuilt corpus index."""

    def __init__(
        self, index: CorpusChunkIndex, config: Optional[ChunkerConfig] = None
    ) -> None:
        self.index = index
        self.config = config or ChunkerConfig()

    def _count_duplicates(self, chunks: FileChunks) -> int:
        return sum(
            1
            for fp in chunks.fingerprints
            if self.index.contains(fp, exclude=chunks.path)
        )

    def score(self, chunks: FileChunks) -> FileScore:
        """Score already extracted chunks."""
        return _score(chunks, self.config, self._count_duplicates)

    def score_path(self, path: Path) -> FileScore:
        """Extract and score a single file."""
        return self.score(extract_file_chunks(path, self.config))


def _extract_task(args: Tuple[Path, ChunkerConfig]) -> FileChunks:
    """Worker function for the indexed strategy."""
    path, config = args
    return extract_file_chunks(path, config)


def _score_task(args: Tuple[Path, List[Path], ChunkerConfig]) -> FileScore:
    """Worker function for the naive strategy."""
    path, all_files, config = args
    return score_file(path, all_files, config)


def _run_tasks(
    worker: Callable[[A], T],
    tasks: List[A],
    paths: List[Path],
    on_error: Callable[[Path], T],
    max_workers: Optional[int],
    progress: Optional[ProgressCallback],
) -> List[T]:
    """Run one task per path, keeping input order.

    A task that raises only degrades its own result through ``on_error``.
    """
    total = len(tasks)
    results: List[Optional[T]] = [None] * total
    done = 0

    def record(position: int, outcome: Callable[[], T]) -> None:
        nonlocal done
        try:
            results[position] = outcome()
        except Exception as e:
            logger.error_with_fields(
                "Error processing file",
                operation="file_error",
                path=str(paths[position]),
                error_type=type(e).__name__,
                error_message=str(e),
            )
            results[position] = on_error(paths[position])
        done += 1
        if progress is not None:
            progress(done, total)

    if total < PARALLEL_THRESHOLD:
        logger.debug_with_fields(
            "Using sequential processing for small file set",
            operation="process_mode",
            mode="sequential",
            file_count=total,
        )
        for position, task in enumerate(tasks):
            record(position, partial(worker, task))
        return [r for r in results if r is not None]

    workers = min(max_workers or cpu_count() or 1, total)
    logger.debug_with_fields(
        "Using parallel processing",
        operation="process_mode",
        mode="parallel",
        worker_count=workers,
        file_count=total,
    )

    executor = ProcessPoolExecutor(
        max_workers=workers, mp_context=multiprocessing.get_context("spawn")
    )
    try:
        futures = {executor.submit(worker, task): i for i, task in enumerate(tasks)}
        for future in as_completed(futures):
            record(futures[future], future.result)
    except KeyboardInterrupt:
        logger.warning_with_fields(
            "Scoring interrupted, cancelling pending tasks", operation="cancel"
        )
        executor.shutdown(wait=False, cancel_futures=True)
        raise
    finally:
        executor.shutdown(wait=True, cancel_futures=True)

    return [r for r in results if r is not None]


def extract_corpus(
    paths: Sequence[Path],
    config: Optional[ChunkerConfig] = None,
    max_workers: Optional[int] = None,
    progress: Optional[ProgressCallback] = None,
) -> List[FileChunks]:
    """Extract fingerprints for every distinct path, in input order."""
    config = config or ChunkerConfig()
    corpus = list(dict.fromkeys(paths))
    return _run_tasks(
        _extract_task,
        [(path, config) for path in corpus],
        corpus,
        lambda path: FileChunks(path, status=ScoreStatus.UNREADABLE),
        max_workers,
        progress,
    )


def score_corpus(
    paths: Sequence[Path],
    config: Optional[ChunkerConfig] = None,
    max_workers: Optional[int] = None,
    progress: Optional[ProgressCallback] = None,
) -> Tuple[List[FileScore], CorpusChunkIndex]:
    """Build one index for the corpus and score every file against it."""
    config = config or ChunkerConfig()
    extracted = extract_corpus(paths, config, max_workers, progress)
    index = CorpusChunkIndex.from_file_chunks(extracted)
    scorer = DuplicationScorer(index, config)
    return [scorer.score(chunks) for chunks in extracted], index


def score_paths(
    paths: Sequence[Path],
    config: Optional[ChunkerConfig] = None,
    strategy: Strategy = Strategy.INDEXED,
    max_workers: Optional[int] = None,
    progress: Optional[ProgressCallback] = None,
) -> List[FileScore]:
    """Score every file of a corpus against the rest of it.

    Args:
        paths: The corpus; every file is both scored and indexed
        config: Chunker parameters
        strategy: INDEXED builds one shared index, NAIVE rebuilds it per file
        max_workers: Worker process count (defaults to the CPU count)
        progress: Called with (done, total) after each file

    Returns:
        One FileScore per distinct path, in input order
    """
    config = config or ChunkerConfig()
    corpus = list(dict.fromkeys(paths))
    start_time = time.perf_counter()

    logger.info_with_fields(
        "Starting duplication scoring",
        operation="score_start",
        total_files=len(corpus),
        strategy=strategy.value,
        max_workers=max_workers,
    )

    if strategy is Strategy.NAIVE:
        scores = _run_tasks(
            _score_task,
            [(path, corpus, config) for path in corpus],
            corpus,
            lambda path: FileScore(path, 0, ScoreStatus.UNREADABLE),
            max_workers,
            progress,
        )
    else:
        scores, _ = score_corpus(corpus, config, max_workers, progress)

    logger.info_with_fields(
        "Duplication scoring completed",
        operation="score_complete",
        total_files=len(corpus),
        scored_files=sum(1 for s in scores if s.applicable),
        total_time=time.perf_counter() - start_time,
    )
    return scores
