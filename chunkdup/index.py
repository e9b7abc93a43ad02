"""Chunk fingerprint indexes over a corpus of files."""

from collections import Counter
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import FrozenSet, Iterable, List, Mapping, Optional, Set, Tuple

from chunkdup.analysis import is_binary
from chunkdup.exceptions import FileOperationError
from chunkdup.logging import get_logger
from chunkdup.models import ChunkerConfig
from chunkdup.normalize import read_normalized
from chunkdup.signatures import compute_fingerprints
from chunkdup.types import ChunkFingerprint, ScoreStatus

logger = get_logger()


@dataclass
class FileChunks:
    """Fingerprints extracted from one file.

    ``status`` is BINARY or UNREADABLE when the file contributes nothing,
    SCORED otherwise.
    """

    path: Path
    fingerprints: List[ChunkFingerprint] = field(default_factory=list)
    content_size: int = 0
    status: ScoreStatus = ScoreStatus.SCORED

    @property
    def readable(self) -> bool:
        return self.status is ScoreStatus.SCORED

    def target_status(self, config: ChunkerConfig) -> ScoreStatus:
        """Status of this file when it is the one being scored."""
        if not self.readable:
            return self.status
        if self.content_size < config.min_content_size:
            return ScoreStatus.TOO_SMALL
        if not self.fingerprints:
            return ScoreStatus.NO_CHUNKS
        return ScoreStatus.SCORED


def extract_file_chunks(
    path: Path, config: Optional[ChunkerConfig] = None
) -> FileChunks:
    """Normalize, chunk and fingerprint one file.

    Binary and unreadable files yield no fingerprints; the failure is logged
    and never raised.
    """
    config = config or ChunkerConfig()
    try:
        if is_binary(path):
            return FileChunks(path, status=ScoreStatus.BINARY)
        content = read_normalized(path)
    except FileOperationError as e:
        logger.debug_with_fields(
            "Skipping unreadable file",
            operation="extract_chunks",
            path=str(path),
            error_message=str(e),
        )
        return FileChunks(path, status=ScoreStatus.UNREADABLE)

    return FileChunks(
        path=path,
        fingerprints=compute_fingerprints(content, config),
        content_size=len(content),
    )


def build_corpus_index(
    target: Path,
    all_files: Iterable[Path],
    config: Optional[ChunkerConfig] = None,
) -> FrozenSet[ChunkFingerprint]:
    """Collect the fingerprints of every corpus file except ``target``."""
    fingerprints: Set[ChunkFingerprint] = set()
    for other in all_files:
        if other == target:
            continue
        fingerprints.update(extract_file_chunks(other, config).fingerprints)
    return frozenset(fingerprints)


@dataclass(frozen=True)
class CorpusChunkIndex:
    """Read-only fingerprint index built once for a whole corpus.

    ``file_counts`` maps a fingerprint to the number of distinct files that
    contain it, which lets a file be excluded from a lookup without
    rebuilding anything.
    """

    file_chunks: Mapping[Path, Tuple[ChunkFingerprint, ...]]
    file_sets: Mapping[Path, FrozenSet[ChunkFingerprint]]
    file_counts: Mapping[ChunkFingerprint, int]

    @classmethod
    def from_file_chunks(cls, extracted: Iterable[FileChunks]) -> "CorpusChunkIndex":
        """Merge per-file extraction results into a single index."""
        chunks = {}
        sets = {}
        counts: Counter[ChunkFingerprint] = Counter()
        for item in extracted:
            if not item.readable or item.path in chunks:
                continue
            distinct = frozenset(item.fingerprints)
            chunks[item.path] = tuple(item.fingerprints)
            sets[item.path] = distinct
            counts.update(distinct)

        logger.debug_with_fields(
            "Built corpus chunk index",
            operation="build_index",
            files=len(chunks),
            distinct_fingerprints=len(counts),
        )
        return cls(
            file_chunks=MappingProxyType(chunks),
            file_sets=MappingProxyType(sets),
            file_counts=MappingProxyType(dict(counts)),
        )

    @classmethod
    def from_paths(
        cls, paths: Iterable[Path], config: Optional[ChunkerConfig] = None
    ) -> "CorpusChunkIndex":
        """Build an index by extracting every path sequentially."""
        return cls.from_file_chunks(extract_file_chunks(path, config) for path in paths)

    def __len__(self) -> int:
        return len(self.file_counts)

    def __contains__(self, fingerprint: object) -> bool:
        return fingerprint in self.file_counts

    @property
    def paths(self) -> List[Path]:
        return list(self.file_chunks)

    def file_count(self, fingerprint: ChunkFingerprint) -> int:
        """Number of indexed files containing ``fingerprint``."""
        return self.file_counts.get(fingerprint, 0)

    def contains(
        self, fingerprint: ChunkFingerprint, exclude: Optional[Path] = None
    ) -> bool:
        """Check whether any file other than ``exclude`` has ``fingerprint``."""
        count = self.file_count(fingerprint)
        if exclude is not None and fingerprint in self.file_sets.get(
            exclude, frozenset()
        ):
            count -= 1
        return count > 0
