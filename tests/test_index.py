import dataclasses
from pathlib import Path
from typing import Callable

import pytest

from chunkdup.index import (
    CorpusChunkIndex,
    FileChunks,
    build_corpus_index,
    extract_file_chunks,
)
from chunkdup.models import ChunkerConfig
from chunkdup.normalize import read_normalized
from chunkdup.signatures import compute_fingerprints
from chunkdup.types import ChunkFingerprint, ScoreStatus


def fps(*values: int) -> list[ChunkFingerprint]:
    return [ChunkFingerprint(v) for v in values]


def test_extract_file_chunks_text_file(
    create_file_with_content: Callable[[str, str], Path],
    random_text: Callable[..., str],
) -> None:
    path = create_file_with_content("a.py", random_text(3, 2000))
    result = extract_file_chunks(path)

    assert result.readable
    assert result.content_size == len(read_normalized(path))
    assert result.fingerprints == compute_fingerprints(read_normalized(path))


def test_extract_file_chunks_binary_file(tmp_path: Path) -> None:
    path = tmp_path / "blob.bin"
    path.write_bytes(b"\x00\x01\x02\x00" * 64)
    result = extract_file_chunks(path)

    assert result.status is ScoreStatus.BINARY
    assert result.fingerprints == []


def test_extract_file_chunks_missing_file(tmp_path: Path) -> None:
    result = extract_file_chunks(tmp_path / "gone.py")
    assert result.status is ScoreStatus.UNREADABLE
    assert result.fingerprints == []


def test_target_status() -> None:
    config = ChunkerConfig()
    assert FileChunks(Path("a"), fps(1), 99).target_status(config) is (
        ScoreStatus.TOO_SMALL
    )
    assert FileChunks(Path("a"), [], 150).target_status(config) is (
        ScoreStatus.NO_CHUNKS
    )
    assert FileChunks(Path("a"), fps(1), 100).target_status(config) is (
        ScoreStatus.SCORED
    )
    unreadable = FileChunks(Path("a"), status=ScoreStatus.UNREADABLE)
    assert unreadable.target_status(config) is ScoreStatus.UNREADABLE


def test_build_corpus_index_excludes_target(
    create_file_with_content: Callable[[str, str], Path],
    random_text: Callable[..., str],
) -> None:
    target = create_file_with_content("target.py", random_text(1, 1500))
    other = create_file_with_content("other.py", random_text(2, 1500))
    binary = create_file_with_content("image.dat", "x\x00\x00\x00" * 100)

    index = build_corpus_index(target, [target, other, binary])

    assert index == frozenset(extract_file_chunks(other).fingerprints)
    assert not index & set(extract_file_chunks(target).fingerprints)


def test_build_corpus_index_skips_unreadable(
    tmp_path: Path,
    create_file_with_content: Callable[[str, str], Path],
    random_text: Callable[..., str],
) -> None:
    target = create_file_with_content("target.py", random_text(1, 500))
    index = build_corpus_index(target, [target, tmp_path / "missing.py"])
    assert index == frozenset()


def test_corpus_index_counts_files_not_occurrences() -> None:
    a = FileChunks(Path("a"), fps(1, 1, 2), 200)
    b = FileChunks(Path("b"), fps(2, 3), 200)
    index = CorpusChunkIndex.from_file_chunks([a, b])

    assert index.file_count(ChunkFingerprint(1)) == 1
    assert index.file_count(ChunkFingerprint(2)) == 2
    assert index.file_count(ChunkFingerprint(3)) == 1
    assert index.file_count(ChunkFingerprint(4)) == 0
    assert len(index) == 3
    assert ChunkFingerprint(2) in index
    assert index.paths == [Path("a"), Path("b")]
    assert index.file_chunks[Path("a")] == (1, 1, 2)


def test_corpus_index_contains_with_self_exclusion() -> None:
    a = FileChunks(Path("a"), fps(1, 1, 2), 200)
    b = FileChunks(Path("b"), fps(2, 3), 200)
    index = CorpusChunkIndex.from_file_chunks([a, b])

    assert index.contains(ChunkFingerprint(1))
    assert not index.contains(ChunkFingerprint(1), exclude=Path("a"))
    assert index.contains(ChunkFingerprint(2), exclude=Path("a"))
    assert index.contains(ChunkFingerprint(3), exclude=Path("a"))
    assert not index.contains(ChunkFingerprint(3), exclude=Path("b"))
    # Excluding a file that was never indexed changes nothing
    assert index.contains(ChunkFingerprint(3), exclude=Path("zzz"))


def test_corpus_index_skips_unreadable_and_repeated_files() -> None:
    a = FileChunks(Path("a"), fps(1), 200)
    again = FileChunks(Path("a"), fps(1), 200)
    bad = FileChunks(Path("bad"), status=ScoreStatus.UNREADABLE)
    index = CorpusChunkIndex.from_file_chunks([a, again, bad])

    assert index.paths == [Path("a")]
    assert index.file_count(ChunkFingerprint(1)) == 1


def test_corpus_index_is_read_only() -> None:
    index = CorpusChunkIndex.from_file_chunks([FileChunks(Path("a"), fps(1), 200)])

    with pytest.raises(TypeError):
        index.file_counts[ChunkFingerprint(5)] = 1  # type: ignore[index]
    with pytest.raises(dataclasses.FrozenInstanceError):
        index.file_counts = {}  # type: ignore[misc]


def test_corpus_index_from_paths(
    create_file_with_content: Callable[[str, str], Path],
    random_text: Callable[..., str],
) -> None:
    first = create_file_with_content("first.py", random_text(5, 800))
    second = create_file_with_content("second.py", random_text(5, 800))
    index = CorpusChunkIndex.from_paths([first, second])

    assert index.file_sets[first] == index.file_sets[second]
    for fingerprint in index.file_sets[first]:
        assert index.file_count(fingerprint) == 2
