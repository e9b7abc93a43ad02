"""Content-defined chunking with a polynomial rolling hash.

Boundaries depend only on the bytes of a local window, so the same text
produces the same boundaries wherever it appears in a file.
"""

from typing import Iterator, List, Optional, Sequence

from chunkdup.models import ChunkerConfig
from chunkdup.types import ChunkSpan

DEFAULT_CONFIG = ChunkerConfig()


class RollingHash:
    """Polynomial hash over a fixed-size sliding window."""

    def __init__(self, window_size: int, base: int, modulus: int) -> None:
        self.window_size = window_size
        self.base = base
        self.modulus = modulus
        # Weight of the oldest byte in the window
        self.leading_power = pow(base, window_size - 1, modulus)
        self.value = 0

    @classmethod
    def from_config(cls, config: ChunkerConfig) -> "RollingHash":
        return cls(config.window_size, config.base, config.modulus)

    def reset(self, window: bytes) -> int:
        """Hash a full window from scratch."""
        if len(window) != self.window_size:
            raise ValueError(
                f"Window must be {self.window_size} bytes, got {len(window)}"
            )
        value = 0
        for byte in window:
            value = (value * self.base + byte) % self.modulus
        self.value = value
        return value

    def roll(self, outgoing: int, incoming: int) -> int:
        """Slide the window one byte forward in constant time."""
        value = (self.value - outgoing * self.leading_power) % self.modulus
        self.value = (value * self.base + incoming) % self.modulus
        return self.value


def window_hash(window: bytes, config: ChunkerConfig = DEFAULT_CONFIG) -> int:
    """Hash a window directly, without rolling."""
    value = 0
    for byte in window:
        value = (value * config.base + byte) % config.modulus
    return value


def rolling_hashes(
    data: bytes, config: ChunkerConfig = DEFAULT_CONFIG
) -> Iterator[int]:
    """Yield the hash of every window ``data[s:s + window_size]`` in order."""
    size = config.window_size
    if len(data) < size:
        return

    hasher = RollingHash.from_config(config)
    yield hasher.reset(data[:size])
    for i in range(size, len(data)):
        yield hasher.roll(data[i - size], data[i])


def find_boundaries(data: bytes, config: ChunkerConfig = DEFAULT_CONFIG) -> List[int]:
    """Return the offsets whose following window satisfies the gear condition.

    The window starting at the last possible offset is never tested, so at
    least one byte always follows a tested window.
    """
    tested = len(data) - config.window_size
    if tested <= 0:
        return []

    boundaries = []
    for start, value in zip(range(tested), rolling_hashes(data, config)):
        if value & config.boundary_mask == 0:
            boundaries.append(start)
    return boundaries


def chunk_spans(
    boundaries: Sequence[int],
    length: int,
    min_chunk_size: int = DEFAULT_CONFIG.min_chunk_size,
) -> List[ChunkSpan]:
    """Turn ordered boundary offsets into chunk spans.

    A boundary closer than ``min_chunk_size`` to the previous emitted one is
    skipped, merging the short span into the next chunk. A short trailing
    span is dropped.
    """
    spans: List[ChunkSpan] = []
    start = 0
    for boundary in boundaries:
        if boundary - start >= min_chunk_size:
            spans.append((start, boundary))
            start = boundary

    if length - start >= min_chunk_size:
        spans.append((start, length))
    return spans


def chunk(data: bytes, config: Optional[ChunkerConfig] = None) -> List[ChunkSpan]:
    """Split normalized content into content-defined chunk spans."""
    config = config or DEFAULT_CONFIG
    if len(data) < config.window_size:
        return []
    return chunk_spans(find_boundaries(data, config), len(data), config.min_chunk_size)
