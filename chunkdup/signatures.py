"""Chunk fingerprint computation.

Fingerprints are a cheap, order-sensitive 64-bit hash of a chunk's bytes.
They are not collision resistant; an accidental match only inflates the
duplication estimate slightly.
"""

from typing import List, Optional

from chunkdup.chunking import chunk
from chunkdup.models import ChunkerConfig
from chunkdup.types import ChunkFingerprint

FINGERPRINT_MULTIPLIER = 31
UINT64_MASK = (1 << 64) - 1


def fingerprint(chunk_bytes: bytes) -> ChunkFingerprint:
    """Compute the fingerprint of a chunk with unsigned 64-bit wraparound."""
    value = 0
    for byte in chunk_bytes:
        value = (value * FINGERPRINT_MULTIPLIER + byte) & UINT64_MASK
    return ChunkFingerprint(value)


def compute_fingerprints(
    data: bytes, config: Optional[ChunkerConfig] = None
) -> List[ChunkFingerprint]:
    """
    Chunk normalized content and fingerprint every chunk.

    Args:
        data: Normalized content
        config: Chunker parameters (defaults apply when omitted)

    Returns:
        Fingerprints in chunk order, one per chunk occurrence
    """
    return [fingerprint(data[start:end]) for start, end in chunk(data, config)]
