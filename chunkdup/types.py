"""Type definitions for chunkdup."""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Iterator, List, NewType, Tuple, TypeAlias

import networkx as nx

# Type aliases for clarity
ChunkFingerprint = NewType("ChunkFingerprint", int)
DuplicationScore = NewType("DuplicationScore", int)

# A weighted graph where nodes are file paths and edges carry chunk overlap
DuplicationGraphType: TypeAlias = "nx.Graph[Path]"

# Common type aliases
JsonDict: TypeAlias = Dict[str, Any]
FileIterator: TypeAlias = Iterator[Path]
ChunkSpan: TypeAlias = Tuple[int, int]


class ScoreStatus(Enum):
    """Why a file received the score it did."""

    SCORED = "scored"
    BINARY = "binary"
    UNREADABLE = "unreadable"
    TOO_SMALL = "too small"
    NO_CHUNKS = "no chunks"


class Strategy(Enum):
    """How a scoring pass builds its chunk index."""

    INDEXED = "indexed"  # one shared index for the whole corpus
    NAIVE = "naive"  # rebuild the index for every target


@dataclass
class DuplicateGroup:
    """A group of files sharing chunks."""

    id: int
    files: List[Path]
    similarity: float
