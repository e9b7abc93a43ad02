"""Grouping of files that share chunks."""

import itertools
from collections import defaultdict
from pathlib import Path
from typing import Dict, FrozenSet, List, Set, Tuple

import networkx as nx

from chunkdup.index import CorpusChunkIndex
from chunkdup.types import ChunkFingerprint, DuplicateGroup
from chunkdup.types import DuplicationGraphType


def jaccard(
    first: FrozenSet[ChunkFingerprint], second: FrozenSet[ChunkFingerprint]
) -> float:
    """Jaccard overlap of two fingerprint sets."""
    union = len(first | second)
    if not union:
        return 0.0
    return len(first & second) / union


class DuplicationGraph:
    """Graph of files connected by their chunk overlap."""

    def __init__(self, threshold: float = 0.5) -> None:
        """Initialize the graph; edges below ``threshold`` are not kept."""
        self.threshold = threshold
        self.graph: DuplicationGraphType = nx.Graph()

    def _candidate_pairs(self, index: CorpusChunkIndex) -> Set[Tuple[Path, Path]]:
        """Pairs of files sharing at least one fingerprint."""
        owners: Dict[ChunkFingerprint, List[Path]] = defaultdict(list)
        for path, fingerprints in index.file_sets.items():
            for fp in fingerprints:
                owners[fp].append(path)

        pairs: Set[Tuple[Path, Path]] = set()
        for files in owners.values():
            if len(files) < 2:
                continue
            for first, second in itertools.combinations(sorted(files), 2):
                pairs.add((first, second))
        return pairs

    def add_index(self, index: CorpusChunkIndex) -> None:
        """Add every indexed file and the edges between overlapping ones."""
        self.graph.add_nodes_from(index.paths)
        for first, second in self._candidate_pairs(index):
            overlap = jaccard(index.file_sets[first], index.file_sets[second])
            if overlap >= self.threshold:
                self.graph.add_edge(first, second, weight=overlap)

    def get_groups(self) -> List[DuplicateGroup]:
        """Get all groups of files sharing chunks, highest overlap first."""
        if not self.graph:
            return []

        groups = []
        for component in nx.connected_components(self.graph):
            files = sorted(component)
            if len(files) < 2:
                continue

            weights = [
                self.graph.edges[f1, f2]["weight"]
                for f1, f2 in itertools.combinations(files, 2)
                if self.graph.has_edge(f1, f2)
            ]
            groups.append(
                DuplicateGroup(
                    id=0,
                    files=files,
                    similarity=sum(weights) / len(weights),
                )
            )

        groups.sort(key=lambda g: (-g.similarity, g.files[0]))
        for group_id, group in enumerate(groups, 1):
            group.id = group_id
        return groups

    def get_group_similarities(
        self, group_files: List[Path]
    ) -> Dict[Tuple[Path, Path], float]:
        """Get pairwise overlaps for files in a group."""
        similarities = {}
        for file1, file2 in itertools.combinations(group_files, 2):
            if self.graph.has_edge(file1, file2):
                similarities[(file1, file2)] = self.graph.edges[file1, file2]["weight"]
        return similarities
