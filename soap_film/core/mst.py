"""Minimum spanning tree over frame centres (Kruskal)."""

from typing import Mapping, Sequence

import numpy as np
from loguru import logger
from scipy.spatial.distance import pdist

from soap_film.core.film_types import MstEdge


class UnionFind:
    """Disjoint-set forest with path compression and union by rank."""

    def __init__(self, size: int):
        self.parent = list(range(size))
        self.rank = [0] * size

    def find(self, index: int) -> int:
        root = index
        while self.parent[root] != root:
            root = self.parent[root]
        while self.parent[index] != root:
            self.parent[index], index = root, self.parent[index]
        return root

    def union(self, a: int, b: int) -> bool:
        """Merge the sets of ``a`` and ``b``; False if already joined."""
        root_a = self.find(a)
        root_b = self.find(b)
        if root_a == root_b:
            return False

        if self.rank[root_a] < self.rank[root_b]:
            self.parent[root_a] = root_b
        elif self.rank[root_a] > self.rank[root_b]:
            self.parent[root_b] = root_a
        else:
            self.parent[root_b] = root_a
            self.rank[root_a] += 1
        return True


def build_mst(
    frame_ids: Sequence[str], frame_centers: Mapping[str, np.ndarray]
) -> list[MstEdge]:
    """
    Connect frames with a minimum spanning tree over their centre distances.

    Pairs are enumerated as (i, j) with i < j in ``frame_ids`` order and
    sorted stably by distance, so equal weights keep enumeration order.

    Parameters
    ----------
    frame_ids : Sequence[str]
        Frame identifiers in their original order.
    frame_centers : Mapping[str, np.ndarray]
        World-space centre of each frame. Ids without a centre are left out.

    Returns
    -------
    list[MstEdge]
        ``len(frame_ids) - 1`` edges when every id has a centre, otherwise
        a spanning forest of the ids that do.
    """
    if len(frame_ids) <= 1:
        return []

    present = [frame_id for frame_id in frame_ids if frame_id in frame_centers]
    missing = len(frame_ids) - len(present)
    if missing:
        logger.warning(f"{missing} frame(s) have no centre and are left out of the MST")
    if len(present) <= 1:
        return []

    centers = np.array([np.asarray(frame_centers[frame_id], dtype=np.float64) for frame_id in present])
    weights = pdist(centers)
    rows, cols = np.triu_indices(len(present), k=1)
    order = np.argsort(weights, kind="stable")

    forest = UnionFind(len(present))
    target = len(frame_ids) - 1
    edges: list[MstEdge] = []
    for pair in order:
        a, b = int(rows[pair]), int(cols[pair])
        if not forest.union(a, b):
            continue
        edges.append(MstEdge(present[a], present[b], float(weights[pair])))
        if len(edges) == target:
            break

    return edges
