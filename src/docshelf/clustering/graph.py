"""Build a weighted similarity graph from document embeddings."""

import logging
from typing import Iterable, Sequence

import numpy as np

from ..errors import DimensionMismatchError, InvalidInputError
from ..models import Edge, WeightedGraph
from .vectors import as_matrix

logger = logging.getLogger(__name__)

DEFAULT_THRESHOLD = 0.7


def build_similarity_graph(
    items: Sequence[tuple[str, Sequence[float]]],
    threshold: float = DEFAULT_THRESHOLD,
    dimensions: int | None = None,
) -> WeightedGraph:
    """Connect every pair of items whose cosine similarity reaches the threshold.

    Args:
        items: (id, vector) pairs. Ids must be unique.
        threshold: Minimum cosine similarity for an edge, at least 0 so
            every edge weight is non-negative.
        dimensions: Expected vector length, checked when given.

    Returns:
        WeightedGraph with nodes in input order and edges ordered by
        (source index, target index), weight = cosine similarity.
    """
    if threshold < 0.0:
        raise InvalidInputError(
            f"Similarity threshold must be non-negative, got {threshold}",
            {"threshold": threshold},
        )
    ids = [item_id for item_id, _ in items]
    if len(set(ids)) != len(ids):
        raise InvalidInputError("Duplicate node ids in graph input")

    graph = WeightedGraph(nodes=ids)
    if len(items) < 2:
        return graph

    matrix = as_matrix([vector for _, vector in items])
    if dimensions is not None and matrix.shape[1] != dimensions:
        raise DimensionMismatchError(
            f"Expected {dimensions}-dimensional vectors, got {matrix.shape[1]}",
            {"expected": dimensions, "actual": matrix.shape[1]},
        )

    norms = np.linalg.norm(matrix, axis=1)
    safe = np.where(norms == 0.0, 1.0, norms)
    unit = matrix / safe[:, None]
    sims = unit @ unit.T
    # Zero vectors are dissimilar to everything and never get an edge
    zero = norms == 0.0

    n = len(ids)
    for i in range(n):
        for j in range(i + 1, n):
            if zero[i] or zero[j]:
                continue
            sim = float(sims[i, j])
            if sim >= threshold:
                graph.edges.append(Edge(ids[i], ids[j], sim))

    logger.debug(f"Similarity graph: {n} nodes, {len(graph.edges)} edges (threshold {threshold:.2f})")
    return graph


def normalize_weights(edges: Iterable[Edge]) -> list[Edge]:
    """Rescale edge weights linearly to [0, 1] by observed min and max.

    All edges become 0.5 when every weight is equal.
    """
    edges = list(edges)
    if not edges:
        return []
    weights = [e.weight for e in edges]
    lo, hi = min(weights), max(weights)
    if lo == hi:
        return [Edge(e.source, e.target, 0.5) for e in edges]
    span = hi - lo
    return [Edge(e.source, e.target, (e.weight - lo) / span) for e in edges]


def strongest_edges(graph: WeightedGraph, limit: int = 10) -> list[Edge]:
    """Edges sorted by weight descending."""
    return sorted(graph.edges, key=lambda e: e.weight, reverse=True)[:limit]
