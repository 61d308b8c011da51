"""Deterministic k-means with k-means++ seeding."""

import logging
from typing import Sequence

import numpy as np

from ..errors import EmptyDatasetError, InvalidClusterCountError, InvalidInputError
from ..models import KMeansResult
from .vectors import SeededRandom, as_matrix

logger = logging.getLogger(__name__)

DEFAULT_MAX_ITERATIONS = 100
DEFAULT_SEED = 42


def _squared_distances(data: np.ndarray, point: np.ndarray) -> np.ndarray:
    return np.sum((data - point) ** 2, axis=1)


def _min_distances(data: np.ndarray, centroids: Sequence[np.ndarray]) -> np.ndarray:
    """Distance from each point to its nearest centroid (inf with no centroids)."""
    nearest = np.full(len(data), np.inf)
    for centroid in centroids:
        np.minimum(nearest, np.sqrt(_squared_distances(data, centroid)), out=nearest)
    return nearest


def initialize_centroids(data: np.ndarray, k: int, rng: SeededRandom) -> np.ndarray:
    """Pick k starting centroids from the data with k-means++ weighting.

    The first centroid is drawn uniformly. Each later one is drawn with
    probability proportional to its squared distance from the nearest chosen
    centroid; if every point already coincides with a centroid, an unchosen
    point is drawn uniformly instead.
    """
    n = len(data)
    chosen = [rng.randrange(n)]
    nearest = _squared_distances(data, data[chosen[0]])

    for _ in range(1, k):
        cumulative = np.cumsum(nearest)
        total = float(cumulative[-1])
        if total == 0.0:
            remaining = [i for i in range(n) if i not in chosen]
            index = remaining[rng.randrange(len(remaining))]
            logger.debug(f"k-means++: all points coincide with centroids, picked {index} uniformly")
        else:
            # Strictly greater on purpose: points already at a centroid (zero
            # weight) can never be drawn, unlike a >= comparison
            threshold = rng() * total
            index = int(np.searchsorted(cumulative, threshold, side="right"))
        chosen.append(index)
        np.minimum(nearest, _squared_distances(data, data[index]), out=nearest)

    return data[chosen].copy()


def assign_clusters(data: np.ndarray, centroids: np.ndarray) -> np.ndarray:
    """Index of the nearest centroid per point; ties go to the lowest index."""
    distances = np.column_stack([
        np.sqrt(_squared_distances(data, centroid)) for centroid in centroids
    ])
    return np.argmin(distances, axis=1)


def update_centroids(data: np.ndarray, assignments: np.ndarray, k: int) -> np.ndarray:
    """Mean of each cluster's members.

    An empty cluster is re-seeded with the point farthest from every
    non-empty (or already re-seeded) centroid.
    """
    centroids = np.zeros((k, data.shape[1]))
    counts = np.bincount(assignments, minlength=k)
    for j in range(k):
        if counts[j] > 0:
            centroids[j] = data[assignments == j].mean(axis=0)

    served = [centroids[j] for j in range(k) if counts[j] > 0]
    for j in range(k):
        if counts[j] == 0:
            farthest = int(np.argmax(_min_distances(data, served)))
            centroids[j] = data[farthest]
            served.append(centroids[j])
            logger.debug(f"Cluster {j} empty, re-seeded with point {farthest}")
    return centroids


def run_kmeans(
    vectors: Sequence[Sequence[float]],
    k: int,
    max_iterations: int = DEFAULT_MAX_ITERATIONS,
    seed: int = DEFAULT_SEED,
) -> KMeansResult:
    """Cluster vectors into exactly k groups.

    Args:
        vectors: n vectors sharing one dimensionality.
        k: Number of clusters, 1 <= k <= n.
        max_iterations: Cap on update/assign rounds.
        seed: Seed for the k-means++ draws. Same inputs and seed give
            identical output.

    Returns:
        KMeansResult with k centroids and n assignments in [0, k). When the
        cap is reached first, the last state is returned with
        ``converged=False``.
    """
    if len(vectors) == 0:
        raise EmptyDatasetError("Empty dataset")
    data = as_matrix(vectors)
    n = len(data)
    if k <= 0 or k > n:
        raise InvalidClusterCountError(
            f"Invalid number of clusters: {k} (must be between 1 and {n})",
            {"k": k, "n": n},
        )
    if max_iterations < 0:
        raise InvalidInputError(f"max_iterations must be non-negative, got {max_iterations}")

    rng = SeededRandom(seed)
    centroids = initialize_centroids(data, k, rng)
    assignments = assign_clusters(data, centroids)

    iterations = 0
    converged = False
    while iterations < max_iterations:
        iterations += 1
        new_centroids = update_centroids(data, assignments, k)
        new_assignments = assign_clusters(data, new_centroids)
        converged = bool(np.array_equal(new_assignments, assignments))
        centroids, assignments = new_centroids, new_assignments
        if converged:
            break

    logger.debug(f"k-means: k={k} n={n} iterations={iterations} converged={converged}")
    return KMeansResult(
        centroids=centroids.tolist(),
        assignments=[int(a) for a in assignments],
        iterations=iterations,
        converged=converged,
    )


def assignments_to_clusters(assignments: Sequence[int], k: int) -> list[list[int]]:
    """Point indices per cluster."""
    clusters: list[list[int]] = [[] for _ in range(k)]
    for idx, cluster in enumerate(assignments):
        clusters[cluster].append(idx)
    return clusters
