"""Vector distance primitives and a seeded generator."""

from typing import Sequence

import numpy as np

from ..errors import DimensionMismatchError, EmptyDatasetError

MODULUS = 2147483647  # 2**31 - 1
MULTIPLIER = 16807


def euclidean_distance(a: Sequence[float], b: Sequence[float]) -> float:
    """Euclidean distance between two equal-length vectors."""
    va = np.asarray(a, dtype=float)
    vb = np.asarray(b, dtype=float)
    if va.shape != vb.shape:
        raise DimensionMismatchError(
            f"Vector lengths differ: {va.size} != {vb.size}",
            {"left": va.size, "right": vb.size},
        )
    return float(np.sqrt(np.sum((va - vb) ** 2)))


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """Cosine similarity; 0.0 when either vector has zero magnitude."""
    va = np.asarray(a, dtype=float)
    vb = np.asarray(b, dtype=float)
    if va.shape != vb.shape:
        raise DimensionMismatchError(
            f"Vector lengths differ: {va.size} != {vb.size}",
            {"left": va.size, "right": vb.size},
        )
    norm = float(np.linalg.norm(va)) * float(np.linalg.norm(vb))
    if norm == 0.0:
        return 0.0
    return float(np.dot(va, vb)) / norm


def as_matrix(vectors: Sequence[Sequence[float]]) -> np.ndarray:
    """Stack vectors into an (n, d) float matrix, checking shared dimensionality."""
    if len(vectors) == 0:
        raise EmptyDatasetError("Empty dataset")
    dim = len(vectors[0])
    for i, vec in enumerate(vectors):
        if len(vec) != dim:
            raise DimensionMismatchError(
                f"Vector {i} has length {len(vec)}, expected {dim}",
                {"index": i, "length": len(vec), "expected": dim},
            )
    return np.array(vectors, dtype=float).reshape(len(vectors), dim)


class SeededRandom:
    """Park-Miller linear congruential generator yielding floats in [0, 1).

    The same seed always yields the same sequence.
    """

    def __init__(self, seed: int = 42):
        self._state = seed % MODULUS
        if self._state <= 0:
            self._state += MODULUS - 1

    def __call__(self) -> float:
        self._state = (self._state * MULTIPLIER) % MODULUS
        return (self._state - 1) / (MODULUS - 1)

    def randrange(self, n: int) -> int:
        """Uniform integer in [0, n)."""
        return int(self() * n)


def seeded_random(seed: int = 42) -> SeededRandom:
    return SeededRandom(seed)
