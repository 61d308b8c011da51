"""Tests for the k-means clusterer."""

import numpy as np
import pytest

from docshelf.clustering.kmeans import (
    assign_clusters,
    assignments_to_clusters,
    initialize_centroids,
    run_kmeans,
    update_centroids,
)
from docshelf.clustering.vectors import SeededRandom
from docshelf.errors import (
    DimensionMismatchError,
    EmptyDatasetError,
    InvalidClusterCountError,
    InvalidInputError,
)

POINTS = [[0, 0], [0, 1], [10, 10], [10, 11]]


def _blobs(seed=0, per_blob=15):
    rng = np.random.default_rng(seed)
    centers = np.array([[0.0, 0.0], [20.0, 0.0], [0.0, 20.0]])
    points = np.vstack([c + rng.normal(scale=0.5, size=(per_blob, 2)) for c in centers])
    return points.tolist()


def test_two_obvious_groups():
    result = run_kmeans(POINTS, k=2, seed=42)
    a = result.assignments
    assert a[0] == a[1]
    assert a[2] == a[3]
    assert a[0] != a[2]
    assert result.converged


def test_centroids_are_group_means():
    result = run_kmeans(POINTS, k=2, seed=42)
    centroids = sorted(result.centroids)
    assert centroids[0] == pytest.approx([0.0, 0.5])
    assert centroids[1] == pytest.approx([10.0, 10.5])


def test_shape_of_result():
    data = _blobs()
    for k in (1, 2, 3, 7, len(data)):
        result = run_kmeans(data, k=k, seed=3)
        assert len(result.centroids) == k
        assert all(len(c) == 2 for c in result.centroids)
        assert len(result.assignments) == len(data)
        assert all(0 <= a < k for a in result.assignments)


def test_deterministic_for_fixed_seed():
    data = _blobs(seed=5)
    first = run_kmeans(data, k=3, seed=99)
    second = run_kmeans(data, k=3, seed=99)
    assert first.centroids == second.centroids
    assert first.assignments == second.assignments


def test_recovers_blobs():
    data = _blobs(seed=1)
    result = run_kmeans(data, k=3, seed=42)
    clusters = assignments_to_clusters(result.assignments, 3)
    assert sorted(len(c) for c in clusters) == [15, 15, 15]
    for members in clusters:
        # Each cluster is one contiguous blob
        assert len({m // 15 for m in members}) == 1


def test_k_equals_n_gives_one_point_per_cluster():
    result = run_kmeans(POINTS, k=4, seed=42)
    assert sorted(result.assignments) == [0, 1, 2, 3]


def test_identical_points():
    data = [[1.0, 1.0]] * 5
    result = run_kmeans(data, k=3, seed=42)
    assert len(result.centroids) == 3
    assert all(c == [1.0, 1.0] for c in result.centroids)
    # Ties resolve to the lowest centroid index
    assert result.assignments == [0] * 5


def test_empty_dataset():
    with pytest.raises(EmptyDatasetError):
        run_kmeans([], k=1)


def test_empty_dataset_is_invalid_input():
    with pytest.raises(InvalidInputError):
        run_kmeans([], k=2)


def test_k_greater_than_n():
    with pytest.raises(InvalidClusterCountError):
        run_kmeans(POINTS, k=5)


def test_k_not_positive():
    with pytest.raises(InvalidClusterCountError):
        run_kmeans(POINTS, k=0)


def test_mismatched_dimensions():
    with pytest.raises(DimensionMismatchError):
        run_kmeans([[0, 0], [1, 1, 1]], k=1)


def test_iteration_cap():
    data = _blobs(seed=2)
    result = run_kmeans(data, k=3, max_iterations=0, seed=42)
    assert result.iterations == 0
    assert not result.converged
    assert len(result.assignments) == len(data)


def test_initialize_prefers_far_points():
    data = np.array(POINTS, dtype=float)
    centroids = initialize_centroids(data, 2, SeededRandom(42))
    # First draw picks point 0; the second must come from the far group
    assert centroids[0].tolist() == [0.0, 0.0]
    assert centroids[1].tolist() in ([10.0, 10.0], [10.0, 11.0])


def test_initialize_falls_back_when_points_coincide():
    data = np.array([[2.0, 2.0]] * 4)
    centroids = initialize_centroids(data, 4, SeededRandom(7))
    assert centroids.shape == (4, 2)


def test_assign_ties_go_to_lowest_index():
    data = np.array([[0.0, 0.0]])
    centroids = np.array([[1.0, 0.0], [-1.0, 0.0]])
    assert assign_clusters(data, centroids).tolist() == [0]


def test_update_repairs_empty_cluster():
    data = np.array([[0.0, 0.0], [0.0, 1.0], [9.0, 9.0]])
    assignments = np.array([0, 0, 0])
    centroids = update_centroids(data, assignments, 2)
    assert centroids[0].tolist() == pytest.approx([3.0, 10.0 / 3.0])
    # Farthest point from the only non-empty centroid
    assert centroids[1].tolist() == [9.0, 9.0]


def test_update_repairs_several_empty_clusters_with_distinct_points():
    data = np.array([[0.0, 0.0], [5.0, 0.0], [-5.0, 0.0]])
    centroids = update_centroids(data, np.array([0, 0, 0]), 3)
    assert centroids[0].tolist() == [0.0, 0.0]
    assert {tuple(centroids[1]), tuple(centroids[2])} == {(5.0, 0.0), (-5.0, 0.0)}


def test_assignments_to_clusters():
    assert assignments_to_clusters([1, 0, 1, 2], 4) == [[1], [0, 2], [3], []]
