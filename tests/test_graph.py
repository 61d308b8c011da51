"""Tests for the similarity graph builder."""

import math

import pytest

from docshelf.clustering.graph import build_similarity_graph, normalize_weights, strongest_edges
from docshelf.clustering.vectors import cosine_similarity
from docshelf.errors import DimensionMismatchError, InvalidInputError
from docshelf.models import Edge


def _unit(angle_deg):
    rad = math.radians(angle_deg)
    return [math.cos(rad), math.sin(rad)]


def test_two_close_one_far():
    # a-b about 0.9, a-c about 0.9, b-c well below threshold
    items = [("a", _unit(0)), ("b", _unit(25)), ("c", _unit(-25))]
    graph = build_similarity_graph(items, threshold=0.7)
    assert graph.nodes == ["a", "b", "c"]
    assert len(graph.edges) == 2
    assert {(e.source, e.target) for e in graph.edges} == {("a", "b"), ("a", "c")}
    for e in graph.edges:
        assert e.weight == pytest.approx(math.cos(math.radians(25)))


def test_no_self_loops_or_duplicates():
    items = [(f"d{i}", [1.0, 0.1 * i, 0.05]) for i in range(8)]
    graph = build_similarity_graph(items, threshold=0.5)
    pairs = [frozenset((e.source, e.target)) for e in graph.edges]
    assert all(e.source != e.target for e in graph.edges)
    assert len(pairs) == len(set(pairs))


def test_weights_never_below_threshold():
    items = [(f"d{i}", _unit(i * 11)) for i in range(12)]
    graph = build_similarity_graph(items, threshold=0.8)
    assert graph.edges
    assert all(e.weight >= 0.8 for e in graph.edges)


def test_weights_match_cosine_similarity():
    vectors = {"x": [1, 2, 3], "y": [2, 3, 4], "z": [1, 2, 2.5]}
    graph = build_similarity_graph(list(vectors.items()), threshold=0.0)
    for e in graph.edges:
        assert e.weight == pytest.approx(cosine_similarity(vectors[e.source], vectors[e.target]))


def test_fewer_than_two_items():
    assert build_similarity_graph([]).edges == []
    graph = build_similarity_graph([("only", [1.0, 0.0])])
    assert graph.nodes == ["only"]
    assert graph.edges == []


def test_zero_vector_gets_no_edges():
    graph = build_similarity_graph([("a", [1, 1]), ("b", [1, 1]), ("z", [0, 0])], threshold=0.0)
    assert {(e.source, e.target) for e in graph.edges} == {("a", "b")}


def test_dimension_checks():
    with pytest.raises(DimensionMismatchError):
        build_similarity_graph([("a", [1, 0]), ("b", [1, 0, 0])])
    with pytest.raises(DimensionMismatchError):
        build_similarity_graph([("a", [1, 0]), ("b", [0, 1])], dimensions=1536)


def test_duplicate_ids_rejected():
    with pytest.raises(InvalidInputError):
        build_similarity_graph([("a", [1, 0]), ("a", [0, 1])])


def test_normalize_weights():
    edges = [Edge("a", "b", 0.7), Edge("b", "c", 0.8), Edge("a", "c", 0.9)]
    weights = [e.weight for e in normalize_weights(edges)]
    assert weights == pytest.approx([0.0, 0.5, 1.0])


def test_normalize_equal_weights():
    edges = [Edge("a", "b", 0.8), Edge("b", "c", 0.8)]
    assert [e.weight for e in normalize_weights(edges)] == [0.5, 0.5]
    assert normalize_weights([]) == []


def test_adjacency_is_symmetric():
    graph = build_similarity_graph([("a", [1, 0]), ("b", [1, 0.1]), ("c", [0, 1])], threshold=0.9)
    adj = graph.adjacency()
    assert adj[0] == {1: graph.edges[0].weight}
    assert adj[1] == {0: graph.edges[0].weight}
    assert adj[2] == {}


def test_strongest_edges():
    items = [("a", [1, 0]), ("b", [1, 0.2]), ("c", [1, 0.5])]
    top = strongest_edges(build_similarity_graph(items, threshold=0.0), limit=1)
    assert len(top) == 1
    assert (top[0].source, top[0].target) == ("a", "b")


def test_negative_threshold_rejected():
    with pytest.raises(InvalidInputError):
        build_similarity_graph([("a", [1, 0]), ("b", [-0.3, 0.954])], threshold=-0.5)


def test_zero_threshold_keeps_weights_non_negative():
    items = [("a", [1, 0]), ("b", [-0.3, 0.954]), ("c", [0.6, 0.8]), ("d", [-1, 0])]
    graph = build_similarity_graph(items, threshold=0.0)
    assert graph.edges
    assert all(e.weight >= 0.0 for e in graph.edges)
    assert ("a", "b") not in {(e.source, e.target) for e in graph.edges}
