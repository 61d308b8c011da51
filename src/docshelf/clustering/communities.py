"""Louvain-style community detection over a similarity graph.

Single-level greedy modularity optimization: every node starts in its own
community (community id = node index in ``graph.nodes``) and is repeatedly
moved to the neighboring community with the strictly highest contribution
score until a full pass moves nothing or the iteration cap is reached.
"""

import logging
from typing import Mapping

from ..errors import InvalidInputError
from ..models import ClusterResult, CommunityResult, WeightedGraph
from .graph import normalize_weights

logger = logging.getLogger(__name__)

DEFAULT_MAX_ITERATIONS = 100


def _contribution(
    node: int,
    community: int,
    membership: list[int],
    adjacency: list[dict[int, float]],
    totals: list[float],
) -> float:
    """Score of ``node`` belonging to ``community``.

    Sums w - (k * w) / (2 * k) over neighbors already in the community,
    where k is the node's total incident weight.
    """
    total = totals[node]
    if total == 0.0:
        # Every incident weight is zero, so every term is zero
        return 0.0
    score = 0.0
    for neighbor, weight in adjacency[node].items():
        if membership[neighbor] == community:
            score += weight - (total * weight) / (2 * total)
    return score


def detect_communities(
    graph: WeightedGraph,
    max_iterations: int | None = DEFAULT_MAX_ITERATIONS,
    initial: Mapping[str, int] | None = None,
) -> CommunityResult:
    """Partition graph nodes into communities.

    Args:
        graph: Graph whose edge weights are similarities. Weights are
            min/max normalized to [0, 1] before scoring.
        max_iterations: Cap on full passes; None runs until no node moves.
        initial: Optional starting partition. Defaults to singletons.

    Returns:
        CommunityResult mapping each node id to a community id. If the cap is
        hit first, the last state is returned with ``converged=False``.
    """
    nodes = graph.nodes
    if not nodes:
        return CommunityResult(partition={}, iterations=0, converged=True)

    normalized = WeightedGraph(nodes=nodes, edges=normalize_weights(graph.edges))
    adjacency = normalized.adjacency()
    totals = [sum(neighbors.values()) for neighbors in adjacency]

    if initial is None:
        membership = list(range(len(nodes)))
    else:
        missing = [node for node in nodes if node not in initial]
        if missing:
            raise InvalidInputError(f"Initial partition misses {len(missing)} node(s)",
                                    {"missing": missing})
        membership = [initial[node] for node in nodes]

    iterations = 0
    converged = False
    while max_iterations is None or iterations < max_iterations:
        iterations += 1
        moves = 0
        for node in range(len(nodes)):
            current = membership[node]
            best = current
            best_score = _contribution(node, current, membership, adjacency, totals)

            seen = {current}
            for neighbor in adjacency[node]:
                candidate = membership[neighbor]
                if candidate in seen:
                    continue
                seen.add(candidate)
                score = _contribution(node, candidate, membership, adjacency, totals)
                if score > best_score:
                    best_score = score
                    best = candidate

            if best != current:
                membership[node] = best
                moves += 1

        logger.debug(f"Community pass {iterations}: {moves} move(s)")
        if moves == 0:
            converged = True
            break

    if not converged:
        logger.debug(f"Community detection stopped at iteration cap {max_iterations}")

    partition = {node: membership[i] for i, node in enumerate(nodes)}
    return CommunityResult(partition=partition, iterations=iterations, converged=converged)


def group_communities(
    partition: Mapping[str, int],
    names: Mapping[str, str] | None = None,
) -> list[ClusterResult]:
    """Group node ids by community into named clusters.

    Clusters are ordered by their first member in partition order and named
    ``Cluster N`` with N = community id + 1.
    """
    names = names or {}
    clusters: dict[int, ClusterResult] = {}
    for node, community in partition.items():
        cluster = clusters.get(community)
        if cluster is None:
            cluster = ClusterResult(
                cluster_id=community,
                document_ids=[],
                label=f"Cluster {community + 1}",
            )
            clusters[community] = cluster
        cluster.document_ids.append(node)
        cluster.document_names.append(names.get(node, node))
    return list(clusters.values())


def dense_labels(partition: Mapping[str, int]) -> dict[str, int]:
    """Relabel community ids to 0..m-1 in order of first appearance."""
    mapping: dict[int, int] = {}
    return {
        node: mapping.setdefault(community, len(mapping))
        for node, community in partition.items()
    }
