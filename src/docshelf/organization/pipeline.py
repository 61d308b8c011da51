"""End-to-end organization: embeddings in, location suggestions out."""

import logging
from typing import Any, Callable, Sequence

from ..clustering.communities import dense_labels, detect_communities
from ..clustering.graph import build_similarity_graph
from ..clustering.kmeans import run_kmeans
from ..clustering.vectors import as_matrix
from ..config import DEFAULT_CONFIG, METHODS, organization_config
from ..errors import ConfigurationError, InvalidInputError
from ..models import Document, LocationSuggestion, Present
from .planner import plan_organization

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[str, float], None]


def usable_documents(documents: Sequence[Document]) -> list[tuple[Document, tuple[float, ...]]]:
    """Documents paired with their embedding, dropping those without one."""
    usable = []
    for doc in documents:
        match doc.embedding:
            case Present(vector=vector):
                usable.append((doc, vector))
            case _:
                logger.debug(f"Skipping {doc.id}: no embedding")
    return usable


def kmeans_assignments(vectors: Sequence[Sequence[float]], k: int, cfg: dict[str, Any]) -> list[int]:
    """Cluster labels via k-means; one point or one cluster needs no run."""
    n = len(vectors)
    if n == 0:
        return []
    if n == 1 or k <= 1:
        return [0] * n
    km = cfg.get("kmeans", {})
    result = run_kmeans(
        vectors,
        k,
        max_iterations=km.get("max_iterations", 100),
        seed=km.get("seed", 42),
    )
    return result.assignments


def community_assignments(
    ids: Sequence[str],
    vectors: Sequence[Sequence[float]],
    cfg: dict[str, Any],
) -> list[int]:
    """Cluster labels via community detection, relabeled densely from 0."""
    graph_cfg = cfg.get("graph", {})
    graph = build_similarity_graph(
        list(zip(ids, vectors)),
        threshold=graph_cfg.get("similarity_threshold", 0.7),
    )
    result = detect_communities(
        graph,
        max_iterations=cfg.get("communities", {}).get("max_iterations", 100),
    )
    labels = dense_labels(result.partition)
    return [labels[i] for i in ids]


def organize_documents(
    documents: Sequence[Document],
    cfg: dict[str, Any] | None = None,
    method: str | None = None,
    progress: ProgressCallback | None = None,
) -> list[LocationSuggestion]:
    """Cluster documents by embedding and suggest a shelf/folder for each.

    Args:
        documents: Candidate documents. Those without an embedding are skipped.
        cfg: Config dict as returned by ``load_config``.
        method: "kmeans" or "communities"; defaults to ``organization.method``.
        progress: Optional callback receiving (stage, fraction complete).

    Returns:
        One suggestion per document with an embedding.
    """
    cfg = cfg or DEFAULT_CONFIG
    method = method or cfg.get("organization", {}).get("method", "kmeans")
    if method not in METHODS:
        raise ConfigurationError(f"Unknown organization method: {method}",
                                 {"allowed": list(METHODS)})
    org = organization_config(cfg)

    def report(stage: str, fraction: float) -> None:
        if progress is not None:
            progress(stage, fraction)

    report("filtering", 0.0)
    usable = usable_documents(documents)
    if not usable:
        report("done", 1.0)
        return []

    docs = [doc for doc, _ in usable]
    vectors = [vector for _, vector in usable]
    as_matrix(vectors)  # dimensionality check before any clustering work
    logger.info(f"Organizing {len(docs)} document(s) with {method} into {org.capacity} location(s)")

    report("clustering", 0.2)
    if method == "kmeans":
        labels = kmeans_assignments(vectors, min(org.capacity, len(vectors)), cfg)
    else:
        labels = community_assignments([doc.id for doc in docs], vectors, cfg)
        found = max(labels) + 1
        if found > org.capacity:
            raise InvalidInputError(
                f"Found {found} communities but only {org.capacity} locations are available",
                {"communities": found, "capacity": org.capacity},
            )

    report("planning", 0.8)
    suggestions = plan_organization(docs, labels, org)
    report("done", 1.0)
    return suggestions
