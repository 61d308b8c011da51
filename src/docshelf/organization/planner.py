"""Turn cluster assignments into shelf/folder suggestions."""

import logging
import string
from typing import Mapping, Sequence

import numpy as np

from ..clustering.vectors import cosine_similarity
from ..errors import EmptyDatasetError, InvalidInputError
from ..models import Document, Folder, Location, LocationSuggestion, OrganizationConfig, Present

logger = logging.getLogger(__name__)

DEFAULT_CENTROID_THRESHOLD = 0.5


def location_for_cluster(index: int, config: OrganizationConfig) -> Location:
    """Map a cluster index to a shelf (1-based) and folder letter.

    Folders fill shelf by shelf: with 10 folders per shelf, index 0 is
    Shelf 1 / Folder A and index 10 is Shelf 2 / Folder A.
    """
    if index < 0 or index >= config.capacity:
        raise InvalidInputError(
            f"Cluster index {index} does not fit in {config.max_shelves} shelves "
            f"x {config.max_folders} folders",
            {"index": index, "capacity": config.capacity},
        )
    shelf, folder = divmod(index, config.max_folders)
    return Location(shelf=shelf + 1, folder=string.ascii_uppercase[folder])


def plan_organization(
    documents: Sequence[Document],
    assignments: Sequence[int] | Mapping[str, int],
    config: OrganizationConfig | None = None,
) -> list[LocationSuggestion]:
    """Suggest a location for every document from its cluster.

    Args:
        documents: Documents with their current locations.
        assignments: Cluster index per document, either aligned by position
            or keyed by document id.
        config: Shelf/folder bounds.

    Returns:
        One suggestion per document in input order, unchanged ones included.
        Filter with ``changed_only`` for display.
    """
    config = config or OrganizationConfig()
    if isinstance(assignments, Mapping):
        missing = [doc.id for doc in documents if doc.id not in assignments]
        if missing:
            raise InvalidInputError(f"No cluster assignment for {len(missing)} document(s)",
                                    {"missing": missing})
        labels = [assignments[doc.id] for doc in documents]
    else:
        if len(assignments) != len(documents):
            raise InvalidInputError(
                f"Got {len(assignments)} assignments for {len(documents)} documents"
            )
        labels = list(assignments)

    suggestions = [
        LocationSuggestion(
            id=doc.id,
            name=doc.name,
            current=doc.location,
            suggested=location_for_cluster(label, config),
        )
        for doc, label in zip(documents, labels)
    ]
    changed = sum(s.changed for s in suggestions)
    logger.debug(f"Planned {len(suggestions)} suggestion(s), {changed} changed")
    return suggestions


def changed_only(suggestions: Sequence[LocationSuggestion]) -> list[LocationSuggestion]:
    return [s for s in suggestions if s.changed]


def _centroid(vectors: list[tuple[float, ...]]) -> np.ndarray:
    if not vectors:
        raise EmptyDatasetError("Cannot calculate centroid of empty vector set")
    return np.mean(np.array(vectors, dtype=float), axis=0)


def plan_by_folder_centroids(
    documents: Sequence[Document],
    folders: Sequence[Folder],
    threshold: float = DEFAULT_CENTROID_THRESHOLD,
    force: bool = False,
) -> list[LocationSuggestion]:
    """Suggest the most similar existing folder for each document.

    A folder's centroid is the mean embedding of its members; an empty
    folder uses the mean of all candidate documents instead. Only moves are
    returned, and only when similarity exceeds ``threshold`` unless ``force``.
    Documents without an embedding are skipped.
    """
    if not folders:
        raise InvalidInputError("No folders found. Create at least one folder first.")

    candidates = []
    for doc in documents:
        match doc.embedding:
            case Present(vector=vector):
                candidates.append((doc, vector))
            case _:
                logger.debug(f"Skipping {doc.id}: no embedding")
    if not candidates:
        return []

    fallback = _centroid([vector for _, vector in candidates])
    centroids = []
    for folder in folders:
        members = [d.embedding.vector for d in folder.documents if isinstance(d.embedding, Present)]
        centroids.append((folder.location, _centroid(members) if members else fallback))

    suggestions = []
    for doc, vector in candidates:
        best_location: Location | None = None
        best_similarity = -1.0
        for location, centroid in centroids:
            similarity = cosine_similarity(vector, centroid)
            if similarity > best_similarity:
                best_similarity = similarity
                best_location = location

        if best_location is None or best_location == doc.location:
            continue
        if best_similarity > threshold or force:
            suggestions.append(LocationSuggestion(
                id=doc.id,
                name=doc.name,
                current=doc.location,
                suggested=best_location,
            ))
    return suggestions
