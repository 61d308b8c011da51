"""Data models used throughout docshelf."""

from dataclasses import dataclass, field
from typing import Any, Union

import numpy as np


@dataclass(frozen=True)
class Present:
    """A usable embedding vector."""
    vector: tuple[float, ...]


@dataclass(frozen=True)
class Absent:
    """A document with no usable embedding."""


Embedding = Union[Present, Absent]


def to_embedding(values: Any) -> Embedding:
    """Wrap raw embedding values, treating empty or all-zero vectors as Absent."""
    if values is None:
        return Absent()
    arr = np.asarray(values, dtype=float).ravel()
    if arr.size == 0 or not np.any(arr):
        return Absent()
    return Present(tuple(float(v) for v in arr))


@dataclass(frozen=True)
class Location:
    """A concrete shelf/folder pair."""
    shelf: int
    folder: str

    def __str__(self) -> str:
        return f"Shelf {self.shelf} / Folder {self.folder}"


@dataclass
class Document:
    """A document as seen by the organization engine."""
    id: str
    name: str
    embedding: Embedding = field(default_factory=Absent)
    location: Location | None = None


@dataclass(frozen=True)
class Edge:
    """An undirected similarity edge between two nodes."""
    source: str
    target: str
    weight: float


@dataclass
class WeightedGraph:
    """Undirected weighted graph over document ids."""
    nodes: list[str]
    edges: list[Edge] = field(default_factory=list)

    def adjacency(self) -> list[dict[int, float]]:
        """Dense-index adjacency: node index -> {neighbor index: weight}.

        Neighbor order follows edge insertion order.
        """
        index = {node: i for i, node in enumerate(self.nodes)}
        adj: list[dict[int, float]] = [{} for _ in self.nodes]
        for edge in self.edges:
            a, b = index[edge.source], index[edge.target]
            adj[a][b] = edge.weight
            adj[b][a] = edge.weight
        return adj


@dataclass
class KMeansResult:
    """Centroids and per-point assignments from a k-means run."""
    centroids: list[list[float]]
    assignments: list[int]
    iterations: int = 0
    converged: bool = True


@dataclass
class CommunityResult:
    """Partition from community detection."""
    partition: dict[str, int]
    iterations: int = 0
    converged: bool = True


@dataclass
class ClusterResult:
    """A named group of documents."""
    cluster_id: int
    document_ids: list[str]
    document_names: list[str] = field(default_factory=list)
    centroid: list[float] | None = None
    label: str = ""


@dataclass
class OrganizationConfig:
    """Bounds on the physical storage layout."""
    max_shelves: int = 3
    max_folders: int = 10

    @property
    def capacity(self) -> int:
        return self.max_shelves * self.max_folders


@dataclass
class LocationSuggestion:
    """A proposed location for one document."""
    id: str
    name: str
    current: Location | None
    suggested: Location

    @property
    def changed(self) -> bool:
        return self.current != self.suggested

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "current": None if self.current is None else {
                "shelf": self.current.shelf, "folder": self.current.folder,
            },
            "suggested": {"shelf": self.suggested.shelf, "folder": self.suggested.folder},
        }


@dataclass
class Folder:
    """An existing folder and the documents already filed in it."""
    location: Location
    documents: list[Document] = field(default_factory=list)
