"""Similarity graphs, community detection and k-means over embeddings."""

from .communities import detect_communities, group_communities
from .graph import build_similarity_graph
from .kmeans import run_kmeans
from .vectors import cosine_similarity, euclidean_distance, seeded_random

__all__ = [
    "build_similarity_graph",
    "cosine_similarity",
    "detect_communities",
    "euclidean_distance",
    "group_communities",
    "run_kmeans",
    "seeded_random",
]
