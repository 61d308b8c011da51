"""Location planning from cluster assignments."""

from .pipeline import organize_documents
from .planner import changed_only, plan_by_folder_centroids, plan_organization

__all__ = ["changed_only", "organize_documents", "plan_by_folder_centroids", "plan_organization"]
