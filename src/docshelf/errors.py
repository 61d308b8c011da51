"""Exception hierarchy for docshelf.

    DocshelfError
    ├── InvalidInputError → EmptyDatasetError, DimensionMismatchError,
    │                       InvalidClusterCountError
    └── ConfigurationError
"""

from typing import Any


class DocshelfError(Exception):
    """Base exception for all docshelf errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class InvalidInputError(DocshelfError, ValueError):
    """Input violates a precondition of an algorithm."""


class EmptyDatasetError(InvalidInputError):
    """At least one item was required."""


class DimensionMismatchError(InvalidInputError):
    """Vectors in one run do not share a length."""


class InvalidClusterCountError(InvalidInputError):
    """Cluster count outside [1, n]."""


class ConfigurationError(DocshelfError, ValueError):
    """Invalid configuration value."""
