"""Embedding sources: where (document, embedding) pairs come from."""

import json
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any

import yaml

from .errors import InvalidInputError
from .models import Document, Location, to_embedding


class EmbeddingSource(ABC):
    """Common interface for anything that can supply embedded documents."""

    @abstractmethod
    def load(self) -> list[Document]:
        """Return all candidate documents, with or without embeddings."""


class FileEmbeddingSource(EmbeddingSource):
    """Read documents from a JSON or YAML file.

    The file holds a list of objects with keys ``id``, ``name``,
    ``embedding`` (list of floats, optional) and ``location``
    (``{shelf, folder}``, optional).
    """

    def __init__(self, path: str | Path):
        self.path = Path(path)

    def load(self) -> list[Document]:
        text = self.path.read_text(encoding="utf-8")
        if self.path.suffix.lower() in (".yaml", ".yml"):
            data = yaml.safe_load(text) or []
        else:
            data = json.loads(text)
        if isinstance(data, dict):
            data = data.get("documents", [])
        if not isinstance(data, list):
            raise InvalidInputError(f"{self.path}: expected a list of documents")
        return [_parse_document(item, i) for i, item in enumerate(data)]


def _parse_document(item: dict[str, Any], index: int) -> Document:
    if not isinstance(item, dict) or "id" not in item:
        raise InvalidInputError(f"Document {index} has no id")
    doc_id = str(item["id"])
    return Document(
        id=doc_id,
        name=str(item.get("name", doc_id)),
        embedding=_parse_embedding(item.get("embedding"), index),
        location=_parse_location(item.get("location"), index),
    )


def _parse_embedding(values: Any, index: int):
    try:
        return to_embedding(values)
    except (TypeError, ValueError):
        raise InvalidInputError(f"Document {index} has an invalid embedding") from None


def _parse_location(location: Any, index: int) -> Location | None:
    if location is None:
        return None
    if (
        not isinstance(location, dict)
        or "shelf" not in location
        or "folder" not in location
        or isinstance(location["shelf"], bool)
        or not isinstance(location["shelf"], int)
    ):
        raise InvalidInputError(f"Document {index} has an invalid location", {"location": location})
    return Location(location["shelf"], str(location["folder"]))
