"""Configuration management for docshelf."""

import copy
import os
from pathlib import Path
from typing import Any

import yaml

from .errors import ConfigurationError
from .models import OrganizationConfig

METHODS = ("kmeans", "communities")
MAX_FOLDER_LETTERS = 26

DEFAULT_CONFIG = {
    "graph": {"similarity_threshold": 0.7},
    "communities": {"max_iterations": 100},
    "kmeans": {"max_iterations": 100, "seed": 42},
    "organization": {
        "max_shelves": 3,
        "max_folders": 10,
        "method": "kmeans",
    },
}


def _find_config_file() -> Path | None:
    """Look for config.yaml in standard locations."""
    candidates = [
        Path.cwd() / "config" / "config.yaml",
        Path.cwd() / "config.yaml",
        Path.home() / ".docshelf" / "config.yaml",
    ]
    for p in candidates:
        if p.exists():
            return p
    return None


def load_config(config_path: str | Path | None = None) -> dict[str, Any]:
    """Load configuration, merging defaults with file and env vars."""
    cfg = copy.deepcopy(DEFAULT_CONFIG)

    path = Path(config_path) if config_path else _find_config_file()
    if path and path.exists():
        with open(path) as f:
            file_cfg = yaml.safe_load(f) or {}
        if not isinstance(file_cfg, dict):
            raise ConfigurationError(f"Config file {path} must contain a mapping")
        _deep_merge(cfg, file_cfg)

    # Env overrides
    if seed := os.environ.get("DOCSHELF_SEED"):
        cfg["kmeans"]["seed"] = _parse(seed, int, "DOCSHELF_SEED")
    if threshold := os.environ.get("DOCSHELF_THRESHOLD"):
        cfg["graph"]["similarity_threshold"] = _parse(threshold, float, "DOCSHELF_THRESHOLD")

    validate_config(cfg)
    return cfg


def validate_config(cfg: dict[str, Any]) -> None:
    """Raise ConfigurationError for values the engine cannot honor."""
    org = cfg.get("organization", {})
    if org.get("method", "kmeans") not in METHODS:
        raise ConfigurationError(
            f"Unknown organization method: {org.get('method')}",
            {"allowed": list(METHODS)},
        )
    organization_config(cfg)

    threshold = _parse(cfg.get("graph", {}).get("similarity_threshold", 0.7), float, "similarity_threshold")
    if not 0.0 <= threshold <= 1.0:
        raise ConfigurationError(f"similarity_threshold must be in [0, 1], got {threshold}")

    km = cfg.setdefault("kmeans", {})
    km["max_iterations"] = _parse(km.get("max_iterations", 100), int, "kmeans.max_iterations")
    if km["max_iterations"] < 0:
        raise ConfigurationError("kmeans.max_iterations must be non-negative")
    km["seed"] = _parse(km.get("seed", 42), int, "kmeans.seed")

    # None runs community detection until no node moves
    communities = cfg.setdefault("communities", {})
    cap = communities.get("max_iterations", 100)
    if cap is not None:
        communities["max_iterations"] = _parse(cap, int, "communities.max_iterations")
        if communities["max_iterations"] < 1:
            raise ConfigurationError("communities.max_iterations must be at least 1")


def organization_config(cfg: dict[str, Any]) -> OrganizationConfig:
    """Typed shelf/folder bounds from a config dict."""
    org = cfg.get("organization", {})
    shelves = _parse(org.get("max_shelves", 3), int, "max_shelves")
    folders = _parse(org.get("max_folders", 10), int, "max_folders")
    if shelves <= 0 or folders <= 0:
        raise ConfigurationError("max_shelves and max_folders must be positive")
    if folders > MAX_FOLDER_LETTERS:
        raise ConfigurationError(
            f"max_folders cannot exceed {MAX_FOLDER_LETTERS} (one letter per folder)"
        )
    return OrganizationConfig(max_shelves=shelves, max_folders=folders)


def _parse(value: Any, kind: type, name: str) -> Any:
    if isinstance(value, bool):
        raise ConfigurationError(f"Invalid {name}: {value!r}")
    try:
        return kind(value)
    except (TypeError, ValueError):
        raise ConfigurationError(f"Invalid {name}: {value!r}") from None


def _deep_merge(base: dict, override: dict) -> None:
    """Merge override into base in-place."""
    for k, v in override.items():
        if k in base and isinstance(base[k], dict) and isinstance(v, dict):
            _deep_merge(base[k], v)
        else:
            base[k] = v
