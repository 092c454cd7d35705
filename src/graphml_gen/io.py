from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml

from .constants import MODEL_FILE_SUFFIXES

logger = logging.getLogger(__name__)


def _load_yaml_mapping(path: Path) -> dict[str, Any]:
    raw = path.read_text(encoding="utf-8")

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ValueError(f"Failed to parse YAML {path}: {e}") from e

    # An empty file is an empty model.
    if data is None:
        return {}

    if not isinstance(data, dict):
        raise TypeError(
            f"Top-level YAML must be a mapping in {path}, got {type(data).__name__}"
        )

    return data


def _deep_merge_model(
    dst: dict[str, Any], src: dict[str, Any], *, src_path: Path
) -> None:
    """Deep-merge `src` into `dst`.

    Merge rules:
      - missing key -> copy
      - list + list -> concatenate (preserve file order)
      - dict + dict -> recursive merge
      - scalar conflicts -> error (unless equal)
    """
    for key, value in src.items():
        if key not in dst:
            dst[key] = value
            continue

        existing = dst[key]
        if isinstance(existing, list) and isinstance(value, list):
            dst[key] = existing + value
            continue

        if isinstance(existing, dict) and isinstance(value, dict):
            _deep_merge_model(existing, value, src_path=src_path)
            continue

        if existing == value:
            continue

        raise ValueError(
            f"Model merge conflict on key {key!r} from {src_path}: "
            f"existing type={type(existing).__name__}, new type={type(value).__name__}"
        )


def model_files(model_dir: Path) -> list[Path]:
    """YAML files of a split model directory, in merge order (sorted by name)."""
    return sorted(
        p for p in model_dir.iterdir() if p.is_file() and p.suffix in MODEL_FILE_SUFFIXES
    )


def load_model(path: Path) -> dict[str, Any]:
    """Load a graph model from a YAML file or a directory of YAML files."""
    if not path.exists():
        raise FileNotFoundError(str(path))

    if not path.is_dir():
        return _load_yaml_mapping(path)

    merged: dict[str, Any] = {}
    for part_path in model_files(path):
        logger.debug("Merging model part %s", part_path)
        _deep_merge_model(merged, _load_yaml_mapping(part_path), src_path=part_path)

    return merged
