"""JSON file sink for pipeline snapshots."""

from __future__ import annotations

import dataclasses
import json
import logging
import os
from pathlib import Path
from typing import Any

SNAPSHOT_OUTPUT_DIR = os.getenv("SNAPSHOT_OUTPUT_DIR", "snapshots")

LOGGER = logging.getLogger(__name__)


def snapshot_to_dict(snapshot: Any) -> Any:
    """Render a snapshot (or any nested value) as plain JSON data with camelCase keys."""
    if dataclasses.is_dataclass(snapshot) and not isinstance(snapshot, type):
        return {
            _camel_case(field.name): snapshot_to_dict(getattr(snapshot, field.name))
            for field in dataclasses.fields(snapshot)
        }
    if isinstance(snapshot, (list, tuple)):
        return [snapshot_to_dict(item) for item in snapshot]
    if isinstance(snapshot, dict):
        return {str(key): snapshot_to_dict(value) for key, value in snapshot.items()}
    return snapshot


def write_snapshot(snapshot: Any, name: str, output_dir: str | None = None) -> Path:
    """Write ``<output_dir>/<name>.json`` and return its path."""
    directory = Path(output_dir or SNAPSHOT_OUTPUT_DIR)
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / f"{name}.json"

    with path.open("w", encoding="utf-8") as fh:
        json.dump(snapshot_to_dict(snapshot), fh, indent=2, ensure_ascii=False)
        fh.write("\n")

    LOGGER.info("Wrote %s snapshot to %s", name, path)
    return path


def _camel_case(name: str) -> str:
    """``weighted_change_24h`` -> ``weightedChange24h``."""
    head, *rest = name.split("_")
    return head + "".join(part[:1].upper() + part[1:] for part in rest)
