"""Loader for the static reference point dataset."""

from __future__ import annotations

import functools
import json
from pathlib import Path
from typing import Optional

from ..config import settings
from ..models.domain import GeoPoint, LocationType


def _parse_point(row: dict) -> GeoPoint:
    try:
        return GeoPoint(
            id=str(row["id"]),
            lat=float(row["lat"]),
            lng=float(row["lng"]),
            name=str(row["name"]).strip(),
            category=LocationType(row["category"]),
            details=(row.get("details") or "").strip() or None,
        )
    except (KeyError, TypeError, ValueError) as exc:
        raise ValueError(f"Invalid reference point record {row!r}: {exc}") from exc


@functools.lru_cache(maxsize=1)
def load_reference_points(source: Optional[Path] = None) -> tuple[GeoPoint, ...]:
    """Load reference points from the configured JSON file."""

    json_path = source or settings.reference_points_file
    if not json_path.exists():
        raise FileNotFoundError(f"Reference points file not found: {json_path}")

    with json_path.open("r", encoding="utf-8") as handle:
        rows = json.load(handle)
    if not isinstance(rows, list):
        raise ValueError(f"Reference points file '{json_path}' must contain a JSON array.")
    return tuple(_parse_point(row) for row in rows)
