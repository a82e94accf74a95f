from __future__ import annotations

import math
from datetime import datetime, timedelta, timezone
from typing import Any

import pandas as pd

from cafe_discovery.discovery.query_builder import CafeQuery
from cafe_discovery.store.dataframe_store import DataFrameCafeStore

HOUSTON = (29.7604, -95.3698)
MILES_PER_DEGREE = 3959 * math.pi / 180
_EPOCH = datetime(2024, 1, 1, tzinfo=timezone.utc)


def north_of(miles: float, origin: tuple[float, float] = HOUSTON) -> tuple[float, float]:
    """A point exactly ``miles`` due north of ``origin`` (same meridian)."""
    return origin[0] + miles / MILES_PER_DEGREE, origin[1]


def make_row(cafe_id: str, *, age: int = 0, miles: float = 1.0, **overrides: Any) -> dict[str, Any]:
    """Raw cafe row; larger ``age`` means created longer ago."""
    lat, lng = north_of(miles)
    row = {
        "id": cafe_id,
        "place_id": f"place-{cafe_id}",
        "name": f"Cafe {cafe_id}",
        "address": f"{cafe_id} Main St, Houston, TX",
        "neighborhood": "Spring Branch",
        "latitude": lat,
        "longitude": lng,
        "rating": None,
        "google_rating": 4.0,
        "price_level": 2,
        "tags": [],
        "photos": [],
        "opening_hours": [],
        "is_active": True,
        "created_at": (_EPOCH - timedelta(hours=age)).isoformat(),
        "updated_at": _EPOCH.isoformat(),
    }
    row.update(overrides)
    return row


def make_rows(count: int, prefix: str = "c", **overrides: Any) -> list[dict[str, Any]]:
    return [make_row(f"{prefix}{i}", age=i, **overrides) for i in range(count)]


class RecordingStore(DataFrameCafeStore):
    """DataFrame store that remembers every query it was asked to run."""

    def __init__(self, rows: list[dict[str, Any]]) -> None:
        super().__init__(pd.DataFrame(rows) if rows else pd.DataFrame(columns=["id"]))
        self.queries: list[CafeQuery] = []

    async def fetch(self, query: CafeQuery) -> list[dict[str, Any]]:
        self.queries.append(query)
        return await super().fetch(query)


class FailingStore:
    async def fetch(self, query: CafeQuery) -> list[dict[str, Any]]:
        raise ConnectionError("connection reset by peer")


class StaticTagService:
    """Serves fixed counts per cafe id; ids listed in ``failing`` raise."""

    def __init__(self, counts: dict[str, dict[str, int]] | None = None, failing: set[str] | None = None):
        self.counts = counts or {}
        self.failing = failing or set()
        self.calls: list[tuple[str, str | None]] = []

    async def get_tag_counts(self, cafe_id: str, place_id: str | None = None) -> dict[str, int]:
        self.calls.append((cafe_id, place_id))
        if cafe_id in self.failing:
            raise TimeoutError(f"tag service timed out for {cafe_id}")
        return dict(self.counts.get(cafe_id, {}))
