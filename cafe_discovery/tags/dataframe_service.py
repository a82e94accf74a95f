from __future__ import annotations

import logging
from pathlib import Path

import pandas as pd

logger = logging.getLogger(__name__)


class DataFrameTagService:
    """Counts tag reports held in a frame with ``cafe_id``, ``place_id`` and ``tag`` columns."""

    def __init__(self, reports: pd.DataFrame) -> None:
        reports = reports.copy()
        for col in ("cafe_id", "place_id", "tag"):
            if col not in reports.columns:
                reports[col] = None
        reports = reports.dropna(subset=["tag"])
        reports["cafe_id"] = reports["cafe_id"].astype(str)
        self._reports = reports

    @classmethod
    def from_csv(cls, path: Path) -> DataFrameTagService:
        logger.info("Loading tag reports from %s", path)
        return cls(pd.read_csv(path, dtype={"cafe_id": str, "place_id": str}))

    async def get_tag_counts(self, cafe_id: str, place_id: str | None = None) -> dict[str, int]:
        reports = self._reports
        mask = reports["cafe_id"] == str(cafe_id)
        if place_id:
            # Reports imported from place listings may only carry the place id.
            mask = mask | (reports["place_id"] == place_id)
        counts = reports.loc[mask, "tag"].value_counts()
        return {str(tag): int(count) for tag, count in counts.items()}
