from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import pandas as pd

from ..discovery.query_builder import CafeQuery

logger = logging.getLogger(__name__)

CAFE_COLUMNS: list[str] = [
    "id",
    "place_id",
    "name",
    "address",
    "neighborhood",
    "latitude",
    "longitude",
    "rating",
    "google_rating",
    "price_level",
    "phone_number",
    "website",
    "opening_hours",
    "parking_info",
    "photos",
    "hero_photo_url",
    "tags",
    "is_active",
    "created_at",
    "updated_at",
]

# CSV exports store list columns joined with these delimiters.
LIST_COLUMNS: dict[str, str] = {"tags": ",", "photos": "|", "opening_hours": "|"}
NUMERIC_COLUMNS: list[str] = ["latitude", "longitude", "rating", "google_rating", "price_level"]


def _split(value: Any, sep: str) -> list[str]:
    if isinstance(value, (list, tuple)):
        return [str(v) for v in value]
    if value is None or (not isinstance(value, str) and pd.isna(value)):
        return []
    return [part.strip() for part in str(value).split(sep) if part.strip()]


def prepare_cafes(df: pd.DataFrame) -> pd.DataFrame:
    """Coerce a raw cafes frame into the column types queries rely on."""
    df = df.copy()
    for col in CAFE_COLUMNS:
        if col not in df.columns:
            df[col] = True if col == "is_active" else None

    for col, sep in LIST_COLUMNS.items():
        df[col] = df[col].apply(lambda v, s=sep: _split(v, s))

    for col in NUMERIC_COLUMNS:
        df[col] = pd.to_numeric(df[col], errors="coerce")

    df["id"] = df["id"].astype(str)
    df["is_active"] = df["is_active"].fillna(False).astype(bool)
    df["created_at"] = pd.to_datetime(df["created_at"], utc=True, errors="coerce")
    df["updated_at"] = pd.to_datetime(df["updated_at"], utc=True, errors="coerce")
    return df


class DataFrameCafeStore:
    """In-memory record store that evaluates ``CafeQuery`` with pandas masks."""

    def __init__(self, df: pd.DataFrame) -> None:
        self._df = prepare_cafes(df)

    @classmethod
    def from_csv(cls, path: Path) -> DataFrameCafeStore:
        logger.info("Loading cafes from %s", path)
        return cls(pd.read_csv(path, dtype={"id": str, "place_id": str}))

    @property
    def dataframe(self) -> pd.DataFrame:
        return self._df

    async def fetch(self, query: CafeQuery) -> list[dict[str, Any]]:
        return self.run(query)

    def run(self, query: CafeQuery) -> list[dict[str, Any]]:
        df = self._df
        mask = pd.Series(True, index=df.index)

        if query.active_only:
            mask = mask & df["is_active"]

        if query.text:
            needle = query.text.lower()
            text_mask = pd.Series(False, index=df.index)
            for col in query.text_columns:
                text_mask = text_mask | df[col].fillna("").astype(str).str.lower().str.contains(
                    needle, regex=False
                )
            mask = mask & text_mask

        if query.tags_overlap:
            wanted = set(query.tags_overlap)
            mask = mask & df["tags"].apply(lambda tags: bool(wanted & set(tags))).astype(bool)

        if query.neighborhoods_in:
            mask = mask & df["neighborhood"].isin(list(query.neighborhoods_in))

        if query.min_google_rating is not None:
            mask = mask & (df["google_rating"] >= query.min_google_rating)

        if query.price_levels_in:
            mask = mask & df["price_level"].isin(list(query.price_levels_in))

        if query.latitude_between is not None:
            low, high = query.latitude_between
            mask = mask & df["latitude"].between(low, high)

        if query.longitude_between is not None:
            low, high = query.longitude_between
            mask = mask & df["longitude"].between(low, high)

        result = df.loc[mask]

        if query.order_by:
            result = result.sort_values(
                by=[o.column for o in query.order_by],
                ascending=[o.ascending for o in query.order_by],
                kind="mergesort",
                na_position="last",
            )

        end = None if query.limit is None else query.offset + query.limit
        result = result.iloc[query.offset:end]
        return result.to_dict("records")
