from __future__ import annotations

from typing import Any

import pandas as pd

from .models import Cafe

_TEXT_FIELDS = (
    "place_id",
    "name",
    "address",
    "neighborhood",
    "phone_number",
    "website",
    "parking_info",
    "hero_photo_url",
)


def _clean(value: Any) -> Any:
    """Map pandas/NumPy missing markers (NaN, NaT, None) to ``None``."""
    if value is None or isinstance(value, (list, tuple, dict)):
        return value
    return None if pd.isna(value) else value


def _text(value: Any) -> str | None:
    value = _clean(value)
    return None if value is None else str(value)


def _number(value: Any) -> float | None:
    value = _clean(value)
    return None if value is None else float(value)


def cafe_from_row(row: dict[str, Any], distance: float | None = None) -> Cafe:
    """Build the public Cafe read model from a raw store row."""
    text = {name: _text(row.get(name)) for name in _TEXT_FIELDS}

    price_level = _clean(row.get("price_level"))
    photos = list(row.get("photos") or [])
    if text["hero_photo_url"]:
        photos = [text["hero_photo_url"], *photos]

    text["name"] = text["name"] or ""
    return Cafe(
        id=str(row["id"]),
        latitude=float(row["latitude"]),
        longitude=float(row["longitude"]),
        rating=_number(row.get("rating")),
        google_rating=_number(row.get("google_rating")),
        price_level=int(price_level) if price_level is not None else None,
        opening_hours=list(row.get("opening_hours") or []),
        photos=photos,
        tags=list(row.get("tags") or []),
        is_active=bool(row.get("is_active", True)),
        created_at=_clean(row.get("created_at")),
        updated_at=_clean(row.get("updated_at")),
        distance=distance,
        **text,
    )
