from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, computed_field

from .geo import format_distance


class StrategyKind(str, Enum):
    text_search = "text_search"
    geo_radius = "geo_radius"
    filtered_exact = "filtered_exact"
    popularity = "popularity"


class FallbackStep(str, Enum):
    drop_tags = "drop_tags"
    drop_rating = "drop_rating"
    popularity = "popularity"


class Coordinate(BaseModel):
    latitude: float = Field(..., ge=-90.0, le=90.0)
    longitude: float = Field(..., ge=-180.0, le=180.0)


class SearchRequest(BaseModel):
    query: str | None = Field(default=None, description="Free-text name/address/neighborhood search")
    tags: list[str] = Field(default_factory=list)
    neighborhoods: list[str] = Field(default_factory=list)
    # No upper bound: an impossible floor simply matches nothing.
    min_rating: float = Field(default=0.0, ge=0.0)
    price_levels: list[int] = Field(default_factory=list)
    open_now: bool = Field(
        default=False,
        description="Resolved by the caller against opening hours; carried through untouched",
    )
    radius_miles: float | None = Field(
        default=None,
        gt=0.0,
        description="Explicit search radius; when absent the radius grows with the page index",
    )
    location: Coordinate | None = None
    active_tag: str | None = Field(
        default=None, description="Tag whose report count is used for secondary sort emphasis"
    )
    page: int = Field(default=0, ge=0)

    @property
    def text(self) -> str:
        return (self.query or "").strip()

    def has_active_filters(self) -> bool:
        return bool(self.tags or self.neighborhoods or self.min_rating > 0 or self.price_levels)


class Cafe(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    place_id: str | None = None
    name: str
    address: str | None = None
    neighborhood: str | None = None
    latitude: float
    longitude: float
    rating: float | None = None
    google_rating: float | None = None
    # Ordinal 0-4 as reported by the places listing.
    price_level: int | None = None
    phone_number: str | None = None
    website: str | None = None
    opening_hours: list[str] = Field(default_factory=list)
    parking_info: str | None = None
    photos: list[str] = Field(default_factory=list)
    hero_photo_url: str | None = None
    tags: list[str] = Field(default_factory=list)
    is_active: bool = True
    created_at: datetime | None = None
    updated_at: datetime | None = None

    distance: float | None = None
    tag_counts: dict[str, int] | None = None

    @computed_field
    @property
    def distance_label(self) -> str | None:
        if self.distance is None:
            return None
        return format_distance(self.distance)


class PaginatedResult(BaseModel):
    cafes: list[Cafe]
    has_more: bool
    total: int
    page: int
    strategy: StrategyKind
    fallback: FallbackStep | None = None
    radius_miles: float | None = None
    radius_expansion_message: str | None = None
