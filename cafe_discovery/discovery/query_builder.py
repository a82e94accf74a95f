"""
Store-agnostic description of a cafe query.

Executors never talk to a concrete database; they compose a ``CafeQuery``
out of predicates and hand it to whatever ``RecordStore`` was injected.
"""
from __future__ import annotations

from dataclasses import dataclass, field, replace

from .geo import BoundingBox
from .models import SearchRequest

TEXT_SEARCH_COLUMNS: tuple[str, ...] = ("name", "address", "neighborhood")


@dataclass(frozen=True)
class OrderBy:
    column: str
    ascending: bool = True


@dataclass(frozen=True)
class FilterSet:
    """The non-spatial filters a request carries."""

    text: str = ""
    tags: tuple[str, ...] = ()
    neighborhoods: tuple[str, ...] = ()
    min_rating: float = 0.0
    price_levels: tuple[int, ...] = ()

    @classmethod
    def from_request(cls, request: SearchRequest) -> FilterSet:
        return cls(
            text=request.text,
            tags=tuple(request.tags),
            neighborhoods=tuple(request.neighborhoods),
            min_rating=request.min_rating,
            price_levels=tuple(request.price_levels),
        )

    def without_tags(self) -> FilterSet:
        return replace(self, tags=())

    def without_rating(self) -> FilterSet:
        return replace(self, min_rating=0.0)


@dataclass(frozen=True)
class CafeQuery:
    active_only: bool = True
    # Case-insensitive substring matched against any of ``text_columns``.
    text: str | None = None
    text_columns: tuple[str, ...] = TEXT_SEARCH_COLUMNS
    tags_overlap: tuple[str, ...] = ()
    neighborhoods_in: tuple[str, ...] = ()
    min_google_rating: float | None = None
    price_levels_in: tuple[int, ...] = ()
    latitude_between: tuple[float, float] | None = None
    longitude_between: tuple[float, float] | None = None
    order_by: tuple[OrderBy, ...] = field(default_factory=tuple)
    offset: int = 0
    limit: int | None = None


def active_cafes() -> CafeQuery:
    return CafeQuery(active_only=True)


def apply_filters(query: CafeQuery, filters: FilterSet) -> CafeQuery:
    changes: dict = {}
    if filters.tags:
        changes["tags_overlap"] = filters.tags
    if filters.neighborhoods:
        changes["neighborhoods_in"] = filters.neighborhoods
    if filters.min_rating > 0:
        changes["min_google_rating"] = filters.min_rating
    if filters.price_levels:
        changes["price_levels_in"] = filters.price_levels
    if filters.text:
        changes["text"] = filters.text
    return replace(query, **changes)


def within_box(query: CafeQuery, box: BoundingBox) -> CafeQuery:
    return replace(
        query,
        latitude_between=(box.lat_min, box.lat_max),
        longitude_between=(box.lng_min, box.lng_max),
    )


def newest_first(query: CafeQuery) -> CafeQuery:
    return replace(query, order_by=(OrderBy("created_at", ascending=False),))


def by_location(query: CafeQuery) -> CafeQuery:
    return replace(query, order_by=(OrderBy("latitude"), OrderBy("longitude")))


def paginate(query: CafeQuery, offset: int, limit: int) -> CafeQuery:
    return replace(query, offset=offset, limit=limit)
