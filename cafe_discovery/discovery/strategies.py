"""
Strategy executors.

Each executor takes the full ``SearchRequest``, an injected record store and
the discovery config, and returns one page of cafes without tag counts.
Store calls inside an executor run sequentially.
"""
from __future__ import annotations

import logging
import math
from typing import Any

from ..store.base import RecordStore
from .config import DiscoveryConfig
from .errors import MissingLocation, StoreQueryFailed
from .geo import bounding_box, distances_from, radius_for_page
from .models import Cafe, FallbackStep, PaginatedResult, SearchRequest, StrategyKind
from .query_builder import (
    CafeQuery,
    FilterSet,
    active_cafes,
    apply_filters,
    by_location,
    newest_first,
    paginate,
    within_box,
)
from .transform import cafe_from_row

logger = logging.getLogger(__name__)


async def _fetch_rows(
    store: RecordStore,
    query: CafeQuery,
    page: int,
    strategy: StrategyKind,
) -> list[dict[str, Any]]:
    try:
        return await store.fetch(query)
    except Exception as exc:
        logger.error("Store query failed during %s (page %d)", strategy.value, page, exc_info=True)
        raise StoreQueryFailed(page, strategy, str(exc)) from exc


def _with_distances(rows: list[dict[str, Any]], latitude: float, longitude: float) -> list[Cafe]:
    distances = distances_from(
        latitude,
        longitude,
        [row["latitude"] for row in rows],
        [row["longitude"] for row in rows],
    )
    # Rows without coordinates get no distance.
    return [
        cafe_from_row(row, distance=None if math.isnan(d) else float(d))
        for row, d in zip(rows, distances)
    ]


# ── Text search ──────────────────────────────────────────────────────────


async def fetch_search_results(
    request: SearchRequest,
    store: RecordStore,
    config: DiscoveryConfig,
) -> PaginatedResult:
    filters = FilterSet.from_request(request)
    fetch_size = config.page_size * config.search_overfetch_factor

    # Search intent wins over proximity: no distance filter here.
    query = paginate(
        newest_first(apply_filters(active_cafes(), filters)),
        offset=request.page * config.page_size,
        limit=fetch_size,
    )
    rows = await _fetch_rows(store, query, request.page, StrategyKind.text_search)
    logger.info("Search results: found %d cafes matching %r", len(rows), filters.text)

    if request.location is None:
        ordered = [cafe_from_row(row) for row in rows]
    else:
        needle = filters.text.lower()
        cafes = _with_distances(rows, request.location.latitude, request.location.longitude)
        ordered = sorted(
            cafes,
            key=lambda c: (needle not in c.name.lower(), c.distance is None, c.distance or 0.0),
        )

    return PaginatedResult(
        cafes=ordered[: config.page_size],
        has_more=len(ordered) > config.page_size,
        total=len(ordered),
        page=request.page,
        strategy=StrategyKind.text_search,
    )


# ── Geo radius ───────────────────────────────────────────────────────────


def order_by_distance(cafes: list[Cafe], epsilon: float = 0.1) -> list[Cafe]:
    """Nearest first; cafes less than ``epsilon`` miles apart rank by google rating.

    Candidates are sorted by distance and then insertion-sorted, a cafe only
    stepping ahead of a lower-rated neighbour whose distance is within
    ``epsilon`` of its own. Two cafes ``epsilon`` or more apart therefore
    always keep their distance order.
    """
    ordered: list[Cafe] = []
    for cafe in sorted(cafes, key=lambda c: c.distance):
        i = len(ordered)
        while i > 0 and _outranks(cafe, ordered[i - 1], epsilon):
            i -= 1
        ordered.insert(i, cafe)
    return ordered


def _outranks(cafe: Cafe, other: Cafe, epsilon: float) -> bool:
    if abs(cafe.distance - other.distance) >= epsilon:
        return False
    return (cafe.google_rating or 0) > (other.google_rating or 0)


async def _cafes_within(
    request: SearchRequest,
    store: RecordStore,
    config: DiscoveryConfig,
    radius: float,
) -> list[Cafe]:
    location = request.location
    box = bounding_box(location.latitude, location.longitude, radius, config.bounding_box_safety)
    logger.debug("Nearby query bounds for %.1f mi: %s", radius, box)

    # Latitude/longitude ordering only keeps the scan index-friendly.
    query = paginate(
        by_location(within_box(apply_filters(active_cafes(), FilterSet.from_request(request)), box)),
        offset=0,
        limit=config.nearby_fetch_size,
    )
    rows = await _fetch_rows(store, query, request.page, StrategyKind.geo_radius)

    candidates = _with_distances(rows, location.latitude, location.longitude)
    in_range = [
        cafe for cafe in candidates if cafe.distance is not None and cafe.distance <= radius
    ]
    logger.info(
        "Nearby search: %d cafes in bounding box, %d within %.1f mi",
        len(rows),
        len(in_range),
        radius,
    )
    return order_by_distance(in_range, config.distance_tie_epsilon)


async def fetch_nearby_cafes(
    request: SearchRequest,
    store: RecordStore,
    config: DiscoveryConfig,
) -> PaginatedResult:
    if request.location is None:
        raise MissingLocation()

    explicit_radius = request.radius_miles is not None
    if explicit_radius:
        radius = request.radius_miles
    else:
        # Each page re-sorts from scratch with its own radius; page 1 is not
        # a continuation of page 0's ordering.
        radius = radius_for_page(request.page, config.radius_ladder)

    in_range = await _cafes_within(request, store, config, radius)

    message = None
    if not in_range and request.page == 0 and not explicit_radius and request.has_active_filters():
        expanded = min(radius * 2, config.max_expanded_radius)
        if expanded > radius:
            logger.info("No filtered cafes within %g mi, retrying with %g mi", radius, expanded)
            in_range = await _cafes_within(request, store, config, expanded)
            if in_range:
                message = (
                    f"No cafes found within {radius:g} miles matching your filters. "
                    f"Showing results within {expanded:g} miles instead."
                )
            else:
                message = (
                    f"No cafes found within {radius:g} miles matching your filters. "
                    f"Expanded search to {expanded:g} miles but still no results."
                )
            radius = expanded

    start = request.page * config.page_size
    end = min(start + config.page_size, len(in_range))
    return PaginatedResult(
        cafes=in_range[start:end],
        has_more=len(in_range) > end,
        total=len(in_range),
        page=request.page,
        strategy=StrategyKind.geo_radius,
        radius_miles=radius,
        radius_expansion_message=message,
    )


# ── Filtered exact + fallback cascade ────────────────────────────────────


async def _fetch_exact(
    store: RecordStore,
    filters: FilterSet,
    page: int,
    config: DiscoveryConfig,
) -> PaginatedResult:
    # One extra row tells us whether a further page exists.
    query = paginate(
        newest_first(apply_filters(active_cafes(), filters)),
        offset=page * config.page_size,
        limit=config.page_size + 1,
    )
    rows = await _fetch_rows(store, query, page, StrategyKind.filtered_exact)
    cafes = [cafe_from_row(row) for row in rows[: config.page_size]]
    return PaginatedResult(
        cafes=cafes,
        has_more=len(rows) > config.page_size,
        total=len(cafes),
        page=page,
        strategy=StrategyKind.filtered_exact,
    )


async def fetch_with_fallback(
    filters: FilterSet,
    store: RecordStore,
    config: DiscoveryConfig,
) -> PaginatedResult:
    """Relax the original filters one at a time until a first page fills up.

    Each relaxation starts again from ``filters``; they are not cumulative.
    """
    if filters.tags:
        result = await _fetch_exact(store, filters.without_tags(), 0, config)
        if len(result.cafes) >= config.cascade_min_results:
            logger.info("Fallback: dropping tag filter yielded %d cafes", len(result.cafes))
            return result.model_copy(update={"fallback": FallbackStep.drop_tags})

    if filters.min_rating > 0:
        result = await _fetch_exact(store, filters.without_rating(), 0, config)
        if len(result.cafes) >= config.cascade_min_results:
            logger.info("Fallback: dropping rating floor yielded %d cafes", len(result.cafes))
            return result.model_copy(update={"fallback": FallbackStep.drop_rating})

    logger.info("Fallback: relaxed filters insufficient, loading popular cafes")
    result = await _fetch_popular(store, 0, config)
    return result.model_copy(update={"fallback": FallbackStep.popularity})


async def fetch_with_filters(
    request: SearchRequest,
    store: RecordStore,
    config: DiscoveryConfig,
) -> PaginatedResult:
    filters = FilterSet.from_request(request)
    result = await _fetch_exact(store, filters, request.page, config)
    logger.info("Exact filters: %d cafes on page %d", len(result.cafes), request.page)

    # Only a short first page triggers the cascade; later pages return as-is.
    if request.page == 0 and len(result.cafes) < config.cascade_min_results:
        return await fetch_with_fallback(filters, store, config)
    return result


# ── Popularity ───────────────────────────────────────────────────────────


async def _fetch_popular(store: RecordStore, page: int, config: DiscoveryConfig) -> PaginatedResult:
    query = paginate(
        newest_first(active_cafes()),
        offset=page * config.page_size,
        limit=config.page_size,
    )
    rows = await _fetch_rows(store, query, page, StrategyKind.popularity)

    priority = {name: i for i, name in enumerate(config.neighborhood_priority)}
    unlisted = len(priority)
    cafes = sorted(
        (cafe_from_row(row) for row in rows),
        key=lambda c: (priority.get(c.neighborhood or "", unlisted), -(c.google_rating or 0)),
    )
    return PaginatedResult(
        cafes=cafes,
        # Heuristic: a full page is taken to mean more exist.
        has_more=len(rows) == config.page_size,
        total=len(cafes),
        page=page,
        strategy=StrategyKind.popularity,
    )


async def fetch_popular_cafes(
    request: SearchRequest,
    store: RecordStore,
    config: DiscoveryConfig,
) -> PaginatedResult:
    return await _fetch_popular(store, request.page, config)
