from __future__ import annotations

import logging
from typing import Awaitable, Callable

from ..store.base import RecordStore
from ..tags.base import TagFrequencyService
from .config import DEFAULT_DISCOVERY_CONFIG, DiscoveryConfig
from .enrichment import enrich_with_tag_counts
from .models import PaginatedResult, SearchRequest, StrategyKind
from .strategies import (
    fetch_nearby_cafes,
    fetch_popular_cafes,
    fetch_search_results,
    fetch_with_filters,
)

logger = logging.getLogger(__name__)

Executor = Callable[[SearchRequest, RecordStore, DiscoveryConfig], Awaitable[PaginatedResult]]

STRATEGIES: dict[StrategyKind, Executor] = {
    StrategyKind.text_search: fetch_search_results,
    StrategyKind.geo_radius: fetch_nearby_cafes,
    StrategyKind.filtered_exact: fetch_with_filters,
    StrategyKind.popularity: fetch_popular_cafes,
}


def select_strategy(request: SearchRequest) -> StrategyKind:
    """First match wins: text, then location, then filters, then popularity."""
    if request.text:
        return StrategyKind.text_search
    if request.location is not None:
        return StrategyKind.geo_radius
    if request.has_active_filters():
        return StrategyKind.filtered_exact
    return StrategyKind.popularity


def _sort_tag(request: SearchRequest, kind: StrategyKind, result: PaginatedResult) -> str | None:
    if request.active_tag:
        return request.active_tag
    # Browsing by tag emphasises cafes where that tag was reported most, but
    # only on the exact filtered page; relaxed pages keep their own order.
    if kind is StrategyKind.filtered_exact and result.fallback is None and request.tags:
        return request.tags[0]
    return None


async def fetch_cafes(
    request: SearchRequest,
    store: RecordStore,
    tag_service: TagFrequencyService,
    config: DiscoveryConfig = DEFAULT_DISCOVERY_CONFIG,
) -> PaginatedResult:
    """Run the strategy the request calls for and return one enriched page.

    Raises ``StoreQueryFailed`` when the store errors and ``MissingLocation``
    if a nearby search is attempted without a coordinate.
    """
    kind = select_strategy(request)
    logger.info("Fetching cafes with %s strategy (page %d)", kind.value, request.page)

    result = await STRATEGIES[kind](request, store, config)
    cafes = await enrich_with_tag_counts(
        result.cafes,
        tag_service,
        active_tag=_sort_tag(request, kind, result),
        concurrency=config.enrichment_concurrency,
    )
    return result.model_copy(update={"cafes": cafes})
