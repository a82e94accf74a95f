from __future__ import annotations

import asyncio
import logging

from ..tags.base import TagFrequencyService
from .models import Cafe

logger = logging.getLogger(__name__)


def sort_by_tag_count(cafes: list[Cafe], tag: str) -> list[Cafe]:
    """Stable pass putting the most-reported ``tag`` first; ties keep their order."""
    return sorted(cafes, key=lambda c: -(c.tag_counts or {}).get(tag, 0))


async def enrich_with_tag_counts(
    cafes: list[Cafe],
    tag_service: TagFrequencyService,
    active_tag: str | None = None,
    concurrency: int | None = None,
) -> list[Cafe]:
    """
    Attach tag report counts to every cafe on the page.

    Lookups run concurrently, one per cafe unless ``concurrency`` caps them.
    A failed lookup leaves that cafe without counts instead of failing the
    page.
    """
    semaphore = asyncio.Semaphore(concurrency) if concurrency is not None else None

    async def _lookup(cafe: Cafe) -> dict[str, int]:
        if semaphore is None:
            return await tag_service.get_tag_counts(cafe.id, cafe.place_id)
        async with semaphore:
            return await tag_service.get_tag_counts(cafe.id, cafe.place_id)

    async def _enrich(cafe: Cafe) -> Cafe:
        try:
            counts = await _lookup(cafe)
        except Exception:
            logger.warning("Tag counts unavailable for cafe %s (%s)", cafe.id, cafe.name, exc_info=True)
            return cafe
        return cafe.model_copy(update={"tag_counts": counts})

    enriched = list(await asyncio.gather(*(_enrich(cafe) for cafe in cafes)))

    if active_tag:
        enriched = sort_by_tag_count(enriched, active_tag)
    return enriched
