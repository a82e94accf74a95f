from __future__ import annotations

import time

from fastapi import Depends, FastAPI, HTTPException

from .analytics.aggregator import compute_analytics
from .analytics.store import get_events, record_event
from .dependencies import get_store, get_tag_service
from .discovery.errors import MissingLocation, StoreQueryFailed
from .discovery.models import PaginatedResult, SearchRequest
from .discovery.query_builder import active_cafes
from .discovery.service import fetch_cafes, select_strategy
from .store.base import RecordStore
from .tags.base import TagFrequencyService

app = FastAPI(title="Cafe Discovery API", version="1.0.0")


# ── Public endpoints ─────────────────────────────────────────────────────


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@app.get("/metadata")
async def metadata(store: RecordStore = Depends(get_store)) -> dict:
    try:
        rows = await store.fetch(active_cafes())
    except Exception as exc:
        raise HTTPException(status_code=502, detail=f"Store unavailable: {exc}") from exc

    neighborhoods: set[str] = set()
    tags: set[str] = set()
    for row in rows:
        if isinstance(row.get("neighborhood"), str) and row["neighborhood"]:
            neighborhoods.add(row["neighborhood"])
        for tag in row.get("tags") or []:
            tags.add(tag)
    return {"neighborhoods": sorted(neighborhoods), "tags": sorted(tags)}


# ── Discovery ────────────────────────────────────────────────────────────


@app.post("/cafes", response_model=PaginatedResult)
async def cafes(
    body: SearchRequest,
    store: RecordStore = Depends(get_store),
    tag_service: TagFrequencyService = Depends(get_tag_service),
) -> PaginatedResult:
    start_time = time.time()
    try:
        result = await fetch_cafes(body, store, tag_service)
    except MissingLocation as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except StoreQueryFailed as exc:
        raise HTTPException(
            status_code=502,
            detail={"error": exc.reason, "page": exc.page, "strategy": exc.strategy.value},
        ) from exc

    # Record analytics event
    record_event("discovery", {
        "strategy": result.strategy.value,
        "requested_strategy": select_strategy(body).value,
        "fallback": result.fallback.value if result.fallback else None,
        "page": body.page,
        "query": body.text or None,
        "tags": body.tags,
        "neighborhoods": body.neighborhoods,
        "min_rating": body.min_rating,
        "price_levels": body.price_levels,
        "has_location": body.location is not None,
        "radius_miles": result.radius_miles,
        "results_returned": len(result.cafes),
        "response_time_ms": round((time.time() - start_time) * 1000, 1),
    })
    return result


# ── Analytics ────────────────────────────────────────────────────────────


@app.get("/analytics")
def analytics() -> dict:
    return compute_analytics(get_events())
