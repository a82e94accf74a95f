from __future__ import annotations

from collections import Counter
from typing import Any


def _rate(count: int, total: int) -> float:
    return round(count / total * 100, 1) if total else 0.0


def compute_analytics(events: list[dict[str, Any]]) -> dict[str, Any]:
    searches = [e for e in events if e["type"] == "discovery"]
    total = len(searches)

    times = [s["response_time_ms"] for s in searches if "response_time_ms" in s]
    avg_time = round(sum(times) / len(times), 1) if times else 0.0

    # Which executor was picked, before any fallback.
    strategy_counter: Counter[str] = Counter(s.get("requested_strategy", "unknown") for s in searches)

    fallback_counter: Counter[str] = Counter(s["fallback"] for s in searches if s.get("fallback"))
    fallbacks = sum(fallback_counter.values())

    neighborhood_counter: Counter[str] = Counter()
    tag_counter: Counter[str] = Counter()
    for s in searches:
        for n in s.get("neighborhoods", []) or []:
            neighborhood_counter[n] += 1
        for t in s.get("tags", []) or []:
            tag_counter[t] += 1

    filter_counts = {"query": 0, "tags": 0, "neighborhoods": 0, "rating": 0, "price": 0, "location": 0}
    for s in searches:
        if s.get("query"):
            filter_counts["query"] += 1
        if s.get("tags"):
            filter_counts["tags"] += 1
        if s.get("neighborhoods"):
            filter_counts["neighborhoods"] += 1
        if s.get("min_rating", 0) > 0:
            filter_counts["rating"] += 1
        if s.get("price_levels"):
            filter_counts["price"] += 1
        if s.get("has_location"):
            filter_counts["location"] += 1

    empty_pages = sum(1 for s in searches if s.get("results_returned", 0) == 0)

    return {
        "total_searches": total,
        "avg_response_time_ms": avg_time,
        "strategy_usage": dict(strategy_counter),
        "fallbacks": {
            "total": fallbacks,
            "rate": _rate(fallbacks, total),
            "by_step": dict(fallback_counter),
        },
        "top_neighborhoods": [
            {"name": n, "count": c} for n, c in neighborhood_counter.most_common(10)
        ],
        "top_tags": [{"name": n, "count": c} for n, c in tag_counter.most_common(10)],
        "filter_usage": {k: _rate(v, total) for k, v in filter_counts.items()},
        "empty_page_rate": _rate(empty_pages, total),
    }
