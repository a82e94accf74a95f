from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
load_dotenv(Path(__file__).resolve().parent.parent.parent / ".env")


def _optional_positive_int(name: str) -> int | None:
    raw = os.getenv(name, "").strip()
    if not raw:
        return None
    value = int(raw)
    if value < 1:
        raise ValueError(f"{name} must be a positive integer, got {raw!r}")
    return value


NEIGHBORHOOD_PRIORITY: tuple[str, ...] = (
    "Montrose",
    "Heights",
    "Downtown",
    "Midtown",
    "Rice Village",
    "West University",
    "River Oaks",
    "Memorial",
    "Galleria",
    "East End",
)


@dataclass(frozen=True)
class DiscoveryConfig:
    page_size: int = int(os.getenv("DISCOVERY_PAGE_SIZE", "50"))

    # Text search over-fetches this many pages worth of rows before sorting.
    search_overfetch_factor: int = 2

    # Geo search scans max(page_size * factor, floor) rows from the box.
    nearby_overfetch_factor: int = 5
    nearby_min_fetch: int = 250
    radius_ladder: tuple[float, ...] = (5.0, 10.0, 15.0, 20.0, 30.0)
    bounding_box_safety: float = 1.5
    distance_tie_epsilon: float = 0.1
    max_expanded_radius: float = float(os.getenv("DISCOVERY_MAX_EXPANDED_RADIUS", "25"))

    # Tunable: the cascade only kicks in on page 0 below this many results.
    cascade_min_results: int = 10

    neighborhood_priority: tuple[str, ...] = NEIGHBORHOOD_PRIORITY

    # None means one concurrent tag lookup per cafe on the page.
    enrichment_concurrency: int | None = _optional_positive_int("DISCOVERY_ENRICHMENT_CONCURRENCY")

    def __post_init__(self) -> None:
        if self.enrichment_concurrency is not None and self.enrichment_concurrency < 1:
            raise ValueError("enrichment_concurrency must be a positive integer or None")

    @property
    def nearby_fetch_size(self) -> int:
        return max(self.page_size * self.nearby_overfetch_factor, self.nearby_min_fetch)


DEFAULT_DISCOVERY_CONFIG = DiscoveryConfig()
