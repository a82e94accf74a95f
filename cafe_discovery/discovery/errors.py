from __future__ import annotations

from .models import StrategyKind


class DiscoveryError(Exception):
    """Base class for failures surfaced by the discovery engine."""


class MissingLocation(DiscoveryError):
    def __init__(self) -> None:
        super().__init__("Nearby search requires a caller location")


class StoreQueryFailed(DiscoveryError):
    """A record store call failed; the whole page is abandoned.

    Carries the requested page and the strategy that was running so the
    caller can decide whether to retry the request as a whole.
    """

    def __init__(self, page: int, strategy: StrategyKind, reason: str) -> None:
        super().__init__(f"Store query failed during {strategy.value} (page {page}): {reason}")
        self.page = page
        self.strategy = strategy
        self.reason = reason
