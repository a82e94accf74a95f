from __future__ import annotations

from typing import Protocol


class TagFrequencyService(Protocol):
    async def get_tag_counts(self, cafe_id: str, place_id: str | None = None) -> dict[str, int]:
        """Return how many times each tag was reported for a cafe."""
        ...
