from __future__ import annotations

from typing import Any, Protocol

from ..discovery.query_builder import CafeQuery


class RecordStore(Protocol):
    async def fetch(self, query: CafeQuery) -> list[dict[str, Any]]:
        """Return raw cafe rows matching ``query``, or raise on failure."""
        ...
