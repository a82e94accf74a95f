from __future__ import annotations

import logging

import pandas as pd

from .store.base import RecordStore
from .store.config import DEFAULT_STORE_CONFIG
from .store.dataframe_store import DataFrameCafeStore
from .tags.base import TagFrequencyService
from .tags.dataframe_service import DataFrameTagService

logger = logging.getLogger(__name__)

_store: DataFrameCafeStore | None = None
_tag_service: DataFrameTagService | None = None


def get_store() -> RecordStore:
    """Return the process-wide cafe store, loading it on first call."""
    global _store
    if _store is None:
        _store = DataFrameCafeStore.from_csv(DEFAULT_STORE_CONFIG.cafes_csv)
    return _store


def get_tag_service() -> TagFrequencyService:
    """Return the tag report counter; an empty one if no reports were exported."""
    global _tag_service
    if _tag_service is None:
        path = DEFAULT_STORE_CONFIG.tag_reports_csv
        if path.exists():
            _tag_service = DataFrameTagService.from_csv(path)
        else:
            logger.warning("No tag reports at %s; cafes will carry empty tag counts", path)
            _tag_service = DataFrameTagService(pd.DataFrame(columns=["cafe_id", "place_id", "tag"]))
    return _tag_service
