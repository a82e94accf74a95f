import pandas as pd
import pytest

from cafe_discovery.tags.dataframe_service import DataFrameTagService

REPORTS = pd.DataFrame([
    {"cafe_id": "1", "place_id": "place-1", "tag": "wifi"},
    {"cafe_id": "1", "place_id": "place-1", "tag": "wifi"},
    {"cafe_id": "1", "place_id": "place-1", "tag": "quiet"},
    {"cafe_id": None, "place_id": "place-1", "tag": "wifi"},
    {"cafe_id": "2", "place_id": "place-2", "tag": "patio"},
    {"cafe_id": "2", "place_id": "place-2", "tag": None},
])


@pytest.mark.asyncio
async def test_counts_reports_per_cafe():
    service = DataFrameTagService(REPORTS)
    assert await service.get_tag_counts("2") == {"patio": 1}


@pytest.mark.asyncio
async def test_place_id_picks_up_reports_without_cafe_id():
    service = DataFrameTagService(REPORTS)
    assert await service.get_tag_counts("1") == {"wifi": 2, "quiet": 1}
    assert await service.get_tag_counts("1", "place-1") == {"wifi": 3, "quiet": 1}


@pytest.mark.asyncio
async def test_unknown_cafe_has_no_counts():
    service = DataFrameTagService(REPORTS)
    assert await service.get_tag_counts("404", "place-404") == {}


@pytest.mark.asyncio
async def test_loads_from_csv(tmp_path):
    path = tmp_path / "tag_reports.csv"
    REPORTS.to_csv(path, index=False)
    service = DataFrameTagService.from_csv(path)
    assert await service.get_tag_counts("2", "place-2") == {"patio": 1}
