from __future__ import annotations

from fastapi.testclient import TestClient

from cafe_discovery.analytics.store import clear_events, get_events
from cafe_discovery.app import app
from cafe_discovery.dependencies import get_store, get_tag_service
from cafe_discovery.tests.helpers import FailingStore, RecordingStore, StaticTagService, make_row, make_rows

client = TestClient(app)


def _use(store, tags=None):
    app.dependency_overrides[get_store] = lambda: store
    app.dependency_overrides[get_tag_service] = lambda: tags or StaticTagService()


def teardown_function():
    app.dependency_overrides.clear()


def test_health():
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}


def test_empty_request_returns_popular_cafes():
    _use(RecordingStore(make_rows(3)), StaticTagService({"c0": {"wifi": 2}}))
    resp = client.post("/cafes", json={})
    assert resp.status_code == 200
    body = resp.json()
    assert body["strategy"] == "popularity"
    assert body["page"] == 0
    assert body["has_more"] is False
    assert len(body["cafes"]) == 3
    assert body["cafes"][0]["tag_counts"] == {"wifi": 2}


def test_nearby_request_reports_distance_and_radius():
    _use(RecordingStore([make_row("near", miles=1.5), make_row("far", miles=9.0)]))
    resp = client.post(
        "/cafes",
        json={"location": {"latitude": 29.7604, "longitude": -95.3698}},
    )
    body = resp.json()
    assert resp.status_code == 200
    assert body["strategy"] == "geo_radius"
    assert body["radius_miles"] == 5.0
    assert [c["id"] for c in body["cafes"]] == ["near"]
    assert abs(body["cafes"][0]["distance"] - 1.5) < 1e-6
    assert body["cafes"][0]["distance_label"] == "1.5 mi away"


def test_search_request():
    _use(RecordingStore([make_row("hit", name="Boomtown Coffee"), make_row("miss", name="Tea Spot")]))
    resp = client.post("/cafes", json={"query": "boomtown"})
    body = resp.json()
    assert body["strategy"] == "text_search"
    assert [c["id"] for c in body["cafes"]] == ["hit"]
    assert body["cafes"][0]["distance"] is None
    assert body["cafes"][0]["distance_label"] is None


def test_validation_rejects_negative_page():
    _use(RecordingStore([]))
    resp = client.post("/cafes", json={"page": -1})
    assert resp.status_code == 422


def test_validation_rejects_bad_coordinate():
    _use(RecordingStore([]))
    resp = client.post("/cafes", json={"location": {"latitude": 123.0, "longitude": 0.0}})
    assert resp.status_code == 422


def test_impossible_rating_floor_is_not_validated():
    _use(RecordingStore(make_rows(2)))
    resp = client.post("/cafes", json={"min_rating": 9.0})
    assert resp.status_code == 200
    # Nothing meets the floor, so the cascade ends at popularity.
    assert resp.json()["fallback"] == "popularity"


def test_store_failure_returns_bad_gateway_with_page():
    _use(FailingStore())
    resp = client.post("/cafes", json={"tags": ["wifi"], "page": 4})
    assert resp.status_code == 502
    detail = resp.json()["detail"]
    assert detail["page"] == 4
    assert detail["strategy"] == "filtered_exact"


def test_metadata_lists_neighborhoods_and_tags():
    _use(RecordingStore([
        make_row("a", neighborhood="Montrose", tags=["wifi", "quiet"]),
        make_row("b", neighborhood="Heights", tags=["wifi"]),
        make_row("c", neighborhood="Closed", tags=["gone"], is_active=False),
    ]))
    resp = client.get("/metadata")
    assert resp.status_code == 200
    assert resp.json() == {"neighborhoods": ["Heights", "Montrose"], "tags": ["quiet", "wifi"]}


def test_cafes_request_records_discovery_event():
    clear_events()
    _use(RecordingStore(make_rows(2)))
    resp = client.post("/cafes", json={"neighborhoods": ["Nowhere"]})
    assert resp.status_code == 200

    events = get_events()
    assert len(events) == 1
    event = events[0]
    assert event["type"] == "discovery"
    assert event["requested_strategy"] == "filtered_exact"
    assert event["strategy"] == "popularity"
    assert event["fallback"] == "popularity"
    assert event["results_returned"] == 2
    assert event["response_time_ms"] >= 0


def test_failed_cafes_request_records_nothing():
    clear_events()
    _use(FailingStore())
    resp = client.post("/cafes", json={})
    assert resp.status_code == 502
    assert get_events() == []
