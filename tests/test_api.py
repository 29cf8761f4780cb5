import json

import pytest
from fastapi.testclient import TestClient

from api.app import app
from api.dependencies import get_job_store
from common.job_store import InMemoryJobStore, JobStoreError


@pytest.fixture
def client(store):
    app.dependency_overrides[get_job_store] = lambda: store
    yield TestClient(app)
    app.dependency_overrides.clear()


def _parse_sse_events(body: str) -> list:
    """Parse SSE body into list of event dicts (data: {...} lines)."""
    events = []
    for block in body.strip().split("\n\n"):
        block = block.strip()
        if not block.startswith("data:"):
            continue
        events.append(json.loads(block[5:].strip()))
    return events


def test_health(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "healthy"}


def test_phase_catalog(client):
    resp = client.get("/api/v1/jobs/phases/story")
    assert resp.status_code == 200, resp.text
    data = resp.json()
    assert data["job_type"] == "story"
    assert data["phases"][0] == {"phase": "validating", "label": "Checking document"}
    assert len(data["phases"]) == 6


def test_phase_catalog_unknown_type(client):
    assert client.get("/api/v1/jobs/phases/podcast").status_code == 422


def test_get_job(client, store, make_row):
    store.put(
        make_row(
            status="completed",
            summary={"evidenceCount": 5, "workHistoryCount": 2, "claimsCreated": 3, "claimsUpdated": 0},
        )
    )

    resp = client.get("/api/v1/jobs/job-1")

    assert resp.status_code == 200, resp.text
    data = resp.json()
    assert data["id"] == "job-1"
    assert data["status"] == "completed"
    assert data["summary"]["evidenceCount"] == 5


def test_get_job_not_found(client):
    resp = client.get("/api/v1/jobs/missing")
    assert resp.status_code == 404
    assert "missing" in resp.json()["detail"]


def test_get_job_store_failure(store):
    class BrokenStore(InMemoryJobStore):
        async def get_job(self, job_id):
            raise JobStoreError("firestore unavailable")

    app.dependency_overrides[get_job_store] = lambda: BrokenStore()
    try:
        resp = TestClient(app).get("/api/v1/jobs/job-1")
    finally:
        app.dependency_overrides.clear()
    assert resp.status_code == 502


def test_progress_stream_for_completed_job(client, store, make_row):
    store.put(
        make_row(
            status="completed",
            highlights=[{"text": "5 evidence items", "type": "found"}, {"text": "Led team", "type": "created"}],
            summary={"evidenceCount": 5},
        )
    )

    resp = client.get("/api/v1/jobs/job-1/progress")

    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith("text/event-stream")
    events = _parse_sse_events(resp.text)
    assert events[0]["is_loading"] is True
    final = events[-1]
    assert final["is_loading"] is False
    assert final["error"] is None
    assert final["snapshot"]["status"] == "completed"
    assert [m["text"] for m in final["feed"]] == ["+ Led team", "Found: 5 evidence items"]
    assert [m["id"] for m in final["feed"]] == [-1, -2]
    assert {s["state"] for s in final["steps"]} == {"done"}
    assert store.subscriber_count("job-1") == 0


def test_progress_stream_for_failed_job(client, store, make_row):
    store.put(make_row(status="failed", error="Could not parse PDF"))

    events = _parse_sse_events(client.get("/api/v1/jobs/job-1/progress").text)

    final = events[-1]
    assert final["error"] is None
    assert final["snapshot"]["error"] == "Could not parse PDF"
    assert {s["state"] for s in final["steps"]} == {"pending"}


def test_progress_stream_for_missing_job(client, store):
    events = _parse_sse_events(client.get("/api/v1/jobs/missing/progress").text)

    final = events[-1]
    assert final["snapshot"] is None
    assert final["error"] == "Job missing not found"
    assert store.subscriber_count("missing") == 0
