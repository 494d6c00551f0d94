"""Tests for the public read counter and live visitor endpoints."""

from datetime import datetime, timedelta, timezone

from analytics.services.ingest import CleanEvent, record_event
from analytics.services.queries import count_live, get_read_counts

READS_URL = "/api/analytics/reads"


def _view(client, path, session_id="s1", type_="pageview"):
    client.post(
        "/api/analytics/event",
        json={"path": path, "source": "direct", "sessionId": session_id, "type": type_},
    )


def test_reads_for_unknown_path_is_zero(client):
    response = client.get(READS_URL, params={"path": "/blog/never-read"})

    assert response.status_code == 200
    assert response.json() == {"path": "/blog/never-read", "count": 0}


def test_reads_requires_path(client):
    assert client.get(READS_URL).status_code == 400
    assert client.get(READS_URL, params={"path": ""}).status_code == 400


def test_batch_reads(client):
    _view(client, "/blog/a", "s1")
    _view(client, "/blog/a", "s2")
    _view(client, "/blog/b", "s1")

    response = client.post(READS_URL, json={"paths": ["/blog/a", "/blog/b", "/blog/c"]})

    assert response.status_code == 200
    assert response.json() == {"counts": {"/blog/a": 2, "/blog/b": 1, "/blog/c": 0}}


def test_batch_reads_requires_non_empty_array(client):
    assert client.post(READS_URL, json={}).status_code == 400
    assert client.post(READS_URL, json={"paths": []}).status_code == 400
    assert client.post(READS_URL, json={"paths": "/blog/a"}).status_code == 400


def test_batch_reads_caps_at_fifty_paths(in_session):
    paths = [f"/blog/post-{i}" for i in range(80)]

    counts = in_session(get_read_counts, paths)

    assert len(counts) == 50
    assert "/blog/post-49" in counts
    assert "/blog/post-50" not in counts


def test_live_counts_all_and_per_path(client):
    _view(client, "/blog/a", "s1")
    _view(client, "/blog/a", "s2")
    _view(client, "/", "s3", type_="heartbeat")

    assert client.get("/api/analytics/live").json() == {"count": 3}
    assert client.get("/api/analytics/live", params={"path": "/blog/a"}).json() == {"count": 2}
    assert client.get("/api/analytics/live", params={"path": "/nowhere"}).json() == {"count": 0}


def test_live_ignores_sessions_outside_window(in_session):
    now = datetime(2026, 5, 1, 12, 0, tzinfo=timezone.utc)
    event = CleanEvent(path="/", source="direct", session_id="old", type="heartbeat")
    in_session(record_event, event, now - timedelta(seconds=61))
    in_session(record_event, CleanEvent(path="/", source="direct", session_id="new", type="heartbeat"), now)

    assert in_session(count_live, now) == 1
    assert in_session(count_live, now, "/") == 1


def test_moving_to_another_page_moves_live_session(client):
    _view(client, "/blog/a", "s1")
    _view(client, "/blog/b", "s1")

    assert client.get("/api/analytics/live", params={"path": "/blog/a"}).json() == {"count": 0}
    assert client.get("/api/analytics/live", params={"path": "/blog/b"}).json() == {"count": 1}
