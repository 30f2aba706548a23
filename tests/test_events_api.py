"""API tests for event CRUD, the calendar view, conflicts and the dashboard."""

from __future__ import annotations

from datetime import date, timedelta

import pytest
from fastapi.testclient import TestClient

from campusops.main import app, conflict_repo, event_repo, timeline_repo


@pytest.fixture(autouse=True)
def _clear_repos():
    """Reset in-memory repos before each test."""
    event_repo.clear()
    timeline_repo.clear()
    conflict_repo.clear()
    yield
    event_repo.clear()
    timeline_repo.clear()
    conflict_repo.clear()


@pytest.fixture()
def client():
    return TestClient(app)


def _payload(**overrides) -> dict:
    body = {
        "title": "Guest Lecture on Compilers",
        "venue": "Seminar Hall A",
        "startDate": "2026-03-10",
        "endDate": "2026-03-10",
        "startTime": "10:00",
        "endTime": "11:00",
        "category": "Guest Lecture",
        "organizerName": "CSE Department",
    }
    body.update(overrides)
    return body


def _create(client: TestClient, **overrides) -> dict:
    resp = client.post("/events", json=_payload(**overrides))
    assert resp.status_code == 201, resp.text
    return resp.json()


# ---------------------------------------------------------------------------
# CRUD
# ---------------------------------------------------------------------------


def test_create_and_get_event(client: TestClient):
    created = _create(client)

    assert created["title"] == "Guest Lecture on Compilers"
    assert created["status"] == "pending"
    assert created["registrations"] is None

    resp = client.get(f"/events/{created['id']}")
    assert resp.status_code == 200
    assert resp.json() == created


def test_create_accepts_snake_case_keys(client: TestClient):
    resp = client.post(
        "/events",
        json={"title": "Hackathon", "venue": "Lab 3", "start_date": "2026-04-01"},
    )

    assert resp.status_code == 201
    assert resp.json()["startDate"] == "2026-04-01"


def test_create_rejects_end_before_start(client: TestClient):
    resp = client.post("/events", json=_payload(endDate="2026-03-09"))

    assert resp.status_code == 422


def test_create_requires_title_and_venue(client: TestClient):
    assert client.post("/events", json=_payload(title="")).status_code == 422
    body = _payload()
    del body["venue"]
    assert client.post("/events", json=body).status_code == 422


def test_get_missing_event_404(client: TestClient):
    resp = client.get("/events/not-found")

    assert resp.status_code == 404
    assert resp.json()["message"] == "events with id not-found not found"


def test_update_event_applies_only_sent_fields(client: TestClient):
    created = _create(client, description="Intro talk")

    resp = client.patch(f"/events/{created['id']}", json={"title": "Advanced Compilers"})

    assert resp.status_code == 200
    body = resp.json()
    assert body["title"] == "Advanced Compilers"
    assert body["description"] == "Intro talk"
    assert body["updatedAt"] is not None


def test_empty_update_changes_nothing(client: TestClient):
    created = _create(client)

    resp = client.patch(f"/events/{created['id']}", json={})

    assert resp.status_code == 200
    assert resp.json() == created
    timeline = client.get(f"/events/{created['id']}/timeline").json()
    assert [e["type"] for e in timeline] == ["created"]


def test_update_rejects_null_title_and_inverted_dates(client: TestClient):
    created = _create(client)

    null_title = client.patch(f"/events/{created['id']}", json={"title": None})
    assert null_title.status_code == 422

    inverted = client.patch(f"/events/{created['id']}", json={"startDate": "2026-03-11"})
    assert inverted.status_code == 422


def test_update_missing_event_404(client: TestClient):
    resp = client.patch("/events/nope", json={"title": "x"})

    assert resp.status_code == 404


def test_change_status(client: TestClient):
    created = _create(client)

    resp = client.patch(f"/events/{created['id']}/status", json={"status": "approved"})

    assert resp.status_code == 200
    assert resp.json()["status"] == "approved"

    timeline = client.get(f"/events/{created['id']}/timeline").json()
    assert [e["type"] for e in timeline] == ["created", "status_changed"]
    assert timeline[-1]["payload"] == {"from": "pending", "to": "approved"}


def test_change_status_rejects_unknown_status(client: TestClient):
    created = _create(client)

    resp = client.patch(f"/events/{created['id']}/status", json={"status": "archived"})

    assert resp.status_code == 422


def test_delete_event(client: TestClient):
    created = _create(client)

    resp = client.delete(f"/events/{created['id']}")
    assert resp.status_code == 200
    assert resp.json() == {"status": "deleted"}

    assert client.get(f"/events/{created['id']}").status_code == 404
    assert client.delete(f"/events/{created['id']}").status_code == 404

    # The activity log survives the event.
    timeline = client.get(f"/events/{created['id']}/timeline").json()
    assert timeline[-1]["type"] == "deleted"


def test_bulk_delete_reports_missing_ids(client: TestClient):
    first = _create(client)
    second = _create(client, venue="Lab 1")

    resp = client.post(
        "/events/bulk-delete", json={"ids": [first["id"], "ghost", second["id"]]}
    )

    assert resp.status_code == 200
    assert resp.json() == {"deleted": [first["id"], second["id"]], "missing": ["ghost"]}
    assert client.get("/events").json()["total"] == 0


def test_bulk_delete_requires_ids(client: TestClient):
    assert client.post("/events/bulk-delete", json={"ids": []}).status_code == 422


def test_timeline_for_unknown_event_404(client: TestClient):
    assert client.get("/events/ghost/timeline").status_code == 404


# ---------------------------------------------------------------------------
# Listing
# ---------------------------------------------------------------------------


def test_list_filters_sorts_and_pages(client: TestClient):
    for i in range(5):
        _create(client, title=f"Workshop {i}", category="Workshop", venue=f"Lab {i}")
    _create(client, title="Cricket Finals", category="Sports", venue="Ground")

    resp = client.get(
        "/events",
        params={
            "category": "Workshop",
            "sort_by": "title",
            "sort_order": "asc",
            "page": 2,
            "page_size": 2,
        },
    )

    assert resp.status_code == 200
    body = resp.json()
    assert body["total"] == 5
    assert body["totalPages"] == 3
    assert body["page"] == 2
    assert [e["title"] for e in body["items"]] == ["Workshop 2", "Workshop 3"]


def test_list_search(client: TestClient):
    _create(client, title="Cultural Fest", venue="Open Air Theatre")
    _create(client, title="Code Sprint", venue="Lab 2")

    resp = client.get("/events", params={"search": "THEATRE"})

    assert [e["title"] for e in resp.json()["items"]] == ["Cultural Fest"]


def test_list_rejects_bad_page(client: TestClient):
    assert client.get("/events", params={"page": 0}).status_code == 422


# ---------------------------------------------------------------------------
# Conflicts and calendar
# ---------------------------------------------------------------------------


def test_overlapping_events_show_in_conflicts(client: TestClient):
    first = _create(client, title="Compilers")
    second = _create(client, title="Databases", startTime="10:30", endTime="12:00")
    _create(client, title="Elsewhere", venue="Seminar Hall B")

    resp = client.get("/conflicts")

    assert resp.status_code == 200
    [conflict] = resp.json()
    assert conflict["itemA"]["id"] == first["id"]
    assert conflict["itemB"]["id"] == second["id"]
    assert conflict["itemB"]["title"] == "Databases"
    assert conflict["venue"] == "Seminar Hall A"
    assert conflict["date"] == "2026-03-10"

    timeline = client.get(f"/events/{first['id']}/timeline").json()
    assert "conflict_detected" in [e["type"] for e in timeline]


def test_deleting_clears_conflict(client: TestClient):
    _create(client)
    second = _create(client, startTime="10:30")

    client.delete(f"/events/{second['id']}")

    assert client.get("/conflicts").json() == []


def test_check_conflicts_is_pure(client: TestClient):
    items = [
        {"id": "a", "venue": "Hall1", "startDate": "2024-03-01", "startTime": "10:00",
         "endTime": "11:00"},
        {"id": "b", "venue": "Hall1", "startDate": "2024-03-01", "startTime": "10:30",
         "endTime": "12:00"},
        {"id": "c", "venue": "Hall1", "startDate": "2024-03-01", "startTime": "12:00",
         "endTime": "13:00"},
        {"id": "e", "venue": "Hall2", "startDate": "2024-03-01", "startTime": "10:00",
         "endTime": "11:00"},
    ]

    resp = client.post("/conflicts/check", json=items)

    assert resp.status_code == 200
    body = resp.json()
    assert [(c["itemA"]["id"], c["itemB"]["id"]) for c in body] == [("a", "b")]
    assert body[0]["venue"] == "Hall1"
    assert body[0]["date"] == "2024-03-01"
    assert client.get("/conflicts").json() == []


def test_calendar_month_view(client: TestClient):
    march = _create(client, title="Compilers")
    _create(client, title="Clash", startTime="10:30")
    _create(client, title="April talk", startDate="2026-04-02", endDate="2026-04-02")

    resp = client.get("/calendar", params={"year": 2026, "month": 3})

    assert resp.status_code == 200
    body = resp.json()
    assert (body["year"], body["month"]) == (2026, 3)
    assert sorted(e["title"] for e in body["events"]) == ["Clash", "Compilers"]
    assert len(body["clashes"]) == 1
    assert march["id"] in (body["clashes"][0]["itemA"]["id"], body["clashes"][0]["itemB"]["id"])


def test_calendar_clashes_follow_filters(client: TestClient):
    _create(client, title="Compilers", status="approved")
    _create(client, title="Clash", startTime="10:30", status="rejected")

    resp = client.get("/calendar", params={"year": 2026, "month": 3, "status": "approved"})

    body = resp.json()
    assert [e["title"] for e in body["events"]] == ["Compilers"]
    assert body["clashes"] == []


def test_calendar_rejects_bad_month(client: TestClient):
    assert client.get("/calendar", params={"year": 2026, "month": 13}).status_code == 422


# ---------------------------------------------------------------------------
# Registrations
# ---------------------------------------------------------------------------


def _register(client: TestClient, event_id: str, name: str) -> dict:
    resp = client.post(f"/events/{event_id}/registrations", json={"participantName": name})
    assert resp.status_code == 201, resp.text
    return resp.json()


def test_full_event_waitlists_then_promotes_on_cancel(client: TestClient):
    event = _create(client, maxParticipants=1)

    seated = _register(client, event["id"], "Ravi")
    waiting = _register(client, event["id"], "Om")

    assert seated["status"] == "registered"
    assert waiting["status"] == "waitlist"
    stored = client.get(f"/events/{event['id']}").json()
    assert [r["id"] for r in stored["registrations"]] == [seated["id"]]
    assert [r["id"] for r in stored["waitlist"]] == [waiting["id"]]

    resp = client.delete(f"/events/{event['id']}/registrations/{seated['id']}")

    assert resp.status_code == 200
    body = resp.json()
    assert body["cancelled"]["id"] == seated["id"]
    assert body["promoted"]["id"] == waiting["id"]
    assert body["promoted"]["status"] == "registered"
    assert body["promoted"]["promotedAt"] is not None

    stored = client.get(f"/events/{event['id']}").json()
    assert [r["id"] for r in stored["registrations"]] == [waiting["id"]]
    assert stored["waitlist"] == []

    timeline = client.get(f"/events/{event['id']}/timeline").json()
    assert [e["type"] for e in timeline] == [
        "created",
        "registered",
        "waitlisted",
        "registration_cancelled",
        "promoted",
    ]


def test_registration_requires_a_name(client: TestClient):
    event = _create(client)

    resp = client.post(f"/events/{event['id']}/registrations", json={"participantName": ""})

    assert resp.status_code == 422


def test_registration_for_missing_event_404(client: TestClient):
    resp = client.post("/events/ghost/registrations", json={"participantName": "Ravi"})

    assert resp.status_code == 404


def test_cancel_unknown_registration_404(client: TestClient):
    event = _create(client)

    resp = client.delete(f"/events/{event['id']}/registrations/ghost")

    assert resp.status_code == 404
    assert resp.json()["message"] == "registrations with id ghost not found"


def test_capacity_must_be_positive(client: TestClient):
    assert client.post("/events", json=_payload(maxParticipants=0)).status_code == 422


# ---------------------------------------------------------------------------
# Dashboard
# ---------------------------------------------------------------------------


def test_dashboard(client: TestClient):
    today = date.today()
    _create(
        client,
        title="Next week",
        startDate=(today + timedelta(days=7)).isoformat(),
        endDate=(today + timedelta(days=7)).isoformat(),
        registrations=[{"participantName": "Ira"}, {"participantName": "Dev"}],
    )
    _create(
        client,
        title="Running now",
        startDate=(today - timedelta(days=1)).isoformat(),
        endDate=(today + timedelta(days=1)).isoformat(),
        status="approved",
    )

    resp = client.get("/dashboard")

    assert resp.status_code == 200
    body = resp.json()
    assert body["stats"] == {
        "totalEvents": 2,
        "upcomingEvents": 1,
        "ongoingEvents": 1,
        "totalRegistrations": 2,
        "pendingApprovals": 1,
    }
    assert [e["title"] for e in body["upcoming"]] == ["Next week"]
    assert sorted(e["title"] for e in body["recent"]) == ["Next week", "Running now"]
