"""
Tests for the /reports routes:
- Submitting, listing, searching and paginating reports.
- Nearby search ordering, radius and cap.
- Owner/admin enforcement on edit and delete.
"""

import pytest
from fastapi.testclient import TestClient

from civic_backend.main import app
from civic_backend.reports import lifecycle, schemas, utils

client = TestClient(app)


def _payload(title="Broken streetlight", lng=-74.0, lat=40.0, category="streetlight", description=None):
    return {
        "title": title,
        "description": description or f"{title} needs attention",
        "category": category,
        "location": {"coordinates": [lng, lat], "address": "5th Avenue"},
    }


@pytest.fixture
def citizen(make_user, login_as):
    return login_as(make_user("citizen", name="carol"))


def _seed(store, owner, **kwargs):
    return lifecycle.submit_report(store, schemas.ReportCreate(**_payload(**kwargs)), owner)


# --- Submission ---

def test_submit_report(store, citizen):
    """POST /reports → 201 with submitted status and one history entry."""
    response = client.post("/reports", json=_payload(category="pothole"))
    assert response.status_code == 201
    data = response.json()
    assert data["status"] == "submitted"
    assert data["category"] == "pothole"
    assert data["submitted_by"] == citizen.user_id
    assert len(data["status_history"]) == 1
    assert store.count("reports") == 1


def test_submit_requires_login(store):
    response = client.post("/reports", json=_payload())
    assert response.status_code == 401
    assert response.json()["error"]


def test_submit_rejects_bad_payload(store, citizen):
    bad_category = client.post("/reports", json=_payload(category="volcano"))
    assert bad_category.status_code == 400
    out_of_range = client.post("/reports", json=_payload(lat=123.0))
    assert out_of_range.status_code == 400
    assert "error" in out_of_range.json()
    assert store.count("reports") == 0


# --- Reading ---

def test_list_reports_paginates(store, citizen):
    for i in range(5):
        _seed(store, citizen, title=f"Report {i}")

    response = client.get("/reports", params={"page": 2, "limit": 2})
    assert response.status_code == 200
    data = response.json()
    assert data["total"] == 5
    assert data["page"] == 2
    assert data["limit"] == 2
    assert data["total_pages"] == 3
    assert len(data["items"]) == 2


def test_list_reports_filters(store, citizen):
    _seed(store, citizen, title="Graffiti on wall", category="graffiti")
    _seed(store, citizen, title="Leaking hydrant", category="water_leak", description="Water everywhere")
    _seed(store, citizen, title="Another tag", category="graffiti", description="Fresh GRAFFITI paint")

    by_category = client.get("/reports", params={"category": "graffiti"}).json()
    assert by_category["total"] == 2

    by_search = client.get("/reports", params={"search": "graffiti"}).json()
    assert {r["title"] for r in by_search["items"]} == {"Graffiti on wall", "Another tag"}

    by_status = client.get("/reports", params={"status": "resolved"}).json()
    assert by_status["total"] == 0
    assert by_status["total_pages"] == 0


def test_list_rejects_bad_pagination(store):
    assert client.get("/reports", params={"page": 0}).status_code == 400
    assert client.get("/reports", params={"limit": 0}).status_code == 400


def test_get_report(store, citizen):
    report = _seed(store, citizen)
    response = client.get(f"/reports/{report['_id']}")
    assert response.status_code == 200
    assert response.json()["id"] == report["_id"]


def test_get_report_errors(store):
    assert client.get("/reports/xyz").status_code == 400
    missing = client.get(f"/reports/{'d' * 24}")
    assert missing.status_code == 404
    assert missing.json() == {"error": "Report not found"}


# --- Nearby ---

def test_nearby_orders_by_distance(store, citizen):
    _seed(store, citizen, title="far", lat=40.02)      # ~2.2 km
    _seed(store, citizen, title="mid", lat=40.005)     # ~560 m
    _seed(store, citizen, title="near", lat=40.001)    # ~110 m

    response = client.get("/reports/nearby", params={"lat": 40.0, "lng": -74.0, "distance": 1000})
    assert response.status_code == 200
    assert [r["title"] for r in response.json()] == ["near", "mid"]


def test_nearby_caps_results(store, citizen):
    for i in range(25):
        _seed(store, citizen, title=f"r{i}", lat=40.0 + i * 0.00001)
    results = utils.find_near(store, 40.0, -74.0, 1000)
    assert len(results) == 20
    assert results[0]["title"] == "r0"


def test_nearby_rejects_bad_coordinates(store):
    response = client.get("/reports/nearby", params={"lat": 91, "lng": 0})
    assert response.status_code == 400
    assert response.json() == {"error": "Invalid coordinates"}
    assert client.get("/reports/nearby", params={"lat": 0, "lng": -181}).status_code == 400


def test_haversine_one_degree_latitude():
    assert utils.haversine(0, 0, 1, 0) == pytest.approx(111195, rel=1e-3)


# --- Editing ---

def test_owner_updates_report(store, citizen):
    report = _seed(store, citizen)
    response = client.patch(f"/reports/{report['_id']}", json={"priority": "high", "status": "rejected",
                                                                "status_comment": "Fixed already"})
    assert response.status_code == 200
    data = response.json()
    assert data["priority"] == "high"
    assert data["status"] == "rejected"
    assert data["status_history"][-1]["comment"] == "Fixed already"


def test_update_rejects_blank_title(store, citizen):
    report = _seed(store, citizen)
    response = client.patch(f"/reports/{report['_id']}", json={"title": "   "})
    assert response.status_code == 400
    assert "error" in response.json()
    assert store.get("reports", report["_id"])["title"] == "Broken streetlight"


def test_stranger_cannot_update_or_delete(store, make_user, login_as):
    owner = make_user("citizen")
    report = _seed(store, owner)
    login_as(make_user("citizen"))

    assert client.patch(f"/reports/{report['_id']}", json={"title": "x"}).status_code == 403
    assert client.delete(f"/reports/{report['_id']}").status_code == 403
    assert store.get("reports", report["_id"]) is not None


def test_illegal_transition_returns_400(store, citizen):
    report = _seed(store, citizen)
    response = client.patch(f"/reports/{report['_id']}", json={"status": "in_progress"})
    assert response.status_code == 400
    assert "transition" in response.json()["error"]


def test_admin_deletes_report(store, make_user, login_as):
    report = _seed(store, make_user("citizen"))
    login_as(make_user("admin"))
    response = client.delete(f"/reports/{report['_id']}")
    assert response.status_code == 200
    assert "deleted" in response.json()["message"]
    assert store.get("reports", report["_id"]) is None
