"""
Tests for /admin routes: statistics, report triage, user listing and manual
notifications. All of them are admin-only.
"""

import pytest
from fastapi.testclient import TestClient

from civic_backend.main import app
from civic_backend.reports import lifecycle, schemas

client = TestClient(app)


@pytest.fixture
def admin(make_user, login_as):
    return login_as(make_user("admin", name="boss"))


def _report(store, owner, title="Overflowing bin", category="trash"):
    payload = schemas.ReportCreate(
        title=title,
        description="Needs pickup",
        category=category,
        location={"coordinates": [2.35, 48.85], "address": "Rue de Rivoli"},
    )
    return lifecycle.submit_report(store, payload, owner)


@pytest.mark.parametrize("path", ["/admin/stats", "/admin/reports", "/admin/users"])
def test_admin_routes_forbidden_for_citizens(store, make_user, login_as, path):
    login_as(make_user("citizen"))
    response = client.get(path)
    assert response.status_code == 403
    assert response.json() == {"error": "Admin access required"}


def test_stats(store, admin, make_user):
    citizen = make_user("citizen")
    first = _report(store, citizen)
    _report(store, citizen, title="Tagged bench", category="graffiti")
    for status in ("in_review", "assigned", "in_progress", "resolved"):
        first = lifecycle.update_status(store, first, status, None, admin)

    response = client.get("/admin/stats")
    assert response.status_code == 200
    data = response.json()
    assert data["total_reports"] == 2
    assert data["status_counts"] == {"resolved": 1, "submitted": 1}
    assert data["category_counts"] == {"trash": 1, "graffiti": 1}
    assert data["total_users"] == 2
    assert data["total_departments"] == 0
    assert len(data["recent_reports"]) == 2
    assert data["avg_resolution_time_hours"] >= 0


def test_admin_report_listing_search(store, admin, make_user):
    citizen = make_user("citizen")
    _report(store, citizen, title="Overflowing bin")
    _report(store, citizen, title="Dark streetlight", category="streetlight")

    data = client.get("/admin/reports", params={"search": "BIN"}).json()
    assert data["total"] == 1
    assert data["items"][0]["title"] == "Overflowing bin"


def test_admin_triage_assigns_and_notifies(store, admin, make_user):
    citizen = make_user("citizen")
    report = _report(store, citizen)
    dept = store.insert("departments", {"name": "Sanitation", "active": True, "created_at": "2025-01-01T00:00:00+00:00"})

    response = client.patch(f"/admin/reports/{report['_id']}", json={
        "status": "assigned",
        "admin_comment": "Crew scheduled",
        "department_id": dept["_id"],
    })
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "assigned"
    assert data["assigned_to"]["department"] == dept["_id"]
    assert data["status_history"][-1]["comment"] == "Crew scheduled"

    types = {n["type"] for n in store.find("notifications", {"recipient": citizen.user_id})}
    assert types == {"report_status_change", "report_assigned"}


def test_list_users_hides_passwords(store, admin, make_user):
    make_user("citizen", name="dana")
    make_user("citizen", name="erin")

    response = client.get("/admin/users", params={"role": "citizen"})
    assert response.status_code == 200
    data = response.json()
    assert data["pagination"]["total"] == 2
    assert all("hashed_password" not in u for u in data["users"])

    search = client.get("/admin/users", params={"search": "dan"}).json()
    assert [u["name"] for u in search["users"]] == ["dana"]


def test_send_notification_to_role(store, admin, make_user):
    citizens = [make_user("citizen"), make_user("citizen")]
    response = client.post("/admin/send-notification", json={
        "recipient_type": "role",
        "role": "citizen",
        "title": "Road closure",
        "message": "Main St closed Saturday",
    })
    assert response.status_code == 201
    assert response.json()["count"] == 2
    for c in citizens:
        assert store.count("notifications", {"recipient": c.user_id, "type": "admin_alert"}) == 1


def test_send_notification_to_user_by_email(store, admin, make_user):
    target = make_user("citizen", email="frank@example.com")
    response = client.post("/admin/send-notification", json={
        "recipient_type": "user",
        "recipient_email": "frank@example.com",
        "title": "Thanks",
        "message": "Your report helped",
    })
    assert response.status_code == 201
    assert store.count("notifications", {"recipient": target.user_id}) == 1


def test_send_notification_errors(store, make_user, login_as):
    login_as(make_user("admin"))
    no_target = client.post("/admin/send-notification", json={
        "recipient_type": "user", "title": "T", "message": "M",
    })
    assert no_target.status_code == 400

    nobody = client.post("/admin/send-notification", json={
        "recipient_type": "role", "role": "citizen", "title": "T", "message": "M",
    })
    assert nobody.status_code == 404
    assert store.count("notifications") == 0
