from __future__ import annotations

import threading
from types import SimpleNamespace

import pytest
from flask import Flask

from src.timetracking.timetracking.attendance.controller import register
from src.timetracking.timetracking.reports.service import AttendanceReportService
from tests.fakes import (
    COMPANY_ID,
    JOB_ID,
    OTHER_WORKER_ID,
    SITE_LAT,
    SITE_LON,
    WORKER_ID,
    RacingAttendanceStore,
    point_north_of,
)

CHECK_IN_BODY = {"job_id": JOB_ID, "latitude": SITE_LAT, "longitude": SITE_LON, "accuracy": 10}


def _make_app(service, store) -> Flask:
    app = Flask(__name__)
    app.secret_key = "test-secret"
    register(app, SimpleNamespace(time_tracking_service=service, report_service=AttendanceReportService(store)))
    return app


def _login(client, user_id=WORKER_ID, company_id=COMPANY_ID):
    with client.session_transaction() as sess:
        sess["user_id"] = user_id
        sess["company_id"] = company_id
    return client


@pytest.fixture
def app(service, store):
    return _make_app(service, store)


@pytest.fixture
def client(app):
    return _login(app.test_client())


def test_requires_login(app):
    resp = app.test_client().post("/api/check-ins/check-in", json=CHECK_IN_BODY)

    assert resp.status_code == 401
    assert resp.get_json() == {"success": False, "error": "Authentication required"}


def test_check_in_returns_201_with_session(client, clock):
    resp = client.post("/api/check-ins/check-in", json={**CHECK_IN_BODY, "notes": "On site"})

    assert resp.status_code == 201
    body = resp.get_json()
    assert body["success"] is True
    assert body["message"] == "Checked in successfully"
    data = body["data"]
    assert data["user_id"] == WORKER_ID
    assert data["job_id"] == JOB_ID
    assert data["check_in_time"] == clock.now.isoformat()
    assert data["check_out_time"] is None
    assert data["hourly_rate"] == 25.0
    assert data["duration_hours"] is None
    assert data["billable_amount"] is None
    assert data["notes"] == "On site"
    assert data["job_name"] == "Harbour St fit-out"
    assert data["job_number"] == "J-1001"


def test_check_in_accepts_camel_case_job_id(client):
    body = {k: v for k, v in CHECK_IN_BODY.items() if k != "job_id"}

    resp = client.post("/api/check-ins/check-in", json={**body, "jobId": JOB_ID})

    assert resp.status_code == 201


def test_second_check_in_returns_409(client):
    client.post("/api/check-ins/check-in", json=CHECK_IN_BODY)

    resp = client.post("/api/check-ins/check-in", json=CHECK_IN_BODY)

    assert resp.status_code == 409
    assert resp.get_json() == {"success": False, "error": "You are already checked in. Please check out first."}


def test_unknown_job_returns_404(client):
    resp = client.post(
        "/api/check-ins/check-in",
        json={**CHECK_IN_BODY, "job_id": "b0000000-0000-4000-8000-00000000ffff"},
    )

    assert resp.status_code == 404
    assert resp.get_json()["error"] == "Job not found or does not belong to your company"


def test_geofence_rejection_returns_400(client):
    lat, lon = point_north_of(SITE_LAT, SITE_LON, 300)

    resp = client.post("/api/check-ins/check-in", json={**CHECK_IN_BODY, "latitude": lat, "longitude": lon})

    assert resp.status_code == 400
    assert "Current distance: 300m." in resp.get_json()["error"]


@pytest.mark.parametrize(
    ("override", "error"),
    [
        ({"job_id": None}, "job_id is required"),
        ({"job_id": "not-a-uuid"}, "Invalid job_id"),
        ({"latitude": "north"}, "latitude must be a number"),
        ({"latitude": True}, "latitude must be a number"),
        ({"latitude": 91}, "latitude must be at most 90"),
        ({"longitude": -181}, "longitude must be at least -180"),
        ({"accuracy": -1}, "accuracy must be at least 0"),
        ({"latitude": float("nan")}, "latitude must be a number"),
        ({"longitude": float("-inf")}, "longitude must be a number"),
        ({"accuracy": float("inf")}, "accuracy must be a number"),
        ({"latitude": 10**400}, "latitude must be a number"),
        ({"notes": "x" * 1001}, "notes must be less than 1000 characters"),
        ({"notes": 12}, "notes must be a string"),
    ],
)
def test_check_in_validation(client, store, override, error):
    resp = client.post("/api/check-ins/check-in", json={**CHECK_IN_BODY, **override})

    assert resp.status_code == 400
    assert resp.get_json() == {"success": False, "error": error}
    assert store.rows == []


def test_non_object_body_is_rejected(client):
    resp = client.post("/api/check-ins/check-in", json=[JOB_ID])

    assert resp.status_code == 400
    assert resp.get_json()["error"] == "Request body must be a JSON object"


def test_check_out_returns_billed_session(client, clock):
    client.post("/api/check-ins/check-in", json=CHECK_IN_BODY)
    clock.advance(seconds=7320)

    resp = client.post("/api/check-ins/check-out", json={"notes": "Done"})

    assert resp.status_code == 200
    body = resp.get_json()
    assert body["message"] == "Checked out successfully"
    assert body["data"]["duration_hours"] == 2.03
    assert body["data"]["billable_amount"] == 50.75
    assert body["data"]["notes"] == "Done"


def test_check_out_without_body_is_allowed(client, clock):
    client.post("/api/check-ins/check-in", json=CHECK_IN_BODY)
    clock.advance(hours=1)

    assert client.post("/api/check-ins/check-out").status_code == 200


def test_check_out_without_session_returns_400(client):
    resp = client.post("/api/check-ins/check-out", json={})

    assert resp.status_code == 400
    assert resp.get_json()["error"] == "No active check-in found. Please check in first."


def test_unexpected_error_returns_500(client, clock):
    client.post("/api/check-ins/check-in", json=CHECK_IN_BODY)
    clock.advance(minutes=-1)

    resp = client.post("/api/check-ins/check-out", json={})

    assert resp.status_code == 500
    assert resp.get_json() == {"success": False, "error": "Internal server error"}


def test_unknown_route_keeps_http_status(client):
    assert client.get("/api/check-ins/nope/more").status_code == 404


def test_active_session(client):
    assert client.get("/api/check-ins/active").get_json()["data"] is None

    client.post("/api/check-ins/check-in", json=CHECK_IN_BODY)
    data = client.get("/api/check-ins/active").get_json()["data"]

    assert data["user_id"] == WORKER_ID
    assert data["check_out_time"] is None


def test_history_is_paginated(client, clock):
    for _ in range(3):
        client.post("/api/check-ins/check-in", json=CHECK_IN_BODY)
        clock.advance(hours=1)
        client.post("/api/check-ins/check-out")

    data = client.get("/api/check-ins/history?limit=2&page=2").get_json()["data"]

    assert data["total"] == 3
    assert data["page"] == 2
    assert data["limit"] == 2
    assert len(data["logs"]) == 1


def test_history_limit_is_capped(client):
    data = client.get("/api/check-ins/history?limit=5000").get_json()["data"]

    assert data["limit"] == 200


@pytest.mark.parametrize("query", ["page=0", "limit=-3", "page=abc", "page=%C2%B2", "limit=1.5"])
def test_history_rejects_bad_paging(client, query):
    assert client.get(f"/api/check-ins/history?{query}").status_code == 400


def test_list_filters_by_worker_and_active(app, clock):
    worker = _login(app.test_client())
    other = _login(app.test_client(), user_id=OTHER_WORKER_ID)
    worker.post("/api/check-ins/check-in", json=CHECK_IN_BODY)
    clock.advance(hours=1)
    worker.post("/api/check-ins/check-out")
    other.post("/api/check-ins/check-in", json=CHECK_IN_BODY)

    everything = worker.get("/api/check-ins").get_json()["data"]
    active = worker.get("/api/check-ins?active_only=true").get_json()["data"]
    mine = worker.get(f"/api/check-ins?user_id={WORKER_ID}").get_json()["data"]

    assert everything["total"] == 2
    assert [s["user_id"] for s in active["logs"]] == [OTHER_WORKER_ID]
    assert [s["user_id"] for s in mine["logs"]] == [WORKER_ID]


def test_list_is_scoped_to_company(app, client):
    client.post("/api/check-ins/check-in", json=CHECK_IN_BODY)
    outsider = _login(app.test_client(), company_id="c0000000-0000-4000-8000-0000000000ff")

    assert outsider.get("/api/check-ins").get_json()["data"]["total"] == 0


def test_list_rejects_inverted_range(client):
    resp = client.get("/api/check-ins?start_date=2026-10-18&end_date=2026-10-17")

    assert resp.status_code == 400


def test_billables_require_dates(client):
    resp = client.get("/api/check-ins/billables?start_date=2026-10-01")

    assert resp.status_code == 400
    assert resp.get_json()["error"] == "end_date is required"


def test_billables_sum_closed_sessions(client, clock):
    client.post("/api/check-ins/check-in", json=CHECK_IN_BODY)
    clock.advance(hours=2)
    client.post("/api/check-ins/check-out")
    client.post("/api/check-ins/check-in", json=CHECK_IN_BODY)

    resp = client.get("/api/check-ins/billables?start_date=2026-10-17&end_date=2026-10-17")

    assert resp.status_code == 200
    assert resp.get_json()["data"] == {"total_hours": 2.0, "total_amount": 50.0}


def test_billables_reject_invalid_date(client):
    resp = client.get("/api/check-ins/billables?start_date=yesterday&end_date=2026-10-17")

    assert resp.status_code == 400
    assert resp.get_json()["error"] == "Invalid start_date"


def test_concurrent_check_ins_return_one_201_and_one_409(make_service):
    store = RacingAttendanceStore(parties=2)
    app = _make_app(make_service(store), store)
    clients = [_login(app.test_client()) for _ in range(2)]
    statuses = []
    lock = threading.Lock()

    def post(c):
        resp = c.post("/api/check-ins/check-in", json=CHECK_IN_BODY)
        with lock:
            statuses.append(resp.status_code)

    threads = [threading.Thread(target=post, args=(c,)) for c in clients]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=10)

    assert sorted(statuses) == [201, 409]
    assert len([r for r in store.rows if r.is_open]) == 1


def test_history_logs_carry_job_details(client, clock):
    client.post("/api/check-ins/check-in", json=CHECK_IN_BODY)
    clock.advance(hours=1)
    client.post("/api/check-ins/check-out")

    log = client.get("/api/check-ins/history").get_json()["data"]["logs"][0]

    assert log["job_name"] == "Harbour St fit-out"
    assert log["job_number"] == "J-1001"


def test_list_logs_carry_worker_and_site(app, clock):
    worker = _login(app.test_client())
    other = _login(app.test_client(), user_id=OTHER_WORKER_ID)
    worker.post("/api/check-ins/check-in", json=CHECK_IN_BODY)
    clock.advance(minutes=5)
    other.post("/api/check-ins/check-in", json=CHECK_IN_BODY)

    logs = worker.get("/api/check-ins").get_json()["data"]["logs"]

    assert [(log["user_id"], log["worker_name"]) for log in logs] == [
        (OTHER_WORKER_ID, "alex@example.com"),
        (WORKER_ID, "Sam Carter"),
    ]
    assert {log["site_address"] for log in logs} == {"1 Harbour St, Sydney NSW"}


def test_active_session_has_no_list_details(client):
    client.post("/api/check-ins/check-in", json=CHECK_IN_BODY)

    data = client.get("/api/check-ins/active").get_json()["data"]

    assert data["worker_name"] is None
    assert data["site_address"] is None
