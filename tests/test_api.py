"""Tests for the REST API with a fake Intratime backend."""

from datetime import datetime
from io import BytesIO
from urllib.parse import parse_qs

import httpx
import pytest
from fastapi.testclient import TestClient
from openpyxl import load_workbook

import api.dependencies
import api.logging
import services.week
from api.dependencies import get_intratime_client, get_now, get_session_store
from api.main import app
from core.database import get_connection
from core.intratime_client import IntratimeClient

API_KEY = "test-api-key"
HEADERS = {"X-API-Key": API_KEY}
NOW = datetime(2026, 3, 4, 16, 0)


class FakeIntratime:
    """In-memory stand-in for the vendor API."""

    def __init__(self):
        self.records: list[dict] = []
        self.posted: list[dict] = []
        self.fail_fetch = False
        self.fail_post_at: int | None = None

    def handle(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path
        if path == "/api/user/login":
            form = parse_qs(request.content.decode())
            if form.get("pin") != ["1234"]:
                return httpx.Response(401, json={"message": "Invalid credentials"})
            return httpx.Response(
                200,
                json={
                    "USER_TOKEN": "vendor-token",
                    "USER_ID": 42,
                    "USER_USERNAME": "jdoe",
                    "USER_NAME": "Jane Doe",
                    "USER_EMAIL": "jdoe@example.com",
                },
            )

        if request.headers.get("token") != "vendor-token":
            return httpx.Response(403, json={"message": "Invalid token"})

        if path == "/api/user/clockings":
            if self.fail_fetch:
                return httpx.Response(503, json={"message": "Service unavailable"})
            return httpx.Response(200, json=self.records)

        if path == "/api/user/clocking":
            form = parse_qs(request.content.decode(), keep_blank_values=True)
            if self.fail_post_at is not None and len(self.posted) + 1 == self.fail_post_at:
                return httpx.Response(500, json={"message": "Clocking rejected"})
            self.posted.append(form)
            self.records.append(
                {
                    "INOUT_ID": len(self.records) + 1,
                    "INOUT_TYPE": int(form["user_action"][0]),
                    "INOUT_DATE": form["user_timestamp"][0],
                }
            )
            return httpx.Response(201, json={"INOUT_ID": len(self.records)})

        return httpx.Response(404)


@pytest.fixture
def vendor():
    return FakeIntratime()


@pytest.fixture
def client(vendor, store, db_path, monkeypatch):
    monkeypatch.setattr(api.dependencies, "APP_API_KEY", API_KEY)
    monkeypatch.setattr(api.logging, "DB_PATH", db_path)
    monkeypatch.setattr(services.week, "SUBMIT_DELAY_SECONDS", 0)
    monkeypatch.setattr(services.week, "SUBMIT_JITTER_MINUTES", 0)

    async def fake_client():
        async with IntratimeClient(
            base_url="https://intratime.test", transport=httpx.MockTransport(vendor.handle)
        ) as intratime:
            yield intratime

    app.dependency_overrides[get_session_store] = lambda: store
    app.dependency_overrides[get_intratime_client] = fake_client
    app.dependency_overrides[get_now] = lambda: NOW
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def logged_in(client, store):
    response = client.post(
        "/v1/auth/login", data={"user": "jdoe@example.com", "pin": "1234"}, headers=HEADERS
    )
    assert response.status_code == 200
    return client


def week_edit(**fields) -> dict:
    return {"date": "2026-03-02", "days": [{"date": "2026-03-02", **fields}]}


class TestHealth:
    def test_healthy(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["holidays_available"] is True


class TestApiKey:
    def test_invalid_key(self, client):
        response = client.get("/v1/user", headers={"X-API-Key": "wrong"})
        assert response.status_code == 401
        assert response.json()["detail"]["code"] == "UNAUTHORIZED"

    def test_missing_key(self, client):
        assert client.get("/v1/user").status_code == 422


class TestAuth:
    def test_login_saves_session(self, client, store):
        response = client.post(
            "/v1/auth/login", data={"user": "jdoe@example.com", "pin": "1234"}, headers=HEADERS
        )
        assert response.status_code == 200
        data = response.json()
        assert data["token"] == "vendor-token"
        assert data["user"]["full_name"] == "Jane Doe"
        assert data["user"]["weekly_quota"] == 40
        assert store.get_token() == "vendor-token"

    def test_login_missing_pin(self, client):
        response = client.post("/v1/auth/login", data={"user": "jdoe"}, headers=HEADERS)
        assert response.status_code == 400
        assert response.json()["detail"]["code"] == "INVALID_REQUEST"

    def test_login_rejected(self, client, store):
        response = client.post(
            "/v1/auth/login", data={"user": "jdoe", "pin": "0000"}, headers=HEADERS
        )
        assert response.status_code == 401
        assert response.json()["detail"]["error"] == "Invalid credentials"
        assert store.load() is None

    def test_logout(self, logged_in, store):
        response = logged_in.post("/v1/auth/logout", headers=HEADERS)
        assert response.status_code == 204
        assert store.load() is None

    def test_user_requires_session(self, client):
        response = client.get("/v1/user", headers=HEADERS)
        assert response.status_code == 401
        assert response.json()["detail"]["code"] == "NO_SESSION"

    def test_get_user(self, logged_in):
        response = logged_in.get("/v1/user", headers=HEADERS)
        assert response.status_code == 200
        assert response.json()["username"] == "jdoe"

    def test_update_quota(self, logged_in, store):
        response = logged_in.put("/v1/user/quota", json={"weekly_quota": 37.5}, headers=HEADERS)
        assert response.status_code == 200
        assert response.json()["weekly_quota"] == 37.5
        assert store.load().weekly_quota == 37.5

    def test_invalid_quota(self, logged_in):
        response = logged_in.put("/v1/user/quota", json={"weekly_quota": 0}, headers=HEADERS)
        assert response.status_code == 422


class TestWeek:
    def test_default_week(self, logged_in):
        response = logged_in.get("/v1/week", params={"date": "2026-03-04"}, headers=HEADERS)
        assert response.status_code == 200
        data = response.json()
        assert data["start"] == "2026-03-02"
        assert len(data["days"]) == 5
        assert data["total_hours"] == 40
        assert data["total_display"] == "40h00m"
        assert data["difference"] == 0
        assert data["can_submit"] is True
        assert data["completed"] is False

    def test_week_defaults_to_now(self, logged_in):
        response = logged_in.get("/v1/week", headers=HEADERS)
        assert response.json()["start"] == "2026-03-02"

    def test_week_with_history(self, logged_in, vendor):
        vendor.records = [
            {"INOUT_ID": 1, "INOUT_TYPE": 0, "INOUT_DATE": "2026-03-04 09:00:00"},
        ]
        data = logged_in.get("/v1/week", params={"date": "2026-03-04"}, headers=HEADERS).json()
        wednesday = data["days"][2]
        assert wednesday["state"] == "in_progress"
        assert wednesday["hours"] == 7
        assert wednesday["history"]["events"][0]["kind"] == "entry"

    def test_week_degrades_when_history_fails(self, logged_in, vendor):
        vendor.fail_fetch = True
        response = logged_in.get("/v1/week", params={"date": "2026-03-04"}, headers=HEADERS)
        assert response.status_code == 200
        assert response.json()["total_hours"] == 40

    def test_week_requires_session(self, client):
        response = client.get("/v1/week", headers=HEADERS)
        assert response.status_code == 401

    def test_validate(self, client):
        response = client.post(
            "/v1/week/validate", json=week_edit(pause_in_time=""), headers=HEADERS
        )
        assert response.status_code == 200
        data = response.json()
        assert data["ok"] is False
        assert data["messages"] == ["Monday: missing lunch return time"]
        assert data["fields"] == {"2026-03-02": ["pause_in_time"]}

    @pytest.mark.parametrize("value", ["25:00", "9h", "9:5"])
    def test_validate_rejects_malformed_time(self, client, value):
        response = client.post(
            "/v1/week/validate", json=week_edit(entry_time=value), headers=HEADERS
        )
        assert response.status_code == 422
        assert response.json()["detail"][0]["loc"][-1] == "entry_time"

    def test_summary_of_edited_week(self, logged_in):
        response = logged_in.post(
            "/v1/week/summary", json=week_edit(is_rest_day=True), headers=HEADERS
        )
        data = response.json()
        assert data["days"][0]["state"] == "rest"
        assert data["total_hours"] == 39.5


class TestSubmit:
    def test_submit_week(self, logged_in, vendor, db_path):
        response = logged_in.post("/v1/week/submit", json={"date": "2026-03-02"}, headers=HEADERS)
        assert response.status_code == 200
        data = response.json()

        assert len(data["submitted"]) == 18
        assert data["submitted"][0] == {
            "date": "2026-03-02",
            "kind": "entry",
            "planned_time": "09:00",
            "timestamp": "2026-03-02 09:00:00",
        }
        assert data["week"]["completed"] is True
        assert data["week"]["total_hours"] == 40
        assert [f["user_action"][0] for f in vendor.posted[:4]] == ["0", "2", "3", "1"]

        conn = get_connection(db_path)
        count = conn.execute("SELECT COUNT(*) FROM submissions").fetchone()[0]
        conn.close()
        assert count == 18

    def test_resubmit_sends_nothing(self, logged_in, vendor):
        logged_in.post("/v1/week/submit", json={"date": "2026-03-02"}, headers=HEADERS)
        response = logged_in.post("/v1/week/submit", json={"date": "2026-03-02"}, headers=HEADERS)
        assert response.json()["submitted"] == []
        assert len(vendor.posted) == 18

    def test_validation_errors_block_submission(self, logged_in, vendor):
        response = logged_in.post(
            "/v1/week/submit", json=week_edit(entry_time="19:00"), headers=HEADERS
        )
        assert response.status_code == 422
        detail = response.json()["detail"]
        assert detail["code"] == "VALIDATION_ERROR"
        assert detail["details"]
        assert vendor.posted == []

    def test_malformed_time_sends_nothing(self, logged_in, vendor):
        payload = {
            "date": "2026-03-02",
            "days": [{"date": "2026-03-05", "exit_time": "25:00"}],
        }
        response = logged_in.post("/v1/week/submit", json=payload, headers=HEADERS)
        assert response.status_code == 422
        assert vendor.posted == []

    def test_history_failure_blocks_submission(self, logged_in, vendor):
        vendor.fail_fetch = True
        response = logged_in.post("/v1/week/submit", json={"date": "2026-03-02"}, headers=HEADERS)
        assert response.status_code == 502
        assert response.json()["detail"]["code"] == "UPSTREAM_ERROR"
        assert vendor.posted == []

    def test_partial_submission(self, logged_in, vendor, db_path):
        vendor.fail_post_at = 3
        response = logged_in.post("/v1/week/submit", json={"date": "2026-03-02"}, headers=HEADERS)
        assert response.status_code == 502
        detail = response.json()["detail"]
        assert detail["code"] == "SUBMISSION_ABORTED"
        assert detail["details"] == ["2 of 18 clocking(s) were submitted before the failure"]
        assert len(vendor.posted) == 2

        conn = get_connection(db_path)
        count = conn.execute("SELECT COUNT(*) FROM submissions").fetchone()[0]
        conn.close()
        assert count == 2

    def test_rest_days_and_disabled_lunch(self, logged_in, vendor):
        payload = {
            "date": "2026-03-02",
            "days": [
                {"date": "2026-03-02", "is_rest_day": True},
                {"date": "2026-03-03", "lunch_enabled": False},
            ],
        }
        response = logged_in.post("/v1/week/submit", json=payload, headers=HEADERS)
        submitted = response.json()["submitted"]
        assert "2026-03-02" not in {e["date"] for e in submitted}
        assert [e["kind"] for e in submitted if e["date"] == "2026-03-03"] == ["entry", "exit"]


class TestHistory:
    def test_month_calendar(self, logged_in, vendor):
        vendor.records = [
            {"INOUT_ID": 1, "INOUT_TYPE": 0, "INOUT_DATE": "2026-03-02 09:00:00"},
            {"INOUT_ID": 2, "INOUT_TYPE": 1, "INOUT_DATE": "2026-03-02 17:00:00"},
        ]
        response = logged_in.get("/v1/history/2026-03", headers=HEADERS)
        assert response.status_code == 200
        data = response.json()
        assert len(data["weeks"]) == 6
        assert data["weeks"][1]["days"][0]["hours"] == 8
        assert data["total_hours"] == 8

    def test_holiday_in_calendar(self, logged_in):
        data = logged_in.get("/v1/history/2026-04", headers=HEADERS).json()
        good_friday = next(
            d for w in data["weeks"] for d in w["days"] if d and d["date"] == "2026-04-03"
        )
        assert good_friday["holiday_name"]
        assert good_friday["hours"] == 8

    @pytest.mark.parametrize("month", ["2026-13", "march", "2026-3"])
    def test_invalid_month(self, logged_in, month):
        response = logged_in.get(f"/v1/history/{month}", headers=HEADERS)
        assert response.status_code == 400
        assert response.json()["detail"]["code"] == "INVALID_REQUEST"

    def test_upstream_failure(self, logged_in, vendor):
        vendor.fail_fetch = True
        response = logged_in.get("/v1/history/2026-03", headers=HEADERS)
        assert response.status_code == 502

    def test_export(self, logged_in, vendor):
        vendor.records = [
            {"INOUT_ID": 1, "INOUT_TYPE": 0, "INOUT_DATE": "2026-03-02 09:00:00"},
            {"INOUT_ID": 2, "INOUT_TYPE": 1, "INOUT_DATE": "2026-03-02 17:00:00"},
        ]
        response = logged_in.get("/v1/history/2026-03/export", headers=HEADERS)
        assert response.status_code == 200
        assert "spreadsheetml" in response.headers["content-type"]
        assert "fichajes_2026-03.xlsx" in response.headers["content-disposition"]

        ws = load_workbook(BytesIO(response.content))["History"]
        assert ws.cell(row=2, column=1).value == "2/3/2026"
        assert ws.cell(row=2, column=6).value == 8


class TestHolidays:
    def test_range(self, client):
        response = client.get(
            "/v1/holidays", params={"start": "2026-01-01", "end": "2026-01-31"}, headers=HEADERS
        )
        assert response.status_code == 200
        assert [h["date"] for h in response.json()] == ["2026-01-01", "2026-01-06"]

    def test_reversed_range(self, client):
        response = client.get(
            "/v1/holidays", params={"start": "2026-02-01", "end": "2026-01-01"}, headers=HEADERS
        )
        assert response.status_code == 400


class TestClockingsProxy:
    def test_requires_token(self, client):
        response = client.get("/v1/clockings", params={"from": "2026-03-01 00:00:00"}, headers=HEADERS)
        assert response.status_code == 401

    def test_requires_from(self, client):
        response = client.get("/v1/clockings", headers={**HEADERS, "token": "vendor-token"})
        assert response.status_code == 400

    def test_relays_records(self, client, vendor):
        vendor.records = [{"INOUT_ID": 1, "INOUT_TYPE": 0, "INOUT_DATE": "2026-03-02 09:00:00"}]
        response = client.get(
            "/v1/clockings",
            params={"from": "2026-03-01 00:00:00"},
            headers={**HEADERS, "token": "vendor-token"},
        )
        assert response.status_code == 200
        assert response.json() == vendor.records

    def test_relays_vendor_status(self, client):
        response = client.get(
            "/v1/clockings",
            params={"from": "2026-03-01 00:00:00"},
            headers={**HEADERS, "token": "bad-token"},
        )
        assert response.status_code == 403
        assert response.json()["detail"]["error"] == "Invalid token"

    def test_post_clocking(self, client, vendor):
        response = client.post(
            "/v1/clockings",
            data={"user_action": "0", "user_timestamp": "2026-03-02 09:00:00"},
            headers={**HEADERS, "token": "vendor-token"},
        )
        assert response.status_code == 200
        assert vendor.records[0]["INOUT_DATE"] == "2026-03-02 09:00:00"


class TestRequestLog:
    def test_requests_are_logged(self, logged_in, db_path):
        logged_in.get("/v1/week", params={"date": "2026-03-04"}, headers=HEADERS)

        conn = get_connection(db_path)
        rows = conn.execute(
            "SELECT * FROM api_requests WHERE endpoint = '/v1/week'"
        ).fetchall()
        conn.close()

        assert len(rows) == 1
        assert rows[0]["status_code"] == 200
        assert rows[0]["week_start"] == "2026-03-02"
        assert rows[0]["total_hours"] == 40

    def test_errors_are_logged_with_details(self, logged_in, db_path):
        logged_in.post("/v1/week/submit", json=week_edit(pause_in_time=""), headers=HEADERS)

        conn = get_connection(db_path)
        request = conn.execute(
            "SELECT * FROM api_requests WHERE endpoint = '/v1/week/submit'"
        ).fetchone()
        details = conn.execute(
            "SELECT * FROM api_request_details WHERE request_id = ?", (request["request_id"],)
        ).fetchall()
        conn.close()

        assert request["status_code"] == 422
        assert request["error_code"] == "VALIDATION_ERROR"
        assert [d["detail_type"] for d in details] == ["validation_error"]

    def test_log_tables_are_created_on_a_fresh_database(self, client, tmp_path, monkeypatch):
        fresh = tmp_path / "fresh" / "requests.db"
        monkeypatch.setattr(api.logging, "DB_PATH", fresh)

        response = client.post(
            "/v1/week/validate", json={"date": "2026-03-02"}, headers=HEADERS
        )
        assert response.status_code == 200

        conn = get_connection(fresh)
        rows = conn.execute("SELECT * FROM api_requests").fetchall()
        conn.close()
        assert [row["endpoint"] for row in rows] == ["/v1/week/validate"]

    def test_health_is_not_logged(self, client, db_path):
        client.get("/health")
        conn = get_connection(db_path)
        count = conn.execute("SELECT COUNT(*) FROM api_requests").fetchone()[0]
        conn.close()
        assert count == 0
