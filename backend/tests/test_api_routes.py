from __future__ import annotations

from fastapi.testclient import TestClient

from whentomeet.core.errors import MSG_NOT_CONFIGURED, ConfigurationError, TransientIOError
from whentomeet.main import create_app

WEEK = "2024-03-03"


def _mark(http, user_id, name, color, selected, day=1, time_index=4, week=WEEK):
    return http.put(
        "/api/calendar",
        json={
            "weekKey": week,
            "day": day,
            "timeIndex": time_index,
            "userId": user_id,
            "userName": name,
            "color": color,
            "isSelected": selected,
        },
    )


def test_health_reports_backend(http):
    r = http.get("/health")
    assert r.status_code == 200
    assert r.json() == {"status": "ok", "storage": "memory"}


def test_users_crud(http):
    assert http.get("/api/users").json() == []

    r = http.post("/api/users", json={"id": "u1", "name": "Ann", "color": "#ef4444"})
    assert r.status_code == 200
    assert r.json() == {"success": True, "user": {"id": "u1", "name": "Ann", "color": "#ef4444"}}
    http.post("/api/users", json={"id": "u2", "name": "Bob", "color": "#3b82f6"})
    assert [u["id"] for u in http.get("/api/users").json()] == ["u1", "u2"]

    r = http.get("/api/users/lookup", params={"name": " ann "})
    assert r.json()["id"] == "u1"
    r = http.get("/api/users/lookup", params={"name": "carol"})
    assert r.status_code == 404
    assert "carol" in r.json()["error"]

    assert http.delete("/api/users", params={"userId": "u1"}).json() == {"success": True}
    assert [u["id"] for u in http.get("/api/users").json()] == ["u2"]


def test_save_user_rejects_missing_fields(http):
    r = http.post("/api/users", json={"id": "u1", "name": "Ann"})
    assert r.status_code == 400
    assert "color" in r.json()["error"]
    assert http.get("/api/users").json() == []


def test_delete_requires_user_id(http):
    r = http.delete("/api/users")
    assert r.status_code == 400
    assert r.json() == {"error": "userId is required"}


def test_calendar_scenario_over_http(http):
    assert http.get("/api/calendar", params={"weekKey": WEEK}).json() == {}

    assert _mark(http, "u1", "Ann", "#ef4444", True).json() == {"success": True}
    assert http.get("/api/calendar", params={"weekKey": WEEK}).json() == {
        "1-4": [{"userId": "u1", "userName": "Ann", "color": "#ef4444"}]
    }

    _mark(http, "u2", "Bob", "#3b82f6", True)
    assert [e["userId"] for e in http.get("/api/calendar", params={"weekKey": WEEK}).json()["1-4"]] == ["u1", "u2"]

    _mark(http, "u1", "Ann", "#ef4444", False)
    assert [e["userId"] for e in http.get("/api/calendar", params={"weekKey": WEEK}).json()["1-4"]] == ["u2"]

    _mark(http, "u2", "Bob", "#3b82f6", False)
    assert http.get("/api/calendar", params={"weekKey": WEEK}).json() == {}


def test_rename_cascades_over_http(http):
    http.post("/api/users", json={"id": "u1", "name": "Ann", "color": "#ef4444"})
    _mark(http, "u1", "Ann", "#ef4444", True)
    _mark(http, "u1", "Ann", "#ef4444", True, week="2024-03-10", day=0, time_index=0)
    _mark(http, "u2", "Bob", "#3b82f6", True)

    r = http.put("/api/users", json={"userId": "u1", "userName": "Annie", "color": "#22c55e"})
    assert r.json() == {"success": True, "updated": 2}

    everything = http.get("/api/calendar").json()
    assert everything[WEEK]["1-4"][0] == {"userId": "u1", "userName": "Annie", "color": "#22c55e"}
    assert everything[WEEK]["1-4"][1]["userName"] == "Bob"
    assert everything["2024-03-10"]["0-0"][0]["userName"] == "Annie"
    assert http.get("/api/users").json() == [{"id": "u1", "name": "Annie", "color": "#22c55e"}]


def test_delete_user_cascades_over_http(http):
    http.post("/api/users", json={"id": "u1", "name": "Ann", "color": "#ef4444"})
    _mark(http, "u1", "Ann", "#ef4444", True)
    _mark(http, "u1", "Ann", "#ef4444", True, week="2024-03-10")
    http.delete("/api/users", params={"userId": "u1"})
    assert http.get("/api/calendar").json() == {WEEK: {}, "2024-03-10": {}}


def test_replace_week(http):
    table = {"2-3": [{"userId": "u1", "userName": "Ann", "color": "#ef4444"}]}
    assert http.post("/api/calendar", json={"weekKey": WEEK, "data": table}).json() == {"success": True}
    assert http.get("/api/calendar", params={"weekKey": WEEK}).json() == table

    r = http.post("/api/calendar", json={"weekKey": WEEK, "data": {"99-1": []}})
    assert r.status_code == 400
    assert http.get("/api/calendar", params={"weekKey": WEEK}).json() == table


def test_update_slot_validation(http):
    r = http.put("/api/calendar", json={"weekKey": WEEK, "day": 1, "userId": "u1"})
    assert r.status_code == 400
    assert "timeIndex" in r.json()["error"]

    r = _mark(http, "u1", "Ann", "#ef4444", True, day=7)
    assert r.status_code == 400

    r = _mark(http, "u1", "Ann", "#ef4444", True, week="2024-03-04")
    assert r.status_code == 400
    assert "Sunday" in r.json()["error"]
    assert http.get("/api/calendar").json() == {}


def test_bad_week_key_on_read(http):
    r = http.get("/api/calendar", params={"weekKey": "03/03/2024"})
    assert r.status_code == 400


def test_week_key_is_stored_in_canonical_form(http):
    assert _mark(http, "u1", "Ann", "#ef4444", True, week=f" {WEEK} ").status_code == 200
    assert list(http.get("/api/calendar").json()) == [WEEK]
    assert "1-4" in http.get("/api/calendar", params={"weekKey": WEEK}).json()


class _BrokenStore:
    def __init__(self, exc):
        self.exc = exc

    @property
    def backend_id(self):
        return "broken"

    def get(self, key):
        raise self.exc

    def set(self, key, value):
        raise self.exc


def test_unconfigured_backend_is_503():
    http = TestClient(create_app(_BrokenStore(ConfigurationError("REDIS_URL not set"))))
    r = http.get("/api/users")
    assert r.status_code == 503
    assert r.json() == {"error": MSG_NOT_CONFIGURED}


def test_storage_failure_is_generic_500():
    http = TestClient(create_app(_BrokenStore(TransientIOError("socket closed"))))
    r = http.get("/api/calendar", params={"weekKey": WEEK})
    assert r.status_code == 500
    assert r.json() == {"error": "Failed to fetch calendar data"}
    r = _mark(http, "u1", "Ann", "#ef4444", True)
    assert r.json() == {"error": "Failed to update calendar slot"}
