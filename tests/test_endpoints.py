"""
HTTP-level tests for every router, run through TestClient against SQLite.
"""
from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from app.core.errors import StoreWriteError
from app.services.kv_store import KeyValueStore


def _event(**overrides):
    body = {
        "mood": "bad",
        "stress_level": 7,
        "craving_level": 8,
        "did_smoke": False,
        "triggers": ["morning_coffee", "stress"],
    }
    body.update(overrides)
    return body


def test_health(client):
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json()["status"] == "ok"


# ---------------------------------------------------------------------------
# /events
# ---------------------------------------------------------------------------

class TestEvents:

    def test_log_event(self, client):
        r = client.post("/events", json=_event(craving_level=15, hour=8))
        assert r.status_code == 201
        body = r.json()
        assert body["craving_level"] == 10
        assert body["hour"] == 8
        assert body["triggers"] == ["morning_coffee", "stress"]
        assert body["id"]

    def test_list_newest_first(self, client):
        now = datetime.now(tz=timezone.utc)
        client.post("/events", json=_event(timestamp=(now - timedelta(days=2)).isoformat()))
        client.post("/events", json=_event(timestamp=now.isoformat(), craving_level=3))
        r = client.get("/events")
        assert r.status_code == 200
        body = r.json()
        assert body["total"] == 2
        assert body["items"][0]["craving_level"] == 3

    def test_pagination(self, client):
        for _ in range(3):
            client.post("/events", json=_event())
        r = client.get("/events", params={"limit": 2, "offset": 2})
        assert r.json()["total"] == 3
        assert len(r.json()["items"]) == 1

    def test_users_are_isolated(self, client):
        client.post("/events", json=_event())
        r = client.get("/events", headers={"X-User-Id": "someone-else-entirely"})
        assert r.json()["total"] == 0

    def test_unknown_mood_is_422(self, client):
        r = client.post("/events", json=_event(mood="ecstatic"))
        assert r.status_code == 422
        body = r.json()
        assert body["code"] == "VALIDATION_ERROR"
        assert body["details"]["errors"][0]["field"] == "mood"

    def test_event_outside_retention_is_422(self, client):
        stale = datetime.now(tz=timezone.utc) - timedelta(days=120)
        r = client.post("/events", json=_event(timestamp=stale.isoformat()))
        assert r.status_code == 422
        assert r.json()["code"] == "EVENT_VALIDATION_ERROR"
        assert r.json()["details"]["field"] == "timestamp"
        assert client.get("/events").json()["total"] == 0

    def test_missing_field_is_422(self, client):
        body = _event()
        del body["did_smoke"]
        assert client.post("/events", json=body).status_code == 422

    def test_store_write_failure_is_503(self, client, monkeypatch):
        def _fail(self, key, records):
            raise StoreWriteError(key, reason="read-only")
        monkeypatch.setattr(KeyValueStore, "write", _fail)

        r = client.post("/events", json=_event())
        assert r.status_code == 503
        assert r.json()["code"] == "STORE_WRITE_ERROR"


# ---------------------------------------------------------------------------
# /risk
# ---------------------------------------------------------------------------

class TestRisk:

    def test_predict(self, client):
        r = client.get("/risk/predict", params={"hour": 19, "mood": "good", "stress": 3})
        assert r.status_code == 200
        body = r.json()
        assert body["hour"] == 19
        assert 0 <= body["risk_score"] <= 100
        assert body["risk_level"] in ("low", "medium", "high", "critical")
        assert body["recommendation"]

    @pytest.mark.parametrize("params", [{}, {"hour": 24}, {"hour": 8, "stress": 11}, {"hour": 8, "mood": "meh"}])
    def test_predict_rejects_bad_query(self, client, params):
        r = client.get("/risk/predict", params=params)
        assert r.status_code == 422
        assert r.json()["code"] == "VALIDATION_ERROR"

    def test_history_drives_prediction(self, client):
        for _ in range(3):
            client.post("/events", json=_event(hour=3, craving_level=10))
        r = client.get("/risk/predict", params={"hour": 3, "mood": "terrible", "stress": 10})
        assert r.json()["risk_score"] == 100
        assert r.json()["risk_level"] == "critical"
        assert r.json()["contributing_triggers"] == ["morning_coffee", "stress"]

    def test_current(self, client):
        r = client.get("/risk/current")
        assert r.status_code == 200
        assert r.json()["hour"] == datetime.now(tz=timezone.utc).hour

    def test_daily_profile(self, client):
        r = client.get("/risk/daily-profile")
        assert r.status_code == 200
        body = r.json()
        assert [h["hour"] for h in body["hourly_risks"]] == list(range(24))
        assert len(body["peak_hours"]) == 5
        assert len(body["safest_hours"]) == 5
        assert set(body["peak_hours"]).isdisjoint(body["safest_hours"])

    def test_high_risk_hours(self, client):
        r = client.get("/risk/high-risk-hours")
        assert r.status_code == 200
        hours = r.json()["hours"]
        assert 19 in hours
        assert 3 not in hours

    def test_weekly_trend(self, client):
        r = client.get("/risk/weekly-trend")
        days = r.json()["days"]
        assert [d["day"] for d in days] == ["Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"]


# ---------------------------------------------------------------------------
# /triggers
# ---------------------------------------------------------------------------

class TestTriggers:

    def test_analysis(self, client):
        client.post("/events", json=_event(craving_level=8, did_smoke=False, triggers=["morning_coffee"]))
        client.post("/events", json=_event(craving_level=6, did_smoke=True, triggers=["morning_coffee"]))
        r = client.get("/triggers/analysis")
        assert r.status_code == 200
        item = r.json()["items"][0]
        assert item == {
            "trigger": "morning_coffee",
            "frequency": 2,
            "average_craving_level": 7.0,
            "success_rate": 50.0,
        }

    def test_dangerous_limit(self, client):
        client.post("/events", json=_event(triggers=["alcohol", "stress", "boredom"]))
        r = client.get("/triggers/dangerous", params={"limit": 2})
        assert r.json()["total"] == 2

    def test_successful_needs_three(self, client):
        client.post("/events", json=_event(triggers=["boredom"]))
        assert client.get("/triggers/successful").json()["items"] == []

    def test_patterns_and_factors(self, client):
        for _ in range(7):
            client.post("/events", json=_event(hour=22, craving_level=9, triggers=["alcohol"]))
        patterns = client.get("/triggers/patterns").json()
        assert patterns[0]["hour"] == 22
        assert patterns[0]["time_of_day"] == "night"

        factors = client.get("/triggers/risk-factors").json()
        assert {f["id"] for f in factors} == {"trigger-alcohol", "time-22"}
        assert all(f["severity"] == "critical" for f in factors)


# ---------------------------------------------------------------------------
# /reports
# ---------------------------------------------------------------------------

class TestReports:

    def test_weekly_empty(self, client):
        r = client.get("/reports/weekly")
        assert r.status_code == 200
        body = r.json()
        assert body["total_cravings"] == 0
        assert len(body["recommendations"]) == 4

    def test_weekly_with_events(self, client):
        client.post("/events", json=_event(craving_level=3))
        client.post("/events", json=_event(craving_level=4))
        body = client.get("/reports/weekly").json()
        assert body["total_cravings"] == 2
        assert body["avg_craving_level"] == 3.5
        assert {i["id"] for i in body["insights"]} == {"success-rate", "low-craving"}

    def test_advice(self, client):
        client.post("/events", json=_event(triggers=["alcohol"], craving_level=9))
        advice = client.get("/reports/advice").json()["advice"]
        assert advice[0].startswith('"Alcohol"')


# ---------------------------------------------------------------------------
# /strategies
# ---------------------------------------------------------------------------

class TestStrategies:

    def test_catalog(self, client):
        r = client.get("/strategies")
        assert r.status_code == 200
        items = r.json()["items"]
        assert len(items) == 8
        assert items[0]["id"] == "deep-breathing"
        assert {i["effectiveness"] for i in items} == {50}

    def test_record_usage(self, client):
        r = client.post("/strategies/buy-time/usage", json={"succeeded": True})
        assert r.status_code == 201
        assert r.json()["strategy_id"] == "buy-time"

        items = {i["id"]: i for i in client.get("/strategies").json()["items"]}
        assert items["buy-time"]["usage_count"] == 1
        assert items["buy-time"]["success_count"] == 1

    def test_unknown_strategy_is_404(self, client):
        r = client.post("/strategies/levitation/usage", json={"succeeded": False})
        assert r.status_code == 404
        body = r.json()
        assert body["code"] == "UNKNOWN_STRATEGY"
        assert body["details"]["strategy_id"] == "levitation"
