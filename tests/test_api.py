import pytest
from fastapi.testclient import TestClient

from sleep_system import config
from sleep_system.main import app


@pytest.fixture
def client(store):
    with TestClient(app) as c:
        yield c


def _payload(date="2024-05-01", bedtime="22:30", waketime="06:30", **events):
    return {"date": date, "bedtime": bedtime, "waketime": waketime, **events}


def test_status(client):
    resp = client.get("/api/status")
    assert resp.status_code == 200
    body = resp.json()
    assert body["service"] == "sleep-system"
    assert body["targets"]["bedtime"] == "22:30"


def test_score_does_not_store(client):
    resp = client.post("/api/score", json=_payload(bedtime="01:00", waketime="06:00"))
    assert resp.status_code == 200
    assert resp.json()["qualityScore"] == 45
    assert client.get("/api/entries").json() == []


def test_invalid_time_rejected(client):
    resp = client.post("/api/score", json=_payload(bedtime="25:00"))
    assert resp.status_code == 422


def test_invalid_enum_rejected(client):
    exercise = [{"time": "20:00", "type": "yoga", "intensity": "low"}]
    resp = client.post("/api/score", json=_payload(exercise=exercise))
    assert resp.status_code == 422


def test_save_then_replace(client):
    first = client.post("/api/entry", json=_payload())
    assert first.status_code == 200
    assert first.json()["replaced"] is False

    second = client.post("/api/entry", json=_payload(
        bedtime="23:00",
        screens=[{"startTime": "21:00", "endTime": "22:40", "contentType": "active"}],
    ))
    assert second.json()["replaced"] is True
    assert second.json()["entry"]["violations"] == ["Screen time within 1h of bedtime (20min before)"]

    entries = client.get("/api/entries").json()
    assert len(entries) == 1
    assert entries[0]["bedtime"] == "23:00"


def test_get_entry(client):
    client.post("/api/entry", json=_payload())
    assert client.get("/api/entry/2024-05-01").json()["qualityScore"] == 100
    assert client.get("/api/entry/2024-05-09").status_code == 404


def test_entries_limit(client):
    for day in (1, 2, 3):
        client.post("/api/entry", json=_payload(date=f"2024-05-0{day}"))
    dates = [e["date"] for e in client.get("/api/entries", params={"limit": 2}).json()]
    assert dates == ["2024-05-02", "2024-05-03"]


@pytest.mark.parametrize("limit", [0, -1])
def test_entries_limit_must_be_positive(client, limit):
    client.post("/api/entry", json=_payload())
    assert client.get("/api/entries", params={"limit": limit}).status_code == 422


def test_weekly_empty_and_filled(client):
    assert client.get("/api/weekly").json() == {"found": False}

    client.post("/api/entry", json=_payload(waketime="05:30"))
    body = client.get("/api/weekly").json()
    assert body["found"] is True
    assert body["debtTrend"]["total"] == 60
    assert body["period"]["days"] == 1


def test_summary(client):
    assert client.get("/api/summary").json()["dateRange"] == "No data"

    client.post("/api/entry", json=_payload(waketime="05:30"))
    client.post("/api/entry", json=_payload(date="2024-05-02", waketime="05:30"))
    body = client.get("/api/summary").json()
    assert body["totalEntries"] == 2
    assert body["totalSleepDebt"] == 120
    assert body["totalSleepDebtDisplay"] == "2h 0m"
    assert body["socialJetlag"] == 0


def test_export_json(client):
    client.post("/api/entry", json=_payload())
    resp = client.get("/api/export/json")
    assert resp.status_code == 200
    assert "sleep-system-data-" in resp.headers["content-disposition"]
    assert resp.json()[0]["date"] == "2024-05-01"


def test_export_weekly_report(client):
    assert client.get("/api/export/weekly-report").status_code == 404

    client.post("/api/entry", json=_payload())
    resp = client.get("/api/export/weekly-report")
    assert resp.status_code == 200
    assert resp.text.startswith("SLEEP SYSTEM - WEEKLY REPORT")
    assert "sleep-system-weekly-report-" in resp.headers["content-disposition"]


def test_reset_requires_confirm(client):
    client.post("/api/entry", json=_payload())
    assert client.post("/api/reset").status_code == 400
    assert len(client.get("/api/entries").json()) == 1

    resp = client.post("/api/reset", params={"confirm": "true"})
    assert resp.json() == {"deleted": 1, "status": "ok"}
    assert client.get("/api/entries").json() == []


def test_api_key_enforced(client, monkeypatch):
    monkeypatch.setattr(config, "API_KEY", "secret")
    assert client.get("/api/entries").status_code == 401
    assert client.get("/api/entries", headers={"X-API-Key": "secret"}).status_code == 200
    assert client.get("/api/status").status_code == 200
