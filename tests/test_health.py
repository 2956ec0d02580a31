import pytest

from esports_track import app as app_module
from esports_track.app import app


@pytest.fixture
def client():
    app.testing = True
    with app.test_client() as client:
        yield client


def test_health(client, monkeypatch):
    monkeypatch.setattr(app_module.settings, "PANDASCORE_API_KEY", None)
    monkeypatch.setattr(app_module.settings, "STRATZ_API_URL", "https://stratz.test/graphql")

    response = client.get("/health")
    assert response.status_code == 200
    payload = response.get_json()
    assert payload["status"] == "ok"
    assert payload["message"] == "OK"
    data = payload["data"]
    assert data["ok"] is True
    assert "ts" in data
    assert data["providers"] == {"pandascore": False, "stratz": True, "opendota": True}


def test_status_reports_client_tunables(client):
    response = client.get("/status")
    assert response.status_code == 200
    data = response.get_json()["data"]
    assert {"timeout_ms", "max_retries", "backoff_ms", "cache_file_mirror"} <= set(data)


def test_unknown_non_api_path_is_wrapped(client):
    response = client.get("/nope")
    assert response.status_code == 404
    assert response.get_json() == {"status": "error", "error": "Not found"}
