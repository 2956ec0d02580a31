import logging

import pytest

from esports_track.app import app
from esports_track.cache import TTLCache
from esports_track.errors import APIError
from esports_track.routes import api
from esports_track.services.matches import MatchAggregator


@pytest.fixture
def client():
    app.testing = True
    with app.test_client() as client:
        yield client


class FakeMatches:
    def __init__(self, items=None, detail=None, exc=None):
        self.items = items or []
        self.detail = detail
        self.exc = exc
        self.calls = []

    def list_matches(self, page, per_page, status=None):
        self.calls.append((page, per_page, status))
        if self.exc:
            raise self.exc
        return self.items

    def get_match(self, match_id, params=None):
        self.calls.append((match_id, params))
        if self.exc:
            raise self.exc
        return self.detail


class FakeHeroes:
    def __init__(self, heroes=None, stats=None, exc=None):
        self.heroes = heroes or []
        self.stats = stats or []
        self.exc = exc

    def list_heroes(self):
        if self.exc:
            raise self.exc
        return self.heroes

    def hero_stats(self):
        if self.exc:
            raise self.exc
        return self.stats


class FakeTeams:
    def __init__(self, exc=None):
        self.exc = exc
        self.calls = []

    def rankings(self):
        if self.exc:
            raise self.exc
        return {"rankings": [{"id": 1}]}

    def team_detail(self, team_id):
        self.calls.append(team_id)
        if self.exc:
            raise self.exc
        return {"team": {"id": team_id}, "recent_matches": []}

    def team_card(self, team_id):
        self.calls.append(team_id)
        return {"team": None, "recentMatches": [], "fetchedAt": 1}


class FakeCatalog:
    def __init__(self, exc=None):
        self.exc = exc

    def list_videogames(self):
        if self.exc:
            raise self.exc
        return {"games": [{"id": 4, "name": "Dota 2", "slug": "dota-2"}]}


def test_matches_query_validation_and_aliases(client, monkeypatch):
    fake = FakeMatches(items=[{"id": 1}])
    monkeypatch.setattr(api, "_matches_singleton", fake)

    response = client.get("/api/matches?page=0&per_page=500&filter[status]=bogus")
    assert response.status_code == 200
    assert response.get_json() == [{"id": 1}]

    client.get("/api/matches?limit=5&status=running&page=3")
    client.get("/api/matches?per_page=abc")

    assert fake.calls == [(1, 100, None), (3, 5, "running"), (1, 12, None)]


def test_matches_logs_every_validation_warning(client, monkeypatch, caplog):
    monkeypatch.setattr(api, "_matches_singleton", FakeMatches())

    with caplog.at_level(logging.INFO, logger="esports_track.routes.api"):
        client.get("/api/matches?page=0&per_page=500&filter[status]=bogus")

    lines = [r.getMessage() for r in caplog.records if r.getMessage().startswith("api_matches ")]
    assert len(lines) == 1
    assert "page_floor" in lines[0]
    assert "per_page_cap" in lines[0]
    assert "status_unknown:bogus" in lines[0]


def test_matches_filter_status_wins_over_alias(client, monkeypatch):
    fake = FakeMatches()
    monkeypatch.setattr(api, "_matches_singleton", fake)

    client.get("/api/matches?filter[status]=not_started&status=finished")

    assert fake.calls == [(1, 12, "not_started")]


def test_matches_all_providers_failing_is_200_empty(client, monkeypatch):
    class Down:
        configured = True

        def list_matches(self, *args, **kwargs):
            raise APIError("x", "NETWORK_ERROR", "down")

        def pro_matches(self, limit):
            raise APIError("opendota", "TIMEOUT", "slow")

    aggregator = MatchAggregator(pandascore=Down(), stratz=Down(), opendota=Down(), cache=TTLCache(20))
    monkeypatch.setattr(api, "_matches_singleton", aggregator)

    response = client.get("/api/matches")

    assert response.status_code == 200
    assert response.get_json() == []


def test_matches_unexpected_error_is_500(client, monkeypatch):
    monkeypatch.setattr(api, "_matches_singleton", FakeMatches(exc=RuntimeError("kaput")))

    response = client.get("/api/matches")

    assert response.status_code == 500
    body = response.get_json()
    assert body["error"] == "Internal server error"
    assert body["details"] == "kaput"


def test_match_detail_forwards_query(client, monkeypatch):
    fake = FakeMatches(detail={"id": 42, "status": "finished"})
    monkeypatch.setattr(api, "_matches_singleton", fake)

    response = client.get("/api/matches/42?include=games,streams_list")

    assert response.status_code == 200
    assert response.get_json()["id"] == 42
    assert fake.calls == [("42", {"include": "games,streams_list"})]


@pytest.mark.parametrize(
    "exc, status",
    [
        (APIError("pandascore", "HTTP_ERROR", "pandascore responded 404", details="nope", status=404), 404),
        (APIError("pandascore", "HTTP_ERROR", "pandascore responded 401", status=401), 401),
        (APIError("pandascore", "CONFIG_ERROR", "Server missing PandaScore API key (PANDASCORE_API_KEY)."), 500),
        (APIError("pandascore", "HTTP_ERROR", "pandascore responded 503", status=503), 502),
        (APIError("pandascore", "TIMEOUT", "slow"), 502),
    ],
)
def test_match_detail_error_mapping(client, monkeypatch, exc, status):
    monkeypatch.setattr(api, "_matches_singleton", FakeMatches(exc=exc))

    response = client.get("/api/matches/1")

    assert response.status_code == status
    assert response.get_json()["error"] == exc.message


def test_heroes_timeout_is_504(client, monkeypatch):
    monkeypatch.setattr(api, "_heroes_singleton", FakeHeroes(exc=APIError("opendota", "TIMEOUT", "slow")))

    response = client.get("/api/heroes")

    assert response.status_code == 504
    assert response.get_json() == {"error": "Upstream timeout"}


def test_heroes_upstream_error_is_502_with_details(client, monkeypatch):
    exc = APIError("opendota", "HTTP_ERROR", "opendota responded 500", details="boom", status=500)
    monkeypatch.setattr(api, "_heroes_singleton", FakeHeroes(exc=exc))

    response = client.get("/api/heroes")

    assert response.status_code == 502
    assert response.get_json() == {"error": "OpenDota upstream error", "details": "boom"}


def test_hero_stats_ok(client, monkeypatch):
    monkeypatch.setattr(api, "_heroes_singleton", FakeHeroes(stats=[{"id": 1, "win_rate": 55.0}]))

    response = client.get("/api/hero-stats")

    assert response.status_code == 200
    assert response.get_json() == [{"id": 1, "win_rate": 55.0}]


def test_rankings_cache_header(client, monkeypatch):
    monkeypatch.setattr(api, "_teams_singleton", FakeTeams())

    response = client.get("/api/rankings")

    assert response.status_code == 200
    assert response.headers["Cache-Control"] == "s-maxage=300"
    assert response.get_json() == {"rankings": [{"id": 1}]}


def test_rankings_failure_is_502(client, monkeypatch):
    monkeypatch.setattr(api, "_teams_singleton", FakeTeams(exc=APIError("opendota", "HTTP_ERROR", "down", status=503)))
    assert client.get("/api/rankings").status_code == 502


@pytest.mark.parametrize("path", ["/api/team/abc", "/api/team/0", "/api/team/-3", "/api/teams/xyz"])
def test_invalid_team_id_is_400(client, monkeypatch, path):
    fake = FakeTeams()
    monkeypatch.setattr(api, "_teams_singleton", fake)

    response = client.get(path)

    assert response.status_code == 400
    assert fake.calls == []


def test_team_detail_ok_with_cache_header(client, monkeypatch):
    monkeypatch.setattr(api, "_teams_singleton", FakeTeams())

    response = client.get("/api/team/15")

    assert response.status_code == 200
    assert response.get_json() == {"team": {"id": 15}, "recent_matches": []}
    assert response.headers["Cache-Control"] == "s-maxage=60, stale-while-revalidate=120"


def test_team_detail_failure_is_502(client, monkeypatch):
    exc = APIError("opendota", "HTTP_ERROR", "down", details="gateway", status=500)
    monkeypatch.setattr(api, "_teams_singleton", FakeTeams(exc=exc))

    response = client.get("/api/team/15")

    assert response.status_code == 502
    assert response.get_json()["details"] == "gateway"


def test_team_card_ok(client, monkeypatch):
    monkeypatch.setattr(api, "_teams_singleton", FakeTeams())

    response = client.get("/api/teams/15")

    assert response.status_code == 200
    assert response.get_json() == {"team": None, "recentMatches": [], "fetchedAt": 1}


def test_videogames_ok_and_missing_key(client, monkeypatch):
    monkeypatch.setattr(api, "_catalog_singleton", FakeCatalog())
    ok = client.get("/api/videogames")
    assert ok.status_code == 200
    assert ok.get_json()["games"][0]["slug"] == "dota-2"
    assert ok.headers["Cache-Control"] == "s-maxage=60, stale-while-revalidate=120"

    exc = APIError("pandascore", "CONFIG_ERROR", "Server missing PandaScore API key (PANDASCORE_API_KEY).")
    monkeypatch.setattr(api, "_catalog_singleton", FakeCatalog(exc=exc))
    missing = client.get("/api/videogames")
    assert missing.status_code == 500
    assert "PANDASCORE_API_KEY" in missing.get_json()["error"]


def test_unknown_api_path_is_json_404(client):
    response = client.get("/api/nope")
    assert response.status_code == 404
    assert response.get_json() == {"error": "Not found"}
