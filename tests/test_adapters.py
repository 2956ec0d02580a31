import pytest

from esports_track.adapters.opendota import OpenDotaAdapter
from esports_track.adapters.pandascore import PandaScoreAdapter
from esports_track.adapters.stratz import RECENT_MATCHES_QUERY, StratzAdapter
from esports_track.errors import APIError


class FakeJSONResponse:
    def __init__(self, status_code, payload=None, text=""):
        self.status_code = status_code
        self._payload = payload
        self.text = text

    def json(self):
        if self._payload is None:
            raise ValueError("No JSON payload configured")
        return self._payload


class FakeSession:
    def __init__(self, responses):
        self._responses = list(responses)
        self.calls = []

    def request(self, method, url, timeout=None, **kwargs):
        self.calls.append({"method": method, "url": url, "timeout": timeout, **kwargs})
        return self._responses.pop(0)


@pytest.fixture(autouse=True)
def _no_sleep(monkeypatch):
    monkeypatch.setattr("esports_track.net_retry.time.sleep", lambda _duration: None)


def test_pandascore_list_matches_request_shape():
    session = FakeSession([FakeJSONResponse(200, [{"id": 1, "status": "running", "opponents": []}])])
    adapter = PandaScoreAdapter(api_key="k", base="https://ps.test/", session=session)

    matches = adapter.list_matches(2, 5, "running")

    call = session.calls[0]
    assert call["method"] == "GET"
    assert call["url"] == "https://ps.test/matches"
    assert call["params"] == {
        "per_page": 5,
        "page": 2,
        "filter[videogame]": "dota2",
        "filter[status]": "running",
    }
    assert call["headers"]["Authorization"] == "Bearer k"
    assert call["timeout"] == 12.0
    assert matches[0]["id"] == 1
    assert matches[0]["status"] == "running"


def test_pandascore_without_status_filter_omits_it():
    session = FakeSession([FakeJSONResponse(200, [])])
    PandaScoreAdapter(api_key="k", base="https://ps.test", session=session).list_matches(1, 12)
    assert "filter[status]" not in session.calls[0]["params"]


def test_pandascore_non_list_payload_is_empty():
    session = FakeSession([FakeJSONResponse(200, {"error": "odd"})])
    adapter = PandaScoreAdapter(api_key="k", base="https://ps.test", session=session)
    assert adapter.list_matches(1, 12) == []


def test_pandascore_missing_key_is_config_error():
    adapter = PandaScoreAdapter(api_key="", base="https://ps.test", session=FakeSession([]))
    assert adapter.configured is False
    with pytest.raises(APIError) as excinfo:
        adapter.list_matches(1, 12)
    assert excinfo.value.code == "CONFIG_ERROR"


def test_pandascore_match_detail_forwards_params():
    session = FakeSession([FakeJSONResponse(200, {"id": 42, "status": "finished"})])
    adapter = PandaScoreAdapter(api_key="k", base="https://ps.test", session=session)

    match = adapter.get_match("42", {"include": "games"})

    assert session.calls[0]["url"] == "https://ps.test/matches/42"
    assert session.calls[0]["params"] == {"include": "games"}
    assert match["id"] == 42


def test_pandascore_match_detail_propagates_4xx():
    session = FakeSession([FakeJSONResponse(404, text='{"error":"Not found"}')])
    adapter = PandaScoreAdapter(api_key="k", base="https://ps.test", session=session)

    with pytest.raises(APIError) as excinfo:
        adapter.get_match("404")

    assert excinfo.value.status == 404
    assert excinfo.value.details == '{"error":"Not found"}'


def test_pandascore_videogames():
    session = FakeSession([FakeJSONResponse(200, [{"id": 4, "name": "Dota 2", "slug": "dota-2"}, {"id": 1, "name": "LoL"}])])
    games = PandaScoreAdapter(api_key="k", base="https://ps.test", session=session).list_videogames()

    assert session.calls[0]["params"] == {"sort": "name", "per_page": 200}
    assert games == [{"id": 4, "name": "Dota 2", "slug": "dota-2"}, {"id": 1, "name": "LoL", "slug": "LoL"}]


def test_stratz_posts_graphql_with_offset():
    nodes = [{"id": 10, "teams": [{"id": 1, "name": "A"}, {"id": 2, "name": "B"}], "scoreA": 2, "scoreB": 1}]
    session = FakeSession([FakeJSONResponse(200, {"data": {"matches": nodes}})])
    adapter = StratzAdapter(url="https://stratz.test/graphql", api_key="s", session=session)

    matches = adapter.list_matches(3, 5)

    call = session.calls[0]
    assert call["method"] == "POST"
    assert call["json"] == {"query": RECENT_MATCHES_QUERY, "variables": {"limit": 5, "offset": 10}}
    assert call["headers"]["Authorization"] == "Bearer s"
    assert matches[0]["score"] == [2, 1]
    assert matches[0]["name"] == "A vs B"


def test_stratz_accepts_top_level_matches_and_no_key():
    session = FakeSession([FakeJSONResponse(200, {"matches": [{"id": 1}]})])
    adapter = StratzAdapter(url="https://stratz.test/graphql", api_key="", session=session)

    assert [m["id"] for m in adapter.list_matches(1, 12)] == [1]
    assert "Authorization" not in session.calls[0]["headers"]


def test_stratz_unexpected_shape_is_empty():
    session = FakeSession([FakeJSONResponse(200, {"data": {"matches": {"oops": 1}}})])
    adapter = StratzAdapter(url="https://stratz.test/graphql", api_key="", session=session)
    assert adapter.list_matches(1, 12) == []


def test_stratz_unconfigured():
    adapter = StratzAdapter(url="", api_key="")
    assert adapter.configured is False
    with pytest.raises(APIError):
        adapter.list_matches(1, 12)


def test_stratz_graphql_errors_without_data_are_a_failure():
    payload = {"errors": [{"message": "Unauthorized"}], "data": None}
    session = FakeSession([FakeJSONResponse(200, payload)])
    adapter = StratzAdapter(url="https://stratz.test/graphql", api_key="", session=session)

    with pytest.raises(APIError) as exc:
        adapter.list_matches(1, 12)

    assert exc.value.code == "GRAPHQL_ERROR"
    assert "Unauthorized" in exc.value.details


def test_stratz_graphql_errors_alongside_nodes_keep_the_nodes():
    payload = {"errors": [{"message": "field deprecated"}], "data": {"matches": [{"id": 4}]}}
    session = FakeSession([FakeJSONResponse(200, payload)])
    adapter = StratzAdapter(url="https://stratz.test/graphql", api_key="", session=session)

    assert [m["id"] for m in adapter.list_matches(1, 12)] == [4]


def test_opendota_pro_matches_uses_limit_and_list_timeout():
    session = FakeSession([FakeJSONResponse(200, [{"match_id": 1, "start_time": 1_600_000_000, "duration": 10}, "junk"])])
    adapter = OpenDotaAdapter(base="https://od.test/api", session=session)

    matches = adapter.pro_matches(80)

    assert session.calls[0]["url"] == "https://od.test/api/proMatches"
    assert session.calls[0]["params"] == {"limit": 80}
    assert session.calls[0]["timeout"] == 20.0
    assert [m["id"] for m in matches] == [1]


def test_opendota_pro_matches_non_list_is_a_failure():
    session = FakeSession([FakeJSONResponse(200, {"error": "rate limited"})])
    with pytest.raises(APIError) as excinfo:
        OpenDotaAdapter(base="https://od.test/api", session=session).pro_matches(40)
    assert excinfo.value.code == "INVALID_JSON"


def test_opendota_teams_and_team():
    session = FakeSession(
        [
            FakeJSONResponse(200, [{"team_id": 15, "name": "PSG.LGD", "rating": 1500.5, "wins": 10, "losses": 2}]),
            FakeJSONResponse(200, {"team_id": 15, "name": "PSG.LGD", "tag": "LGD", "logo_url": "https://logo"}),
            FakeJSONResponse(200, [{"match_id": i, "radiant_win": True, "radiant": False} for i in range(8)]),
        ]
    )
    adapter = OpenDotaAdapter(base="https://od.test/api", session=session)

    teams = adapter.teams()
    team = adapter.team(15)
    recent = adapter.team_matches(15, 5)

    assert teams[0]["id"] == 15 and teams[0]["rating"] == 1500.5
    assert team["tag"] == "LGD" and team["logo_url"] == "https://logo"
    assert session.calls[2]["url"] == "https://od.test/api/teams/15/matches"
    assert session.calls[2]["params"] == {"limit": 5}
    assert len(recent) == 5
    assert recent[0]["radiant_win"] is True


def test_opendota_unknown_team_is_none():
    session = FakeSession([FakeJSONResponse(200, {})])
    assert OpenDotaAdapter(base="https://od.test/api", session=session).team(1) is None


def test_opendota_heroes_non_list_is_empty():
    session = FakeSession([FakeJSONResponse(200, {"error": "x"})])
    assert OpenDotaAdapter(base="https://od.test/api", session=session).heroes() == []
