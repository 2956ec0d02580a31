"""Per-provider match normalizers (PandaScore, Stratz, OpenDota) into MatchSummary."""
from __future__ import annotations

from typing import Any, Dict, List, Optional

from ..constants import VIDEOGAME_SLUG
from ..ports.matches import MatchSummary, Opponent
from ..status import resolve_status
from ..utils import iso_from_unix, safe_int
from .fields import as_dict, as_list, at, chain, const, first_of, keys, opt_str

# ---- precedence chains (most specific provider field first) ----

PANDA_ID = keys("id", "match_id")
PANDA_SCHEDULED_AT = keys("scheduled_at", "begin_at")
PANDA_BEGIN_AT = keys("begin_at")
PANDA_MAPS = keys("games")
PANDA_SLUG = chain(at("videogame", "slug"), at("videogame_slug"), const(VIDEOGAME_SLUG))

STRATZ_ID = keys("id", "matchId")
STRATZ_SCHEDULED_AT = keys("scheduledAt", "startAt")
STRATZ_BEGIN_AT = keys("beginAt", "startedAt", "startAt")
STRATZ_START_UNIX = keys("start_time_unix", "startDateTime")
STRATZ_DURATION = keys("duration", "matchDuration", "durationSeconds")
STRATZ_SCORE_A = chain(at("scoreA"), at("radiantScore"), at("score", 0))
STRATZ_SCORE_B = chain(at("scoreB"), at("direScore"), at("score", 1))
STRATZ_PICKS = keys("draft", "picks", "picksBans")
STRATZ_MAPS = keys("maps", "games", "mapResults")
STRATZ_LEAGUE_NAME = chain(at("league", "name"), at("tournament", "name"))
STRATZ_TEAM_ID = keys("id", "teamId")
STRATZ_TEAM_NAME = keys("name", "acronym", "displayName")
STRATZ_TEAM_IMAGE = keys("logoUrl", "imageUrl")

OPENDOTA_ID = keys("match_id", "match_seq_num")
OPENDOTA_RADIANT_NAME = keys("radiant_name", "radiant_team_tag", "radiant_team_name")
OPENDOTA_DIRE_NAME = keys("dire_name", "dire_team_tag", "dire_team_name")


def _empty_opponent() -> Opponent:
    return {"id": None, "name": None, "acronym": None, "image_url": None}


def _iso(value: Any) -> Optional[str]:
    """Timestamps arrive either as ISO strings or as unix seconds."""

    if isinstance(value, str):
        return opt_str(value)
    return iso_from_unix(value)


def _versus_name(opponents: List[Opponent]) -> Optional[str]:
    if len(opponents) < 2:
        return None
    home, away = opponents[0].get("name"), opponents[1].get("name")
    if home and away:
        return f"{home} vs {away}"
    return None


def _pair(values: Any) -> List[Optional[int]]:
    items = values if isinstance(values, (list, tuple)) else []
    out = [safe_int(v) for v in items[:2]]
    return out + [None] * (2 - len(out))


def align_scores(opponents: List[Opponent], results: Any) -> List[Optional[int]]:
    """
    Project provider scores onto opponent positions.

    ``results`` is either positional (``[3, 1]``) or keyed by team
    (``[{"team_id": 7, "score": 3}, ...]``). Keyed entries land on the position
    of the opponent with that id; entries without a matching id keep their own
    position. Applying this to its own output returns the same list.
    """
    out: List[Optional[int]] = [None, None]
    if not isinstance(results, (list, tuple)):
        return out

    position_by_id: Dict[str, int] = {}
    for index, opponent in enumerate(opponents[:2]):
        oid = as_dict(opponent).get("id")
        if oid is not None:
            position_by_id.setdefault(str(oid), index)

    placed = [False, False]
    leftovers = []
    for index, item in enumerate(results):
        if isinstance(item, dict):
            score = safe_int(item.get("score"))
            team_id = first_of(item, keys("team_id", "teamId", "opponent_id"))
            position = position_by_id.get(str(team_id)) if team_id is not None else None
            if position is not None and not placed[position]:
                out[position] = score
                placed[position] = True
                continue
            leftovers.append((index, score))
        else:
            leftovers.append((index, safe_int(item)))

    for index, score in leftovers:
        if index < 2 and not placed[index]:
            out[index] = score
            placed[index] = True
    return out


# ---- PandaScore ----

def _panda_opponent(entry: Any) -> Opponent:
    entry = as_dict(entry)
    team = as_dict(entry.get("opponent")) or entry
    return {
        "id": team.get("id"),
        "name": opt_str(team.get("name")),
        "acronym": opt_str(team.get("acronym")),
        "image_url": opt_str(team.get("image_url")),
    }


def _panda_score(record: Dict[str, Any], opponents: List[Opponent]) -> List[Optional[int]]:
    results = record.get("results")
    if isinstance(results, list) and results:
        return align_scores(opponents, results)
    score = record.get("score")
    if isinstance(score, (list, tuple)):
        return _pair(score)
    return [None, None]


def normalize_pandascore_match(record: Any) -> MatchSummary:
    m = as_dict(record)
    opponents = [_panda_opponent(o) for o in as_list(m.get("opponents"))[:2]]
    scheduled_at = _iso(first_of(m, PANDA_SCHEDULED_AT))
    begin_at = _iso(first_of(m, PANDA_BEGIN_AT))
    league = as_dict(m.get("league"))
    return {
        "id": first_of(m, PANDA_ID),
        "name": opt_str(m.get("name")) or _versus_name(opponents),
        "scheduled_at": scheduled_at,
        "begin_at": begin_at,
        "status": resolve_status(m.get("status"), scheduled_at=scheduled_at, begin_at=begin_at),
        "opponents": opponents,
        "score": _panda_score(m, opponents),
        "picks": None,
        "maps": first_of(m, PANDA_MAPS),
        "league": {
            "name": opt_str(league.get("name")),
            "image_url": opt_str(league.get("image_url")),
        },
        "videogame": {"slug": str(first_of(m, PANDA_SLUG))},
        "raw": m,
    }


# ---- Stratz ----

def _stratz_team(team: Any) -> Opponent:
    t = as_dict(team)
    if not t:
        return _empty_opponent()
    return {
        "id": first_of(t, STRATZ_TEAM_ID),
        "name": opt_str(first_of(t, STRATZ_TEAM_NAME)),
        "acronym": opt_str(t.get("acronym")),
        "image_url": opt_str(first_of(t, STRATZ_TEAM_IMAGE)),
    }


def _stratz_opponents(node: Dict[str, Any]) -> List[Opponent]:
    teams = node.get("teams")
    if isinstance(teams, list):
        return [_stratz_team(t) for t in teams[:2]]
    if node.get("teamA") or node.get("teamB"):
        return [_stratz_team(node.get("teamA")), _stratz_team(node.get("teamB"))]
    return []


def normalize_stratz_match(record: Any) -> MatchSummary:
    node = as_dict(record)
    opponents = _stratz_opponents(node)
    scheduled_at = _iso(first_of(node, STRATZ_SCHEDULED_AT))
    begin_at = _iso(first_of(node, STRATZ_BEGIN_AT))
    duration = first_of(node, STRATZ_DURATION)
    status = resolve_status(
        node.get("status"),
        scheduled_at=scheduled_at,
        begin_at=begin_at,
        start_time_unix=first_of(node, STRATZ_START_UNIX),
        duration=duration if isinstance(duration, (int, float)) else None,
    )
    home = opponents[0]["name"] if opponents else None
    away = opponents[1]["name"] if len(opponents) > 1 else None
    league = as_dict(node.get("league"))
    return {
        "id": first_of(node, STRATZ_ID),
        "name": opt_str(node.get("name")) or f"{home or 'Team A'} vs {away or 'Team B'}",
        "scheduled_at": scheduled_at,
        "begin_at": begin_at,
        "status": status,
        "opponents": opponents,
        "score": [safe_int(first_of(node, STRATZ_SCORE_A)), safe_int(first_of(node, STRATZ_SCORE_B))],
        "picks": first_of(node, STRATZ_PICKS),
        "maps": first_of(node, STRATZ_MAPS),
        "league": {
            "name": opt_str(first_of(node, STRATZ_LEAGUE_NAME)),
            "image_url": opt_str(league.get("imageUrl")),
        },
        "videogame": {"slug": VIDEOGAME_SLUG},
        "raw": node,
    }


# ---- OpenDota ----

def normalize_opendota_pro_match(record: Any) -> MatchSummary:
    m = as_dict(record)
    start = m.get("start_time")
    start = start if isinstance(start, (int, float)) and not isinstance(start, bool) else None
    duration = m.get("duration")
    duration = duration if isinstance(duration, (int, float)) and not isinstance(duration, bool) else None
    scheduled_at = iso_from_unix(start)

    opponents: List[Opponent] = [
        {
            "id": m.get("radiant_team_id"),
            "name": opt_str(first_of(m, OPENDOTA_RADIANT_NAME)) or "Radiant",
            "acronym": opt_str(m.get("radiant_team_tag")),
            "image_url": opt_str(m.get("radiant_logo")),
        },
        {
            "id": m.get("dire_team_id"),
            "name": opt_str(first_of(m, OPENDOTA_DIRE_NAME)) or "Dire",
            "acronym": opt_str(m.get("dire_team_tag")),
            "image_url": opt_str(m.get("dire_logo")),
        },
    ]
    return {
        "id": first_of(m, OPENDOTA_ID),
        "name": f"{opponents[0]['name']} vs {opponents[1]['name']}",
        "scheduled_at": scheduled_at,
        "begin_at": scheduled_at,
        "status": resolve_status(
            None,
            scheduled_at=scheduled_at,
            start_time_unix=start,
            duration=duration,
        ),
        "opponents": opponents,
        "score": [safe_int(m.get("radiant_score")), safe_int(m.get("dire_score"))],
        "picks": None,
        "maps": None,
        "league": {
            "name": opt_str(m.get("league_name")),
            "image_url": opt_str(m.get("league_image")),
        },
        "videogame": {"slug": VIDEOGAME_SLUG},
        "raw": m,
    }


def reproject_scores(match: MatchSummary) -> MatchSummary:
    """Re-run score alignment from the raw payload when it carries team-keyed results."""

    raw = as_dict(match.get("raw"))
    results = raw.get("results")
    source = results if isinstance(results, list) and results else match.get("score")
    aligned = dict(match)
    aligned["score"] = align_scores(match.get("opponents") or [], source)
    return aligned  # type: ignore[return-value]
