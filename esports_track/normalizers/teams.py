from __future__ import annotations

from typing import Any, Optional

from ..ports.teams import TeamMatch, TeamSummary, VideoGame
from ..utils import safe_int
from .fields import as_dict, first_of, keys, opt_str

TEAM_ID = keys("team_id", "teamId", "id")
TEAM_NAME = keys("name", "tag")
TEAM_LOGO = keys("logo_url", "logo")


def _opt_float(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def normalize_team(record: Any) -> TeamSummary:
    t = as_dict(record)
    return {
        "id": safe_int(first_of(t, TEAM_ID)),
        "name": opt_str(first_of(t, TEAM_NAME)),
        "tag": opt_str(t.get("tag")),
        "logo_url": opt_str(first_of(t, TEAM_LOGO)),
        "rating": _opt_float(t.get("rating")),
        "wins": safe_int(t.get("wins")),
        "losses": safe_int(t.get("losses")),
        "last_match_time": safe_int(first_of(t, keys("last_match_time", "tracked_until"))),
    }


def normalize_team_match(record: Any) -> TeamMatch:
    m = as_dict(record)
    radiant_win = m.get("radiant_win")
    radiant = m.get("radiant")
    return {
        "match_id": safe_int(m.get("match_id")),
        "start_time": safe_int(m.get("start_time")),
        "radiant_win": radiant_win if isinstance(radiant_win, bool) else None,
        "radiant": radiant if isinstance(radiant, bool) else None,
        "opposing_team_id": safe_int(m.get("opposing_team_id")),
        "opposing_team_name": opt_str(m.get("opposing_team_name")),
        "score": m.get("score"),
        "raw": m,
    }


def normalize_videogame(record: Any) -> VideoGame:
    g = as_dict(record)
    name = opt_str(g.get("name"))
    return {
        "id": g.get("id"),
        "name": name,
        "slug": str(first_of(g, keys("slug", "name"), "")),
    }
