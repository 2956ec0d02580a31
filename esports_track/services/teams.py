from __future__ import annotations

import logging
import time
from typing import Any, Callable, Dict, Optional

from ..adapters.opendota import OpenDotaAdapter
from ..cache import TTLCache, build_cache
from ..constants import (
    RANKINGS_CACHE_TTL,
    TEAM_CACHE_TTL,
    TEAM_CARD_MATCH_LIMIT,
    TEAM_DETAIL_MATCH_LIMIT,
)
from ..errors import APIError
from ..utils import run_parallel

log = logging.getLogger(__name__)


class TeamService:
    def __init__(
        self,
        opendota: Optional[OpenDotaAdapter] = None,
        clock: Callable[[], float] = time.time,
        cache: Optional[TTLCache] = None,
    ) -> None:
        self.opendota = opendota or OpenDotaAdapter()
        self._clock = clock
        self.rankings_cache = build_cache(RANKINGS_CACHE_TTL, clock=clock)
        self.cache = cache or build_cache(TEAM_CACHE_TTL, clock=clock)

    def rankings(self) -> Dict[str, Any]:
        cached = self.rankings_cache.get("rankings")
        if cached is not None:
            return cached
        payload = {"rankings": self.opendota.teams()}
        self.rankings_cache.set("rankings", payload)
        return payload

    def team_detail(self, team_id: int) -> Dict[str, Any]:
        """Team profile plus recent matches; the team lookup is required."""

        key = f"team:{team_id}"
        cached = self.cache.get(key)
        if cached is not None:
            return cached

        results = run_parallel({
            "team": lambda: self.opendota.team(team_id),
            "matches": lambda: self.opendota.team_matches(team_id, TEAM_DETAIL_MATCH_LIMIT),
        })

        team = results["team"]
        if isinstance(team, Exception):
            if isinstance(team, APIError):
                raise team
            raise APIError("opendota", "NETWORK_ERROR", "OpenDota team lookup failed", details=str(team)) from team
        if team is None:
            raise APIError("opendota", "HTTP_ERROR", f"OpenDota has no team {team_id}", status=404)

        matches = results["matches"]
        if isinstance(matches, Exception):
            log.warning("team_matches_unavailable team_id=%s err=%s", team_id, matches)
            matches = []

        payload = {"team": team, "recent_matches": matches[:TEAM_DETAIL_MATCH_LIMIT]}
        self.cache.set(key, payload)
        return payload

    def team_card(self, team_id: int) -> Dict[str, Any]:
        """Hover-card payload. Both lookups are optional; this never raises for upstream failures."""

        results = run_parallel({
            "team": lambda: self.opendota.team(team_id),
            "matches": lambda: self.opendota.team_matches(team_id, TEAM_CARD_MATCH_LIMIT),
        })
        team = results["team"]
        matches = results["matches"]
        if isinstance(team, Exception):
            log.info("team_card_team_unavailable team_id=%s err=%s", team_id, team)
            team = None
        if isinstance(matches, Exception):
            log.info("team_card_matches_unavailable team_id=%s err=%s", team_id, matches)
            matches = []
        return {
            "team": team,
            "recentMatches": matches[:TEAM_CARD_MATCH_LIMIT],
            "fetchedAt": int(self._clock() * 1000),
        }
