from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from .. import settings
from ..constants import OPENDOTA_LIST_TIMEOUT_MS, OPENDOTA_TIMEOUT_MS
from ..errors import APIError
from ..net_retry import request_json
from ..normalizers.heroes import normalize_hero_meta
from ..normalizers.matches import normalize_opendota_pro_match
from ..normalizers.teams import normalize_team, normalize_team_match
from ..ports.heroes import HeroesPort, HeroMeta
from ..ports.matches import MatchSummary
from ..ports.teams import TeamMatch, TeamsPort, TeamSummary

log = logging.getLogger(__name__)

SOURCE = "opendota"


def _as_rows(payload: Any, what: str) -> List[Dict[str, Any]]:
    if not isinstance(payload, list):
        log.warning("opendota_unexpected_shape what=%s type=%s", what, type(payload).__name__)
        return []
    return [row for row in payload if isinstance(row, dict)]


class OpenDotaAdapter(HeroesPort, TeamsPort):
    """Public community feed. No key; always available as the last resort."""

    configured = True

    def __init__(
        self,
        base: Optional[str] = None,
        timeout_ms: Optional[int] = None,
        list_timeout_ms: Optional[int] = None,
        session: Optional[Any] = None,
    ) -> None:
        self.base = (base or settings.OPENDOTA_BASE).rstrip("/")
        self.timeout_ms = timeout_ms or OPENDOTA_TIMEOUT_MS
        self.list_timeout_ms = list_timeout_ms or OPENDOTA_LIST_TIMEOUT_MS
        self.session = session

    def _get(self, path: str, params: Optional[Dict[str, Any]] = None, timeout_ms: Optional[int] = None) -> Any:
        return request_json(
            "GET",
            f"{self.base}{path}",
            source=SOURCE,
            params=params,
            timeout_ms=timeout_ms or self.timeout_ms,
            session=self.session,
            logger=log,
        )

    # -------- matches --------
    def pro_matches(self, limit: int) -> List[MatchSummary]:
        payload = self._get("/proMatches", {"limit": limit}, timeout_ms=self.list_timeout_ms)
        if not isinstance(payload, list):
            # a non-list body is a failure for the aggregator, not an empty feed
            raise APIError(SOURCE, "INVALID_JSON", "OpenDota proMatches returned a non-list body")
        return [normalize_opendota_pro_match(m) for m in payload if isinstance(m, dict)]

    # -------- HeroesPort --------
    def heroes(self) -> List[HeroMeta]:
        return [normalize_hero_meta(h) for h in _as_rows(self._get("/heroes"), "heroes")]

    def hero_stats(self) -> List[Dict[str, Any]]:
        return _as_rows(self._get("/heroStats"), "heroStats")

    # -------- TeamsPort --------
    def teams(self) -> List[TeamSummary]:
        return [normalize_team(t) for t in _as_rows(self._get("/teams"), "teams")]

    def team(self, team_id: int) -> Optional[TeamSummary]:
        payload = self._get(f"/teams/{team_id}")
        if not isinstance(payload, dict) or not payload:
            return None
        return normalize_team(payload)

    def team_matches(self, team_id: int, limit: int) -> List[TeamMatch]:
        rows = _as_rows(self._get(f"/teams/{team_id}/matches", {"limit": limit}), "team_matches")
        return [normalize_team_match(m) for m in rows[:limit]]
