from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from .. import settings
from ..constants import PANDASCORE_TIMEOUT_MS, VIDEOGAME_SLUG, VIDEOGAMES_PAGE_SIZE
from ..errors import APIError
from ..net_retry import request_json
from ..normalizers.matches import normalize_pandascore_match
from ..normalizers.teams import normalize_videogame
from ..ports.matches import MatchDetailPort, MatchesPort, MatchSummary
from ..ports.teams import VideoGame

log = logging.getLogger(__name__)

SOURCE = "pandascore"


class PandaScoreAdapter(MatchesPort, MatchDetailPort):
    """Commercial REST feed. Every call needs a bearer key."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        base: Optional[str] = None,
        timeout_ms: Optional[int] = None,
        session: Optional[Any] = None,
    ) -> None:
        self.api_key = settings.PANDASCORE_API_KEY if api_key is None else api_key
        self.base = (base or settings.PANDASCORE_BASE).rstrip("/")
        self.timeout_ms = timeout_ms or PANDASCORE_TIMEOUT_MS
        self.session = session

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    def _get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        if not self.api_key:
            raise APIError(
                SOURCE,
                "CONFIG_ERROR",
                "Server missing PandaScore API key (PANDASCORE_API_KEY).",
            )
        return request_json(
            "GET",
            f"{self.base}{path}",
            source=SOURCE,
            params=params,
            headers={"Authorization": f"Bearer {self.api_key}", "Accept": "application/json"},
            timeout_ms=self.timeout_ms,
            session=self.session,
            logger=log,
        )

    # -------- MatchesPort --------
    def list_matches(
        self, page: int, per_page: int, status: Optional[str] = None
    ) -> List[MatchSummary]:
        params: Dict[str, Any] = {
            "per_page": per_page,
            "page": page,
            "filter[videogame]": VIDEOGAME_SLUG,
        }
        if status:
            params["filter[status]"] = status
        payload = self._get("/matches", params)
        if not isinstance(payload, list):
            log.warning("pandascore_matches_unexpected_shape type=%s", type(payload).__name__)
            return []
        return [normalize_pandascore_match(m) for m in payload]

    # -------- MatchDetailPort --------
    def get_match(self, match_id: str, params: Optional[Dict[str, str]] = None) -> MatchSummary:
        payload = self._get(f"/matches/{match_id}", dict(params or {}))
        if not isinstance(payload, dict):
            raise APIError(SOURCE, "INVALID_JSON", "PandaScore returned an unexpected match payload")
        return normalize_pandascore_match(payload)

    # -------- catalogue --------
    def list_videogames(self) -> List[VideoGame]:
        payload = self._get("/videogames", {"sort": "name", "per_page": VIDEOGAMES_PAGE_SIZE})
        if not isinstance(payload, list):
            log.warning("pandascore_videogames_unexpected_shape type=%s", type(payload).__name__)
            return []
        return [normalize_videogame(g) for g in payload if isinstance(g, dict)]
