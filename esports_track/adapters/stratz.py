from __future__ import annotations

import logging
from typing import Any, List, Optional

from .. import settings
from ..constants import ERROR_BODY_PREVIEW_CHARS, STRATZ_TIMEOUT_MS
from ..errors import APIError
from ..net_retry import request_json
from ..normalizers.fields import as_dict, at, first_of
from ..normalizers.matches import normalize_stratz_match
from ..ports.matches import MatchesPort, MatchSummary

log = logging.getLogger(__name__)

SOURCE = "stratz"

RECENT_MATCHES_QUERY = """
query RecentMatches($limit: Int!, $offset: Int!) {
  matches(limit: $limit, offset: $offset, videogameSlug: "dota2") {
    id
    name
    startAt
    scheduledAt
    status
    league { id name imageUrl }
    teams { id name acronym logoUrl }
    scoreA
    scoreB
    draft { picks bans }
    maps { mapName results { teamAScore teamBScore } }
    duration
  }
}
"""

_NODES = (at("data", "matches"), at("matches"))


class StratzAdapter(MatchesPort):
    """GraphQL feed. The URL is required; the bearer key is optional."""

    def __init__(
        self,
        url: Optional[str] = None,
        api_key: Optional[str] = None,
        timeout_ms: Optional[int] = None,
        session: Optional[Any] = None,
    ) -> None:
        self.url = settings.STRATZ_API_URL if url is None else url
        self.api_key = settings.STRATZ_API_KEY if api_key is None else api_key
        self.timeout_ms = timeout_ms or STRATZ_TIMEOUT_MS
        self.session = session

    @property
    def configured(self) -> bool:
        return bool(self.url)

    def list_matches(
        self, page: int, per_page: int, status: Optional[str] = None
    ) -> List[MatchSummary]:
        # Stratz has no status filter; the aggregator filters the normalized list.
        if not self.url:
            raise APIError(SOURCE, "CONFIG_ERROR", "STRATZ_API_URL is not configured")
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        body = {
            "query": RECENT_MATCHES_QUERY,
            "variables": {"limit": per_page, "offset": (page - 1) * per_page},
        }
        payload = request_json(
            "POST",
            self.url,
            source=SOURCE,
            headers=headers,
            json_body=body,
            timeout_ms=self.timeout_ms,
            session=self.session,
            logger=log,
        )
        errors = as_dict(payload).get("errors")
        nodes = first_of(payload, _NODES)
        if errors:
            log.warning("stratz_graphql_errors count=%s", len(errors) if isinstance(errors, list) else 1)
            # partial data is still usable; errors with no node list are a failure
            if not isinstance(nodes, list):
                raise APIError(
                    SOURCE,
                    "GRAPHQL_ERROR",
                    "Stratz GraphQL returned errors",
                    details=str(errors)[:ERROR_BODY_PREVIEW_CHARS],
                )
        if nodes is None:
            return []
        if not isinstance(nodes, list):
            log.warning("stratz_matches_unexpected_shape type=%s", type(nodes).__name__)
            return []
        return [normalize_stratz_match(n) for n in nodes]
