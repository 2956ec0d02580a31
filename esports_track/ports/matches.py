from typing import Any, Dict, List, Optional, TypedDict


class Opponent(TypedDict):
    id: Optional[Any]
    name: Optional[str]
    acronym: Optional[str]
    image_url: Optional[str]


class League(TypedDict):
    name: Optional[str]
    image_url: Optional[str]


class VideoGameRef(TypedDict):
    slug: str


class MatchSummary(TypedDict):
    id: Optional[Any]              # provider id, dedupe key
    name: Optional[str]            # "A vs B" when the provider has none
    scheduled_at: Optional[str]    # ISO8601 UTC
    begin_at: Optional[str]        # ISO8601 UTC
    status: str                    # "not_started" | "running" | "finished"
    opponents: List[Opponent]      # at most two, positional
    score: List[Optional[int]]     # always two, aligned to opponents
    picks: Optional[Any]
    maps: Optional[Any]
    league: League
    videogame: VideoGameRef
    raw: Dict[str, Any]


class MatchesPort:
    def list_matches(
        self, page: int, per_page: int, status: Optional[str] = None
    ) -> List[MatchSummary]: ...


class MatchDetailPort:
    def get_match(self, match_id: str, params: Optional[Dict[str, str]] = None) -> MatchSummary: ...
