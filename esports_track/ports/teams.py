from typing import Any, Dict, List, Optional, TypedDict


class TeamSummary(TypedDict):
    id: Optional[int]
    name: Optional[str]
    tag: Optional[str]
    logo_url: Optional[str]
    rating: Optional[float]
    wins: Optional[int]
    losses: Optional[int]
    last_match_time: Optional[int]


class TeamMatch(TypedDict):
    match_id: Optional[int]
    start_time: Optional[int]
    radiant_win: Optional[bool]
    radiant: Optional[bool]
    opposing_team_id: Optional[int]
    opposing_team_name: Optional[str]
    score: Optional[Any]
    raw: Dict[str, Any]


class VideoGame(TypedDict):
    id: Optional[Any]
    name: Optional[str]
    slug: str


class TeamsPort:
    def teams(self) -> List[TeamSummary]: ...

    def team(self, team_id: int) -> Optional[TeamSummary]: ...

    def team_matches(self, team_id: int, limit: int) -> List[TeamMatch]: ...
