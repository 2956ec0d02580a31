from typing import Any, List, Optional, TypedDict


class HeroMeta(TypedDict):
    id: Optional[int]
    name: Optional[str]
    localized_name: Optional[str]
    img: Optional[str]
    icon: Optional[str]
    img_full: Optional[str]        # absolute URL
    icon_full: Optional[str]       # absolute URL


class HeroSummary(TypedDict):
    id: Optional[int]
    name: Optional[str]
    localized_name: Optional[str]
    img_full: Optional[str]
    icon_full: Optional[str]
    pick: int
    win: int
    win_rate: float                # percentage in [0, 100]
    pro_pick: int
    pro_win: int


class HeroesPort:
    def heroes(self) -> List[HeroMeta]: ...

    def hero_stats(self) -> List[Any]: ...
