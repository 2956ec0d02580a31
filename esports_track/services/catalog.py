from __future__ import annotations

import time
from typing import Any, Callable, Dict, Optional

from ..adapters.pandascore import PandaScoreAdapter
from ..cache import TTLCache, build_cache
from ..constants import VIDEOGAMES_CACHE_TTL


class CatalogService:
    """PandaScore's videogame catalogue, sorted by name."""

    def __init__(
        self,
        pandascore: Optional[PandaScoreAdapter] = None,
        clock: Callable[[], float] = time.time,
        cache: Optional[TTLCache] = None,
    ) -> None:
        self.pandascore = pandascore or PandaScoreAdapter()
        self.cache = cache or build_cache(VIDEOGAMES_CACHE_TTL, clock=clock)

    def list_videogames(self) -> Dict[str, Any]:
        cached = self.cache.get("videogames")
        if cached is not None:
            return cached
        games = sorted(self.pandascore.list_videogames(), key=lambda g: (g.get("name") or "").lower())
        payload = {"games": games}
        self.cache.set("videogames", payload)
        return payload
