from __future__ import annotations

import logging
import time
from typing import Callable, List, Optional

from ..adapters.opendota import OpenDotaAdapter
from ..cache import TTLCache, build_cache
from ..constants import HERO_STATS_CACHE_TTL, HEROES_CACHE_TTL
from ..errors import APIError
from ..normalizers.heroes import index_hero_meta, normalize_hero_stats
from ..ports.heroes import HeroMeta, HeroSummary
from ..utils import run_parallel

log = logging.getLogger(__name__)

_HEROES_KEY = "heroes"
_HERO_STATS_KEY = "hero-stats"


class HeroService:
    """Hero metadata and pick/win stats, both from OpenDota."""

    def __init__(
        self,
        opendota: Optional[OpenDotaAdapter] = None,
        clock: Callable[[], float] = time.time,
        heroes_cache: Optional[TTLCache] = None,
        stats_cache: Optional[TTLCache] = None,
    ) -> None:
        self.opendota = opendota or OpenDotaAdapter()
        self.heroes_cache = heroes_cache or build_cache(HEROES_CACHE_TTL, clock=clock)
        self.stats_cache = stats_cache or build_cache(HERO_STATS_CACHE_TTL, clock=clock)

    def list_heroes(self) -> List[HeroMeta]:
        cached = self.heroes_cache.get(_HEROES_KEY)
        if cached is not None:
            return cached
        heroes = self.opendota.heroes()
        self.heroes_cache.set(_HEROES_KEY, heroes)
        return heroes

    def hero_stats(self) -> List[HeroSummary]:
        cached = self.stats_cache.get(_HERO_STATS_KEY)
        if cached is not None:
            return cached

        results = run_parallel({"stats": self.opendota.hero_stats, "meta": self.list_heroes})

        stats = results["stats"]
        if isinstance(stats, Exception):
            if isinstance(stats, APIError):
                raise stats
            raise APIError("opendota", "NETWORK_ERROR", "OpenDota heroStats lookup failed", details=str(stats)) from stats

        meta = results["meta"]
        if isinstance(meta, Exception):
            log.warning("hero_meta_unavailable err=%s", meta)
            meta = []

        index = index_hero_meta(meta)
        summaries = [normalize_hero_stats(s, index) for s in stats]
        summaries.sort(key=lambda h: h["pick"], reverse=True)
        log.info("hero_stats_built count=%d meta=%d", len(summaries), len(meta))
        self.stats_cache.set(_HERO_STATS_KEY, summaries)
        return summaries
