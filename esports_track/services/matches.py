"""
Multi-provider match aggregation.

Providers are tried as an ordered pipeline of attempts. Each attempt yields a
tagged result (ok / empty / failed); the aggregator then applies the
short-circuit and merge rules:

* PandaScore is exclusive: a non-empty answer is returned as the provider
  paginated it and nothing else is queried.
* Stratz and OpenDota contribute to one merged list which is deduplicated by
  id (first occurrence wins), filtered by status, sorted and capped.
* A failing provider contributes nothing; the pipeline never aborts.
"""
from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, Iterable, List, Optional

from ..adapters.opendota import OpenDotaAdapter
from ..adapters.pandascore import PandaScoreAdapter
from ..adapters.stratz import StratzAdapter
from ..cache import TTLCache, build_cache
from ..constants import (
    MATCH_DETAIL_CACHE_TTL,
    MATCHES_CACHE_TTL,
    OPENDOTA_ENRICH_FACTOR,
    OPENDOTA_ENRICH_MIN_LIMIT,
    OPENDOTA_FILTERED_FACTOR,
    OPENDOTA_FILTERED_MIN_LIMIT,
    STATUS_NOT_STARTED,
    STATUS_RANK,
)
from ..errors import APIError
from ..logging_utils import ProviderFailureLog, warn_provider_skipped
from ..normalizers.matches import reproject_scores
from ..ports.matches import MatchSummary
from ..utils import parse_iso_ms

log = logging.getLogger(__name__)
_failures = ProviderFailureLog(log, window_seconds=60.0)


class AttemptOutcome(str, Enum):
    OK = "ok"
    EMPTY = "empty"
    FAILED = "failed"


@dataclass(frozen=True)
class MatchQuery:
    page: int
    per_page: int
    status: Optional[str] = None

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.per_page

    def cache_key(self) -> str:
        return f"matches:{self.per_page}:{self.page}:{self.status or 'all'}"


@dataclass
class AttemptResult:
    provider: str
    outcome: AttemptOutcome
    matches: List[MatchSummary] = field(default_factory=list)
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.outcome is AttemptOutcome.OK


# fetch(query, earlier_results) -> matches
Fetch = Callable[[MatchQuery, List[AttemptResult]], List[MatchSummary]]


@dataclass(frozen=True)
class ProviderAttempt:
    name: str
    fetch: Fetch
    exclusive: bool = False


# ---- merge helpers ----

def _dedupe_key(match_id: Any) -> Any:
    try:
        hash(match_id)
    except TypeError:
        return repr(match_id)
    return match_id


def dedupe_matches(matches: Iterable[MatchSummary]) -> List[MatchSummary]:
    """One entry per id; the first occurrence wins. Entries without an id are kept."""

    seen = set()
    out: List[MatchSummary] = []
    for m in matches:
        match_id = m.get("id")
        if match_id is None:
            out.append(m)
            continue
        key = _dedupe_key(match_id)
        if key in seen:
            continue
        seen.add(key)
        out.append(m)
    return out


def filter_by_status(matches: Iterable[MatchSummary], status: Optional[str]) -> List[MatchSummary]:
    if not status:
        return list(matches)
    return [m for m in matches if m.get("status") == status]


def _sort_key(match: MatchSummary):
    status = match.get("status")
    rank = STATUS_RANK.get(status, len(STATUS_RANK))
    if status == STATUS_NOT_STARTED:
        ts = parse_iso_ms(match.get("scheduled_at"))
        return (rank, ts is None, ts or 0.0)
    ts = parse_iso_ms(match.get("begin_at"))
    return (rank, ts is None, -(ts or 0.0))


def sort_matches(matches: Iterable[MatchSummary]) -> List[MatchSummary]:
    """
    Upcoming first (soonest first), then running, then finished (most recent first).
    Missing timestamps sort last within their group.
    """
    return sorted(matches, key=_sort_key)


def paginate(matches: List[MatchSummary], page: int, per_page: int) -> List[MatchSummary]:
    start = (page - 1) * per_page
    return matches[start:start + per_page]


def opendota_fetch_limit(query: MatchQuery) -> int:
    if query.status:
        return max(OPENDOTA_FILTERED_MIN_LIMIT, query.per_page * query.page * OPENDOTA_FILTERED_FACTOR)
    return max(OPENDOTA_ENRICH_MIN_LIMIT, query.per_page * query.page * OPENDOTA_ENRICH_FACTOR)


class MatchAggregator:
    def __init__(
        self,
        pandascore: Optional[PandaScoreAdapter] = None,
        stratz: Optional[StratzAdapter] = None,
        opendota: Optional[OpenDotaAdapter] = None,
        clock: Callable[[], float] = time.time,
        cache: Optional[TTLCache] = None,
        detail_cache: Optional[TTLCache] = None,
    ) -> None:
        self.pandascore = pandascore or PandaScoreAdapter()
        self.stratz = stratz or StratzAdapter()
        self.opendota = opendota or OpenDotaAdapter()
        self.cache = cache or build_cache(MATCHES_CACHE_TTL, clock=clock)
        self.detail_cache = detail_cache or build_cache(MATCH_DETAIL_CACHE_TTL, clock=clock)

    def providers(self) -> Dict[str, bool]:
        return {
            "pandascore": bool(self.pandascore.configured),
            "stratz": bool(self.stratz.configured),
            "opendota": bool(self.opendota.configured),
        }

    # -------- pipeline --------
    def attempts(self) -> List[ProviderAttempt]:
        pipeline: List[ProviderAttempt] = []
        if self.pandascore.configured:
            pipeline.append(ProviderAttempt("pandascore", self._fetch_pandascore, exclusive=True))
        else:
            warn_provider_skipped("pandascore", "no_api_key", logger=log)
        if self.stratz.configured:
            pipeline.append(ProviderAttempt("stratz", self._fetch_stratz))
        else:
            warn_provider_skipped("stratz", "no_url", logger=log)
        pipeline.append(ProviderAttempt("opendota", self._fetch_opendota))
        return pipeline

    def _fetch_pandascore(self, query: MatchQuery, _prior: List[AttemptResult]) -> List[MatchSummary]:
        return self.pandascore.list_matches(query.page, query.per_page, query.status)

    def _fetch_stratz(self, query: MatchQuery, _prior: List[AttemptResult]) -> List[MatchSummary]:
        return self.stratz.list_matches(query.page, query.per_page, query.status)

    def _fetch_opendota(self, query: MatchQuery, prior: List[AttemptResult]) -> List[MatchSummary]:
        matches = self.opendota.pro_matches(opendota_fetch_limit(query))
        if query.status:
            kept = filter_by_status(matches, query.status)
        elif any(r.ok for r in prior):
            # enrichment only: upcoming games the other feeds did not list
            kept = filter_by_status(matches, STATUS_NOT_STARTED)
        else:
            kept = matches
        # OpenDota is not paginated upstream, so the page window is cut here
        return paginate(sort_matches(kept), query.page, query.per_page)

    @staticmethod
    def run_attempt(attempt: ProviderAttempt, query: MatchQuery, prior: List[AttemptResult]) -> AttemptResult:
        try:
            matches = attempt.fetch(query, prior)
        except APIError as exc:
            _failures.failed(attempt.name, exc)
            return AttemptResult(attempt.name, AttemptOutcome.FAILED, error=exc)
        except Exception as exc:
            _failures.crashed(attempt.name, exc)
            return AttemptResult(attempt.name, AttemptOutcome.FAILED, error=exc)
        if not matches:
            log.info("matches_provider_empty provider=%s", attempt.name)
            return AttemptResult(attempt.name, AttemptOutcome.EMPTY)
        return AttemptResult(attempt.name, AttemptOutcome.OK, matches=list(matches))

    def list_matches(self, page: int = 1, per_page: int = 12, status: Optional[str] = None) -> List[MatchSummary]:
        query = MatchQuery(page=page, per_page=per_page, status=status)
        key = query.cache_key()
        cached = self.cache.get(key)
        if cached is not None:
            return cached

        results: List[AttemptResult] = []
        for attempt in self.attempts():
            result = self.run_attempt(attempt, query, results)
            results.append(result)
            if attempt.exclusive and result.ok:
                log.info("matches_served provider=%s count=%d", attempt.name, len(result.matches))
                self.cache.set(key, result.matches)
                return result.matches

        if results and all(r.outcome is AttemptOutcome.FAILED for r in results):
            # not cached: an outage must not read as "no matches" for the whole TTL
            log.warning("matches_all_providers_failed key=%s", key)
            return []

        merged: List[MatchSummary] = []
        for r in results:
            merged.extend(r.matches)
        merged = [reproject_scores(m) for m in dedupe_matches(merged)]
        merged = sort_matches(filter_by_status(merged, status))[:per_page]

        log.info(
            "matches_served providers=%s count=%d",
            ",".join(r.provider for r in results if r.ok) or "none",
            len(merged),
        )
        self.cache.set(key, merged)
        return merged

    # -------- detail --------
    def get_match(self, match_id: str, params: Optional[Dict[str, str]] = None) -> MatchSummary:
        """Single-provider lookup; failures propagate as APIError."""

        forwarded = dict(params or {})
        key = f"match:{match_id}:" + "&".join(f"{k}={v}" for k, v in sorted(forwarded.items()))
        cached = self.detail_cache.get(key)
        if cached is not None:
            return cached
        match = self.pandascore.get_match(match_id, forwarded)
        self.detail_cache.set(key, match)
        return match
