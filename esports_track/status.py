"""Match lifecycle status: provider vocabulary mapping and timestamp-based inference."""
from __future__ import annotations

import time
from typing import Any, Optional

from .constants import (
    FUTURE_GRACE_SECONDS,
    MATCH_STATUSES,
    PROVIDER_STATUS_ALIASES,
    RUNNING_WINDOW_HOURS,
    STATUS_FINISHED,
    STATUS_NOT_STARTED,
    STATUS_RUNNING,
)
from .utils import parse_iso_ms

_RUNNING_WINDOW_MS = RUNNING_WINDOW_HOURS * 3600 * 1000
_FUTURE_GRACE_MS = FUTURE_GRACE_SECONDS * 1000


def _unix_ms(value: Any) -> Optional[float]:
    if isinstance(value, bool) or not isinstance(value, (int, float)) or not value:
        return None
    return float(value) * 1000


def canonical_status(raw: Any) -> Optional[str]:
    """Map a provider status string onto not_started/running/finished, or None if unknown."""

    if not isinstance(raw, str):
        return None
    value = raw.strip().lower()
    if value in MATCH_STATUSES:
        return value
    return PROVIDER_STATUS_ALIASES.get(value)


def infer_status(
    scheduled_at: Optional[str] = None,
    begin_at: Optional[str] = None,
    start_time_unix: Optional[float] = None,
    duration: Optional[float] = None,
    now: Optional[float] = None,
) -> str:
    """
    Heuristic status for providers that do not report one.

    ``now`` is epoch seconds (defaults to the current time). Rules, first match wins:
    a start time more than 5s ahead is not_started; a positive duration is finished;
    an actual start within the running window is running; everything else is finished.
    """
    now_ms = (time.time() if now is None else now) * 1000

    scheduled_ms = parse_iso_ms(scheduled_at)
    begin_ms = parse_iso_ms(begin_at)
    unix_ms = _unix_ms(start_time_unix)

    for candidate in (scheduled_ms, unix_ms, begin_ms):
        if candidate is not None and candidate > now_ms + _FUTURE_GRACE_MS:
            return STATUS_NOT_STARTED

    if isinstance(duration, (int, float)) and not isinstance(duration, bool) and duration > 0:
        return STATUS_FINISHED

    started_ms = unix_ms if unix_ms is not None else begin_ms
    if started_ms is not None and now_ms - started_ms <= _RUNNING_WINDOW_MS:
        return STATUS_RUNNING

    return STATUS_FINISHED


def resolve_status(explicit: Any, **fields: Any) -> str:
    """Explicit provider status wins; inference only fills the gap."""

    return canonical_status(explicit) or infer_status(**fields)
