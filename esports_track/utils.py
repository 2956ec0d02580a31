"""
Utility functions for the esports-track API
Shared helpers used across normalizers and services
"""
from __future__ import annotations

import math
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Mapping, Optional

ISO = "%Y-%m-%dT%H:%M:%SZ"


def to_iso_utc(dt: datetime) -> str:
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    else:
        dt = dt.astimezone(timezone.utc)
    return dt.strftime(ISO)


def iso_from_unix(seconds: Any) -> Optional[str]:
    """ISO-8601 UTC string for a unix timestamp, or None when it is missing or unusable."""

    if isinstance(seconds, bool) or not isinstance(seconds, (int, float)) or not seconds:
        return None
    try:
        return to_iso_utc(datetime.fromtimestamp(seconds, tz=timezone.utc))
    except (OverflowError, OSError, ValueError):
        return None


def parse_iso_ms(value: Any) -> Optional[float]:
    """Epoch milliseconds for an ISO-8601 string; None when absent or unparseable."""

    if not isinstance(value, str) or not value.strip():
        return None
    try:
        dt = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    except ValueError:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.timestamp() * 1000


def safe_int(value: Any) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError, OverflowError):
        return None


def safe_num(value: Any) -> float:
    """Finite float or 0."""

    if isinstance(value, bool):
        return 0.0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    return number if math.isfinite(number) else 0.0


def run_parallel(calls: Mapping[str, Callable[[], Any]]) -> Dict[str, Any]:
    """
    Run independent lookups concurrently and join on all of them.

    Each result is either the call's return value or the exception it raised;
    a failing call never cancels its siblings.
    """
    if not calls:
        return {}
    results: Dict[str, Any] = {}
    with ThreadPoolExecutor(max_workers=len(calls)) as pool:
        futures = {name: pool.submit(fn) for name, fn in calls.items()}
        for name, future in futures.items():
            try:
                results[name] = future.result()
            except Exception as exc:
                results[name] = exc
    return results
