"""Log helpers for upstream providers.

A provider that is down fails on every request, so its failures are reported
at most once per window for each ``(provider, code)`` pair. The next line
that does get through carries the number of repeats that were held back.
Permanent conditions such as a missing API key are reported once per process.
"""
from __future__ import annotations

import logging
import threading
import time
from typing import Dict, Optional, Set, Tuple

from .errors import APIError

_FailureKey = Tuple[str, str]


class ProviderFailureLog:
    """Windowed failure reporting keyed by provider and error code."""

    def __init__(
        self,
        logger: logging.Logger,
        window_seconds: float = 60.0,
        clock=time.monotonic,
    ) -> None:
        self._logger = logger
        self._window = float(max(window_seconds, 0))
        self._clock = clock
        self._last_logged: Dict[_FailureKey, float] = {}
        self._held_back: Dict[_FailureKey, int] = {}
        self._lock = threading.Lock()

    def _admit(self, key: _FailureKey) -> Optional[int]:
        """Return the held-back count when a line may be written, else None."""
        now = self._clock()
        with self._lock:
            last = self._last_logged.get(key)
            if last is not None and (now - last) < self._window:
                self._held_back[key] = self._held_back.get(key, 0) + 1
                return None
            self._last_logged[key] = now
            return self._held_back.pop(key, 0)

    def failed(self, provider: str, exc: APIError) -> bool:
        suppressed = self._admit((provider, exc.code))
        if suppressed is None:
            return False
        self._logger.warning(
            "provider_failed provider=%s code=%s status=%s suppressed=%d",
            provider,
            exc.code,
            exc.status,
            suppressed,
        )
        return True

    def crashed(self, provider: str, exc: Exception) -> bool:
        # one window per exception type
        suppressed = self._admit((provider, type(exc).__name__))
        if suppressed is None:
            return False
        self._logger.error(
            "provider_crashed provider=%s err=%s suppressed=%d",
            provider,
            exc,
            suppressed,
            exc_info=exc,
        )
        return True

    def suppressed(self, provider: str, code: str) -> int:
        with self._lock:
            return self._held_back.get((provider, code), 0)


_skip_lock = threading.Lock()
_skipped: Set[Tuple[str, str]] = set()


def warn_provider_skipped(provider: str, reason: str, *, logger: Optional[logging.Logger] = None) -> bool:
    """Warn once per process that ``provider`` is left out of the pipeline."""

    with _skip_lock:
        if (provider, reason) in _skipped:
            return False
        _skipped.add((provider, reason))

    (logger or logging.getLogger(__name__)).warning("provider_skipped provider=%s reason=%s", provider, reason)
    return True


def reset_skip_warnings() -> None:
    """Test helper to forget which skips were already reported."""

    with _skip_lock:
        _skipped.clear()
