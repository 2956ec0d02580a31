# esports_track/net_retry.py
"""Centralized retry helper for upstream JSON requests (shared across adapters)."""
from __future__ import annotations

import logging
import time
from functools import lru_cache
from typing import Any, Mapping, Optional
from urllib.parse import urlsplit, urlunsplit

import requests

from . import config as config_module
from .config import setup_logger
from .constants import ERROR_BODY_PREVIEW_CHARS, TRANSIENT_STATUS_CODES
from .errors import APIError

_logger = setup_logger(__name__)


def _scrub_url(url: Optional[str]) -> str:
    if not url:
        return ""
    try:
        parts = urlsplit(url)
        # strip querystring for logs
        return urlunsplit((parts.scheme, parts.netloc, parts.path, "", parts.fragment))
    except ValueError:
        return url or ""


def _body_preview(response: Any) -> Optional[str]:
    try:
        text = response.text
    except Exception:  # pragma: no cover - exotic response objects
        return None
    if not text:
        return None
    return str(text)[:ERROR_BODY_PREVIEW_CHARS]


@lru_cache(maxsize=1)
def _get_session() -> requests.Session:
    session = requests.Session()
    session.headers.update({"Accept": "application/json"})
    return session


def backoff_delay_ms(attempt: int, backoff_ms: float) -> float:
    """Delay before the retry that follows ``attempt`` (1-based)."""

    return float(backoff_ms) * (2 ** (attempt - 1))


def request_json(
    method: str,
    url: str,
    *,
    source: str = "upstream",
    params: Optional[Mapping[str, Any]] = None,
    headers: Optional[Mapping[str, str]] = None,
    json_body: Optional[Any] = None,
    timeout_ms: Optional[float] = None,
    retries: Optional[int] = None,
    backoff_ms: Optional[float] = None,
    session: Optional[Any] = None,  # anything with .request(...)
    logger: Optional[logging.Logger] = None,
) -> Any:
    """
    Perform an HTTP request and return the parsed JSON body.

    - Each attempt carries its own timeout.
    - 5xx, 429, network errors and timeouts are retried with exponential backoff.
    - Any other non-2xx is terminal and raised immediately.
    - Raises APIError once the attempts are exhausted.
    """
    timeout_ms = config_module.API_TIMEOUT_MS if timeout_ms is None else timeout_ms
    retries = config_module.API_MAX_RETRIES if retries is None else max(0, int(retries))
    backoff_ms = config_module.API_BACKOFF_MS if backoff_ms is None else backoff_ms
    session_obj = session or _get_session()
    active_logger = logger or _logger
    safe_url = _scrub_url(url)
    attempts = retries + 1

    last_code = "NETWORK_ERROR"
    last_message = f"{source} request failed"
    last_status: Optional[int] = None
    last_details: Optional[str] = None

    for attempt in range(1, attempts + 1):
        try:
            response = session_obj.request(
                method,
                url,
                params=params,
                headers=headers,
                json=json_body,
                timeout=timeout_ms / 1000.0,
            )
        except requests.Timeout as exc:
            last_code, last_message, last_status, last_details = (
                "TIMEOUT",
                f"{source} did not respond within {timeout_ms:.0f}ms",
                None,
                str(exc),
            )
            outcome = "timeout"
        except requests.RequestException as exc:
            last_code, last_message, last_status, last_details = (
                "NETWORK_ERROR",
                f"{source} network error",
                None,
                str(exc),
            )
            outcome = "network_error"
        else:
            status = response.status_code
            if 200 <= status < 300:
                try:
                    payload = response.json()
                except ValueError as exc:
                    active_logger.warning(
                        "upstream source=%s url=%s attempt=%d/%d outcome=invalid_json",
                        source,
                        safe_url,
                        attempt,
                        attempts,
                    )
                    raise APIError(
                        source,
                        "INVALID_JSON",
                        f"{source} returned a non-JSON body",
                        details=_body_preview(response),
                        status=status,
                    ) from exc
                active_logger.debug(
                    "upstream source=%s url=%s attempt=%d/%d outcome=ok status=%d",
                    source,
                    safe_url,
                    attempt,
                    attempts,
                    status,
                )
                return payload

            if status not in TRANSIENT_STATUS_CODES and status < 500:
                active_logger.warning(
                    "upstream source=%s url=%s attempt=%d/%d outcome=rejected status=%d",
                    source,
                    safe_url,
                    attempt,
                    attempts,
                    status,
                )
                raise APIError(
                    source,
                    "HTTP_ERROR",
                    f"{source} responded {status}",
                    details=_body_preview(response),
                    status=status,
                )

            last_code, last_message, last_status, last_details = (
                "HTTP_ERROR",
                f"{source} responded {status}",
                status,
                _body_preview(response),
            )
            outcome = f"transient status={status}"

        if attempt == attempts:
            active_logger.warning(
                "upstream source=%s url=%s attempt=%d/%d outcome=%s giving_up",
                source,
                safe_url,
                attempt,
                attempts,
                outcome,
            )
            break

        delay_ms = backoff_delay_ms(attempt, backoff_ms)
        active_logger.info(
            "upstream source=%s url=%s attempt=%d/%d outcome=%s retry_in_ms=%.0f",
            source,
            safe_url,
            attempt,
            attempts,
            outcome,
            delay_ms,
        )
        time.sleep(delay_ms / 1000.0)

    raise APIError(source, last_code, last_message, details=last_details, status=last_status)


def fetch_json(url: str, *, method: str = "GET", **kwargs: Any) -> Any:
    """Like :func:`request_json` but returns ``None`` instead of raising."""

    try:
        return request_json(method, url, **kwargs)
    except APIError as exc:
        (kwargs.get("logger") or _logger).info(
            "upstream source=%s url=%s failed code=%s",
            exc.source,
            _scrub_url(url),
            exc.code,
        )
        return None


__all__ = ["backoff_delay_ms", "fetch_json", "request_json"]
