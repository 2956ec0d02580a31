from typing import Any, Dict, Mapping, Optional

from flask import jsonify, request

from .errors import APIError

# The React pages consume /api/* bodies unwrapped; everything else gets the envelope.
_RAW_PREFIXES = ("/api/",)


def _is_raw_request() -> bool:
    try:
        path = request.path  # type: ignore[attr-defined]
    except RuntimeError:
        # Outside of a request context (e.g., during CLI usage or tests),
        # default to wrapped responses.
        return False
    return bool(path) and any(path.startswith(prefix) for prefix in _RAW_PREFIXES)


def _with_headers(response, headers: Optional[Mapping[str, str]]):
    for name, value in (headers or {}).items():
        response.headers[name] = value
    return response


def make_ok(
    data: Optional[Any] = None,
    message: str = "success",
    status_code: int = 200,
    headers: Optional[Mapping[str, str]] = None,
):
    """Return a success response: the raw data under /api, the envelope elsewhere."""
    if _is_raw_request():
        payload: Any = data if data is not None else {}
    else:
        payload = {"status": "ok", "message": message, "data": data}
    return _with_headers(jsonify(payload), headers), status_code


def make_error(error: Any, details: Optional[Any] = None, status_code: int = 500):
    """Return an error response with the ``{error, details?}`` body."""
    if isinstance(error, APIError):
        if details is None:
            details = error.details
        error = error.message

    payload: Dict[str, Any] = {"error": error}
    if details is not None:
        payload["details"] = details
    if not _is_raw_request():
        payload = {"status": "error", **payload}
    return jsonify(payload), status_code
