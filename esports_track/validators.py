from typing import Any, List, Optional, Tuple

from .config import setup_logger
from .constants import DEFAULT_PER_PAGE, MATCH_STATUSES, MAX_PER_PAGE, MIN_PER_PAGE

logger = setup_logger(__name__)


class ValidationWarning(str):
    """Lightweight tag for soft validation warnings."""
    pass


def validate_page(raw: Any, default: int = 1) -> Tuple[int, List[ValidationWarning]]:
    """Coerce to an int >= 1. Return (value, warnings)."""
    if raw is None or raw == "":
        return default, []
    try:
        v = int(raw)
    except (TypeError, ValueError):
        logger.warning("page_invalid: %s", raw)
        return default, [ValidationWarning("page_invalid")]
    if v < 1:
        logger.warning("page_floor: %s -> 1", v)
        return 1, [ValidationWarning("page_floor")]
    return v, []


def validate_per_page(
    raw: Any,
    default: int = DEFAULT_PER_PAGE,
    min_v: int = MIN_PER_PAGE,
    max_v: int = MAX_PER_PAGE,
) -> Tuple[int, List[ValidationWarning]]:
    """Coerce to int and clamp to [min_v,max_v]. Return (value, warnings)."""
    if raw is None or raw == "":
        return default, []
    try:
        v = int(raw)
    except (TypeError, ValueError):
        logger.warning("per_page_invalid: %s", raw)
        return default, [ValidationWarning("per_page_invalid")]
    if v < min_v:
        logger.warning("per_page_floor: %s -> %s", v, min_v)
        return min_v, [ValidationWarning("per_page_floor")]
    if v > max_v:
        logger.warning("per_page_cap: %s -> %s", v, max_v)
        return max_v, [ValidationWarning("per_page_cap")]
    return v, []


def validate_status_filter(raw: Optional[str]) -> Tuple[Optional[str], List[ValidationWarning]]:
    """Return (status_or_None, warnings). Unknown statuses are dropped, not rejected."""
    if not raw:
        return None, []
    s = str(raw).strip().lower()
    if s in MATCH_STATUSES:
        return s, []
    logger.warning("status_filter_unknown: %s", raw)
    return None, [ValidationWarning(f"status_unknown:{s}")]


def validate_team_id(raw: Any) -> Optional[int]:
    """Positive integer team id, or None when it cannot be one."""
    if raw is None or isinstance(raw, bool):
        return None
    try:
        v = int(str(raw).strip())
    except (TypeError, ValueError):
        return None
    return v if v > 0 else None
