from __future__ import annotations

import logging
from typing import Optional

from flask import Blueprint, request

from ..app_utils import make_error, make_ok
from ..constants import RANKINGS_CACHE_CONTROL, TEAM_CACHE_CONTROL, VIDEOGAMES_CACHE_CONTROL
from ..errors import APIError
from ..services.catalog import CatalogService
from ..services.heroes import HeroService
from ..services.matches import MatchAggregator
from ..services.teams import TeamService
from ..validators import validate_page, validate_per_page, validate_status_filter, validate_team_id

bp = Blueprint("api", __name__, url_prefix="/api")
log = logging.getLogger(__name__)

_matches_singleton = None
_heroes_singleton = None
_teams_singleton = None
_catalog_singleton = None


def _get_matches_service() -> MatchAggregator:
    global _matches_singleton
    if _matches_singleton is None:
        _matches_singleton = MatchAggregator()
        log.info("matches service providers=%s", _matches_singleton.providers())
    return _matches_singleton


def _get_heroes_service() -> HeroService:
    global _heroes_singleton
    if _heroes_singleton is None:
        _heroes_singleton = HeroService()
    return _heroes_singleton


def _get_teams_service() -> TeamService:
    global _teams_singleton
    if _teams_singleton is None:
        _teams_singleton = TeamService()
    return _teams_singleton


def _get_catalog_service() -> CatalogService:
    global _catalog_singleton
    if _catalog_singleton is None:
        _catalog_singleton = CatalogService()
    return _catalog_singleton


def _upstream_status(exc: APIError, *, forward_4xx: bool = False, timeout_status: int = 502) -> int:
    if exc.code == "CONFIG_ERROR":
        return 500
    if exc.code == "TIMEOUT":
        return timeout_status
    if forward_4xx and exc.status is not None and 400 <= exc.status < 500:
        return exc.status
    return 502


def _unexpected(route: str, exc: Exception):
    log.exception("api_unexpected_error route=%s err=%s", route, exc)
    return make_error("Internal server error", str(exc) or type(exc).__name__, status_code=500)


@bp.get("/matches")
def matches():
    page, page_warnings = validate_page(request.args.get("page"))
    per_page_raw: Optional[str] = request.args.get("per_page")
    if per_page_raw is None:
        per_page_raw = request.args.get("limit")
    per_page, per_page_warnings = validate_per_page(per_page_raw)
    status_raw = request.args.get("filter[status]") or request.args.get("status")
    status, status_warnings = validate_status_filter(status_raw)
    warnings = page_warnings + per_page_warnings + status_warnings

    log.info(
        "api_matches page=%d per_page=%d status=%s warnings=%s",
        page,
        per_page,
        status,
        ",".join(warnings) or "-",
    )
    try:
        items = _get_matches_service().list_matches(page=page, per_page=per_page, status=status)
    except Exception as exc:
        return _unexpected("matches", exc)
    return make_ok(items)


@bp.get("/matches/<match_id>")
def match_detail(match_id: str):
    try:
        match = _get_matches_service().get_match(match_id, request.args.to_dict())
    except APIError as exc:
        log.warning("api_match_detail_failed id=%s code=%s status=%s", match_id, exc.code, exc.status)
        return make_error(exc, status_code=_upstream_status(exc, forward_4xx=True))
    except Exception as exc:
        return _unexpected("match_detail", exc)
    return make_ok(match)


@bp.get("/heroes")
def heroes():
    try:
        items = _get_heroes_service().list_heroes()
    except APIError as exc:
        if exc.code == "TIMEOUT":
            return make_error("Upstream timeout", status_code=504)
        return make_error("OpenDota upstream error", exc.details, status_code=_upstream_status(exc))
    except Exception as exc:
        return _unexpected("heroes", exc)
    return make_ok(items)


@bp.get("/hero-stats")
def hero_stats():
    try:
        items = _get_heroes_service().hero_stats()
    except APIError as exc:
        return make_error("OpenDota upstream error", exc.details, status_code=_upstream_status(exc))
    except Exception as exc:
        return _unexpected("hero_stats", exc)
    return make_ok(items)


@bp.get("/rankings")
def rankings():
    try:
        payload = _get_teams_service().rankings()
    except APIError as exc:
        return make_error(exc.message, status_code=_upstream_status(exc))
    except Exception as exc:
        return _unexpected("rankings", exc)
    return make_ok(payload, headers={"Cache-Control": RANKINGS_CACHE_CONTROL})


@bp.get("/team/<team_id>")
def team_detail(team_id: str):
    tid = validate_team_id(team_id)
    if tid is None:
        return make_error("Invalid team id", status_code=400)
    try:
        payload = _get_teams_service().team_detail(tid)
    except APIError as exc:
        log.warning("api_team_failed team_id=%s code=%s status=%s", tid, exc.code, exc.status)
        status = 500 if exc.code == "CONFIG_ERROR" else 502
        return make_error("Failed to fetch team from OpenDota", exc.details, status_code=status)
    except Exception as exc:
        return _unexpected("team_detail", exc)
    return make_ok(payload, headers={"Cache-Control": TEAM_CACHE_CONTROL})


@bp.get("/teams/<team_id>")
def team_card(team_id: str):
    tid = validate_team_id(team_id)
    if tid is None:
        return make_error("Invalid team id", status_code=400)
    return make_ok(_get_teams_service().team_card(tid))


@bp.get("/videogames")
def videogames():
    try:
        payload = _get_catalog_service().list_videogames()
    except APIError as exc:
        return make_error(exc, status_code=_upstream_status(exc))
    except Exception as exc:
        return _unexpected("videogames", exc)
    return make_ok(payload, headers={"Cache-Control": VIDEOGAMES_CACHE_CONTROL})
