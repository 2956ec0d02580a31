"""OpenDota hero metadata and hero stats normalizers."""
from __future__ import annotations

from typing import Any, Dict, Iterable, Optional, Tuple

from ..constants import HERO_BRACKETS, OPENDOTA_ASSET_BASE
from ..ports.heroes import HeroMeta, HeroSummary
from ..utils import safe_int, safe_num
from .fields import as_dict, chain, first_of, keys, opt_str


def _bracket_sum(suffix: str):
    """Extractor summing the per-rank-bracket counters (``1_pick`` .. ``8_pick``)."""

    def extract(record: Any) -> Optional[float]:
        r = as_dict(record)
        present = [r[f"{n}_{suffix}"] for n in HERO_BRACKETS if f"{n}_{suffix}" in r]
        if not present:
            return None
        return sum(safe_num(v) for v in present)

    return extract


HERO_PICK = chain(*keys("pick", "total_pick", "num_pick", "games"), _bracket_sum("pick"))
HERO_WIN = chain(*keys("win", "total_win", "wins"), _bracket_sum("win"))
HERO_PRO_PICK = keys("pro_pick", "pro_pick_count", "proPick")
HERO_PRO_WIN = keys("pro_win", "pro_win_count", "proWin")
HERO_NAME = keys("name", "localized_name")
META_IMAGE = keys("img_full", "img")
META_ICON = keys("icon_full", "icon")


def _absolute(path: Any) -> Optional[str]:
    text = opt_str(path)
    if text is None:
        return None
    if text.startswith(("http://", "https://")):
        return text
    return f"{OPENDOTA_ASSET_BASE}{text if text.startswith('/') else '/' + text}"


def normalize_hero_meta(record: Any) -> HeroMeta:
    h = as_dict(record)
    img = opt_str(h.get("img"))
    icon = opt_str(h.get("icon"))
    return {
        "id": safe_int(h.get("id")),
        "name": opt_str(h.get("name")),
        "localized_name": opt_str(h.get("localized_name")),
        "img": img,
        "icon": icon,
        "img_full": _absolute(img),
        "icon_full": _absolute(icon),
    }


def win_rate(pick: float, win: float) -> float:
    """Win percentage in [0, 100], rounded to 2 places; 0 when there are no picks."""

    if pick <= 0:
        return 0.0
    return round(min(100.0, max(0.0, win / pick * 100)), 2)


MetaIndex = Tuple[Dict[int, Dict[str, Any]], Dict[str, Dict[str, Any]]]


def index_hero_meta(meta: Iterable[Any]) -> MetaIndex:
    by_id: Dict[int, Dict[str, Any]] = {}
    by_name: Dict[str, Dict[str, Any]] = {}
    for item in meta or []:
        m = as_dict(item)
        if not m:
            continue
        hero_id = safe_int(m.get("id"))
        if hero_id is not None:
            by_id[hero_id] = m
        for field in ("name", "localized_name"):
            label = opt_str(m.get(field))
            if label:
                by_name[label.lower()] = m
    return by_id, by_name


def normalize_hero_stats(record: Any, meta_index: Optional[MetaIndex] = None) -> HeroSummary:
    s = as_dict(record)
    by_id, by_name = meta_index or ({}, {})

    hero_id = safe_int(s.get("id"))
    name = opt_str(first_of(s, HERO_NAME))
    pick = int(safe_num(first_of(s, HERO_PICK, 0)))
    win = int(safe_num(first_of(s, HERO_WIN, 0)))

    meta = by_id.get(hero_id) if hero_id is not None else None
    if meta is None:
        meta = by_name.get((name or "").lower(), {})

    return {
        "id": hero_id,
        "name": name,
        "localized_name": opt_str(s.get("localized_name")),
        "img_full": _absolute(first_of(meta, META_IMAGE)),
        "icon_full": _absolute(first_of(meta, META_ICON)),
        "pick": pick,
        "win": win,
        "win_rate": win_rate(pick, win),
        "pro_pick": int(safe_num(first_of(s, HERO_PRO_PICK, 0))),
        "pro_win": int(safe_num(first_of(s, HERO_PRO_WIN, 0))),
    }
