"""
Ordered field extractors.

Provider records are read through explicit precedence chains: a tuple of
extractors tried in order, the first non-None value wins. Every extractor
tolerates missing keys, wrong types and short lists.
"""
from __future__ import annotations

from typing import Any, Callable, Iterable, Optional, Tuple

Extractor = Callable[[Any], Any]
Chain = Tuple[Extractor, ...]


def at(*path: Any) -> Extractor:
    """Extractor following dict keys (str) and list indices (int)."""

    def extract(record: Any) -> Any:
        node = record
        for step in path:
            if isinstance(step, int):
                if not isinstance(node, (list, tuple)) or not -len(node) <= step < len(node):
                    return None
                node = node[step]
            else:
                if not isinstance(node, dict):
                    return None
                node = node.get(step)
            if node is None:
                return None
        return node

    extract.__name__ = "at_" + "_".join(str(p) for p in path)
    return extract


def const(value: Any) -> Extractor:
    return lambda _record: value


def first_of(record: Any, chain: Iterable[Extractor], default: Any = None) -> Any:
    for extractor in chain:
        try:
            value = extractor(record)
        except (TypeError, ValueError, AttributeError, KeyError, IndexError):
            value = None
        if value is not None:
            return value
    return default


def as_dict(value: Any) -> dict:
    return value if isinstance(value, dict) else {}


def as_list(value: Any) -> list:
    if isinstance(value, list):
        return value
    if isinstance(value, dict):
        # common GraphQL/REST wrappers: {"data": [...]} or {"nodes": [...]}
        inner = value.get("data") or value.get("nodes")
        return inner if isinstance(inner, list) else []
    return []


def opt_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def chain(*extractors: Extractor) -> Chain:
    return tuple(extractors)


def keys(*names: str) -> Chain:
    """Chain of top-level keys, in precedence order."""

    return tuple(at(name) for name in names)


__all__ = [
    "Chain",
    "Extractor",
    "as_dict",
    "as_list",
    "at",
    "chain",
    "const",
    "first_of",
    "keys",
    "opt_str",
]
