"""Small TTL caches owned by the services, with an optional JSON file mirror."""
from __future__ import annotations

import json
import os
import re
import threading
import time
from dataclasses import asdict, dataclass
from typing import Any, Callable, Dict, Optional, Protocol

from . import settings
from .config import setup_logger

log = setup_logger(__name__)

Clock = Callable[[], float]

_UNSAFE_KEY_CHARS = re.compile(r"[^a-z0-9_\-]", re.IGNORECASE)


@dataclass(frozen=True)
class CacheEntry:
    stored_at_ms: float
    ttl_seconds: float
    value: Any

    def is_expired(self, now_ms: float) -> bool:
        return now_ms - self.stored_at_ms >= self.ttl_seconds * 1000


class CacheBackend(Protocol):
    def load(self, key: str) -> Optional[CacheEntry]:
        ...

    def store(self, key: str, entry: CacheEntry) -> None:
        ...

    def discard(self, key: str) -> None:
        ...


class MemoryBackend:
    """A thread-safe dict of cache entries."""

    def __init__(self) -> None:
        self._d: Dict[str, CacheEntry] = {}
        self._l = threading.Lock()

    def load(self, key: str) -> Optional[CacheEntry]:
        with self._l:
            return self._d.get(key)

    def store(self, key: str, entry: CacheEntry) -> None:
        with self._l:
            self._d[key] = entry

    def discard(self, key: str) -> None:
        with self._l:
            self._d.pop(key, None)

    def __len__(self) -> int:
        with self._l:
            return len(self._d)


def safe_filename(key: str) -> str:
    return _UNSAFE_KEY_CHARS.sub("_", key) + ".json"


class FileMirrorBackend:
    """
    Memory first, then one JSON file per key under ``directory``.
    The files are a best-effort optimization: every I/O error is logged and ignored.
    """

    def __init__(self, directory: str, memory: Optional[MemoryBackend] = None) -> None:
        self.directory = directory
        self.memory = memory if memory is not None else MemoryBackend()

    def _path(self, key: str) -> str:
        return os.path.join(self.directory, safe_filename(key))

    def load(self, key: str) -> Optional[CacheEntry]:
        entry = self.memory.load(key)
        if entry is not None:
            return entry
        path = self._path(key)
        try:
            with open(path, "r", encoding="utf-8") as fh:
                raw = json.load(fh)
            entry = CacheEntry(
                stored_at_ms=float(raw["stored_at_ms"]),
                ttl_seconds=float(raw["ttl_seconds"]),
                value=raw.get("value"),
            )
        except FileNotFoundError:
            return None
        except (OSError, ValueError, KeyError, TypeError) as exc:
            log.debug("cache_file_read_failed path=%s err=%s", path, exc)
            return None
        self.memory.store(key, entry)
        return entry

    def store(self, key: str, entry: CacheEntry) -> None:
        self.memory.store(key, entry)
        path = self._path(key)
        try:
            os.makedirs(self.directory, exist_ok=True)
            with open(path, "w", encoding="utf-8") as fh:
                json.dump(asdict(entry), fh)
        except (OSError, TypeError, ValueError) as exc:
            log.debug("cache_file_write_failed path=%s err=%s", path, exc)

    def discard(self, key: str) -> None:
        self.memory.discard(key)
        try:
            os.remove(self._path(key))
        except FileNotFoundError:
            pass
        except OSError as exc:
            log.debug("cache_file_remove_failed key=%s err=%s", key, exc)


class TTLCache:
    """
    Keyed cache with a per-entry TTL.

    ``get`` returns ``None`` both for a missing key and for an expired one;
    expired entries are dropped on read. ``set`` always overwrites.
    """

    def __init__(
        self,
        ttl_seconds: float,
        backend: Optional[CacheBackend] = None,
        clock: Clock = time.time,
    ) -> None:
        self.ttl_seconds = ttl_seconds
        self.backend: CacheBackend = backend if backend is not None else MemoryBackend()
        self._clock = clock

    def _now_ms(self) -> float:
        return self._clock() * 1000

    def get(self, key: str) -> Any:
        entry = self.backend.load(key)
        if entry is None:
            return None
        if entry.is_expired(self._now_ms()):
            self.backend.discard(key)
            return None
        return entry.value

    def set(self, key: str, value: Any, ttl_seconds: Optional[float] = None) -> None:
        ttl = self.ttl_seconds if ttl_seconds is None else ttl_seconds
        self.backend.store(key, CacheEntry(stored_at_ms=self._now_ms(), ttl_seconds=ttl, value=value))

    def delete(self, key: str) -> None:
        self.backend.discard(key)


def build_cache(ttl_seconds: float, clock: Clock = time.time) -> TTLCache:
    """Cache wired to the configured backend (memory, or memory + file mirror)."""

    if settings.CACHE_FILE_MIRROR:
        return TTLCache(ttl_seconds, backend=FileMirrorBackend(settings.SIMPLE_CACHE_DIR), clock=clock)
    return TTLCache(ttl_seconds, clock=clock)
