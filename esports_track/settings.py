from __future__ import annotations

import os
import tempfile

from dotenv import load_dotenv

from .constants import OPENDOTA_DEFAULT_BASE, PANDASCORE_DEFAULT_BASE

# Load .env from repo root (dotenv auto-walks up from CWD)
load_dotenv()


def _get_bool(name: str, default: bool = False) -> bool:
    val = os.getenv(name)
    if val is None:
        return default
    return str(val).strip().lower() in {"1", "true", "yes", "on"}


def _read_secret_file(path: str | None) -> str | None:
    if not path:
        return None
    try:
        with open(path, "r", encoding="utf-8") as f:
            return f.read().strip() or None
    except OSError:
        return None


# --- PandaScore (commercial feed) ---
PANDASCORE_API_KEY = (
    os.getenv("PANDASCORE_API_KEY")
    or os.getenv("NEXT_PUBLIC_PANDASCORE_API_KEY")
    or _read_secret_file(os.getenv("PANDASCORE_API_KEY_FILE"))
)
PANDASCORE_BASE = os.getenv("PANDASCORE_BASE", PANDASCORE_DEFAULT_BASE).rstrip("/")

# --- Stratz (GraphQL feed) ---
STRATZ_API_URL = os.getenv("STRATZ_API_URL") or None
STRATZ_API_KEY = os.getenv("STRATZ_API_KEY") or None

# --- OpenDota (public feed, no key) ---
OPENDOTA_BASE = os.getenv("OPENDOTA_BASE", OPENDOTA_DEFAULT_BASE).rstrip("/")

# --- Cache file mirror ---
CACHE_FILE_MIRROR = _get_bool("CACHE_FILE_MIRROR", False)
SIMPLE_CACHE_DIR = os.getenv("SIMPLE_CACHE_DIR") or os.path.join(
    tempfile.gettempdir(), "esports-track-cache"
)
