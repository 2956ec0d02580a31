"""
Tunables for the esports-track API.
Centralizes provider URLs, TTLs and aggregation knobs so the services stay readable.
"""

# --- Upstream endpoints ---
PANDASCORE_DEFAULT_BASE = "https://api.pandascore.co"
OPENDOTA_DEFAULT_BASE = "https://api.opendota.com/api"
OPENDOTA_ASSET_BASE = "https://api.opendota.com"

# The only title this deployment serves.
VIDEOGAME_SLUG = "dota2"

# --- Upstream client defaults ---
DEFAULT_TIMEOUT_MS = 10_000
DEFAULT_MAX_RETRIES = 2
DEFAULT_BACKOFF_MS = 250
TRANSIENT_STATUS_CODES = frozenset({429, 500, 502, 503, 504})
ERROR_BODY_PREVIEW_CHARS = 500

# Per-provider timeouts (ms)
PANDASCORE_TIMEOUT_MS = 12_000
STRATZ_TIMEOUT_MS = 12_000
OPENDOTA_LIST_TIMEOUT_MS = 20_000
OPENDOTA_TIMEOUT_MS = 10_000

# --- Status inference ---
STATUS_NOT_STARTED = "not_started"
STATUS_RUNNING = "running"
STATUS_FINISHED = "finished"
MATCH_STATUSES = (STATUS_NOT_STARTED, STATUS_RUNNING, STATUS_FINISHED)
STATUS_RANK = {STATUS_NOT_STARTED: 0, STATUS_RUNNING: 1, STATUS_FINISHED: 2}

RUNNING_WINDOW_HOURS = 6
FUTURE_GRACE_SECONDS = 5

# Provider vocabulary that is not already canonical
PROVIDER_STATUS_ALIASES = {
    "canceled": STATUS_FINISHED,
    "cancelled": STATUS_FINISHED,
    "postponed": STATUS_NOT_STARTED,
}

# --- Pagination ---
DEFAULT_PER_PAGE = 12
MIN_PER_PAGE = 1
MAX_PER_PAGE = 100

# OpenDota has no status filter, so it is over-fetched and filtered in-process.
OPENDOTA_FILTERED_MIN_LIMIT = 80
OPENDOTA_FILTERED_FACTOR = 4
OPENDOTA_ENRICH_MIN_LIMIT = 40
OPENDOTA_ENRICH_FACTOR = 2

TEAM_DETAIL_MATCH_LIMIT = 10
TEAM_CARD_MATCH_LIMIT = 5

VIDEOGAMES_PAGE_SIZE = 200

# --- Cache TTLs (seconds) ---
MATCHES_CACHE_TTL = 20
MATCH_DETAIL_CACHE_TTL = 20
HEROES_CACHE_TTL = 60 * 60
HERO_STATS_CACHE_TTL = 30 * 60
RANKINGS_CACHE_TTL = 5 * 60
TEAM_CACHE_TTL = 60
VIDEOGAMES_CACHE_TTL = 60

# --- HTTP cache headers ---
RANKINGS_CACHE_CONTROL = "s-maxage=300"
TEAM_CACHE_CONTROL = "s-maxage=60, stale-while-revalidate=120"
VIDEOGAMES_CACHE_CONTROL = "s-maxage=60, stale-while-revalidate=120"

# --- Hero stats ---
HERO_BRACKETS = range(1, 9)

# --- Dev server ---
DEV_SERVER_HOST = "0.0.0.0"
DEV_SERVER_PORT = 5000
