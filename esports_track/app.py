from datetime import datetime, timezone

from flask import Flask

from . import settings
from .app_utils import make_error, make_ok
from .config import API_BACKOFF_MS, API_MAX_RETRIES, API_TIMEOUT_MS, setup_logger
from .constants import DEV_SERVER_HOST, DEV_SERVER_PORT
from .routes.api import bp as api_bp

app = Flask(__name__)
app.json.sort_keys = False

logger = setup_logger(__name__)

app.register_blueprint(api_bp)
app.logger.info("api_routes_registered")


def _providers():
    return {
        "pandascore": bool(settings.PANDASCORE_API_KEY),
        "stratz": bool(settings.STRATZ_API_URL),
        "opendota": True,
    }


@app.route("/health", methods=["GET"])
def health():
    return make_ok(
        {
            "ok": True,
            "ts": datetime.now(timezone.utc).isoformat(),
            "providers": _providers(),
        },
        "OK",
        status_code=200,
    )


@app.route("/status", methods=["GET"])
def status():
    """Upstream client tunables currently in effect."""
    return make_ok(
        {
            "timeout_ms": API_TIMEOUT_MS,
            "max_retries": API_MAX_RETRIES,
            "backoff_ms": API_BACKOFF_MS,
            "cache_file_mirror": settings.CACHE_FILE_MIRROR,
        }
    )


@app.errorhandler(404)
def not_found(_exc):
    return make_error("Not found", status_code=404)


if __name__ == "__main__":
    app.run(debug=True, host=DEV_SERVER_HOST, port=DEV_SERVER_PORT)
