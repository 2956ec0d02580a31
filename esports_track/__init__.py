"""Dota 2 live-scores API over PandaScore, Stratz and OpenDota."""
import logging
import os

__version__ = "0.1.0"

if not logging.getLogger().handlers:
    level = os.getenv("LOG_LEVEL", "INFO").upper()
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

# per-connection chatter from the HTTP stack
for _noisy in ("urllib3", "requests"):
    logging.getLogger(_noisy).setLevel(logging.WARNING)
