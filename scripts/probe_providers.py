"""Developer-only provider probe.

Calls each configured upstream once and reports whether it answered.
OpenDota needs no key and is always probed; PandaScore and Stratz are
probed only when their settings are present. An optional OpenDota team id
also checks the team endpoints.

Usage::

    python -m scripts.probe_providers [--team-id 8599101]
"""
from __future__ import annotations

import os
import sys
from typing import Optional

import requests
from dotenv import find_dotenv, load_dotenv

DEFAULT_PANDASCORE_BASE = "https://api.pandascore.co"
DEFAULT_OPENDOTA_BASE = "https://api.opendota.com/api"
TIMEOUT = 20

STRATZ_PROBE_QUERY = 'query Probe { matches(limit: 1, offset: 0, videogameSlug: "dota2") { id } }'


def _load_env() -> None:
    path = find_dotenv(usecwd=True)
    if path:
        load_dotenv(path)


def _pandascore_key() -> Optional[str]:
    key = os.getenv("PANDASCORE_API_KEY") or os.getenv("NEXT_PUBLIC_PANDASCORE_API_KEY")
    if key:
        return key
    key_file = os.getenv("PANDASCORE_API_KEY_FILE")
    if key_file and os.path.exists(key_file):
        with open(key_file, "r", encoding="utf-8") as handle:
            return handle.read().strip() or None
    return None


def _report(label: str, response: requests.Response) -> bool:
    if response.status_code == 200:
        try:
            payload = response.json()
        except ValueError:
            print(f"{label} answered non-JSON ✗")
            return False
        count = len(payload) if isinstance(payload, list) else "n/a"
        print(f"{label} visible ✓ (items: {count})")
        return True
    print(f"{label} invisible ✗ ({response.status_code})")
    return False


def probe_opendota(*, base: str, team_id: Optional[int] = None) -> bool:
    paths = ["/proMatches", "/heroes"]
    if team_id is not None:
        paths += [f"/teams/{team_id}", f"/teams/{team_id}/matches"]
    ok = True
    for path in paths:
        try:
            response = requests.get(f"{base}{path}", timeout=TIMEOUT)
        except requests.RequestException as exc:  # pragma: no cover - network failure.
            print(f"opendota {path} request failed ✗ ({exc})")
            ok = False
            continue
        ok = _report(f"opendota {path}", response) and ok
    return ok


def probe_pandascore(*, base: str, key: str) -> bool:
    try:
        response = requests.get(
            f"{base}/matches",
            params={"per_page": 1, "filter[videogame]": "dota2"},
            headers={"Authorization": f"Bearer {key}", "Accept": "application/json"},
            timeout=TIMEOUT,
        )
    except requests.RequestException as exc:  # pragma: no cover - network failure.
        print(f"pandascore request failed ✗ ({exc})")
        return False
    return _report("pandascore /matches", response)


def probe_stratz(*, url: str, key: Optional[str]) -> bool:
    headers = {"Content-Type": "application/json"}
    if key:
        headers["Authorization"] = f"Bearer {key}"
    try:
        response = requests.post(url, json={"query": STRATZ_PROBE_QUERY}, headers=headers, timeout=TIMEOUT)
    except requests.RequestException as exc:  # pragma: no cover - network failure.
        print(f"stratz request failed ✗ ({exc})")
        return False
    return _report("stratz graphql", response)


def _team_id_arg(argv: list[str]) -> Optional[int]:
    for i, arg in enumerate(argv):
        value = None
        if arg == "--team-id" and i + 1 < len(argv):
            value = argv[i + 1]
        elif arg.startswith("--team-id="):
            value = arg.split("=", 1)[1]
        if value is not None:
            return int(value)
    return None


def main(argv: list[str] | None = None) -> int:
    argv = list(sys.argv[1:] if argv is None else argv)
    _load_env()
    try:
        team_id = _team_id_arg(argv)
    except ValueError:
        print("Usage: python -m scripts.probe_providers [--team-id <id>]", file=sys.stderr)
        return 2

    key = _pandascore_key()
    if key:
        probe_pandascore(base=os.getenv("PANDASCORE_BASE", DEFAULT_PANDASCORE_BASE).rstrip("/"), key=key)
    else:
        print("pandascore skipped (no PANDASCORE_API_KEY)")

    stratz_url = os.getenv("STRATZ_API_URL")
    if stratz_url:
        probe_stratz(url=stratz_url, key=os.getenv("STRATZ_API_KEY"))
    else:
        print("stratz skipped (no STRATZ_API_URL)")

    opendota_ok = probe_opendota(
        base=os.getenv("OPENDOTA_BASE", DEFAULT_OPENDOTA_BASE).rstrip("/"),
        team_id=team_id,
    )
    return 0 if opendota_ok else 1


if __name__ == "__main__":  # pragma: no cover - manual execution.
    sys.exit(main())
