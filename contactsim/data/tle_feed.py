"""
Orbital-element feed for the remote constellation (CelesTrak, disk cache, fallback).

 - Fetches a GP group (Iridium NEXT by default) in 3-line TLE format
 - Retries transient failures with a small backoff, rejects HTML/error pages
 - Caches only SUCCESS payloads, with a TTL
 - Converts each TLE to a RemoteSatellite using sgp4's parsed elements
 - load_constellation() falls back to a deterministic 6 x 11 layout when the feed is unreachable
"""

from __future__ import annotations

import json
import logging
import math
import re
import time
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import List, Optional, Tuple

import requests
from sgp4.api import Satrec

from contactsim.config import settings
from contactsim.engine.constellation import walker_members
from contactsim.models.elements import RemoteSatellite
from contactsim.physics.body import EARTH, CentralBody

# -----------------------
# Logging
# -----------------------
logger = logging.getLogger(__name__)

# -----------------------
# Config
# -----------------------
CACHE_FILE = Path(settings.OUTPUT_DIR) / "tle_cache.json"
CACHE_TTL = timedelta(hours=6)

_NAME_ID = re.compile(r"IRIDIUM\s+(\d+)", re.IGNORECASE)

Tle = Tuple[str, str, str]


# -----------------------
# Cache helpers
# -----------------------
def _load_cache(path: Path) -> dict:
    if not path.exists():
        return {}
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
        if isinstance(data, dict):
            return data
        logger.warning("TLE cache content not a dict; starting fresh.")
        return {}
    except (OSError, ValueError):
        logger.warning("TLE cache file unreadable or corrupt, starting fresh.")
        return {}


def _save_cache(path: Path, cache: dict) -> None:
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(cache, indent=2), encoding="utf-8")
    except OSError as e:
        logger.warning("Failed to write TLE cache: %s", e)


def _cache_get(cache: dict, group: str, now: datetime) -> Optional[str]:
    entry = cache.get(group)
    if not isinstance(entry, dict):
        return None
    try:
        ts = datetime.fromisoformat(entry["timestamp"])
    except (KeyError, TypeError, ValueError):
        return None
    if now - ts >= CACHE_TTL:
        return None
    text = entry.get("text")
    if not isinstance(text, str) or not text.strip():
        return None
    logger.info("TLE cache hit for group %s", group)
    return text


def _cache_put_success(path: Path, cache: dict, group: str, now: datetime, text: str) -> None:
    cache[group] = {"timestamp": now.isoformat(), "text": text, "source": "CelesTrak", "status": "ok"}
    _save_cache(path, cache)


# -----------------------
# Small helpers
# -----------------------
def _looks_like_html(text: str) -> bool:
    t = (text or "").lower()
    return ("<html" in t) or ("<!doctype html" in t) or ("</html>" in t)


def _looks_like_celestrak_error(text: str) -> bool:
    t = (text or "").lower()
    needles = ["no gp data", "not found", "invalid query", "forbidden", "access denied"]
    return any(n in t for n in needles)


# -----------------------
# Parsing
# -----------------------
def parse_tle_text(text: str) -> List[Tle]:
    """
    Scan for consecutive '1 ' / '2 ' line pairs. A line right before the pair
    is used as the name; pairs without one get the catalogue number as name.
    """
    lines = [l.strip() for l in (text or "").splitlines() if l.strip()]
    out: List[Tle] = []
    i = 0
    while i < len(lines) - 1:
        if lines[i].startswith("1 ") and lines[i + 1].startswith("2 "):
            name = lines[i - 1] if i > 0 and not lines[i - 1].startswith(("1 ", "2 ")) else f"NORAD-{lines[i][2:7].strip()}"
            out.append((name, lines[i], lines[i + 1]))
            i += 2
        else:
            i += 1
    return out


def remote_from_tle(name: str, line1: str, line2: str, body: CentralBody = EARTH) -> RemoteSatellite:
    """
    Circular-orbit view of a TLE: radius from mean motion, phase = argument of
    perigee + mean anomaly at epoch. Raises ValueError for unusable TLEs.
    """
    sat = Satrec.twoline2rv(line1, line2)
    n_rad_s = sat.no_kozai / 60.0  # rad/min -> rad/s
    if not n_rad_s > 0:
        raise ValueError(f"{name}: non-positive mean motion")
    a = (body.mu_km3_s2 / n_rad_s ** 2) ** (1.0 / 3.0)
    altitude = a - body.radius_km
    if altitude <= 0:
        raise ValueError(f"{name}: derived altitude {altitude:.1f} km is below the surface")

    m = _NAME_ID.search(name)
    sat_id = int(m.group(1)) if m else int(sat.satnum)
    return RemoteSatellite(
        satellite_id=sat_id,
        altitude_km=round(altitude, 1),
        inclination_rad=float(sat.inclo),
        raan_rad=float(sat.nodeo),
        phase_rad=float((sat.argpo + sat.mo) % (2 * math.pi)),
        name=name,
    )


def remotes_from_text(text: str, body: CentralBody = EARTH) -> List[RemoteSatellite]:
    members: List[RemoteSatellite] = []
    seen = set()
    for name, l1, l2 in parse_tle_text(text):
        try:
            member = remote_from_tle(name, l1, l2, body)
        except ValueError as e:
            logger.warning("Skipping TLE: %s", e)
            continue
        if member.satellite_id in seen:
            logger.warning("Skipping duplicate satellite id %s (%s)", member.satellite_id, name)
            continue
        seen.add(member.satellite_id)
        members.append(member)
    return members


# -----------------------
# CelesTrak fetch (retry + html/error detection)
# -----------------------
def fetch_group_text(group: str = settings.IRIDIUM_GROUP,
                     session: Optional[requests.Session] = None,
                     retries: int = settings.FEED_RETRIES,
                     backoff_s: float = 0.6) -> str:
    session = session or requests.Session()
    session.headers.update({
        "User-Agent": "contactsim/1.0",
        "Accept": "text/plain, text/html;q=0.9, */*;q=0.8",
    })
    params = {"GROUP": group, "FORMAT": "TLE"}

    last_exc: Optional[Exception] = None
    for attempt in range(1, int(retries) + 1):
        try:
            resp = session.get(settings.CELESTRAK_GP_URL, params=params, timeout=settings.FEED_TIMEOUT_S)
            resp.raise_for_status()

            ct = (resp.headers.get("Content-Type", "") or "").lower()
            text = resp.text or ""

            if "text/html" in ct or _looks_like_html(text) or _looks_like_celestrak_error(text):
                raise RuntimeError("CelesTrak returned non-TLE content (HTML/error page)")
            if not parse_tle_text(text):
                raise RuntimeError("CelesTrak response holds no TLE line pairs")
            return text

        except requests.HTTPError as he:
            last_exc = he
            status = he.response.status_code if he.response is not None else None
            if status == 404:
                raise RuntimeError(f"CelesTrak: group {group!r} not found (404)") from he

        except (requests.RequestException, RuntimeError) as e:
            last_exc = e

        if attempt < retries:
            time.sleep(backoff_s * attempt)

    raise RuntimeError(f"CelesTrak failed after {retries} attempts for group {group!r}: {last_exc}") from last_exc


# -----------------------
# Fallback
# -----------------------
def fallback_constellation() -> List[RemoteSatellite]:
    """66 Iridium-like members without RAAN / phase; ConstellationLayout.iridium() places them."""
    return walker_members(
        settings.PLANE_COUNT * settings.SATELLITES_PER_PLANE,
        altitude_km=settings.DEFAULT_REMOTE_ALTITUDE_KM,
        inclination_deg=settings.DEFAULT_REMOTE_INCLINATION_DEG,
        name_prefix="IRIDIUM",
    )


# -----------------------
# Public API
# -----------------------
def load_constellation(group: str = settings.IRIDIUM_GROUP,
                       session: Optional[requests.Session] = None,
                       cache_file: Optional[Path] = None,
                       use_cache: bool = True) -> Tuple[List[RemoteSatellite], str]:
    """
    Returns (members, source) where source is "cache", "celestrak" or "fallback".
    Feed problems never raise; they are logged and the fallback is returned.
    """
    path = Path(cache_file) if cache_file is not None else CACHE_FILE
    now = datetime.now(timezone.utc)
    cache = _load_cache(path) if use_cache else {}

    text = _cache_get(cache, group, now) if use_cache else None
    if text is not None:
        members = remotes_from_text(text)
        if members:
            return members, "cache"

    try:
        text = fetch_group_text(group, session=session)
    except RuntimeError as e:
        logger.warning("Orbital-element feed unavailable, using fallback constellation: %s", e)
        return fallback_constellation(), "fallback"

    members = remotes_from_text(text)
    if not members:
        logger.warning("Feed returned no usable TLEs, using fallback constellation")
        return fallback_constellation(), "fallback"

    if use_cache:
        _cache_put_success(path, cache, group, now, text)
    logger.info("Fetched %d members for group %s from CelesTrak", len(members), group)
    return members, "celestrak"
