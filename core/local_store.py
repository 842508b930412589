"""Load/save helpers for progress blobs kept in the device-local cache.

Reads never fail: a missing, unreadable or corrupt blob falls back to the
defaults. Writes are best effort and swallow storage errors.
"""

import json
import logging

from .config import STORAGE_KEYS, LEADERBOARD_SIZE
from .interfaces import LocalCache
from .models import UserStats, GameSettings, LeaderboardEntry

logger = logging.getLogger(__name__)


def _read_json(cache: LocalCache, key: str):
    try:
        raw = cache.get(key)
        if not raw:
            return None
        return json.loads(raw)
    except Exception as e:
        logger.warning(f"Unreadable cache entry {key}: {e}")
        return None


def _write_json(cache: LocalCache, key: str, value) -> bool:
    try:
        cache.set(key, json.dumps(value))
        return True
    except Exception as e:
        # Storage full or unavailable
        logger.warning(f"Could not write cache entry {key}: {e}")
        return False


def load_stats(cache: LocalCache) -> UserStats:
    data = _read_json(cache, STORAGE_KEYS['stats'])
    if not isinstance(data, dict):
        return UserStats()
    try:
        return UserStats.from_dict(data)
    except Exception as e:
        logger.warning(f"Corrupt cached stats, using defaults: {e}")
        return UserStats()


def save_stats(cache: LocalCache, stats: UserStats) -> bool:
    return _write_json(cache, STORAGE_KEYS['stats'], stats.to_dict())


def load_settings(cache: LocalCache) -> GameSettings:
    data = _read_json(cache, STORAGE_KEYS['settings'])
    if not isinstance(data, dict):
        return GameSettings()
    return GameSettings.from_dict(data)


def save_settings(cache: LocalCache, settings: GameSettings) -> bool:
    return _write_json(cache, STORAGE_KEYS['settings'], settings.to_dict())


def load_leaderboard(cache: LocalCache) -> list[LeaderboardEntry]:
    data = _read_json(cache, STORAGE_KEYS['leaderboard'])
    if not isinstance(data, list):
        return []
    entries = []
    for item in data:
        try:
            entries.append(LeaderboardEntry.from_dict(item))
        except (KeyError, TypeError, ValueError):
            continue
    return entries


def save_leaderboard_entry(cache: LocalCache, entry: LeaderboardEntry) -> bool:
    """Add an entry, keeping the board sorted by score and capped in size."""
    board = load_leaderboard(cache)
    board.append(entry)
    board.sort(key=lambda e: e.score, reverse=True)
    trimmed = board[:LEADERBOARD_SIZE]
    return _write_json(cache, STORAGE_KEYS['leaderboard'], [e.to_dict() for e in trimmed])
