"""File-based storage implementations."""

import hashlib
import json
import logging
import os
import re

from core.config import LEADERBOARD_SIZE
from core.interfaces import LocalCache, RemoteStore

logger = logging.getLogger(__name__)


def hash_password(password: str) -> str:
    """Hash a password using SHA256."""
    return hashlib.sha256(password.encode()).hexdigest()


def _safe_name(value: str) -> str:
    """Make an id usable as part of a file name."""
    return re.sub(r'[^A-Za-z0-9_.-]', '_', value)


def _default_state_dir() -> str:
    # Project root is one level up from server/
    project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
    return os.environ.get('SCRIPTURE_STATE_DIR', os.path.join(project_root, 'state'))


class FileCache(LocalCache):
    """Device-local cache: one JSON blob file per key under a device directory."""

    def __init__(self, device_id: str = "default", state_dir: str = None):
        self.state_dir = state_dir or _default_state_dir()
        self.cache_dir = os.path.join(self.state_dir, 'devices', _safe_name(device_id))

    def _get_file(self, key: str) -> str:
        return os.path.join(self.cache_dir, f'{_safe_name(key)}.json')

    def get(self, key: str) -> str | None:
        path = self._get_file(key)
        if not os.path.exists(path):
            return None
        with open(path, 'r', encoding='utf-8') as f:
            return f.read()

    def set(self, key: str, blob: str) -> None:
        os.makedirs(self.cache_dir, exist_ok=True)
        path = self._get_file(key)
        tmp_path = path + '.tmp'
        with open(tmp_path, 'w', encoding='utf-8') as f:
            f.write(blob)
        os.replace(tmp_path, path)


class FileRemoteStore(RemoteStore):
    """Remote store kept in JSON files, for running without PostgreSQL."""

    def __init__(self, state_dir: str = None):
        self.state_dir = state_dir or _default_state_dir()
        self.users_dir = os.path.join(self.state_dir, 'users')

    def _get_user_file(self, user_id: str, kind: str) -> str:
        return os.path.join(self.users_dir, f'{kind}_{_safe_name(user_id)}.json')

    def _load_json(self, path: str, default=None):
        if os.path.exists(path):
            try:
                with open(path, 'r', encoding='utf-8') as f:
                    return json.load(f)
            except Exception as e:
                logger.error(f"Error reading {path}: {e}")
                return default
        return default

    def _save_json(self, path: str, data) -> None:
        os.makedirs(os.path.dirname(path), exist_ok=True)
        with open(path, 'w', encoding='utf-8') as f:
            json.dump(data, f, indent=2)

    def load_stats(self, user_id: str) -> dict | None:
        return self._load_json(self._get_user_file(user_id, 'stats'))

    def save_stats(self, user_id: str, stats: dict) -> None:
        self._save_json(self._get_user_file(user_id, 'stats'), stats)

    def load_settings(self, user_id: str) -> dict | None:
        return self._load_json(self._get_user_file(user_id, 'settings'))

    def save_settings(self, user_id: str, settings: dict) -> None:
        self._save_json(self._get_user_file(user_id, 'settings'), settings)

    def _get_leaderboard_file(self) -> str:
        return os.path.join(self.state_dir, 'leaderboard.json')

    def insert_leaderboard_entry(self, user_id: str, entry: dict) -> None:
        board = self._load_json(self._get_leaderboard_file(), [])
        board.append({**entry, 'user_id': user_id})
        self._save_json(self._get_leaderboard_file(), board)

    def load_global_leaderboard(self, limit: int = LEADERBOARD_SIZE) -> list[dict]:
        board = self._load_json(self._get_leaderboard_file(), [])
        board = sorted(board, key=lambda e: e.get('score', 0), reverse=True)[:limit]
        return [
            {'name': e['name'], 'score': e['score'], 'mode': e.get('mode'), 'date': e.get('date')}
            for e in board
        ]

    def _get_credentials_file(self) -> str:
        return os.path.join(self.state_dir, 'credentials.json')

    def user_exists(self, user_id: str) -> bool:
        credentials = self._load_json(self._get_credentials_file(), {})
        return user_id in credentials

    def create_user(self, user_id: str, password: str) -> bool:
        credentials = self._load_json(self._get_credentials_file(), {})
        if user_id in credentials:
            return False
        credentials[user_id] = hash_password(password)
        self._save_json(self._get_credentials_file(), credentials)
        return True

    def verify_password(self, user_id: str, password: str) -> bool:
        credentials = self._load_json(self._get_credentials_file(), {})
        stored_hash = credentials.get(user_id)
        if stored_hash:
            return stored_hash == hash_password(password)
        return False

    def list_users(self) -> list[str]:
        """List all existing user IDs."""
        return sorted(self._load_json(self._get_credentials_file(), {}).keys())
