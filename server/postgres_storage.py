"""PostgreSQL remote store implementation."""

import hashlib
import json
import logging
import os
import psycopg2
from psycopg2.extras import RealDictCursor

from core.config import LEADERBOARD_SIZE
from core.interfaces import RemoteStore

logger = logging.getLogger(__name__)


def hash_password(password: str) -> str:
    """Hash a password using SHA256."""
    return hashlib.sha256(password.encode()).hexdigest()


class PostgresStore(RemoteStore):
    """PostgreSQL-backed remote store, one JSONB row per user and aggregate."""

    def __init__(self, db_url: str = None):
        self.db_url = db_url or os.environ.get(
            'DATABASE_URL',
            'postgresql://localhost:5432/scripture'
        )
        self._conn = None
        self._initialized = False

    @property
    def conn(self):
        """Lazy connection initialization."""
        if self._conn is None or self._conn.closed:
            self._conn = psycopg2.connect(self.db_url)
            if not self._initialized:
                self._init_db()
                self._initialized = True
        return self._conn

    def _init_db(self):
        """Create tables if they don't exist."""
        with self._conn.cursor() as cur:
            cur.execute("""
                CREATE TABLE IF NOT EXISTS user_stats (
                    user_id VARCHAR(255) PRIMARY KEY,
                    stats JSONB NOT NULL,
                    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                )
            """)
            cur.execute("""
                CREATE TABLE IF NOT EXISTS user_settings (
                    user_id VARCHAR(255) PRIMARY KEY,
                    settings JSONB NOT NULL,
                    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                )
            """)
            cur.execute("""
                CREATE TABLE IF NOT EXISTS leaderboard (
                    id SERIAL PRIMARY KEY,
                    user_id VARCHAR(255) NOT NULL,
                    name VARCHAR(255) NOT NULL,
                    score INTEGER NOT NULL,
                    mode VARCHAR(50) NOT NULL,
                    date VARCHAR(32) NOT NULL,
                    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                )
            """)
            cur.execute("""
                CREATE INDEX IF NOT EXISTS idx_leaderboard_score ON leaderboard(score DESC)
            """)
            cur.execute("""
                CREATE TABLE IF NOT EXISTS user_credentials (
                    user_id VARCHAR(255) PRIMARY KEY,
                    password_hash VARCHAR(64) NOT NULL,
                    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                )
            """)
        self._conn.commit()

    def close(self):
        """Close the database connection."""
        if self._conn and not self._conn.closed:
            self._conn.close()

    def _load_blob(self, table: str, column: str, user_id: str) -> dict | None:
        try:
            with self.conn.cursor(cursor_factory=RealDictCursor) as cur:
                cur.execute(
                    f"SELECT {column} FROM {table} WHERE user_id = %s",
                    (user_id,)
                )
                row = cur.fetchone()
                if row:
                    return row[column]
                return None
        except Exception as e:
            logger.error(f"Error loading {table} for {user_id}: {e}")
            return None

    def _save_blob(self, table: str, column: str, user_id: str, data: dict) -> None:
        try:
            with self.conn.cursor() as cur:
                cur.execute(f"""
                    INSERT INTO {table} (user_id, {column}, updated_at)
                    VALUES (%s, %s, CURRENT_TIMESTAMP)
                    ON CONFLICT (user_id)
                    DO UPDATE SET {column} = EXCLUDED.{column}, updated_at = CURRENT_TIMESTAMP
                """, (user_id, json.dumps(data)))
            self.conn.commit()
        except Exception as e:
            logger.error(f"Error saving {table} for {user_id}: {e}")
            self.conn.rollback()
            raise

    def load_stats(self, user_id: str) -> dict | None:
        return self._load_blob('user_stats', 'stats', user_id)

    def save_stats(self, user_id: str, stats: dict) -> None:
        self._save_blob('user_stats', 'stats', user_id, stats)

    def load_settings(self, user_id: str) -> dict | None:
        return self._load_blob('user_settings', 'settings', user_id)

    def save_settings(self, user_id: str, settings: dict) -> None:
        self._save_blob('user_settings', 'settings', user_id, settings)

    def insert_leaderboard_entry(self, user_id: str, entry: dict) -> None:
        try:
            with self.conn.cursor() as cur:
                cur.execute("""
                    INSERT INTO leaderboard (user_id, name, score, mode, date)
                    VALUES (%s, %s, %s, %s, %s)
                """, (user_id, entry['name'], entry['score'], entry['mode'], entry['date']))
            self.conn.commit()
        except Exception as e:
            logger.error(f"Error inserting leaderboard entry: {e}")
            self.conn.rollback()
            raise

    def load_global_leaderboard(self, limit: int = LEADERBOARD_SIZE) -> list[dict]:
        try:
            with self.conn.cursor(cursor_factory=RealDictCursor) as cur:
                cur.execute("""
                    SELECT name, score, mode, date FROM leaderboard
                    ORDER BY score DESC LIMIT %s
                """, (limit,))
                return [dict(row) for row in cur.fetchall()]
        except Exception as e:
            logger.error(f"Error loading leaderboard: {e}")
            return []

    def user_exists(self, user_id: str) -> bool:
        """Check if a user exists."""
        try:
            with self.conn.cursor() as cur:
                cur.execute(
                    "SELECT 1 FROM user_credentials WHERE user_id = %s",
                    (user_id,)
                )
                return cur.fetchone() is not None
        except Exception as e:
            logger.error(f"Error checking user: {e}")
            return False

    def create_user(self, user_id: str, password: str) -> bool:
        """Create an account. Returns False if the user id is taken."""
        try:
            with self.conn.cursor() as cur:
                cur.execute("""
                    INSERT INTO user_credentials (user_id, password_hash)
                    VALUES (%s, %s)
                    ON CONFLICT (user_id) DO NOTHING
                """, (user_id, hash_password(password)))
                created = cur.rowcount > 0
            self.conn.commit()
            return created
        except Exception as e:
            logger.error(f"Error creating user: {e}")
            self.conn.rollback()
            return False

    def verify_password(self, user_id: str, password: str) -> bool:
        """Verify a password for a user."""
        try:
            with self.conn.cursor() as cur:
                cur.execute(
                    "SELECT password_hash FROM user_credentials WHERE user_id = %s",
                    (user_id,)
                )
                row = cur.fetchone()
                if row and row[0]:
                    return row[0] == hash_password(password)
                return False
        except Exception as e:
            logger.error(f"Error verifying password: {e}")
            return False
