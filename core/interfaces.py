"""Abstract base classes for dependency injection."""

from abc import ABC, abstractmethod


class LocalCache(ABC):
    """Fast, always-available key/value blob store on the player's device."""

    @abstractmethod
    def get(self, key: str) -> str | None:
        """Return the stored blob for key, or None if absent."""
        pass

    @abstractmethod
    def set(self, key: str, blob: str) -> None:
        """Store a blob under key. May raise if the device storage is unavailable."""
        pass


class RemoteStore(ABC):
    """Slower remote database keyed by user identity."""

    @abstractmethod
    def load_stats(self, user_id: str) -> dict | None:
        """Load stored stats for a user. Returns None if the user has none."""
        pass

    @abstractmethod
    def save_stats(self, user_id: str, stats: dict) -> None:
        """Upsert stats for a user (last write wins)."""
        pass

    @abstractmethod
    def load_settings(self, user_id: str) -> dict | None:
        """Load stored settings for a user. Returns None if the user has none."""
        pass

    @abstractmethod
    def save_settings(self, user_id: str, settings: dict) -> None:
        """Upsert settings for a user (last write wins)."""
        pass

    @abstractmethod
    def insert_leaderboard_entry(self, user_id: str, entry: dict) -> None:
        """Append a {name, score, date, mode} entry to the global leaderboard."""
        pass

    @abstractmethod
    def load_global_leaderboard(self, limit: int = 50) -> list[dict]:
        """Top entries by score, highest first."""
        pass

    @abstractmethod
    def user_exists(self, user_id: str) -> bool:
        """Check if an account exists."""
        pass

    @abstractmethod
    def create_user(self, user_id: str, password: str) -> bool:
        """Create an account with a hashed password. Returns False if it already exists."""
        pass

    @abstractmethod
    def verify_password(self, user_id: str, password: str) -> bool:
        """Verify a password for a user. Returns True if it matches."""
        pass
