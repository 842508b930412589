"""Keeps a ProgressEngine's state durable in the local cache and the remote store.

The local cache is written synchronously after every mutation. When a player
is signed in, the remote store is also written, debounced so a burst of
mutations collapses into one trailing write. The remote store is blocking, so
its calls run in the default executor.
"""

import asyncio
import logging

from . import local_store
from .auth import AuthState
from .config import SYNC_DEBOUNCE_SECONDS
from .interfaces import LocalCache, RemoteStore
from .models import UserStats, GameSettings, LeaderboardEntry
from .progress import ProgressEngine

logger = logging.getLogger(__name__)


class PersistenceSynchronizer:
    """Loads and saves one engine's stats/settings across identity changes."""

    def __init__(self, engine: ProgressEngine, cache: LocalCache, remote: RemoteStore | None,
                 auth: AuthState, debounce_seconds: float = SYNC_DEBOUNCE_SECONDS):
        self.engine = engine
        self.cache = cache
        self.remote = remote
        self.auth = auth
        self.debounce_seconds = debounce_seconds
        # Identity the current state was loaded for; None = guest
        self._initialized_user_id: str | None = None
        self._pending: asyncio.Task | None = None
        self._pending_snapshot: tuple[str, dict, dict] | None = None
        self._unsubscribe = engine.subscribe(self.persist)

    @property
    def has_pending_write(self) -> bool:
        return self._pending is not None and not self._pending.done()

    async def _run(self, func, *args):
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, func, *args)

    async def _load_remote(self, method: str, user_id: str) -> dict | None:
        if self.remote is None:
            return None
        try:
            return await self._run(getattr(self.remote, method), user_id)
        except Exception as e:
            # Treated as "no remote data yet"
            logger.error(f"Remote load failed for {user_id}: {e}")
            return None

    async def initialize(self) -> bool:
        """Load state for the current identity into the engine.

        Returns False if nothing was loaded (auth still loading, or the
        identity changed while the remote load was in flight).
        """
        if self.auth.loading:
            return False
        user_id = self.auth.user_id

        if user_id:
            # Signed in: remote data over clean defaults, never the local cache
            stats_data, settings_data = await asyncio.gather(
                self._load_remote('load_stats', user_id),
                self._load_remote('load_settings', user_id),
            )
            if self.auth.user_id != user_id:
                logger.info(f"Identity changed while loading {user_id}, discarding load")
                return False
            try:
                stats = UserStats.from_dict(stats_data) if stats_data else UserStats()
            except (KeyError, TypeError, ValueError, AttributeError) as e:
                logger.error(f"Corrupt remote stats for {user_id}, using defaults: {e}")
                stats = UserStats()
            settings = GameSettings.from_dict(settings_data) if settings_data else GameSettings()
            logger.info(f"Loaded remote progress for {user_id} (found={stats_data is not None})")
        elif self._initialized_user_id:
            # Just signed out: wipe the previous player's cached progress
            stats = UserStats()
            settings = GameSettings()
            local_store.save_stats(self.cache, stats)
            local_store.save_settings(self.cache, settings)
            logger.info(f"Signed out {self._initialized_user_id}, reset local progress")
        else:
            stats = local_store.load_stats(self.cache)
            settings = local_store.load_settings(self.cache)

        self._initialized_user_id = user_id
        self.engine.load(stats, settings)
        return True

    async def on_identity_change(self) -> bool:
        """Drop any stale pending write and reload for the new identity."""
        self.cancel_pending()
        return await self.initialize()

    def persist(self, engine: ProgressEngine = None) -> None:
        """Write current state out. Subscribed to every engine mutation."""
        if not self.engine.is_loaded:
            return
        user_id = self.auth.user_id
        if user_id != self._initialized_user_id:
            # Identity changed but state not reloaded yet
            self.cancel_pending()
            return

        local_store.save_stats(self.cache, self.engine.stats)
        local_store.save_settings(self.cache, self.engine.settings)

        if user_id and self.remote is not None:
            self._schedule_remote_write(user_id)

    def _schedule_remote_write(self, user_id: str) -> None:
        self.cancel_pending()
        snapshot = (user_id, self.engine.stats.to_dict(), self.engine.settings.to_dict())
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.warning(f"No running event loop, skipping remote save for {user_id}")
            return
        self._pending_snapshot = snapshot
        self._pending = loop.create_task(self._debounced_write(snapshot))

    def cancel_pending(self) -> None:
        """Cancel a scheduled remote write without sending it."""
        if self._pending is not None and not self._pending.done():
            self._pending.cancel()
        self._pending = None
        self._pending_snapshot = None

    async def _debounced_write(self, snapshot: tuple[str, dict, dict]) -> None:
        await asyncio.sleep(self.debounce_seconds)
        # Past this point the write is no longer cancelled by new mutations
        self._pending = None
        self._pending_snapshot = None
        user_id = snapshot[0]
        if self.auth.user_id != user_id:
            logger.info(f"Dropping remote save for {user_id}: identity changed")
            return
        await self._write_remote(*snapshot)

    async def _write_remote(self, user_id: str, stats: dict, settings: dict) -> None:
        try:
            await asyncio.gather(
                self._run(self.remote.save_stats, user_id, stats),
                self._run(self.remote.save_settings, user_id, settings),
            )
            logger.debug(f"Saved remote progress for {user_id}")
        except Exception as e:
            # Not retried; the next mutation re-sends the full state
            logger.error(f"Remote save failed for {user_id}: {e}")

    async def flush(self) -> None:
        """Send a pending remote write now instead of waiting for the debounce."""
        snapshot = self._pending_snapshot
        if snapshot is None or not self.has_pending_write:
            return
        self.cancel_pending()
        if self.auth.user_id == snapshot[0]:
            await self._write_remote(*snapshot)

    async def close(self) -> None:
        """Stop following the engine, flushing any pending remote write."""
        self._unsubscribe()
        await self.flush()

    async def record_leaderboard_entry(self, entry: LeaderboardEntry) -> None:
        """Add a finished round to the local board and, when signed in, the global one."""
        local_store.save_leaderboard_entry(self.cache, entry)
        user_id = self.auth.user_id
        if user_id and self.remote is not None:
            try:
                await self._run(self.remote.insert_leaderboard_entry, user_id, entry.to_dict())
            except Exception as e:
                logger.error(f"Leaderboard insert failed for {user_id}: {e}")

    def load_local_leaderboard(self) -> list[LeaderboardEntry]:
        return local_store.load_leaderboard(self.cache)

    async def load_global_leaderboard(self) -> list[LeaderboardEntry]:
        if self.remote is None:
            return []
        try:
            rows = await self._run(self.remote.load_global_leaderboard)
        except Exception as e:
            logger.error(f"Global leaderboard load failed: {e}")
            return []
        return [LeaderboardEntry.from_dict(row) for row in rows or []]
