"""Tests for PersistenceSynchronizer loading and debounced saving."""

import asyncio
import json
import unittest

from core.auth import AuthState
from core.config import STORAGE_KEYS
from core.models import LeaderboardEntry
from core.progress import ProgressEngine
from core.sync import PersistenceSynchronizer

from mocks import MockLocalCache, MockRemoteStore

DEBOUNCE = 0.02
SETTLE = 0.15


class IdentitySwitchingRemote(MockRemoteStore):
    """Remote whose stats load races with a sign-in of another player."""

    def __init__(self, auth: AuthState, switch_to: str):
        super().__init__()
        self.auth = auth
        self.switch_to = switch_to

    def load_stats(self, user_id: str) -> dict | None:
        self.auth.user_id = self.switch_to
        return super().load_stats(user_id)


class SyncTestCase(unittest.IsolatedAsyncioTestCase):

    def setUp(self):
        self.engine = ProgressEngine()
        self.cache = MockLocalCache()
        self.remote = MockRemoteStore()
        self.auth = AuthState()
        self.sync = PersistenceSynchronizer(self.engine, self.cache, self.remote, self.auth,
                                            debounce_seconds=DEBOUNCE)

    async def asyncTearDown(self):
        self.sync.cancel_pending()

    def cached_stats(self) -> dict:
        return json.loads(self.cache.data[STORAGE_KEYS['stats']])


class TestInitialize(SyncTestCase):
    """Tests for the three load paths."""

    async def test_guest_loads_local_cache(self):
        self.cache.data[STORAGE_KEYS['stats']] = json.dumps({'total_score': 70})
        self.cache.data[STORAGE_KEYS['settings']] = json.dumps({'difficulty': 'advanced'})
        self.assertTrue(await self.sync.initialize())
        self.assertTrue(self.engine.is_loaded)
        self.assertEqual(self.engine.stats.total_score, 70)
        self.assertEqual(self.engine.settings.difficulty, 'advanced')
        self.assertEqual(self.remote.load_calls, [])

    async def test_corrupt_cache_uses_defaults(self):
        self.cache.data[STORAGE_KEYS['stats']] = '{not json'
        self.assertTrue(await self.sync.initialize())
        self.assertEqual(self.engine.stats.total_score, 0)
        self.assertEqual(self.engine.stats.level, 1)

    async def test_signed_in_loads_remote_not_cache(self):
        self.cache.data[STORAGE_KEYS['stats']] = json.dumps({'total_score': 70})
        self.remote.stats['ruth'] = {'total_score': 500, 'total_xp': 400, 'level': 3}
        self.auth.user_id = 'ruth'
        self.assertTrue(await self.sync.initialize())
        self.assertEqual(self.engine.stats.total_score, 500)
        self.assertEqual(self.engine.stats.level, 3)

    async def test_signed_in_without_remote_data_gets_defaults(self):
        self.cache.data[STORAGE_KEYS['stats']] = json.dumps({'total_score': 70})
        self.auth.user_id = 'ruth'
        await self.sync.initialize()
        self.assertEqual(self.engine.stats.total_score, 0)

    async def test_remote_failure_treated_as_absent(self):
        self.remote.fail_loads = True
        self.auth.user_id = 'ruth'
        with self.assertLogs('core.sync', level='ERROR'):
            self.assertTrue(await self.sync.initialize())
        self.assertTrue(self.engine.is_loaded)
        self.assertEqual(self.engine.stats.total_score, 0)

    async def test_waits_while_auth_loading(self):
        self.auth.loading = True
        self.assertFalse(await self.sync.initialize())
        self.assertFalse(self.engine.is_loaded)

    async def test_identity_change_during_load_discarded(self):
        self.auth.user_id = 'ruth'
        remote = IdentitySwitchingRemote(self.auth, 'boaz')
        remote.stats['ruth'] = {'total_score': 500}
        sync = PersistenceSynchronizer(self.engine, self.cache, remote, self.auth,
                                       debounce_seconds=DEBOUNCE)
        self.assertFalse(await sync.initialize())
        self.assertFalse(self.engine.is_loaded)

    async def test_sign_out_resets_progress(self):
        self.remote.stats['ruth'] = {'total_score': 500}
        self.auth.user_id = 'ruth'
        await self.sync.initialize()

        self.auth.user_id = None
        self.assertTrue(await self.sync.on_identity_change())
        self.assertEqual(self.engine.stats.total_score, 0)
        self.assertEqual(self.cached_stats()['total_score'], 0)
        self.assertFalse(self.sync.has_pending_write)


class TestPersist(SyncTestCase):
    """Tests for local writes and the debounced remote write."""

    async def test_nothing_written_before_load(self):
        self.engine.set_difficulty('advanced')
        self.assertEqual(self.cache.set_calls, [])

    async def test_guest_writes_local_only(self):
        await self.sync.initialize()
        self.engine.complete_round(300, 3, 3, 0, 0)
        self.assertEqual(self.cached_stats()['total_score'], 300)
        self.assertFalse(self.sync.has_pending_write)
        await asyncio.sleep(SETTLE)
        self.assertEqual(self.remote.save_stats_calls, [])

    async def test_burst_collapses_into_one_remote_write(self):
        self.auth.user_id = 'ruth'
        await self.sync.initialize()
        self.engine.complete_round(100, 1, 1, 0, 0)
        self.engine.complete_round(200, 2, 2, 0, 0)
        self.engine.set_difficulty('intermediate')
        self.assertTrue(self.sync.has_pending_write)

        await asyncio.sleep(SETTLE)
        self.assertEqual(len(self.remote.save_stats_calls), 1)
        user_id, saved = self.remote.save_stats_calls[0]
        self.assertEqual(user_id, 'ruth')
        self.assertEqual(saved['total_score'], 300)
        self.assertEqual(self.remote.settings['ruth']['difficulty'], 'intermediate')

    async def test_write_dropped_after_identity_change(self):
        self.auth.user_id = 'ruth'
        await self.sync.initialize()
        self.engine.complete_round(100, 1, 1, 0, 0)
        self.auth.user_id = 'boaz'
        await asyncio.sleep(SETTLE)
        self.assertEqual(self.remote.save_stats_calls, [])

    async def test_mutation_before_reload_not_persisted(self):
        self.auth.user_id = 'ruth'
        await self.sync.initialize()
        writes = len(self.cache.set_calls)
        self.auth.user_id = None
        self.engine.complete_round(100, 1, 1, 0, 0)
        self.assertEqual(len(self.cache.set_calls), writes)
        self.assertFalse(self.sync.has_pending_write)

    async def test_close_flushes_pending_write(self):
        self.auth.user_id = 'ruth'
        await self.sync.initialize()
        self.engine.complete_round(100, 1, 1, 0, 0)
        await self.sync.close()
        self.assertEqual(len(self.remote.save_stats_calls), 1)
        self.assertFalse(self.sync.has_pending_write)

        # No longer following the engine
        self.engine.complete_round(100, 1, 1, 0, 0)
        self.assertFalse(self.sync.has_pending_write)

    async def test_remote_save_failure_logged(self):
        self.auth.user_id = 'ruth'
        await self.sync.initialize()
        self.remote.fail_saves = True
        with self.assertLogs('core.sync', level='ERROR'):
            self.engine.complete_round(100, 1, 1, 0, 0)
            await asyncio.sleep(SETTLE)
        self.assertEqual(self.cached_stats()['total_score'], 100)

    async def test_local_write_failure_keeps_state(self):
        await self.sync.initialize()
        self.cache.fail_writes = True
        self.engine.complete_round(100, 1, 1, 0, 0)
        self.assertEqual(self.engine.stats.total_score, 100)


class TestLeaderboard(SyncTestCase):
    """Tests for leaderboard recording."""

    async def test_guest_entry_local_only(self):
        await self.sync.initialize()
        await self.sync.record_leaderboard_entry(LeaderboardEntry('Guest', 300, '2024-05-02', 'matching'))
        self.assertEqual([e.score for e in self.sync.load_local_leaderboard()], [300])
        self.assertEqual(self.remote.leaderboard, [])

    async def test_signed_in_entry_goes_global(self):
        self.auth.user_id = 'ruth'
        await self.sync.initialize()
        await self.sync.record_leaderboard_entry(LeaderboardEntry('ruth', 150, '2024-05-02', 'flashcards'))
        await self.sync.record_leaderboard_entry(LeaderboardEntry('ruth', 450, '2024-05-02', 'matching'))
        board = await self.sync.load_global_leaderboard()
        self.assertEqual([e.score for e in board], [450, 150])
        self.assertEqual([e.score for e in self.sync.load_local_leaderboard()], [450, 150])


if __name__ == '__main__':
    unittest.main()
