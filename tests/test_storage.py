"""Tests for file-backed storage and the local cache helpers."""

import json
import os
import shutil
import tempfile
import unittest

from core import local_store
from core.auth import AuthState, AuthError, sign_in, sign_out, sign_up
from core.config import STORAGE_KEYS, LEADERBOARD_SIZE
from core.models import UserStats, GameSettings, LeaderboardEntry
from server.file_storage import FileCache, FileRemoteStore

from mocks import MockLocalCache


class TestFileCache(unittest.TestCase):
    """Tests for the per-device blob cache."""

    def setUp(self):
        self.state_dir = tempfile.mkdtemp()

    def tearDown(self):
        shutil.rmtree(self.state_dir, ignore_errors=True)

    def test_missing_key(self):
        cache = FileCache('phone', self.state_dir)
        self.assertIsNone(cache.get('scripture-game-stats'))

    def test_set_and_get(self):
        cache = FileCache('phone', self.state_dir)
        cache.set('scripture-game-stats', '{"total_score": 5}')
        self.assertEqual(cache.get('scripture-game-stats'), '{"total_score": 5}')
        self.assertFalse(os.path.exists(cache._get_file('scripture-game-stats') + '.tmp'))

    def test_devices_are_isolated(self):
        FileCache('phone', self.state_dir).set('k', 'one')
        self.assertIsNone(FileCache('tablet', self.state_dir).get('k'))

    def test_unsafe_device_id(self):
        cache = FileCache('../../etc', self.state_dir)
        cache.set('k', 'v')
        self.assertTrue(os.path.abspath(cache.cache_dir).startswith(os.path.abspath(self.state_dir)))


class TestFileRemoteStore(unittest.TestCase):
    """Tests for the JSON-file remote store."""

    def setUp(self):
        self.state_dir = tempfile.mkdtemp()
        self.store = FileRemoteStore(self.state_dir)

    def tearDown(self):
        shutil.rmtree(self.state_dir, ignore_errors=True)

    def test_stats_and_settings(self):
        self.assertIsNone(self.store.load_stats('ruth'))
        self.store.save_stats('ruth', {'total_score': 10})
        self.store.save_settings('ruth', {'difficulty': 'advanced'})
        self.assertEqual(self.store.load_stats('ruth'), {'total_score': 10})
        self.assertEqual(self.store.load_settings('ruth'), {'difficulty': 'advanced'})
        self.assertIsNone(self.store.load_settings('boaz'))

    def test_corrupt_file_reads_as_absent(self):
        path = self.store._get_user_file('ruth', 'stats')
        os.makedirs(os.path.dirname(path), exist_ok=True)
        with open(path, 'w') as f:
            f.write('{broken')
        self.assertIsNone(self.store.load_stats('ruth'))

    def test_global_leaderboard_sorted(self):
        self.store.insert_leaderboard_entry('ruth', {'name': 'ruth', 'score': 100, 'mode': 'matching', 'date': '2024-05-01'})
        self.store.insert_leaderboard_entry('boaz', {'name': 'boaz', 'score': 400, 'mode': 'flashcards', 'date': '2024-05-02'})
        board = self.store.load_global_leaderboard()
        self.assertEqual([e['name'] for e in board], ['boaz', 'ruth'])
        self.assertNotIn('user_id', board[0])
        self.assertEqual(len(self.store.load_global_leaderboard(limit=1)), 1)

    def test_credentials(self):
        self.assertTrue(self.store.create_user('ruth', 'secret1'))
        self.assertFalse(self.store.create_user('ruth', 'other12'))
        self.assertTrue(self.store.user_exists('ruth'))
        self.assertTrue(self.store.verify_password('ruth', 'secret1'))
        self.assertFalse(self.store.verify_password('ruth', 'wrong12'))
        self.assertFalse(self.store.verify_password('boaz', 'secret1'))
        self.assertEqual(self.store.list_users(), ['ruth'])
        with open(os.path.join(self.state_dir, 'credentials.json')) as f:
            self.assertNotIn('secret1', f.read())


class TestLocalStore(unittest.TestCase):
    """Tests for cache load/save helpers."""

    def test_stats_round_trip(self):
        cache = MockLocalCache()
        stats = UserStats()
        stats.total_score = 90
        self.assertTrue(local_store.save_stats(cache, stats))
        self.assertEqual(local_store.load_stats(cache).total_score, 90)

    def test_wrong_shape_uses_defaults(self):
        cache = MockLocalCache({
            STORAGE_KEYS['stats']: json.dumps([1, 2, 3]),
            STORAGE_KEYS['settings']: 'null',
        })
        self.assertEqual(local_store.load_stats(cache).total_score, 0)
        self.assertEqual(local_store.load_settings(cache).difficulty, 'beginner')

    def test_write_failure_returns_false(self):
        cache = MockLocalCache()
        cache.fail_writes = True
        self.assertFalse(local_store.save_settings(cache, GameSettings()))

    def test_leaderboard_capped_and_sorted(self):
        cache = MockLocalCache()
        for score in range(LEADERBOARD_SIZE + 5):
            local_store.save_leaderboard_entry(cache, LeaderboardEntry('p', score, '2024-05-01', 'matching'))
        board = local_store.load_leaderboard(cache)
        self.assertEqual(len(board), LEADERBOARD_SIZE)
        self.assertEqual(board[0].score, LEADERBOARD_SIZE + 4)
        self.assertEqual(board[-1].score, 5)

    def test_leaderboard_skips_bad_rows(self):
        cache = MockLocalCache({STORAGE_KEYS['leaderboard']: json.dumps([
            {'name': 'ok', 'score': 5}, {'score': 9}, 'junk'
        ])})
        self.assertEqual([e.name for e in local_store.load_leaderboard(cache)], ['ok'])


class TestAuth(unittest.TestCase):
    """Tests for sign up, sign in and sign out."""

    def setUp(self):
        self.state_dir = tempfile.mkdtemp()
        self.store = FileRemoteStore(self.state_dir)
        self.auth = AuthState()

    def tearDown(self):
        shutil.rmtree(self.state_dir, ignore_errors=True)

    def test_sign_up_and_in(self):
        sign_up(self.store, self.auth, 'ruth', 'secret1', 'secret1')
        self.assertEqual(self.auth.user_id, 'ruth')
        self.assertFalse(self.auth.loading)
        sign_out(self.auth)
        self.assertFalse(self.auth.is_authenticated)
        sign_in(self.store, self.auth, 'ruth', 'secret1')
        self.assertTrue(self.auth.is_authenticated)

    def test_sign_up_errors(self):
        cases = [
            (('', 'secret1', None), "User name is required."),
            (('ruth', 'secret1', 'secret2'), "Passwords do not match."),
            (('ruth', 'short', None), "Password must be at least 6 characters."),
        ]
        for args, message in cases:
            with self.assertRaises(AuthError) as ctx:
                sign_up(self.store, self.auth, *args)
            self.assertEqual(ctx.exception.message, message)
        self.assertIsNone(self.auth.user_id)

    def test_duplicate_user(self):
        sign_up(self.store, self.auth, 'ruth', 'secret1')
        with self.assertRaises(AuthError) as ctx:
            sign_up(self.store, AuthState(), 'ruth', 'secret1')
        self.assertEqual(ctx.exception.message, "User already exists")

    def test_bad_credentials(self):
        sign_up(self.store, AuthState(), 'ruth', 'secret1')
        with self.assertRaises(AuthError) as ctx:
            sign_in(self.store, self.auth, 'ruth', 'wrong12')
        self.assertEqual(ctx.exception.message, "Invalid login credentials")
        self.assertIsNone(self.auth.user_id)
        self.assertFalse(self.auth.loading)


if __name__ == '__main__':
    unittest.main()
