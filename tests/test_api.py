"""Tests for the FastAPI server using file storage."""

import asyncio
import os
import shutil
import tempfile
import time
import unittest
from unittest.mock import patch

from fastapi.testclient import TestClient

import server.app
from server.app import app
from server.file_storage import FileRemoteStore


class LoopRecordingStore(FileRemoteStore):
    """File store noting whether credential calls ran inside the event loop."""

    def __init__(self, state_dir: str):
        super().__init__(state_dir)
        self.calls = []

    def _record(self, name: str):
        try:
            asyncio.get_running_loop()
            self.calls.append((name, True))
        except RuntimeError:
            self.calls.append((name, False))

    def create_user(self, user_id: str, password: str) -> bool:
        self._record('create_user')
        return super().create_user(user_id, password)

    def verify_password(self, user_id: str, password: str) -> bool:
        self._record('verify_password')
        return super().verify_password(user_id, password)


class APITestCase(unittest.TestCase):

    def setUp(self):
        self.state_dir = tempfile.mkdtemp()
        self._env = {k: os.environ.get(k) for k in
                     ('SCRIPTURE_STORAGE', 'SCRIPTURE_STATE_DIR', 'SCRIPTURE_SYNC_DEBOUNCE')}
        os.environ['SCRIPTURE_STORAGE'] = 'file'
        os.environ['SCRIPTURE_STATE_DIR'] = self.state_dir
        os.environ['SCRIPTURE_SYNC_DEBOUNCE'] = '0.01'
        self.client = TestClient(app)
        self.client.__enter__()

    def tearDown(self):
        self.client.__exit__(None, None, None)
        for key, value in self._env.items():
            if value is None:
                os.environ.pop(key, None)
            else:
                os.environ[key] = value
        shutil.rmtree(self.state_dir, ignore_errors=True)

    def start_session(self, device_id: str = 'phone') -> dict:
        response = self.client.post('/api/sessions', json={'device_id': device_id})
        self.assertEqual(response.status_code, 200)
        return response.json()

    def post_round(self, session_id: str, **fields) -> dict:
        body = {'correct': 8, 'total': 10, 'time_remaining': 40, 'max_combo': 6,
                'mode': 'matching', 'deck_id': 'foundation'}
        body.update(fields)
        response = self.client.post(f'/api/sessions/{session_id}/rounds', json=body)
        self.assertEqual(response.status_code, 200)
        return response.json()


class TestSessions(APITestCase):
    """Tests for session lifecycle and gameplay endpoints."""

    def test_health(self):
        self.assertEqual(self.client.get('/').json(), {'status': 'ok', 'service': 'scripture-memory'})

    def test_guest_session_defaults(self):
        state = self.start_session()
        self.assertIsNone(state['user_id'])
        self.assertTrue(state['is_loaded'])
        self.assertEqual(state['stats']['level'], 1)
        self.assertEqual(state['level_progress'], {'current': 0, 'needed': 200})

    def test_unknown_session(self):
        self.assertEqual(self.client.get('/api/sessions/nope/state').status_code, 404)

    def test_complete_round(self):
        session_id = self.start_session()['session_id']
        result = self.post_round(session_id)
        # 800 + 160 accuracy + 100 combo, 40/120 seconds left earns no time bonus
        self.assertEqual(result['score'], 1060)
        self.assertEqual(result['xp_earned'], 166)
        self.assertIn('first-steps', [b['id'] for b in result['new_badges']])
        stats = result['state']['stats']
        self.assertEqual(stats['total_score'], 1060)
        self.assertEqual(stats['daily_streak'], 1)
        self.assertEqual(stats['deck_progress']['foundation']['modes']['matching']['best_score'], 1060)

    def test_flashcards_round_is_untimed(self):
        session_id = self.start_session()['session_id']
        result = self.post_round(session_id, mode='flashcards', correct=3, total=5)
        self.assertEqual(result['score'], 300)
        self.assertEqual(result['xp_earned'], 80)

    def test_round_validation(self):
        session_id = self.start_session()['session_id']
        response = self.client.post(f'/api/sessions/{session_id}/rounds',
                                    json={'correct': 1, 'total': 1, 'mode': 'darts'})
        self.assertEqual(response.status_code, 400)
        response = self.client.post(f'/api/sessions/{session_id}/rounds',
                                    json={'correct': 1, 'total': 1, 'deck_id': 'apocrypha'})
        self.assertEqual(response.status_code, 404)

    def test_actions(self):
        session_id = self.start_session()['session_id']
        state = self.client.post(f'/api/sessions/{session_id}/actions',
                                 json={'type': 'SET_DIFFICULTY', 'difficulty': 'advanced'}).json()
        self.assertEqual(state['settings']['difficulty'], 'advanced')

        state = self.client.post(f'/api/sessions/{session_id}/actions', json={
            'type': 'UPDATE_CARD_PROGRESS', 'card_id': 'foundation-1',
            'deck_id': 'foundation', 'correct': 1
        }).json()
        self.assertEqual(state['stats']['verses_in_review'], 1)

        response = self.client.post(f'/api/sessions/{session_id}/actions',
                                    json={'type': 'NOT_AN_ACTION'})
        self.assertEqual(response.status_code, 400)
        state = self.client.get(f'/api/sessions/{session_id}/state').json()
        self.assertEqual(state['settings']['difficulty'], 'advanced')

    def test_init_action_rejected(self):
        session_id = self.start_session()['session_id']
        self.post_round(session_id)

        response = self.client.post(f'/api/sessions/{session_id}/actions', json={'type': 'INIT'})
        self.assertEqual(response.status_code, 400)

        state = self.client.get(f'/api/sessions/{session_id}/state').json()
        self.assertEqual(state['stats']['total_score'], 1060)
        self.assertIn('first-steps', state['stats']['unlocked_badges'])
        self.assertTrue(state['is_loaded'])

    def test_guest_progress_survives_sessions(self):
        session_id = self.start_session('phone')['session_id']
        self.post_round(session_id)
        self.assertEqual(self.client.delete(f'/api/sessions/{session_id}').status_code, 200)
        self.assertEqual(self.client.get(f'/api/sessions/{session_id}/state').status_code, 404)

        state = self.start_session('phone')
        self.assertEqual(state['stats']['total_score'], 1060)
        self.assertEqual(self.start_session('tablet')['stats']['total_score'], 0)


class TestAccounts(APITestCase):
    """Tests for sign up, login and logout."""

    def test_signup_login_logout(self):
        session_id = self.start_session()['session_id']
        result = self.client.post(f'/api/sessions/{session_id}/signup', json={
            'user_id': 'ruth', 'password': 'secret1', 'confirm_password': 'secret1'
        }).json()
        self.assertTrue(result['success'])
        self.assertEqual(result['state']['user_id'], 'ruth')

        self.post_round(session_id)
        # Let the debounced remote write land
        time.sleep(0.3)

        state = self.client.post(f'/api/sessions/{session_id}/logout').json()['state']
        self.assertIsNone(state['user_id'])
        self.assertEqual(state['stats']['total_score'], 0)

        result = self.client.post(f'/api/sessions/{session_id}/login',
                                  json={'user_id': 'ruth', 'password': 'secret1'}).json()
        self.assertTrue(result['success'])
        self.assertEqual(result['state']['stats']['total_score'], 1060)

    def test_login_failure(self):
        session_id = self.start_session()['session_id']
        result = self.client.post(f'/api/sessions/{session_id}/login',
                                  json={'user_id': 'ghost', 'password': 'secret1'}).json()
        self.assertEqual(result, {'success': False, 'error': 'Invalid login credentials'})

    def test_signup_short_password(self):
        session_id = self.start_session()['session_id']
        result = self.client.post(f'/api/sessions/{session_id}/signup',
                                  json={'user_id': 'ruth', 'password': 'abc'}).json()
        self.assertFalse(result['success'])
        self.assertEqual(result['error'], 'Password must be at least 6 characters.')

    def test_credential_checks_run_off_event_loop(self):
        store = LoopRecordingStore(self.state_dir)
        with patch.object(server.app, 'remote_store', store):
            session_id = self.start_session()['session_id']
            result = self.client.post(f'/api/sessions/{session_id}/signup', json={
                'user_id': 'ruth', 'password': 'secret1', 'confirm_password': 'secret1'
            }).json()
            self.assertTrue(result['success'])
            self.client.post(f'/api/sessions/{session_id}/logout')
            result = self.client.post(f'/api/sessions/{session_id}/login',
                                      json={'user_id': 'ruth', 'password': 'secret1'}).json()
            self.assertTrue(result['success'])

        self.assertEqual(store.calls, [('create_user', False), ('verify_password', False)])


class TestContent(APITestCase):
    """Tests for decks, generated rounds, badges and leaderboards."""

    def test_list_decks(self):
        self.assertEqual(len(self.client.get('/api/decks').json()['decks']), 12)
        session_id = self.start_session()['session_id']
        decks = {d['id']: d for d in self.client.get('/api/decks', params={'session_id': session_id}).json()['decks']}
        self.assertTrue(decks['foundation']['unlocked'])
        self.assertFalse(decks['faith']['unlocked'])
        self.assertEqual(decks['foundation']['mastered_count'], 0)

    def test_deck_detail(self):
        deck = self.client.get('/api/decks/foundation').json()
        self.assertEqual(deck['cards'][0]['id'], 'foundation-1')
        self.assertEqual(self.client.get('/api/decks/apocrypha').status_code, 404)

    def test_blanks(self):
        data = self.client.get('/api/decks/foundation/blanks', params={'difficulty': 'intermediate'}).json()
        self.assertEqual(data['total_time'], 90)
        self.assertEqual(data['max_hints'], 3)
        for card in data['cards']:
            self.assertEqual(card['display'].count('______'), len(card['blanks']))
            self.assertEqual(len(card['hints']), len(card['blanks']))
        response = self.client.get('/api/decks/foundation/blanks', params={'difficulty': 'expert'})
        self.assertEqual(response.status_code, 400)

    def test_matching(self):
        data = self.client.get('/api/decks/salvation/matching').json()
        self.assertEqual(len(data['references']), len(data['scriptures']))
        self.assertEqual(sorted(r['card_id'] for r in data['references']),
                         sorted(s['card_id'] for s in data['scriptures']))

    def test_badges(self):
        session_id = self.start_session()['session_id']
        self.post_round(session_id)
        badges = {b['id']: b for b in self.client.get('/api/badges', params={'session_id': session_id}).json()['badges']}
        self.assertEqual(len(badges), 10)
        self.assertTrue(badges['first-steps']['unlocked'])
        self.assertFalse(badges['scholar']['unlocked'])

    def test_leaderboard(self):
        session_id = self.start_session()['session_id']
        self.post_round(session_id, mode='flashcards', correct=2, total=2)
        self.post_round(session_id)
        board = self.client.get('/api/leaderboard', params={'session_id': session_id}).json()
        self.assertEqual([e['score'] for e in board['local']], [1060, 200])
        self.assertEqual(board['local'][0]['name'], 'Guest')
        self.assertEqual(board['global'], [])


if __name__ == '__main__':
    unittest.main()
