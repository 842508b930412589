"""REST API client for the scripture memory server."""

import requests


class ScriptureAPIClient:
    """Client for communicating with the scripture memory REST API."""

    def __init__(self, base_url: str = "http://localhost:8000", device_id: str = "cli"):
        self.base_url = base_url.rstrip('/')
        self.device_id = device_id
        self.session_id = None
        self.session = requests.Session()

    def _get(self, endpoint: str, params: dict = None) -> dict:
        """Make a GET request."""
        response = self.session.get(f"{self.base_url}{endpoint}", params=params or {})
        response.raise_for_status()
        return response.json()

    def _post(self, endpoint: str, data: dict) -> dict:
        """Make a POST request."""
        response = self.session.post(f"{self.base_url}{endpoint}", json=data)
        response.raise_for_status()
        return response.json()

    def _session_path(self, suffix: str = "") -> str:
        if not self.session_id:
            raise RuntimeError("No active session; call start_session() first")
        return f"/api/sessions/{self.session_id}{suffix}"

    def health_check(self) -> dict:
        """Check if the server is running."""
        return self._get("/")

    def start_session(self) -> dict:
        """Open a session for this device and return its state."""
        state = self._post("/api/sessions", {'device_id': self.device_id})
        self.session_id = state['session_id']
        return state

    def end_session(self) -> dict:
        response = self.session.delete(f"{self.base_url}{self._session_path()}")
        response.raise_for_status()
        self.session_id = None
        return response.json()

    def get_state(self) -> dict:
        return self._get(self._session_path("/state"))

    def login(self, user_id: str, password: str) -> dict:
        return self._post(self._session_path("/login"), {'user_id': user_id, 'password': password})

    def signup(self, user_id: str, password: str, confirm_password: str = None) -> dict:
        return self._post(self._session_path("/signup"), {
            'user_id': user_id,
            'password': password,
            'confirm_password': confirm_password
        })

    def logout(self) -> dict:
        return self._post(self._session_path("/logout"), {})

    def dispatch(self, action_type: str, **payload) -> dict:
        """Send a named action, e.g. dispatch('SET_DIFFICULTY', difficulty='advanced')."""
        return self._post(self._session_path("/actions"), {'type': action_type, **payload})

    def complete_round(self, correct: int, total: int, time_remaining: int = 0,
                       max_combo: int = 0, hints_used: int = 0, mode: str = None,
                       deck_id: str = None) -> dict:
        return self._post(self._session_path("/rounds"), {
            'correct': correct,
            'total': total,
            'time_remaining': time_remaining,
            'max_combo': max_combo,
            'hints_used': hints_used,
            'mode': mode,
            'deck_id': deck_id
        })

    def get_decks(self) -> dict:
        return self._get("/api/decks", {'session_id': self.session_id} if self.session_id else None)

    def get_deck(self, deck_id: str) -> dict:
        return self._get(f"/api/decks/{deck_id}")

    def get_blanks(self, deck_id: str, difficulty: str) -> dict:
        return self._get(f"/api/decks/{deck_id}/blanks", {'difficulty': difficulty})

    def get_matching(self, deck_id: str, difficulty: str) -> dict:
        return self._get(f"/api/decks/{deck_id}/matching", {'difficulty': difficulty})

    def get_badges(self) -> dict:
        return self._get("/api/badges", {'session_id': self.session_id} if self.session_id else None)

    def get_leaderboard(self) -> dict:
        return self._get("/api/leaderboard", {'session_id': self.session_id} if self.session_id else None)
