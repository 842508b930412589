from .models import (
    ScriptureCard, Deck, CardProgress, ModeProgress, DeckProgress,
    UserStats, GameSettings, LeaderboardEntry
)
from .interfaces import LocalCache, RemoteStore
from .progress import ProgressEngine, count_card_statuses
from .sync import PersistenceSynchronizer
from .auth import AuthState, AuthError
from .config import (
    GAME_MODES, DIFFICULTIES, FONT_SIZES, CARD_STATUSES,
    XP_PER_LEVEL, LEADERBOARD_SIZE, SYNC_DEBOUNCE_SECONDS
)

__all__ = [
    'ScriptureCard', 'Deck', 'CardProgress', 'ModeProgress', 'DeckProgress',
    'UserStats', 'GameSettings', 'LeaderboardEntry',
    'LocalCache', 'RemoteStore',
    'ProgressEngine', 'count_card_statuses',
    'PersistenceSynchronizer',
    'AuthState', 'AuthError',
    'GAME_MODES', 'DIFFICULTIES', 'FONT_SIZES', 'CARD_STATUSES',
    'XP_PER_LEVEL', 'LEADERBOARD_SIZE', 'SYNC_DEBOUNCE_SECONDS'
]
