"""Configuration constants for the scripture memory game."""

# Game modes and difficulty tiers
GAME_MODES = ('flashcards', 'matching', 'fill-blanks')
DIFFICULTIES = ('beginner', 'intermediate', 'advanced')
FONT_SIZES = ('small', 'medium', 'large')
CARD_STATUSES = ('new', 'review', 'known', 'mastered')

# Round timers in seconds
TIMER_CONFIG = {
    'beginner': 120,
    'intermediate': 90,
    'advanced': 45,
}

# Hints allowed per round
MAX_HINTS = {
    'beginner': 5,
    'intermediate': 3,
    'advanced': 0,
}

# Scoring
POINTS_PER_CORRECT = 100
ACCURACY_BONUS_MAX = 200
HINT_PENALTY = 5
TIME_BONUS_THRESHOLD = 0.5    # Fraction of time left needed for a time bonus
TIME_BONUS_MULTIPLIER = 1.5
COMBO_MULTIPLIER_STEP = 3     # Every 3 combo = one combo bonus
COMBO_BONUS_POINTS = 50

# Experience
XP_PER_COMBO = 5
XP_PER_GAME_COMPLETE = 50
XP_PER_LEVEL = 200

# Blank generation: (ratio of words, minimum blanks)
BLANK_RATIOS = {
    'beginner': (0.15, 1),
    'intermediate': (0.30, 2),
    'advanced': (0.50, 3),
}
BLANK_PLACEHOLDER = '______'
SKIP_WORDS = frozenset([
    'the', 'a', 'an', 'and', 'or', 'but', 'in', 'on', 'at', 'to', 'for', 'of', 'is',
    'it', 'be', 'as', 'do', 'no', 'not', 'so', 'up', 'if', 'my', 'ye', 'he', 'me',
])

# Matching game
MATCHING_TEXT_LIMIT = 80

# Streaks
STREAK_GRACE_DAYS = 1

# Defaults
DEFAULT_UNLOCKED_DECKS = ('foundation', 'salvation')
DEFAULT_DECK_ID = 'foundation'

# Local cache keys
STORAGE_KEYS = {
    'stats': 'scripture-game-stats',
    'settings': 'scripture-game-settings',
    'leaderboard': 'scripture-game-leaderboard',
}
LEADERBOARD_SIZE = 50

# Remote sync
SYNC_DEBOUNCE_SECONDS = 1.0

# Credentials
MIN_PASSWORD_LENGTH = 6
