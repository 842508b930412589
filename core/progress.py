"""Progress engine: named actions that transform a player's progress.

Every transform takes the current aggregate and returns a new one; inputs are
never mutated. ``ProgressEngine`` owns the live ``UserStats``/``GameSettings``
pair for one session, applies actions in dispatch order and notifies
subscribers (the persistence layer) after every mutation.
"""

import logging
import time
from typing import Callable

from .badges import check_new_badges
from .config import GAME_MODES, DIFFICULTIES, FONT_SIZES
from .decks import DECKS
from .models import UserStats, GameSettings
from .scoring import calculate_xp, level_from_xp, next_streak, get_today

logger = logging.getLogger(__name__)


def count_card_statuses(stats: UserStats) -> tuple[int, int]:
    """Recount (mastered, in_review) across every deck's cards."""
    return stats.count_card_statuses()


def _refresh_verse_counts(stats: UserStats) -> None:
    stats.refresh_verse_counts()


def complete_round(stats: UserStats, score: int, correct: int, total: int,
                   time_remaining: int, max_combo: int, mode: str, deck_id: str,
                   today: str = None) -> tuple[UserStats, list[str]]:
    """Apply a finished round. Returns (new_stats, newly_unlocked_badge_ids)."""
    today = today or get_today()
    new = stats.copy()

    new_streak = next_streak(stats.daily_streak, stats.last_played_date, today)
    new.total_xp = stats.total_xp + calculate_xp(score, max_combo, True)
    new.level = level_from_xp(new.total_xp)

    # Decks unlock in declaration order
    for deck in DECKS:
        if new.level >= deck.unlock_level and deck.id not in new.unlocked_decks:
            new.unlocked_decks.append(deck.id)

    mode_progress = new.get_deck_progress(deck_id).get_mode(mode)
    mode_progress.games_played += 1
    mode_progress.total_correct += correct
    mode_progress.total_attempts += total
    if score > mode_progress.best_score:
        mode_progress.best_score = score
    if time_remaining > mode_progress.best_time:
        mode_progress.best_time = time_remaining

    new.total_score = stats.total_score + score
    new.daily_streak = new_streak
    new.longest_streak = max(stats.longest_streak, new_streak)
    new.last_played_date = today
    new.games_played = stats.games_played + 1
    new.total_correct_answers = stats.total_correct_answers + correct
    new.total_attempts = stats.total_attempts + total
    new.challenge_high_score = max(stats.challenge_high_score, score)

    new_badges = check_new_badges(new)
    new.unlocked_badges.extend(new_badges)
    return new, new_badges


def update_card_progress(stats: UserStats, card_id: str, deck_id: str, correct: bool,
                         now_ms: int = None) -> UserStats:
    """Record one answer for a card and move its mastery status."""
    new = stats.copy()
    card = new.get_deck_progress(deck_id).get_card(card_id)
    previous_correct = card.times_correct

    card.times_reviewed += 1
    if correct:
        card.times_correct += 1
    card.last_reviewed = now_ms if now_ms is not None else int(time.time() * 1000)

    if correct and previous_correct >= 2:
        card.status = 'known'
    elif correct:
        card.status = 'review'
    elif card.status == 'new':
        card.status = 'review'
    # A wrong answer never downgrades review/known/mastered

    _refresh_verse_counts(new)
    return new


def master_card(stats: UserStats, card_id: str, deck_id: str) -> UserStats:
    """Mark a previously seen card as mastered. Unseen cards are ignored."""
    deck = stats.deck_progress.get(deck_id)
    if deck is None or card_id not in deck.cards:
        return stats
    new = stats.copy()
    new.deck_progress[deck_id].cards[card_id].status = 'mastered'
    _refresh_verse_counts(new)
    return new


def reset_deck_mastered(stats: UserStats, deck_id: str) -> UserStats:
    """Send every mastered card of a deck back to 'new' with zeroed counters."""
    if deck_id not in stats.deck_progress:
        return stats
    new = stats.copy()
    for card in new.deck_progress[deck_id].cards.values():
        if card.status == 'mastered':
            card.status = 'new'
            card.times_reviewed = 0
            card.times_correct = 0
    _refresh_verse_counts(new)
    return new


def reset_progress() -> UserStats:
    return UserStats()


def _set_setting(settings: GameSettings, field: str, value, allowed=None) -> GameSettings:
    if allowed is not None and value not in allowed:
        logger.warning(f"Ignoring invalid {field}: {value!r}")
        return settings
    new = settings.copy()
    setattr(new, field, value)
    return new


def set_difficulty(settings: GameSettings, difficulty: str) -> GameSettings:
    return _set_setting(settings, 'difficulty', difficulty, DIFFICULTIES)


def set_deck(settings: GameSettings, deck_id: str) -> GameSettings:
    return _set_setting(settings, 'selected_deck_id', deck_id)


def set_game_mode(settings: GameSettings, mode: str) -> GameSettings:
    return _set_setting(settings, 'game_mode', mode, GAME_MODES)


def set_sound(settings: GameSettings, enabled: bool) -> GameSettings:
    return _set_setting(settings, 'sound_enabled', bool(enabled))


def set_font_size(settings: GameSettings, size: str) -> GameSettings:
    return _set_setting(settings, 'font_size', size, FONT_SIZES)


class ProgressEngine:
    """Owns one session's stats and settings and applies actions to them."""

    def __init__(self, stats: UserStats = None, settings: GameSettings = None):
        self.stats = stats or UserStats()
        self.settings = settings or GameSettings()
        self.new_badges: list[str] = []
        self.is_loaded = False
        self._listeners: list[Callable[['ProgressEngine'], None]] = []

    def subscribe(self, listener: Callable[['ProgressEngine'], None]) -> Callable[[], None]:
        """Register a callback run after every mutation. Returns an unsubscribe function."""
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)
        return unsubscribe

    def _commit(self, stats: UserStats = None, settings: GameSettings = None) -> None:
        changed = False
        if stats is not None and stats is not self.stats:
            self.stats = stats
            changed = True
        if settings is not None and settings is not self.settings:
            self.settings = settings
            changed = True
        if changed:
            for listener in list(self._listeners):
                listener(self)

    def load(self, stats: UserStats, settings: GameSettings) -> None:
        """Replace state with freshly loaded data and mark the engine loaded."""
        self.is_loaded = True
        self.new_badges = []
        self._commit(stats, settings)

    # Progress actions

    def complete_round(self, score: int, correct: int, total: int, time_remaining: int,
                       max_combo: int, mode: str = None, deck_id: str = None,
                       today: str = None) -> list[str]:
        """Apply a finished round. Mode and deck default to the current settings."""
        mode = mode or self.settings.game_mode
        deck_id = deck_id or self.settings.selected_deck_id
        stats, new_badges = complete_round(
            self.stats, score, correct, total, time_remaining, max_combo, mode, deck_id, today
        )
        self.new_badges = new_badges
        self._commit(stats=stats)
        return new_badges

    def update_card_progress(self, card_id: str, deck_id: str, correct: bool) -> None:
        self._commit(stats=update_card_progress(self.stats, card_id, deck_id, correct))

    def master_card(self, card_id: str, deck_id: str) -> None:
        self._commit(stats=master_card(self.stats, card_id, deck_id))

    def reset_deck_mastered(self, deck_id: str) -> None:
        self._commit(stats=reset_deck_mastered(self.stats, deck_id))

    def reset_progress(self) -> None:
        self.new_badges = []
        self._commit(stats=reset_progress())

    def clear_new_badges(self) -> None:
        self.new_badges = []

    # Settings actions

    def set_difficulty(self, difficulty: str) -> None:
        self._commit(settings=set_difficulty(self.settings, difficulty))

    def set_deck(self, deck_id: str) -> None:
        self._commit(settings=set_deck(self.settings, deck_id))

    def set_game_mode(self, mode: str) -> None:
        self._commit(settings=set_game_mode(self.settings, mode))

    def set_sound(self, enabled: bool) -> None:
        self._commit(settings=set_sound(self.settings, enabled))

    def set_font_size(self, size: str) -> None:
        self._commit(settings=set_font_size(self.settings, size))

    def dispatch(self, action: dict) -> None:
        """Apply a named action, e.g. {'type': 'MASTER_CARD', 'card_id': ..., 'deck_id': ...}."""
        action_type = action.get('type')
        try:
            if action_type == 'INIT':
                self.load(
                    UserStats.from_dict(action.get('stats') or {}),
                    GameSettings.from_dict(action.get('settings') or {})
                )
            elif action_type == 'COMPLETE_GAME':
                self.complete_round(
                    score=action['score'],
                    correct=action['correct'],
                    total=action['total'],
                    time_remaining=action.get('time_remaining', 0),
                    max_combo=action.get('max_combo', 0),
                    mode=action.get('mode'),
                    deck_id=action.get('deck_id')
                )
            elif action_type == 'UPDATE_CARD_PROGRESS':
                self.update_card_progress(action['card_id'], action['deck_id'], bool(action['correct']))
            elif action_type == 'MASTER_CARD':
                self.master_card(action['card_id'], action['deck_id'])
            elif action_type == 'RESET_DECK_MASTERED':
                self.reset_deck_mastered(action['deck_id'])
            elif action_type == 'RESET_PROGRESS':
                self.reset_progress()
            elif action_type == 'CLEAR_NEW_BADGES':
                self.clear_new_badges()
            elif action_type == 'SET_DIFFICULTY':
                self.set_difficulty(action['difficulty'])
            elif action_type == 'SET_DECK':
                self.set_deck(action['deck_id'])
            elif action_type == 'SET_GAME_MODE':
                self.set_game_mode(action['mode'])
            elif action_type == 'SET_SOUND':
                self.set_sound(action['enabled'])
            elif action_type == 'SET_FONT_SIZE':
                self.set_font_size(action['size'])
            else:
                logger.warning(f"Ignoring unknown action type: {action_type!r}")
        except KeyError as e:
            logger.warning(f"Ignoring {action_type} action missing field {e}")
