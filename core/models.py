"""Domain models for the scripture memory game."""

from .config import (
    GAME_MODES, DEFAULT_UNLOCKED_DECKS, DEFAULT_DECK_ID
)


class ScriptureCard:
    """A single verse: reference label plus text. Static content."""

    def __init__(self, id: str, deck_id: str, reference: str, text: str, hint: str = ''):
        self.id = id
        self.deck_id = deck_id
        self.reference = reference
        self.text = text
        self.hint = hint

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'deck_id': self.deck_id,
            'reference': self.reference,
            'text': self.text,
            'hint': self.hint
        }


class Deck:
    """A themed, ordered set of cards unlocked at a given level."""

    def __init__(self, id: str, name: str, description: str, icon: str, color: str,
                 unlock_level: int, cards: list[ScriptureCard] = None):
        self.id = id
        self.name = name
        self.description = description
        self.icon = icon
        self.color = color
        self.unlock_level = unlock_level
        self.cards = cards or []

    def to_dict(self, include_cards: bool = True) -> dict:
        data = {
            'id': self.id,
            'name': self.name,
            'description': self.description,
            'icon': self.icon,
            'color': self.color,
            'unlock_level': self.unlock_level,
            'card_count': len(self.cards)
        }
        if include_cards:
            data['cards'] = [c.to_dict() for c in self.cards]
        return data


class CardProgress:
    """Per-user learning state of one card."""

    def __init__(self, card_id: str, status: str = 'new', times_reviewed: int = 0,
                 times_correct: int = 0, last_reviewed: int = 0):
        self.card_id = card_id
        self.status = status
        self.times_reviewed = times_reviewed
        self.times_correct = times_correct
        self.last_reviewed = last_reviewed  # epoch milliseconds, 0 = never

    def to_dict(self) -> dict:
        return {
            'card_id': self.card_id,
            'status': self.status,
            'times_reviewed': self.times_reviewed,
            'times_correct': self.times_correct,
            'last_reviewed': self.last_reviewed
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'CardProgress':
        return cls(
            card_id=data['card_id'],
            status=data.get('status', 'new'),
            times_reviewed=data.get('times_reviewed', 0),
            times_correct=data.get('times_correct', 0),
            last_reviewed=data.get('last_reviewed', 0)
        )


class ModeProgress:
    """Per-deck, per-game-mode totals and records."""

    def __init__(self, best_score: int = 0, best_time: int = 0, games_played: int = 0,
                 total_correct: int = 0, total_attempts: int = 0):
        self.best_score = best_score
        self.best_time = best_time
        self.games_played = games_played
        self.total_correct = total_correct
        self.total_attempts = total_attempts

    def to_dict(self) -> dict:
        return {
            'best_score': self.best_score,
            'best_time': self.best_time,
            'games_played': self.games_played,
            'total_correct': self.total_correct,
            'total_attempts': self.total_attempts
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'ModeProgress':
        return cls(
            best_score=data.get('best_score', 0),
            best_time=data.get('best_time', 0),
            games_played=data.get('games_played', 0),
            total_correct=data.get('total_correct', 0),
            total_attempts=data.get('total_attempts', 0)
        )


class DeckProgress:
    """Card and mode progress scoped to one deck."""

    def __init__(self, deck_id: str):
        self.deck_id = deck_id
        self.cards: dict[str, CardProgress] = {}
        self.modes: dict[str, ModeProgress] = {mode: ModeProgress() for mode in GAME_MODES}

    def get_card(self, card_id: str) -> CardProgress:
        """Fetch or create the progress record for a card."""
        if card_id not in self.cards:
            self.cards[card_id] = CardProgress(card_id)
        return self.cards[card_id]

    def get_mode(self, mode: str) -> ModeProgress:
        """Fetch or create the progress record for a game mode."""
        if mode not in self.modes:
            self.modes[mode] = ModeProgress()
        return self.modes[mode]

    def count_status(self, status: str) -> int:
        return sum(1 for c in self.cards.values() if c.status == status)

    def to_dict(self) -> dict:
        return {
            'deck_id': self.deck_id,
            'cards': {card_id: c.to_dict() for card_id, c in self.cards.items()},
            'modes': {mode: m.to_dict() for mode, m in self.modes.items()}
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'DeckProgress':
        progress = cls(data['deck_id'])
        for card_id, card in data.get('cards', {}).items():
            card = dict(card)
            card.setdefault('card_id', card_id)
            progress.cards[card_id] = CardProgress.from_dict(card)
        for mode, mode_data in data.get('modes', {}).items():
            progress.modes[mode] = ModeProgress.from_dict(mode_data)
        return progress


class UserStats:
    """Root progress aggregate for one player. Unit of persistence."""

    def __init__(self):
        self.total_score = 0
        self.total_xp = 0
        self.level = 1
        self.daily_streak = 0
        self.longest_streak = 0
        self.last_played_date = ''  # YYYY-MM-DD, '' = never played
        self.games_played = 0
        self.total_correct_answers = 0
        self.total_attempts = 0
        # Cached counts, always recomputed from deck_progress cards
        self.verses_mastered = 0
        self.verses_in_review = 0
        self.deck_progress: dict[str, DeckProgress] = {}
        self.unlocked_badges: list[str] = []
        self.unlocked_decks: list[str] = list(DEFAULT_UNLOCKED_DECKS)
        self.challenge_high_score = 0

    def get_deck_progress(self, deck_id: str) -> DeckProgress:
        """Fetch or create the progress record for a deck."""
        if deck_id not in self.deck_progress:
            self.deck_progress[deck_id] = DeckProgress(deck_id)
        return self.deck_progress[deck_id]

    def iter_cards(self):
        """Yield every CardProgress across all decks."""
        for deck in self.deck_progress.values():
            yield from deck.cards.values()

    def count_card_statuses(self) -> tuple[int, int]:
        """Count (mastered, in_review) across every deck's cards."""
        mastered = 0
        in_review = 0
        for card in self.iter_cards():
            if card.status == 'mastered':
                mastered += 1
            elif card.status in ('review', 'known'):
                in_review += 1
        return mastered, in_review

    def refresh_verse_counts(self) -> None:
        self.verses_mastered, self.verses_in_review = self.count_card_statuses()

    def copy(self) -> 'UserStats':
        return UserStats.from_dict(self.to_dict())

    def to_dict(self) -> dict:
        return {
            'total_score': self.total_score,
            'total_xp': self.total_xp,
            'level': self.level,
            'daily_streak': self.daily_streak,
            'longest_streak': self.longest_streak,
            'last_played_date': self.last_played_date,
            'games_played': self.games_played,
            'total_correct_answers': self.total_correct_answers,
            'total_attempts': self.total_attempts,
            'verses_mastered': self.verses_mastered,
            'verses_in_review': self.verses_in_review,
            'deck_progress': {deck_id: d.to_dict() for deck_id, d in self.deck_progress.items()},
            'unlocked_badges': list(self.unlocked_badges),
            'unlocked_decks': list(self.unlocked_decks),
            'challenge_high_score': self.challenge_high_score
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'UserStats':
        """Build stats from stored data. Missing fields keep their defaults."""
        stats = cls()
        for field in ('total_score', 'total_xp', 'level', 'daily_streak', 'longest_streak',
                      'last_played_date', 'games_played', 'total_correct_answers',
                      'total_attempts', 'challenge_high_score'):
            if field in data and data[field] is not None:
                setattr(stats, field, data[field])
        for deck_id, deck in (data.get('deck_progress') or {}).items():
            deck = dict(deck)
            deck.setdefault('deck_id', deck_id)
            stats.deck_progress[deck_id] = DeckProgress.from_dict(deck)
        if data.get('unlocked_badges') is not None:
            stats.unlocked_badges = _dedupe(data['unlocked_badges'])
        if data.get('unlocked_decks') is not None:
            stats.unlocked_decks = _dedupe(data['unlocked_decks'])
        # Stored counts may be stale; the cards are authoritative
        stats.refresh_verse_counts()
        return stats


class GameSettings:
    """Player preferences. Persisted separately from UserStats."""

    def __init__(self):
        self.difficulty = 'beginner'
        self.selected_deck_id = DEFAULT_DECK_ID
        self.game_mode = 'flashcards'
        self.sound_enabled = True
        self.font_size = 'medium'

    def copy(self) -> 'GameSettings':
        return GameSettings.from_dict(self.to_dict())

    def to_dict(self) -> dict:
        return {
            'difficulty': self.difficulty,
            'selected_deck_id': self.selected_deck_id,
            'game_mode': self.game_mode,
            'sound_enabled': self.sound_enabled,
            'font_size': self.font_size
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'GameSettings':
        settings = cls()
        for field in ('difficulty', 'selected_deck_id', 'game_mode', 'sound_enabled', 'font_size'):
            if field in data and data[field] is not None:
                setattr(settings, field, data[field])
        return settings


class LeaderboardEntry:
    """A single finished round on the leaderboard."""

    def __init__(self, name: str, score: int, date: str, mode: str):
        self.name = name
        self.score = score
        self.date = date
        self.mode = mode

    def to_dict(self) -> dict:
        return {
            'name': self.name,
            'score': self.score,
            'date': self.date,
            'mode': self.mode
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'LeaderboardEntry':
        return cls(data['name'], int(data['score']), data.get('date', ''), data.get('mode', 'flashcards'))


def _dedupe(items: list) -> list:
    """Drop repeated ids while keeping first-seen order."""
    seen = set()
    result = []
    for item in items:
        if item not in seen:
            seen.add(item)
            result.append(item)
    return result
