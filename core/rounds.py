"""Live state of one game round: answers, combo streak, hints and the clock."""

import re
import time

from .scoring import calculate_score, get_max_hints, get_timer_for_difficulty


def normalize_answer(word: str) -> str:
    return re.sub(r'[^a-z]', '', word.strip().lower())


def answers_match(given: str, expected: str) -> bool:
    """Compare answers ignoring case, whitespace and punctuation."""
    return normalize_answer(given) == normalize_answer(expected)


class GameRound:
    """Counts answers and combos for one timed round."""

    def __init__(self, difficulty: str, total_time: int = None, clock=time.monotonic):
        self.difficulty = difficulty
        self.total_time = total_time if total_time is not None else get_timer_for_difficulty(difficulty)
        self.max_hints = get_max_hints(difficulty)
        self.correct_answers = 0
        self.total_questions = 0
        self.combo_streak = 0
        self.max_combo = 0
        self.hints_used = 0
        self.is_complete = False
        self._clock = clock
        self._started_at = clock()
        self._frozen_remaining = None

    @property
    def time_remaining(self) -> int:
        if self._frozen_remaining is not None:
            return self._frozen_remaining
        elapsed = self._clock() - self._started_at
        return max(0, int(self.total_time - elapsed))

    @property
    def is_time_up(self) -> bool:
        return self.time_remaining <= 0

    def record_answer(self, correct: bool) -> None:
        self.total_questions += 1
        if correct:
            self.correct_answers += 1
            self.combo_streak += 1
            self.max_combo = max(self.max_combo, self.combo_streak)
        else:
            self.combo_streak = 0

    def use_hint(self) -> bool:
        """Spend a hint if any are left. Returns False when none remain."""
        if self.hints_used >= self.max_hints:
            return False
        self.hints_used += 1
        return True

    def finish(self) -> int:
        """Stop the round and return its score."""
        self._frozen_remaining = self.time_remaining
        self.is_complete = True
        return self.score()

    def score(self) -> int:
        return calculate_score(self.correct_answers, self.total_questions, self.time_remaining,
                               self.total_time, self.max_combo, self.hints_used)
