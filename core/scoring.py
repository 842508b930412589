"""Round scoring, experience, levels and daily streaks."""

import math
from datetime import date, datetime, timezone

from .config import (
    POINTS_PER_CORRECT, ACCURACY_BONUS_MAX, HINT_PENALTY,
    TIME_BONUS_THRESHOLD, TIME_BONUS_MULTIPLIER,
    COMBO_MULTIPLIER_STEP, COMBO_BONUS_POINTS,
    XP_PER_COMBO, XP_PER_GAME_COMPLETE, XP_PER_LEVEL,
    STREAK_GRACE_DAYS, TIMER_CONFIG, MAX_HINTS
)


def round_half_up(value: float) -> int:
    """Round .5 away from zero for positives, like Math.round."""
    return math.floor(value + 0.5)


def calculate_score(correct: int, total: int, time_remaining: float, total_time: float,
                    max_combo: int, hints_used: int) -> int:
    """Convert a finished round's raw results into points (never negative)."""
    base_score = correct * POINTS_PER_CORRECT
    accuracy_bonus = round_half_up((correct / total) * ACCURACY_BONUS_MAX) if total > 0 else 0
    time_ratio = time_remaining / total_time if total_time > 0 else 0
    if time_ratio >= TIME_BONUS_THRESHOLD:
        time_bonus = round_half_up(base_score * (TIME_BONUS_MULTIPLIER - 1) * time_ratio)
    else:
        time_bonus = 0
    # A combo can never outrun the correct answers it counts
    combo_bonus = (min(max_combo, correct) // COMBO_MULTIPLIER_STEP) * COMBO_BONUS_POINTS
    hint_penalty = hints_used * HINT_PENALTY

    return max(0, base_score + accuracy_bonus + time_bonus + combo_bonus - hint_penalty)


def calculate_xp(score: int, max_combo: int, is_complete: bool) -> int:
    xp = score // 10
    xp += (max_combo // COMBO_MULTIPLIER_STEP) * XP_PER_COMBO
    if is_complete:
        xp += XP_PER_GAME_COMPLETE
    return xp


def level_from_xp(xp: int) -> int:
    return xp // XP_PER_LEVEL + 1


def xp_for_current_level(xp: int) -> tuple[int, int]:
    """Progress inside the current level as (current, needed)."""
    return (xp % XP_PER_LEVEL, XP_PER_LEVEL)


def get_timer_for_difficulty(difficulty: str) -> int:
    return TIMER_CONFIG[difficulty]


def get_max_hints(difficulty: str) -> int:
    return MAX_HINTS[difficulty]


def get_today() -> str:
    """Today's UTC calendar date as YYYY-MM-DD."""
    return datetime.now(timezone.utc).date().isoformat()


def _parse_date(value: str) -> date | None:
    try:
        return date.fromisoformat(value[:10])
    except (TypeError, ValueError):
        return None


def is_streak_active(last_played_date: str, today: str = None) -> bool:
    """True if the last play was today or yesterday."""
    if not last_played_date:
        return False
    last = _parse_date(last_played_date)
    current = _parse_date(today or get_today())
    if last is None or current is None:
        return False
    return (current - last).days <= STREAK_GRACE_DAYS


def next_streak(daily_streak: int, last_played_date: str, today: str = None) -> int:
    """Streak after completing a round today.

    Same-day replays keep the streak, a play within the grace window extends
    it, anything else starts over at 1.
    """
    today = today or get_today()
    if last_played_date == today:
        return daily_streak
    if is_streak_active(last_played_date, today):
        return daily_streak + 1
    return 1
