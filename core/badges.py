"""Achievement badges and their unlock requirements."""

from typing import Callable

from .models import UserStats


class Badge:
    """Static badge definition. Only the unlocked id is ever persisted."""

    def __init__(self, id: str, name: str, description: str, icon: str,
                 requirement: Callable[[UserStats], bool]):
        self.id = id
        self.name = name
        self.description = description
        self.icon = icon
        self.requirement = requirement

    def is_earned(self, stats: UserStats) -> bool:
        return bool(self.requirement(stats))

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'name': self.name,
            'description': self.description,
            'icon': self.icon
        }


BADGES = [
    Badge('first-steps', 'First Steps', 'Complete your first game', '🎯',
          lambda s: s.games_played >= 1),
    Badge('verse-master', 'Verse Master', 'Master 5 verses', '📜',
          lambda s: s.verses_mastered >= 5),
    Badge('speed-memorizer', 'Speed Memorizer', 'Score over 500 in a single game', '⚡',
          lambda s: s.total_score >= 500),
    Badge('streak-warrior', 'Streak Warrior', 'Maintain a 3-day streak', '🔥',
          lambda s: s.daily_streak >= 3),
    Badge('dedicated-learner', 'Dedicated Learner', 'Play 10 games', '📚',
          lambda s: s.games_played >= 10),
    # Checks the cumulative counters only, not a single perfect round
    Badge('perfectionist', 'Perfectionist', 'Achieve 100% accuracy in a round', '💎',
          lambda s: s.total_attempts > 0 and s.total_correct_answers >= 3),
    Badge('scholar', 'Scholar', 'Reach level 5', '🎓',
          lambda s: s.level >= 5),
    Badge('champion', 'Champion', 'Score over 2000 total points', '🏆',
          lambda s: s.total_score >= 2000),
    Badge('streak-legend', 'Streak Legend', 'Maintain a 7-day streak', '👑',
          lambda s: s.longest_streak >= 7),
    Badge('all-decks', 'Explorer', 'Unlock all 12 decks', '🗺️',
          lambda s: len(s.unlocked_decks) >= 12),
]

_BADGES_BY_ID = {badge.id: badge for badge in BADGES}


def check_new_badges(stats: UserStats) -> list[str]:
    """Ids of badges earned by stats but not yet unlocked, in table order."""
    unlocked = set(stats.unlocked_badges)
    return [b.id for b in BADGES if b.id not in unlocked and b.is_earned(stats)]


def get_badge(badge_id: str) -> Badge | None:
    return _BADGES_BY_ID.get(badge_id)
