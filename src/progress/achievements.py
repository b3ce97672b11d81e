"""
Achievement unlock rules.

Each rule is checked on its own against the session and streak; a rule
fires only if its type has not been unlocked for the user before.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Iterable, List, Optional

from src.progress.models import NewAchievement, Session

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AchievementRule:
    """A single unlockable milestone."""

    type: str
    title: str
    description: str
    icon: str
    condition: Callable[[Session, int], bool]


ACHIEVEMENT_RULES: List[AchievementRule] = [
    AchievementRule(
        type='streak_7',
        title='7 Day Streak',
        description='Practiced for 7 days in a row',
        icon='fas fa-fire',
        condition=lambda session, streak: streak >= 7,
    ),
    AchievementRule(
        type='score_80',
        title='First 80+',
        description='Achieved a score of 80 or higher',
        icon='fas fa-star',
        condition=lambda session, streak: session.score >= 80,
    ),
    AchievementRule(
        type='time_master',
        title='Time Master',
        description='Completed a 5+ minute session',
        icon='fas fa-clock',
        condition=lambda session, streak: session.duration_ms >= 300000,
    ),
]


class AchievementEngine:
    """Evaluates achievement rules for a session."""

    def __init__(self, rules: Optional[Iterable[AchievementRule]] = None):
        self.rules = list(rules) if rules is not None else list(ACHIEVEMENT_RULES)

    def evaluate(
        self,
        user_id: str,
        session: Session,
        streak: int,
        unlocked_types: Iterable[str],
    ) -> List[NewAchievement]:
        """
        List achievements newly earned by this session.

        Args:
            user_id: Owner of the session
            session: The session just created
            streak: Streak after the session
            unlocked_types: Achievement types the user already has

        Returns:
            Achievements to create, at most one per type
        """
        seen = set(unlocked_types)
        earned = []
        for rule in self.rules:
            if rule.type in seen or not rule.condition(session, streak):
                continue
            seen.add(rule.type)
            earned.append(NewAchievement(
                user_id=user_id,
                type=rule.type,
                title=rule.title,
                description=rule.description,
                icon=rule.icon,
            ))

        if earned:
            logger.info(
                f"User {user_id} unlocked: {', '.join(a.type for a in earned)}"
            )
        return earned
