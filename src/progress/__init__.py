"""
Per-user progress: records, streak and average tracking, achievements.
"""

from src.progress.achievements import ACHIEVEMENT_RULES, AchievementEngine, AchievementRule
from src.progress.models import (
    Achievement,
    NewAchievement,
    NewSession,
    ProgressUpdate,
    Session,
    User,
    UserProgress,
)
from src.progress.tracker import RECENT_SESSION_WINDOW, ProgressTracker

__all__ = [
    'ACHIEVEMENT_RULES',
    'AchievementEngine',
    'AchievementRule',
    'Achievement',
    'NewAchievement',
    'NewSession',
    'ProgressUpdate',
    'Session',
    'User',
    'UserProgress',
    'RECENT_SESSION_WINDOW',
    'ProgressTracker',
]
