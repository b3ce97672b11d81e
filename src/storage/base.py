"""StorageBackend: abstract interface for users, sessions, progress and achievements."""

from abc import ABC, abstractmethod
from typing import List, Optional

from src.progress.models import (
    Achievement,
    NewAchievement,
    NewSession,
    ProgressUpdate,
    Session,
    User,
    UserProgress,
)

DEFAULT_SESSION_LIMIT = 10


class StorageBackend(ABC):
    """
    Persistence contract used by the session pipeline.

    Implementations must apply ``update_user_progress`` as a single step and
    must refuse a second achievement of the same type for a user. A write
    that fails to persist must leave no trace of the change.
    """

    @abstractmethod
    def create_user(self, username: str) -> User:
        """Create a user together with a zeroed progress record."""

    @abstractmethod
    def get_user(self, user_id: str) -> Optional[User]:
        """Return the user or None."""

    @abstractmethod
    def get_user_by_username(self, username: str) -> Optional[User]:
        """Return the user with this username or None."""

    @abstractmethod
    def create_session(self, new_session: NewSession) -> Session:
        """Persist a session, assigning its id and created_at."""

    @abstractmethod
    def get_session(self, session_id: str) -> Optional[Session]:
        """Return the session or None."""

    @abstractmethod
    def delete_session(self, session_id: str) -> bool:
        """Remove a session; returns False if it did not exist."""

    @abstractmethod
    def get_user_sessions(self, user_id: str, limit: int = DEFAULT_SESSION_LIMIT) -> List[Session]:
        """Return up to ``limit`` sessions for the user, newest first."""

    @abstractmethod
    def get_user_progress(self, user_id: str) -> Optional[UserProgress]:
        """Return the user's progress record or None."""

    @abstractmethod
    def update_user_progress(self, user_id: str, update: ProgressUpdate) -> UserProgress:
        """
        Apply a progress update atomically.

        Raises:
            ProgressUpdateInconsistency: If the user has no progress record
        """

    @abstractmethod
    def get_user_achievements(self, user_id: str) -> List[Achievement]:
        """Return the user's achievements, most recently unlocked first."""

    @abstractmethod
    def create_achievement(self, new_achievement: NewAchievement) -> Achievement:
        """
        Persist an achievement, assigning its id and unlocked_at.

        Raises:
            AchievementDuplicate: If the type is already unlocked for the user
        """
