"""
In-memory storage backend.

Keeps everything in dictionaries guarded by a single lock. Suitable for
tests, demos and as the base for the JSON file backend.
"""

import logging
import threading
import uuid
from datetime import datetime
from typing import Callable, Dict, List, Optional

from src.errors import AchievementDuplicate, ProgressUpdateInconsistency
from src.progress.models import (
    DEFAULT_WEEKLY_GOAL,
    Achievement,
    NewAchievement,
    NewSession,
    ProgressUpdate,
    Session,
    User,
    UserProgress,
)
from src.storage.base import DEFAULT_SESSION_LIMIT, StorageBackend

logger = logging.getLogger(__name__)


class InMemoryStorage(StorageBackend):
    """
    Dictionary-backed storage.

    Attributes:
        weekly_goal: Weekly goal given to new users
        clock: Source of created_at / unlocked_at / updated_at timestamps
    """

    def __init__(
        self,
        weekly_goal: int = DEFAULT_WEEKLY_GOAL,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.weekly_goal = weekly_goal
        self.clock = clock or datetime.now
        self._lock = threading.RLock()
        self._users: Dict[str, User] = {}
        self._sessions: Dict[str, Session] = {}
        self._progress: Dict[str, UserProgress] = {}
        self._achievements: Dict[str, List[Achievement]] = {}

    def _persist(self) -> None:
        """Hook called after every write while the lock is held."""

    def _commit(self, undo: Callable[[], None]) -> None:
        """
        Persist the change just applied to the maps.

        If persisting fails the change is reverted with ``undo`` and the
        error is re-raised, so memory never holds state the store lacks.
        """
        try:
            self._persist()
        except Exception:
            undo()
            raise

    @staticmethod
    def _new_id() -> str:
        return str(uuid.uuid4())

    def create_user(self, username: str) -> User:
        with self._lock:
            now = self.clock()
            user = User(id=self._new_id(), username=username, created_at=now)
            self._users[user.id] = user
            self._progress[user.id] = UserProgress(
                user_id=user.id, weekly_goal=self.weekly_goal, updated_at=now
            )
            self._achievements[user.id] = []

            def undo():
                self._users.pop(user.id, None)
                self._progress.pop(user.id, None)
                self._achievements.pop(user.id, None)

            self._commit(undo)
        logger.info(f"Created user {user.id} ({username})")
        return user

    def get_user(self, user_id: str) -> Optional[User]:
        with self._lock:
            return self._users.get(user_id)

    def get_user_by_username(self, username: str) -> Optional[User]:
        with self._lock:
            for user in self._users.values():
                if user.username == username:
                    return user
            return None

    def create_session(self, new_session: NewSession) -> Session:
        with self._lock:
            session = Session(
                id=self._new_id(),
                user_id=new_session.user_id,
                duration_ms=new_session.duration_ms,
                analysis=new_session.analysis,
                practice_mode=new_session.practice_mode,
                created_at=self.clock(),
                audio_uri=new_session.audio_uri,
            )
            self._sessions[session.id] = session
            self._commit(lambda: self._sessions.pop(session.id, None))
        logger.debug(f"Created session {session.id} for user {session.user_id}")
        return session

    def get_session(self, session_id: str) -> Optional[Session]:
        with self._lock:
            return self._sessions.get(session_id)

    def delete_session(self, session_id: str) -> bool:
        with self._lock:
            session = self._sessions.pop(session_id, None)
            if session is None:
                return False
            self._commit(lambda: self._sessions.__setitem__(session_id, session))
        logger.info(f"Deleted session {session_id}")
        return True

    def get_user_sessions(self, user_id: str, limit: int = DEFAULT_SESSION_LIMIT) -> List[Session]:
        with self._lock:
            # Reversed insertion order first so equal timestamps list newest first
            owned = [s for s in reversed(list(self._sessions.values())) if s.user_id == user_id]
        owned.sort(key=lambda s: s.created_at, reverse=True)
        return owned[:limit]

    def get_user_progress(self, user_id: str) -> Optional[UserProgress]:
        with self._lock:
            return self._progress.get(user_id)

    def update_user_progress(self, user_id: str, update: ProgressUpdate) -> UserProgress:
        with self._lock:
            current = self._progress.get(user_id)
            if current is None:
                raise ProgressUpdateInconsistency(user_id)
            updated = current.apply(update, now=self.clock())
            self._progress[user_id] = updated
            self._commit(lambda: self._progress.__setitem__(user_id, current))
            return updated

    def get_user_achievements(self, user_id: str) -> List[Achievement]:
        with self._lock:
            achievements = list(self._achievements.get(user_id, []))
        return sorted(achievements, key=lambda a: a.unlocked_at, reverse=True)

    def create_achievement(self, new_achievement: NewAchievement) -> Achievement:
        with self._lock:
            owned = self._achievements.setdefault(new_achievement.user_id, [])
            if any(a.type == new_achievement.type for a in owned):
                raise AchievementDuplicate(new_achievement.user_id, new_achievement.type)
            achievement = Achievement(
                id=self._new_id(),
                user_id=new_achievement.user_id,
                type=new_achievement.type,
                title=new_achievement.title,
                description=new_achievement.description,
                icon=new_achievement.icon,
                unlocked_at=self.clock(),
            )
            owned.append(achievement)
            self._commit(lambda: owned.remove(achievement))
            return achievement
