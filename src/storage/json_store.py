"""
JSON file storage backend.

Keeps the in-memory maps and writes the whole store to one JSON document
after every change. Writes go to a temp file that then replaces the store,
so a crash never leaves a half-written file behind.
"""

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Callable, Optional, Union

from src.progress.models import (
    DEFAULT_WEEKLY_GOAL,
    Achievement,
    Session,
    User,
    UserProgress,
)
from src.storage.memory_store import InMemoryStorage

logger = logging.getLogger(__name__)


class JsonFileStorage(InMemoryStorage):
    """
    Storage persisted to a single JSON file.

    Attributes:
        path: Location of the JSON document
    """

    STORE_VERSION = 1

    def __init__(
        self,
        path: Union[str, Path],
        weekly_goal: int = DEFAULT_WEEKLY_GOAL,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        """
        Initialize and load any existing store.

        Args:
            path: JSON file to read from and write to
            weekly_goal: Weekly goal given to new users
            clock: Source of record timestamps
        """
        super().__init__(weekly_goal=weekly_goal, clock=clock)
        self.path = Path(path)
        self._load()

    def _load(self) -> None:
        """Load the store from disk."""
        if not self.path.exists():
            logger.info(f"Store {self.path} not found, will create on first save")
            return

        with open(self.path, 'r') as f:
            data = json.load(f)

        version = data.get('version', 1)
        if version > self.STORE_VERSION:
            logger.warning(
                f"Store version {version} is newer than supported {self.STORE_VERSION}"
            )

        for item in data.get('users', []):
            user = User.from_dict(item)
            self._users[user.id] = user
        for item in data.get('progress', []):
            progress = UserProgress.from_dict(item)
            self._progress[progress.user_id] = progress
        for item in data.get('sessions', []):
            session = Session.from_dict(item)
            self._sessions[session.id] = session
        for item in data.get('achievements', []):
            achievement = Achievement.from_dict(item)
            self._achievements.setdefault(achievement.user_id, []).append(achievement)

        logger.info(
            f"Loaded store {self.path}: {len(self._users)} users, "
            f"{len(self._sessions)} sessions"
        )

    def _persist(self) -> None:
        """Write the store to disk (caller holds the lock)."""
        data = {
            'version': self.STORE_VERSION,
            'updated_at': datetime.now().isoformat(),
            'users': [u.to_dict() for u in self._users.values()],
            'progress': [p.to_dict() for p in self._progress.values()],
            'sessions': [s.to_dict() for s in self._sessions.values()],
            'achievements': [
                a.to_dict() for owned in self._achievements.values() for a in owned
            ],
        }

        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            temp_path = self.path.with_suffix('.tmp')
            with open(temp_path, 'w') as f:
                json.dump(data, f, indent=2)
            temp_path.replace(self.path)
        except OSError as e:
            logger.error(f"Failed to save store {self.path}: {e}")
            raise

        logger.debug(f"Saved store {self.path}")
