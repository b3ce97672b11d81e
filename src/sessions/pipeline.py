"""
Session submission pipeline.

analyze -> persist session -> update progress -> unlock achievements, run
sequentially for each submission. Analysis happens outside any lock; the
read-modify-write of a user's progress and achievements runs under that
user's lock, so submissions for the same user serialize while different
users proceed independently.
"""

import logging
import threading
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from src.analysis.ai_analyzer import AIAnalyzer
from src.errors import (
    AchievementDuplicate,
    InvalidInput,
    ProgressUpdateInconsistency,
    validate_analysis_input,
    validate_duration,
)
from src.metrics.lexical_metrics import round_half_up
from src.progress.achievements import AchievementEngine
from src.progress.models import Achievement, NewSession, Session, User, UserProgress
from src.progress.tracker import RECENT_SESSION_WINDOW, ProgressTracker
from src.storage.base import DEFAULT_SESSION_LIMIT, StorageBackend

logger = logging.getLogger(__name__)


@dataclass
class SessionResult:
    """Outcome of a session submission."""

    session: Session
    progress: UserProgress
    new_achievements: List[Achievement] = field(default_factory=list)


class SessionPipeline:
    """
    Runs session submissions against an injected storage backend.

    Attributes:
        storage: Persistence backend
        analyzer: Transcript analyzer (language model with local fallback)
        tracker: Progress tracker
        achievements: Achievement engine
    """

    def __init__(
        self,
        storage: StorageBackend,
        analyzer: AIAnalyzer,
        tracker: Optional[ProgressTracker] = None,
        achievements: Optional[AchievementEngine] = None,
    ):
        """
        Initialize the pipeline.

        Args:
            storage: Persistence backend
            analyzer: Transcript analyzer
            tracker: Progress tracker (default clock if omitted)
            achievements: Achievement engine (default rules if omitted)
        """
        self.storage = storage
        self.analyzer = analyzer
        self.tracker = tracker or ProgressTracker()
        self.achievements = achievements or AchievementEngine()
        self._user_locks: Dict[str, threading.Lock] = {}
        self._registry_lock = threading.Lock()

    def _user_lock(self, user_id: str) -> threading.Lock:
        """
        Get or create the lock for one user (thread-safe).

        Locks are kept for the life of the pipeline, one per user seen. The
        registry grows with the user count of a single process, which is the
        scale of the bundled storage backends.
        """
        with self._registry_lock:
            if user_id not in self._user_locks:
                self._user_locks[user_id] = threading.Lock()
            return self._user_locks[user_id]

    def create_user(self, username: str) -> User:
        """Create a user along with its initial progress record."""
        if not username or not username.strip():
            raise InvalidInput("Username must not be empty")
        return self.storage.create_user(username.strip())

    def submit_session(
        self,
        user_id: str,
        transcript: str,
        duration_ms: int,
        practice_mode: str,
        audio_uri: Optional[str] = None,
    ) -> SessionResult:
        """
        Analyze a transcript and record the session for a user.

        Args:
            user_id: Owner of the session
            transcript: Transcript text
            duration_ms: Session duration in milliseconds
            practice_mode: Practice mode label (e.g. 'free', 'ai-passage')
            audio_uri: Optional reference to the stored recording

        Returns:
            SessionResult with the session, updated progress and new achievements

        Raises:
            InvalidInput: Blank transcript, duration that is not finite or under
                1 ms after rounding, or missing mode
            ProgressUpdateInconsistency: The user has no progress record
        """
        if not user_id:
            raise InvalidInput("user_id is required")
        if not practice_mode:
            raise InvalidInput("practice_mode is required")
        stored_ms = round_half_up(validate_duration(duration_ms))
        if stored_ms < 1:
            raise InvalidInput(f"Duration must be at least 1 ms, got {duration_ms}")

        duration_seconds = duration_ms / 1000
        text = validate_analysis_input(transcript, duration_seconds)

        logger.info(
            f"Analyzing session for user {user_id}: {duration_seconds:.1f}s, mode={practice_mode}"
        )
        analysis = self.analyzer.analyze(text, duration_seconds)

        with self._user_lock(user_id):
            progress = self.storage.get_user_progress(user_id)
            if progress is None:
                raise ProgressUpdateInconsistency(user_id)

            session = self.storage.create_session(NewSession(
                user_id=user_id,
                duration_ms=stored_ms,
                analysis=analysis,
                practice_mode=practice_mode,
                audio_uri=audio_uri,
            ))

            recent = self.storage.get_user_sessions(user_id, RECENT_SESSION_WINDOW)
            update = self.tracker.compute_update(progress, session, recent)
            try:
                updated_progress = self.storage.update_user_progress(user_id, update)
            except Exception:
                logger.error(
                    f"Progress update failed for user {user_id}; "
                    f"removing session {session.id}"
                )
                self.storage.delete_session(session.id)
                raise

            unlocked_types = {a.type for a in self.storage.get_user_achievements(user_id)}
            new_achievements = []
            for candidate in self.achievements.evaluate(
                user_id, session, updated_progress.current_streak, unlocked_types
            ):
                try:
                    new_achievements.append(self.storage.create_achievement(candidate))
                except AchievementDuplicate as e:
                    logger.info(f"Skipping duplicate achievement: {e}")

        logger.info(
            f"Session {session.id} recorded: score={session.score}, "
            f"streak={updated_progress.current_streak}, "
            f"new achievements={len(new_achievements)}"
        )
        return SessionResult(
            session=session,
            progress=updated_progress,
            new_achievements=new_achievements,
        )

    def get_progress(self, user_id: str) -> Optional[UserProgress]:
        """Return the user's progress record."""
        return self.storage.get_user_progress(user_id)

    def get_sessions(self, user_id: str, limit: int = DEFAULT_SESSION_LIMIT) -> List[Session]:
        """Return the user's most recent sessions, newest first."""
        return self.storage.get_user_sessions(user_id, limit)

    def get_session(self, session_id: str) -> Optional[Session]:
        """Return a single session."""
        return self.storage.get_session(session_id)

    def get_achievements(self, user_id: str) -> List[Achievement]:
        """Return the user's achievements, most recent first."""
        return self.storage.get_user_achievements(user_id)
