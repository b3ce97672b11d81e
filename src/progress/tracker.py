"""
Progress tracking across practice sessions.

Computes the progress update that follows a newly created session: streak,
rolling averages over the most recent sessions, best score and counters.
The tracker is pure apart from its clock; persisting the update is the
caller's job.
"""

import logging
from datetime import date, datetime, timedelta
from typing import Callable, Optional, Sequence

from src.progress.models import ProgressUpdate, Session, UserProgress

logger = logging.getLogger(__name__)

RECENT_SESSION_WINDOW = 5


def _mean(values: Sequence[float]) -> float:
    return sum(values) / len(values) if values else 0.0


class ProgressTracker:
    """
    Derives progress updates from sessions.

    Calendar days are taken from the datetimes as stored (the server's local
    day); the clock decides which day is "today".

    Attributes:
        clock: Callable returning the current datetime
    """

    def __init__(self, clock: Optional[Callable[[], datetime]] = None):
        """
        Initialize the tracker.

        Args:
            clock: Source of the current time (defaults to datetime.now)
        """
        self.clock = clock or datetime.now

    def compute_streak(
        self,
        progress: UserProgress,
        recent_sessions: Sequence[Session],
    ) -> int:
        """
        Work out the streak after a new session.

        Rules, first match wins:
            1. Session today and no earlier session on record -> 1
            2. Sessions today and yesterday -> previous streak + 1
            3. No session yesterday -> 1
            4. No session today -> 1
            5. Otherwise the streak is unchanged

        Args:
            progress: Progress before the new session
            recent_sessions: Most recent sessions, including the new one

        Returns:
            New streak value
        """
        today: date = self.clock().date()
        yesterday = today - timedelta(days=1)
        session_days = {s.created_at.date() for s in recent_sessions if s.created_at}
        has_today = today in session_days
        has_yesterday = yesterday in session_days
        previous = progress.current_streak or 0

        if has_today and progress.last_session_at is None:
            return 1
        if has_today and has_yesterday:
            return previous + 1
        if not has_yesterday:
            return 1
        if not has_today:
            return 1
        return previous

    def compute_update(
        self,
        progress: UserProgress,
        session: Session,
        recent_sessions: Sequence[Session],
    ) -> ProgressUpdate:
        """
        Build the progress update for a newly created session.

        Args:
            progress: Progress before the new session
            session: The session just created
            recent_sessions: Most recent sessions, newest first, including ``session``

        Returns:
            ProgressUpdate covering every tracked field
        """
        window = list(recent_sessions)[:RECENT_SESSION_WINDOW]
        if all(s.id != session.id for s in window):
            logger.warning(
                f"Session {session.id} missing from recent sessions for "
                f"user {session.user_id}; including it in the window"
            )
            window = [session] + window[:RECENT_SESSION_WINDOW - 1]

        streak = self.compute_streak(progress, window)

        update = ProgressUpdate(
            total_sessions=(progress.total_sessions or 0) + 1,
            current_streak=streak,
            best_score=max(progress.best_score or 0, session.score),
            avg_filler_reduction=_mean([s.metrics.filler_improvement for s in window]),
            avg_pace_control=_mean([s.metrics.pace_score for s in window]),
            last_session_at=session.created_at,
        )
        logger.info(
            f"Progress for user {session.user_id}: sessions={update.total_sessions}, "
            f"streak={streak}, best={update.best_score}"
        )
        return update
