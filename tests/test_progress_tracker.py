"""Tests for progress records and the progress tracker."""

from datetime import datetime, timedelta

import pytest

from src.progress.models import ProgressUpdate, UserProgress
from src.progress.tracker import RECENT_SESSION_WINDOW, ProgressTracker

NOW = datetime(2026, 10, 19, 12, 0, 0)
YESTERDAY = NOW - timedelta(days=1)


@pytest.fixture
def tracker():
    return ProgressTracker(clock=lambda: NOW)


class TestComputeStreak:
    """Test suite for the streak rules."""

    def test_first_session_ever(self, tracker, make_session):
        """Test the very first session starts a streak of 1."""
        progress = UserProgress(user_id='user-1')
        assert tracker.compute_streak(progress, [make_session(NOW)]) == 1

    def test_consecutive_day_increments(self, tracker, make_session):
        """Test practising today after yesterday extends the streak."""
        progress = UserProgress(user_id='user-1', current_streak=3, last_session_at=YESTERDAY)
        sessions = [make_session(NOW), make_session(YESTERDAY)]
        assert tracker.compute_streak(progress, sessions) == 4

    def test_gap_resets(self, tracker, make_session):
        """Test a missed day resets the streak."""
        three_days_ago = NOW - timedelta(days=3)
        progress = UserProgress(user_id='user-1', current_streak=5,
                                last_session_at=three_days_ago)
        sessions = [make_session(NOW), make_session(three_days_ago)]
        assert tracker.compute_streak(progress, sessions) == 1

    def test_no_session_today_resets(self, make_session):
        """Test a window without today resets even if yesterday is present."""
        tracker = ProgressTracker(clock=lambda: NOW + timedelta(days=1))
        progress = UserProgress(user_id='user-1', current_streak=4, last_session_at=NOW)
        sessions = [make_session(NOW), make_session(YESTERDAY)]
        assert tracker.compute_streak(progress, sessions) == 1

    def test_same_day_repeat_without_yesterday(self, tracker, make_session):
        """Test a second session today with no session yesterday gives 1."""
        earlier_today = NOW - timedelta(hours=2)
        progress = UserProgress(user_id='user-1', current_streak=1,
                                last_session_at=earlier_today)
        sessions = [make_session(NOW), make_session(earlier_today)]
        assert tracker.compute_streak(progress, sessions) == 1

    def test_first_recorded_session_ignores_stale_streak(self, tracker, make_session):
        """Test no prior last_session_at always starts at 1."""
        progress = UserProgress(user_id='user-1', current_streak=9)
        sessions = [make_session(NOW), make_session(YESTERDAY)]
        assert tracker.compute_streak(progress, sessions) == 1


class TestComputeUpdate:
    """Test suite for compute_update."""

    def test_counters_and_best_score(self, tracker, make_session):
        """Test total, best score and last session time."""
        progress = UserProgress(user_id='user-1', total_sessions=4, best_score=90)
        session = make_session(NOW, score=85)

        update = tracker.compute_update(progress, session, [session])

        assert update.total_sessions == 5
        assert update.best_score == 90
        assert update.last_session_at == NOW

    def test_best_score_raised(self, tracker, make_session):
        """Test a higher score becomes the best."""
        progress = UserProgress(user_id='user-1', best_score=60)
        session = make_session(NOW, score=85)
        assert tracker.compute_update(progress, session, [session]).best_score == 85

    def test_averages_over_recent_sessions(self, tracker, make_session):
        """Test the rolling means."""
        sessions = [
            make_session(NOW, filler_improvement=80, pace_score=100),
            make_session(NOW - timedelta(hours=1), filler_improvement=60, pace_score=80),
            make_session(NOW - timedelta(hours=2), filler_improvement=100, pace_score=60),
        ]
        progress = UserProgress(user_id='user-1', total_sessions=2)

        update = tracker.compute_update(progress, sessions[0], sessions)

        assert update.avg_filler_reduction == pytest.approx(80)
        assert update.avg_pace_control == pytest.approx(80)

    def test_window_is_capped(self, tracker, make_session):
        """Test only the most recent sessions are averaged."""
        sessions = [
            make_session(NOW - timedelta(minutes=i), filler_improvement=100)
            for i in range(RECENT_SESSION_WINDOW)
        ]
        sessions += [
            make_session(NOW - timedelta(days=1, minutes=i), filler_improvement=0)
            for i in range(2)
        ]
        progress = UserProgress(user_id='user-1')

        update = tracker.compute_update(progress, sessions[0], sessions)

        assert update.avg_filler_reduction == 100

    def test_missing_session_is_included(self, tracker, make_session):
        """Test the new session counts even when the window lacks it."""
        older = make_session(NOW - timedelta(hours=1), filler_improvement=0)
        session = make_session(NOW, filler_improvement=100)
        progress = UserProgress(user_id='user-1')

        update = tracker.compute_update(progress, session, [older])

        assert update.avg_filler_reduction == pytest.approx(50)

    def test_update_applies_cleanly(self, tracker, make_session):
        """Test the update is valid for the progress record."""
        progress = UserProgress(user_id='user-1')
        session = make_session(NOW, score=85)

        updated = progress.apply(tracker.compute_update(progress, session, [session]), now=NOW)

        assert updated.total_sessions == 1
        assert updated.current_streak == 1
        assert updated.best_score == 85
        assert updated.updated_at == NOW


class TestProgressUpdate:
    """Test suite for ProgressUpdate validation and application."""

    @pytest.mark.parametrize("kwargs", [
        {'total_sessions': -1},
        {'current_streak': 1.5},
        {'best_score': 101},
        {'best_score': -1},
        {'avg_filler_reduction': 150},
        {'avg_pace_control': -0.5},
        {'weekly_goal': -7},
        {'last_session_at': '2026-10-19'},
    ])
    def test_out_of_range_rejected(self, kwargs):
        """Test invalid field values raise at construction."""
        with pytest.raises(ValueError):
            ProgressUpdate(**kwargs)

    def test_changes_lists_set_fields_only(self):
        """Test unset fields are not part of the change set."""
        update = ProgressUpdate(total_sessions=3, best_score=0)
        assert update.changes() == {'total_sessions': 3, 'best_score': 0}

    def test_apply_leaves_unset_fields(self):
        """Test a partial update keeps everything else."""
        progress = UserProgress(user_id='user-1', total_sessions=2, current_streak=2,
                                best_score=70, weekly_goal=5)

        updated = progress.apply(ProgressUpdate(best_score=88), now=NOW)

        assert updated.best_score == 88
        assert updated.total_sessions == 2
        assert updated.current_streak == 2
        assert updated.weekly_goal == 5
        assert progress.best_score == 70

    def test_progress_dict_round_trip(self):
        """Test progress survives to_dict/from_dict."""
        progress = UserProgress(user_id='user-1', total_sessions=3, best_score=81,
                                last_session_at=NOW, updated_at=NOW)
        assert UserProgress.from_dict(progress.to_dict()) == progress
