"""Tests for the session submission pipeline."""

import threading
from unittest.mock import Mock, patch

import pytest

from src.analysis.ai_analyzer import AIAnalyzer
from src.errors import AchievementDuplicate, InvalidInput, ProgressUpdateInconsistency
from src.progress.tracker import ProgressTracker
from src.sessions.pipeline import SessionPipeline
from src.storage import InMemoryStorage, JsonFileStorage

TEXT = "Today I want to talk about why I enjoy long walks in the park"


@pytest.fixture
def storage(clock):
    return InMemoryStorage(clock=clock)


@pytest.fixture
def analyzer(make_analysis):
    """Analyzer double returning a fixed analysis."""
    analyzer = Mock(spec=AIAnalyzer)
    analyzer.analyze.return_value = make_analysis(score=85)
    return analyzer


@pytest.fixture
def pipeline(storage, analyzer, clock):
    return SessionPipeline(storage, analyzer, tracker=ProgressTracker(clock=clock))


class TestSubmitSession:
    """Test suite for SessionPipeline.submit_session()."""

    def test_first_long_high_scoring_session(self, pipeline):
        """Test the first session's progress and badges."""
        user = pipeline.create_user('alice')

        result = pipeline.submit_session(user.id, TEXT, 360000, 'free')

        assert result.progress.total_sessions == 1
        assert result.progress.current_streak == 1
        assert result.progress.best_score == 85
        assert {a.type for a in result.new_achievements} == {'score_80', 'time_master'}
        assert result.session.duration_ms == 360000
        assert pipeline.get_session(result.session.id) == result.session

    def test_analyzer_receives_seconds(self, pipeline, analyzer):
        """Test the duration is passed to the analyzer in seconds."""
        user = pipeline.create_user('alice')
        pipeline.submit_session(user.id, f"  {TEXT}  ", 95000, 'free')
        analyzer.analyze.assert_called_once_with(TEXT, 95.0)

    def test_second_session_unlocks_nothing_new(self, pipeline, clock):
        """Test badges are issued once."""
        user = pipeline.create_user('alice')
        pipeline.submit_session(user.id, TEXT, 360000, 'free')
        clock.advance(minutes=30)

        result = pipeline.submit_session(user.id, TEXT, 360000, 'free')

        assert result.new_achievements == []
        assert result.progress.total_sessions == 2
        assert len(pipeline.get_achievements(user.id)) == 2

    def test_daily_practice_builds_streak(self, pipeline, clock):
        """Test seven consecutive days unlock the streak badge."""
        user = pipeline.create_user('alice')
        unlocked = set()
        for day in range(7):
            result = pipeline.submit_session(user.id, TEXT, 60000, 'free')
            assert result.progress.current_streak == day + 1
            unlocked |= {a.type for a in result.new_achievements}
            clock.advance(days=1)

        assert 'streak_7' in unlocked

    def test_missed_day_resets_streak(self, pipeline, clock):
        """Test a gap drops the streak back to 1."""
        user = pipeline.create_user('alice')
        pipeline.submit_session(user.id, TEXT, 60000, 'free')
        clock.advance(days=1)
        assert pipeline.submit_session(user.id, TEXT, 60000, 'free').progress.current_streak == 2

        clock.advance(days=2)
        assert pipeline.submit_session(user.id, TEXT, 60000, 'free').progress.current_streak == 1

    @pytest.mark.parametrize("transcript,duration_ms,mode", [
        ("", 60000, 'free'),
        ("   ", 60000, 'free'),
        (TEXT, 0, 'free'),
        (TEXT, -100, 'free'),
        (TEXT, True, 'free'),
        (TEXT, float('nan'), 'free'),
        (TEXT, float('inf'), 'free'),
        (TEXT, 0.4, 'free'),
        (TEXT, 60000, ''),
    ])
    def test_invalid_input(self, pipeline, analyzer, transcript, duration_ms, mode):
        """Test invalid submissions are rejected before analysis."""
        user = pipeline.create_user('alice')

        with pytest.raises(InvalidInput):
            pipeline.submit_session(user.id, transcript, duration_ms, mode)

        analyzer.analyze.assert_not_called()
        assert pipeline.get_sessions(user.id) == []

    def test_duration_rounds_half_up(self, pipeline):
        """Test fractional milliseconds are stored rounded half up."""
        user = pipeline.create_user('alice')
        assert pipeline.submit_session(user.id, TEXT, 1500.5, 'free').session.duration_ms == 1501
        assert pipeline.submit_session(user.id, TEXT, 0.5, 'free').session.duration_ms == 1

    def test_failed_session_write_leaves_no_session(self, analyzer, clock, tmp_path):
        """Test a session that cannot be saved is not kept in memory either."""
        storage = JsonFileStorage(tmp_path / 'store.json', clock=clock)
        pipeline = SessionPipeline(storage, analyzer, tracker=ProgressTracker(clock=clock))
        user = pipeline.create_user('alice')

        with patch.object(storage, '_persist', side_effect=OSError("disk full")):
            with pytest.raises(OSError):
                pipeline.submit_session(user.id, TEXT, 60000, 'free')

        assert storage.get_user_sessions(user.id) == []
        assert storage.get_user_progress(user.id).total_sessions == 0

        result = pipeline.submit_session(user.id, TEXT, 60000, 'free')
        reopened = JsonFileStorage(tmp_path / 'store.json', clock=clock)
        assert [s.id for s in reopened.get_user_sessions(user.id)] == [result.session.id]
        assert reopened.get_user_progress(user.id).total_sessions == 1

    def test_failed_progress_update_removes_session(self, pipeline, storage):
        """Test a session is withdrawn when its progress update fails."""
        user = pipeline.create_user('alice')

        with patch.object(storage, 'update_user_progress', side_effect=OSError("disk full")):
            with pytest.raises(OSError):
                pipeline.submit_session(user.id, TEXT, 60000, 'free')

        assert storage.get_user_sessions(user.id) == []
        assert storage.get_user_progress(user.id).total_sessions == 0

    def test_unknown_user(self, pipeline, storage):
        """Test a user without progress is rejected and nothing is stored."""
        with pytest.raises(ProgressUpdateInconsistency):
            pipeline.submit_session('ghost', TEXT, 60000, 'free')
        assert storage.get_user_sessions('ghost') == []

    def test_duplicate_achievement_is_skipped(self, pipeline, storage):
        """Test a concurrent unlock of the same badge does not fail the session."""
        user = pipeline.create_user('alice')

        with patch.object(storage, 'create_achievement',
                          side_effect=AchievementDuplicate(user.id, 'score_80')):
            result = pipeline.submit_session(user.id, TEXT, 60000, 'free')

        assert result.new_achievements == []
        assert result.progress.total_sessions == 1

    def test_concurrent_submissions_for_one_user(self, pipeline):
        """Test parallel submissions never lose a progress update."""
        user = pipeline.create_user('alice')
        errors = []

        def submit():
            try:
                pipeline.submit_session(user.id, TEXT, 60000, 'free')
            except Exception as e:
                errors.append(e)

        threads = [threading.Thread(target=submit) for _ in range(10)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert errors == []
        assert pipeline.get_progress(user.id).total_sessions == 10
        assert len(pipeline.get_sessions(user.id, limit=20)) == 10
        assert len(pipeline.get_achievements(user.id)) == 1

    def test_with_fallback_analyzer(self, storage, clock):
        """Test an end-to-end run when the model is unreachable."""
        client = Mock()
        client.generate.return_value = None
        pipeline = SessionPipeline(storage, AIAnalyzer(client),
                                   tracker=ProgressTracker(clock=clock))
        user = pipeline.create_user('alice')

        result = pipeline.submit_session(
            user.id, "I think um this is uh a good idea you know", 10000, 'free'
        )

        assert result.session.score == 70
        assert result.progress.best_score == 70
        assert result.new_achievements == []


class TestCreateUser:
    """Test suite for SessionPipeline.create_user()."""

    def test_username_trimmed(self, pipeline):
        """Test surrounding whitespace is removed."""
        assert pipeline.create_user('  alice ').username == 'alice'

    @pytest.mark.parametrize("username", ["", "   "])
    def test_blank_username(self, pipeline, username):
        """Test blank usernames are rejected."""
        with pytest.raises(InvalidInput):
            pipeline.create_user(username)
