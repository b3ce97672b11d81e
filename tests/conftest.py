"""Shared fixtures for the speech coach tests."""

from datetime import datetime, timedelta

import pytest

from src.analysis.fallback_analyzer import fallback_analysis
from src.progress.models import Session

NOW = datetime(2026, 10, 19, 12, 0, 0)


class FakeClock:
    """Settable clock; each call returns the current value."""

    def __init__(self, start=NOW):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, **kwargs):
        self.now = self.now + timedelta(**kwargs)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def make_analysis():
    """Factory for analyses with chosen score and progress metrics."""
    def _make(score=75, pace_score=None, filler_improvement=None,
              text="a short practice talk about the weather", duration_seconds=60):
        analysis = fallback_analysis(text, duration_seconds)
        metric_updates = {}
        if pace_score is not None:
            metric_updates['pace_score'] = pace_score
        if filler_improvement is not None:
            metric_updates['filler_improvement'] = filler_improvement
        return analysis.model_copy(update={
            'score': score,
            'metrics': analysis.metrics.model_copy(update=metric_updates),
        })
    return _make


@pytest.fixture
def make_session(make_analysis):
    """Factory for persisted-looking sessions."""
    counter = {'n': 0}

    def _make(created_at=NOW, user_id='user-1', duration_ms=60000, **analysis_kwargs):
        counter['n'] += 1
        return Session(
            id=f"session-{counter['n']}",
            user_id=user_id,
            duration_ms=duration_ms,
            analysis=make_analysis(**analysis_kwargs),
            practice_mode='free',
            created_at=created_at,
        )
    return _make
