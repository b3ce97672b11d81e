"""
Records for users, sessions, progress and achievements.

Sessions and achievements are immutable once created. UserProgress changes
only through a ProgressUpdate, which is validated when it is built and
applied as a whole.
"""

from dataclasses import dataclass, field, fields, replace
from datetime import datetime
from typing import Any, Dict, Optional

from src.analysis.models import Analysis, Metrics

DEFAULT_WEEKLY_GOAL = 7


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


def _parse_iso(value: Optional[str]) -> Optional[datetime]:
    return datetime.fromisoformat(value) if value else None


@dataclass(frozen=True)
class User:
    """A practising speaker."""

    id: str
    username: str
    created_at: datetime

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {'id': self.id, 'username': self.username, 'created_at': _iso(self.created_at)}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'User':
        """Create from dictionary."""
        return cls(
            id=data['id'],
            username=data['username'],
            created_at=_parse_iso(data['created_at']),
        )


@dataclass(frozen=True)
class NewSession:
    """Fields supplied when a session is created; storage adds id and created_at."""

    user_id: str
    duration_ms: int
    analysis: Analysis
    practice_mode: str
    audio_uri: Optional[str] = None


@dataclass(frozen=True)
class Session:
    """A persisted practice session."""

    id: str
    user_id: str
    duration_ms: int
    analysis: Analysis
    practice_mode: str
    created_at: datetime
    audio_uri: Optional[str] = None

    @property
    def score(self) -> int:
        return self.analysis.score

    @property
    def metrics(self) -> Metrics:
        return self.analysis.metrics

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            'id': self.id,
            'user_id': self.user_id,
            'duration_ms': self.duration_ms,
            'audio_uri': self.audio_uri,
            'practice_mode': self.practice_mode,
            'created_at': _iso(self.created_at),
            **self.analysis.to_payload(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Session':
        """Create from dictionary."""
        return cls(
            id=data['id'],
            user_id=data['user_id'],
            duration_ms=data['duration_ms'],
            analysis=Analysis.model_validate(data),
            practice_mode=data['practice_mode'],
            created_at=_parse_iso(data['created_at']),
            audio_uri=data.get('audio_uri'),
        )


@dataclass(frozen=True)
class ProgressUpdate:
    """
    Partial update of a user's progress. Unset fields are left unchanged.

    Raises:
        ValueError: If a set field is out of range
    """

    total_sessions: Optional[int] = None
    current_streak: Optional[int] = None
    best_score: Optional[int] = None
    avg_filler_reduction: Optional[float] = None
    avg_pace_control: Optional[float] = None
    weekly_goal: Optional[int] = None
    weekly_completed: Optional[int] = None
    last_session_at: Optional[datetime] = None

    def __post_init__(self):
        for name in ('total_sessions', 'current_streak', 'weekly_goal', 'weekly_completed'):
            value = getattr(self, name)
            if value is not None and (not isinstance(value, int) or value < 0):
                raise ValueError(f"{name} must be a non-negative integer, got {value!r}")

        if self.best_score is not None and not 0 <= self.best_score <= 100:
            raise ValueError(f"best_score must be within 0-100, got {self.best_score}")

        for name in ('avg_filler_reduction', 'avg_pace_control'):
            value = getattr(self, name)
            if value is not None and not 0 <= value <= 100:
                raise ValueError(f"{name} must be within 0-100, got {value}")

        if self.last_session_at is not None and not isinstance(self.last_session_at, datetime):
            raise ValueError("last_session_at must be a datetime")

    def changes(self) -> Dict[str, Any]:
        """Return only the fields that are set."""
        return {
            f.name: getattr(self, f.name)
            for f in fields(self)
            if getattr(self, f.name) is not None
        }


@dataclass(frozen=True)
class UserProgress:
    """Longitudinal progress for one user."""

    user_id: str
    total_sessions: int = 0
    current_streak: int = 0
    best_score: int = 0
    avg_filler_reduction: float = 0.0
    avg_pace_control: float = 0.0
    weekly_goal: int = DEFAULT_WEEKLY_GOAL
    weekly_completed: int = 0
    last_session_at: Optional[datetime] = None
    updated_at: datetime = field(default_factory=datetime.now)

    def apply(self, update: ProgressUpdate, now: Optional[datetime] = None) -> 'UserProgress':
        """Return a copy with every set field of ``update`` applied."""
        return replace(self, **update.changes(), updated_at=now or datetime.now())

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            'user_id': self.user_id,
            'total_sessions': self.total_sessions,
            'current_streak': self.current_streak,
            'best_score': self.best_score,
            'avg_filler_reduction': self.avg_filler_reduction,
            'avg_pace_control': self.avg_pace_control,
            'weekly_goal': self.weekly_goal,
            'weekly_completed': self.weekly_completed,
            'last_session_at': _iso(self.last_session_at),
            'updated_at': _iso(self.updated_at),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'UserProgress':
        """Create from dictionary."""
        return cls(
            user_id=data['user_id'],
            total_sessions=data.get('total_sessions', 0),
            current_streak=data.get('current_streak', 0),
            best_score=data.get('best_score', 0),
            avg_filler_reduction=data.get('avg_filler_reduction', 0.0),
            avg_pace_control=data.get('avg_pace_control', 0.0),
            weekly_goal=data.get('weekly_goal', DEFAULT_WEEKLY_GOAL),
            weekly_completed=data.get('weekly_completed', 0),
            last_session_at=_parse_iso(data.get('last_session_at')),
            updated_at=_parse_iso(data.get('updated_at')) or datetime.now(),
        )


@dataclass(frozen=True)
class NewAchievement:
    """An achievement about to be unlocked; storage adds id and unlocked_at."""

    user_id: str
    type: str
    title: str
    description: str
    icon: str


@dataclass(frozen=True)
class Achievement:
    """An unlocked achievement. At most one per (user_id, type)."""

    id: str
    user_id: str
    type: str
    title: str
    description: str
    icon: str
    unlocked_at: datetime

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            'id': self.id,
            'user_id': self.user_id,
            'type': self.type,
            'title': self.title,
            'description': self.description,
            'icon': self.icon,
            'unlocked_at': _iso(self.unlocked_at),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Achievement':
        """Create from dictionary."""
        return cls(
            id=data['id'],
            user_id=data['user_id'],
            type=data['type'],
            title=data['title'],
            description=data['description'],
            icon=data['icon'],
            unlocked_at=_parse_iso(data['unlocked_at']),
        )
