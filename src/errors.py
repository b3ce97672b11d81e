"""
Error taxonomy for the speech coaching engine.

Only InvalidInput and ProgressUpdateInconsistency are meant to reach the
caller of a session submission. ExternalAnalysisUnavailable is recovered by
the fallback analyzer and AchievementDuplicate is treated as a no-op.
"""

import math


class SpeechCoachError(Exception):
    """Base class for all engine errors."""


class InvalidInput(SpeechCoachError, ValueError):
    """Transcript is blank or the session duration is not positive."""


class ExternalAnalysisUnavailable(SpeechCoachError):
    """The language-model analysis failed or returned an unusable payload."""


class ProgressUpdateInconsistency(SpeechCoachError):
    """A user has no progress record to update."""

    def __init__(self, user_id: str):
        super().__init__(f"User progress not found for user {user_id}")
        self.user_id = user_id


class AchievementDuplicate(SpeechCoachError):
    """An achievement type was already unlocked for the user."""

    def __init__(self, user_id: str, achievement_type: str):
        super().__init__(
            f"Achievement '{achievement_type}' already unlocked for user {user_id}"
        )
        self.user_id = user_id
        self.achievement_type = achievement_type


def validate_duration(duration, label: str = "Duration") -> float:
    """
    Check that a duration is a finite positive number.

    Raises:
        InvalidInput: If the value is not a number, not finite or not positive
    """
    if isinstance(duration, bool) or not isinstance(duration, (int, float)):
        raise InvalidInput(f"{label} must be a number, got {duration!r}")
    if not math.isfinite(duration) or duration <= 0:
        raise InvalidInput(f"{label} must be a finite positive number, got {duration}")
    return duration


def validate_analysis_input(transcript: str, duration_seconds: float) -> str:
    """
    Check analyzer input and return the trimmed transcript.

    Args:
        transcript: Raw transcript text
        duration_seconds: Session duration in seconds

    Returns:
        Transcript with surrounding whitespace removed

    Raises:
        InvalidInput: If the transcript is blank or the duration is not a
            finite positive number
    """
    if not isinstance(transcript, str) or not transcript.strip():
        raise InvalidInput("Transcript must not be empty")
    validate_duration(duration_seconds)
    return transcript.strip()
