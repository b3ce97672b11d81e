"""
Lexical speech metrics computed directly from transcript text.

Pure functions shared by the fallback analyzer and the scoring engine.
Filler matching is substring containment on whitespace-split tokens: a token
counts when it contains a filler (with spaces removed). This over-matches
words such as "also" or "summer" and is kept that way so scores stay
comparable with earlier sessions.
"""

import math
from typing import Dict, List

# Vocabulary used for the filler count, clarity and score
FILLER_WORDS: List[str] = [
    'um', 'uh', 'like', 'you know', 'so', 'basically', 'actually', 'literally'
]

# Vocabulary reported in the per-filler breakdown
BREAKDOWN_FILLERS: List[str] = ['um', 'uh', 'like', 'you know', 'so']

# Pace bands in precedence order: (low, high, score)
PACE_BANDS = [
    (110, 140, 100),
    (90, 160, 80),
    (70, 180, 60),
]
PACE_FLOOR_SCORE = 40

MIN_CLARITY = 0.3
MAX_CLARITY = 1.0


def round_half_up(value: float) -> int:
    """Round to the nearest integer, ties toward positive infinity."""
    return int(math.floor(value + 0.5))


def _lower_tokens(text: str) -> List[str]:
    return text.lower().split()


def _contains_filler(token: str, filler: str) -> bool:
    return filler.replace(' ', '') in token


def count_words(text: str) -> int:
    """
    Count whitespace-separated words.

    Args:
        text: Transcript text

    Returns:
        Number of non-empty tokens
    """
    return len(text.split())


def calculate_wpm(text: str, duration_seconds: float) -> int:
    """
    Calculate words per minute.

    Args:
        text: Transcript text
        duration_seconds: Spoken duration in seconds

    Returns:
        Rounded words per minute, or 0 when the duration is not positive
    """
    if duration_seconds <= 0:
        return 0
    return round_half_up(count_words(text) / duration_seconds * 60)


def count_fillers(text: str) -> int:
    """
    Count tokens containing any filler word.

    A token containing several fillers is counted once.

    Args:
        text: Transcript text

    Returns:
        Number of filler tokens
    """
    return sum(
        1 for token in _lower_tokens(text)
        if any(_contains_filler(token, filler) for filler in FILLER_WORDS)
    )


def get_filler_breakdown(text: str) -> Dict[str, int]:
    """
    Count occurrences per reported filler.

    Counts are not mutually exclusive: a token containing two fillers adds
    to both keys.

    Args:
        text: Transcript text

    Returns:
        Mapping of every reported filler to its token count
    """
    tokens = _lower_tokens(text)
    return {
        filler: sum(1 for token in tokens if _contains_filler(token, filler))
        for filler in BREAKDOWN_FILLERS
    }


def calculate_clarity_score(text: str) -> float:
    """
    Estimate clarity from the filler ratio.

    Args:
        text: Transcript text

    Returns:
        Clarity in [0.3, 1.0]
    """
    word_count = count_words(text)
    filler_ratio = count_fillers(text) / word_count if word_count > 0 else 0
    return max(MIN_CLARITY, min(MAX_CLARITY, 1 - filler_ratio * 2))


def get_pace_score(wpm: float) -> int:
    """
    Map words per minute to a pace score.

    Bands are checked in order and the first match wins.

    Args:
        wpm: Words per minute

    Returns:
        100, 80, 60 or 40
    """
    for low, high, score in PACE_BANDS:
        if low <= wpm <= high:
            return score
    return PACE_FLOOR_SCORE


def calculate_fillers_per_minute(text: str, duration_seconds: float) -> float:
    """Filler tokens per minute of speech (0 for a non-positive duration)."""
    if duration_seconds <= 0:
        return 0.0
    return count_fillers(text) / (duration_seconds / 60)


def calculate_filler_improvement(text: str) -> int:
    """Filler improvement score: 100 minus 10 per filler, floored at 0."""
    return max(0, 100 - count_fillers(text) * 10)
