"""
Lexical speech metrics and the overall session score.

This package provides:
- Word, filler and words-per-minute counts
- Per-filler breakdown
- Clarity and pace scores
- The 0-100 overall score
"""

from src.metrics.lexical_metrics import (
    BREAKDOWN_FILLERS,
    FILLER_WORDS,
    calculate_clarity_score,
    calculate_filler_improvement,
    calculate_fillers_per_minute,
    calculate_wpm,
    count_fillers,
    count_words,
    get_filler_breakdown,
    get_pace_score,
)
from src.metrics.scoring import calculate_overall_score

__all__ = [
    'BREAKDOWN_FILLERS',
    'FILLER_WORDS',
    'calculate_clarity_score',
    'calculate_filler_improvement',
    'calculate_fillers_per_minute',
    'calculate_wpm',
    'count_fillers',
    'count_words',
    'get_filler_breakdown',
    'get_pace_score',
    'calculate_overall_score',
]
