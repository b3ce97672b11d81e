"""
Deterministic fallback analysis.

Builds a complete Analysis from lexical metrics alone, with no external
calls. Used whenever the language-model analysis is unavailable, and as the
source of per-field defaults when the model's answer is incomplete.

Token and highlight timings are synthetic: each word is given a 500 ms slot
in order of appearance. They approximate position in the recording and are
not derived from real timing data.
"""

import logging
from typing import List

from src.analysis.models import (
    Analysis,
    Highlight,
    Metrics,
    Recommendation,
    Segment,
    Token,
)
from src.metrics.lexical_metrics import (
    calculate_clarity_score,
    calculate_filler_improvement,
    calculate_fillers_per_minute,
    calculate_wpm,
    count_fillers,
    count_words,
    get_filler_breakdown,
    get_pace_score,
    round_half_up,
)
from src.metrics.scoring import calculate_overall_score

logger = logging.getLogger(__name__)

SYNTHETIC_SLOT_MS = 500

# Exact-match vocabularies for token kinds and highlights
TOKEN_FILLERS = {'um', 'uh', 'like', 'you', 'know', 'so', 'basically'}
HIGHLIGHT_FILLERS = {'um', 'uh', 'like'}

# No audio signal is available to this path
DEFAULT_AVG_PAUSE_MS = 400
DEFAULT_ENERGY_MEAN = -18
DEFAULT_PITCH_MEDIAN_HZ = 180
DEFAULT_CONFIDENCE = 0.85

REC_BREATHE = Recommendation(
    id='rec-breathe',
    text='Practice deep breathing before speaking',
    description='Try the 4-6-4 breathing technique to reduce filler words',
)
REC_PACE = Recommendation(
    id='rec-pace',
    text='Increase your speaking pace slightly',
    description='Aim for 110-140 words per minute for better engagement',
)
REC_SLOW = Recommendation(
    id='rec-slow',
    text='Slow down your speaking pace',
    description='Speaking too fast can reduce clarity and comprehension',
)
REC_LENGTH = Recommendation(
    id='rec-length',
    text='Try longer practice sessions',
    description='Aim for 2-3 minute sessions to build speaking endurance',
)

FILLER_RECOMMENDATION_THRESHOLD = 3
SLOW_WPM = 110
FAST_WPM = 140
SHORT_PRACTICE_SECONDS = 60


def _slot(index: int) -> tuple:
    return index * SYNTHETIC_SLOT_MS, (index + 1) * SYNTHETIC_SLOT_MS


def tokenize_transcript(text: str) -> List[Token]:
    """Split text into tokens with synthetic 500 ms timings."""
    tokens = []
    for index, word in enumerate(text.split()):
        start_ms, end_ms = _slot(index)
        kind = 'filler' if word.lower() in TOKEN_FILLERS else 'word'
        tokens.append(Token(text=word, kind=kind, start_ms=start_ms, end_ms=end_ms))
    return tokens


def build_segments(text: str, duration_seconds: float) -> List[Segment]:
    """Wrap the whole transcript in a single segment."""
    return [
        Segment(
            start_ms=0,
            end_ms=round_half_up(duration_seconds * 1000),
            text=text,
            tokens=tokenize_transcript(text),
        )
    ]


def build_metrics(text: str, duration_seconds: float) -> Metrics:
    """Compute metrics from the text, defaulting the signal-only fields."""
    wpm = calculate_wpm(text, duration_seconds)
    return Metrics(
        total_words=count_words(text),
        words_per_minute=wpm,
        total_fillers=count_fillers(text),
        fillers_per_minute=calculate_fillers_per_minute(text, duration_seconds),
        avg_pause_ms=DEFAULT_AVG_PAUSE_MS,
        energy_mean=DEFAULT_ENERGY_MEAN,
        pitch_median_hz=DEFAULT_PITCH_MEDIAN_HZ,
        clarity_score=calculate_clarity_score(text),
        confidence=DEFAULT_CONFIDENCE,
        pace_score=get_pace_score(wpm),
        filler_improvement=calculate_filler_improvement(text),
    )


def generate_highlights(text: str) -> List[Highlight]:
    """
    Mark standalone um/uh/like words.

    Long-pause highlights need real pause timing and are never produced here.
    """
    highlights = []
    for index, word in enumerate(text.split()):
        if word.lower() in HIGHLIGHT_FILLERS:
            start_ms, end_ms = _slot(index)
            highlights.append(
                Highlight(kind='filler', start_ms=start_ms, end_ms=end_ms, text=word)
            )
    return highlights


def generate_recommendations(text: str, duration_seconds: float) -> List[Recommendation]:
    """Pick coaching tips from filler count, pace and session length."""
    recommendations = []
    wpm = calculate_wpm(text, duration_seconds)

    if count_fillers(text) > FILLER_RECOMMENDATION_THRESHOLD:
        recommendations.append(REC_BREATHE)

    if wpm < SLOW_WPM:
        recommendations.append(REC_PACE)
    elif wpm > FAST_WPM:
        recommendations.append(REC_SLOW)

    if duration_seconds < SHORT_PRACTICE_SECONDS:
        recommendations.append(REC_LENGTH)

    return recommendations


def fallback_analysis(text: str, duration_seconds: float) -> Analysis:
    """
    Analyze a transcript without the language model.

    Same input always yields an equal Analysis.

    Args:
        text: Non-empty transcript text
        duration_seconds: Positive session duration in seconds

    Returns:
        Complete Analysis
    """
    analysis = Analysis(
        transcript=build_segments(text, duration_seconds),
        metrics=build_metrics(text, duration_seconds),
        filler_breakdown=get_filler_breakdown(text),
        highlights=generate_highlights(text),
        recommendations=generate_recommendations(text, duration_seconds),
        score=calculate_overall_score(text, duration_seconds),
    )
    logger.debug(
        f"Fallback analysis: {analysis.metrics.total_words} words, score={analysis.score}"
    )
    return analysis
