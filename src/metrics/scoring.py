"""
Overall session score.

The score is built by sequential blending: every step operates on the
running score produced by the step before it, so the weights below are not
the weights of a single weighted sum.
"""

import logging

from src.metrics.lexical_metrics import (
    calculate_clarity_score,
    calculate_wpm,
    count_fillers,
    count_words,
    get_pace_score,
    round_half_up,
)

logger = logging.getLogger(__name__)

MAX_FILLER_PENALTY = 30
FILLER_WEIGHT = 0.3
PACE_WEIGHT = 0.2
CLARITY_WEIGHT = 0.2
LONG_SESSION_SECONDS = 120
LONG_SESSION_BONUS = 5
SHORT_SESSION_SECONDS = 30
SHORT_SESSION_PENALTY = 10


def calculate_overall_score(text: str, duration_seconds: float) -> int:
    """
    Score a transcript from 0 to 100.

    Steps:
        1. Start at 100.
        2. Subtract the filler penalty, capped at 30.
        3. Blend in the pace score at 20%.
        4. Blend in the clarity score at 20%.
        5. Add 5 for sessions of two minutes or more, subtract 10 for
           sessions under 30 seconds.
        6. Clamp to [0, 100] and round.

    Args:
        text: Transcript text
        duration_seconds: Spoken duration in seconds

    Returns:
        Integer score in [0, 100]
    """
    word_count = count_words(text)
    filler_count = count_fillers(text)

    score = 100.0

    if word_count > 0:
        filler_penalty = min(
            MAX_FILLER_PENALTY, (filler_count / word_count) * 100 * FILLER_WEIGHT
        )
        score -= filler_penalty

    pace_score = get_pace_score(calculate_wpm(text, duration_seconds))
    score = score * (1 - PACE_WEIGHT) + pace_score * PACE_WEIGHT

    clarity_score = calculate_clarity_score(text)
    score = score * (1 - CLARITY_WEIGHT) + clarity_score * 100 * CLARITY_WEIGHT

    if duration_seconds >= LONG_SESSION_SECONDS:
        score += LONG_SESSION_BONUS
    if duration_seconds < SHORT_SESSION_SECONDS:
        score -= SHORT_SESSION_PENALTY

    final = max(0, min(100, round_half_up(score)))
    logger.debug(
        f"Score: words={word_count}, fillers={filler_count}, "
        f"pace={pace_score}, clarity={clarity_score:.2f} -> {final}"
    )
    return final
