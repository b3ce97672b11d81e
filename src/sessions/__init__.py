"""
Session submission and practice helpers.
"""

from src.sessions.pipeline import SessionPipeline, SessionResult
from src.sessions.practice import PRACTICE_PASSAGES, format_duration, random_practice_passage

__all__ = [
    'SessionPipeline',
    'SessionResult',
    'PRACTICE_PASSAGES',
    'format_duration',
    'random_practice_passage',
]
