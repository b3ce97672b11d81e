"""
Transcript analysis: data model, deterministic fallback and the
language-model assisted analyzer.
"""

from src.analysis.ai_analyzer import AIAnalyzer, merge_analysis, parse_analysis_payload
from src.analysis.fallback_analyzer import fallback_analysis
from src.analysis.models import (
    Analysis,
    Highlight,
    Metrics,
    Recommendation,
    Segment,
    Token,
)

__all__ = [
    'AIAnalyzer',
    'merge_analysis',
    'parse_analysis_payload',
    'fallback_analysis',
    'Analysis',
    'Highlight',
    'Metrics',
    'Recommendation',
    'Segment',
    'Token',
]
