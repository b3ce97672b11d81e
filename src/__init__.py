"""
Speech Coach - Core Package

Transcript analysis and progress tracking for speaking practice sessions.
"""

__version__ = "0.1.0"
__author__ = "Speech Coach Team"

# Package metadata
__all__ = [
    'analysis',
    'llm',
    'metrics',
    'progress',
    'sessions',
    'storage',
]
