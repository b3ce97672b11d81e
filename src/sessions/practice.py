"""
Practice prompts and display helpers.
"""

import random
from typing import Optional

PRACTICE_PASSAGES = [
    "Explain your favorite hobby to someone who's never heard of it before. "
    "Focus on what makes it interesting and why you enjoy it.",
    "Describe a place you'd love to visit and what you would do there. "
    "Paint a vivid picture with your words.",
    "Tell us about a skill you've learned recently and how it has impacted your daily life.",
    "Share your thoughts on the importance of communication in building relationships.",
    "Describe a challenge you've overcome and what you learned from the experience.",
]


def random_practice_passage(rng: Optional[random.Random] = None) -> str:
    """Pick a practice prompt at random."""
    return (rng or random).choice(PRACTICE_PASSAGES)


def format_duration(seconds: int) -> str:
    """Format whole seconds as m:ss."""
    minutes, secs = divmod(int(seconds), 60)
    return f"{minutes}:{secs:02d}"
