"""
Runtime configuration for the speech coaching engine.

Values come from the environment (optionally a .env file). The storage
backend is chosen here, at the composition root, and handed to the session
pipeline; nothing below this layer reads the environment for it.
"""

import logging
import os
from dataclasses import dataclass, field

from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)

STORAGE_BACKENDS = ('memory', 'json')


def _env_float(name: str, default: str) -> float:
    return float(os.getenv(name, default))


def _env_int(name: str, default: str) -> int:
    return int(os.getenv(name, default))


@dataclass
class CoachConfig:
    """
    Engine settings.

    Attributes:
        analysis_timeout: Seconds to wait for the language-model analysis
        use_llm: Whether the language model is consulted (ANALYSIS_USE_LLM)
        llm_temperature: Sampling temperature for the analysis call
        storage_backend: 'memory' or 'json'
        storage_path: File used by the JSON backend
        weekly_goal: Default weekly session goal for new users
    """

    analysis_timeout: float = field(
        default_factory=lambda: _env_float('ANALYSIS_TIMEOUT', '30')
    )
    use_llm: bool = field(
        default_factory=lambda: os.getenv('ANALYSIS_USE_LLM', 'true').lower() == 'true'
    )
    llm_temperature: float = field(
        default_factory=lambda: _env_float('ANALYSIS_TEMPERATURE', '0.2')
    )
    storage_backend: str = field(
        default_factory=lambda: os.getenv('STORAGE_BACKEND', 'memory').lower()
    )
    storage_path: str = field(
        default_factory=lambda: os.getenv('STORAGE_PATH', 'data/speech_coach.json')
    )
    weekly_goal: int = field(default_factory=lambda: _env_int('WEEKLY_GOAL', '7'))

    def __post_init__(self):
        if self.storage_backend not in STORAGE_BACKENDS:
            raise ValueError(
                f"Unknown STORAGE_BACKEND: {self.storage_backend!r}. "
                f"Valid options: {', '.join(STORAGE_BACKENDS)}"
            )
        if self.analysis_timeout <= 0:
            raise ValueError(f"ANALYSIS_TIMEOUT must be positive, got {self.analysis_timeout}")


def load_config() -> CoachConfig:
    """Build a CoachConfig from the current environment."""
    config = CoachConfig()
    logger.info(
        f"Config loaded: storage={config.storage_backend}, "
        f"analysis_timeout={config.analysis_timeout}s"
    )
    return config
