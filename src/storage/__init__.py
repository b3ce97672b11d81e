"""
Storage backends for users, sessions, progress and achievements.
"""

import logging

from src.config import CoachConfig
from src.storage.base import StorageBackend
from src.storage.json_store import JsonFileStorage
from src.storage.memory_store import InMemoryStorage

logger = logging.getLogger(__name__)


def create_storage(config: CoachConfig) -> StorageBackend:
    """
    Build the storage backend named in the config.

    Args:
        config: Engine configuration

    Returns:
        StorageBackend instance
    """
    if config.storage_backend == 'json':
        storage = JsonFileStorage(config.storage_path, weekly_goal=config.weekly_goal)
    else:
        storage = InMemoryStorage(weekly_goal=config.weekly_goal)
    logger.info(f"Storage backend: {type(storage).__name__}")
    return storage


__all__ = [
    'StorageBackend',
    'InMemoryStorage',
    'JsonFileStorage',
    'create_storage',
]
