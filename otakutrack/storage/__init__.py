"""
Storage Layer.

This package handles all data persistence: the key-value storage, the
tracked-progress collection, the API response cache and the configuration file.
"""

from .cache import CacheStore
from .config_manager import ConfigManager
from .kv_store import JSONFileStorage
from .progress import ProgressStore

__all__ = ["CacheStore", "ConfigManager", "JSONFileStorage", "ProgressStore"]
