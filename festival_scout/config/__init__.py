"""Configuration module -- exports Settings, load_config and the cache policy."""

from festival_scout.config import cache_policy
from festival_scout.config.loader import load_config
from festival_scout.config.settings import Settings

__all__ = ["Settings", "cache_policy", "load_config"]
