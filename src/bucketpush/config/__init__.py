"""
Configuration management: ``bucketpush.yaml`` parsing and environment resolution.
"""

from bucketpush.config.loader import DEFAULT_CONFIG_FILENAME, Config, load_config
from bucketpush.config.resolver import resolve_config

__all__ = [
    "load_config",
    "Config",
    "resolve_config",
    "DEFAULT_CONFIG_FILENAME",
]
