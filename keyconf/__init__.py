"""Keyed, lifecycle-managed YAML configuration stores."""

from .lifecycle import LifecycleBinding
from .registry import ConfigRegistry
from .repositories import (
    EXTENSION,
    StoreError,
    StoreIOError,
    StoreParseError,
    YamlConfigStore,
)

__all__ = [
    "ConfigRegistry",
    "LifecycleBinding",
    "YamlConfigStore",
    "StoreError",
    "StoreIOError",
    "StoreParseError",
    "EXTENSION",
]
