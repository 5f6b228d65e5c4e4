"""Persistence layer: errors and the YAML implementation."""

from .base import StoreError, StoreIOError, StoreParseError
from .yaml_store import EXTENSION, YamlConfigStore, normalize_file_name, resolve_path

__all__ = [
    "StoreError",
    "StoreIOError",
    "StoreParseError",
    "YamlConfigStore",
    "EXTENSION",
    "normalize_file_name",
    "resolve_path",
]
