"""
Keyed collection of YAML config stores sharing one directory and one set of
default values.

Defaults are applied when a store is registered. Adding a default later does
not touch stores that are already registered.
"""

import copy
import logging
import threading
from pathlib import Path
from typing import Any, Generic, Hashable, Mapping, Optional, TypeVar, Union

from .repositories import YamlConfigStore

logger = logging.getLogger(__name__)

K = TypeVar("K", bound=Hashable)


class ConfigRegistry(Generic[K]):
    """Maps application keys to YamlConfigStores under ``base_directory``."""

    def __init__(
        self,
        base_directory: Union[str, Path],
        sub_directories: Optional[Union[str, Path]] = None,
    ):
        directory = Path(base_directory).expanduser()
        if sub_directories:
            directory = directory / sub_directories
        self.base_directory = directory.absolute()
        self._defaults: dict[str, Any] = {}
        self._entries: dict[K, YamlConfigStore] = {}
        self._lock = threading.RLock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._entries

    def is_registered(self, key: K) -> bool:
        return key in self

    def keys(self) -> list[K]:
        with self._lock:
            return list(self._entries)

    @property
    def defaults(self) -> dict[str, Any]:
        with self._lock:
            return copy.deepcopy(self._defaults)

    def register(self, key: K, file_name: str, overwrite: bool = False) -> bool:
        """
        Open ``<base_directory>/<file_name>.yml`` and map it to ``key``.

        Returns False, doing nothing, when ``key`` is already registered and
        ``overwrite`` is not set. With ``overwrite`` the previous store is
        dropped WITHOUT being saved; save it first if its changes matter.
        A newly created file is written once with the current defaults.
        StoreIOError / StoreParseError propagate and leave the registry as
        it was.
        """
        with self._lock:
            if key in self._entries and not overwrite:
                return False
            store = YamlConfigStore(self.base_directory, file_name)
            store.merge_defaults(self._defaults)
            if store.was_first_load and self._defaults:
                store.save()
            replaced = self._entries.get(key)
            shared = [k for k, s in self._entries.items() if k != key and s.path == store.path]
            self._entries[key] = store
        if shared:
            logger.warning("Config for %s shares %s with %s", key, store.path, shared)
        if replaced is not None:
            logger.warning("Config for %s replaced without saving %s", key, replaced.path)
        logger.debug("Registered %s -> %s", key, store.path)
        return True

    def deregister(self, key: K) -> Optional[YamlConfigStore]:
        """Remove and return the store for ``key`` (None if absent). Does not save."""
        with self._lock:
            return self._entries.pop(key, None)

    def get(self, key: K) -> Optional[YamlConfigStore]:
        with self._lock:
            return self._entries.get(key)

    def save_all(self) -> None:
        """
        Save every registered store. The first failure stops the batch and
        propagates; stores saved before it stay saved.
        """
        with self._lock:
            stores = list(self._entries.values())
            for store in stores:
                store.save()
        logger.debug("Saved %d config(s) under %s", len(stores), self.base_directory)

    def add_default(self, key: str, value: Any) -> None:
        """Add a default for stores registered from now on. Existing stores are unaffected."""
        with self._lock:
            self._defaults[key] = copy.deepcopy(value)

    def add_defaults(self, defaults: Mapping[str, Any]) -> None:
        for key, value in defaults.items():
            self.add_default(key, value)
