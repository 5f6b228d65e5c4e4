"""
YAML-file configuration store.

One YamlConfigStore owns exactly one ``.yml`` file. Opening never truncates
an existing file; nothing is written back until ``save()`` is called.
Keys are dotted paths into the nested mapping: ``"audio.volume"`` addresses
``{"audio": {"volume": ...}}``.
"""

import contextlib
import copy
import logging
import threading
from pathlib import Path, PurePath
from typing import Any, BinaryIO, Iterator, Mapping, Optional, Union

import yaml

from .base import StoreError, StoreIOError, StoreParseError

logger = logging.getLogger(__name__)

EXTENSION = ".yml"
PATH_SEPARATOR = "."

_MISSING = object()


def normalize_file_name(file_name: str) -> str:
    """Return ``file_name`` with its extension (if any) replaced by ``.yml``."""
    name = str(file_name).strip()
    if not name or name in (".", ".."):
        raise ValueError(f"Invalid config file name: {file_name!r}")
    pure = PurePath(name)
    if len(pure.parts) != 1:
        raise ValueError(f"Config file name must not contain a path: {file_name!r}")
    return pure.with_suffix(EXTENSION).name


def resolve_path(
    base_directory: Union[str, Path],
    file_name: str,
    sub_directories: Optional[Union[str, Path]] = None,
) -> Path:
    """Absolute location of ``file_name`` under the base (and sub) directories."""
    directory = Path(base_directory).expanduser()
    if sub_directories:
        directory = directory / sub_directories
    return (directory / normalize_file_name(file_name)).absolute()


def parse_mapping(text: str, source: Union[str, Path]) -> dict:
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise StoreParseError(f"Invalid YAML in {source}: {e}") from e
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise StoreParseError(
            f"Expected a mapping at the top of {source}, got {type(data).__name__}"
        )
    return data


def _split(key: str) -> list[str]:
    parts = str(key).split(PATH_SEPARATOR)
    if not all(parts):
        raise ValueError(f"Invalid config key: {key!r}")
    return parts


class YamlConfigStore:
    """A single file-backed configuration: ``<base>/<sub>/<name>.yml``."""

    def __init__(
        self,
        base_directory: Union[str, Path],
        file_name: str,
        sub_directories: Optional[Union[str, Path]] = None,
    ):
        self.path = resolve_path(base_directory, file_name, sub_directories)
        self._lock = threading.RLock()
        self._seeded = False
        self.was_first_load = self._create()
        self._data: dict = self._read()
        logger.debug("Opened %s (first_load=%s)", self.path, self.was_first_load)

    @classmethod
    def open(
        cls,
        base_directory: Union[str, Path],
        file_name: str,
        sub_directories: Optional[Union[str, Path]] = None,
    ) -> "YamlConfigStore":
        return cls(base_directory, file_name, sub_directories)

    def __repr__(self) -> str:
        return f"YamlConfigStore({str(self.path)!r})"

    # ── File I/O ──────────────────────────────────────────────────────

    def _create(self) -> bool:
        """Create parent directories and the file if missing. True if the file was created."""
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StoreIOError(f"Could not create directory {self.path.parent}: {e}") from e
        try:
            with open(self.path, "x", encoding="utf-8"):
                pass
        except FileExistsError:
            return False
        except OSError as e:
            raise StoreIOError(f"Could not create {self.path}: {e}") from e
        return True

    def _read(self) -> dict:
        try:
            text = self.path.read_text(encoding="utf-8")
        except UnicodeDecodeError as e:
            raise StoreParseError(f"{self.path} is not UTF-8 text: {e}") from e
        except OSError as e:
            raise StoreIOError(f"Could not read {self.path}: {e}") from e
        return parse_mapping(text, self.path)

    def reload(self) -> None:
        """Discard in-memory contents and re-read the file."""
        with self._lock:
            self._data = self._read()

    def save(self) -> None:
        """Overwrite the file with the in-memory contents."""
        with self._lock:
            try:
                text = yaml.safe_dump(
                    self._data,
                    default_flow_style=False,
                    sort_keys=False,
                    allow_unicode=True,
                ) if self._data else ""
            except yaml.YAMLError as e:
                raise StoreError(
                    f"Could not serialize {self.path}: {e}", code="store_serialize_error"
                ) from e
            tmp = self.path.with_name(self.path.name + ".tmp")
            try:
                with open(tmp, "w", encoding="utf-8") as f:
                    f.write(text)
                tmp.replace(self.path)
            except OSError as e:
                with contextlib.suppress(OSError):
                    tmp.unlink(missing_ok=True)
                raise StoreIOError(f"Could not write {self.path}: {e}") from e
        logger.debug("Saved %s", self.path)

    def seed_from_template(self, template: Union[bytes, BinaryIO]) -> bool:
        """
        Replace a freshly created file with ``template`` and reload it.

        Only the first call on a store whose file did not exist before it was
        opened has any effect; everything else returns False untouched, so a
        user's customized file is never clobbered on restart.
        """
        if not self.was_first_load or self._seeded:
            return False
        try:
            raw = bytes(template) if isinstance(template, (bytes, bytearray)) else template.read()
        except OSError as e:
            raise StoreIOError(f"Could not read template for {self.path}: {e}") from e
        with self._lock:
            try:
                self.path.write_bytes(raw)
            except OSError as e:
                raise StoreIOError(f"Could not write template to {self.path}: {e}") from e
            self._seeded = True
            self._data = self._read()
        logger.info("Seeded %s from template (%d bytes)", self.path, len(raw))
        return True

    # ── In-memory contents ────────────────────────────────────────────

    def _lookup(self, key: str) -> Any:
        node: Any = self._data
        for part in _split(key):
            if not isinstance(node, dict) or part not in node:
                return _MISSING
            node = node[part]
        return node

    def get(self, key: str, default: Any = None) -> Any:
        with self._lock:
            value = self._lookup(key)
        return default if value is _MISSING else value

    def contains(self, key: str) -> bool:
        with self._lock:
            return self._lookup(key) is not _MISSING

    __contains__ = contains

    def set(self, key: str, value: Any) -> None:
        """Set ``key`` to ``value``; ``None`` removes the key."""
        parts = _split(key)
        with self._lock:
            node = self._data
            for part in parts[:-1]:
                child = node.get(part)
                if not isinstance(child, dict):
                    if value is None:
                        return
                    child = node[part] = {}
                node = child
            if value is None:
                node.pop(parts[-1], None)
            else:
                node[parts[-1]] = value

    def keys(self, deep: bool = False) -> list[str]:
        """Top-level keys, or every dotted path (sections included) when ``deep``."""
        with self._lock:
            if not deep:
                return [str(k) for k in self._data]
            return list(_walk(self._data, ""))

    def as_dict(self) -> dict:
        with self._lock:
            return copy.deepcopy(self._data)

    def update(self, values: Mapping[str, Any]) -> None:
        """Set several keys at once. Every key is checked before any is applied."""
        items = [(_split(key), value) for key, value in values.items()]
        with self._lock:
            for parts, value in items:
                self.set(PATH_SEPARATOR.join(parts), value)

    def _occupied(self, key: str) -> bool:
        """True if ``key`` or one of its parent paths already holds a value."""
        node: Any = self._data
        for part in _split(key):
            if not isinstance(node, dict):
                return True
            if part not in node:
                return False
            node = node[part]
        return True

    def merge_defaults(self, defaults: Mapping[str, Any]) -> None:
        """
        Fill in keys missing from this store. Existing values are never
        overwritten, including a scalar sitting where a default expects a
        section (``audio: off`` blocks an ``audio.volume`` default).
        """
        with self._lock:
            for key, value in defaults.items():
                if not self._occupied(key):
                    self.set(key, copy.deepcopy(value))


def _walk(node: dict, prefix: str) -> Iterator[str]:
    for k, v in node.items():
        path = f"{prefix}{k}"
        yield path
        if isinstance(v, dict):
            yield from _walk(v, path + PATH_SEPARATOR)
