"""Shared fixtures for keyconf tests."""

import sys
from pathlib import Path

import pytest

# Make the package importable without installing it
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))


@pytest.fixture
def registry(tmp_path):
    from keyconf.registry import ConfigRegistry
    return ConfigRegistry(tmp_path)


@pytest.fixture
def settings(tmp_path, monkeypatch):
    """Settings pointing at a temp data dir with autosave off."""
    monkeypatch.setenv("KEYCONF_DATA_DIR", str(tmp_path / "data"))
    monkeypatch.setenv("KEYCONF_AUTOSAVE_SECONDS", "0")
    monkeypatch.delenv("KEYCONF_DEFAULTS_FILE", raising=False)
    monkeypatch.delenv("KEYCONF_TEMPLATE_FILE", raising=False)
    monkeypatch.delenv("KEYCONF_SESSIONS_SUBDIR", raising=False)
    from keyconf.config import Settings
    return Settings()


def break_save(store):
    """Put a directory where the store's file is so the next save() fails."""
    store.path.unlink()
    store.path.mkdir()
