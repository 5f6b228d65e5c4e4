"""
keyconf service configuration.
Single source of truth for environment and app settings.
"""

import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

load_dotenv()


def get_settings():
    """Return app settings (use as FastAPI Depends or call directly)."""
    return Settings()


def _optional_path(name: str) -> Optional[Path]:
    value = (os.environ.get(name) or "").strip()
    return Path(value) if value else None


class Settings:
    """Application settings loaded from environment."""

    # App
    APP_TITLE: str = "keyconf"
    APP_VERSION: str = "1.0.0"
    LOG_LEVEL: str = "INFO"

    # Storage: per-session YAML files live in KEYCONF_DATA_DIR/KEYCONF_SESSIONS_SUBDIR
    KEYCONF_DATA_DIR: Path
    KEYCONF_SESSIONS_SUBDIR: str = "sessions"

    # Seconds between background save_all runs; 0 disables
    KEYCONF_AUTOSAVE_SECONDS: float = 300.0

    # Optional YAML files: defaults mapping, and a template copied into new session files
    KEYCONF_DEFAULTS_FILE: Optional[Path] = None
    KEYCONF_TEMPLATE_FILE: Optional[Path] = None

    def __init__(self):
        self.APP_TITLE = (os.environ.get("APP_TITLE") or "keyconf").strip()
        self.LOG_LEVEL = (os.environ.get("LOG_LEVEL") or "INFO").strip().upper()
        self.KEYCONF_DATA_DIR = Path(os.environ.get("KEYCONF_DATA_DIR", "data"))
        self.KEYCONF_SESSIONS_SUBDIR = (
            os.environ.get("KEYCONF_SESSIONS_SUBDIR") or "sessions"
        ).strip()
        try:
            autosave = float(os.environ.get("KEYCONF_AUTOSAVE_SECONDS", "300"))
        except ValueError:
            autosave = 300.0
        self.KEYCONF_AUTOSAVE_SECONDS = max(autosave, 0.0)
        self.KEYCONF_DEFAULTS_FILE = _optional_path("KEYCONF_DEFAULTS_FILE")
        self.KEYCONF_TEMPLATE_FILE = _optional_path("KEYCONF_TEMPLATE_FILE")

    @property
    def sessions_dir(self) -> Path:
        """Directory holding one YAML file per session."""
        return self.KEYCONF_DATA_DIR / self.KEYCONF_SESSIONS_SUBDIR
