"""
keyconf service.
Opens one YAML config per session on join, saves and closes it on leave,
and periodically saves everything that is still open.
"""

import asyncio
import contextlib
import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, Optional

from fastapi import FastAPI

from .api.routes import configs_router, health_router, sessions_router
from .config import Settings, get_settings
from .lifecycle import LifecycleBinding
from .registry import ConfigRegistry
from .repositories import StoreError, StoreIOError, StoreParseError
from .repositories.yaml_store import PATH_SEPARATOR, parse_mapping

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(level=getattr(logging, level.upper(), logging.INFO), format=LOG_FORMAT)


def flatten(data: dict, prefix: str = "") -> dict[str, Any]:
    """``{"a": {"b": 1}}`` -> ``{"a.b": 1}``. Empty sections are kept as values."""
    flat: dict[str, Any] = {}
    for key, value in data.items():
        path = f"{prefix}{key}"
        if isinstance(value, dict) and value:
            flat.update(flatten(value, path + PATH_SEPARATOR))
        else:
            flat[path] = value
    return flat


def load_defaults_file(path: Optional[Path]) -> dict[str, Any]:
    """Read a YAML mapping of default values, flattened to dotted keys."""
    if path is None:
        return {}
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise StoreIOError(f"Could not read defaults file {path}: {e}") from e
    return flatten(parse_mapping(text, path))


def load_template_file(path: Optional[Path]) -> Optional[bytes]:
    if path is None:
        return None
    try:
        raw = path.read_bytes()
    except OSError as e:
        raise StoreIOError(f"Could not read template file {path}: {e}") from e
    try:
        parse_mapping(raw.decode("utf-8"), path)
    except UnicodeDecodeError as e:
        raise StoreParseError(f"Template file {path} is not UTF-8 text: {e}") from e
    return raw


async def autosave_loop(registry: ConfigRegistry, interval: float) -> None:
    """Run ``registry.save_all()`` every ``interval`` seconds until cancelled."""
    while True:
        await asyncio.sleep(interval)
        try:
            await asyncio.to_thread(registry.save_all)
        except StoreError as e:
            logger.error("Autosave failed: %s", e.message, exc_info=True)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings: Settings = app.state.settings
    registry: ConfigRegistry = ConfigRegistry(
        settings.KEYCONF_DATA_DIR, settings.KEYCONF_SESSIONS_SUBDIR
    )
    registry.add_defaults(load_defaults_file(settings.KEYCONF_DEFAULTS_FILE))
    template = load_template_file(settings.KEYCONF_TEMPLATE_FILE)
    app.state.registry = registry
    app.state.binding = LifecycleBinding(registry, template)
    logger.info(
        "Session configs under %s (%d default(s), template=%s)",
        registry.base_directory,
        len(registry.defaults),
        settings.KEYCONF_TEMPLATE_FILE,
    )

    autosave = None
    if settings.KEYCONF_AUTOSAVE_SECONDS > 0:
        autosave = asyncio.create_task(autosave_loop(registry, settings.KEYCONF_AUTOSAVE_SECONDS))
    try:
        yield
    finally:
        if autosave is not None:
            autosave.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await autosave
        try:
            await asyncio.to_thread(registry.save_all)
        except StoreError as e:
            logger.error("Final save failed: %s", e.message, exc_info=True)
        else:
            logger.info("Saved %d open config(s) on shutdown", len(registry))


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings.LOG_LEVEL)
    app = FastAPI(title=settings.APP_TITLE, version=settings.APP_VERSION, lifespan=lifespan)
    app.state.settings = settings
    app.include_router(health_router)
    app.include_router(sessions_router)
    app.include_router(configs_router)
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("keyconf.main:app", host="0.0.0.0", port=8000)
