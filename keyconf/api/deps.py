"""FastAPI dependencies and require-helpers for routes."""

import uuid
from typing import Annotated

from fastapi import Depends, HTTPException, Request

from ..lifecycle import LifecycleBinding
from ..registry import ConfigRegistry
from ..repositories import YamlConfigStore


def get_registry(request: Request) -> ConfigRegistry:
    """Return the session config registry created at startup. Use in Depends()."""
    return request.app.state.registry


def get_binding(request: Request) -> LifecycleBinding:
    return request.app.state.binding


def require_store(
    session_id: uuid.UUID,
    registry: Annotated[ConfigRegistry, Depends(get_registry)],
) -> YamlConfigStore:
    """Open config for an active session or raise 404."""
    store = registry.get(session_id)
    if store is None:
        raise HTTPException(404, f"Session '{session_id}' is not active")
    return store
