"""Session join/leave and per-session config access."""

import logging
import uuid
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException

from ..deps import get_binding, get_registry, require_store
from ..helpers import config_summary, store_http_error
from ...lifecycle import LifecycleBinding
from ...registry import ConfigRegistry
from ...repositories import StoreError, YamlConfigStore
from ...schemas import ConfigUpdate

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/sessions", tags=["sessions"])


@router.get("")
def list_sessions(registry: Annotated[ConfigRegistry, Depends(get_registry)]):
    active = [str(k) for k in registry.keys()]
    return {"sessions": sorted(active), "count": len(active)}


@router.post("/{session_id}/join")
def join_session(
    session_id: uuid.UUID,
    binding: Annotated[LifecycleBinding, Depends(get_binding)],
):
    opened = binding.on_activate(session_id)
    store = binding.registry.get(session_id)
    if store is None:
        raise HTTPException(
            500,
            detail={
                "code": "config_unavailable",
                "message": f"Config for session '{session_id}' could not be opened.",
            },
        )
    return {"opened": opened, **config_summary(session_id, store)}


@router.post("/{session_id}/leave")
def leave_session(
    session_id: uuid.UUID,
    binding: Annotated[LifecycleBinding, Depends(get_binding)],
):
    was_active = session_id in binding.registry
    saved = binding.on_deactivate(session_id)
    return {"session_id": str(session_id), "was_active": was_active, "saved": saved}


@router.get("/{session_id}/config")
def get_config(
    session_id: uuid.UUID,
    store: Annotated[YamlConfigStore, Depends(require_store)],
):
    return config_summary(session_id, store)


@router.patch("/{session_id}/config")
def update_config(
    session_id: uuid.UUID,
    data: ConfigUpdate,
    store: Annotated[YamlConfigStore, Depends(require_store)],
):
    try:
        store.update(data.values)
    except ValueError as e:
        raise HTTPException(400, str(e)) from e
    if data.save:
        try:
            store.save()
        except StoreError as e:
            logger.error("Save for %s failed: %s", session_id, e.message, exc_info=True)
            raise store_http_error(e) from e
    return config_summary(session_id, store)
