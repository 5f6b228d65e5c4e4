"""Bulk operations over every open session config."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends

from ..deps import get_registry
from ..helpers import store_http_error
from ...registry import ConfigRegistry
from ...repositories import StoreError

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/configs", tags=["configs"])


@router.post("/save")
def save_all(registry: Annotated[ConfigRegistry, Depends(get_registry)]):
    try:
        registry.save_all()
    except StoreError as e:
        logger.error("save_all failed: %s", e.message, exc_info=True)
        raise store_http_error(e) from e
    return {"saved": len(registry)}


@router.get("/defaults")
def get_defaults(registry: Annotated[ConfigRegistry, Depends(get_registry)]):
    return {"defaults": registry.defaults}
