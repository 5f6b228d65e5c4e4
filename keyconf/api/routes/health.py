from datetime import datetime, timezone
from typing import Annotated

from fastapi import APIRouter, Depends, Request

from ..deps import get_registry
from ...registry import ConfigRegistry

router = APIRouter(tags=["health"])


@router.get("/health")
def health(request: Request, registry: Annotated[ConfigRegistry, Depends(get_registry)]):
    settings = request.app.state.settings
    return {
        "status": "ok",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "version": settings.APP_VERSION,
        "active_sessions": len(registry),
    }
