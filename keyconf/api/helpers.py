"""Shared helpers for API routes (error mapping, config summary)."""

from fastapi import HTTPException

from ..repositories import StoreError, YamlConfigStore


def store_http_error(e: StoreError) -> HTTPException:
    return HTTPException(500, detail={"code": e.code, "message": e.message})


def config_summary(session_id, store: YamlConfigStore) -> dict:
    """Build config summary dict for API responses."""
    return {
        "session_id": str(session_id),
        "file_name": store.path.name,
        "first_load": store.was_first_load,
        "config": store.as_dict(),
    }
