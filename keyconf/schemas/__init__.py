"""Pydantic schemas for API request/response."""

from .requests import ConfigUpdate

__all__ = ["ConfigUpdate"]
