"""Request body models for the keyconf API."""

from typing import Any

from pydantic import BaseModel


class ConfigUpdate(BaseModel):
    # dotted key -> value; null removes the key
    values: dict[str, Any]
    save: bool = False
