from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Snake_case in Python, camelCase on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ErrorResponse(BaseModel):
    success: bool = False
    message: str
    error: str | None = None


def coerce_str_list(v: Any) -> Any:
    # Clients sometimes send a single string for list fields ("fintech" vs ["fintech"]).
    if v is None:
        return []
    if isinstance(v, str):
        v = [v]
    if isinstance(v, (list, tuple, set)):
        items = [str(item).strip() for item in v if item is not None]
        return [item for item in items if item]
    return v
