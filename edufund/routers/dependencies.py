# dependencies.py
import json
from typing import Any

from fastapi import Depends, Request

from edufund.config import Settings, is_reviewer
from edufund.errors import Forbidden, InvalidInput, Unauthorized
from edufund.registry import ComponentRegistry


def get_registry(request: Request) -> ComponentRegistry:
    return request.app.state.registry


def get_settings(registry: ComponentRegistry = Depends(get_registry)) -> Settings:
    return registry.settings


def get_current_identity(request: Request, registry: ComponentRegistry = Depends(get_registry)) -> str:
    external_id = registry.identity.verify(request)
    if not external_id:
        raise Unauthorized()
    return external_id


def require_reviewer(
    external_id: str = Depends(get_current_identity),
    settings: Settings = Depends(get_settings),
) -> str:
    if not is_reviewer(settings, external_id):
        raise Forbidden("Reviewer access required")
    return external_id


async def read_json_body(request: Request) -> Any:
    """Decode the request body after identity has been checked.

    An empty body decodes to None so the payload parser reports it.
    """
    raw = await request.body()
    if not raw.strip():
        return None
    try:
        return json.loads(raw)
    except ValueError as exc:
        raise InvalidInput("Request body must be valid JSON") from exc
