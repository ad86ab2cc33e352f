from __future__ import annotations

import logging
from dataclasses import dataclass

from edufund.config import Settings, should_auto_create_schema
from edufund.database import ConnectionProvider, mask_db_url
from edufund.identity import IdentityVerifier
from edufund.models.schema_meta import SCHEMA_VERSION, read_schema_version


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ComponentRegistry:
    """Process-wide collaborators, built once at startup and read thereafter."""

    settings: Settings
    connections: ConnectionProvider
    identity: IdentityVerifier


def build_registry(settings: Settings) -> ComponentRegistry:
    return ComponentRegistry(
        settings=settings,
        connections=ConnectionProvider(settings),
        identity=IdentityVerifier(settings),
    )


def prepare_schema(registry: ComponentRegistry) -> int | None:
    """Create tables when allowed, then report the deployed schema version."""

    connections = registry.connections
    if should_auto_create_schema(registry.settings):
        connections.create_schema()

    try:
        with connections.acquire() as session:
            deployed = read_schema_version(session)
    except Exception:
        logger.warning("schema.version unreadable db_url=%s", mask_db_url(connections.db_url), exc_info=True)
        return None

    if deployed != SCHEMA_VERSION:
        logger.warning("schema.version mismatch deployed=%s expected=%s", deployed, SCHEMA_VERSION)
    else:
        logger.info("schema.version ok version=%s", deployed)
    return deployed
