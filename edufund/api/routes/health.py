from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from edufund.database import mask_db_url
from edufund.models.schema_meta import SCHEMA_VERSION, read_schema_version
from edufund.registry import ComponentRegistry
from edufund.routers.dependencies import get_registry


router = APIRouter(prefix="/health", tags=["health"])


class HealthStatus(BaseModel):
    status: str
    timestamp: datetime


class DBHealthStatus(BaseModel):
    orm: str
    orm_db_url: str
    schema_version: int | None
    expected_schema_version: int
    timestamp: datetime


@router.get("/", response_model=HealthStatus, summary="API heartbeat")
def health_check() -> HealthStatus:
    return HealthStatus(status="ok", timestamp=datetime.now(timezone.utc))


@router.get("/db", response_model=DBHealthStatus, summary="DB connectivity checks")
def db_health_check(registry: ComponentRegistry = Depends(get_registry)) -> DBHealthStatus:
    connections = registry.connections
    orm_ok = connections.ping()

    schema_version = None
    if orm_ok:
        try:
            with connections.acquire() as session:
                schema_version = read_schema_version(session)
        except Exception:
            # Table missing until the deploy script has run.
            schema_version = None

    return DBHealthStatus(
        orm="ok" if orm_ok else "error",
        orm_db_url=mask_db_url(connections.db_url),
        schema_version=schema_version,
        expected_schema_version=SCHEMA_VERSION,
        timestamp=datetime.now(timezone.utc),
    )
