from __future__ import annotations

from sqlalchemy import Column, DateTime, Integer, String
from sqlalchemy.orm import Session
from sqlalchemy.sql import func

from edufund.database import Base


# Bump whenever a table or column changes; scripts/create_tables.py records it on deploy.
SCHEMA_VERSION = 1


class SchemaMeta(Base):
    __tablename__ = "schema_meta"

    id = Column(Integer, primary_key=True)
    version = Column(Integer, nullable=False)
    app_version = Column(String(32), nullable=True)
    applied_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)


def record_schema_version(db: Session, app_version: str | None = None) -> SchemaMeta:
    row = db.query(SchemaMeta).filter(SchemaMeta.id == 1).one_or_none()
    if row is None:
        row = SchemaMeta(id=1, version=SCHEMA_VERSION, app_version=app_version)
        db.add(row)
    else:
        row.version = SCHEMA_VERSION
        row.app_version = app_version
    db.commit()
    db.refresh(row)
    return row


def read_schema_version(db: Session) -> int | None:
    row = db.query(SchemaMeta).filter(SchemaMeta.id == 1).one_or_none()
    return int(row.version) if row is not None else None
