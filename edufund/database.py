# database.py
from __future__ import annotations

import logging
from typing import Generator

from fastapi import Request
from sqlalchemy import Engine, create_engine, text
from sqlalchemy.engine import make_url
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from edufund.config import Settings, build_sqlalchemy_db_url


logger = logging.getLogger(__name__)

Base = declarative_base()


def mask_db_url(db_url: str) -> str:
    try:
        return str(make_url(db_url).set(password="***"))
    except Exception:
        return db_url


def _build_connect_args(db_url: str) -> dict:
    if db_url.startswith("sqlite"):
        return {"check_same_thread": False}
    return {}


class ConnectionProvider:
    """Hands out ready ORM sessions against the configured database.

    The engine is built on first use and reused afterwards, so `acquire()` is
    safe to call on every request.
    """

    def __init__(self, settings: Settings, *, db_url: str | None = None) -> None:
        self.settings = settings
        self.db_url = db_url or build_sqlalchemy_db_url(settings)
        self._engine: Engine | None = None
        self._session_factory: sessionmaker | None = None

    @property
    def engine(self) -> Engine:
        if self._engine is None:
            self._engine = create_engine(
                self.db_url,
                pool_pre_ping=True,
                future=True,
                connect_args=_build_connect_args(self.db_url),
            )
            logger.info("SQLAlchemy ORM db_url=%s", mask_db_url(self.db_url))
        return self._engine

    @property
    def session_factory(self) -> sessionmaker:
        if self._session_factory is None:
            self._session_factory = sessionmaker(bind=self.engine, autocommit=False, autoflush=False, future=True)
        return self._session_factory

    def acquire(self) -> Session:
        return self.session_factory()

    def ping(self) -> bool:
        try:
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
        except Exception:
            logger.warning("db.ping failed db_url=%s", mask_db_url(self.db_url), exc_info=True)
            return False
        return True

    def create_schema(self) -> None:
        from edufund.models.schema_meta import record_schema_version

        import edufund.models  # noqa: F401  # ensure all models are registered

        Base.metadata.create_all(bind=self.engine)
        with self.acquire() as session:
            record_schema_version(session, self.settings.version)

    def dispose(self) -> None:
        if self._engine is not None:
            self._engine.dispose()


def get_db(request: Request) -> Generator[Session, None, None]:
    session = request.app.state.registry.connections.acquire()
    try:
        yield session
    finally:
        session.close()
