from __future__ import annotations

import os
from datetime import timedelta
from pathlib import Path
from typing import Any, Callable

import pytest
from fastapi.testclient import TestClient


def pytest_configure() -> None:
    # Keep a local .env from leaking production settings into tests.
    os.environ["ENVIRONMENT"] = "test"
    for name in ("ORM_DB_URL", "DB_URL", "REVIEWER_IDS", "IDENTITY_ISSUER", "IDENTITY_AUDIENCE"):
        os.environ.pop(name, None)


@pytest.fixture()
def settings(tmp_path: Path):
    from edufund.config import Settings

    return Settings(
        environment="test",
        debug=False,
        orm_db_url=f"sqlite:///{tmp_path / 'test.db'}",
        identity_jwt_key="test-secret",
        identity_jwt_algorithms=["HS256"],
        identity_issuer=None,
        identity_audience=None,
        reviewer_ids=["reviewer_1"],
    )


@pytest.fixture()
def client(settings) -> Any:
    from edufund.main import create_app

    app = create_app(settings)
    with TestClient(app) as c:
        yield c


@pytest.fixture()
def auth_headers(settings) -> Callable[..., dict[str, str]]:
    from edufund.utils.jwt_handler import create_identity_token

    def _headers(subject: str = "user_1", expires_delta: timedelta = timedelta(minutes=5)) -> dict[str, str]:
        token = create_identity_token(settings, subject, expires_delta)
        return {"Authorization": f"Bearer {token}"}

    return _headers

