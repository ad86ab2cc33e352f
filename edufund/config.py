from __future__ import annotations

import json
import os
from functools import lru_cache
from pathlib import Path
from typing import Annotated, Any

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


# Load project-root .env early so both pydantic-settings and any direct os.getenv access
# see consistent values, even if the process CWD is not the repo root.
_ENV_PATH = Path(__file__).resolve().parents[1] / ".env"
_IN_TEST = (os.getenv("ENVIRONMENT") or "").lower() == "test" or bool(os.getenv("PYTEST_CURRENT_TEST"))
if _ENV_PATH.exists() and not _IN_TEST:
    load_dotenv(dotenv_path=_ENV_PATH, override=True)


def parse_str_list(raw: Any) -> list[str]:
    """Accept a JSON array string, a comma-separated string or a real list."""

    if raw is None:
        return []

    items: list[Any]
    if isinstance(raw, (list, tuple, set)):
        items = list(raw)
    elif isinstance(raw, str):
        s = raw.strip()
        if not s:
            return []

        if s.startswith("["):
            try:
                parsed = json.loads(s)
                items = parsed if isinstance(parsed, list) else [parsed]
            except ValueError:
                items = [p.strip() for p in s.strip("[]").split(",")]
        else:
            items = [p.strip() for p in s.split(",")]
    else:
        items = [raw]

    values: list[str] = []
    for item in items:
        if item is None:
            continue
        value = str(item).strip().strip('"').strip()
        if value:
            values.append(value)
    return values


class Settings(BaseSettings):
    app_name: str = Field(default="EduFund Backend")
    api_prefix: str = Field(default="/api")
    version: str = Field(default="0.1.0")
    environment: str = Field(default="development")
    debug: bool = Field(default=True)

    # Database configuration
    # ORM_DB_URL wins over DB_URL; discrete DB_* parts are the production fallback.
    db_url: str | None = Field(default=None, validation_alias="DB_URL")
    orm_db_url: str | None = Field(default=None, validation_alias="ORM_DB_URL")
    db_host: str = Field(default="localhost", validation_alias="DB_HOST")
    db_port: int = Field(default=3306, validation_alias="DB_PORT")
    db_name: str = Field(default="edufund", validation_alias="DB_NAME")
    db_user: str = Field(default="root", validation_alias="DB_USER")
    db_password: str = Field(default="password", validation_alias="DB_PASSWORD")
    db_charset: str = Field(default="utf8mb4", validation_alias="DB_CHARSET")

    # None means "only for sqlite"; shared databases get their schema from scripts/create_tables.py.
    auto_create_schema: bool | None = Field(default=None, validation_alias="AUTO_CREATE_SCHEMA")

    # Identity provider tokens.
    # - HS256 with a shared secret for local/dev/test
    # - RS256 with the provider's PEM public key in production
    identity_jwt_key: str = Field(default="change-me", validation_alias="IDENTITY_JWT_KEY")
    identity_jwt_algorithms: Annotated[list[str], NoDecode] = Field(
        default_factory=lambda: ["HS256"],
        validation_alias="IDENTITY_JWT_ALGORITHMS",
    )
    identity_issuer: str | None = Field(default=None, validation_alias="IDENTITY_ISSUER")
    identity_audience: str | None = Field(default=None, validation_alias="IDENTITY_AUDIENCE")
    identity_cookie_name: str = Field(default="__session", validation_alias="IDENTITY_COOKIE_NAME")
    identity_leeway_seconds: int = Field(default=5, validation_alias="IDENTITY_LEEWAY_SECONDS")

    # Proposal review access control
    # - JSON array string: REVIEWER_IDS=["user_abc","user_def"]
    # - Comma-separated:   REVIEWER_IDS=user_abc,user_def
    reviewer_ids: Annotated[list[str], NoDecode] = Field(default_factory=list, validation_alias="REVIEWER_IDS")

    cors_origins: Annotated[list[str], NoDecode] = Field(
        default_factory=lambda: ["http://localhost:3000", "http://127.0.0.1:3000"],
        validation_alias="CORS_ORIGINS",
    )

    @field_validator("identity_jwt_algorithms", "reviewer_ids", "cors_origins", mode="before")
    @classmethod
    def _validate_str_list(cls, v: Any) -> list[str]:
        return parse_str_list(v)

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore", populate_by_name=True
    )


@lru_cache
def get_settings() -> Settings:
    return Settings()


def build_sqlalchemy_db_url(settings: Settings) -> str:
    if settings.orm_db_url:
        return settings.orm_db_url

    if settings.db_url:
        return settings.db_url

    # Local runs default to a sqlite file unless explicitly configured.
    if settings.environment.lower() in {"development", "test"}:
        return "sqlite:///./dev.db"

    # NOTE: password may include special chars; prefer DB_URL for complex passwords.
    return (
        f"mysql+pymysql://{settings.db_user}:{settings.db_password}"
        f"@{settings.db_host}:{settings.db_port}/{settings.db_name}"
        f"?charset={settings.db_charset}"
    )


def should_auto_create_schema(settings: Settings) -> bool:
    if settings.auto_create_schema is not None:
        return bool(settings.auto_create_schema)
    return build_sqlalchemy_db_url(settings).startswith("sqlite")


def is_reviewer(settings: Settings, external_id: str | None) -> bool:
    if not external_id:
        return False
    return external_id.strip() in set(settings.reviewer_ids or [])
