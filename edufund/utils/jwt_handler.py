# jwt_handler.py
from datetime import datetime, timedelta, timezone
from typing import Any

from jose import JWTError, jwt
from jose.exceptions import ExpiredSignatureError

from edufund.config import Settings


class TokenError(Exception):
    pass


class TokenExpired(TokenError):
    pass


def create_identity_token(
    settings: Settings,
    subject: str,
    expires_delta: timedelta = timedelta(minutes=60),
    **claims: Any,
) -> str:
    """Sign a provider-style session token (shared-secret algorithms only)."""

    to_encode: dict[str, Any] = dict(claims)
    now = datetime.now(timezone.utc)
    to_encode["sub"] = subject
    to_encode.setdefault("iat", now)
    to_encode["exp"] = now + expires_delta
    if settings.identity_issuer:
        to_encode.setdefault("iss", settings.identity_issuer)
    if settings.identity_audience:
        to_encode.setdefault("aud", settings.identity_audience)
    algorithm = (settings.identity_jwt_algorithms or ["HS256"])[0]
    return jwt.encode(to_encode, settings.identity_jwt_key, algorithm=algorithm)


def decode_identity_token(settings: Settings, token: str) -> dict[str, Any]:
    options = {
        "verify_aud": bool(settings.identity_audience),
        "leeway": settings.identity_leeway_seconds,
    }
    try:
        return jwt.decode(
            token,
            settings.identity_jwt_key,
            algorithms=settings.identity_jwt_algorithms or ["HS256"],
            audience=settings.identity_audience,
            issuer=settings.identity_issuer,
            options=options,
        )
    except ExpiredSignatureError as exc:
        raise TokenExpired("Token expired") from exc
    except JWTError as exc:
        raise TokenError("Invalid token") from exc
