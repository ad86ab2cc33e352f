from __future__ import annotations

import logging

from fastapi import Request

from edufund.config import Settings
from edufund.utils.jwt_handler import TokenError, decode_identity_token


logger = logging.getLogger(__name__)


class IdentityVerifier:
    """Resolve an inbound request to the auth provider's stable user id.

    The token is taken from `Authorization: Bearer ...` first and from the
    provider's session cookie otherwise. Any problem with the token (missing,
    malformed, expired, wrong key, no subject) yields None.
    """

    def __init__(self, settings: Settings) -> None:
        self.settings = settings

    def _extract_token(self, request: Request) -> str | None:
        header = request.headers.get("Authorization") or ""
        scheme, _, credentials = header.partition(" ")
        if scheme.lower() == "bearer" and credentials.strip():
            return credentials.strip()

        cookie = request.cookies.get(self.settings.identity_cookie_name)
        if cookie and cookie.strip():
            return cookie.strip()
        return None

    def verify(self, request: Request) -> str | None:
        token = self._extract_token(request)
        if not token:
            return None

        try:
            claims = decode_identity_token(self.settings, token)
        except TokenError as exc:
            logger.info("identity.rejected reason=%s", exc)
            return None

        subject = claims.get("sub")
        if not isinstance(subject, str) or not subject.strip():
            logger.info("identity.rejected reason=missing subject")
            return None
        return subject.strip()
