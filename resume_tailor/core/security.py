from __future__ import annotations

import logging
import re
from dataclasses import dataclass

import jwt

from resume_tailor.core.errors import AuthError

logger = logging.getLogger(__name__)

_BEARER_RE = re.compile(r"^Bearer\s+(.+)$", re.IGNORECASE)


@dataclass(frozen=True)
class AuthenticatedUser:
    id: str
    email: str | None = None


def bearer_token(authorization: str | None) -> str | None:
    if not authorization:
        return None
    match = _BEARER_RE.match(authorization.strip())
    if not match:
        return None
    token = match.group(1).strip()
    return token or None


class TokenVerifier:
    """Validates access tokens issued by the hosted auth provider (HS256 JWTs)."""

    def __init__(self, secret: str, *, audience: str | None = "authenticated", algorithm: str = "HS256"):
        self._secret = secret
        self._audience = audience
        self._algorithm = algorithm

    def verify(self, token: str) -> AuthenticatedUser:
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[self._algorithm],
                audience=self._audience,
                options={"verify_aud": self._audience is not None},
            )
        except jwt.PyJWTError as exc:
            logger.info("auth_token_rejected reason=%s", exc.__class__.__name__)
            raise AuthError("Unauthorized", details="Invalid or expired token") from exc

        user_id = str(payload.get("sub") or "").strip()
        if not user_id:
            raise AuthError("Unauthorized", details="Invalid or expired token")
        email = payload.get("email")
        return AuthenticatedUser(id=user_id, email=str(email) if email else None)


def authenticate(authorization: str | None, verifier: TokenVerifier | None) -> AuthenticatedUser:
    token = bearer_token(authorization)
    if not token:
        raise AuthError("Unauthorized", details="Missing authorization header")
    if verifier is None:
        raise AuthError("Unauthorized", details="Authentication is not configured")
    return verifier.verify(token)
