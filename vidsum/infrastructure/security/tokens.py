"""
Bearer token issuing and verification with PyJWT.

Tokens are HS256-signed JWTs carrying the user id in both `sub` and
`userId`. They are stateless: there is no revocation list, a token is
valid until `exp`.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

import jwt

from ...core.clock import Clock, utcnow

logger = logging.getLogger(__name__)


class TokenError(ValueError):
    """Raised when a token is missing, malformed, tampered with or expired."""
    pass


@dataclass(frozen=True)
class TokenConfig:
    secret: str
    algorithm: str = "HS256"
    expire_hours: int = 24


class JwtTokenService:
    def __init__(self, config: TokenConfig, clock: Clock = utcnow) -> None:
        if not config.secret:
            raise TokenError("JWT secret is not configured")
        self._config = config
        self._clock = clock

    def issue(self, user_id: str, now: Optional[datetime] = None) -> str:
        now = now or self._clock()
        expires_at = now + timedelta(hours=self._config.expire_hours)
        payload = {
            "sub": user_id,
            "userId": user_id,
            "iat": int(now.timestamp()),
            "exp": int(expires_at.timestamp()),
        }
        return jwt.encode(payload, self._config.secret, algorithm=self._config.algorithm)

    def verify(self, token: str) -> str:
        """Return the user id in a valid token, else raise TokenError."""
        if not token:
            raise TokenError("Token is missing")
        try:
            payload = jwt.decode(
                token,
                self._config.secret,
                algorithms=[self._config.algorithm],
                options={"require": ["exp", "sub"]},
            )
        except jwt.ExpiredSignatureError as exc:
            raise TokenError("Token has expired") from exc
        except jwt.InvalidTokenError as exc:
            raise TokenError("Invalid token") from exc

        user_id = payload.get("userId") or payload.get("sub")
        if not user_id:
            raise TokenError("Token subject is missing")
        return str(user_id)
