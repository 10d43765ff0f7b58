"""
Access Token Management

Signed JWT access tokens for the HTTP API. Login issues a token whose ``sub``
claim is the user id; protected routes resolve the acting user from
``Authorization: Bearer <token>``.
"""

import secrets
from datetime import datetime, timedelta
from typing import Any, Dict, Optional

import jwt

from .config import settings
from .exceptions import InvalidTokenError, TokenExpiredError
from .logging import get_logger
from campus_complaints.utils.datetime_utils import utc_now

logger = get_logger(__name__)

ACCESS_TOKEN_TYPE = "access"


class TokenManager:
    """
    JWT token management utilities.

    Args:
        secret_key: HMAC signing key (defaults to ``SECRET_KEY``)
        algorithm: JWT algorithm (defaults to ``ALGORITHM``)
        expire_minutes: Access token lifetime
    """

    def __init__(
        self,
        secret_key: Optional[str] = None,
        algorithm: Optional[str] = None,
        expire_minutes: Optional[int] = None,
    ):
        self.secret_key = secret_key or settings.security.SECRET_KEY
        self.algorithm = algorithm or settings.security.ALGORITHM
        self.expire_minutes = expire_minutes or settings.security.ACCESS_TOKEN_EXPIRE_MINUTES

    @property
    def expires_in(self) -> int:
        """Token lifetime in seconds."""
        return self.expire_minutes * 60

    def create_access_token(
        self,
        subject: str,
        claims: Optional[Dict[str, Any]] = None,
        now: Optional[datetime] = None,
    ) -> str:
        """
        Create a signed access token for ``subject``.

        Args:
            subject: User id stored in the ``sub`` claim
            claims: Extra claims, e.g. the user's role
            now: Issue time (defaults to the current UTC time)

        Returns:
            Encoded JWT token
        """
        issued_at = now or utc_now()
        payload = dict(claims or {})
        payload.update({
            "sub": subject,
            "iat": issued_at,
            "exp": issued_at + timedelta(minutes=self.expire_minutes),
            "type": ACCESS_TOKEN_TYPE,
            "jti": secrets.token_urlsafe(16),
        })
        return jwt.encode(payload, self.secret_key, algorithm=self.algorithm)

    def verify_token(self, token: str) -> Dict[str, Any]:
        """
        Verify and decode an access token.

        Raises:
            TokenExpiredError: If the token has expired
            InvalidTokenError: If the token is malformed, badly signed or not an access token
        """
        try:
            payload = jwt.decode(token, self.secret_key, algorithms=[self.algorithm])
        except jwt.ExpiredSignatureError:
            raise TokenExpiredError() from None
        except jwt.PyJWTError as e:
            logger.warning(f"Token verification failed: {e}")
            raise InvalidTokenError(reason=str(e)) from None

        if payload.get("type") != ACCESS_TOKEN_TYPE or not payload.get("sub"):
            raise InvalidTokenError(reason="Not an access token")
        return payload


__all__ = ["ACCESS_TOKEN_TYPE", "TokenManager"]
