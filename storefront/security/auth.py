"""
Identity verification

Verifies the signed identity token sent as ``Authorization: Bearer <token>``
and exposes the caller's identity to routes as a FastAPI dependency.
"""

import logging
import time
from functools import lru_cache
from typing import Optional

import jwt
from fastapi import Header, HTTPException

from ..core.config import settings
from ..models.user import Identity, UserRole

logger = logging.getLogger(__name__)


class TokenVerifier:
    """
    Issues and verifies identity tokens.

    Usage:
        verifier = TokenVerifier(secret="...")
        token = verifier.issue("user-1", email="a@example.com")
        identity = verifier.verify(token)
    """

    def __init__(self, secret: str, algorithm: str = "HS256", ttl_seconds: int = 3600):
        self._secret = secret
        self.algorithm = algorithm
        self.ttl_seconds = ttl_seconds

    def issue(
        self,
        user_id: str,
        email: str = "",
        role: UserRole = UserRole.USER,
        ttl_seconds: Optional[int] = None,
    ) -> str:
        """Sign a token for a user"""
        now = int(time.time())
        payload = {
            "sub": user_id,
            "email": email,
            "role": UserRole(role).value,
            "iat": now,
            "exp": now + (ttl_seconds or self.ttl_seconds),
        }
        return jwt.encode(payload, self._secret, algorithm=self.algorithm)

    def verify(self, token: str) -> Identity:
        """Decode a token; raises jwt.PyJWTError if it is invalid or expired"""
        claims = jwt.decode(
            token,
            self._secret,
            algorithms=[self.algorithm],
            options={"require": ["sub", "exp"]},
        )
        try:
            role = UserRole(claims.get("role", UserRole.USER.value))
        except ValueError:
            role = UserRole.USER
        return Identity(
            user_id=claims["sub"],
            email=claims.get("email", ""),
            role=role,
            token=token,
        )


@lru_cache()
def get_token_verifier() -> TokenVerifier:
    """Token verifier configured from settings"""
    return TokenVerifier(
        secret=settings.auth_secret,
        algorithm=settings.auth_algorithm,
        ttl_seconds=settings.auth_token_ttl_seconds,
    )


class AuthDependency:
    """
    FastAPI dependency resolving the caller's identity.

    Rejects requests without a valid bearer token, and optionally
    requests from non-admin users.
    """

    def __init__(self, require_admin: bool = False):
        self.require_admin = require_admin

    async def __call__(self, authorization: Optional[str] = Header(None)) -> Identity:
        if not authorization or not authorization.startswith("Bearer "):
            raise HTTPException(status_code=401, detail="Unauthorized - No token provided")

        token = authorization[len("Bearer "):].strip()
        try:
            identity = get_token_verifier().verify(token)
        except jwt.PyJWTError as e:
            logger.warning(f"Token verification failed: {e}")
            raise HTTPException(status_code=401, detail="Unauthorized - Invalid token")

        if self.require_admin and not identity.is_admin:
            raise HTTPException(status_code=403, detail="Insufficient permissions")

        return identity


def ensure_owner_or_admin(identity: Identity, user_id: str) -> None:
    """Reject access to another user's data unless the caller is an admin"""
    if identity.user_id != user_id and not identity.is_admin:
        raise HTTPException(status_code=403, detail="Insufficient permissions")


# Dependency instances
require_user = AuthDependency()
require_admin = AuthDependency(require_admin=True)
