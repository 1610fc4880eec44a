# Identity and authorization

from .auth import (
    TokenVerifier,
    AuthDependency,
    get_token_verifier,
    ensure_owner_or_admin,
    require_user,
    require_admin,
)

__all__ = [
    "TokenVerifier",
    "AuthDependency",
    "get_token_verifier",
    "ensure_owner_or_admin",
    "require_user",
    "require_admin",
]
