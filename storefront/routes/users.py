"""User profile routes"""

from fastapi import APIRouter, Depends, HTTPException

from ..database.users import user_db
from ..models.user import Identity, User, UserCreate
from ..security.auth import ensure_owner_or_admin, require_user

router = APIRouter(prefix="/api/users", tags=["Users"])


@router.post("", response_model=User, status_code=201)
async def create_user(
    request: UserCreate,
    identity: Identity = Depends(require_user),
):
    """Create or refresh the caller's profile"""
    user_id = request.id or identity.user_id
    ensure_owner_or_admin(identity, user_id)

    existing = await user_db.get_user(user_id)
    role = existing.role if existing else identity.role
    return await user_db.create_user(user_id, request, role=role)


@router.get("/{user_id}", response_model=User)
async def get_user(
    user_id: str,
    identity: Identity = Depends(require_user),
):
    ensure_owner_or_admin(identity, user_id)
    user = await user_db.get_user(user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return user
