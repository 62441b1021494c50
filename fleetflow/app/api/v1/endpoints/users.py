"""
User API Endpoints.

A directory of active users (for picking trip companions) and admin-only
user management with audit logging.
"""

from typing import List
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from fleetflow.app.db.session import get_db
from fleetflow.app.models.user import User
from fleetflow.app.schemas.user import (
    UserCreate, UserUpdate, UserResponse, UserDirectoryEntry, UserListResponse
)
from fleetflow.app.core.dependencies import get_current_user
from fleetflow.app.core.guards import require_admin
from fleetflow.app.core.security import get_pin_hash, is_valid_pin
from fleetflow.app.core.token_revocation import revoke_all_user_tokens, clear_user_token_revocation
from fleetflow.app.services.audit import log_user_action, AuditAction

router = APIRouter(prefix="/users", tags=["Users"])
admin_router = APIRouter(prefix="/admin/users", tags=["Admin - Users"])


def _require_valid_pin(pin: str) -> None:
    if not is_valid_pin(pin):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="PIN must be a numeric code of the configured length"
        )


async def _get_user_or_404(db: AsyncSession, user_id: int) -> User:
    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()

    if not user:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found"
        )

    return user


@router.get("", response_model=List[UserDirectoryEntry])
async def list_directory(
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """List active users by name."""
    result = await db.execute(
        select(User).where(User.is_active.is_(True)).order_by(User.name)
    )
    return [UserDirectoryEntry.model_validate(user) for user in result.scalars().all()]


@admin_router.get("", response_model=UserListResponse)
async def list_users(
    admin: dict = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """List all users, including deactivated ones (admin-only)."""
    result = await db.execute(select(User).order_by(User.id))
    users = result.scalars().all()

    return UserListResponse(
        users=[UserResponse.model_validate(user) for user in users],
        total=len(users)
    )


@admin_router.post("", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def create_user(
    user_data: UserCreate,
    admin: dict = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """Create a user with an initial PIN (admin-only)."""
    _require_valid_pin(user_data.pin)

    existing = await db.execute(select(User).where(User.username == user_data.username))
    if existing.scalar_one_or_none():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Username already registered"
        )

    new_user = User(
        username=user_data.username,
        name=user_data.name,
        hashed_pin=get_pin_hash(user_data.pin),
        role=user_data.role,
        avatar_url=user_data.avatar_url,
        is_active=True
    )
    db.add(new_user)
    await db.flush()

    await log_user_action(
        db, admin, AuditAction.USER_CREATED, "user", new_user.id,
        metadata={"username": new_user.username, "role": new_user.role.value}
    )
    await db.commit()
    await db.refresh(new_user)

    return UserResponse.model_validate(new_user)


@admin_router.patch("/{user_id}", response_model=UserResponse)
async def update_user(
    user_id: int,
    user_data: UserUpdate,
    admin: dict = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """
    Update a user's name, role, avatar or reset their PIN (admin-only).

    Existing trips keep the owner name they were created with.
    """
    user = await _get_user_or_404(db, user_id)
    changes = user_data.model_dump(exclude_unset=True, exclude_none=True)

    if user_id == admin["user_id"] and changes.get("role") not in (None, user.role):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Cannot change your own role"
        )

    pin = changes.pop("pin", None)
    if pin is not None:
        _require_valid_pin(pin)
        user.hashed_pin = get_pin_hash(pin)

    for field, value in changes.items():
        setattr(user, field, value)

    await log_user_action(
        db, admin, AuditAction.USER_UPDATED, "user", user.id,
        metadata={"fields": sorted(changes) + (["pin"] if pin is not None else [])}
    )
    await db.commit()
    await db.refresh(user)

    return UserResponse.model_validate(user)


@admin_router.post("/{user_id}/deactivate", response_model=UserResponse)
async def deactivate_user(
    user_id: int,
    admin: dict = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """
    Deactivate a user and revoke all their active tokens (admin-only).

    This immediately terminates all user sessions. Their trips are kept.
    """
    user = await _get_user_or_404(db, user_id)

    if user.id == admin["user_id"]:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Cannot deactivate yourself"
        )

    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="User is already deactivated"
        )

    user.is_active = False
    await log_user_action(db, admin, AuditAction.USER_DEACTIVATED, "user", user.id)
    await db.commit()

    await revoke_all_user_tokens(user.id)
    await db.refresh(user)

    return UserResponse.model_validate(user)


@admin_router.post("/{user_id}/activate", response_model=UserResponse)
async def activate_user(
    user_id: int,
    admin: dict = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """Re-activate a deactivated user (admin-only)."""
    user = await _get_user_or_404(db, user_id)

    if user.is_active:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="User is already active"
        )

    user.is_active = True
    await log_user_action(db, admin, AuditAction.USER_ACTIVATED, "user", user.id)
    await db.commit()

    await clear_user_token_revocation(user.id)
    await db.refresh(user)

    return UserResponse.model_validate(user)
