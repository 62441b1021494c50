"""
Authentication API endpoints.

Provides PIN login, logout, current user info and PIN change.
"""

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from fleetflow.app.db.session import get_db
from fleetflow.app.models.user import User
from fleetflow.app.schemas.auth import UserLogin, PinChange, TokenResponse
from fleetflow.app.schemas.user import UserResponse
from fleetflow.app.core.security import get_pin_hash, is_valid_pin, verify_pin
from fleetflow.app.core.jwt import create_access_token
from fleetflow.app.core.dependencies import get_current_user
from fleetflow.app.core.token_revocation import revoke_token
from fleetflow.app.services.audit import log_event, AuditAction

router = APIRouter(prefix="/auth", tags=["Authentication"])


def _client_ip(request: Request):
    return request.client.host if request.client else None


@router.post("/login", response_model=TokenResponse)
async def login(
    credentials: UserLogin,
    request: Request,
    db: AsyncSession = Depends(get_db)
):
    """
    Login with username and PIN and return a JWT token.

    Logs successful and failed login attempts for security monitoring.
    """
    result = await db.execute(select(User).where(User.username == credentials.username))
    user = result.scalar_one_or_none()

    if not user or not verify_pin(credentials.pin, user.hashed_pin):
        await log_event(
            db=db,
            action=AuditAction.LOGIN_FAILED,
            actor_id=user.id if user else None,
            actor_username=credentials.username,
            metadata={"reason": "Invalid PIN" if user else "User not found"},
            ip_address=_client_ip(request),
            commit=True
        )
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if not user.is_active:
        await log_event(
            db=db,
            action=AuditAction.LOGIN_FAILED,
            actor_id=user.id,
            actor_username=user.username,
            metadata={"reason": "Account is inactive"},
            ip_address=_client_ip(request),
            commit=True
        )
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Inactive user account"
        )

    access_token = create_access_token(data={
        "sub": user.username,
        "user_id": user.id,
        "role": user.role.value,
    })

    await log_event(
        db=db,
        action=AuditAction.LOGIN_SUCCESS,
        actor_id=user.id,
        actor_username=user.username,
        ip_address=_client_ip(request),
        commit=True
    )

    return TokenResponse(
        access_token=access_token,
        token_type="bearer",
        user_id=user.id,
        username=user.username,
        name=user.name,
        role=user.role,
        avatar_url=user.avatar_url
    )


@router.get("/me", response_model=UserResponse)
async def get_current_user_info(
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Get the authenticated user's profile."""
    result = await db.execute(select(User).where(User.id == current_user["user_id"]))
    user = result.scalar_one_or_none()

    if not user:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found"
        )

    return UserResponse.model_validate(user)


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
async def logout(
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """
    Revoke the presented token.

    The token stays blacklisted until it would have expired anyway.
    """
    await revoke_token(current_user["token"], current_user["user_id"])

    await log_event(
        db=db,
        action=AuditAction.LOGOUT,
        actor_id=current_user["user_id"],
        actor_username=current_user["sub"],
        commit=True
    )


@router.put("/me/pin", status_code=status.HTTP_204_NO_CONTENT)
async def change_pin(
    pin_data: PinChange,
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Change one's own PIN. The current PIN must be confirmed."""
    result = await db.execute(select(User).where(User.id == current_user["user_id"]))
    user = result.scalar_one()

    if not verify_pin(pin_data.current_pin, user.hashed_pin):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Current PIN is incorrect"
        )

    if not is_valid_pin(pin_data.new_pin):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="PIN must be a numeric code of the configured length"
        )

    user.hashed_pin = get_pin_hash(pin_data.new_pin)

    await log_event(
        db=db,
        action=AuditAction.PIN_CHANGED,
        actor_id=user.id,
        actor_username=user.username,
        target_type="user",
        target_id=user.id
    )
    await db.commit()
