"""
User API Endpoints.

Sign-in registration, role lookup and admin role management.
"""

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Path, Query, Response, status
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from zapshift.app.core.dependencies import AuthContext, get_current_user
from zapshift.app.core.exceptions import (
    InsufficientPermissionsError,
    ResourceNotFoundError,
    ValidationFailedError,
)
from zapshift.app.core.guards import enforce_ownership, require_admin
from zapshift.app.db.session import get_db
from zapshift.app.models.enums import UserRole
from zapshift.app.models.user import User
from zapshift.app.schemas.user import (
    RoleUpdateRequest,
    UserCreate,
    UserRegistrationResponse,
    UserResponse,
    UserRoleResponse,
    UserSearchResponse,
)

logger = logging.getLogger("zapshift.users")

router = APIRouter(prefix="/users", tags=["Users"])

SEARCH_LIMIT = 10


async def _get_user_by_email(db: AsyncSession, email: str):
    result = await db.execute(select(User).where(User.email == email))
    return result.scalar_one_or_none()


@router.post("", response_model=UserRegistrationResponse, status_code=status.HTTP_201_CREATED)
async def register_user(
    user_data: UserCreate,
    response: Response,
    current_user: AuthContext = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """
    Register the signed-in caller (idempotent).

    Called on every sign-in: an existing user only gets `last_login_at`
    refreshed and a 200; a new user is created with the `user` role and a 201.
    """
    email = (user_data.email or current_user.email).lower()
    if email != current_user.email:
        raise InsufficientPermissionsError("Cannot register a different email than the signed-in one")

    user = await _get_user_by_email(db, email)

    if user is None:
        user = User(
            email=email,
            name=user_data.name,
            photo_url=user_data.photo_url,
            role=UserRole.USER,
        )
        db.add(user)
        try:
            await db.commit()
        except IntegrityError:
            # A concurrent sign-in inserted the same email first
            await db.rollback()
            user = await _get_user_by_email(db, email)
            if user is None:
                raise
            logger.info("Concurrent registration resolved to existing user: %s", email)
        else:
            await db.refresh(user)
            logger.info("User registered: %s", email)
            return UserRegistrationResponse(
                created=True,
                message="User created",
                user=UserResponse.model_validate(user),
            )

    user.last_login_at = datetime.now(timezone.utc)
    await db.commit()
    await db.refresh(user)
    response.status_code = status.HTTP_200_OK
    return UserRegistrationResponse(
        created=False,
        message="User already exists",
        user=UserResponse.model_validate(user),
    )


@router.get("/search", response_model=UserSearchResponse)
async def search_users(
    email: str = Query(..., min_length=1, description="Part of the email to match"),
    admin: AuthContext = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """
    Search users by email (admin-only).

    Case-insensitive substring match, at most 10 results.
    """
    pattern = f"%{email.lower()}%"
    result = await db.execute(
        select(User)
        .where(func.lower(User.email).like(pattern))
        .order_by(User.email)
        .limit(SEARCH_LIMIT)
    )
    users = result.scalars().all()

    return UserSearchResponse(
        users=[UserResponse.model_validate(u) for u in users],
        total=len(users),
    )


@router.get("/{email}/role", response_model=UserRoleResponse)
async def get_user_role(
    email: str = Path(..., description="User email"),
    current_user: AuthContext = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """
    Get a user's role.

    Users can look up their own role; admins can look up anyone's.
    """
    email = email.lower()
    enforce_ownership(current_user, email, "user")

    user = await _get_user_by_email(db, email)

    if not user:
        raise ResourceNotFoundError("User", email)

    return UserRoleResponse(email=user.email, role=user.role)


@router.patch("/{user_id}/role", response_model=UserResponse)
async def update_user_role(
    request: RoleUpdateRequest,
    user_id: int = Path(..., description="User ID"),
    admin: AuthContext = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """
    Change a user's role (admin-only).

    Admins cannot change their own role.
    """
    user = await db.get(User, user_id)

    if not user:
        raise ResourceNotFoundError("User", user_id)

    if user.email == admin.email:
        raise ValidationFailedError("Cannot change your own role")

    previous = user.role
    user.role = request.role
    await db.commit()
    await db.refresh(user)

    logger.info(
        "Role changed: user=%s %s -> %s by %s",
        user.email, previous.value, user.role.value, admin.email,
    )

    return UserResponse.model_validate(user)
