"""
Authentication dependencies for FastAPI.

This module turns a bearer token into an immutable `AuthContext` that
route handlers receive instead of a mutated request.
"""

from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from zapshift.app.core.identity import IdentityVerifier, get_identity_verifier
from zapshift.app.db.session import get_db
from zapshift.app.models.enums import UserRole
from zapshift.app.models.user import User

# HTTP Bearer security scheme; missing headers are reported as 401 below
security = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class AuthContext:
    """Verified caller: identity from the token, role from the users table."""
    uid: str
    email: str
    role: Optional[UserRole] = None


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    verifier: IdentityVerifier = Depends(get_identity_verifier),
    db: AsyncSession = Depends(get_db)
) -> AuthContext:
    """
    FastAPI dependency for bearer token authentication.

    1. Requires an `Authorization: Bearer <token>` header
    2. Verifies the token with the identity provider
    3. Resolves the caller's role from their user record (None if unregistered)

    Raises:
        HTTPException: 401 if the header is missing
        AuthenticationError: 401 if the token cannot be verified
    """
    if credentials is None or not credentials.credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized access",
            headers={"WWW-Authenticate": "Bearer"},
        )

    identity = await verifier.verify(credentials.credentials)

    result = await db.execute(select(User.role).where(User.email == identity.email))
    role = result.scalar_one_or_none()

    return AuthContext(uid=identity.uid, email=identity.email, role=role)
