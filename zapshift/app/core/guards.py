"""
Security guards for role-based and ownership-based access control.

Role checks are plain predicates over an `AuthContext`; the dependency
factories below only translate a failed predicate into a 403.
"""

from typing import List, Optional

from fastapi import Depends

from zapshift.app.core.dependencies import AuthContext, get_current_user
from zapshift.app.core.exceptions import InsufficientPermissionsError
from zapshift.app.models.enums import UserRole


def has_role(context: AuthContext, *roles: UserRole) -> bool:
    """True if the caller holds one of `roles`."""
    return context.role is not None and context.role in roles


def is_admin(context: AuthContext) -> bool:
    return has_role(context, UserRole.ADMIN)


def can_access_owned(context: AuthContext, owner_email: Optional[str]) -> bool:
    """Admins can access everything; everyone else only their own records."""
    if is_admin(context):
        return True
    return owner_email is not None and owner_email == context.email


def can_handle_parcel(context: AuthContext, assigned_rider_email: Optional[str]) -> bool:
    """Admins, or the rider the parcel is assigned to."""
    return is_admin(context) or (
        assigned_rider_email is not None and assigned_rider_email == context.email
    )


def require_role(allowed_roles: List[UserRole]):
    """
    Dependency factory for role-based access control.

    Usage:
        @router.get("/riders/pending")
        async def list_pending(ctx: AuthContext = Depends(require_role([UserRole.ADMIN]))):
            ...
    """
    async def role_checker(current_user: AuthContext = Depends(get_current_user)) -> AuthContext:
        if not has_role(current_user, *allowed_roles):
            raise InsufficientPermissionsError(
                f"Access denied. Required role: {', '.join([r.value for r in allowed_roles])}"
            )
        return current_user

    return role_checker


# Common guards
require_admin = require_role([UserRole.ADMIN])
require_rider = require_role([UserRole.RIDER])


def enforce_ownership(context: AuthContext, owner_email: Optional[str], resource_name: str = "resource") -> None:
    """
    Raise 403 unless the caller owns the resource or is an admin.

    Usage:
        parcel = await get_parcel_or_404(db, parcel_id)
        enforce_ownership(current_user, parcel.created_by, "parcel")
    """
    if not can_access_owned(context, owner_email):
        raise InsufficientPermissionsError(
            f"Access denied. You do not have permission to access this {resource_name}."
        )
