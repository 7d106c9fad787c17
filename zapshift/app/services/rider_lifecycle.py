"""
Rider lifecycle service.

Transitions:
    pending  → approved      (admin approve; user role becomes "rider")
    pending  → removed       (admin cancel; hard delete)
    approved → deactivated   (admin deactivate; user role back to "user")

Each transition commits the rider and the user change together.
"""

import logging
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from zapshift.app.core.exceptions import ConflictError, ResourceNotFoundError
from zapshift.app.domain.earnings.calculator import total_earning
from zapshift.app.domain.earnings.cashout_service import CashoutService
from zapshift.app.models.enums import RiderStatus, UserRole
from zapshift.app.models.rider import Rider
from zapshift.app.models.user import User
from zapshift.app.services.parcels import list_rider_tasks

logger = logging.getLogger("zapshift.riders")


async def get_rider_or_404(db: AsyncSession, rider_id: int) -> Rider:
    rider = await db.get(Rider, rider_id)
    if rider is None:
        raise ResourceNotFoundError("Rider", rider_id)
    return rider


async def _get_user_for_rider(db: AsyncSession, rider: Rider) -> User:
    result = await db.execute(select(User).where(User.email == rider.email))
    user = result.scalar_one_or_none()
    if user is None:
        # No partial approvals: the rider keeps its status when the user is missing
        raise ResourceNotFoundError("User", rider.email)
    return user


async def apply(db: AsyncSession, email: str, **profile) -> Rider:
    """Create a pending rider application for `email`."""
    result = await db.execute(select(Rider).where(Rider.email == email))
    existing = result.scalar_one_or_none()
    if existing is not None:
        raise ConflictError(
            f"A rider application already exists for {email}",
            details={"status": existing.status.value},
        )

    rider = Rider(email=email, status=RiderStatus.PENDING, total_cashed_out=0.0, version=0, **profile)
    db.add(rider)
    try:
        await db.commit()
    except IntegrityError:
        # A concurrent application for the same email committed first
        await db.rollback()
        raise ConflictError(f"A rider application already exists for {email}")
    await db.refresh(rider)

    logger.info("Rider application submitted: %s", email)
    return rider


async def list_by_status(db: AsyncSession, status: RiderStatus, district: Optional[str] = None) -> List[Rider]:
    query = select(Rider).where(Rider.status == status)
    if district:
        query = query.where(Rider.district == district)
    result = await db.execute(query.order_by(Rider.applied_at.desc(), Rider.id.desc()))
    return list(result.scalars().all())


async def approve(db: AsyncSession, rider_id: int) -> Rider:
    """
    Approve a pending rider and promote the matching user to the rider role.

    Raises:
        ResourceNotFoundError: rider or its user record missing
        ConflictError: rider is not pending
    """
    rider = await get_rider_or_404(db, rider_id)
    if rider.status != RiderStatus.PENDING:
        raise ConflictError(
            f"Only pending riders can be approved (current status: {rider.status.value})"
        )

    user = await _get_user_for_rider(db, rider)

    rider.status = RiderStatus.APPROVED
    rider.approved_at = datetime.now(timezone.utc)
    user.role = UserRole.RIDER
    await db.commit()
    await db.refresh(rider)

    logger.info("Rider approved: id=%s email=%s", rider.id, rider.email)
    return rider


async def cancel(db: AsyncSession, rider_id: int) -> None:
    """Remove a pending application."""
    rider = await get_rider_or_404(db, rider_id)
    if rider.status != RiderStatus.PENDING:
        raise ConflictError(
            f"Only pending applications can be cancelled (current status: {rider.status.value})"
        )

    await db.delete(rider)
    await db.commit()

    logger.info("Rider application cancelled: id=%s email=%s", rider_id, rider.email)


async def deactivate(db: AsyncSession, rider_id: int) -> Rider:
    """
    Deactivate an approved rider and revoke the rider role.

    The rider must be settled first: no parcel still waiting for pickup or
    in transit, and no completed earning left to cash out.

    Raises:
        ResourceNotFoundError: rider missing
        ConflictError: rider not approved, has open tasks or a pending balance
    """
    rider = await get_rider_or_404(db, rider_id)
    if rider.status != RiderStatus.APPROVED:
        raise ConflictError(
            f"Only approved riders can be deactivated (current status: {rider.status.value})"
        )

    open_tasks = await list_rider_tasks(db, rider.email)
    if open_tasks:
        raise ConflictError(
            "Rider still has parcels to deliver",
            details={"parcel_ids": [p.id for p in open_tasks]},
        )

    completed = await CashoutService.completed_parcels(db, rider.email)
    pending = total_earning(completed) - rider.total_cashed_out
    if pending > 0:
        raise ConflictError(
            "Rider has earnings left to cash out",
            details={"pending_amount": pending},
        )

    result = await db.execute(select(User).where(User.email == rider.email))
    user = result.scalar_one_or_none()

    rider.status = RiderStatus.DEACTIVATED
    if user is not None and user.role == UserRole.RIDER:
        user.role = UserRole.USER
    await db.commit()
    await db.refresh(rider)

    logger.info("Rider deactivated: id=%s email=%s", rider.id, rider.email)
    return rider
