"""
Parcel service.

Booking, rider assignment and delivery status transitions. Every change is
recorded in the tracking log within the same commit.
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from zapshift.app.core.exceptions import ConflictError, ResourceNotFoundError, ValidationFailedError
from zapshift.app.models.enums import ACTIVE_TASK_STATUSES, DeliveryStatus, PaymentStatus, RiderStatus
from zapshift.app.models.parcel import Parcel
from zapshift.app.models.rider import Rider
from zapshift.app.services.tracking import add_tracking_log

logger = logging.getLogger("zapshift.parcels")

# Allowed delivery status moves made through the status endpoint
STATUS_TRANSITIONS = {
    DeliveryStatus.RIDER_ASSIGNED: {DeliveryStatus.IN_TRANSIT},
    DeliveryStatus.IN_TRANSIT: {DeliveryStatus.DELIVERED, DeliveryStatus.SERVICE_CENTER_DELIVERED},
}


def generate_tracking_id(now: Optional[datetime] = None) -> str:
    now = now or datetime.now(timezone.utc)
    return f"PCL-{now:%Y%m%d}-{uuid.uuid4().hex[:6].upper()}"


async def get_parcel_or_404(db: AsyncSession, parcel_id: int) -> Parcel:
    parcel = await db.get(Parcel, parcel_id)
    if parcel is None:
        raise ResourceNotFoundError("Parcel", parcel_id)
    return parcel


async def create_parcel(db: AsyncSession, created_by: str, **fields) -> Parcel:
    parcel = Parcel(
        tracking_id=generate_tracking_id(),
        created_by=created_by,
        delivery_status=DeliveryStatus.PENDING,
        payment_status=PaymentStatus.UNPAID,
        is_cashed_out=False,
        **fields,
    )
    db.add(parcel)
    await db.flush()

    add_tracking_log(db, parcel.tracking_id, parcel.id, "parcel_created", f"Parcel created by {created_by}")
    await db.commit()
    await db.refresh(parcel)

    logger.info("Parcel created: id=%s tracking_id=%s by=%s", parcel.id, parcel.tracking_id, created_by)
    return parcel


async def list_parcels(
    db: AsyncSession,
    created_by: Optional[str] = None,
    payment_status: Optional[PaymentStatus] = None,
    delivery_status: Optional[DeliveryStatus] = None,
) -> List[Parcel]:
    """Filter parcels; newest first."""
    query = select(Parcel)
    if created_by:
        query = query.where(Parcel.created_by == created_by)
    if payment_status:
        query = query.where(Parcel.payment_status == payment_status)
    if delivery_status:
        query = query.where(Parcel.delivery_status == delivery_status)

    result = await db.execute(query.order_by(Parcel.created_at.desc(), Parcel.id.desc()))
    return list(result.scalars().all())


async def list_rider_tasks(db: AsyncSession, rider_email: str) -> List[Parcel]:
    """Parcels a rider still has to pick up or deliver."""
    result = await db.execute(
        select(Parcel)
        .where(
            Parcel.assigned_rider_email == rider_email,
            Parcel.delivery_status.in_(ACTIVE_TASK_STATUSES),
        )
        .order_by(Parcel.created_at.desc(), Parcel.id.desc())
    )
    return list(result.scalars().all())


async def assign_rider(db: AsyncSession, parcel_id: int, rider_id: int) -> Parcel:
    """
    Assign an approved rider to a pending parcel.

    Raises:
        ResourceNotFoundError: parcel or rider missing
        ConflictError: parcel not pending
        ValidationFailedError: rider not approved
    """
    parcel = await get_parcel_or_404(db, parcel_id)
    if parcel.delivery_status != DeliveryStatus.PENDING:
        raise ConflictError(
            f"Parcel already {parcel.delivery_status.value}",
            details={"delivery_status": parcel.delivery_status.value},
        )

    rider = await db.get(Rider, rider_id)
    if rider is None:
        raise ResourceNotFoundError("Rider", rider_id)
    if rider.status != RiderStatus.APPROVED:
        raise ValidationFailedError(
            "Only approved riders can be assigned",
            details={"rider_status": rider.status.value},
        )

    parcel.assigned_rider_id = rider.id
    parcel.assigned_rider_email = rider.email
    parcel.assigned_rider_name = rider.name
    parcel.delivery_status = DeliveryStatus.RIDER_ASSIGNED

    add_tracking_log(
        db, parcel.tracking_id, parcel.id,
        DeliveryStatus.RIDER_ASSIGNED.value,
        f"Assigned to rider {rider.name}",
    )
    await db.commit()
    await db.refresh(parcel)

    logger.info("Parcel %s assigned to rider %s", parcel.id, rider.email)
    return parcel


async def update_status(db: AsyncSession, parcel: Parcel, new_status: DeliveryStatus, message: Optional[str] = None) -> Parcel:
    """
    Move a parcel along its delivery flow.

    Raises:
        ConflictError: parcel already cashed out
        ValidationFailedError: transition not allowed
    """
    if parcel.is_cashed_out:
        raise ConflictError("Parcel is cashed out and can no longer change")

    allowed = STATUS_TRANSITIONS.get(parcel.delivery_status, set())
    if new_status not in allowed:
        raise ValidationFailedError(
            f"Cannot change status from {parcel.delivery_status.value} to {new_status.value}",
            details={"from": parcel.delivery_status.value, "to": new_status.value},
        )

    now = datetime.now(timezone.utc)
    parcel.delivery_status = new_status
    if new_status == DeliveryStatus.IN_TRANSIT:
        parcel.pickup_time = now
    else:
        parcel.delivered_time = now

    add_tracking_log(
        db, parcel.tracking_id, parcel.id, new_status.value,
        message or f"Parcel marked {new_status.value}",
    )
    await db.commit()
    await db.refresh(parcel)

    logger.info("Parcel %s status -> %s", parcel.id, new_status.value)
    return parcel
