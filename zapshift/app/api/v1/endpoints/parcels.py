"""
Parcel Management API Endpoints.

Senders book and list their parcels; admins assign riders; assigned riders
move parcels through pickup and delivery.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from zapshift.app.core.dependencies import AuthContext, get_current_user
from zapshift.app.core.exceptions import InsufficientPermissionsError
from zapshift.app.core.guards import can_access_owned, can_handle_parcel, enforce_ownership, is_admin, require_admin
from zapshift.app.db.session import get_db
from zapshift.app.models.enums import DeliveryStatus, PaymentStatus
from zapshift.app.schemas.parcel import (
    AssignRiderRequest,
    ParcelCreate,
    ParcelCreatedResponse,
    ParcelListResponse,
    ParcelResponse,
    StatusUpdateRequest,
)
from zapshift.app.services import parcels as parcel_service

router = APIRouter(prefix="/parcels", tags=["Parcels"])


@router.post("", response_model=ParcelCreatedResponse, status_code=status.HTTP_201_CREATED)
async def create_parcel(
    parcel_data: ParcelCreate,
    current_user: AuthContext = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """
    Book a new parcel for the signed-in sender.

    Validates:
    - `title` and `type` are present
    """
    parcel = await parcel_service.create_parcel(
        db,
        created_by=current_user.email,
        **parcel_data.model_dump(),
    )

    return ParcelCreatedResponse(
        message="Parcel added",
        inserted_id=parcel.id,
        tracking_id=parcel.tracking_id,
    )


@router.get("", response_model=ParcelListResponse)
async def list_parcels(
    created_by: Optional[str] = Query(None, alias="createdBy", description="Sender email (admin only)"),
    payment_status: Optional[PaymentStatus] = Query(None, alias="paymentStatus"),
    delivery_status: Optional[DeliveryStatus] = Query(None, alias="deliveryStatus"),
    current_user: AuthContext = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """
    List parcels, newest first.

    Non-admins only ever see their own parcels; admins may filter by sender.
    """
    if is_admin(current_user):
        owner = created_by.lower() if created_by else None
    else:
        if created_by and created_by.lower() != current_user.email:
            raise InsufficientPermissionsError("You can only list your own parcels")
        owner = current_user.email

    parcels = await parcel_service.list_parcels(
        db,
        created_by=owner,
        payment_status=payment_status,
        delivery_status=delivery_status,
    )

    return ParcelListResponse(
        parcels=[ParcelResponse.model_validate(p) for p in parcels],
        total=len(parcels),
    )


@router.get("/{parcel_id}", response_model=ParcelResponse)
async def get_parcel(
    parcel_id: int = Path(..., description="Parcel ID"),
    current_user: AuthContext = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """
    Get a parcel.

    Visible to its sender, its assigned rider and admins.
    """
    parcel = await parcel_service.get_parcel_or_404(db, parcel_id)

    if not can_access_owned(current_user, parcel.assigned_rider_email):
        enforce_ownership(current_user, parcel.created_by, "parcel")

    return ParcelResponse.model_validate(parcel)


@router.patch("/{parcel_id}/assign", response_model=ParcelResponse)
async def assign_rider(
    request: AssignRiderRequest,
    parcel_id: int = Path(..., description="Parcel ID"),
    admin: AuthContext = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """
    Assign an approved rider to a pending parcel (admin-only).
    """
    parcel = await parcel_service.assign_rider(db, parcel_id, request.rider_id)
    return ParcelResponse.model_validate(parcel)


@router.patch("/{parcel_id}/status", response_model=ParcelResponse)
async def update_parcel_status(
    request: StatusUpdateRequest,
    parcel_id: int = Path(..., description="Parcel ID"),
    current_user: AuthContext = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """
    Update a parcel's delivery status.

    Only the assigned rider or an admin may do this. Picking up sets the
    pickup time; delivering sets the delivered time.
    """
    parcel = await parcel_service.get_parcel_or_404(db, parcel_id)

    if not can_handle_parcel(current_user, parcel.assigned_rider_email):
        raise InsufficientPermissionsError("Only the assigned rider can update this parcel")

    parcel = await parcel_service.update_status(db, parcel, request.status, request.message)
    return ParcelResponse.model_validate(parcel)
