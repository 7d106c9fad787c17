"""
Rider API Endpoints.

Applications and admin approval under /riders; the rider's own workspace
(tasks, earnings, cashout) under /rider.
"""

from datetime import datetime, timezone
from typing import Optional
from zoneinfo import ZoneInfo

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from zapshift.app.core.config import settings
from zapshift.app.core.dependencies import AuthContext, get_current_user
from zapshift.app.core.exceptions import ResourceNotFoundError
from zapshift.app.core.guards import require_admin, require_rider
from zapshift.app.core.redis_client import get_redis
from zapshift.app.db.session import get_db
from zapshift.app.domain.earnings.calculator import parcel_earning, summarize_earnings
from zapshift.app.domain.earnings.cashout_service import CashoutService
from zapshift.app.models.enums import RiderStatus
from zapshift.app.models.rider import Rider
from zapshift.app.schemas.common import MessageResponse
from zapshift.app.schemas.earnings import (
    CashoutHistoryItem,
    CashoutHistoryResponse,
    CashoutRequest,
    CashoutResponse,
    EarningsSummaryResponse,
)
from zapshift.app.schemas.parcel import (
    CompletedParcelListResponse,
    CompletedParcelResponse,
    ParcelListResponse,
    ParcelResponse,
)
from zapshift.app.schemas.rider import RiderApply, RiderListResponse, RiderResponse
from zapshift.app.services import parcels as parcel_service
from zapshift.app.services import rider_lifecycle

router = APIRouter(prefix="/riders", tags=["Riders"])
workspace_router = APIRouter(prefix="/rider", tags=["Rider Workspace"])


# Applications & approval

@router.post("", response_model=RiderResponse, status_code=status.HTTP_201_CREATED)
async def apply_as_rider(
    application: RiderApply,
    current_user: AuthContext = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """
    Submit a rider application for the signed-in user.

    One application per email; a second one is rejected with 409.
    """
    rider = await rider_lifecycle.apply(db, current_user.email, **application.model_dump())
    return RiderResponse.model_validate(rider)


@router.get("/pending", response_model=RiderListResponse)
async def list_pending_riders(
    admin: AuthContext = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """List pending applications, newest first (admin-only)."""
    riders = await rider_lifecycle.list_by_status(db, RiderStatus.PENDING)
    return RiderListResponse(
        riders=[RiderResponse.model_validate(r) for r in riders],
        total=len(riders),
    )


@router.get("/active", response_model=RiderListResponse)
async def list_active_riders(
    district: Optional[str] = Query(None, description="Only riders of this district"),
    admin: AuthContext = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """List approved riders, optionally by district (admin-only)."""
    riders = await rider_lifecycle.list_by_status(db, RiderStatus.APPROVED, district=district)
    return RiderListResponse(
        riders=[RiderResponse.model_validate(r) for r in riders],
        total=len(riders),
    )


@router.patch("/{rider_id}/approve", response_model=RiderResponse)
async def approve_rider(
    rider_id: int = Path(..., description="Rider ID"),
    admin: AuthContext = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """
    Approve a pending rider (admin-only).

    The rider's user account gets the `rider` role in the same commit; if
    that account does not exist nothing changes and 404 is returned.
    """
    rider = await rider_lifecycle.approve(db, rider_id)
    return RiderResponse.model_validate(rider)


@router.patch("/{rider_id}/deactivate", response_model=RiderResponse)
async def deactivate_rider(
    rider_id: int = Path(..., description="Rider ID"),
    admin: AuthContext = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """
    Deactivate an approved rider (admin-only).

    Rejected with 409 while the rider has parcels to deliver or completed
    earnings not yet cashed out.
    """
    rider = await rider_lifecycle.deactivate(db, rider_id)
    return RiderResponse.model_validate(rider)


@router.delete("/{rider_id}", response_model=MessageResponse)
async def cancel_rider_application(
    rider_id: int = Path(..., description="Rider ID"),
    admin: AuthContext = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """Cancel (delete) a pending application (admin-only)."""
    await rider_lifecycle.cancel(db, rider_id)
    return MessageResponse(message=f"Rider application {rider_id} cancelled")


# Rider workspace

@workspace_router.get("/parcels", response_model=ParcelListResponse)
async def list_my_tasks(
    rider: AuthContext = Depends(require_rider),
    db: AsyncSession = Depends(get_db)
):
    """Parcels assigned to the rider that are waiting for pickup or in transit."""
    parcels = await parcel_service.list_rider_tasks(db, rider.email)
    return ParcelListResponse(
        parcels=[ParcelResponse.model_validate(p) for p in parcels],
        total=len(parcels),
    )


@workspace_router.get("/completed-parcels", response_model=CompletedParcelListResponse)
async def list_my_completed_parcels(
    rider: AuthContext = Depends(require_rider),
    db: AsyncSession = Depends(get_db)
):
    """Completed deliveries with the earning each one carries."""
    parcels = await CashoutService.completed_parcels(db, rider.email)

    items = [
        CompletedParcelResponse(
            **ParcelResponse.model_validate(p).model_dump(),
            earning=parcel_earning(p),
        )
        for p in parcels
    ]
    return CompletedParcelListResponse(parcels=items, total=len(items))


async def _get_rider_record(db: AsyncSession, email: str) -> Rider:
    result = await db.execute(select(Rider).where(Rider.email == email))
    rider = result.scalar_one_or_none()
    if rider is None:
        raise ResourceNotFoundError("Rider", email)
    return rider


@workspace_router.get("/earnings", response_model=EarningsSummaryResponse)
async def get_my_earnings(
    rider: AuthContext = Depends(require_rider),
    db: AsyncSession = Depends(get_db)
):
    """
    Earnings summary of the rider.

    Lifetime total, amount already cashed out, pending balance, and
    today / this week (since Sunday) / this month subtotals in local time.
    """
    record = await _get_rider_record(db, rider.email)
    parcels = await CashoutService.completed_parcels(db, rider.email)

    summary = summarize_earnings(
        parcels,
        total_cashed_out=record.total_cashed_out,
        now=datetime.now(timezone.utc),
        tz=ZoneInfo(settings.timezone),
    )
    return EarningsSummaryResponse(
        total_earning=summary.total_earning,
        total_cashed_out=summary.total_cashed_out,
        pending_amount=summary.pending_amount,
        today_earning=summary.today_earning,
        weekly_earning=summary.weekly_earning,
        monthly_earning=summary.monthly_earning,
        completed_count=summary.completed_count,
    )


@workspace_router.post("/cashout", response_model=CashoutResponse)
async def cashout(
    request: CashoutRequest,
    rider: AuthContext = Depends(require_rider),
    db: AsyncSession = Depends(get_db),
    redis_client=Depends(get_redis)
):
    """
    Withdraw the earning of one completed parcel.

    Rejected with 404 (no parcel), 409 (already cashed out / concurrent
    cashout), 400 (wrong amount / insufficient balance).
    """
    result = await CashoutService.request_cashout(
        db,
        redis_client,
        rider_email=rider.email,
        amount=request.amount,
        parcel_id=request.parcel_id,
    )
    return CashoutResponse(
        message="Cashout successful",
        parcel_id=result.parcel_id,
        amount=result.amount,
        total_cashed_out=result.total_cashed_out,
        pending_amount=result.pending_amount,
        cashed_out_at=result.cashed_out_at,
    )


@workspace_router.get("/cashouts", response_model=CashoutHistoryResponse)
async def get_my_cashouts(
    rider: AuthContext = Depends(require_rider),
    db: AsyncSession = Depends(get_db)
):
    """Cashout history of the rider, oldest first."""
    record = await _get_rider_record(db, rider.email)
    history = await CashoutService.history(db, rider.email)
    return CashoutHistoryResponse(
        cashouts=[CashoutHistoryItem.model_validate(c) for c in history],
        total_cashed_out=record.total_cashed_out,
    )
