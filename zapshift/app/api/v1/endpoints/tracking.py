"""
Tracking Log API Endpoints.

Append and read the status history of a parcel by tracking ID.
"""

from fastapi import APIRouter, Depends, Path, status
from sqlalchemy.ext.asyncio import AsyncSession

from zapshift.app.core.dependencies import AuthContext, get_current_user
from zapshift.app.core.exceptions import InsufficientPermissionsError, ValidationFailedError
from zapshift.app.core.guards import can_handle_parcel
from zapshift.app.db.session import get_db
from zapshift.app.schemas.tracking import TrackingLogCreate, TrackingLogListResponse, TrackingLogResponse
from zapshift.app.services.parcels import get_parcel_or_404
from zapshift.app.services.tracking import add_tracking_log, get_tracking_logs

router = APIRouter(prefix="/tracking-logs", tags=["Tracking"])


@router.post("", response_model=TrackingLogResponse, status_code=status.HTTP_201_CREATED)
async def append_tracking_log(
    log_data: TrackingLogCreate,
    current_user: AuthContext = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """
    Append a tracking log entry.

    Only admins and the parcel's assigned rider may write. The parcel must
    exist and carry the given tracking ID.
    """
    parcel = await get_parcel_or_404(db, log_data.parcel_id)
    if not can_handle_parcel(current_user, parcel.assigned_rider_email):
        raise InsufficientPermissionsError("Only admins or the assigned rider can add tracking entries")

    if parcel.tracking_id != log_data.tracking_id:
        raise ValidationFailedError(
            "Tracking ID does not belong to this parcel",
            details={"parcel_id": parcel.id, "tracking_id": log_data.tracking_id},
        )

    log = add_tracking_log(db, log_data.tracking_id, parcel.id, log_data.status, log_data.message)
    await db.commit()
    await db.refresh(log)

    return TrackingLogResponse.model_validate(log)


@router.get("/{tracking_id}", response_model=TrackingLogListResponse)
async def get_tracking_history(
    tracking_id: str = Path(..., description="Parcel tracking ID"),
    current_user: AuthContext = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """
    Tracking history of a parcel, oldest entry first.

    Returns 404 when nothing has been recorded for the tracking ID.
    """
    logs = await get_tracking_logs(db, tracking_id)
    return TrackingLogListResponse(
        tracking_id=tracking_id,
        logs=[TrackingLogResponse.model_validate(log) for log in logs],
        total=len(logs),
    )
