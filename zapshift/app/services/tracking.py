"""
Tracking log service.

Append-only: entries are inserted, never updated or deleted.
"""

from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from zapshift.app.core.exceptions import ResourceNotFoundError
from zapshift.app.models.tracking_log import TrackingLog


def add_tracking_log(
    db: AsyncSession,
    tracking_id: str,
    parcel_id: int,
    status: str,
    message: Optional[str] = None,
) -> TrackingLog:
    """
    Stage a tracking log entry on the session.

    The caller commits, so the entry lands in the same transaction as the
    parcel change it describes.
    """
    log = TrackingLog(
        tracking_id=tracking_id,
        parcel_id=parcel_id,
        status=status,
        message=message,
        timestamp=datetime.now(timezone.utc),
    )
    db.add(log)
    return log


async def get_tracking_logs(db: AsyncSession, tracking_id: str) -> List[TrackingLog]:
    """
    All entries for a tracking ID, oldest first.

    Raises:
        ResourceNotFoundError: no entries recorded for the tracking ID
    """
    result = await db.execute(
        select(TrackingLog)
        .where(TrackingLog.tracking_id == tracking_id)
        .order_by(TrackingLog.timestamp.asc(), TrackingLog.id.asc())
    )
    logs = list(result.scalars().all())
    if not logs:
        raise ResourceNotFoundError("Tracking logs", tracking_id)
    return logs
