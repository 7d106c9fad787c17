"""
Tracking log Pydantic schemas.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import Field

from zapshift.app.schemas.common import CamelModel


class TrackingLogCreate(CamelModel):
    tracking_id: str = Field(..., min_length=1, max_length=40)
    parcel_id: int
    status: str = Field(..., min_length=1, max_length=50)
    message: Optional[str] = Field(None, max_length=500)


class TrackingLogResponse(CamelModel):
    id: int
    tracking_id: str
    parcel_id: int
    status: str
    message: Optional[str] = None
    timestamp: datetime


class TrackingLogListResponse(CamelModel):
    tracking_id: str
    logs: List[TrackingLogResponse]
    total: int
