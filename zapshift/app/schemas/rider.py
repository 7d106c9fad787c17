"""
Rider Pydantic schemas.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import Field

from zapshift.app.models.enums import RiderStatus
from zapshift.app.schemas.common import CamelModel


class RiderApply(CamelModel):
    """Schema for a rider application. The email comes from the token."""
    name: str = Field(..., min_length=1, max_length=150)
    phone: Optional[str] = Field(None, max_length=30)
    age: Optional[int] = Field(None, ge=18, le=100)
    region: Optional[str] = Field(None, max_length=100)
    district: Optional[str] = Field(None, max_length=100)
    nid: Optional[str] = Field(None, max_length=50)
    bike_brand: Optional[str] = Field(None, max_length=100)
    bike_registration: Optional[str] = Field(None, max_length=50)


class RiderResponse(CamelModel):
    id: int
    email: str
    name: str
    phone: Optional[str] = None
    age: Optional[int] = None
    region: Optional[str] = None
    district: Optional[str] = None
    nid: Optional[str] = None
    bike_brand: Optional[str] = None
    bike_registration: Optional[str] = None
    status: RiderStatus
    total_cashed_out: float
    applied_at: datetime
    approved_at: Optional[datetime] = None


class RiderListResponse(CamelModel):
    riders: List[RiderResponse]
    total: int
