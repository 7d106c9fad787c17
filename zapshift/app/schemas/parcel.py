"""
Parcel Pydantic schemas.

Defines request and response models for parcel management.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import Field

from zapshift.app.models.enums import DeliveryStatus, ParcelType, PaymentStatus
from zapshift.app.schemas.common import CamelModel


class ParcelCreate(CamelModel):
    """Schema for booking a parcel."""
    title: str = Field(..., min_length=1, max_length=200, description="Parcel title")
    type: ParcelType = Field(..., description="document or non-document")
    weight: Optional[float] = Field(None, gt=0, description="Weight in kilograms")
    cost: Optional[float] = Field(None, ge=0, description="Delivery cost quoted to the sender")
    sender_name: Optional[str] = Field(None, max_length=150)
    sender_district: Optional[str] = Field(None, max_length=100)
    sender_address: Optional[str] = Field(None, max_length=500)
    receiver_name: Optional[str] = Field(None, max_length=150)
    receiver_district: Optional[str] = Field(None, max_length=100)
    receiver_address: Optional[str] = Field(None, max_length=500)


class ParcelResponse(CamelModel):
    """Schema for parcel response."""
    id: int
    tracking_id: str
    title: str
    type: ParcelType
    weight: Optional[float] = None
    cost: Optional[float] = None
    created_by: str
    sender_name: Optional[str] = None
    sender_district: Optional[str] = None
    sender_address: Optional[str] = None
    receiver_name: Optional[str] = None
    receiver_district: Optional[str] = None
    receiver_address: Optional[str] = None
    delivery_status: DeliveryStatus
    payment_status: PaymentStatus
    assigned_rider_id: Optional[int] = None
    assigned_rider_email: Optional[str] = None
    assigned_rider_name: Optional[str] = None
    is_cashed_out: bool
    cashed_out_at: Optional[datetime] = None
    pickup_time: Optional[datetime] = None
    delivered_time: Optional[datetime] = None
    created_at: datetime


class ParcelCreatedResponse(CamelModel):
    message: str
    inserted_id: int
    tracking_id: str


class ParcelListResponse(CamelModel):
    """Schema for parcel list."""
    parcels: List[ParcelResponse]
    total: int


class AssignRiderRequest(CamelModel):
    rider_id: int = Field(..., description="Approved rider to assign")


class StatusUpdateRequest(CamelModel):
    status: DeliveryStatus
    message: Optional[str] = Field(None, max_length=500)


class CompletedParcelResponse(ParcelResponse):
    """Completed parcel with the earning it carries for its rider."""
    earning: int


class CompletedParcelListResponse(CamelModel):
    parcels: List[CompletedParcelResponse]
    total: int
