"""
Parcel database model.

A parcel is booked by a sender, assigned to a rider by an admin and moved
through its delivery statuses by that rider.
"""

from sqlalchemy import Column, Integer, String, Float, DateTime, ForeignKey, Enum, Boolean
from sqlalchemy.sql import func
from zapshift.app.db.session import Base
from zapshift.app.models.enums import DeliveryStatus, PaymentStatus, ParcelType


def _values(enum_cls):
    return [m.value for m in enum_cls]


class Parcel(Base):
    """
    Parcel model.

    `is_cashed_out` is a one-way latch: once the assigned rider withdraws the
    parcel's earning the parcel is frozen.
    """
    __tablename__ = "parcels"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    tracking_id = Column(String(40), unique=True, nullable=False, index=True)

    # Parcel details
    title = Column(String(200), nullable=False)
    type = Column(Enum(ParcelType, values_callable=_values), nullable=False)
    weight = Column(Float, nullable=True)
    cost = Column(Float, nullable=True)
    created_by = Column(String(255), nullable=False, index=True)

    # Sender / receiver
    sender_name = Column(String(150), nullable=True)
    sender_district = Column(String(100), nullable=True)
    sender_address = Column(String(500), nullable=True)
    receiver_name = Column(String(150), nullable=True)
    receiver_district = Column(String(100), nullable=True)
    receiver_address = Column(String(500), nullable=True)

    # Status
    delivery_status = Column(
        Enum(DeliveryStatus, values_callable=_values),
        default=DeliveryStatus.PENDING,
        nullable=False,
        index=True,
    )
    payment_status = Column(
        Enum(PaymentStatus, values_callable=_values),
        default=PaymentStatus.UNPAID,
        nullable=False,
        index=True,
    )

    # Rider assignment
    assigned_rider_id = Column(Integer, ForeignKey('riders.id'), nullable=True, index=True)
    assigned_rider_email = Column(String(255), nullable=True, index=True)
    assigned_rider_name = Column(String(150), nullable=True)

    # Cashout latch
    is_cashed_out = Column(Boolean, default=False, nullable=False)
    cashed_out_at = Column(DateTime(timezone=True), nullable=True)

    # Timestamps
    pickup_time = Column(DateTime(timezone=True), nullable=True)
    delivered_time = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    def __repr__(self):
        return f"<Parcel(id={self.id}, tracking_id='{self.tracking_id}', status='{self.delivery_status.value}')>"
