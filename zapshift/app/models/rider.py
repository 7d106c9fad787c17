"""
Rider and rider cashout database models.
"""

from sqlalchemy import Column, Integer, String, Float, DateTime, ForeignKey, Enum
from sqlalchemy.sql import func
from zapshift.app.db.session import Base
from zapshift.app.models.enums import RiderStatus


class Rider(Base):
    """
    Rider model.

    Created from an application, approved by an admin. `total_cashed_out`
    only grows; `version` is bumped by every cashout and guards concurrent
    balance updates.
    """
    __tablename__ = "riders"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    email = Column(String(255), unique=True, index=True, nullable=False)
    name = Column(String(150), nullable=False)
    phone = Column(String(30), nullable=True)
    age = Column(Integer, nullable=True)
    region = Column(String(100), nullable=True)
    district = Column(String(100), nullable=True, index=True)
    nid = Column(String(50), nullable=True)
    bike_brand = Column(String(100), nullable=True)
    bike_registration = Column(String(50), nullable=True)

    status = Column(
        Enum(RiderStatus, values_callable=lambda e: [m.value for m in e]),
        default=RiderStatus.PENDING,
        nullable=False,
        index=True,
    )

    # Earnings ledger
    total_cashed_out = Column(Float, default=0.0, nullable=False)
    version = Column(Integer, default=0, nullable=False)

    applied_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    approved_at = Column(DateTime(timezone=True), nullable=True)

    def __repr__(self):
        return f"<Rider(id={self.id}, email='{self.email}', status='{self.status.value}')>"


class RiderCashout(Base):
    """
    Cashout history entry.

    One row per withdrawn parcel; immutable. The unique parcel_id is a
    second barrier against paying the same parcel twice.
    """
    __tablename__ = "rider_cashouts"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    rider_id = Column(Integer, ForeignKey('riders.id', ondelete="CASCADE"), nullable=False, index=True)
    parcel_id = Column(Integer, ForeignKey('parcels.id'), unique=True, nullable=False)
    amount = Column(Float, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False)

    def __repr__(self):
        return f"<RiderCashout(rider_id={self.rider_id}, parcel_id={self.parcel_id}, amount={self.amount})>"
