"""
Tracking Log database model.

Append-only status history of a parcel, keyed by its tracking ID.
"""

from sqlalchemy import Column, Integer, String, ForeignKey, DateTime
from zapshift.app.db.session import Base


class TrackingLog(Base):
    """Tracking log entry. NO updates or deletions."""
    __tablename__ = "tracking_logs"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    tracking_id = Column(String(40), nullable=False, index=True)
    parcel_id = Column(Integer, ForeignKey('parcels.id'), nullable=False, index=True)
    status = Column(String(50), nullable=False)
    message = Column(String(500), nullable=True)
    timestamp = Column(DateTime(timezone=True), nullable=False)

    def __repr__(self):
        return f"<TrackingLog(tracking_id='{self.tracking_id}', status='{self.status}')>"
