"""
User database model.

Users are created on first sign-in; the identity itself lives with the
identity provider, this record only carries the profile and the role.
"""

from sqlalchemy import Column, Integer, String, DateTime, Enum
from sqlalchemy.sql import func
from zapshift.app.db.session import Base
from zapshift.app.models.enums import UserRole


class User(Base):
    """User model holding the role used by route guards."""
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    email = Column(String(255), unique=True, index=True, nullable=False)
    name = Column(String(150), nullable=True)
    photo_url = Column(String(500), nullable=True)

    role = Column(Enum(UserRole, values_callable=lambda e: [m.value for m in e]), default=UserRole.USER, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    last_login_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    def __repr__(self):
        return f"<User(id={self.id}, email='{self.email}', role='{self.role.value}')>"
