"""
User database model.

This module defines the User SQLAlchemy model for authentication.
"""

from sqlalchemy import Column, Integer, String, Boolean, DateTime, Enum
from sqlalchemy.sql import func
from swiftdrop.app.db.session import Base
from swiftdrop.app.models.enums import UserRole


class User(Base):
    """
    User model for authentication and user management.

    Parcels reference users by id only; nothing in the parcel domain
    reads this table.
    """
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    email = Column(String(255), unique=True, index=True, nullable=False)
    username = Column(String(100), unique=True, index=True, nullable=False)
    hashed_password = Column(String(255), nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)

    role = Column(
        Enum(UserRole, name="user_role", values_callable=lambda enum_cls: [m.value for m in enum_cls]),
        default=UserRole.SENDER,
        nullable=False,
    )

    # SHA-256 digest of the currently valid refresh token (None when logged out)
    refresh_token_hash = Column(String(64), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    def __repr__(self):
        return f"<User(id={self.id}, username='{self.username}', email='{self.email}', role='{self.role.value}')>"
