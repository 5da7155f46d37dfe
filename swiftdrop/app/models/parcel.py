"""
Parcel database models.

A parcel and its status history form one aggregate: the status log rows are
always loaded with the parcel and written in the same transaction.
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, Float, DateTime, ForeignKey, Enum, event
from sqlalchemy.exc import InvalidRequestError
from sqlalchemy.orm import relationship
from swiftdrop.app.db.session import Base
from swiftdrop.app.models.parcel_enums import ParcelStatus


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _new_parcel_id() -> str:
    return str(uuid.uuid4())


parcel_status_type = Enum(
    ParcelStatus,
    name="parcel_status",
    values_callable=lambda enum_cls: [member.value for member in enum_cls],
    validate_strings=True,
)


class Parcel(Base):
    """
    Parcel model for the tracking service.

    Sender and receiver are user identifiers owned by the identity domain;
    they are stored by reference and never joined.
    """
    __tablename__ = "parcels"

    id = Column(String(36), primary_key=True, default=_new_parcel_id)

    # Public identification
    tracking_id = Column(String(40), unique=True, nullable=False, index=True)

    # Parties (by reference only)
    sender_id = Column(String(64), nullable=False, index=True)
    receiver_id = Column(String(64), nullable=False, index=True)

    # Route
    origin = Column(String(255), nullable=False)
    destination = Column(String(255), nullable=False)

    # Optional attributes
    weight = Column(Float, nullable=True)
    price = Column(Float, nullable=True)

    # Status
    status = Column(parcel_status_type, default=ParcelStatus.CREATED, nullable=False, index=True)

    # Timestamps
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False, index=True)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    # Append-only history, insertion order is chronological order
    status_logs = relationship(
        "ParcelStatusLog",
        back_populates="parcel",
        order_by="ParcelStatusLog.id",
        lazy="selectin",
        cascade="save-update, merge",
    )

    def __repr__(self):
        return f"<Parcel(id={self.id}, tracking_id='{self.tracking_id}', status='{self.status.value}')>"


class ParcelStatusLog(Base):
    """
    One immutable entry in a parcel's status history.

    updated_by is None for entries written without an acting user.
    """
    __tablename__ = "parcel_status_logs"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    parcel_id = Column(String(36), ForeignKey("parcels.id"), nullable=False, index=True)

    status = Column(parcel_status_type, nullable=False)
    timestamp = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    note = Column(String(500), nullable=True)
    updated_by = Column(String(64), nullable=True)

    parcel = relationship("Parcel", back_populates="status_logs")

    def __repr__(self):
        return f"<ParcelStatusLog(parcel_id={self.parcel_id}, status='{self.status.value}', updated_by={self.updated_by})>"


@event.listens_for(ParcelStatusLog, "before_update")
def _reject_log_update(mapper, connection, target):
    # A SQLAlchemyError, so ParcelRepository.save rolls back and reports StorageError
    raise InvalidRequestError("Status log entries are immutable once written")
