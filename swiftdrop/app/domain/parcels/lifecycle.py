"""
Parcel Lifecycle (Domain Logic).

Owns every rule that touches a parcel's status:
- creation always starts at CREATED with one log entry
- every status change appends exactly one log entry
- cancellation is refused once the parcel has been dispatched

Status changes other than cancellation are not checked against a transition
graph; any status may follow any other.

The engine never commits. It returns the new or mutated aggregate and the
caller hands it to the repository.
"""

from typing import Optional

from swiftdrop.app.core.exceptions import IllegalTransitionError, ValidationError
from swiftdrop.app.models.parcel import Parcel, ParcelStatusLog, utcnow
from swiftdrop.app.models.parcel_enums import ParcelStatus, NON_CANCELLABLE_STATUSES
from swiftdrop.app.repositories.parcel_repository import ParcelRepository
from swiftdrop.app.services.tracking import generate_tracking_id

DEFAULT_CREATION_NOTE = "Parcel created"
CANCELLATION_NOTE = "Cancelled by user"


def _is_blank(value) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def append_status(
    parcel: Parcel,
    status: ParcelStatus,
    acting_user_id: Optional[str] = None,
    note: Optional[str] = None,
) -> ParcelStatusLog:
    """Set the parcel status and record it as the newest log entry."""
    entry = ParcelStatusLog(
        status=status,
        timestamp=utcnow(),
        note=note,
        updated_by=str(acting_user_id) if acting_user_id is not None else None,
    )
    parcel.status = status
    parcel.status_logs.append(entry)
    return entry


class ParcelLifecycle:
    """Stateless rule engine operating on parcels loaded through the repository."""

    def __init__(self, repository: ParcelRepository):
        self.repository = repository

    def create(
        self,
        sender_id: Optional[str],
        receiver_id: Optional[str],
        origin: Optional[str],
        destination: Optional[str],
        weight: Optional[float] = None,
        price: Optional[float] = None,
        note: Optional[str] = None,
    ) -> Parcel:
        """
        Build a new parcel aggregate ready for persistence.

        Raises:
            ValidationError: sender, receiver, origin or destination missing
        """
        required = {
            "senderId": sender_id,
            "receiverId": receiver_id,
            "origin": origin,
            "destination": destination,
        }
        missing = [name for name, value in required.items() if _is_blank(value)]
        if missing:
            raise ValidationError(details={"missing": missing})

        now = utcnow()
        parcel = Parcel(
            tracking_id=generate_tracking_id(),
            sender_id=str(sender_id),
            receiver_id=str(receiver_id),
            origin=origin,
            destination=destination,
            weight=weight,
            price=price,
            created_at=now,
            updated_at=now,
            status_logs=[],
        )
        append_status(parcel, ParcelStatus.CREATED, acting_user_id=sender_id, note=note or DEFAULT_CREATION_NOTE)
        return parcel

    async def update_status(
        self,
        parcel_id: str,
        new_status: ParcelStatus,
        acting_user_id: Optional[str] = None,
        note: Optional[str] = None,
    ) -> Parcel:
        """
        Move a parcel to any status and log it.

        Raises:
            ValidationError: new_status is not a parcel status
            ParcelNotFoundError: unknown parcel
        """
        try:
            status = ParcelStatus(new_status)
        except ValueError:
            raise ValidationError(f"Invalid status: {new_status}", details={"status": str(new_status)})

        parcel = await self.repository.find_by_id(parcel_id)
        append_status(parcel, status, acting_user_id=acting_user_id, note=note)
        return parcel

    async def cancel(self, parcel_id: str, acting_user_id: Optional[str] = None) -> Parcel:
        """
        Cancel a parcel that has not been dispatched yet.

        Raises:
            ParcelNotFoundError: unknown parcel
            IllegalTransitionError: parcel already dispatched, in transit or delivered
        """
        parcel = await self.repository.find_by_id(parcel_id)
        return self.cancel_loaded(parcel, acting_user_id)

    def cancel_loaded(self, parcel: Parcel, acting_user_id: Optional[str] = None) -> Parcel:
        """Apply the cancellation rule to a parcel the caller already holds."""
        if parcel.status in NON_CANCELLABLE_STATUSES:
            raise IllegalTransitionError(current_status=parcel.status.value)

        append_status(parcel, ParcelStatus.CANCELLED, acting_user_id=acting_user_id, note=CANCELLATION_NOTE)
        return parcel
