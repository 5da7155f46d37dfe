"""
Parcel Status Enumeration.
"""

import enum


class ParcelStatus(str, enum.Enum):
    """
    Parcel status enumeration.

    Status flow:
        CREATED → DISPATCHED → IN_TRANSIT → DELIVERED
        CREATED → CANCELLED (only before dispatch)

    DELIVERED and CANCELLED are terminal by convention; only the
    cancellation rule is enforced.
    """
    CREATED = "Created"
    DISPATCHED = "Dispatched"
    IN_TRANSIT = "InTransit"
    DELIVERED = "Delivered"
    CANCELLED = "Cancelled"


# Once a parcel has left the sender it can no longer be cancelled
NON_CANCELLABLE_STATUSES = frozenset({
    ParcelStatus.DISPATCHED,
    ParcelStatus.IN_TRANSIT,
    ParcelStatus.DELIVERED,
})
