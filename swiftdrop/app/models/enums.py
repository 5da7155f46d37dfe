"""
User roles enumeration.

Defines the role types for the parcel tracking system.
"""

import enum


class UserRole(str, enum.Enum):
    """
    User role enumeration.

    Roles:
        ADMIN: Operates the service, moves parcels through their lifecycle
        SENDER: Creates parcels and may cancel them before dispatch (default role)
        RECEIVER: Follows parcels addressed to them
    """
    ADMIN = "admin"
    SENDER = "sender"
    RECEIVER = "receiver"
