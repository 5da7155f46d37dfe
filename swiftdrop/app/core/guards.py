"""
Security guards for role-based and ownership-based access control.

Provides dependencies for protecting endpoints.
"""

from typing import List
from fastapi import Depends
from swiftdrop.app.core.dependencies import get_current_user
from swiftdrop.app.core.exceptions import InsufficientPermissionsError
from swiftdrop.app.models.enums import UserRole
from swiftdrop.app.models.parcel import Parcel
from swiftdrop.app.schemas.parcel import ParcelFilters


def require_role(allowed_roles: List[UserRole]):
    """
    Dependency factory for role-based access control.

    Usage:
        @router.patch("/parcels/{parcel_id}/status")
        async def update_status(current_user: dict = Depends(require_role([UserRole.ADMIN]))):
            ...
    """
    async def role_checker(current_user: dict = Depends(get_current_user)) -> dict:
        try:
            user_role = UserRole(current_user.get("role"))
        except ValueError:
            raise InsufficientPermissionsError("Invalid role in token")

        if user_role not in allowed_roles:
            raise InsufficientPermissionsError(
                f"Access denied. Required role: {', '.join([r.value for r in allowed_roles])}"
            )

        return current_user

    return role_checker


def require_admin(current_user: dict = Depends(get_current_user)) -> dict:
    """Dependency for admin-only endpoints."""
    if current_user.get("role") != UserRole.ADMIN.value:
        raise InsufficientPermissionsError("Admin access required")
    return current_user


class ParcelAccessGuard:
    """
    Ownership rules for parcels.

    Admins see and act on every parcel. Senders see parcels they sent and
    receivers see parcels addressed to them. Only the sender (or an admin)
    may cancel.
    """

    def can_view(self, parcel: Parcel, current_user: dict) -> bool:
        if current_user.get("role") == UserRole.ADMIN.value:
            return True
        user_id = str(current_user.get("user_id"))
        return user_id in (parcel.sender_id, parcel.receiver_id)

    def enforce_view(self, parcel: Parcel, current_user: dict):
        if not self.can_view(parcel, current_user):
            raise InsufficientPermissionsError(
                "Access denied. You do not have permission to access this parcel."
            )

    def enforce_cancel(self, parcel: Parcel, current_user: dict):
        if current_user.get("role") == UserRole.ADMIN.value:
            return
        if str(current_user.get("user_id")) != parcel.sender_id:
            raise InsufficientPermissionsError("Only the sender can cancel this parcel.")

    def restrict_filters(self, filters: ParcelFilters, current_user: dict) -> ParcelFilters:
        """
        Narrow list filters to the parcels the caller may see.

        Admins keep their filters untouched.
        """
        role = current_user.get("role")
        user_id = str(current_user.get("user_id"))
        if role == UserRole.SENDER.value:
            return filters.model_copy(update={"sender_id": user_id})
        if role == UserRole.RECEIVER.value:
            return filters.model_copy(update={"receiver_id": user_id})
        return filters
