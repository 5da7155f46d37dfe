"""
Dashboard API Endpoints.

Per-status parcel counts over the parcels the caller may see.
"""

from fastapi import APIRouter, Depends
from swiftdrop.app.schemas.common import SuccessResponse, ERROR_RESPONSES
from swiftdrop.app.schemas.parcel import ParcelFilters, StatusSummaryResponse
from swiftdrop.app.core.guards import require_role, ParcelAccessGuard
from swiftdrop.app.models.enums import UserRole
from swiftdrop.app.services.parcel_service import ParcelService
from swiftdrop.app.api.v1.endpoints.parcels import get_parcel_service

router = APIRouter(prefix="/dashboard", tags=["Dashboard"], responses=ERROR_RESPONSES)
access_guard = ParcelAccessGuard()


@router.get("/summary", response_model=SuccessResponse[StatusSummaryResponse])
async def dashboard_summary(
    current_user: dict = Depends(require_role([UserRole.ADMIN, UserRole.SENDER, UserRole.RECEIVER])),
    service: ParcelService = Depends(get_parcel_service)
):
    """Counts by status, every status present (zero-filled)."""
    filters = access_guard.restrict_filters(ParcelFilters(), current_user)
    by_status = await service.status_summary(filters)
    return SuccessResponse(
        data=StatusSummaryResponse(total=sum(by_status.values()), by_status=by_status)
    )
