"""
Parcel API Endpoints.

Senders create and cancel parcels, admins move them through their lifecycle,
receivers follow them, and anyone can track a parcel by its tracking ID.
"""

from datetime import datetime
from typing import Optional
from fastapi import APIRouter, Depends, status, Query, Path
from sqlalchemy.ext.asyncio import AsyncSession
from swiftdrop.app.db.session import get_db
from swiftdrop.app.models.parcel_enums import ParcelStatus
from swiftdrop.app.schemas.common import SuccessResponse, ERROR_RESPONSES
from swiftdrop.app.schemas.parcel import (
    ParcelCreate,
    ParcelStatusUpdate,
    ParcelResponse,
    ParcelListResponse,
    ParcelFilters,
)
from swiftdrop.app.core.guards import require_role, require_admin, ParcelAccessGuard
from swiftdrop.app.core.dependencies import get_current_user
from swiftdrop.app.core.pagination import parse_pagination, build_pagination_result
from swiftdrop.app.models.enums import UserRole
from swiftdrop.app.services.parcel_service import ParcelService

router = APIRouter(prefix="/parcels", tags=["Parcels"], responses=ERROR_RESPONSES)
access_guard = ParcelAccessGuard()


def get_parcel_service(db: AsyncSession = Depends(get_db)) -> ParcelService:
    return ParcelService(db)


@router.post("", response_model=SuccessResponse[ParcelResponse], status_code=status.HTTP_201_CREATED)
async def create_parcel(
    parcel_data: ParcelCreate,
    current_user: dict = Depends(require_role([UserRole.SENDER, UserRole.ADMIN])),
    service: ParcelService = Depends(get_parcel_service)
):
    """
    Create a new parcel sent by the current user.

    Starts in status Created with a single status log entry.
    """
    parcel = await service.create_parcel(
        sender_id=str(current_user["user_id"]),
        receiver_id=parcel_data.receiver_id,
        origin=parcel_data.origin,
        destination=parcel_data.destination,
        weight=parcel_data.weight,
        price=parcel_data.price,
        note=parcel_data.note,
    )
    return SuccessResponse(data=ParcelResponse.model_validate(parcel))


@router.get("/track/{tracking_id}", response_model=SuccessResponse[ParcelResponse])
async def track_parcel(
    tracking_id: str = Path(..., min_length=1, description="Public tracking ID"),
    service: ParcelService = Depends(get_parcel_service)
):
    """Public tracking lookup; no authentication required."""
    parcel = await service.get_by_tracking_id(tracking_id)
    return SuccessResponse(data=ParcelResponse.model_validate(parcel))


@router.get("", response_model=ParcelListResponse)
async def list_parcels(
    page: Optional[str] = Query(None, description="Page number"),
    limit: Optional[str] = Query(None, description="Items per page"),
    sort: Optional[str] = Query(None, description="Sort field, prefix with '-' for descending"),
    status_filter: Optional[ParcelStatus] = Query(None, alias="status"),
    sender_id: Optional[str] = Query(None, alias="senderId"),
    receiver_id: Optional[str] = Query(None, alias="receiverId"),
    tracking_id: Optional[str] = Query(None, alias="trackingId"),
    q: Optional[str] = Query(None, description="Search origin, destination and tracking ID"),
    from_date: Optional[datetime] = Query(None, alias="fromDate"),
    to_date: Optional[datetime] = Query(None, alias="toDate"),
    current_user: dict = Depends(get_current_user),
    service: ParcelService = Depends(get_parcel_service)
):
    """
    List parcels with filters and pagination.

    Senders only see parcels they sent, receivers only parcels addressed to them.
    """
    pagination = parse_pagination(page, limit, sort)
    filters = ParcelFilters(
        status=status_filter,
        sender_id=sender_id,
        receiver_id=receiver_id,
        tracking_id=tracking_id,
        free_text_query=q,
        from_date=from_date,
        to_date=to_date,
    )
    filters = access_guard.restrict_filters(filters, current_user)

    items, total = await service.list_parcels(filters, pagination)
    result = build_pagination_result(
        [ParcelResponse.model_validate(p) for p in items],
        total,
        pagination.page,
        pagination.limit,
    )
    return ParcelListResponse(**result)


@router.get("/{parcel_id}", response_model=SuccessResponse[ParcelResponse])
async def get_parcel(
    parcel_id: str = Path(..., description="Parcel ID"),
    current_user: dict = Depends(get_current_user),
    service: ParcelService = Depends(get_parcel_service)
):
    """Get a parcel by internal ID (admin, its sender or its receiver)."""
    parcel = await service.get_by_id(parcel_id)
    access_guard.enforce_view(parcel, current_user)
    return SuccessResponse(data=ParcelResponse.model_validate(parcel))


@router.patch("/{parcel_id}/status", response_model=SuccessResponse[ParcelResponse])
async def update_parcel_status(
    parcel_id: str = Path(..., description="Parcel ID"),
    status_data: ParcelStatusUpdate = ...,
    current_user: dict = Depends(require_admin),
    service: ParcelService = Depends(get_parcel_service)
):
    """
    Move a parcel to a new status (admin only).

    Any status may follow any other; the change is appended to the status log.
    """
    parcel = await service.update_status(
        parcel_id,
        status_data.status,
        acting_user_id=str(current_user["user_id"]),
        note=status_data.note,
    )
    return SuccessResponse(data=ParcelResponse.model_validate(parcel))


@router.patch("/{parcel_id}/cancel", response_model=SuccessResponse[ParcelResponse])
async def cancel_parcel(
    parcel_id: str = Path(..., description="Parcel ID"),
    current_user: dict = Depends(get_current_user),
    service: ParcelService = Depends(get_parcel_service)
):
    """
    Cancel a parcel before dispatch (its sender or an admin).

    Fails with 400 once the parcel is Dispatched, InTransit or Delivered.
    """
    parcel = await service.get_by_id(parcel_id)
    access_guard.enforce_cancel(parcel, current_user)

    parcel = await service.cancel_loaded(parcel, acting_user_id=str(current_user["user_id"]))
    return SuccessResponse(data=ParcelResponse.model_validate(parcel))
