"""
Parcel Pydantic schemas.

Defines request and response models for parcel tracking.
"""

from pydantic import ConfigDict, Field, field_validator
from datetime import datetime, timezone
from typing import Optional, List, Dict
from swiftdrop.app.models.parcel_enums import ParcelStatus
from swiftdrop.app.schemas.common import CamelModel


class ParcelCreate(CamelModel):
    """
    Schema for creating a new parcel.

    The sender is always the authenticated caller, so it is not part of the body.
    Required fields are checked by the lifecycle engine so that blanks and
    omissions produce the same 400 response.
    """
    receiver_id: Optional[str] = Field(None, description="Receiving user ID")
    origin: Optional[str] = Field(None, max_length=255, description="Pickup location")
    destination: Optional[str] = Field(None, max_length=255, description="Delivery location")
    weight: Optional[float] = Field(None, description="Parcel weight")
    price: Optional[float] = Field(None, description="Shipping price")
    note: Optional[str] = Field(None, max_length=500, description="Note for the initial status entry")

    @field_validator("receiver_id", mode="before")
    @classmethod
    def _receiver_as_str(cls, value):
        # User ids may arrive as JSON numbers
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value


class ParcelStatusUpdate(CamelModel):
    """Schema for moving a parcel to a new status."""
    status: ParcelStatus = Field(..., description="New parcel status")
    note: Optional[str] = Field(None, max_length=500)


class StatusLogResponse(CamelModel):
    """One entry of a parcel's status history."""
    status: ParcelStatus
    timestamp: datetime
    note: Optional[str] = None
    updated_by: Optional[str] = None


class ParcelResponse(CamelModel):
    """Schema for parcel response."""
    id: str
    tracking_id: str
    sender_id: str
    receiver_id: str
    origin: str
    destination: str
    weight: Optional[float] = None
    price: Optional[float] = None
    status: ParcelStatus
    status_logs: List[StatusLogResponse]
    created_at: datetime
    updated_at: datetime


class ParcelListResponse(CamelModel):
    """Schema for paginated parcel list."""
    items: List[ParcelResponse]
    total: int
    page: int
    limit: int
    page_count: int


class ParcelFilters(CamelModel):
    """
    Recognized list filters.

    Anything else in the query string is ignored.
    """
    model_config = ConfigDict(extra="ignore")

    status: Optional[ParcelStatus] = None
    sender_id: Optional[str] = None
    receiver_id: Optional[str] = None
    tracking_id: Optional[str] = None
    free_text_query: Optional[str] = None
    from_date: Optional[datetime] = None
    to_date: Optional[datetime] = None

    @field_validator("from_date", "to_date")
    @classmethod
    def _as_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        # Naive bounds are taken to be UTC, like the stored timestamps
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)


class StatusSummaryResponse(CamelModel):
    """Per-status parcel counts for the dashboard."""
    total: int
    by_status: Dict[str, int]
