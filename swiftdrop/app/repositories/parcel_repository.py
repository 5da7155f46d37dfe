"""
Parcel repository (persistence).

Stores and loads Parcel aggregates (the parcel row plus its ordered status
log rows). It enforces no business rules; the lifecycle engine decides what
changes and this module only writes it.
"""

import logging
import uuid
from typing import Dict, List, Optional, Tuple

from sqlalchemy import select, func, or_, asc, desc
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from swiftdrop.app.core.exceptions import ConflictError, ParcelNotFoundError, StorageError
from swiftdrop.app.core.pagination import Pagination
from swiftdrop.app.models.parcel import Parcel
from swiftdrop.app.models.parcel_enums import ParcelStatus
from swiftdrop.app.schemas.parcel import ParcelFilters

logger = logging.getLogger("swiftdrop.repositories.parcel")


def _escape_like(term: str) -> str:
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _is_valid_parcel_id(value: str) -> bool:
    try:
        uuid.UUID(str(value))
    except (TypeError, ValueError, AttributeError):
        return False
    return True


class ParcelRepository:
    """Durable storage and retrieval of parcels."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create(self, parcel: Parcel) -> Parcel:
        """
        Insert a new parcel together with its initial status log entry.

        Raises:
            ConflictError: tracking_id already exists (retry with a new one)
            StorageError: any other database failure
        """
        self.db.add(parcel)
        try:
            await self.db.commit()
        except IntegrityError as exc:
            await self.db.rollback()
            if await self._tracking_id_taken(parcel.tracking_id):
                raise ConflictError(parcel.tracking_id) from exc
            raise StorageError("Could not create parcel") from exc
        except SQLAlchemyError as exc:
            await self.db.rollback()
            raise StorageError("Could not create parcel") from exc
        return parcel

    async def find_by_tracking_id(self, tracking_id: str) -> Parcel:
        parcel = await self._scalar(select(Parcel).where(Parcel.tracking_id == tracking_id))
        if parcel is None:
            raise ParcelNotFoundError(tracking_id)
        return parcel

    async def find_by_id(self, parcel_id: str) -> Parcel:
        """
        Load a parcel by internal id.

        Malformed ids and unknown ids are both reported as not found.
        """
        if not _is_valid_parcel_id(parcel_id):
            raise ParcelNotFoundError(parcel_id)
        parcel = await self._scalar(select(Parcel).where(Parcel.id == str(parcel_id)))
        if parcel is None:
            raise ParcelNotFoundError(parcel_id)
        return parcel

    async def query(self, filters: ParcelFilters, pagination: Pagination) -> Tuple[List[Parcel], int]:
        """Return one page of matching parcels plus the total match count."""
        conditions = self._build_conditions(filters)

        sort_column = getattr(Parcel, pagination.sort_field)
        direction = desc if pagination.descending else asc

        items_query = (
            select(Parcel)
            .where(*conditions)
            .order_by(direction(sort_column), direction(Parcel.id))
            .offset(pagination.offset)
            .limit(pagination.limit)
        )
        count_query = select(func.count(Parcel.id)).where(*conditions)

        try:
            items_result = await self.db.execute(items_query)
            items = list(items_result.scalars().all())
            total_result = await self.db.execute(count_query)
            total = total_result.scalar() or 0
        except SQLAlchemyError as exc:
            raise StorageError("Could not query parcels") from exc

        return items, total

    async def count_by_status(self, filters: ParcelFilters) -> Dict[ParcelStatus, int]:
        conditions = self._build_conditions(filters)
        query = (
            select(Parcel.status, func.count(Parcel.id))
            .where(*conditions)
            .group_by(Parcel.status)
        )
        try:
            result = await self.db.execute(query)
        except SQLAlchemyError as exc:
            raise StorageError("Could not summarize parcels") from exc

        counts = {status: 0 for status in ParcelStatus}
        for status, count in result.all():
            counts[ParcelStatus(status)] = count
        return counts

    async def save(self, parcel: Parcel) -> Parcel:
        """
        Persist the current state of a parcel in one transaction.

        New status log entries are inserted; existing ones are never rewritten.
        The parcel's own status is last-write-wins.
        """
        self.db.add(parcel)
        try:
            await self.db.commit()
        except SQLAlchemyError as exc:
            await self.db.rollback()
            raise StorageError("Could not save parcel") from exc
        return parcel

    def _build_conditions(self, filters: ParcelFilters) -> list:
        conditions = []
        if filters.status:
            conditions.append(Parcel.status == filters.status)
        if filters.sender_id:
            conditions.append(Parcel.sender_id == filters.sender_id)
        if filters.receiver_id:
            conditions.append(Parcel.receiver_id == filters.receiver_id)
        if filters.tracking_id:
            conditions.append(Parcel.tracking_id == filters.tracking_id)
        if filters.free_text_query:
            pattern = f"%{_escape_like(filters.free_text_query.strip())}%"
            conditions.append(or_(
                Parcel.origin.ilike(pattern, escape="\\"),
                Parcel.destination.ilike(pattern, escape="\\"),
                Parcel.tracking_id.ilike(pattern, escape="\\"),
            ))
        if filters.from_date:
            conditions.append(Parcel.created_at >= filters.from_date)
        if filters.to_date:
            conditions.append(Parcel.created_at <= filters.to_date)
        return conditions

    async def _scalar(self, query) -> Optional[Parcel]:
        try:
            result = await self.db.execute(query)
        except SQLAlchemyError as exc:
            raise StorageError("Could not load parcel") from exc
        return result.scalar_one_or_none()

    async def _tracking_id_taken(self, tracking_id: str) -> bool:
        try:
            result = await self.db.execute(
                select(func.count(Parcel.id)).where(Parcel.tracking_id == tracking_id)
            )
        except SQLAlchemyError:
            logger.exception("Could not check tracking id %s after integrity error", tracking_id)
            return False
        return (result.scalar() or 0) > 0
