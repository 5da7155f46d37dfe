"""
Parcel service.

Glues the lifecycle engine to the repository for one request: the engine
decides, the repository persists, and this layer retries tracking-id
collisions and logs every mutation.
"""

import logging
from typing import Dict, List, Optional, Tuple

from sqlalchemy.ext.asyncio import AsyncSession

from swiftdrop.app.core.config import settings
from swiftdrop.app.core.exceptions import ConflictError, StorageError
from swiftdrop.app.core.pagination import Pagination
from swiftdrop.app.domain.parcels.lifecycle import ParcelLifecycle
from swiftdrop.app.models.parcel import Parcel
from swiftdrop.app.models.parcel_enums import ParcelStatus
from swiftdrop.app.repositories.parcel_repository import ParcelRepository
from swiftdrop.app.schemas.parcel import ParcelFilters

logger = logging.getLogger("swiftdrop.parcels")


class ParcelService:

    def __init__(self, db: AsyncSession):
        self.repository = ParcelRepository(db)
        self.lifecycle = ParcelLifecycle(self.repository)

    async def create_parcel(
        self,
        sender_id: Optional[str],
        receiver_id: Optional[str],
        origin: Optional[str],
        destination: Optional[str],
        weight: Optional[float] = None,
        price: Optional[float] = None,
        note: Optional[str] = None,
    ) -> Parcel:
        """Create and store a parcel, drawing a fresh tracking id on collision."""
        attempts = max(1, settings.tracking_id_max_attempts)
        for attempt in range(1, attempts + 1):
            parcel = self.lifecycle.create(
                sender_id=sender_id,
                receiver_id=receiver_id,
                origin=origin,
                destination=destination,
                weight=weight,
                price=price,
                note=note,
            )
            try:
                await self.repository.create(parcel)
            except ConflictError:
                logger.warning(
                    "Tracking id collision on %s (attempt %d/%d)",
                    parcel.tracking_id, attempt, attempts,
                )
                continue

            logger.info(
                "Parcel created id=%s tracking_id=%s sender=%s receiver=%s",
                parcel.id, parcel.tracking_id, parcel.sender_id, parcel.receiver_id,
            )
            return parcel

        raise StorageError(f"Could not allocate a unique tracking id after {attempts} attempts")

    async def get_by_tracking_id(self, tracking_id: str) -> Parcel:
        return await self.repository.find_by_tracking_id(tracking_id)

    async def get_by_id(self, parcel_id: str) -> Parcel:
        return await self.repository.find_by_id(parcel_id)

    async def list_parcels(self, filters: ParcelFilters, pagination: Pagination) -> Tuple[List[Parcel], int]:
        return await self.repository.query(filters, pagination)

    async def update_status(
        self,
        parcel_id: str,
        new_status: ParcelStatus,
        acting_user_id: Optional[str] = None,
        note: Optional[str] = None,
    ) -> Parcel:
        parcel = await self.lifecycle.update_status(parcel_id, new_status, acting_user_id, note)
        await self.repository.save(parcel)
        logger.info(
            "Parcel status updated id=%s status=%s by=%s",
            parcel.id, parcel.status.value, acting_user_id,
        )
        return parcel

    async def cancel_parcel(self, parcel_id: str, acting_user_id: Optional[str] = None) -> Parcel:
        parcel = await self.lifecycle.cancel(parcel_id, acting_user_id)
        return await self._save_cancelled(parcel, acting_user_id)

    async def cancel_loaded(self, parcel: Parcel, acting_user_id: Optional[str] = None) -> Parcel:
        """Cancel a parcel already loaded in this session (e.g. after an ownership check)."""
        self.lifecycle.cancel_loaded(parcel, acting_user_id)
        return await self._save_cancelled(parcel, acting_user_id)

    async def _save_cancelled(self, parcel: Parcel, acting_user_id: Optional[str]) -> Parcel:
        await self.repository.save(parcel)
        logger.info("Parcel cancelled id=%s by=%s", parcel.id, acting_user_id)
        return parcel

    async def status_summary(self, filters: ParcelFilters) -> Dict[str, int]:
        counts = await self.repository.count_by_status(filters)
        return {status.value: count for status, count in counts.items()}
