"""
User administration endpoints (admin only).
"""

from typing import List
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from swiftdrop.app.db.session import get_db
from swiftdrop.app.models.user import User
from swiftdrop.app.schemas.auth import UserResponse
from swiftdrop.app.schemas.common import SuccessResponse, ERROR_RESPONSES
from swiftdrop.app.core.guards import require_admin

router = APIRouter(prefix="/users", tags=["Users"], responses=ERROR_RESPONSES)


@router.get("", response_model=SuccessResponse[List[UserResponse]])
async def list_users(
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=100),
    admin: dict = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """List user accounts, oldest first."""
    result = await db.execute(
        select(User).order_by(User.id).offset(skip).limit(limit)
    )
    users = result.scalars().all()
    return SuccessResponse(data=[UserResponse.model_validate(u) for u in users])
