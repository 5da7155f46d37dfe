"""
API v1 Router.

Aggregates all v1 API endpoints.
"""

from fastapi import APIRouter
from swiftdrop.app.api.v1.endpoints import auth, parcels, dashboard, users

router = APIRouter()

# Identity
router.include_router(auth.router)
router.include_router(users.router)

# Parcel tracking
router.include_router(parcels.router)
router.include_router(dashboard.router)
