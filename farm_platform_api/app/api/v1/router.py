"""
Top-level router for version 1 of the API.

This router aggregates the domain routers.  Farm routes keep the
flat paths existing clients call (``/create/farm``, ``/list/farm``
...), the newer domains are grouped under their own prefix.
"""

from fastapi import APIRouter

from .endpoints import farms, notifications, profile, soil

router = APIRouter()

router.include_router(farms.router, tags=["farms"])
router.include_router(profile.router, prefix="/profile", tags=["profile"])
router.include_router(notifications.router, prefix="/notifications", tags=["notifications"])
router.include_router(soil.router, prefix="/soil", tags=["soil"])
