"""
FastAPI dependencies that hand services to route handlers.

Services are cheap to build: each request gets a fresh service bound
to the process-wide graph store kept on ``app.state``.  The
notification service is the single instance built by ``create_app``.
"""

from fastapi import Depends, Request

from ..core.graph import GraphStore
from ..core.security import TokenService, get_token_service
from ..services.farm_service import FarmService
from ..services.notification_service import NotificationService
from ..services.profile_service import ProfileService
from ..services.soil_service import SoilService


def get_store(request: Request) -> GraphStore:
    return request.app.state.store


def get_notification_service(request: Request) -> NotificationService:
    return request.app.state.notifications


def get_farm_service(
    store: GraphStore = Depends(get_store),
    tokens: TokenService = Depends(get_token_service),
) -> FarmService:
    return FarmService(store, tokens)


def get_profile_service(
    store: GraphStore = Depends(get_store),
    tokens: TokenService = Depends(get_token_service),
) -> ProfileService:
    return ProfileService(store, tokens)


def get_soil_service(
    store: GraphStore = Depends(get_store),
    notifications: NotificationService = Depends(get_notification_service),
    tokens: TokenService = Depends(get_token_service),
) -> SoilService:
    return SoilService(store, notifications, tokens)
