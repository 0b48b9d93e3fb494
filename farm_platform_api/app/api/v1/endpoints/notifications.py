"""
Notification endpoints for API v1.

Users only see their own notifications: a notification of another
user is reported as missing.
"""

from typing import List

from fastapi import APIRouter, Depends, HTTPException, status

from farm_platform_api.app.api.deps import get_notification_service
from farm_platform_api.app.core.security import get_current_username
from farm_platform_api.app.schemas.common import SuccessMessage
from farm_platform_api.app.schemas.notification import Notification
from farm_platform_api.app.services.notification_service import NotificationService


router = APIRouter()


async def _get_owned(
    notification_id: str, username: str, service: NotificationService
) -> Notification:
    notification = await service.get_notification_by_id(notification_id)
    if notification is None or notification.userId != username:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Notification not found")
    return notification


@router.get("", response_model=List[Notification])
async def list_notifications(
    username: str = Depends(get_current_username),
    service: NotificationService = Depends(get_notification_service),
) -> List[Notification]:
    return await service.get_all_notifications(username)


@router.get("/unread", response_model=List[Notification])
async def list_unread_notifications(
    username: str = Depends(get_current_username),
    service: NotificationService = Depends(get_notification_service),
) -> List[Notification]:
    return await service.get_unread_notifications(username)


@router.get("/{notification_id}", response_model=Notification)
async def get_notification(
    notification_id: str,
    username: str = Depends(get_current_username),
    service: NotificationService = Depends(get_notification_service),
) -> Notification:
    return await _get_owned(notification_id, username, service)


@router.post("/{notification_id}/read", response_model=SuccessMessage)
async def mark_notification_as_read(
    notification_id: str,
    username: str = Depends(get_current_username),
    service: NotificationService = Depends(get_notification_service),
) -> SuccessMessage:
    """Mark a notification as read.  Repeating the call is harmless."""
    await _get_owned(notification_id, username, service)
    if not await service.mark_as_read(notification_id):
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Notification could not be updated",
        )
    return SuccessMessage(success="Notification marked as read")
