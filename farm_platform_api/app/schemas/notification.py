"""
Pydantic models for notifications.

A notification belongs to a user through its ``userId`` property, not a
graph edge.  ``metadata`` is free-form context such as the farm name or
sensor id the notification refers to.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Dict

from pydantic import BaseModel, Field


class NotificationType(str, Enum):
    SOIL_ANALYSIS_SAVED = "SOIL_ANALYSIS_SAVED"
    NFT_MINTED = "NFT_MINTED"
    FARM_UPDATE = "FARM_UPDATE"
    SYSTEM_ALERT = "SYSTEM_ALERT"
    RECOMMENDATION = "RECOMMENDATION"


class NotificationPayload(BaseModel):
    """Content of a notification, without recipient or bookkeeping fields."""

    type: NotificationType
    title: str = Field(..., min_length=1)
    message: str
    metadata: Dict[str, Any] = Field(default_factory=dict)


class NotificationCreate(NotificationPayload):
    userId: str = Field(..., min_length=1)


class Notification(NotificationCreate):
    """A stored notification."""

    id: str
    read: bool = False
    timestamp: datetime
