"""
Notification service.

One ``NotificationService`` is built in ``main.create_app`` and handed
to the routes and to other services that emit notifications.  It keeps
no state besides the graph store it writes to.

Error handling differs per operation:

* ``create_notification`` propagates failures.
* ``get_unread_notifications``, ``get_all_notifications``,
  ``get_notification_by_id`` and ``mark_as_read`` log the failure and
  return an empty list, ``None`` or ``False``.
* ``send_real_time_notification`` never raises, so a notification
  problem cannot abort the operation that triggered it.
"""

import json
import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from ..core import queries
from ..core.exceptions import PlatformError, degrade_on_error
from ..core.graph import GraphStore
from ..schemas.notification import (
    Notification,
    NotificationCreate,
    NotificationPayload,
)

logger = logging.getLogger(__name__)


def _to_notification(props: Dict[str, Any]) -> Notification:
    data = dict(props)
    metadata = data.get("metadata")
    # Stored as a JSON string: node properties cannot hold maps.
    if isinstance(metadata, str):
        data["metadata"] = json.loads(metadata) if metadata else {}
    elif metadata is None:
        data["metadata"] = {}
    return Notification(**data)


class NotificationService:
    """Create, query and acknowledge user notifications."""

    def __init__(self, store: GraphStore) -> None:
        self.store = store

    async def create_notification(self, data: NotificationCreate) -> Notification:
        """Persist a new, unread notification and return it."""
        notification = Notification(
            **data.model_dump(),
            id=uuid.uuid4().hex,
            read=False,
            timestamp=datetime.now(timezone.utc),
        )
        try:
            self.store.write(
                queries.SAVE_NOTIFICATION,
                id=notification.id,
                userId=notification.userId,
                type=notification.type.value,
                title=notification.title,
                message=notification.message,
                read=notification.read,
                timestamp=notification.timestamp.isoformat(),
                metadata=json.dumps(notification.metadata, default=str),
            )
        except PlatformError:
            logger.exception("Failed to save notification")
            raise
        return notification

    @degrade_on_error(list)
    async def get_unread_notifications(self, user_id: str) -> List[Notification]:
        rows = self.store.read(queries.GET_UNREAD_NOTIFICATIONS, userId=user_id)
        return [_to_notification(row["n"]) for row in rows]

    @degrade_on_error(list)
    async def get_all_notifications(self, user_id: str) -> List[Notification]:
        rows = self.store.read(queries.GET_ALL_NOTIFICATIONS, userId=user_id)
        return [_to_notification(row["n"]) for row in rows]

    @degrade_on_error(lambda: None)
    async def get_notification_by_id(self, notification_id: str) -> Optional[Notification]:
        rows = self.store.read(queries.GET_NOTIFICATION_BY_ID, notificationId=notification_id)
        if not rows:
            return None
        return _to_notification(rows[0]["n"])

    @degrade_on_error(lambda: False)
    async def mark_as_read(self, notification_id: str) -> bool:
        """Mark a notification as read.

        Returns ``True`` whenever the notification exists, including when
        it was already read.
        """
        rows = self.store.write(queries.MARK_NOTIFICATION_AS_READ, notificationId=notification_id)
        return len(rows) > 0

    async def send_real_time_notification(self, user_id: str, payload: NotificationPayload) -> None:
        """Store a notification for ``user_id`` and announce it.

        There is no push transport yet; the notification is only logged
        after it has been saved.
        """
        try:
            await self.create_notification(
                NotificationCreate(userId=user_id, **payload.model_dump())
            )
            logger.info("[Real-time Notification] %s - %s", payload.title, payload.message)
        except PlatformError:
            logger.exception("Failed to send real-time notification")
