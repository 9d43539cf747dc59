# src/therapy_center/repositories/notifications.py
"""
Notifications Repository - admin-to-recipient messages.

Visibility flags (dismissed / dismissedByAdmin) are applied by the service,
not here, so both views are built from the same rows.
"""

from typing import List

from ..core.models import Notification
from .base import BaseRepository, QueryOptions


class NotificationRepository(BaseRepository[Notification]):
    collection = "notifications"
    model = Notification
    resource = "Notification"

    def for_recipient(self, recipient_type: str, recipient_id: str) -> List[Notification]:
        return self.get_all(QueryOptions(
            filters={"recipientType": recipient_type, "recipientId": recipient_id},
            order_by="createdAt",
            order_desc=True,
        ))

    def sent_by(self, admin_id: str) -> List[Notification]:
        return self.get_all(QueryOptions(
            filters={"adminId": admin_id},
            order_by="createdAt",
            order_desc=True,
        ))

    def for_kid(self, kid_id: str) -> List[Notification]:
        return self.find(kidId=kid_id)
