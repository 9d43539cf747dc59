# src/therapy_center/services/notifications.py
"""
Admin-to-practitioner/parent notifications.

Each notification has two independent "hidden for me" flags:
- dismissed: set by the recipient, hides it from the recipient's inbox
- dismissedByAdmin: set by the sender, hides it from the sent list
Neither flag removes the row; only delete() does.
"""

import logging
from typing import Any, List, Optional

from ..core.models import Notification, RecipientType
from ..core.ports.store import DocumentStorePort
from ..errors import ErrorCode, UnauthorizedError, ValidationFailedError
from ..repositories import KidRepository, NotificationRepository
from ..utils.dates import utc_now

logger = logging.getLogger(__name__)


def parse_recipient_type(value: Any) -> RecipientType:
    try:
        return RecipientType(value)
    except ValueError:
        raise ValidationFailedError(f"Invalid recipient type: {value!r}", field="recipientType")


class NotificationService:

    def __init__(self, store: DocumentStorePort):
        self.store = store
        self.kids = KidRepository(store)
        self.notifications = NotificationRepository(store)

    def send(
        self,
        admin_id: str,
        kid_id: Optional[str],
        message: str,
        recipient_type: Any,
        recipient_id: str,
        recipient_name: str = "",
    ) -> Notification:
        message = (message or "").strip()
        if not message:
            raise ValidationFailedError(
                "Message is required", field="message", code=ErrorCode.MISSING_REQUIRED_FIELD
            )
        if not recipient_id:
            raise ValidationFailedError(
                "recipientId is required", field="recipientId", code=ErrorCode.MISSING_REQUIRED_FIELD
            )
        recipient = parse_recipient_type(recipient_type)
        if kid_id:
            self.kids.require(kid_id)

        notification = self.notifications.create(Notification(
            kid_id=kid_id or None,
            admin_id=admin_id,
            message=message,
            recipient_type=recipient.value,
            recipient_id=recipient_id,
            recipient_name=recipient_name or "",
            created_at=utc_now(),
        ))
        logger.info(f"Notification {notification.id} sent by {admin_id} to {recipient.value} {recipient_id}")
        return notification

    # --- Recipient side ---

    def get_for_recipient(self, recipient_type: Any, recipient_id: str) -> List[Notification]:
        recipient = parse_recipient_type(recipient_type)
        return [
            n for n in self.notifications.for_recipient(recipient.value, recipient_id)
            if not n.dismissed
        ]

    def unread_count(self, recipient_type: Any, recipient_id: str) -> int:
        return sum(1 for n in self.get_for_recipient(recipient_type, recipient_id) if not n.read)

    def mark_read(self, notification_id: str, recipient_id: str) -> Notification:
        self._require_recipient(notification_id, recipient_id)
        return self.notifications.update(notification_id, {"read": True, "readAt": utc_now()})

    def dismiss(self, notification_id: str, recipient_id: str) -> Notification:
        """Hide from the recipient. The sender still sees it."""
        self._require_recipient(notification_id, recipient_id)
        return self.notifications.update(notification_id, {"dismissed": True})

    def _require_recipient(self, notification_id: str, recipient_id: str) -> Notification:
        notification = self.notifications.require(notification_id)
        if notification.recipient_id != recipient_id:
            raise UnauthorizedError("Notification belongs to another recipient")
        return notification

    # --- Sender side ---

    def get_sent(self, admin_id: str, include_hidden: bool = False) -> List[Notification]:
        sent = self.notifications.sent_by(admin_id)
        if include_hidden:
            return sent
        return [n for n in sent if not n.dismissed_by_admin]

    def admin_dismiss(self, notification_id: str, admin_id: str) -> Notification:
        """Hide from the sending admin. The recipient still sees it."""
        self._require_sender(notification_id, admin_id)
        return self.notifications.update(notification_id, {"dismissedByAdmin": True})

    def delete(self, notification_id: str, admin_id: str) -> None:
        self._require_sender(notification_id, admin_id)
        self.notifications.delete(notification_id)

    def delete_all_sent(self, admin_id: str) -> int:
        refs = [self.notifications.ref(n.id) for n in self.notifications.sent_by(admin_id)]
        deleted = self.store.delete_all(refs)
        logger.info(f"Deleted {deleted} notifications sent by {admin_id}")
        return deleted

    def _require_sender(self, notification_id: str, admin_id: str) -> Notification:
        notification = self.notifications.require(notification_id)
        if notification.admin_id != admin_id:
            raise UnauthorizedError("Notification was sent by another admin")
        return notification
