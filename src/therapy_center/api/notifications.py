# src/therapy_center/api/notifications.py
"""
Notifications API.

Recipients (practitioners, parents) list, read and dismiss their messages;
admins send, list what they sent, hide and delete.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, Response

from ..core.models import RecipientType
from ..errors import ErrorCode, UnauthorizedError, ValidationFailedError
from ..services import Identity, NotificationService, TeamService
from ..services.admins import AUTH_PARENT, AUTH_THERAPIST
from .deps import get_identity, get_notification_service, get_team_service, require_admin
from .responses import as_doc, as_docs
from .schemas import NotificationCreate, RecipientAction

router = APIRouter()


def _recipient_id(identity: Identity, requested: Optional[str], team: TeamService) -> str:
    """
    Resolve whose inbox the caller is acting on.

    Therapists are bound to their own practitioner id and parents to the
    parents of their kid. Only admins may name any recipient.
    """
    if identity.auth_type == AUTH_THERAPIST:
        if requested and requested != identity.practitioner_id:
            raise UnauthorizedError("Not the recipient of these notifications")
        return identity.practitioner_id

    if not requested:
        raise ValidationFailedError(
            "recipientId is required", field="recipientId", code=ErrorCode.MISSING_REQUIRED_FIELD
        )

    if identity.auth_type == AUTH_PARENT:
        parent_ids = {p.id for p in team.get_parents_for_kid(identity.kid_id)}
        if requested not in parent_ids:
            raise UnauthorizedError("Not the recipient of these notifications")

    return requested


# =============================================================================
# RECIPIENT SIDE
# =============================================================================

@router.get("/notifications")
async def list_notifications(
    recipient_type: str = Query(RecipientType.PRACTITIONER.value, alias="recipientType"),
    recipient_id: Optional[str] = Query(None, alias="recipientId"),
    identity: Identity = Depends(get_identity),
    notifications: NotificationService = Depends(get_notification_service),
    team: TeamService = Depends(get_team_service),
):
    recipient_id = _recipient_id(identity, recipient_id, team)
    items = notifications.get_for_recipient(recipient_type, recipient_id)
    return {
        "notifications": as_docs(items),
        "unreadCount": sum(1 for n in items if not n.read),
    }


@router.post("/notifications/{notification_id}/read")
async def mark_read(
    notification_id: str,
    body: RecipientAction,
    identity: Identity = Depends(get_identity),
    notifications: NotificationService = Depends(get_notification_service),
    team: TeamService = Depends(get_team_service),
):
    return as_doc(notifications.mark_read(notification_id, _recipient_id(identity, body.recipient_id, team)))


@router.post("/notifications/{notification_id}/dismiss")
async def dismiss(
    notification_id: str,
    body: RecipientAction,
    identity: Identity = Depends(get_identity),
    notifications: NotificationService = Depends(get_notification_service),
    team: TeamService = Depends(get_team_service),
):
    return as_doc(notifications.dismiss(notification_id, _recipient_id(identity, body.recipient_id, team)))


# =============================================================================
# SENDER SIDE
# =============================================================================

@router.post("/notifications", status_code=201)
async def send_notification(
    body: NotificationCreate,
    identity: Identity = Depends(require_admin),
    notifications: NotificationService = Depends(get_notification_service),
):
    notification = notifications.send(
        admin_id=identity.admin_id,
        kid_id=body.kid_id,
        message=body.message,
        recipient_type=body.recipient_type,
        recipient_id=body.recipient_id,
        recipient_name=body.recipient_name or "",
    )
    return as_doc(notification)


@router.get("/notifications/sent")
async def list_sent(
    include_hidden: bool = Query(False, alias="includeHidden"),
    identity: Identity = Depends(require_admin),
    notifications: NotificationService = Depends(get_notification_service),
):
    return as_docs(notifications.get_sent(identity.admin_id, include_hidden=include_hidden))


@router.delete("/notifications/sent")
async def delete_all_sent(
    identity: Identity = Depends(require_admin),
    notifications: NotificationService = Depends(get_notification_service),
):
    return {"deleted": notifications.delete_all_sent(identity.admin_id)}


@router.post("/notifications/{notification_id}/admin-dismiss")
async def admin_dismiss(
    notification_id: str,
    identity: Identity = Depends(require_admin),
    notifications: NotificationService = Depends(get_notification_service),
):
    return as_doc(notifications.admin_dismiss(notification_id, identity.admin_id))


@router.delete("/notifications/{notification_id}", status_code=204)
async def delete_notification(
    notification_id: str,
    identity: Identity = Depends(require_admin),
    notifications: NotificationService = Depends(get_notification_service),
):
    notifications.delete(notification_id, identity.admin_id)
    return Response(status_code=204)
