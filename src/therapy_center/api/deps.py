# src/therapy_center/api/deps.py
"""
FastAPI dependencies: services from the container and the caller identity.

Tests swap the container with app.dependency_overrides[get_container].
"""

from typing import Optional

from fastapi import Depends, Header

from ..core.container import Container, container
from ..errors import UnauthorizedError
from ..services import (
    AdminService,
    BoardRequestService,
    FormService,
    GoalService,
    Identity,
    KidService,
    NotificationService,
    SessionService,
    TeamService,
)
from ..services.admins import AUTH_ADMIN, AUTH_THERAPIST


def get_container() -> Container:
    return container


def get_session_service(c: Container = Depends(get_container)) -> SessionService:
    return c.session_service()


def get_form_service(c: Container = Depends(get_container)) -> FormService:
    return c.form_service()


def get_kid_service(c: Container = Depends(get_container)) -> KidService:
    return c.kid_service()


def get_team_service(c: Container = Depends(get_container)) -> TeamService:
    return c.team_service()


def get_goal_service(c: Container = Depends(get_container)) -> GoalService:
    return c.goal_service()


def get_notification_service(c: Container = Depends(get_container)) -> NotificationService:
    return c.notification_service()


def get_board_request_service(c: Container = Depends(get_container)) -> BoardRequestService:
    return c.board_request_service()


def get_admin_service(c: Container = Depends(get_container)) -> AdminService:
    return c.admin_service()


# =============================================================================
# AUTHENTICATION
# =============================================================================

def get_identity(
    x_admin_key: Optional[str] = Header(None),
    x_practitioner_id: Optional[str] = Header(None),
    x_kid_id: Optional[str] = Header(None),
    admins: AdminService = Depends(get_admin_service),
) -> Identity:
    """Resolve the caller from the X-Admin-Key / X-Practitioner-Id / X-Kid-Id headers."""
    return admins.resolve_identity(
        admin_key=x_admin_key,
        practitioner_id=x_practitioner_id,
        kid_id=x_kid_id,
    )


def require_admin(identity: Identity = Depends(get_identity)) -> Identity:
    """Write access: admin keys only."""
    if not identity.is_admin:
        raise UnauthorizedError("Admin access required")
    return identity


def require_staff(identity: Identity = Depends(get_identity)) -> Identity:
    """Admins and therapists (report authors)."""
    if identity.auth_type not in (AUTH_ADMIN, AUTH_THERAPIST):
        raise UnauthorizedError("Staff access required")
    return identity


def require_super_admin(identity: Identity = Depends(require_admin)) -> Identity:
    if not identity.is_super_admin:
        raise UnauthorizedError("Super admin access required")
    return identity
