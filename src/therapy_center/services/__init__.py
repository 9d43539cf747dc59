"""
Services - business logic between the API routers and the document store.

Every service receives its DocumentStorePort in the constructor; see
core.container for the wiring used by the app.
"""

from .admins import AdminService, Identity
from .board_requests import BoardRequestService
from .forms import FormService
from .goals import GoalService
from .kids import KidService
from .notifications import NotificationService
from .sessions import SessionService
from .team import TeamService

__all__ = [
    "AdminService",
    "BoardRequestService",
    "FormService",
    "GoalService",
    "Identity",
    "KidService",
    "NotificationService",
    "SessionService",
    "TeamService",
]
