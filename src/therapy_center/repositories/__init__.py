# src/therapy_center/repositories/__init__.py
"""
Repository Layer

Typed access to the document store collections. Each repository wraps one
collection and maps documents to the dataclasses in core.models.

Usage:
    from therapy_center.repositories import SessionRepository

    sessions = SessionRepository(store)
    session = sessions.require(session_id)
"""

from .base import BaseRepository, QueryOptions
from .kids import KidRepository, KidPractitionerRepository, ParentRepository, PractitionerRepository
from .sessions import FormTokenRepository, MeetingFormRepository, SessionFormRepository, SessionRepository
from .goals import GoalCategoryRepository, GoalLibraryRepository, GoalRepository
from .notifications import NotificationRepository
from .admins import AdminKeyRepository, BoardRequestRepository

__all__ = [
    "BaseRepository",
    "QueryOptions",
    "KidRepository",
    "KidPractitionerRepository",
    "ParentRepository",
    "PractitionerRepository",
    "SessionRepository",
    "SessionFormRepository",
    "MeetingFormRepository",
    "FormTokenRepository",
    "GoalRepository",
    "GoalLibraryRepository",
    "GoalCategoryRepository",
    "NotificationRepository",
    "AdminKeyRepository",
    "BoardRequestRepository",
]
