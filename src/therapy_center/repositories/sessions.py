# src/therapy_center/repositories/sessions.py
"""
Sessions Repository - sessions, their report forms and form link tokens.
"""

from typing import List, Optional

from ..core.models import FormToken, MeetingForm, Session, SessionForm, SessionType
from .base import BaseRepository, QueryOptions


class SessionRepository(BaseRepository[Session]):
    collection = "sessions"
    model = Session
    resource = "Session"

    def for_kid(self, kid_id: str, status: Optional[str] = None) -> List[Session]:
        filters = {"kidId": kid_id}
        if status:
            filters["status"] = status
        return self.get_all(QueryOptions(filters=filters, order_by="scheduledDate"))


class SessionFormRepository(BaseRepository[SessionForm]):
    collection = "sessionForms"
    model = SessionForm
    resource = "Form"
    session_type = SessionType.THERAPY

    def for_session(self, session_id: str) -> Optional[SessionForm]:
        return self.find_one(sessionId=session_id)

    def for_kid(self, kid_id: str) -> List[SessionForm]:
        return self.get_all(
            QueryOptions(filters={"kidId": kid_id}, order_by="sessionDate", order_desc=True)
        )


class MeetingFormRepository(BaseRepository[MeetingForm]):
    collection = "meetingForms"
    model = MeetingForm
    resource = "Meeting form"
    session_type = SessionType.MEETING

    def for_session(self, session_id: str) -> Optional[MeetingForm]:
        return self.find_one(sessionId=session_id)

    def for_kid(self, kid_id: str) -> List[MeetingForm]:
        return self.get_all(
            QueryOptions(filters={"kidId": kid_id}, order_by="sessionDate", order_desc=True)
        )


class FormTokenRepository(BaseRepository[FormToken]):
    collection = "formTokens"
    model = FormToken
    resource = "Form token"

    def for_kid(self, kid_id: str) -> List[FormToken]:
        return self.find(kidId=kid_id)
