# src/therapy_center/services/sessions.py
"""
Session lifecycle service.

State machine:

    scheduled -> pending_form -> completed
    scheduled -> missed
    scheduled -> completed          (only with a linked form)
    completed -> scheduled          (only by deleting the form, see FormService)

`missed` is terminal. A session's formId is set exactly when a form of the
session's kind (therapy -> sessionForms, meeting -> meetingForms) points back
at it; every write path here keeps that true.
"""

import logging
from datetime import datetime, timedelta
from typing import Any, Dict, List, Mapping, Optional, Union

from ..core.models import Session, SessionStatus, SessionType
from ..core.ports.store import DocumentRef, DocumentStorePort
from ..errors import ErrorCode, ValidationFailedError
from ..repositories import KidRepository, MeetingFormRepository, SessionFormRepository, SessionRepository
from ..utils.dates import to_date, to_optional_date, utc_now

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = ("therapistId", "scheduledDate", "status", "formId", "type")

RECURRENCE_STEP = timedelta(days=7)

ALLOWED_TRANSITIONS = {
    SessionStatus.SCHEDULED: {
        SessionStatus.SCHEDULED,
        SessionStatus.PENDING_FORM,
        SessionStatus.MISSED,
        SessionStatus.COMPLETED,
    },
    SessionStatus.PENDING_FORM: {SessionStatus.PENDING_FORM, SessionStatus.COMPLETED},
    SessionStatus.COMPLETED: {SessionStatus.COMPLETED},
    SessionStatus.MISSED: {SessionStatus.MISSED},
}


def parse_status(value: Any) -> SessionStatus:
    try:
        return SessionStatus(value)
    except ValueError:
        raise ValidationFailedError(f"Invalid session status: {value!r}", field="status")


def parse_type(value: Any) -> SessionType:
    try:
        return SessionType(value)
    except ValueError:
        raise ValidationFailedError(f"Invalid session type: {value!r}", field="type")


class SessionService:
    """Scheduling, status transitions, recurrence and alerts for sessions."""

    def __init__(self, store: DocumentStorePort):
        self.store = store
        self.kids = KidRepository(store)
        self.sessions = SessionRepository(store)
        self.forms = SessionFormRepository(store)
        self.meeting_forms = MeetingFormRepository(store)

    def forms_for(self, session_type: SessionType) -> Union[SessionFormRepository, MeetingFormRepository]:
        """Repository holding the reports of a session kind."""
        return self.meeting_forms if session_type == SessionType.MEETING else self.forms

    # =============================================================================
    # SCHEDULING
    # =============================================================================

    def schedule(
        self,
        kid_id: str,
        therapist_id: Optional[str],
        scheduled_date: Any,
        type: Union[str, SessionType] = SessionType.THERAPY,
    ) -> Session:
        """Create a session in `scheduled` state. Overlapping times are not checked."""
        session_type = parse_type(type)
        self.kids.require(kid_id)
        return self._create(kid_id, therapist_id, to_date(scheduled_date), session_type)

    def schedule_recurring(
        self,
        kid_id: str,
        therapist_id: Optional[str],
        type: Union[str, SessionType],
        start_date: Any,
        until: Any,
    ) -> List[Session]:
        """
        Create one session every 7 days from start_date through until (inclusive).

        Sessions are written one at a time; if a write fails the sessions
        already created stay in place and the error propagates.
        """
        session_type = parse_type(type)
        self.kids.require(kid_id)
        start = to_date(start_date)
        end = to_date(until)

        if end < start:
            return []

        count = (end - start) // RECURRENCE_STEP + 1
        created = [
            self._create(kid_id, therapist_id, start + i * RECURRENCE_STEP, session_type)
            for i in range(count)
        ]
        logger.info(f"Scheduled {len(created)} recurring sessions for kid {kid_id}")
        return created

    def _create(
        self,
        kid_id: str,
        therapist_id: Optional[str],
        scheduled_date: datetime,
        session_type: SessionType,
    ) -> Session:
        session = Session(
            kid_id=kid_id,
            therapist_id=therapist_id or None,
            scheduled_date=scheduled_date,
            type=session_type,
            status=SessionStatus.SCHEDULED,
            form_id=None,
            created_at=utc_now(),
        )
        session = self.sessions.create(session)
        logger.info(f"Scheduled session {session.id} for kid {kid_id}")
        return session

    # =============================================================================
    # UPDATES
    # =============================================================================

    def update_session(self, session_id: str, fields: Mapping[str, Any]) -> Session:
        """
        Apply a partial update.

        Only therapistId, scheduledDate, status, formId and type are applied;
        anything else in `fields` is ignored.
        """
        session = self.sessions.require(session_id)
        updates: Dict[str, Any] = {k: fields[k] for k in UPDATABLE_FIELDS if k in fields}
        if not updates:
            return session

        new_type = parse_type(updates["type"]) if "type" in updates else session.type
        new_status = parse_status(updates["status"]) if "status" in updates else session.status
        new_form_id = updates["formId"] if "formId" in updates else session.form_id

        if new_status not in ALLOWED_TRANSITIONS[session.status]:
            logger.warning(
                f"Rejected status change {session.status.value} -> {new_status.value} "
                f"for session {session_id}"
            )
            raise ValidationFailedError(
                f"Cannot change session status from {session.status.value} to {new_status.value}",
                field="status",
                code=ErrorCode.INVALID_STATUS_TRANSITION,
            )

        if new_type != session.type and session.form_id:
            raise ValidationFailedError(
                "Cannot change the type of a session that already has a form", field="type"
            )

        if "formId" in updates and new_form_id != session.form_id:
            self._check_form_link(session, new_type, new_form_id)

        if new_status == SessionStatus.COMPLETED and not new_form_id:
            raise ValidationFailedError(
                "A session can only be completed with a linked form", field="formId"
            )

        if "scheduledDate" in updates:
            updates["scheduledDate"] = to_date(updates["scheduledDate"])
        if "therapistId" in updates:
            updates["therapistId"] = updates["therapistId"] or None
        updates["type"] = new_type.value
        updates["status"] = new_status.value
        updates["formId"] = new_form_id or None

        return self.sessions.update(session_id, updates)

    def _check_form_link(self, session: Session, session_type: SessionType, form_id: Optional[str]) -> None:
        forms = self.forms_for(session_type)
        if not form_id:
            if forms.for_session(session.id) is not None:
                raise ValidationFailedError(
                    "formId can only be cleared by deleting the form", field="formId"
                )
            return

        form = forms.get_by_id(form_id)
        if form is None or form.session_id != session.id:
            raise ValidationFailedError(
                f"Form {form_id} does not belong to session {session.id}", field="formId"
            )

    # =============================================================================
    # DELETION
    # =============================================================================

    def delete_session(self, session_id: str) -> None:
        """Delete a session and its form, if any. Unknown ids are a no-op."""
        session = self.sessions.get_by_id(session_id)
        if session is None:
            return

        refs: List[DocumentRef] = []
        forms = self.forms_for(session.type)
        if session.form_id:
            refs.append(forms.ref(session.form_id))
        # Forms pointing here without a formId back-reference are removed too
        refs.extend(
            forms.ref(f.id) for f in forms.find(sessionId=session.id) if f.id != session.form_id
        )
        refs.append(self.sessions.ref(session.id))

        self.store.delete_all(refs)
        logger.info(f"Deleted session {session_id} ({len(refs) - 1} form(s))")

    # =============================================================================
    # QUERIES
    # =============================================================================

    def get_session(self, session_id: str) -> Session:
        return self.sessions.require(session_id)

    def get_sessions_for_kid(
        self,
        kid_id: str,
        status: Optional[str] = None,
        date_from: Any = None,
        date_to: Any = None,
    ) -> List[Session]:
        """Sessions of a kid, optionally filtered by status and an inclusive date range."""
        if status:
            status = parse_status(status).value
        sessions = self.sessions.for_kid(kid_id, status=status)

        start = to_optional_date(date_from)
        end = to_optional_date(date_to)
        if start is not None:
            sessions = [s for s in sessions if s.scheduled_date >= start]
        if end is not None:
            sessions = [s for s in sessions if s.scheduled_date <= end]

        return sorted(sessions, key=lambda s: s.scheduled_date)

    def get_alerts(self, admin_id: str, now: Optional[datetime] = None) -> List[Session]:
        """
        Open sessions (scheduled / pending_form) of the admin's kids whose date has passed.

        Derived on every call; nothing is persisted.
        """
        now = to_date(now) if now is not None else utc_now()
        alerts: List[Session] = []
        for kid in self.kids.for_admin(admin_id):
            alerts.extend(
                s for s in self.sessions.for_kid(kid.id)
                if s.is_open and s.scheduled_date < now
            )
        return sorted(alerts, key=lambda s: s.scheduled_date)
