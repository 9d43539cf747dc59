# src/therapy_center/services/forms.py
"""
Form submission and session linkage.

A session report (sessionForms) or meeting report (meetingForms) is always
tied to exactly one session of the matching type:

- submitting without a sessionId creates a `completed` session for the form
- submitting with a sessionId completes that session and stamps its formId
- deleting a form reopens its session (status scheduled, formId cleared)

The "one form per session" rule is a check-then-write against the store,
so two concurrent submissions for the same session from different
processes can still both succeed.
"""

import logging
from typing import Any, Dict, List, Mapping, Optional, Union
from urllib.parse import urlencode

from ..core.models import (
    DEFAULT_FORM_TEMPLATE,
    Attendee,
    FormTemplateSection,
    FormToken,
    GoalSnapshot,
    MeetingForm,
    Session,
    SessionForm,
    SessionStatus,
    SessionType,
    TemplateSectionType,
)
from ..core.ports.store import DocumentStorePort
from ..errors import ErrorCode, ValidationFailedError
from ..repositories import (
    FormTokenRepository,
    GoalRepository,
    KidRepository,
    MeetingFormRepository,
    SessionFormRepository,
    SessionRepository,
)
from ..utils.dates import to_date, utc_now, week_range

logger = logging.getLogger(__name__)

FORM_TEXT_FIELDS = (
    "mood",
    "concentrationLevel",
    "newReinforcers",
    "wordsProduced",
    "breakActivities",
    "endOfSessionActivity",
    "successes",
    "difficulties",
    "notes",
)
FORM_NUMBER_FIELDS = ("cooperation", "sessionDuration", "sittingDuration")
FORM_UPDATABLE_FIELDS = (
    "practitionerId",
    "sessionDate",
    *FORM_NUMBER_FIELDS,
    *FORM_TEXT_FIELDS,
    "goalsWorkedOn",
    "additionalGoals",
    "customFields",
)

MEETING_TEXT_FIELDS = (
    "generalNotes",
    "behaviorNotes",
    "adl",
    "grossMotorPrograms",
    "programsOutsideRoom",
    "learningProgramsInRoom",
    "tasks",
)
MEETING_UPDATABLE_FIELDS = ("sessionDate", "attendees", *MEETING_TEXT_FIELDS)

FormRepository = Union[SessionFormRepository, MeetingFormRepository]


class FormService:
    """Session reports, meeting reports, form links and per-kid form templates."""

    def __init__(self, store: DocumentStorePort, form_link_base: str = "/therapy/form/new"):
        self.store = store
        self.form_link_base = form_link_base
        self.kids = KidRepository(store)
        self.goals = GoalRepository(store)
        self.sessions = SessionRepository(store)
        self.forms = SessionFormRepository(store)
        self.meeting_forms = MeetingFormRepository(store)
        self.tokens = FormTokenRepository(store)

    # =============================================================================
    # SUBMISSION
    # =============================================================================

    def submit_form(self, data: Mapping[str, Any]) -> SessionForm:
        """Write a session report and link it to its (possibly new) session."""
        kid_id = self._require_kid_id(data)
        session = self._target_session(data, kid_id, SessionType.THERAPY, self.forms)
        now = utc_now()

        form = SessionForm(
            id=self.store.new_id(),
            session_id="",
            kid_id=kid_id,
            practitioner_id=data.get("practitionerId") or None,
            session_date=self._session_date(data, session),
            cooperation=data.get("cooperation"),
            session_duration=data.get("sessionDuration"),
            sitting_duration=data.get("sittingDuration"),
            **{_snake(f): data.get(f) or "" for f in FORM_TEXT_FIELDS},
            goals_worked_on=self._snapshots(data.get("goalsWorkedOn")),
            additional_goals=list(data.get("additionalGoals") or []),
            custom_fields=dict(data.get("customFields") or {}),
            created_at=now,
            updated_at=now,
        )
        return self._link(form, session, data, SessionType.THERAPY, self.forms)

    def submit_meeting_form(self, data: Mapping[str, Any]) -> MeetingForm:
        """Write a meeting report and link it to its (possibly new) meeting session."""
        kid_id = self._require_kid_id(data)
        session = self._target_session(data, kid_id, SessionType.MEETING, self.meeting_forms)
        now = utc_now()

        form = MeetingForm(
            id=self.store.new_id(),
            session_id="",
            kid_id=kid_id,
            session_date=self._session_date(data, session),
            attendees=self._attendees(data.get("attendees")),
            **{_snake(f): data.get(f) or "" for f in MEETING_TEXT_FIELDS},
            created_at=now,
            updated_at=now,
        )
        return self._link(form, session, data, SessionType.MEETING, self.meeting_forms)

    def _require_kid_id(self, data: Mapping[str, Any]) -> str:
        kid_id = data.get("kidId")
        if not kid_id:
            raise ValidationFailedError(
                "kidId is required", field="kidId", code=ErrorCode.MISSING_REQUIRED_FIELD
            )
        self.kids.require(kid_id)
        return kid_id

    def _target_session(
        self,
        data: Mapping[str, Any],
        kid_id: str,
        session_type: SessionType,
        forms: FormRepository,
    ) -> Optional[Session]:
        """Resolve and vet the existing session a submission points at, if any."""
        session_id = data.get("sessionId")
        if not session_id:
            return None

        session = self.sessions.require(session_id)
        if session.kid_id != kid_id:
            raise ValidationFailedError(
                f"Session {session_id} belongs to another kid", field="sessionId"
            )
        if session.type != session_type:
            raise ValidationFailedError(
                f"Session {session_id} is a {session.type.value} session", field="sessionId"
            )
        if session.status == SessionStatus.MISSED:
            raise ValidationFailedError(
                f"Session {session_id} was marked as missed",
                field="sessionId",
                code=ErrorCode.INVALID_STATUS_TRANSITION,
            )
        if session.form_id or forms.for_session(session_id) is not None:
            logger.warning(f"Rejected second form for session {session_id}")
            raise ValidationFailedError(
                f"Session {session_id} already has a form",
                field="sessionId",
                code=ErrorCode.ALREADY_EXISTS,
            )
        return session

    def _link(self, form, session: Optional[Session], data, session_type: SessionType, forms: FormRepository):
        if session is None:
            # No session given: the form brings its own, already completed
            session = Session(
                id=self.store.new_id(),
                kid_id=form.kid_id,
                therapist_id=data.get("practitionerId") or None,
                scheduled_date=form.session_date,
                type=session_type,
                status=SessionStatus.COMPLETED,
                form_id=form.id,
                created_at=utc_now(),
            )
            self.sessions.create(session)
            form.session_id = session.id
            form = forms.create(form)
        else:
            form.session_id = session.id
            form = forms.create(form)
            self.sessions.update(
                session.id,
                {"status": SessionStatus.COMPLETED.value, "formId": form.id},
            )

        logger.info(f"Submitted {session_type.value} form {form.id} for session {session.id}")
        return form

    @staticmethod
    def _session_date(data: Mapping[str, Any], session: Optional[Session]):
        if data.get("sessionDate"):
            return to_date(data["sessionDate"])
        if session is not None:
            return session.scheduled_date
        return utc_now()

    def _snapshots(self, goals: Optional[List[Any]]) -> List[GoalSnapshot]:
        """
        Copy worked-on goals into frozen snapshots.

        Missing titles or categories are filled from the live goal at
        submission time; later goal edits never reach the stored report.
        """
        snapshots = []
        for item in goals or []:
            raw = item.to_doc() if isinstance(item, GoalSnapshot) else dict(item)
            snapshot = GoalSnapshot(
                goal_id=str(raw.get("goalId") or ""),
                goal_title=str(raw.get("goalTitle") or ""),
                category_id=str(raw.get("categoryId") or ""),
            )
            if snapshot.goal_id and not (snapshot.goal_title and snapshot.category_id):
                goal = self.goals.get_by_id(snapshot.goal_id)
                if goal is not None:
                    snapshot.goal_title = snapshot.goal_title or goal.title
                    snapshot.category_id = snapshot.category_id or goal.category_id
            snapshots.append(snapshot)
        return snapshots

    @staticmethod
    def _attendees(attendees: Optional[List[Any]]) -> List[Attendee]:
        result = []
        for item in attendees or []:
            attendee = item if isinstance(item, Attendee) else Attendee.from_doc(dict(item))
            if attendee.type not in ("parent", "practitioner"):
                raise ValidationFailedError(
                    f"Invalid attendee type: {attendee.type!r}", field="attendees"
                )
            result.append(attendee)
        return result

    # =============================================================================
    # UPDATE & DELETE
    # =============================================================================

    def update_form(self, form_id: str, fields: Mapping[str, Any]) -> SessionForm:
        updates = {k: fields[k] for k in FORM_UPDATABLE_FIELDS if k in fields}
        if "goalsWorkedOn" in updates:
            updates["goalsWorkedOn"] = [s.to_doc() for s in self._snapshots(updates["goalsWorkedOn"])]
        for key in FORM_TEXT_FIELDS:
            if key in updates:
                updates[key] = updates[key] or ""
        return self._update(self.forms, form_id, updates)

    def update_meeting_form(self, form_id: str, fields: Mapping[str, Any]) -> MeetingForm:
        updates = {k: fields[k] for k in MEETING_UPDATABLE_FIELDS if k in fields}
        if "attendees" in updates:
            updates["attendees"] = [a.to_doc() for a in self._attendees(updates["attendees"])]
        for key in MEETING_TEXT_FIELDS:
            if key in updates:
                updates[key] = updates[key] or ""
        return self._update(self.meeting_forms, form_id, updates)

    @staticmethod
    def _update(forms: FormRepository, form_id: str, updates: Dict[str, Any]):
        forms.require(form_id)
        if "sessionDate" in updates:
            updates["sessionDate"] = to_date(updates["sessionDate"])
        updates["updatedAt"] = utc_now()
        return forms.update(form_id, updates)

    def delete_form(self, form_id: str) -> None:
        self._delete(self.forms, form_id)

    def delete_meeting_form(self, form_id: str) -> None:
        self._delete(self.meeting_forms, form_id)

    def _delete(self, forms: FormRepository, form_id: str) -> None:
        """Delete a form and reopen its session. Raises NotFoundError for unknown forms."""
        form = forms.require(form_id)
        if form.session_id and self.sessions.exists(form.session_id):
            self.sessions.update(
                form.session_id,
                {"status": SessionStatus.SCHEDULED.value, "formId": None},
            )
        forms.delete(form_id)
        logger.info(f"Deleted form {form_id}, reopened session {form.session_id}")

    # =============================================================================
    # QUERIES
    # =============================================================================

    def get_form(self, form_id: str) -> SessionForm:
        return self.forms.require(form_id)

    def get_meeting_form(self, form_id: str) -> MeetingForm:
        return self.meeting_forms.require(form_id)

    def get_form_for_session(self, session_id: str) -> Optional[SessionForm]:
        return self.forms.for_session(session_id)

    def get_meeting_form_for_session(self, session_id: str) -> Optional[MeetingForm]:
        return self.meeting_forms.for_session(session_id)

    def get_forms_for_kid(self, kid_id: str, week_of: Any = None) -> List[SessionForm]:
        """Session reports of a kid, newest first; week_of limits them to [week_of, week_of + 7 days)."""
        return self._in_week(self.forms.for_kid(kid_id), week_of)

    def get_meeting_forms_for_kid(self, kid_id: str, week_of: Any = None) -> List[MeetingForm]:
        return self._in_week(self.meeting_forms.for_kid(kid_id), week_of)

    @staticmethod
    def _in_week(forms, week_of):
        forms = sorted(forms, key=lambda f: f.session_date, reverse=True)
        if week_of is None:
            return forms
        start, end = week_range(week_of)
        return [f for f in forms if start <= f.session_date < end]

    # =============================================================================
    # FORM LINKS
    # =============================================================================

    def create_form_link(self, kid_id: str, session_id: Optional[str] = None) -> Dict[str, str]:
        """Create a one-time token and the form URL that carries it."""
        self.kids.require(kid_id)
        if session_id:
            self.sessions.require(session_id)

        token = self.tokens.create(FormToken(
            id=self.store.new_id(),
            kid_id=kid_id,
            session_id=session_id or None,
            used=False,
            created_at=utc_now(),
        ))

        params = {"kidId": kid_id, "token": token.id}
        if session_id:
            params["sessionId"] = session_id
        return {"token": token.id, "url": f"{self.form_link_base}?{urlencode(params)}"}

    # =============================================================================
    # FORM TEMPLATES
    # =============================================================================

    def get_form_template(self, kid_id: str) -> List[FormTemplateSection]:
        """The kid's report template, or the default one when none is set."""
        kid = self.kids.require(kid_id)
        sections = kid.form_template or DEFAULT_FORM_TEMPLATE
        return sorted(sections, key=lambda s: s.order)

    def update_form_template(self, kid_id: str, sections: List[Mapping[str, Any]]) -> List[FormTemplateSection]:
        self.kids.require(kid_id)
        template = validate_template(sections)
        self.kids.update(kid_id, {
            "formTemplate": [s.to_doc() for s in template],
            "updatedAt": utc_now(),
        })
        logger.info(f"Updated form template for kid {kid_id} ({len(template)} sections)")
        return template


def validate_template(sections: Any) -> List[FormTemplateSection]:
    """Check a template and return its sections ordered by `order`."""
    if not isinstance(sections, list) or not sections:
        raise ValidationFailedError("Template must be a non-empty list of sections")

    valid_types = {t.value for t in TemplateSectionType}
    seen = set()
    template = []
    for index, raw in enumerate(sections):
        if not isinstance(raw, Mapping):
            raise ValidationFailedError(f"Section {index} is not an object")
        section_id = raw.get("id")
        label = raw.get("label")
        order = raw.get("order")
        if not isinstance(section_id, str) or not section_id.strip():
            raise ValidationFailedError(f"Section {index} has no id", field="id")
        if not isinstance(label, str) or not label.strip():
            raise ValidationFailedError(f"Section {section_id} has no label", field="label")
        if raw.get("type") not in valid_types:
            raise ValidationFailedError(
                f"Section {section_id} has invalid type {raw.get('type')!r}", field="type"
            )
        if not isinstance(order, int) or isinstance(order, bool):
            raise ValidationFailedError(f"Section {section_id} has invalid order", field="order")
        if section_id in seen:
            raise ValidationFailedError(f"Duplicate section id: {section_id}", field="id")
        seen.add(section_id)
        template.append(FormTemplateSection(
            id=section_id,
            label=label.strip(),
            type=raw["type"],
            order=order,
            is_default=bool(raw.get("isDefault", False)),
        ))
    return sorted(template, key=lambda s: s.order)


def _snake(name: str) -> str:
    return "".join(f"_{c.lower()}" if c.isupper() else c for c in name)
