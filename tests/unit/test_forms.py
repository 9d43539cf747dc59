# tests/unit/test_forms.py
"""
Tests for form submission and its linkage to sessions.
"""

from datetime import datetime, timedelta, timezone

import pytest

from therapy_center.core.models import SessionStatus, SessionType
from therapy_center.errors import ErrorCode, NotFoundError, ValidationFailedError


class TestSubmitWithoutSession:
    """A report with no sessionId brings its own completed session."""

    def test_creates_completed_session(self, forms, sessions, kid, therapist, make_form_payload):
        form = forms.submit_form(make_form_payload(
            kid.id, practitionerId=therapist.id, sessionDate="2026-03-02T10:00:00Z",
        ))

        session = sessions.get_session(form.session_id)
        assert session.status is SessionStatus.COMPLETED
        assert session.form_id == form.id
        assert session.type is SessionType.THERAPY
        assert session.therapist_id == therapist.id
        assert session.scheduled_date == form.session_date == datetime(2026, 3, 2, 10, tzinfo=timezone.utc)

    def test_session_date_defaults_to_now(self, forms, kid, make_form_payload):
        before = datetime.now(timezone.utc)
        form = forms.submit_form(make_form_payload(kid.id))
        assert form.session_date >= before

    def test_kid_is_required(self, forms):
        with pytest.raises(ValidationFailedError) as exc_info:
            forms.submit_form({"cooperation": 50})
        assert exc_info.value.code == ErrorCode.MISSING_REQUIRED_FIELD

    def test_unknown_kid(self, forms, make_form_payload):
        with pytest.raises(NotFoundError):
            forms.submit_form(make_form_payload("ghost"))


class TestSubmitForSession:

    def test_completes_the_session(self, forms, sessions, kid, weekly_session, make_form_payload):
        form = forms.submit_form(make_form_payload(kid.id, weekly_session.id))

        session = sessions.get_session(weekly_session.id)
        assert session.status is SessionStatus.COMPLETED
        assert session.form_id == form.id
        assert form.session_id == weekly_session.id
        assert form.session_date == weekly_session.scheduled_date

    def test_pending_form_session_can_be_reported(self, forms, sessions, kid, weekly_session, make_form_payload):
        sessions.update_session(weekly_session.id, {"status": "pending_form"})
        forms.submit_form(make_form_payload(kid.id, weekly_session.id))
        assert sessions.get_session(weekly_session.id).status is SessionStatus.COMPLETED

    def test_second_form_is_rejected(self, forms, kid, weekly_session, make_form_payload):
        forms.submit_form(make_form_payload(kid.id, weekly_session.id))
        with pytest.raises(ValidationFailedError) as exc_info:
            forms.submit_form(make_form_payload(kid.id, weekly_session.id))
        assert exc_info.value.code == ErrorCode.ALREADY_EXISTS
        assert len(forms.get_forms_for_kid(kid.id)) == 1

    def test_missed_session_is_rejected(self, forms, sessions, kid, weekly_session, make_form_payload):
        sessions.update_session(weekly_session.id, {"status": "missed"})
        with pytest.raises(ValidationFailedError):
            forms.submit_form(make_form_payload(kid.id, weekly_session.id))
        assert forms.get_forms_for_kid(kid.id) == []

    def test_session_of_another_kid(self, forms, make_kid, sessions, base_date, make_form_payload):
        noa, ori = make_kid(), make_kid()
        session = sessions.schedule(noa.id, None, base_date)
        with pytest.raises(ValidationFailedError):
            forms.submit_form(make_form_payload(ori.id, session.id))

    def test_meeting_session_rejects_session_report(self, forms, sessions, kid, base_date, make_form_payload):
        meeting = sessions.schedule(kid.id, None, base_date, "meeting")
        with pytest.raises(ValidationFailedError):
            forms.submit_form(make_form_payload(kid.id, meeting.id))

    def test_unknown_session(self, forms, kid, make_form_payload):
        with pytest.raises(NotFoundError):
            forms.submit_form(make_form_payload(kid.id, "ghost"))


class TestGoalSnapshots:
    """Reports keep the goal titles they were written with."""

    def test_snapshot_survives_goal_rename(self, forms, goals, kid, weekly_session, make_form_payload):
        goal = goals.add_goal_to_kid(kid.id, "Sit for 10 minutes", "motor-gross")
        form = forms.submit_form(make_form_payload(
            kid.id, weekly_session.id,
            goalsWorkedOn=[{"goalId": goal.id, "goalTitle": goal.title, "categoryId": goal.category_id}],
        ))

        goals.update_goal(goal.id, {"title": "Sit for 15 minutes"})

        stored = forms.get_form(form.id)
        assert stored.goals_worked_on[0].goal_title == "Sit for 10 minutes"

    def test_missing_title_filled_from_live_goal(self, forms, goals, kid, make_form_payload):
        goal = goals.add_goal_to_kid(kid.id, "Wait for a turn", "general")
        form = forms.submit_form(make_form_payload(kid.id, goalsWorkedOn=[{"goalId": goal.id}]))

        snapshot = form.goals_worked_on[0]
        assert snapshot.goal_title == "Wait for a turn"
        assert snapshot.category_id == "general"

    def test_snapshot_survives_goal_deletion(self, forms, goals, kid, make_form_payload):
        goal = goals.add_goal_to_kid(kid.id, "Wash hands", "adl")
        form = forms.submit_form(make_form_payload(
            kid.id, goalsWorkedOn=[{"goalId": goal.id, "goalTitle": "Wash hands", "categoryId": "adl"}],
        ))
        goals.delete_goal(goal.id)
        assert forms.get_form(form.id).goals_worked_on[0].goal_title == "Wash hands"


class TestUpdateAndDelete:

    def test_update_form_fields(self, forms, kid, weekly_session, make_form_payload):
        form = forms.submit_form(make_form_payload(kid.id, weekly_session.id))
        updated = forms.update_form(form.id, {"notes": "Tired today", "cooperation": 60, "sessionId": "other"})

        assert updated.notes == "Tired today"
        assert updated.cooperation == 60
        assert updated.session_id == weekly_session.id
        assert updated.updated_at >= form.updated_at

    def test_update_unknown_form(self, forms):
        with pytest.raises(NotFoundError):
            forms.update_form("ghost", {"notes": "x"})

    def test_delete_reopens_session(self, forms, sessions, kid, weekly_session, make_form_payload):
        form = forms.submit_form(make_form_payload(kid.id, weekly_session.id))

        forms.delete_form(form.id)

        session = sessions.get_session(weekly_session.id)
        assert session.status is SessionStatus.SCHEDULED
        assert session.form_id is None
        with pytest.raises(NotFoundError):
            forms.get_form(form.id)

    def test_reopened_session_accepts_new_form(self, forms, kid, weekly_session, make_form_payload):
        first = forms.submit_form(make_form_payload(kid.id, weekly_session.id))
        forms.delete_form(first.id)
        second = forms.submit_form(make_form_payload(kid.id, weekly_session.id))
        assert second.session_id == weekly_session.id

    def test_delete_unknown_form(self, forms):
        with pytest.raises(NotFoundError):
            forms.delete_form("ghost")


class TestMeetingForms:

    def test_submit_without_session_creates_meeting(self, forms, sessions, kid):
        form = forms.submit_meeting_form({
            "kidId": kid.id,
            "sessionDate": "2026-03-05T09:00:00Z",
            "attendees": [{"id": "p1", "name": "Michal", "type": "parent"}],
            "generalNotes": "Monthly review",
        })

        session = sessions.get_session(form.session_id)
        assert session.type is SessionType.MEETING
        assert session.status is SessionStatus.COMPLETED
        assert form.attendees[0].name == "Michal"
        assert form.behavior_notes == ""

    def test_therapy_session_rejects_meeting_report(self, forms, kid, weekly_session):
        with pytest.raises(ValidationFailedError):
            forms.submit_meeting_form({"kidId": kid.id, "sessionId": weekly_session.id})

    def test_invalid_attendee_type(self, forms, kid):
        with pytest.raises(ValidationFailedError):
            forms.submit_meeting_form({"kidId": kid.id, "attendees": [{"id": "x", "name": "X", "type": "cousin"}]})

    def test_session_lookup_and_delete(self, forms, sessions, kid, base_date):
        meeting = sessions.schedule(kid.id, None, base_date, "meeting")
        form = forms.submit_meeting_form({"kidId": kid.id, "sessionId": meeting.id})

        assert forms.get_meeting_form_for_session(meeting.id).id == form.id
        assert forms.get_form_for_session(meeting.id) is None

        forms.delete_meeting_form(form.id)
        assert sessions.get_session(meeting.id).status is SessionStatus.SCHEDULED


class TestWeekFilter:
    """weekOf selects [weekOf, weekOf + 7 days), newest first."""

    def test_week_window(self, forms, kid, make_form_payload):
        start = datetime(2026, 3, 1, tzinfo=timezone.utc)
        for offset in (-1, 0, 3, 6, 7):
            forms.submit_form(make_form_payload(
                kid.id, sessionDate=(start + timedelta(days=offset)).isoformat(), notes=str(offset),
            ))

        in_week = forms.get_forms_for_kid(kid.id, week_of=start)

        assert [f.notes for f in in_week] == ["6", "3", "0"]
        assert len(forms.get_forms_for_kid(kid.id)) == 5

    def test_meeting_forms_week_window(self, forms, kid):
        forms.submit_meeting_form({"kidId": kid.id, "sessionDate": "2026-03-02T10:00:00Z"})
        forms.submit_meeting_form({"kidId": kid.id, "sessionDate": "2026-03-12T10:00:00Z"})
        assert len(forms.get_meeting_forms_for_kid(kid.id, week_of="2026-03-01T00:00:00Z")) == 1


class TestEndToEnd:
    """Schedule weekly, report one week, miss another, then undo the report."""

    def test_weekly_lifecycle(self, forms, sessions, goals, kid, therapist, base_date, make_form_payload):
        goal = goals.add_goal_to_kid(kid.id, "Three-word sentences", "language")
        week = sessions.schedule_recurring(
            kid.id, therapist.id, "therapy", base_date, base_date + timedelta(days=21)
        )
        assert len(week) == 4

        form = forms.submit_form(make_form_payload(
            kid.id, week[0].id, practitionerId=therapist.id, goalsWorkedOn=[{"goalId": goal.id}],
        ))
        sessions.update_session(week[1].id, {"status": "missed"})

        alerts = sessions.get_alerts("admin-1", now=base_date + timedelta(days=15))
        assert [s.id for s in alerts] == [week[2].id]

        forms.delete_form(form.id)
        reopened = sessions.get_session(week[0].id)
        assert reopened.status is SessionStatus.SCHEDULED
        assert reopened.form_id is None

        alerts = sessions.get_alerts("admin-1", now=base_date + timedelta(days=15))
        assert [s.id for s in alerts] == [week[0].id, week[2].id]


class TestFormLinks:

    def test_link_carries_token(self, forms, kid, weekly_session):
        link = forms.create_form_link(kid.id, weekly_session.id)

        assert link["token"]
        assert link["url"].startswith("/therapy/form/new?")
        assert f"kidId={kid.id}" in link["url"]
        assert f"sessionId={weekly_session.id}" in link["url"]
        assert f"token={link['token']}" in link["url"]
        assert forms.tokens.get_by_id(link["token"]).used is False

    def test_link_for_unknown_kid(self, forms):
        with pytest.raises(NotFoundError):
            forms.create_form_link("ghost")


class TestFormTemplates:

    def test_default_template_when_unset(self, forms, kid):
        template = forms.get_form_template(kid.id)
        assert len(template) == 12
        assert template[0].id == "cooperation"

    def test_custom_template_is_ordered(self, forms, kid):
        forms.update_form_template(kid.id, [
            {"id": "mood", "label": "Mood", "type": "text", "order": 2},
            {"id": "sitting", "label": "Sitting", "type": "number", "order": 1},
        ])
        assert [s.id for s in forms.get_form_template(kid.id)] == ["sitting", "mood"]

    @pytest.mark.parametrize("sections", [
        [],
        [{"id": "", "label": "x", "type": "text", "order": 1}],
        [{"id": "a", "label": "x", "type": "rating", "order": 1}],
        [{"id": "a", "label": "x", "type": "text", "order": "1"}],
        [{"id": "a", "label": "x", "type": "text", "order": 1}, {"id": "a", "label": "y", "type": "text", "order": 2}],
    ])
    def test_invalid_templates(self, forms, kid, sections):
        with pytest.raises(ValidationFailedError):
            forms.update_form_template(kid.id, sections)
