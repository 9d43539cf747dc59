# tests/unit/test_sessions.py
"""
Tests for the session lifecycle: scheduling, recurrence, status transitions,
deletion and overdue alerts.
"""

from datetime import datetime, timedelta, timezone

import pytest

from therapy_center.core.models import SessionStatus, SessionType
from therapy_center.errors import ErrorCode, NotFoundError, ValidationFailedError
from therapy_center.repositories import SessionFormRepository


class TestScheduling:

    def test_schedule_creates_scheduled_session(self, sessions, kid, therapist, base_date):
        session = sessions.schedule(kid.id, therapist.id, base_date)

        assert session.id
        assert session.status is SessionStatus.SCHEDULED
        assert session.type is SessionType.THERAPY
        assert session.form_id is None
        assert session.scheduled_date == base_date
        assert session.created_at is not None

    def test_schedule_meeting(self, sessions, kid, base_date):
        session = sessions.schedule(kid.id, None, base_date, "meeting")
        assert session.type is SessionType.MEETING
        assert session.therapist_id is None

    def test_schedule_unknown_kid(self, sessions, base_date):
        with pytest.raises(NotFoundError):
            sessions.schedule("ghost", None, base_date)

    def test_schedule_invalid_type(self, sessions, kid, base_date):
        with pytest.raises(ValidationFailedError):
            sessions.schedule(kid.id, None, base_date, "group")

    def test_overlapping_sessions_are_allowed(self, sessions, kid, base_date):
        sessions.schedule(kid.id, None, base_date)
        sessions.schedule(kid.id, None, base_date)
        assert len(sessions.get_sessions_for_kid(kid.id)) == 2


class TestRecurrence:
    """Weekly sessions from start through until, inclusive."""

    def test_four_weeks(self, sessions, kid, therapist, base_date):
        created = sessions.schedule_recurring(
            kid.id, therapist.id, "therapy", base_date, base_date + timedelta(days=21)
        )
        dates = [s.scheduled_date for s in created]
        assert dates == [base_date + timedelta(days=7 * i) for i in range(4)]
        assert all(s.status is SessionStatus.SCHEDULED for s in created)
        assert all(s.therapist_id == therapist.id for s in created)

    def test_partial_week_is_dropped(self, sessions, kid, base_date):
        created = sessions.schedule_recurring(
            kid.id, None, "therapy", base_date, base_date + timedelta(days=20)
        )
        assert len(created) == 3

    def test_same_day_gives_one(self, sessions, kid, base_date):
        assert len(sessions.schedule_recurring(kid.id, None, "therapy", base_date, base_date)) == 1

    def test_until_before_start_gives_none(self, sessions, kid, base_date):
        created = sessions.schedule_recurring(
            kid.id, None, "therapy", base_date, base_date - timedelta(days=1)
        )
        assert created == []
        assert sessions.get_sessions_for_kid(kid.id) == []

    def test_accepts_string_dates(self, sessions, kid):
        created = sessions.schedule_recurring(
            kid.id, None, "meeting", "2026-03-02T10:00:00Z", "2026-03-16T10:00:00Z"
        )
        assert len(created) == 3
        assert all(s.type is SessionType.MEETING for s in created)


class TestStatusTransitions:

    def test_scheduled_to_missed(self, sessions, weekly_session):
        updated = sessions.update_session(weekly_session.id, {"status": "missed"})
        assert updated.status is SessionStatus.MISSED

    def test_scheduled_to_pending_form(self, sessions, weekly_session):
        updated = sessions.update_session(weekly_session.id, {"status": "pending_form"})
        assert updated.status is SessionStatus.PENDING_FORM

    def test_missed_is_terminal(self, sessions, weekly_session):
        sessions.update_session(weekly_session.id, {"status": "missed"})
        with pytest.raises(ValidationFailedError) as exc_info:
            sessions.update_session(weekly_session.id, {"status": "scheduled"})
        assert exc_info.value.code == ErrorCode.INVALID_STATUS_TRANSITION

    def test_pending_form_cannot_go_back(self, sessions, weekly_session):
        sessions.update_session(weekly_session.id, {"status": "pending_form"})
        with pytest.raises(ValidationFailedError):
            sessions.update_session(weekly_session.id, {"status": "scheduled"})

    def test_complete_without_form_is_rejected(self, sessions, weekly_session):
        with pytest.raises(ValidationFailedError):
            sessions.update_session(weekly_session.id, {"status": "completed"})
        assert sessions.get_session(weekly_session.id).status is SessionStatus.SCHEDULED

    def test_completed_session_cannot_be_reopened_directly(self, sessions, forms, kid, weekly_session, make_form_payload):
        forms.submit_form(make_form_payload(kid.id, weekly_session.id))
        with pytest.raises(ValidationFailedError):
            sessions.update_session(weekly_session.id, {"status": "scheduled"})

    def test_unknown_status(self, sessions, weekly_session):
        with pytest.raises(ValidationFailedError):
            sessions.update_session(weekly_session.id, {"status": "cancelled"})

    def test_update_unknown_session(self, sessions):
        with pytest.raises(NotFoundError):
            sessions.update_session("ghost", {"status": "missed"})


class TestFieldUpdates:

    def test_reschedule_and_reassign(self, sessions, weekly_session, base_date):
        new_date = base_date + timedelta(days=1)
        updated = sessions.update_session(
            weekly_session.id,
            {"scheduledDate": "2026-03-03T10:00:00Z", "therapistId": "pract-dana"},
        )
        assert updated.scheduled_date == new_date
        assert updated.therapist_id == "pract-dana"

    def test_unknown_fields_are_ignored(self, sessions, weekly_session):
        updated = sessions.update_session(weekly_session.id, {"kidId": "other", "notes": "x"})
        assert updated.kid_id == weekly_session.kid_id

    def test_form_id_must_point_back(self, sessions, forms, kid, base_date, make_form_payload):
        first = sessions.schedule(kid.id, None, base_date)
        second = sessions.schedule(kid.id, None, base_date + timedelta(days=7))
        form = forms.submit_form(make_form_payload(kid.id, first.id))

        with pytest.raises(ValidationFailedError):
            sessions.update_session(second.id, {"formId": form.id, "status": "completed"})

    def test_form_id_cannot_be_cleared_while_form_exists(self, sessions, forms, kid, weekly_session, make_form_payload):
        forms.submit_form(make_form_payload(kid.id, weekly_session.id))
        with pytest.raises(ValidationFailedError):
            sessions.update_session(weekly_session.id, {"formId": None})

    def test_type_is_locked_once_a_form_exists(self, sessions, forms, kid, weekly_session, make_form_payload):
        forms.submit_form(make_form_payload(kid.id, weekly_session.id))
        with pytest.raises(ValidationFailedError):
            sessions.update_session(weekly_session.id, {"type": "meeting"})

    def test_type_can_change_before_a_form(self, sessions, weekly_session):
        updated = sessions.update_session(weekly_session.id, {"type": "meeting"})
        assert updated.type is SessionType.MEETING


class TestDeletion:

    def test_delete_removes_session_and_form(self, sessions, forms, store, kid, weekly_session, make_form_payload):
        form = forms.submit_form(make_form_payload(kid.id, weekly_session.id))

        sessions.delete_session(weekly_session.id)

        assert sessions.sessions.get_by_id(weekly_session.id) is None
        assert SessionFormRepository(store).get_by_id(form.id) is None

    def test_delete_meeting_removes_meeting_form(self, sessions, forms, kid, base_date):
        meeting = sessions.schedule(kid.id, None, base_date, "meeting")
        form = forms.submit_meeting_form({"kidId": kid.id, "sessionId": meeting.id})

        sessions.delete_session(meeting.id)

        assert forms.meeting_forms.get_by_id(form.id) is None

    def test_delete_unknown_is_noop(self, sessions):
        sessions.delete_session("ghost")


class TestQueries:

    def test_filters_by_status_and_inclusive_range(self, sessions, kid, base_date):
        created = sessions.schedule_recurring(
            kid.id, None, "therapy", base_date, base_date + timedelta(days=28)
        )
        sessions.update_session(created[0].id, {"status": "missed"})

        missed = sessions.get_sessions_for_kid(kid.id, status="missed")
        assert [s.id for s in missed] == [created[0].id]

        window = sessions.get_sessions_for_kid(
            kid.id, date_from=base_date + timedelta(days=7), date_to=base_date + timedelta(days=21)
        )
        assert [s.id for s in window] == [s.id for s in created[1:4]]

    def test_sorted_by_date(self, sessions, kid, base_date):
        late = sessions.schedule(kid.id, None, base_date + timedelta(days=3))
        early = sessions.schedule(kid.id, None, base_date)
        assert [s.id for s in sessions.get_sessions_for_kid(kid.id)] == [early.id, late.id]

    def test_invalid_status_filter(self, sessions, kid):
        with pytest.raises(ValidationFailedError):
            sessions.get_sessions_for_kid(kid.id, status="done")


class TestAlerts:
    """Overdue alerts are open sessions in the past, for the admin's kids only."""

    def test_overdue_open_sessions(self, sessions, forms, make_kid, base_date, make_form_payload):
        mine = make_kid(admin_id="admin-1")
        theirs = make_kid(admin_id="admin-2")
        now = base_date + timedelta(days=10)

        overdue = sessions.schedule(mine.id, None, base_date)
        pending = sessions.schedule(mine.id, None, base_date + timedelta(days=1))
        sessions.update_session(pending.id, {"status": "pending_form"})
        missed = sessions.schedule(mine.id, None, base_date + timedelta(days=2))
        sessions.update_session(missed.id, {"status": "missed"})
        done = sessions.schedule(mine.id, None, base_date + timedelta(days=3))
        forms.submit_form(make_form_payload(mine.id, done.id))
        sessions.schedule(mine.id, None, now + timedelta(days=1))
        sessions.schedule(theirs.id, None, base_date)

        alerts = sessions.get_alerts("admin-1", now=now)

        assert [s.id for s in alerts] == [overdue.id, pending.id]

    def test_no_kids_no_alerts(self, sessions):
        assert sessions.get_alerts("admin-without-kids", now=datetime(2026, 1, 1, tzinfo=timezone.utc)) == []
