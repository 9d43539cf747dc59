# tests/unit/test_models.py
"""
Tests for the domain models and their document mapping.
"""

from datetime import datetime, timezone

from therapy_center.core.models import (
    DEFAULT_FORM_TEMPLATE,
    GOAL_CATEGORIES,
    BoardRequest,
    Kid,
    Session,
    SessionForm,
    SessionStatus,
    SessionType,
)


class TestDocumentMapping:
    """to_doc/from_doc convert between snake_case attributes and camelCase documents."""

    def test_session_round_trip_uses_camel_case(self):
        session = Session(
            id="s1",
            kid_id="kid-1",
            scheduled_date="2026-03-02T10:00:00Z",
            type="meeting",
            status="pending_form",
        )
        doc = session.to_doc()
        assert doc["kidId"] == "kid-1"
        assert doc["type"] == "meeting"
        assert doc["status"] == "pending_form"
        assert doc["scheduledDate"] == datetime(2026, 3, 2, 10, 0, tzinfo=timezone.utc)

        restored = Session.from_doc(doc)
        assert restored.type is SessionType.MEETING
        assert restored.status is SessionStatus.PENDING_FORM

    def test_session_without_type_is_therapy(self):
        session = Session.from_doc({"id": "s1", "kidId": "k", "scheduledDate": "2026-03-02", "type": None})
        assert session.type is SessionType.THERAPY

    def test_is_open(self):
        assert Session(status="scheduled").is_open
        assert Session(status="pending_form").is_open
        assert not Session(status="completed").is_open
        assert not Session(status="missed").is_open

    def test_form_dates_accept_seconds_mapping(self):
        form = SessionForm.from_doc({"id": "f1", "sessionDate": {"seconds": 0}})
        assert form.session_date == datetime(1970, 1, 1, tzinfo=timezone.utc)

    def test_form_snapshots_are_models(self):
        form = SessionForm.from_doc({
            "id": "f1",
            "sessionDate": "2026-03-02",
            "goalsWorkedOn": [{"goalId": "g1", "goalTitle": "Sit", "categoryId": "adl"}],
        })
        assert form.goals_worked_on[0].goal_title == "Sit"
        assert form.to_doc()["goalsWorkedOn"] == [{"goalId": "g1", "goalTitle": "Sit", "categoryId": "adl"}]


class TestPassThroughFields:
    """Kids and board requests keep unknown board-configuration keys."""

    def test_kid_keeps_board_configuration(self):
        kid = Kid.from_doc({"id": "k", "name": "Noa", "colorSchema": "pink", "tasks": [{"id": 1}]})
        assert kid.extra == {"colorSchema": "pink", "tasks": [{"id": 1}]}
        doc = kid.to_doc()
        assert doc["colorSchema"] == "pink"
        assert "extra" not in doc

    def test_board_request_keeps_styling(self):
        request = BoardRequest.from_doc({"childName": "Ori", "showDino": True})
        assert request.extra == {"showDino": True}

    def test_kid_template_sections_are_models(self):
        kid = Kid.from_doc({
            "id": "k",
            "name": "Noa",
            "formTemplate": [{"id": "mood", "label": "Mood", "type": "text", "order": 1}],
        })
        assert kid.form_template[0].label == "Mood"


class TestReferenceData:

    def test_seven_goal_categories_in_order(self):
        assert [c.order for c in GOAL_CATEGORIES] == list(range(1, 8))
        assert {c.id for c in GOAL_CATEGORIES} >= {"motor-gross", "language", "adl", "general"}

    def test_default_template_covers_report_fields(self):
        ids = [s.id for s in DEFAULT_FORM_TEMPLATE]
        assert len(ids) == 12
        assert ids[0] == "cooperation"
        assert all(s.is_default for s in DEFAULT_FORM_TEMPLATE)
