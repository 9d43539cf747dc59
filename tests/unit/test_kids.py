# tests/unit/test_kids.py
"""
Tests for kid profiles, ownership and cascade deletion.
"""

import pytest

from therapy_center.errors import NotFoundError, UnauthorizedError, ValidationFailedError
from therapy_center.repositories import KidPractitionerRepository, PractitionerRepository
from therapy_center.services.kids import normalize_kid_id


class TestKidIds:

    @pytest.mark.parametrize("name,expected", [
        ("Noa", "noa"),
        ("  Noa  Levi ", "noa-levi"),
        ("Ori!", "ori"),
        ("נועה כהן", "נועה-כהן"),
    ])
    def test_normalize(self, name, expected):
        assert normalize_kid_id(name) == expected

    def test_duplicate_names_get_a_suffix(self, kids):
        first = kids.create_kid({"name": "Noa"}, "admin-1")
        second = kids.create_kid({"name": "Noa"}, "admin-1")
        third = kids.create_kid({"name": "noa"}, "admin-2")
        assert [first.id, second.id, third.id] == ["noa", "noa-2", "noa-3"]


class TestCreateAndUpdate:

    def test_create_keeps_board_configuration(self, kids):
        kid = kids.create_kid({"name": "Ori", "age": 5, "colorSchema": "blue", "adminId": "someone"}, "admin-1")

        stored = kids.get_kid(kid.id)
        assert stored.admin_id == "admin-1"
        assert stored.age == 5
        assert stored.extra["colorSchema"] == "blue"

    def test_name_is_required(self, kids):
        with pytest.raises(ValidationFailedError):
            kids.create_kid({"name": "  "}, "admin-1")

    def test_update_whitelist(self, kids, kid):
        updated = kids.update_kid(kid.id, {"age": 7, "adminId": "admin-2", "formTemplate": []})
        assert updated.age == 7
        assert updated.admin_id == "admin-1"

    def test_update_unknown_kid(self, kids):
        with pytest.raises(NotFoundError):
            kids.update_kid("ghost", {"age": 7})


class TestOwnership:

    def test_attach_orphan(self, kids, make_kid):
        orphan = make_kid(admin_id=None)
        assert kids.attach_kid(orphan.id, "admin-2").admin_id == "admin-2"

    def test_attach_owned_kid_is_rejected(self, kids, kid):
        with pytest.raises(UnauthorizedError):
            kids.attach_kid(kid.id, "admin-2")

    def test_detach_by_owner(self, kids, kid):
        assert kids.detach_kid(kid.id, "admin-1").admin_id is None

    def test_detach_by_other_admin_is_rejected(self, kids, kid):
        with pytest.raises(UnauthorizedError):
            kids.detach_kid(kid.id, "admin-2")
        assert kids.get_kid(kid.id).admin_id == "admin-1"

    def test_grouped_kids(self, kids, make_kid):
        mine = make_kid(admin_id="admin-1", name="A")
        orphan = make_kid(admin_id=None, name="B")
        other = make_kid(admin_id="admin-2", name="C")

        groups = kids.get_grouped_kids("admin-1")

        assert [k.id for k in groups["myKids"]] == [mine.id]
        assert [k.id for k in groups["orphanKids"]] == [orphan.id]
        assert [k.id for k in groups["otherAdminKids"]] == [other.id]


class TestCascadeDelete:

    def test_removes_everything_the_kid_owns(
        self, kids, team, goals, sessions, forms, notifications, kid, base_date, make_form_payload, store
    ):
        practitioner = team.add_practitioner_to_kid(kid.id, {"name": "Dana"}, "admin-1")
        team.add_parent_to_kid(kid.id, {"name": "Michal"})
        goals.add_goal_to_kid(kid.id, "Jump", "motor-gross")
        session = sessions.schedule(kid.id, practitioner.id, base_date)
        forms.submit_form(make_form_payload(kid.id, session.id))
        forms.submit_meeting_form({"kidId": kid.id})
        forms.create_form_link(kid.id)
        notifications.send("admin-1", kid.id, "Hello", "parent", "p1")

        deleted = kids.delete_kid(kid.id)

        # kid, 2 sessions, 2 forms, goal, parent, link, notification, token
        assert deleted == 10
        with pytest.raises(NotFoundError):
            kids.get_kid(kid.id)
        assert sessions.get_sessions_for_kid(kid.id) == []
        assert KidPractitionerRepository(store).for_kid(kid.id) == []
        assert PractitionerRepository(store).exists(practitioner.id)

    def test_other_kids_untouched(self, kids, goals, make_kid):
        noa, ori = make_kid(), make_kid()
        goals.add_goal_to_kid(ori.id, "Jump", "motor-gross")
        kids.delete_kid(noa.id)
        assert len(goals.get_goals_for_kid(ori.id)) == 1

    def test_delete_unknown_kid(self, kids):
        with pytest.raises(NotFoundError):
            kids.delete_kid("ghost")
