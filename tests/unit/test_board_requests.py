# tests/unit/test_board_requests.py
"""
Tests for parent board requests.
"""

import pytest

from therapy_center.errors import NotFoundError, ValidationFailedError


class TestBoardRequests:

    def test_submit_forces_pending(self, board_requests):
        request = board_requests.submit({
            "childName": "Ori",
            "parentName": "Michal",
            "status": "completed",
            "showDino": True,
            "unexpected": "dropped",
        })

        stored = board_requests.get(request.id)
        assert stored.status == "pending"
        assert stored.submitted_at is not None
        assert stored.extra == {"showDino": True}

    def test_child_name_required(self, board_requests):
        with pytest.raises(ValidationFailedError):
            board_requests.submit({"parentName": "Michal"})

    def test_update_fields(self, board_requests):
        request = board_requests.submit({"childName": "Ori"})
        updated = board_requests.update(request.id, {"rewards": ["sticker"], "colorSchema": "green", "submittedAt": None})
        assert updated.rewards == ["sticker"]
        assert updated.extra["colorSchema"] == "green"
        assert updated.submitted_at is not None

    def test_invalid_status(self, board_requests):
        request = board_requests.submit({"childName": "Ori"})
        with pytest.raises(ValidationFailedError):
            board_requests.update(request.id, {"status": "archived"})

    def test_mark_completed(self, board_requests):
        request = board_requests.submit({"childName": "Ori"})
        done = board_requests.mark_completed(request.id, "ori-board")
        assert done.status == "completed"
        assert done.created_board_id == "ori-board"

    def test_delete(self, board_requests):
        request = board_requests.submit({"childName": "Ori"})
        board_requests.delete(request.id)
        assert board_requests.get_all() == []
        with pytest.raises(NotFoundError):
            board_requests.get(request.id)
