# src/therapy_center/services/board_requests.py
"""
Parent-submitted reward board requests.
"""

import logging
from typing import Any, List, Mapping

from ..core.models import BoardRequest, BoardRequestStatus
from ..core.ports.store import DocumentStorePort
from ..errors import ErrorCode, ValidationFailedError
from ..repositories import BoardRequestRepository
from ..utils.dates import utc_now

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = (
    "childName",
    "parentName",
    "email",
    "phone",
    "age",
    "gender",
    "childDescription",
    "tasks",
    "behaviorGoals",
    "rewards",
    "additionalNotes",
    "dailyReward",
    "coinStyle",
    "colorSchema",
    "showDino",
    "soundsEnabled",
    "status",
)


def _check_status(status: Any) -> str:
    try:
        return BoardRequestStatus(status).value
    except ValueError:
        raise ValidationFailedError(f"Invalid board request status: {status!r}", field="status")


class BoardRequestService:

    def __init__(self, store: DocumentStorePort):
        self.requests = BoardRequestRepository(store)

    def submit(self, data: Mapping[str, Any]) -> BoardRequest:
        if not (data.get("childName") or "").strip():
            raise ValidationFailedError(
                "childName is required", field="childName", code=ErrorCode.MISSING_REQUIRED_FIELD
            )
        fields = {k: data[k] for k in EDITABLE_FIELDS if k in data and k != "status"}
        request = BoardRequest.from_doc(fields)
        request.status = BoardRequestStatus.PENDING.value
        request.submitted_at = utc_now()
        request = self.requests.create(request)
        logger.info(f"Board request {request.id} submitted")
        return request

    def get_all(self) -> List[BoardRequest]:
        return self.requests.newest_first()

    def get(self, request_id: str) -> BoardRequest:
        return self.requests.require(request_id)

    def update(self, request_id: str, fields: Mapping[str, Any]) -> BoardRequest:
        self.requests.require(request_id)
        updates = {k: fields[k] for k in EDITABLE_FIELDS if k in fields}
        if "status" in updates:
            updates["status"] = _check_status(updates["status"])
        return self.requests.update(request_id, updates)

    def mark_completed(self, request_id: str, board_id: str) -> BoardRequest:
        self.requests.require(request_id)
        return self.requests.update(request_id, {
            "status": BoardRequestStatus.COMPLETED.value,
            "createdBoardId": board_id,
        })

    def delete(self, request_id: str) -> None:
        self.requests.require(request_id)
        self.requests.delete(request_id)
