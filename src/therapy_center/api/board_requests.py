# src/therapy_center/api/board_requests.py
"""
Board requests API.

Parents submit requests without credentials; everything else is admin-only.
"""

from typing import Any, Dict

from fastapi import APIRouter, Body, Depends, Response

from ..services import BoardRequestService, Identity
from .deps import get_board_request_service, require_admin
from .responses import as_doc, as_docs
from .schemas import BoardRequestComplete

router = APIRouter()


@router.post("/board-requests", status_code=201)
async def submit_board_request(
    data: Dict[str, Any] = Body(...),
    requests: BoardRequestService = Depends(get_board_request_service),
):
    return as_doc(requests.submit(data))


@router.get("/board-requests")
async def list_board_requests(
    identity: Identity = Depends(require_admin),
    requests: BoardRequestService = Depends(get_board_request_service),
):
    return as_docs(requests.get_all())


@router.get("/board-requests/{request_id}")
async def get_board_request(
    request_id: str,
    identity: Identity = Depends(require_admin),
    requests: BoardRequestService = Depends(get_board_request_service),
):
    return as_doc(requests.get(request_id))


@router.put("/board-requests/{request_id}")
async def update_board_request(
    request_id: str,
    fields: Dict[str, Any] = Body(...),
    identity: Identity = Depends(require_admin),
    requests: BoardRequestService = Depends(get_board_request_service),
):
    return as_doc(requests.update(request_id, fields))


@router.post("/board-requests/{request_id}/complete")
async def complete_board_request(
    request_id: str,
    body: BoardRequestComplete,
    identity: Identity = Depends(require_admin),
    requests: BoardRequestService = Depends(get_board_request_service),
):
    return as_doc(requests.mark_completed(request_id, body.board_id))


@router.delete("/board-requests/{request_id}", status_code=204)
async def delete_board_request(
    request_id: str,
    identity: Identity = Depends(require_admin),
    requests: BoardRequestService = Depends(get_board_request_service),
):
    requests.delete(request_id)
    return Response(status_code=204)
