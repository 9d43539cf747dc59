# src/therapy_center/api/sessions.py
"""
Sessions API - scheduling, lifecycle updates and overdue alerts.

- GET    /sessions/alerts               - overdue open sessions of the caller's kids
- GET    /kids/{kidId}/sessions         - list (status, from, to filters)
- POST   /kids/{kidId}/sessions         - schedule one session
- POST   /kids/{kidId}/sessions/recurring - schedule weekly sessions
- GET    /sessions/{sessionId}          - get
- PUT    /sessions/{sessionId}          - update (status / date / therapist / type / formId)
- DELETE /sessions/{sessionId}          - delete with its report
"""

from datetime import datetime
from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends, Query, Response

from ..services import Identity, SessionService
from .deps import get_identity, get_session_service, require_admin
from .responses import as_doc, as_docs
from .schemas import RecurringSessionsCreate, SessionCreate

router = APIRouter()


@router.get("/sessions/alerts")
async def session_alerts(
    identity: Identity = Depends(require_admin),
    sessions: SessionService = Depends(get_session_service),
):
    return as_docs(sessions.get_alerts(identity.admin_id))


@router.get("/kids/{kid_id}/sessions")
async def list_sessions(
    kid_id: str,
    status: Optional[str] = Query(None),
    date_from: Optional[datetime] = Query(None, alias="from"),
    date_to: Optional[datetime] = Query(None, alias="to"),
    identity: Identity = Depends(get_identity),
    sessions: SessionService = Depends(get_session_service),
):
    return as_docs(sessions.get_sessions_for_kid(kid_id, status=status, date_from=date_from, date_to=date_to))


@router.post("/kids/{kid_id}/sessions", status_code=201)
async def schedule_session(
    kid_id: str,
    body: SessionCreate,
    identity: Identity = Depends(require_admin),
    sessions: SessionService = Depends(get_session_service),
):
    return as_doc(sessions.schedule(kid_id, body.therapist_id, body.scheduled_date, body.type))


@router.post("/kids/{kid_id}/sessions/recurring", status_code=201)
async def schedule_recurring(
    kid_id: str,
    body: RecurringSessionsCreate,
    identity: Identity = Depends(require_admin),
    sessions: SessionService = Depends(get_session_service),
):
    created = sessions.schedule_recurring(kid_id, body.therapist_id, body.type, body.start_date, body.until)
    return as_docs(created)


@router.get("/sessions/{session_id}")
async def get_session(
    session_id: str,
    identity: Identity = Depends(get_identity),
    sessions: SessionService = Depends(get_session_service),
):
    return as_doc(sessions.get_session(session_id))


@router.put("/sessions/{session_id}")
async def update_session(
    session_id: str,
    fields: Dict[str, Any] = Body(...),
    identity: Identity = Depends(require_admin),
    sessions: SessionService = Depends(get_session_service),
):
    # Unknown keys are dropped by the service whitelist
    return as_doc(sessions.update_session(session_id, fields))


@router.delete("/sessions/{session_id}", status_code=204)
async def delete_session(
    session_id: str,
    identity: Identity = Depends(require_admin),
    sessions: SessionService = Depends(get_session_service),
):
    sessions.delete_session(session_id)
    return Response(status_code=204)
