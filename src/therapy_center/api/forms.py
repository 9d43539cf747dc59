# src/therapy_center/api/forms.py
"""
Forms API - session reports, meeting reports and form links.

Submitting a report always leaves its session `completed` with the formId
stamped; deleting a report reopens the session.
"""

from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query, Response

from ..errors import NotFoundError
from ..services import FormService, Identity
from .deps import get_form_service, get_identity, require_admin, require_staff
from .responses import as_doc, as_docs
from .schemas import FormIn, FormLinkCreate, MeetingFormIn

router = APIRouter()


# =============================================================================
# SESSION REPORTS
# =============================================================================

@router.post("/forms/create-link", status_code=201)
async def create_form_link(
    body: FormLinkCreate,
    identity: Identity = Depends(require_admin),
    forms: FormService = Depends(get_form_service),
):
    return forms.create_form_link(body.kid_id, body.session_id)


@router.get("/kids/{kid_id}/forms")
async def list_forms(
    kid_id: str,
    week_of: Optional[datetime] = Query(None, alias="weekOf"),
    identity: Identity = Depends(get_identity),
    forms: FormService = Depends(get_form_service),
):
    return as_docs(forms.get_forms_for_kid(kid_id, week_of=week_of))


@router.post("/forms", status_code=201)
async def submit_form(
    body: FormIn,
    identity: Identity = Depends(require_staff),
    forms: FormService = Depends(get_form_service),
):
    data = body.to_fields()
    if identity.practitioner_id and not data.get("practitionerId"):
        data["practitionerId"] = identity.practitioner_id
    return as_doc(forms.submit_form(data))


@router.get("/forms/{form_id}")
async def get_form(
    form_id: str,
    identity: Identity = Depends(get_identity),
    forms: FormService = Depends(get_form_service),
):
    return as_doc(forms.get_form(form_id))


@router.put("/forms/{form_id}")
async def update_form(
    form_id: str,
    body: FormIn,
    identity: Identity = Depends(require_staff),
    forms: FormService = Depends(get_form_service),
):
    return as_doc(forms.update_form(form_id, body.to_fields()))


@router.delete("/forms/{form_id}", status_code=204)
async def delete_form(
    form_id: str,
    identity: Identity = Depends(require_admin),
    forms: FormService = Depends(get_form_service),
):
    forms.delete_form(form_id)
    return Response(status_code=204)


@router.get("/sessions/{session_id}/form")
async def get_session_form(
    session_id: str,
    identity: Identity = Depends(get_identity),
    forms: FormService = Depends(get_form_service),
):
    form = forms.get_form_for_session(session_id)
    if form is None:
        form = forms.get_meeting_form_for_session(session_id)
    if form is None:
        raise NotFoundError("Form for session", session_id)
    return as_doc(form)


# =============================================================================
# MEETING REPORTS
# =============================================================================

@router.get("/kids/{kid_id}/meeting-forms")
async def list_meeting_forms(
    kid_id: str,
    week_of: Optional[datetime] = Query(None, alias="weekOf"),
    identity: Identity = Depends(get_identity),
    forms: FormService = Depends(get_form_service),
):
    return as_docs(forms.get_meeting_forms_for_kid(kid_id, week_of=week_of))


@router.post("/meeting-forms", status_code=201)
async def submit_meeting_form(
    body: MeetingFormIn,
    identity: Identity = Depends(require_staff),
    forms: FormService = Depends(get_form_service),
):
    return as_doc(forms.submit_meeting_form(body.to_fields()))


@router.get("/meeting-forms/{form_id}")
async def get_meeting_form(
    form_id: str,
    identity: Identity = Depends(get_identity),
    forms: FormService = Depends(get_form_service),
):
    return as_doc(forms.get_meeting_form(form_id))


@router.put("/meeting-forms/{form_id}")
async def update_meeting_form(
    form_id: str,
    body: MeetingFormIn,
    identity: Identity = Depends(require_staff),
    forms: FormService = Depends(get_form_service),
):
    return as_doc(forms.update_meeting_form(form_id, body.to_fields()))


@router.delete("/meeting-forms/{form_id}", status_code=204)
async def delete_meeting_form(
    form_id: str,
    identity: Identity = Depends(require_admin),
    forms: FormService = Depends(get_form_service),
):
    forms.delete_meeting_form(form_id)
    return Response(status_code=204)
