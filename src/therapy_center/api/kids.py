# src/therapy_center/api/kids.py
"""
Kids API - profiles, ownership and report templates.

- GET    /kids                          - kids of the caller's admin (grouped for super admins)
- POST   /kids                          - create
- GET    /kids/{kidId}                  - get
- PUT    /kids/{kidId}                  - update name/age/gender/image
- DELETE /kids/{kidId}                  - delete with everything the kid owns
- POST   /kids/{kidId}/attach           - take ownership of an unassigned kid
- POST   /kids/{kidId}/detach           - release ownership
- GET    /kids/{kidId}/form-template    - report template (default when unset)
- PUT    /kids/{kidId}/form-template    - replace report template
"""

from typing import Any, Dict, List

from fastapi import APIRouter, Body, Depends, Query, Response

from ..services import FormService, Identity, KidService
from .deps import get_form_service, get_identity, get_kid_service, require_admin
from .responses import as_doc, as_docs
from .schemas import KidCreate, KidUpdate

router = APIRouter()


@router.get("/kids")
async def list_kids(
    grouped: bool = Query(False, description="Super admins: split into mine/unassigned/others"),
    identity: Identity = Depends(get_identity),
    kids: KidService = Depends(get_kid_service),
):
    if grouped and identity.is_super_admin:
        return {name: as_docs(group) for name, group in kids.get_grouped_kids(identity.admin_id).items()}
    return as_docs(kids.get_kids_for_admin(identity.admin_id))


@router.post("/kids", status_code=201)
async def create_kid(
    body: KidCreate,
    identity: Identity = Depends(require_admin),
    kids: KidService = Depends(get_kid_service),
):
    return as_doc(kids.create_kid(body.to_fields(), identity.admin_id))


@router.get("/kids/{kid_id}")
async def get_kid(
    kid_id: str,
    identity: Identity = Depends(get_identity),
    kids: KidService = Depends(get_kid_service),
):
    return as_doc(kids.get_kid(kid_id))


@router.put("/kids/{kid_id}")
async def update_kid(
    kid_id: str,
    body: KidUpdate,
    identity: Identity = Depends(require_admin),
    kids: KidService = Depends(get_kid_service),
):
    return as_doc(kids.update_kid(kid_id, body.to_fields()))


@router.delete("/kids/{kid_id}", status_code=204)
async def delete_kid(
    kid_id: str,
    identity: Identity = Depends(require_admin),
    kids: KidService = Depends(get_kid_service),
):
    kids.delete_kid(kid_id)
    return Response(status_code=204)


@router.post("/kids/{kid_id}/attach")
async def attach_kid(
    kid_id: str,
    identity: Identity = Depends(require_admin),
    kids: KidService = Depends(get_kid_service),
):
    return as_doc(kids.attach_kid(kid_id, identity.admin_id))


@router.post("/kids/{kid_id}/detach")
async def detach_kid(
    kid_id: str,
    identity: Identity = Depends(require_admin),
    kids: KidService = Depends(get_kid_service),
):
    return as_doc(kids.detach_kid(kid_id, identity.admin_id))


@router.get("/kids/{kid_id}/form-template")
async def get_form_template(
    kid_id: str,
    identity: Identity = Depends(get_identity),
    forms: FormService = Depends(get_form_service),
):
    return as_docs(forms.get_form_template(kid_id))


@router.put("/kids/{kid_id}/form-template")
async def update_form_template(
    kid_id: str,
    sections: List[Dict[str, Any]] = Body(...),
    identity: Identity = Depends(require_admin),
    forms: FormService = Depends(get_form_service),
):
    return as_docs(forms.update_form_template(kid_id, sections))
