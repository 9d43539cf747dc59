# src/therapy_center/api/team.py
"""
Team API - practitioners and parents.
"""

from fastapi import APIRouter, Depends, Response

from ..services import Identity, TeamService
from .deps import get_identity, get_team_service, require_admin
from .responses import as_doc, as_docs
from .schemas import ParentCreate, ParentUpdate, PractitionerCreate, PractitionerLink, PractitionerUpdate

router = APIRouter()


# =============================================================================
# PRACTITIONERS
# =============================================================================

@router.get("/kids/{kid_id}/practitioners")
async def list_kid_practitioners(
    kid_id: str,
    identity: Identity = Depends(get_identity),
    team: TeamService = Depends(get_team_service),
):
    return as_docs(team.get_practitioners_for_kid(kid_id))


@router.post("/kids/{kid_id}/practitioners", status_code=201)
async def add_practitioner(
    kid_id: str,
    body: PractitionerCreate,
    identity: Identity = Depends(require_admin),
    team: TeamService = Depends(get_team_service),
):
    return as_doc(team.add_practitioner_to_kid(kid_id, body.to_fields(), identity.admin_id))


@router.post("/kids/{kid_id}/practitioners/link", status_code=201)
async def link_practitioner(
    kid_id: str,
    body: PractitionerLink,
    identity: Identity = Depends(require_admin),
    team: TeamService = Depends(get_team_service),
):
    return as_doc(team.link_existing_practitioner(kid_id, body.practitioner_id, identity.admin_id))


@router.delete("/kids/{kid_id}/practitioners/{practitioner_id}", status_code=204)
async def unlink_practitioner(
    kid_id: str,
    practitioner_id: str,
    identity: Identity = Depends(require_admin),
    team: TeamService = Depends(get_team_service),
):
    team.unlink_practitioner(kid_id, practitioner_id)
    return Response(status_code=204)


@router.get("/practitioners/my-therapists")
async def my_therapists(
    identity: Identity = Depends(require_admin),
    team: TeamService = Depends(get_team_service),
):
    return as_docs(team.get_my_therapists(identity.admin_id))


@router.get("/practitioners/{practitioner_id}")
async def get_practitioner(
    practitioner_id: str,
    identity: Identity = Depends(get_identity),
    team: TeamService = Depends(get_team_service),
):
    return as_doc(team.get_practitioner(practitioner_id))


@router.get("/practitioners/{practitioner_id}/kids")
async def practitioner_kids(
    practitioner_id: str,
    identity: Identity = Depends(get_identity),
    team: TeamService = Depends(get_team_service),
):
    return as_docs(team.get_kids_for_practitioner(practitioner_id))


@router.put("/practitioners/{practitioner_id}")
async def update_practitioner(
    practitioner_id: str,
    body: PractitionerUpdate,
    identity: Identity = Depends(require_admin),
    team: TeamService = Depends(get_team_service),
):
    return as_doc(team.update_practitioner(practitioner_id, body.to_fields()))


@router.delete("/practitioners/{practitioner_id}", status_code=204)
async def delete_practitioner(
    practitioner_id: str,
    identity: Identity = Depends(require_admin),
    team: TeamService = Depends(get_team_service),
):
    team.delete_practitioner(practitioner_id)
    return Response(status_code=204)


# =============================================================================
# PARENTS
# =============================================================================

@router.get("/kids/{kid_id}/parents")
async def list_parents(
    kid_id: str,
    identity: Identity = Depends(get_identity),
    team: TeamService = Depends(get_team_service),
):
    return as_docs(team.get_parents_for_kid(kid_id))


@router.post("/kids/{kid_id}/parents", status_code=201)
async def add_parent(
    kid_id: str,
    body: ParentCreate,
    identity: Identity = Depends(require_admin),
    team: TeamService = Depends(get_team_service),
):
    return as_doc(team.add_parent_to_kid(kid_id, body.to_fields()))


@router.put("/parents/{parent_id}")
async def update_parent(
    parent_id: str,
    body: ParentUpdate,
    identity: Identity = Depends(require_admin),
    team: TeamService = Depends(get_team_service),
):
    return as_doc(team.update_parent(parent_id, body.to_fields()))


@router.delete("/parents/{parent_id}", status_code=204)
async def delete_parent(
    parent_id: str,
    identity: Identity = Depends(require_admin),
    team: TeamService = Depends(get_team_service),
):
    team.delete_parent(parent_id)
    return Response(status_code=204)
