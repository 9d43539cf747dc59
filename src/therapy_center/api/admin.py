# src/therapy_center/api/admin.py
"""
Admin API - mounted under /api/admin.

- GET    /me            - who am I (any valid credentials)
- GET    /list          - center admins (super admin)
- POST   /create-key    - new center admin (super admin)
- POST   /change-key    - rotate the caller's own key
- DELETE /{adminId}     - remove a center admin (super admin)
"""

from fastapi import APIRouter, Depends, Response

from ..services import AdminService, Identity
from .deps import get_admin_service, get_identity, require_admin, require_super_admin
from .responses import as_doc
from .schemas import AdminCreate, KeyChange

router = APIRouter()


@router.get("/me")
async def me(identity: Identity = Depends(get_identity)):
    return {
        "authType": identity.auth_type,
        "adminId": identity.admin_id,
        "isSuperAdmin": identity.is_super_admin,
        "name": identity.name,
        "practitionerId": identity.practitioner_id,
        "kidId": identity.kid_id,
    }


@router.get("/list")
async def list_admins(
    identity: Identity = Depends(require_super_admin),
    admins: AdminService = Depends(get_admin_service),
):
    return admins.list_admins()


@router.post("/create-key", status_code=201)
async def create_key(
    body: AdminCreate,
    identity: Identity = Depends(require_super_admin),
    admins: AdminService = Depends(get_admin_service),
):
    record = admins.create_admin_key(
        body.name,
        body.key,
        created_by=identity.admin_id,
        mobile=body.mobile,
        email=body.email,
    )
    return as_doc(record)


@router.post("/change-key")
async def change_key(
    body: KeyChange,
    identity: Identity = Depends(require_admin),
    admins: AdminService = Depends(get_admin_service),
):
    return as_doc(admins.change_key(identity.admin_id, body.new_key))


@router.delete("/{admin_id}", status_code=204)
async def delete_admin(
    admin_id: str,
    identity: Identity = Depends(require_super_admin),
    admins: AdminService = Depends(get_admin_service),
):
    admins.delete_admin(admin_id, identity.admin_id)
    return Response(status_code=204)
