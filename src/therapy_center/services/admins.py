# src/therapy_center/services/admins.py
"""
Admin access keys and caller identity.

Callers authenticate with one of three headers:
- X-Admin-Key: shared-secret key of a center admin (full access)
- X-Practitioner-Id: a therapist, scoped to the admin who created them
- X-Kid-Id: a parent viewing one kid, read-only
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from ..core.models import AdminKey, Practitioner, PractitionerType
from ..core.ports.store import DocumentStorePort
from ..errors import ErrorCode, NotFoundError, UnauthorizedError, ValidationFailedError
from ..repositories import AdminKeyRepository, KidRepository, PractitionerRepository
from ..utils.dates import utc_now

logger = logging.getLogger(__name__)

MIN_KEY_LENGTH = 4

AUTH_ADMIN = "admin"
AUTH_THERAPIST = "therapist"
AUTH_PARENT = "parent"


@dataclass
class Identity:
    """The resolved caller of a request."""
    auth_type: str
    admin_id: Optional[str]
    is_super_admin: bool = False
    name: Optional[str] = None
    practitioner_id: Optional[str] = None
    kid_id: Optional[str] = None

    @property
    def is_admin(self) -> bool:
        return self.auth_type == AUTH_ADMIN


def _check_key(key: Any) -> str:
    key = key.strip() if isinstance(key, str) else ""
    if not key:
        raise ValidationFailedError("Access key is required", field="key", code=ErrorCode.MISSING_REQUIRED_FIELD)
    if len(key) < MIN_KEY_LENGTH:
        raise ValidationFailedError(
            f"Access key must be at least {MIN_KEY_LENGTH} characters", field="key"
        )
    return key


class AdminService:
    """Access key lookup and center admin management."""

    def __init__(self, store: DocumentStorePort):
        self.store = store
        self.keys = AdminKeyRepository(store)
        self.practitioners = PractitionerRepository(store)
        self.kids = KidRepository(store)

    # =============================================================================
    # AUTHENTICATION
    # =============================================================================

    def resolve_identity(
        self,
        admin_key: Optional[str] = None,
        practitioner_id: Optional[str] = None,
        kid_id: Optional[str] = None,
    ) -> Identity:
        """Resolve request credentials; the admin key wins when several are sent."""
        if admin_key:
            record = self.keys.find_by_key(admin_key)
            if record is None:
                raise UnauthorizedError("Invalid access key", code=ErrorCode.AUTH_INVALID)
            if record.active is False:
                raise UnauthorizedError("Access key is inactive", code=ErrorCode.AUTH_INVALID)
            return Identity(
                auth_type=AUTH_ADMIN,
                admin_id=record.admin_id,
                is_super_admin=bool(record.is_super_admin),
                name=record.name,
            )

        if practitioner_id:
            practitioner = self.practitioners.get_by_id(practitioner_id)
            if practitioner is None:
                raise UnauthorizedError("Invalid practitioner", code=ErrorCode.AUTH_INVALID)
            return Identity(
                auth_type=AUTH_THERAPIST,
                admin_id=practitioner.created_by,
                name=practitioner.name,
                practitioner_id=practitioner_id,
            )

        if kid_id:
            kid = self.kids.get_by_id(kid_id)
            if kid is None:
                raise NotFoundError("Kid", kid_id)
            return Identity(auth_type=AUTH_PARENT, admin_id=kid.admin_id, kid_id=kid_id)

        raise UnauthorizedError("Missing access credentials", code=ErrorCode.AUTH_REQUIRED)

    # =============================================================================
    # ADMIN MANAGEMENT
    # =============================================================================

    def create_admin_key(
        self,
        name: Any,
        key: Any,
        created_by: Optional[str],
        mobile: Optional[str] = None,
        email: Optional[str] = None,
        is_super_admin: bool = False,
    ) -> AdminKey:
        """Create a center admin: an access key plus the admin's practitioner profile."""
        name = name.strip() if isinstance(name, str) else ""
        if not name:
            raise ValidationFailedError("Name is required", field="name", code=ErrorCode.MISSING_REQUIRED_FIELD)
        key = _check_key(key)
        if self.keys.find_by_key(key) is not None:
            raise ValidationFailedError("Access key already in use", field="key", code=ErrorCode.ALREADY_EXISTS)

        now = utc_now()
        admin_id = self.store.new_id()
        record = self.keys.create(AdminKey(
            key=key,
            admin_id=admin_id,
            name=name,
            is_super_admin=is_super_admin,
            active=True,
            created_at=now,
            created_by=created_by,
        ))
        self.practitioners.save(Practitioner(
            id=admin_id,
            name=name,
            mobile=(mobile or "").strip(),
            email=(email or "").strip(),
            type=PractitionerType.BEHAVIOR_ANALYST.value,
            is_super_admin=is_super_admin,
            created_at=now,
            created_by=created_by,
        ))
        logger.info(f"Created center admin {admin_id}")
        return record

    def list_admins(self) -> List[Dict[str, Any]]:
        """Center admins (not super admins) with their contact details."""
        admins = []
        for record in self.keys.center_admins():
            profile = self.practitioners.get_by_id(record.admin_id)
            admins.append({
                "docId": record.id,
                "adminId": record.admin_id,
                "name": record.name,
                "key": record.key,
                "active": record.active,
                "mobile": (profile.mobile if profile else None) or "",
                "email": (profile.email if profile else None) or "",
                "createdAt": record.created_at,
            })
        return admins

    def delete_admin(self, admin_id: str, caller_id: Optional[str]) -> None:
        """Remove an admin's keys and practitioner profile. Admins cannot delete themselves."""
        if admin_id == caller_id:
            raise ValidationFailedError("Cannot delete yourself", field="adminId")
        refs = [self.keys.ref(record.id) for record in self.keys.for_admin(admin_id)]
        refs.append(self.practitioners.ref(admin_id))
        self.store.delete_all(refs)
        logger.info(f"Deleted admin {admin_id}")

    def change_key(self, admin_id: str, new_key: Any) -> AdminKey:
        new_key = _check_key(new_key)
        existing = self.keys.find_by_key(new_key)
        if existing is not None and existing.admin_id != admin_id:
            raise ValidationFailedError("Access key already in use", field="newKey", code=ErrorCode.ALREADY_EXISTS)

        records = self.keys.for_admin(admin_id)
        if not records:
            raise NotFoundError("Admin key", admin_id)
        return self.keys.update(records[0].id, {"key": new_key})

    def initialize_super_admin(self, key: str, name: str = "Super Admin") -> Optional[AdminKey]:
        """Create the bootstrap super admin key if no key with this value exists yet."""
        if not key or self.keys.find_by_key(key) is not None:
            return None
        record = self.create_admin_key(name, key, created_by=None, is_super_admin=True)
        logger.info("Created bootstrap super admin")
        return record
