# src/therapy_center/services/team.py
"""
Practitioners, kid/practitioner links and parents.
"""

import logging
from typing import Any, List, Mapping, Optional

from ..core.models import Kid, KidPractitioner, LinkRole, Parent, Practitioner, PractitionerType
from ..core.ports.store import DocumentStorePort
from ..errors import ErrorCode, ValidationFailedError
from ..repositories import KidPractitionerRepository, KidRepository, ParentRepository, PractitionerRepository
from ..utils.dates import utc_now

logger = logging.getLogger(__name__)

PRACTITIONER_FIELDS = ("name", "mobile", "email", "type")
PARENT_FIELDS = ("name", "mobile", "email")


def link_role(practitioner_type: str) -> str:
    if practitioner_type == PractitionerType.THERAPIST.value:
        return LinkRole.THERAPIST.value
    return LinkRole.ADMIN.value


def _require_name(data: Mapping[str, Any]) -> str:
    name = (data.get("name") or "").strip()
    if not name:
        raise ValidationFailedError("Name is required", field="name", code=ErrorCode.MISSING_REQUIRED_FIELD)
    return name


def _check_type(practitioner_type: str) -> str:
    valid = {t.value for t in PractitionerType}
    if practitioner_type not in valid:
        raise ValidationFailedError(f"Invalid practitioner type: {practitioner_type!r}", field="type")
    return practitioner_type


class TeamService:
    """The people around a kid: practitioners (shared across kids) and parents."""

    def __init__(self, store: DocumentStorePort):
        self.store = store
        self.kids = KidRepository(store)
        self.practitioners = PractitionerRepository(store)
        self.links = KidPractitionerRepository(store)
        self.parents = ParentRepository(store)

    # =============================================================================
    # PRACTITIONERS
    # =============================================================================

    def get_practitioner(self, practitioner_id: str) -> Practitioner:
        return self.practitioners.require(practitioner_id)

    def get_practitioners_for_kid(self, kid_id: str) -> List[Practitioner]:
        practitioners = []
        for link in self.links.for_kid(kid_id):
            practitioner = self.practitioners.get_by_id(link.practitioner_id)
            if practitioner is not None:
                practitioners.append(practitioner)
        return practitioners

    def add_practitioner_to_kid(
        self, kid_id: str, data: Mapping[str, Any], added_by: Optional[str]
    ) -> Practitioner:
        """Create a practitioner and link it to the kid."""
        self.kids.require(kid_id)
        practitioner = self.practitioners.create(Practitioner(
            name=_require_name(data),
            mobile=data.get("mobile") or None,
            email=data.get("email") or None,
            type=_check_type(data.get("type") or PractitionerType.THERAPIST.value),
            is_super_admin=False,
            created_at=utc_now(),
            created_by=added_by,
        ))
        self._link(kid_id, practitioner, added_by)
        logger.info(f"Added practitioner {practitioner.id} to kid {kid_id}")
        return practitioner

    def link_existing_practitioner(
        self, kid_id: str, practitioner_id: str, added_by: Optional[str]
    ) -> Practitioner:
        self.kids.require(kid_id)
        practitioner = self.practitioners.require(practitioner_id)
        if self.links.find_link(kid_id, practitioner_id) is not None:
            raise ValidationFailedError(
                "Practitioner is already linked to this kid",
                field="practitionerId",
                code=ErrorCode.ALREADY_EXISTS,
            )
        self._link(kid_id, practitioner, added_by)
        return practitioner

    def _link(self, kid_id: str, practitioner: Practitioner, added_by: Optional[str]) -> KidPractitioner:
        return self.links.create(KidPractitioner(
            kid_id=kid_id,
            practitioner_id=practitioner.id,
            role=link_role(practitioner.type),
            added_at=utc_now(),
            added_by=added_by,
        ))

    def unlink_practitioner(self, kid_id: str, practitioner_id: str) -> None:
        refs = [self.links.ref(link.id) for link in self.links.find(kidId=kid_id, practitionerId=practitioner_id)]
        self.store.delete_all(refs)

    def update_practitioner(self, practitioner_id: str, fields: Mapping[str, Any]) -> Practitioner:
        self.practitioners.require(practitioner_id)
        updates = {k: fields[k] for k in PRACTITIONER_FIELDS if k in fields}
        if "name" in updates:
            updates["name"] = _require_name(updates)
        if "type" in updates:
            _check_type(updates["type"])
        return self.practitioners.update(practitioner_id, updates)

    def delete_practitioner(self, practitioner_id: str) -> None:
        """Delete a practitioner and its kid links in one batch. Kids are untouched."""
        refs = [self.links.ref(link.id) for link in self.links.for_practitioner(practitioner_id)]
        refs.append(self.practitioners.ref(practitioner_id))
        self.store.delete_all(refs)
        logger.info(f"Deleted practitioner {practitioner_id} and {len(refs) - 1} link(s)")

    def get_kids_for_practitioner(self, practitioner_id: str) -> List[Kid]:
        kids = []
        for link in self.links.for_practitioner(practitioner_id):
            kid = self.kids.get_by_id(link.kid_id)
            if kid is not None:
                kids.append(kid)
        return kids

    def get_my_therapists(self, admin_id: str) -> List[Practitioner]:
        """Therapists created by an admin."""
        return self.practitioners.created_by(admin_id, type=PractitionerType.THERAPIST.value)

    # =============================================================================
    # PARENTS
    # =============================================================================

    def get_parents_for_kid(self, kid_id: str) -> List[Parent]:
        return self.parents.for_kid(kid_id)

    def add_parent_to_kid(self, kid_id: str, data: Mapping[str, Any]) -> Parent:
        self.kids.require(kid_id)
        parent = self.parents.create(Parent(
            kid_id=kid_id,
            name=_require_name(data),
            mobile=data.get("mobile") or None,
            email=data.get("email") or None,
            created_at=utc_now(),
        ))
        logger.info(f"Added parent {parent.id} to kid {kid_id}")
        return parent

    def update_parent(self, parent_id: str, fields: Mapping[str, Any]) -> Parent:
        self.parents.require(parent_id)
        updates = {k: fields[k] for k in PARENT_FIELDS if k in fields}
        if "name" in updates:
            updates["name"] = _require_name(updates)
        return self.parents.update(parent_id, updates)

    def delete_parent(self, parent_id: str) -> None:
        self.parents.delete(parent_id)
