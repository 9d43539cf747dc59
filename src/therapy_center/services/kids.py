# src/therapy_center/services/kids.py
"""
Kid profiles: ownership (attach/detach), updates and cascade deletion.
"""

import logging
import re
from typing import Any, Dict, List, Mapping, Optional

from ..core.models import Kid
from ..core.ports.store import DocumentRef, DocumentStorePort
from ..errors import ErrorCode, UnauthorizedError, ValidationFailedError
from ..repositories import (
    FormTokenRepository,
    GoalRepository,
    KidPractitionerRepository,
    KidRepository,
    MeetingFormRepository,
    NotificationRepository,
    ParentRepository,
    SessionFormRepository,
    SessionRepository,
)
from ..utils.dates import utc_now

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = ("name", "age", "gender", "imageName")

# Set by dedicated operations only
PROTECTED_FIELDS = ("id", "adminId", "formTemplate", "createdAt", "updatedAt")


def normalize_kid_id(name: str) -> str:
    """Lowercase, drop punctuation, join words with dashes. Hebrew letters are kept."""
    slug = re.sub(r"[^\w\s-]", "", name.strip().lower())
    return re.sub(r"[\s_-]+", "-", slug).strip("-")


class KidService:
    """Kid profiles and their cascade deletion."""

    def __init__(self, store: DocumentStorePort):
        self.store = store
        self.kids = KidRepository(store)
        self.parents = ParentRepository(store)
        self.links = KidPractitionerRepository(store)
        self.goals = GoalRepository(store)
        self.sessions = SessionRepository(store)
        self.forms = SessionFormRepository(store)
        self.meeting_forms = MeetingFormRepository(store)
        self.notifications = NotificationRepository(store)
        self.tokens = FormTokenRepository(store)

    # --- Read ---

    def get_kid(self, kid_id: str) -> Kid:
        return self.kids.require(kid_id)

    def get_kids_for_admin(self, admin_id: str) -> List[Kid]:
        return self.kids.for_admin(admin_id)

    def get_grouped_kids(self, admin_id: str) -> Dict[str, List[Kid]]:
        """All kids split by owner, for the super admin view."""
        groups: Dict[str, List[Kid]] = {"myKids": [], "orphanKids": [], "otherAdminKids": []}
        for kid in sorted(self.kids.get_all(), key=lambda k: k.name):
            if kid.admin_id == admin_id:
                groups["myKids"].append(kid)
            elif not kid.admin_id:
                groups["orphanKids"].append(kid)
            else:
                groups["otherAdminKids"].append(kid)
        return groups

    # --- Write ---

    def create_kid(self, data: Mapping[str, Any], admin_id: Optional[str]) -> Kid:
        """Create a kid owned by admin_id. The id is derived from the name."""
        name = (data.get("name") or "").strip()
        if not name:
            raise ValidationFailedError(
                "Kid name is required", field="name", code=ErrorCode.MISSING_REQUIRED_FIELD
            )

        now = utc_now()
        fields = {k: v for k, v in data.items() if k not in PROTECTED_FIELDS}
        kid = Kid.from_doc(fields)
        kid.id = self._unique_id(name)
        kid.name = name
        kid.admin_id = admin_id or None
        kid.created_at = now
        kid.updated_at = now

        kid = self.kids.create(kid)
        logger.info(f"Created kid {kid.id} for admin {admin_id}")
        return kid

    def _unique_id(self, name: str) -> str:
        base = normalize_kid_id(name) or self.store.new_id()
        candidate, suffix = base, 2
        while self.kids.exists(candidate):
            candidate = f"{base}-{suffix}"
            suffix += 1
        return candidate

    def update_kid(self, kid_id: str, fields: Mapping[str, Any]) -> Kid:
        self.kids.require(kid_id)
        updates = {k: fields[k] for k in UPDATABLE_FIELDS if k in fields}
        if "name" in updates:
            updates["name"] = (updates["name"] or "").strip()
            if not updates["name"]:
                raise ValidationFailedError("Kid name cannot be empty", field="name")
        updates["updatedAt"] = utc_now()
        return self.kids.update(kid_id, updates)

    def attach_kid(self, kid_id: str, admin_id: str) -> Kid:
        """Take ownership of an unassigned kid."""
        kid = self.kids.require(kid_id)
        if kid.admin_id:
            logger.warning(f"Admin {admin_id} tried to attach kid {kid_id} owned by {kid.admin_id}")
            raise UnauthorizedError("Kid already belongs to an admin")
        return self.kids.update(kid_id, {"adminId": admin_id, "updatedAt": utc_now()})

    def detach_kid(self, kid_id: str, admin_id: str) -> Kid:
        """Release ownership; only the owning admin may do this."""
        kid = self.kids.require(kid_id)
        if kid.admin_id != admin_id:
            logger.warning(f"Admin {admin_id} tried to detach kid {kid_id} owned by {kid.admin_id}")
            raise UnauthorizedError("Only the owning admin can detach this kid")
        return self.kids.update(kid_id, {"adminId": None, "updatedAt": utc_now()})

    def delete_kid(self, kid_id: str) -> int:
        """
        Delete a kid and everything it owns.

        Practitioners stay; only their links to this kid go. Deletion runs in
        sequential batches, so a failure part way leaves earlier batches applied.
        Returns the number of documents deleted.
        """
        self.kids.require(kid_id)

        refs: List[DocumentRef] = []
        for repo in (self.sessions, self.forms, self.meeting_forms, self.goals,
                     self.parents, self.links, self.notifications, self.tokens):
            refs.extend(repo.ref(doc.id) for doc in repo.find(kidId=kid_id))
        refs.append(self.kids.ref(kid_id))

        deleted = self.store.delete_all(refs)
        logger.info(f"Deleted kid {kid_id} with {deleted - 1} owned documents")
        return deleted
