# src/therapy_center/repositories/kids.py
"""
Kids Repository - kids, parents, practitioners and kid/practitioner links.
"""

from typing import List, Optional

from ..core.models import Kid, KidPractitioner, Parent, Practitioner
from .base import BaseRepository, QueryOptions


class KidRepository(BaseRepository[Kid]):
    collection = "kids"
    model = Kid
    resource = "Kid"

    def for_admin(self, admin_id: Optional[str]) -> List[Kid]:
        """Kids owned by an admin; None lists unassigned kids."""
        return self.get_all(QueryOptions(filters={"adminId": admin_id}, order_by="name"))


class ParentRepository(BaseRepository[Parent]):
    collection = "parents"
    model = Parent
    resource = "Parent"

    def for_kid(self, kid_id: str) -> List[Parent]:
        return self.find(kidId=kid_id)


class PractitionerRepository(BaseRepository[Practitioner]):
    collection = "practitioners"
    model = Practitioner
    resource = "Practitioner"

    def created_by(self, admin_id: str, type: Optional[str] = None) -> List[Practitioner]:
        filters = {"createdBy": admin_id}
        if type is not None:
            filters["type"] = type
        return self.get_all(QueryOptions(filters=filters))


class KidPractitionerRepository(BaseRepository[KidPractitioner]):
    collection = "kidPractitioners"
    model = KidPractitioner
    resource = "Practitioner link"

    def for_kid(self, kid_id: str) -> List[KidPractitioner]:
        return self.find(kidId=kid_id)

    def for_practitioner(self, practitioner_id: str) -> List[KidPractitioner]:
        return self.find(practitionerId=practitioner_id)

    def find_link(self, kid_id: str, practitioner_id: str) -> Optional[KidPractitioner]:
        return self.find_one(kidId=kid_id, practitionerId=practitioner_id)
