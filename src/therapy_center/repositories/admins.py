# src/therapy_center/repositories/admins.py
"""
Admin Keys and Board Requests repositories.
"""

from typing import List, Optional

from ..core.models import AdminKey, BoardRequest
from .base import BaseRepository, QueryOptions


class AdminKeyRepository(BaseRepository[AdminKey]):
    collection = "adminKeys"
    model = AdminKey
    resource = "Admin key"

    def find_by_key(self, key: str) -> Optional[AdminKey]:
        return self.find_one(key=key)

    def for_admin(self, admin_id: str) -> List[AdminKey]:
        return self.find(adminId=admin_id)

    def center_admins(self) -> List[AdminKey]:
        """Keys of regular (non-super) admins."""
        return self.get_all(QueryOptions(filters={"isSuperAdmin": False}, order_by="createdAt"))


class BoardRequestRepository(BaseRepository[BoardRequest]):
    collection = "boardRequests"
    model = BoardRequest
    resource = "Board request"

    def newest_first(self) -> List[BoardRequest]:
        return self.get_all(QueryOptions(order_by="submittedAt", order_desc=True))
