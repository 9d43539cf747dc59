# src/therapy_center/repositories/goals.py
"""
Goals Repository - per-kid goals, the shared goal library and categories.
"""

from typing import List, Optional

from ..core.models import GoalCategory, Goal, GoalLibraryItem
from .base import BaseRepository, QueryOptions


class GoalRepository(BaseRepository[Goal]):
    collection = "goals"
    model = Goal
    resource = "Goal"

    def for_kid(self, kid_id: str) -> List[Goal]:
        return self.get_all(QueryOptions(filters={"kidId": kid_id}, order_by="createdAt"))

    def active(self) -> List[Goal]:
        return self.find(isActive=True)


class GoalLibraryRepository(BaseRepository[GoalLibraryItem]):
    collection = "goalsLibrary"
    model = GoalLibraryItem
    resource = "Library item"

    def find_by_key(self, title: str, category_id: str) -> Optional[GoalLibraryItem]:
        """Exact (title, category) match."""
        return self.find_one(title=title, categoryId=category_id)

    def most_used(self, limit: Optional[int] = None) -> List[GoalLibraryItem]:
        return self.get_all(QueryOptions(order_by="usageCount", order_desc=True, limit=limit))


class GoalCategoryRepository(BaseRepository[GoalCategory]):
    collection = "goalCategories"
    model = GoalCategory
    resource = "Goal category"

    def ordered(self) -> List[GoalCategory]:
        return self.get_all(QueryOptions(order_by="order"))
