# src/therapy_center/services/goals.py
"""
Per-kid goals and the shared goal library.

The library is keyed by (title, categoryId). Adding a goal to a kid bumps
the matching library row's usageCount or creates the row. The lookup and
the write are separate store calls, so concurrent identical submissions
can duplicate a row or under-count; usageCount only ranks autocomplete
suggestions.
"""

import logging
from collections import Counter
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Dict, List, Mapping

from ..core.models import GOAL_CATEGORIES, GOAL_CATEGORY_IDS, Goal, GoalCategory, GoalLibraryItem
from ..core.ports.store import DocumentStorePort
from ..errors import ErrorCode, ValidationFailedError
from ..repositories import GoalCategoryRepository, GoalLibraryRepository, GoalRepository, KidRepository
from ..utils.dates import utc_now

logger = logging.getLogger(__name__)

MIN_SEARCH_LENGTH = 3
SEARCH_POOL_SIZE = 100
SEARCH_RESULT_LIMIT = 10


def check_category(category_id: Any) -> str:
    if category_id not in GOAL_CATEGORY_IDS:
        raise ValidationFailedError(f"Invalid goal category: {category_id!r}", field="categoryId")
    return category_id


def check_title(title: Any) -> str:
    if not isinstance(title, str) or not title.strip():
        raise ValidationFailedError(
            "Goal title is required", field="title", code=ErrorCode.MISSING_REQUIRED_FIELD
        )
    return title.strip()


class GoalService:
    """Kid goals, library deduplication and library management."""

    def __init__(self, store: DocumentStorePort):
        self.store = store
        self.kids = KidRepository(store)
        self.goals = GoalRepository(store)
        self.library = GoalLibraryRepository(store)
        self.categories = GoalCategoryRepository(store)

    # =============================================================================
    # KID GOALS
    # =============================================================================

    def get_goals_for_kid(self, kid_id: str) -> List[Goal]:
        return self.goals.for_kid(kid_id)

    def add_goal_to_kid(self, kid_id: str, title: Any, category_id: Any) -> Goal:
        """Write the kid's goal, then count it in the library."""
        title = check_title(title)
        category_id = check_category(category_id)
        self.kids.require(kid_id)

        goal = self.goals.create(Goal(
            kid_id=kid_id,
            category_id=category_id,
            title=title,
            is_active=True,
            created_at=utc_now(),
        ))

        item = self.library.find_by_key(title, category_id)
        if item is None:
            self.library.create(GoalLibraryItem(title=title, category_id=category_id, usage_count=1))
        else:
            self.library.update(item.id, {"usageCount": (item.usage_count or 0) + 1})

        logger.info(f"Added goal {goal.id} to kid {kid_id}")
        return goal

    def update_goal(self, goal_id: str, fields: Mapping[str, Any]) -> Goal:
        """Rename or (de)activate a goal. Deactivation stamps deactivatedAt and keeps the row."""
        self.goals.require(goal_id)
        updates: Dict[str, Any] = {}
        if "title" in fields:
            updates["title"] = check_title(fields["title"])
        if "isActive" in fields:
            updates["isActive"] = bool(fields["isActive"])
            if not updates["isActive"]:
                updates["deactivatedAt"] = utc_now()
        return self.goals.update(goal_id, updates)

    def delete_goal(self, goal_id: str) -> None:
        self.goals.delete(goal_id)

    # =============================================================================
    # LIBRARY
    # =============================================================================

    def search_goals_library(self, search: str) -> List[GoalLibraryItem]:
        """Case-insensitive substring search over the most used library titles."""
        search = (search or "").strip()
        if len(search) < MIN_SEARCH_LENGTH:
            return []
        needle = search.lower()
        pool = self.library.most_used(limit=SEARCH_POOL_SIZE)
        return [item for item in pool if needle in item.title.lower()][:SEARCH_RESULT_LIMIT]

    def get_all_goals_library(self) -> List[Dict[str, Any]]:
        """
        Every library row with activeCount and isOrphan.

        A row is orphaned when no active goal uses its (title, categoryId).
        """
        with ThreadPoolExecutor(max_workers=2) as executor:
            library_future = executor.submit(self.library.most_used)
            goals_future = executor.submit(self.goals.active)
            library = library_future.result()
            active_goals = goals_future.result()

        active_counts = Counter(goal.library_key for goal in active_goals)
        rows = []
        for item in library:
            active = active_counts.get(item.library_key, 0)
            rows.append({**item.to_doc(), "activeCount": active, "isOrphan": active == 0})
        return rows

    def add_library_item(self, title: Any, category_id: Any) -> GoalLibraryItem:
        title = check_title(title)
        category_id = check_category(category_id)
        if self.library.find_by_key(title, category_id) is not None:
            raise ValidationFailedError(
                "A library goal with this title and category already exists",
                field="title",
                code=ErrorCode.ALREADY_EXISTS,
            )
        return self.library.create(GoalLibraryItem(title=title, category_id=category_id, usage_count=0))

    def delete_library_item(self, item_id: str) -> None:
        self.library.require(item_id)
        self.library.delete(item_id)

    # =============================================================================
    # CATEGORIES
    # =============================================================================

    def get_categories(self) -> List[GoalCategory]:
        return self.categories.ordered() or sorted(GOAL_CATEGORIES, key=lambda c: c.order)

    def initialize_categories(self) -> int:
        """Write any missing fixed categories. Returns how many were created."""
        created = 0
        for category in GOAL_CATEGORIES:
            if not self.categories.exists(category.id):
                self.categories.save(category)
                created += 1
        if created:
            logger.info(f"Initialized {created} goal categories")
        return created
