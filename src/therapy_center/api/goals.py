# src/therapy_center/api/goals.py
"""
Goals API - kid goals, goal library and categories.
"""

from fastapi import APIRouter, Depends, Query, Response

from ..services import GoalService, Identity
from .deps import get_goal_service, get_identity, require_admin
from .responses import as_doc, as_docs
from .schemas import GoalCreate, GoalUpdate, LibraryItemCreate

router = APIRouter()


@router.get("/goals/categories")
async def list_categories(
    identity: Identity = Depends(get_identity),
    goals: GoalService = Depends(get_goal_service),
):
    return as_docs(goals.get_categories())


@router.get("/goals/library")
async def search_library(
    search: str = Query("", description="At least 3 characters"),
    identity: Identity = Depends(get_identity),
    goals: GoalService = Depends(get_goal_service),
):
    return as_docs(goals.search_goals_library(search))


@router.get("/goals/library/all")
async def list_library(
    identity: Identity = Depends(require_admin),
    goals: GoalService = Depends(get_goal_service),
):
    return goals.get_all_goals_library()


@router.post("/goals/library/items", status_code=201)
async def add_library_item(
    body: LibraryItemCreate,
    identity: Identity = Depends(require_admin),
    goals: GoalService = Depends(get_goal_service),
):
    return as_doc(goals.add_library_item(body.title, body.category_id))


@router.delete("/goals/library/items/{item_id}", status_code=204)
async def delete_library_item(
    item_id: str,
    identity: Identity = Depends(require_admin),
    goals: GoalService = Depends(get_goal_service),
):
    goals.delete_library_item(item_id)
    return Response(status_code=204)


@router.get("/kids/{kid_id}/goals")
async def list_kid_goals(
    kid_id: str,
    identity: Identity = Depends(get_identity),
    goals: GoalService = Depends(get_goal_service),
):
    return as_docs(goals.get_goals_for_kid(kid_id))


@router.post("/kids/{kid_id}/goals", status_code=201)
async def add_goal(
    kid_id: str,
    body: GoalCreate,
    identity: Identity = Depends(require_admin),
    goals: GoalService = Depends(get_goal_service),
):
    return as_doc(goals.add_goal_to_kid(kid_id, body.title, body.category_id))


@router.put("/goals/{goal_id}")
async def update_goal(
    goal_id: str,
    body: GoalUpdate,
    identity: Identity = Depends(require_admin),
    goals: GoalService = Depends(get_goal_service),
):
    return as_doc(goals.update_goal(goal_id, body.to_fields()))


@router.delete("/goals/{goal_id}", status_code=204)
async def delete_goal(
    goal_id: str,
    identity: Identity = Depends(require_admin),
    goals: GoalService = Depends(get_goal_service),
):
    goals.delete_goal(goal_id)
    return Response(status_code=204)
