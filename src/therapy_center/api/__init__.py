# src/therapy_center/api/__init__.py
"""
HTTP layer.

`therapy_router` carries the practice routes (mounted at /api/therapy),
`admin_router` the key management routes (mounted at /api/admin).
"""

from fastapi import APIRouter

from .admin import router as _admin
from .board_requests import router as board_requests_router
from .forms import router as forms_router
from .goals import router as goals_router
from .kids import router as kids_router
from .notifications import router as notifications_router
from .sessions import router as sessions_router
from .team import router as team_router

therapy_router = APIRouter(prefix="/therapy", tags=["therapy"])
therapy_router.include_router(sessions_router)
therapy_router.include_router(forms_router)
therapy_router.include_router(kids_router)
therapy_router.include_router(team_router)
therapy_router.include_router(goals_router)
therapy_router.include_router(notifications_router)
therapy_router.include_router(board_requests_router)

admin_router = APIRouter(prefix="/admin", tags=["admin"])
admin_router.include_router(_admin)

__all__ = ["therapy_router", "admin_router"]
