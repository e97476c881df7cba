"""Dashboard endpoints."""

import logging
from typing import List
from fastapi import APIRouter, Depends

from ...models.requests import DashboardDocument, DashboardSummary
from ...core.dashboard_manager import DashboardManager
from ...api.dependencies import get_user_id

router = APIRouter(prefix="/api/v1/dashboard", tags=["dashboard"])
logger = logging.getLogger(__name__)

# Set by main.py during startup
dashboard_manager: DashboardManager = None


def set_dashboard_manager(manager: DashboardManager):
    """Set the dashboard manager instance (called from main.py)."""
    global dashboard_manager
    globals()['dashboard_manager'] = manager


@router.get(
    "/summary",
    response_model=DashboardSummary,
    summary="Dashboard Summary",
    description="""
Counts of the caller's documents: total, expired, and expiring within the
next 30 days (inclusive), plus the earliest upcoming expiry.

**Authorization**: Required (X-User-ID header)
    """,
)
async def get_summary(user_id: str = Depends(get_user_id)):
    """Get dashboard counts."""
    return await dashboard_manager.summary(user_id)


@router.get(
    "/expiring-soon",
    response_model=List[DashboardDocument],
    summary="Expiring Soon",
    description="Up to five documents expiring within the window, soonest first.",
)
async def get_expiring_soon(user_id: str = Depends(get_user_id)):
    return await dashboard_manager.expiring_soon(user_id)


@router.get(
    "/recently-added",
    response_model=List[DashboardDocument],
    summary="Recently Added",
    description="The five most recently created documents.",
)
async def get_recently_added(user_id: str = Depends(get_user_id)):
    return await dashboard_manager.recently_added(user_id)
