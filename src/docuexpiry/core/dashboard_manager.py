"""Dashboard aggregates over a user's documents."""

import asyncio
import logging
from typing import List
from ..infrastructure.database.client import DatabaseClient
from ..infrastructure.database.models import DocumentModel
from ..models.requests import DashboardDocument, DashboardSummary
from .expiry import EXPIRING_WINDOW_DAYS, expiry_window, utcnow

logger = logging.getLogger(__name__)

WIDGET_SIZE = 5


def _to_dashboard_document(doc: DocumentModel, include_created: bool = False) -> DashboardDocument:
    return DashboardDocument(
        id=doc.id,
        name=doc.name,
        expires_at=doc.expires_at,
        created_at=doc.created_at if include_created else None,
        category_name=doc.category.name if doc.category else None,
    )


class DashboardManager:
    """Manager for dashboard summary and widget queries."""

    def __init__(self, db_client: DatabaseClient, expiring_window_days: int = EXPIRING_WINDOW_DAYS):
        self.db = db_client
        self.window_days = expiring_window_days

    async def summary(self, user_id: str) -> DashboardSummary:
        """Total, expired and expiring-soon counts plus the next upcoming expiry."""
        now = utcnow()
        start, end = expiry_window(now, self.window_days)

        total, expired, expiring, next_expiring_at = await asyncio.gather(
            self.db.count_documents(user_id),
            self.db.count_documents(user_id, expires_before=now),
            self.db.count_documents(user_id, expires_from=start, expires_until=end),
            self.db.next_expiry(user_id, now),
        )

        return DashboardSummary(
            total_documents=total,
            expired_documents=expired,
            expiring_soon_documents=expiring,
            next_expiring_at=next_expiring_at
        )

    async def expiring_soon(self, user_id: str) -> List[DashboardDocument]:
        """The next few documents to expire within the window."""
        now = utcnow()
        start, end = expiry_window(now, self.window_days)
        docs = await self.db.expiring_documents(user_id, start, end, limit=WIDGET_SIZE)
        return [_to_dashboard_document(doc) for doc in docs]

    async def recently_added(self, user_id: str) -> List[DashboardDocument]:
        """The most recently created documents."""
        docs = await self.db.recent_documents(user_id, limit=WIDGET_SIZE)
        return [_to_dashboard_document(doc, include_created=True) for doc in docs]
