"""Resolution of category and tag references during document creation."""

import asyncio
import logging
from typing import Iterable, List, Optional, Set
from ..infrastructure.database.client import DatabaseClient
from ..infrastructure.database.models import CategoryModel, TagModel

logger = logging.getLogger(__name__)


def normalize_name(name: str) -> str:
    """Trim surrounding whitespace from a category or tag name."""
    return name.strip()


class TaxonomyResolver:
    """Get-or-create logic for per-user categories and tags."""

    def __init__(self, db_client: DatabaseClient):
        """Initialize resolver.

        Args:
            db_client: Database client providing the upsert primitive
        """
        self.db = db_client

    async def resolve_category(
        self,
        user_id: str,
        category_id: Optional[str] = None,
        new_name: Optional[str] = None
    ) -> Optional[str]:
        """Resolve the category a new document should reference.

        An existing id is used as-is. Otherwise a non-blank ``new_name`` is
        looked up or created for the user.

        Args:
            user_id: Owner of the category
            category_id: Existing category id, takes precedence
            new_name: Category name to get or create

        Returns:
            Category id, or None when neither input yields one
        """
        if category_id:
            return category_id

        name = normalize_name(new_name or "")
        if not name:
            return None

        resolved = await self.db.get_or_create_category(user_id, name)
        logger.debug(f"Resolved category '{name}' to {resolved} for user {user_id}")
        return resolved

    async def resolve_tags(
        self,
        user_id: str,
        tag_ids: Iterable[str] = (),
        new_names: Iterable[str] = ()
    ) -> Set[str]:
        """Resolve the set of tag ids a new document should reference.

        Blank names are dropped; the remaining names are upserted
        concurrently and merged with the explicit ids.
        """
        resolved = set(tag_ids)
        names = list(dict.fromkeys(
            name for name in (normalize_name(n) for n in new_names) if name
        ))
        if not names:
            return resolved

        created_or_existing = await asyncio.gather(
            *(self.db.get_or_create_tag(user_id, name) for name in names)
        )
        resolved.update(created_or_existing)
        return resolved

    async def list_categories(self, user_id: str) -> List[CategoryModel]:
        return await self.db.list_categories(user_id)

    async def list_tags(self, user_id: str) -> List[TagModel]:
        return await self.db.list_tags(user_id)
