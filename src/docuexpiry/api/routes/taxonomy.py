"""Category and tag picker endpoints."""

import logging
from typing import List
from fastapi import APIRouter, Depends

from ...models.requests import TaxonomyItem
from ...core.taxonomy_resolver import TaxonomyResolver
from ...api.dependencies import get_user_id

router = APIRouter(prefix="/api/v1", tags=["taxonomy"])
logger = logging.getLogger(__name__)

# Set by main.py during startup
resolver: TaxonomyResolver = None


def set_resolver(taxonomy_resolver: TaxonomyResolver):
    """Set the resolver instance (called from main.py)."""
    global resolver
    globals()['resolver'] = taxonomy_resolver


@router.get(
    "/categories",
    response_model=List[TaxonomyItem],
    summary="List Categories",
    description="The caller's categories, ordered by name.",
)
async def list_categories(user_id: str = Depends(get_user_id)):
    categories = await resolver.list_categories(user_id)
    return [TaxonomyItem.model_validate(category) for category in categories]


@router.get(
    "/tags",
    response_model=List[TaxonomyItem],
    summary="List Tags",
    description="The caller's tags, ordered by name.",
)
async def list_tags(user_id: str = Depends(get_user_id)):
    tags = await resolver.list_tags(user_id)
    return [TaxonomyItem.model_validate(tag) for tag in tags]
