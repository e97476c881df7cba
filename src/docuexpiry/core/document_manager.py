"""Document management business logic."""

import logging
import math
from typing import Optional
from ..infrastructure.database.client import DatabaseClient
from ..infrastructure.database.models import DocumentModel
from ..models.document import (
    CategoryRef,
    DocumentCreate,
    DocumentListItem,
    DocumentListQuery,
    DocumentListResponse,
    TagRef,
)
from .exceptions import DocumentNotFoundError
from .expiry import EXPIRING_WINDOW_DAYS, classify_expiry, expiry_window, utcnow
from .taxonomy_resolver import TaxonomyResolver

logger = logging.getLogger(__name__)


class DocumentManager:
    """Business logic for creating, listing and deleting documents."""

    def __init__(
        self,
        db_client: DatabaseClient,
        resolver: TaxonomyResolver,
        expiring_window_days: int = EXPIRING_WINDOW_DAYS
    ):
        """Initialize document manager.

        Args:
            db_client: Database client for documents
            resolver: Category/tag resolver used on create
            expiring_window_days: Length of the expiring-soon window
        """
        self.db = db_client
        self.resolver = resolver
        self.window_days = expiring_window_days

    async def create_document(self, user_id: str, doc_data: DocumentCreate) -> str:
        """Create a new document.

        The category and tag upserts and the document insert run as separate
        units of work; a failure part-way leaves earlier upserts in place.

        Args:
            user_id: User ID from gateway headers
            doc_data: Validated document creation data

        Returns:
            ID of the created document
        """
        category_id = await self.resolver.resolve_category(
            user_id,
            category_id=doc_data.category_id,
            new_name=doc_data.new_category_name
        )
        tag_ids = await self.resolver.resolve_tags(
            user_id,
            tag_ids=doc_data.tag_ids,
            new_names=doc_data.new_tag_names
        )

        db_doc = DocumentModel(
            user_id=user_id,
            name=doc_data.name,
            expires_at=doc_data.expires_at,
            notes=doc_data.notes,
            category_id=category_id,
        )
        created_doc = await self.db.create_document(db_doc, tag_ids)

        logger.info(f"Created document {created_doc.id} for user {user_id}")
        return created_doc.id

    async def get_document(self, document_id: str, user_id: str) -> Optional[DocumentModel]:
        """Get a document owned by ``user_id``, or None."""
        return await self.db.get_document(document_id, user_id)

    async def delete_document(self, document_id: str, user_id: str) -> None:
        """Delete a document owned by ``user_id``.

        Raises:
            DocumentNotFoundError: if no document matches (id, user_id)
        """
        deleted = await self.db.delete_document(document_id, user_id)
        if not deleted:
            raise DocumentNotFoundError(document_id)

        logger.info(f"Deleted document {document_id}")

    async def list_documents(self, user_id: str, filters: DocumentListQuery) -> DocumentListResponse:
        """List documents with search, status/category filters, sorting and pagination.

        Args:
            user_id: User ID for authorization
            filters: Validated listing parameters

        Returns:
            One page of documents plus pagination totals
        """
        now = utcnow()
        _, window_end = expiry_window(now, self.window_days)

        db_docs, total = await self.db.list_documents(user_id, filters, now, window_end)

        items = [self._to_list_item(doc, now) for doc in db_docs]
        total_pages = max(1, math.ceil(total / filters.page_size))

        return DocumentListResponse(
            items=items,
            total=total,
            page=filters.page,
            page_size=filters.page_size,
            total_pages=total_pages
        )

    def _to_list_item(self, doc: DocumentModel, now) -> DocumentListItem:
        return DocumentListItem(
            id=doc.id,
            name=doc.name,
            expires_at=doc.expires_at,
            created_at=doc.created_at,
            category=CategoryRef.model_validate(doc.category) if doc.category else None,
            tags=[TagRef.model_validate(link.tag) for link in doc.tag_links],
            status=classify_expiry(doc.expires_at, now, self.window_days),
            has_file=doc.file_url is not None,
        )
