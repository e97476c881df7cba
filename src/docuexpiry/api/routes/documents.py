"""Document create, list and delete endpoints."""

import logging
from typing import Optional
from fastapi import APIRouter, HTTPException, Depends, Query, Response
from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError

from ...models.document import (
    DEFAULT_PAGE_SIZE,
    DocumentCreate,
    DocumentCreated,
    DocumentListQuery,
    DocumentListResponse,
    DocumentSortField,
    DocumentStatusFilter,
    SortDirection,
)
from ...core.document_manager import DocumentManager
from ...core.exceptions import DocumentNotFoundError
from ...api.dependencies import get_user_id

router = APIRouter(prefix="/api/v1/documents", tags=["documents"])
logger = logging.getLogger(__name__)

# Set by main.py during startup
doc_manager: DocumentManager = None


def set_document_manager(manager: DocumentManager):
    """Set the document manager instance (called from main.py)."""
    global doc_manager
    globals()['doc_manager'] = manager


def get_list_query(
    query: Optional[str] = Query(None, description="Case-insensitive substring of the document name"),
    status: DocumentStatusFilter = Query(DocumentStatusFilter.ALL),
    category_id: Optional[str] = Query(None),
    sort_by: DocumentSortField = Query(DocumentSortField.EXPIRES_AT),
    sort_dir: SortDirection = Query(SortDirection.ASC),
    page: int = Query(1),
    page_size: int = Query(DEFAULT_PAGE_SIZE),
) -> DocumentListQuery:
    """Bind listing parameters from the query string."""
    try:
        return DocumentListQuery(
            query=query,
            status=status,
            category_id=category_id,
            sort_by=sort_by,
            sort_dir=sort_dir,
            page=page,
            page_size=page_size,
        )
    except ValidationError as e:
        raise RequestValidationError(e.errors(include_url=False)) from e


@router.post(
    "",
    response_model=DocumentCreated,
    status_code=201,
    summary="Create Document",
    description="""
Register a document with an expiry date.

**Workflow**:
1. Validate name (1-200 chars, trimmed), notes (≤5000 chars) and expiry
2. Resolve the category: `category_id` wins, otherwise `new_category_name`
   is looked up or created for the user
3. Resolve tags: `tag_ids` merged with looked-up or created `new_tag_names`
4. Store the document and its tag links
5. Return the new document id

**Request Example**:
```json
{
  "name": "Insurance certificate",
  "expires_at": "2026-11-01T00:00:00Z",
  "new_category_name": "Compliance",
  "new_tag_names": ["insurance", "annual"]
}
```

**Authorization**: Required (X-User-ID header)
    """,
    responses={
        201: {"description": "Document created successfully"},
        401: {"description": "Missing or invalid authentication"},
        422: {"description": "Invalid document data"},
        500: {"description": "Internal server error during document creation"}
    }
)
async def create_document(doc_data: DocumentCreate, user_id: str = Depends(get_user_id)):
    """Create a new document."""
    try:
        document_id = await doc_manager.create_document(user_id, doc_data)
        return DocumentCreated(id=document_id)
    except Exception as e:
        logger.error(f"Failed to create document: {e}")
        raise HTTPException(status_code=500, detail="Failed to create document")


@router.get(
    "",
    response_model=DocumentListResponse,
    summary="List Documents",
    description="""
List the caller's documents with search, filters, sorting and pagination.

**Query Parameters**:
- `query`: case-insensitive substring of the name (≤200 chars)
- `status`: `all` (default), `expired`, `expiring` (next 30 days inclusive), `valid`
- `category_id`: exact category match
- `sort_by`: `expiresAt` (default), `name`, `createdAt`, `category`
- `sort_dir`: `asc` (default) or `desc`
- `page`: 1-based page number (default 1)
- `page_size`: 5-100 (default 20)

Sorting by `category` puts uncategorized documents last and breaks ties by
ascending expiry.

**Authorization**: Required (X-User-ID header)
**User Isolation**: Only returns documents owned by authenticated user
    """,
    responses={
        200: {"description": "Document list retrieved successfully"},
        401: {"description": "Missing or invalid authentication"},
        422: {"description": "Invalid query parameters"},
        500: {"description": "Internal server error"}
    }
)
async def list_documents(
    user_id: str = Depends(get_user_id),
    filters: DocumentListQuery = Depends(get_list_query),
):
    """List documents with pagination."""
    try:
        return await doc_manager.list_documents(user_id, filters)
    except Exception as e:
        logger.error(f"Failed to list documents: {e}")
        raise HTTPException(status_code=500, detail="Failed to list documents")


@router.delete(
    "/{document_id}",
    status_code=204,
    summary="Delete Document",
    description="""
Permanently delete a document and its tag links. Categories and tags are kept.

**Authorization**: Required (X-User-ID header)
**User Isolation**: Returns 404 if document belongs to different user
    """,
    responses={
        204: {"description": "Document deleted successfully"},
        401: {"description": "Missing or invalid authentication"},
        404: {"description": "Document not found or access denied"},
        500: {"description": "Internal server error during deletion"}
    }
)
async def delete_document(document_id: str, user_id: str = Depends(get_user_id)):
    """Delete document."""
    try:
        await doc_manager.delete_document(document_id, user_id)
    except DocumentNotFoundError:
        raise HTTPException(status_code=404, detail="Document not found")
    except Exception as e:
        logger.error(f"Failed to delete document {document_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to delete document")
    return Response(status_code=204)
