"""Data models for DocuExpiry."""

from .document import (
    DocumentCreate,
    DocumentCreated,
    DocumentListQuery,
    DocumentListItem,
    DocumentListResponse,
    DocumentStatusFilter,
    DocumentSortField,
    SortDirection,
)
from .requests import (
    HealthResponse,
    TaxonomyItem,
    DashboardSummary,
    DashboardDocument,
    UploadTokenRequest,
    UploadTokenResponse,
    UploadCompletedRequest,
    UploadCompletedResponse,
)

__all__ = [
    "DocumentCreate",
    "DocumentCreated",
    "DocumentListQuery",
    "DocumentListItem",
    "DocumentListResponse",
    "DocumentStatusFilter",
    "DocumentSortField",
    "SortDirection",
    "HealthResponse",
    "TaxonomyItem",
    "DashboardSummary",
    "DashboardDocument",
    "UploadTokenRequest",
    "UploadTokenResponse",
    "UploadCompletedRequest",
    "UploadCompletedResponse",
]
