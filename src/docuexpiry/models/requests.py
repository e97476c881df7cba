"""Request and response models for the dashboard, taxonomy and upload endpoints."""

from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field

from .document import UtcDatetime


class HealthResponse(BaseModel):
    """Health check response model."""
    status: str
    service: str
    version: str
    database_connected: bool


class TaxonomyItem(BaseModel):
    """A category or tag as offered to pickers."""
    id: str
    name: str

    model_config = ConfigDict(from_attributes=True)


class DashboardSummary(BaseModel):
    """Counts shown on the dashboard."""
    total_documents: int
    expired_documents: int
    expiring_soon_documents: int
    next_expiring_at: Optional[UtcDatetime] = None


class DashboardDocument(BaseModel):
    """Compact document row for dashboard widgets."""
    id: str
    name: str
    expires_at: UtcDatetime
    created_at: Optional[UtcDatetime] = None
    category_name: Optional[str] = None


class UploadTokenRequest(BaseModel):
    """Client request for a direct-to-storage upload token."""
    document_id: str = Field(..., min_length=1, max_length=36)
    pathname: str = Field(..., min_length=1, max_length=1024)
    file_name: Optional[str] = Field(None, max_length=255)
    file_size: Optional[int] = Field(None, gt=0)
    file_type: Optional[str] = Field(None, max_length=255)


class UploadTokenResponse(BaseModel):
    """Signed upload token and the constraints it carries."""
    client_token: str
    pathname: str
    allowed_content_types: List[str]
    maximum_size_in_bytes: int
    expires_at: UtcDatetime


class UploadTokenPayload(BaseModel):
    """Correlation payload signed into an upload token."""
    user_id: str = Field(..., min_length=1, max_length=100)
    document_id: str = Field(..., min_length=1, max_length=36)
    file_name: Optional[str] = None
    file_size: Optional[int] = Field(None, gt=0)
    file_type: Optional[str] = None


class BlobResult(BaseModel):
    """Stored object details reported by the storage provider."""
    url: str = Field(..., min_length=1)
    pathname: str = Field(..., min_length=1)


class UploadCompletedRequest(BaseModel):
    """Storage provider callback body."""
    blob: BlobResult
    client_token: Optional[str] = None


class UploadCompletedResponse(BaseModel):
    updated: bool
