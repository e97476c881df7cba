"""Document data models."""

from datetime import date, datetime
from enum import Enum
from typing import Annotated, List, Optional, Union
from pydantic import BaseModel, ConfigDict, Field, PlainSerializer, field_validator

from ..core.expiry import to_aware_utc, to_naive_utc

EntityId = Annotated[str, Field(min_length=1, max_length=36)]

# Stored naive, always UTC; responses carry the offset
UtcDatetime = Annotated[
    datetime,
    PlainSerializer(lambda value: to_aware_utc(value).isoformat(), return_type=str, when_used="json"),
]

MIN_PAGE_SIZE = 5
MAX_PAGE_SIZE = 100
DEFAULT_PAGE_SIZE = 20


class DocumentStatusFilter(str, Enum):
    """Expiry status filter for document listings."""
    ALL = "all"
    EXPIRED = "expired"
    EXPIRING = "expiring"
    VALID = "valid"


class DocumentSortField(str, Enum):
    """Fields a document listing can be ordered by."""
    NAME = "name"
    EXPIRES_AT = "expiresAt"
    CREATED_AT = "createdAt"
    CATEGORY = "category"


class SortDirection(str, Enum):
    ASC = "asc"
    DESC = "desc"


class DocumentCreate(BaseModel):
    """Model for creating a new document.

    Either pick an existing category by ``category_id`` or name a new one;
    the id wins when both are given. Tags may be existing ids and/or new
    names.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(..., min_length=1, max_length=200)
    expires_at: datetime
    notes: Optional[str] = Field(None, max_length=5000)

    category_id: Optional[EntityId] = None
    new_category_name: Optional[str] = Field(None, max_length=80)

    tag_ids: List[EntityId] = Field(default_factory=list)
    new_tag_names: List[Annotated[str, Field(max_length=40)]] = Field(default_factory=list)

    @field_validator("expires_at", mode="before")
    @classmethod
    def _accept_plain_date(cls, value: Union[str, date, datetime]):
        if isinstance(value, date) and not isinstance(value, datetime):
            return to_naive_utc(value)
        if isinstance(value, str) and len(value) == 10:
            return to_naive_utc(date.fromisoformat(value))
        return value

    @field_validator("expires_at")
    @classmethod
    def _normalize_expiry(cls, value: datetime) -> datetime:
        return to_naive_utc(value)

    @field_validator("notes")
    @classmethod
    def _blank_notes_to_none(cls, value: Optional[str]) -> Optional[str]:
        return value or None


class DocumentCreated(BaseModel):
    """Response for a created document."""
    id: str


class DocumentListQuery(BaseModel):
    """Filter, sort and page parameters for listing documents."""
    model_config = ConfigDict(str_strip_whitespace=True)

    query: Optional[str] = Field(None, max_length=200)
    status: DocumentStatusFilter = DocumentStatusFilter.ALL
    category_id: Optional[EntityId] = None

    sort_by: DocumentSortField = DocumentSortField.EXPIRES_AT
    sort_dir: SortDirection = SortDirection.ASC

    page: int = Field(default=1, ge=1)
    page_size: int = Field(default=DEFAULT_PAGE_SIZE, ge=MIN_PAGE_SIZE, le=MAX_PAGE_SIZE)

    @field_validator("query")
    @classmethod
    def _blank_query_to_none(cls, value: Optional[str]) -> Optional[str]:
        return value or None


class CategoryRef(BaseModel):
    id: str
    name: str

    model_config = ConfigDict(from_attributes=True)


class TagRef(BaseModel):
    id: str
    name: str

    model_config = ConfigDict(from_attributes=True)


class DocumentListItem(BaseModel):
    """A single row of a document listing."""
    id: str
    name: str
    expires_at: UtcDatetime
    created_at: UtcDatetime
    category: Optional[CategoryRef] = None
    tags: List[TagRef] = Field(default_factory=list)
    status: str = Field(..., description="Status: expired, expiring, valid")
    has_file: bool = False


class DocumentListResponse(BaseModel):
    """Response model for listing documents."""
    items: List[DocumentListItem]
    total: int
    page: int
    page_size: int
    total_pages: int
