"""Database client for documents, categories and tags."""

import logging
from datetime import datetime
from typing import Iterable, List, Optional, Tuple, Type, Union
from uuid import uuid4
from sqlalchemy import event, func, select, text, update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import selectinload

from ...core.expiry import utcnow
from ...models.document import (
    DocumentListQuery,
    DocumentSortField,
    DocumentStatusFilter,
    SortDirection,
)
from .models import Base, CategoryModel, DocumentModel, DocumentTagModel, TagModel

logger = logging.getLogger(__name__)

NamedModel = Union[Type[CategoryModel], Type[TagModel]]


def _expiry_conditions(status: DocumentStatusFilter, now: datetime, window_end: datetime) -> list:
    """Translate a status filter into ``expires_at`` conditions."""
    if status == DocumentStatusFilter.EXPIRED:
        return [DocumentModel.expires_at < now]
    if status == DocumentStatusFilter.EXPIRING:
        return [DocumentModel.expires_at >= now, DocumentModel.expires_at <= window_end]
    if status == DocumentStatusFilter.VALID:
        return [DocumentModel.expires_at > window_end]
    return []


def _unicode_lower(value):
    return value.lower() if isinstance(value, str) else value


class DatabaseClient:
    """Async database client for document metadata."""

    def __init__(self, database_url: str):
        """Initialize database client.

        Args:
            database_url: SQLAlchemy database URL (e.g., sqlite+aiosqlite:///./db.sqlite)
        """
        self.engine = create_async_engine(database_url, echo=False)
        if self.engine.dialect.name == "sqlite":

            @event.listens_for(self.engine.sync_engine, "connect")
            def _set_sqlite_pragma(dbapi_connection, _connection_record) -> None:
                cursor = dbapi_connection.cursor()
                try:
                    cursor.execute("PRAGMA foreign_keys=ON")
                finally:
                    cursor.close()
                # SQLite's built-in lower() only folds ASCII
                dbapi_connection.create_function("lower", 1, _unicode_lower)

        self.async_session = async_sessionmaker(
            self.engine, class_=AsyncSession, expire_on_commit=False
        )

    async def verify_connection(self):
        """Verify the database answers a trivial query."""
        async with self.engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        logger.info("Database connection verified")

    async def initialize(self):
        """Create database tables."""
        await self.verify_connection()

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database initialized successfully")

    # ------------------------------------------------------------------
    # Categories and tags
    # ------------------------------------------------------------------

    async def _get_or_create(self, model: NamedModel, user_id: str, name: str) -> str:
        """Insert ``(user_id, name)`` unless it exists, then return the row id.

        The unique constraint on ``(user_id, name)`` decides the winner when
        two callers race; both end up reading the same row.
        """
        values = {"id": str(uuid4()), "user_id": user_id, "name": name, "created_at": utcnow()}
        dialect = self.engine.dialect.name

        async with self.async_session() as session:
            if dialect == "postgresql":
                stmt = (
                    pg_insert(model)
                    .values(**values)
                    .on_conflict_do_nothing(index_elements=[model.user_id, model.name])
                )
                await session.execute(stmt)
            elif dialect == "sqlite":
                stmt = (
                    sqlite_insert(model)
                    .values(**values)
                    .on_conflict_do_nothing(index_elements=[model.user_id, model.name])
                )
                await session.execute(stmt)
            else:
                try:
                    async with session.begin_nested():
                        session.add(model(**values))
                except IntegrityError:
                    # Another transaction created the same name concurrently.
                    logger.debug(f"{model.__tablename__} '{name}' already exists for user {user_id}")
            await session.commit()

            result = await session.execute(
                select(model.id).where(model.user_id == user_id, model.name == name)
            )
            return result.scalar_one()

    async def get_or_create_category(self, user_id: str, name: str) -> str:
        """Return the id of the user's category ``name``, creating it if absent."""
        return await self._get_or_create(CategoryModel, user_id, name)

    async def get_or_create_tag(self, user_id: str, name: str) -> str:
        """Return the id of the user's tag ``name``, creating it if absent."""
        return await self._get_or_create(TagModel, user_id, name)

    async def _list_named(self, model: NamedModel, user_id: str) -> List:
        async with self.async_session() as session:
            result = await session.execute(
                select(model).where(model.user_id == user_id).order_by(model.name.asc())
            )
            return list(result.scalars().all())

    async def list_categories(self, user_id: str) -> List[CategoryModel]:
        """List a user's categories ordered by name."""
        return await self._list_named(CategoryModel, user_id)

    async def list_tags(self, user_id: str) -> List[TagModel]:
        """List a user's tags ordered by name."""
        return await self._list_named(TagModel, user_id)

    # ------------------------------------------------------------------
    # Documents
    # ------------------------------------------------------------------

    async def create_document(self, document: DocumentModel, tag_ids: Iterable[str] = ()) -> DocumentModel:
        """Create a new document together with its tag links."""
        document.tag_links = [DocumentTagModel(tag_id=tag_id) for tag_id in tag_ids]
        async with self.async_session() as session:
            session.add(document)
            await session.commit()
            return document

    async def get_document(self, document_id: str, user_id: str) -> Optional[DocumentModel]:
        """Get document by ID (with user authorization check)."""
        async with self.async_session() as session:
            result = await session.execute(
                select(DocumentModel)
                .where(DocumentModel.id == document_id, DocumentModel.user_id == user_id)
                .options(
                    selectinload(DocumentModel.category),
                    selectinload(DocumentModel.tag_links).selectinload(DocumentTagModel.tag),
                )
            )
            return result.scalar_one_or_none()

    async def list_documents(
        self, user_id: str, filters: DocumentListQuery, now: datetime, window_end: datetime
    ) -> Tuple[List[DocumentModel], int]:
        """List a user's documents with search, filters, ordering and pagination.

        Args:
            user_id: Owner of the documents
            filters: Validated listing parameters
            now: Reference time for status filters
            window_end: Upper bound of the expiring-soon window

        Returns:
            Tuple of (page of documents, total matching before pagination)
        """
        conditions = [DocumentModel.user_id == user_id]
        if filters.query:
            conditions.append(DocumentModel.name.icontains(filters.query, autoescape=True))
        if filters.category_id:
            conditions.append(DocumentModel.category_id == filters.category_id)
        conditions.extend(_expiry_conditions(filters.status, now, window_end))

        descending = filters.sort_dir == SortDirection.DESC
        query = select(DocumentModel).where(*conditions)

        if filters.sort_by == DocumentSortField.CATEGORY:
            query = query.outerjoin(CategoryModel, DocumentModel.category_id == CategoryModel.id)
            order_by = [
                CategoryModel.id.is_(None),  # uncategorized last
                CategoryModel.name.desc() if descending else CategoryModel.name.asc(),
                DocumentModel.expires_at.asc(),
            ]
        else:
            column = {
                DocumentSortField.NAME: DocumentModel.name,
                DocumentSortField.EXPIRES_AT: DocumentModel.expires_at,
                DocumentSortField.CREATED_AT: DocumentModel.created_at,
            }[filters.sort_by]
            order_by = [column.desc() if descending else column.asc()]
        order_by.append(DocumentModel.id.asc())

        offset = (filters.page - 1) * filters.page_size
        query = (
            query.order_by(*order_by)
            .offset(offset)
            .limit(filters.page_size)
            .options(
                selectinload(DocumentModel.category),
                selectinload(DocumentModel.tag_links).selectinload(DocumentTagModel.tag),
            )
        )
        count_query = select(func.count()).select_from(DocumentModel).where(*conditions)

        async with self.async_session() as session:
            total_count = (await session.execute(count_query)).scalar_one()
            result = await session.execute(query)
            documents = list(result.scalars().all())

        return documents, total_count

    async def delete_document(self, document_id: str, user_id: str) -> bool:
        """Delete a document if the user owns it.

        Returns:
            True if deleted, False if no document matched (id, user_id)
        """
        async with self.async_session() as session:
            result = await session.execute(
                select(DocumentModel).where(
                    DocumentModel.id == document_id,
                    DocumentModel.user_id == user_id
                )
            )
            document = result.scalar_one_or_none()
            if not document:
                return False

            await session.delete(document)
            await session.commit()
            return True

    async def update_document_file(self, document_id: str, user_id: str, **fields) -> bool:
        """Attach file metadata to a document scoped by owner."""
        async with self.async_session() as session:
            result = await session.execute(
                update(DocumentModel)
                .where(DocumentModel.id == document_id, DocumentModel.user_id == user_id)
                .values(**fields)
            )
            await session.commit()
            return result.rowcount > 0

    # ------------------------------------------------------------------
    # Dashboard aggregates
    # ------------------------------------------------------------------

    async def count_documents(
        self,
        user_id: str,
        expires_from: Optional[datetime] = None,
        expires_before: Optional[datetime] = None,
        expires_until: Optional[datetime] = None,
    ) -> int:
        """Count a user's documents, optionally bounded by expiry.

        ``expires_from`` and ``expires_until`` are inclusive; ``expires_before``
        is exclusive.
        """
        query = select(func.count()).select_from(DocumentModel).where(DocumentModel.user_id == user_id)
        if expires_from is not None:
            query = query.where(DocumentModel.expires_at >= expires_from)
        if expires_before is not None:
            query = query.where(DocumentModel.expires_at < expires_before)
        if expires_until is not None:
            query = query.where(DocumentModel.expires_at <= expires_until)

        async with self.async_session() as session:
            return (await session.execute(query)).scalar_one()

    async def next_expiry(self, user_id: str, now: datetime) -> Optional[datetime]:
        """Earliest expiry at or after ``now``."""
        async with self.async_session() as session:
            result = await session.execute(
                select(func.min(DocumentModel.expires_at)).where(
                    DocumentModel.user_id == user_id,
                    DocumentModel.expires_at >= now
                )
            )
            return result.scalar_one_or_none()

    async def expiring_documents(
        self, user_id: str, now: datetime, window_end: datetime, limit: int = 5
    ) -> List[DocumentModel]:
        """Documents inside the expiring window, soonest first."""
        async with self.async_session() as session:
            result = await session.execute(
                select(DocumentModel)
                .where(
                    DocumentModel.user_id == user_id,
                    DocumentModel.expires_at >= now,
                    DocumentModel.expires_at <= window_end,
                )
                .order_by(DocumentModel.expires_at.asc(), DocumentModel.id.asc())
                .limit(limit)
                .options(selectinload(DocumentModel.category))
            )
            return list(result.scalars().all())

    async def recent_documents(self, user_id: str, limit: int = 5) -> List[DocumentModel]:
        """Most recently created documents."""
        async with self.async_session() as session:
            result = await session.execute(
                select(DocumentModel)
                .where(DocumentModel.user_id == user_id)
                .order_by(DocumentModel.created_at.desc(), DocumentModel.id.asc())
                .limit(limit)
                .options(selectinload(DocumentModel.category))
            )
            return list(result.scalars().all())

    async def close(self):
        """Close database connections."""
        await self.engine.dispose()
