"""Shared pytest fixtures for DocuExpiry tests."""

from collections.abc import AsyncIterator
from datetime import timedelta
from typing import Optional

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from docuexpiry import main
from docuexpiry.config.settings import reset_settings_cache
from docuexpiry.core.document_manager import DocumentManager
from docuexpiry.core.expiry import utcnow
from docuexpiry.core.taxonomy_resolver import TaxonomyResolver
from docuexpiry.infrastructure.database.client import DatabaseClient
from docuexpiry.models.document import DocumentCreate

USER_A = "user-alice"
USER_B = "user-bob"


@pytest.fixture
def database_url(tmp_path) -> str:
    """File-backed SQLite database URL unique to each test."""
    return f"sqlite+aiosqlite:///{tmp_path / 'docuexpiry.sqlite'}"


@pytest.fixture(autouse=True)
def _fresh_settings():
    reset_settings_cache()
    yield
    reset_settings_cache()


@pytest_asyncio.fixture
async def db_client(database_url: str) -> AsyncIterator[DatabaseClient]:
    client = DatabaseClient(database_url)
    await client.initialize()
    yield client
    await client.close()


@pytest.fixture
def resolver(db_client: DatabaseClient) -> TaxonomyResolver:
    return TaxonomyResolver(db_client)


@pytest.fixture
def doc_manager(db_client: DatabaseClient, resolver: TaxonomyResolver) -> DocumentManager:
    return DocumentManager(db_client, resolver)


@pytest.fixture
def make_document(doc_manager: DocumentManager):
    """Create a document expiring ``days`` from now and return its id."""

    async def _make(
        user_id: str = USER_A,
        name: str = "Passport",
        days: float = 60,
        category: Optional[str] = None,
        tags: Optional[list] = None,
        **extra,
    ) -> str:
        doc = DocumentCreate(
            name=name,
            expires_at=utcnow() + timedelta(days=days),
            new_category_name=category,
            new_tag_names=tags or [],
            **extra,
        )
        return await doc_manager.create_document(user_id, doc)

    return _make


@pytest_asyncio.fixture
async def async_client(db_client: DatabaseClient, monkeypatch) -> AsyncIterator[AsyncClient]:
    """HTTPX client bound to the app, wired to the test database."""
    main.configure_managers(db_client)
    monkeypatch.setattr(main, "db_client", db_client)

    transport = ASGITransport(app=main.app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as client:
        yield client


def auth(user_id: str = USER_A) -> dict:
    return {"X-User-ID": user_id}
