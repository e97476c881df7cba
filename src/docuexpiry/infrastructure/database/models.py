"""SQLAlchemy ORM models for documents, categories and tags."""

from datetime import datetime, timezone
from uuid import uuid4
from sqlalchemy import (
    Column,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()


def _utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def _new_id() -> str:
    return str(uuid4())


class CategoryModel(Base):
    """A per-user document category, unique by name."""
    __tablename__ = "categories"
    __table_args__ = (UniqueConstraint("user_id", "name", name="uq_categories_user_id_name"),)

    id = Column(String(36), primary_key=True, default=_new_id)
    user_id = Column(String(100), nullable=False, index=True)
    name = Column(String(80), nullable=False)
    created_at = Column(DateTime, nullable=False, default=_utcnow)

    documents = relationship("DocumentModel", back_populates="category")

    def __repr__(self):
        return f"<CategoryModel(id={self.id}, name={self.name})>"


class TagModel(Base):
    """A per-user tag, unique by name."""
    __tablename__ = "tags"
    __table_args__ = (UniqueConstraint("user_id", "name", name="uq_tags_user_id_name"),)

    id = Column(String(36), primary_key=True, default=_new_id)
    user_id = Column(String(100), nullable=False, index=True)
    name = Column(String(40), nullable=False)
    created_at = Column(DateTime, nullable=False, default=_utcnow)

    def __repr__(self):
        return f"<TagModel(id={self.id}, name={self.name})>"


class DocumentTagModel(Base):
    """Join row linking a document to a tag.

    The autoincrement ``id`` records insertion order, which is the order a
    document's tags are returned in.
    """
    __tablename__ = "document_tags"
    __table_args__ = (UniqueConstraint("document_id", "tag_id", name="uq_document_tags_document_id_tag_id"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    document_id = Column(String(36), ForeignKey("documents.id", ondelete="CASCADE"), nullable=False, index=True)
    tag_id = Column(String(36), ForeignKey("tags.id", ondelete="CASCADE"), nullable=False, index=True)

    document = relationship("DocumentModel", back_populates="tag_links")
    tag = relationship("TagModel")


class DocumentModel(Base):
    """A tracked document with an expiry date."""
    __tablename__ = "documents"

    id = Column(String(36), primary_key=True, default=_new_id)
    user_id = Column(String(100), nullable=False, index=True)
    name = Column(String(200), nullable=False)
    expires_at = Column(DateTime, nullable=False, index=True)
    notes = Column(Text, nullable=True)
    category_id = Column(String(36), ForeignKey("categories.id", ondelete="SET NULL"), nullable=True, index=True)

    # File metadata, filled in by the storage upload callback
    file_url = Column(String(2048), nullable=True)
    file_pathname = Column(String(1024), nullable=True)
    file_name = Column(String(255), nullable=True)
    file_size = Column(Integer, nullable=True)
    file_type = Column(String(255), nullable=True)

    created_at = Column(DateTime, nullable=False, default=_utcnow)
    updated_at = Column(DateTime, nullable=False, default=_utcnow, onupdate=_utcnow)

    category = relationship("CategoryModel", back_populates="documents")
    tag_links = relationship(
        "DocumentTagModel",
        back_populates="document",
        cascade="all, delete-orphan",
        order_by="DocumentTagModel.id",
    )

    def __repr__(self):
        return f"<DocumentModel(id={self.id}, name={self.name})>"
