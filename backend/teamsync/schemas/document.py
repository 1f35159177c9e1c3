"""Document schemas."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from .common import Category, WireModel, new_id, utcnow

DEFAULT_DOCUMENT_TITLE = "Untitled page"
DEFAULT_DOCUMENT_EMOJI = "📄"


class Document(WireModel):
    """A workspace page.

    ``folder_id`` is a weak reference: ``None`` means the document sits at
    the root of its category.
    """
    id: str = Field(default_factory=new_id)
    title: str = DEFAULT_DOCUMENT_TITLE
    content: str = ""
    author_id: str
    author_name: str
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
    emoji: Optional[str] = None
    category: Category
    folder_id: Optional[str] = None


class DocumentCreate(BaseModel):
    """Request body for creating a document."""
    category: Category = Category.PERSONAL
    folder_id: Optional[str] = None
    title: Optional[str] = None
    content: str = ""
    emoji: Optional[str] = None


class DocumentUpdate(BaseModel):
    """Partial edit of a document's own fields. Omitted fields are left as-is."""
    title: Optional[str] = None
    content: Optional[str] = None
    emoji: Optional[str] = None


class DocumentMove(BaseModel):
    folder_id: Optional[str] = None  # None = category root


class DocumentCategoryChange(BaseModel):
    category: Optional[Category] = None  # None = toggle


class DocumentRename(BaseModel):
    title: str
