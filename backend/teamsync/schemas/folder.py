"""Folder schemas."""

from datetime import datetime

from pydantic import BaseModel, Field

from .common import Category, WireModel, new_id, utcnow

DEFAULT_FOLDER_NAME = "New folder"
DEFAULT_TEAM_FOLDER_NAME = "New team folder"


class Folder(WireModel):
    """A named grouping of documents. Folders do not nest.

    Older stored folders carry no ``category``; they read as Personal.
    """
    id: str = Field(default_factory=new_id)
    name: str
    user_id: str
    created_at: datetime = Field(default_factory=utcnow)
    category: Category = Category.PERSONAL


class FolderCreate(BaseModel):
    name: str = ""
    category: Category = Category.PERSONAL


class FolderRename(BaseModel):
    name: str
