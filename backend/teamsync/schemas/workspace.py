"""Workspace tree schemas."""

from typing import List

from pydantic import BaseModel

from .document import Document
from .folder import Folder


class FolderNode(BaseModel):
    """A folder with the documents directly inside it."""
    folder: Folder
    docs: List[Document] = []


class WorkspaceTree(BaseModel):
    """Two-level tree for one category partition."""
    root_docs: List[Document] = []
    folders: List[FolderNode] = []

    def all_docs(self) -> List[Document]:
        docs = list(self.root_docs)
        for node in self.folders:
            docs.extend(node.docs)
        return docs


class FolderDeleteResult(BaseModel):
    folder_id: str
    rerooted_documents: int
