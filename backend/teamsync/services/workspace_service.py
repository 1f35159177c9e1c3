"""Workspace hierarchy: folders and documents per category, two levels deep.

Public methods:
    personal_tree / team_tree -- derive the tree for one category partition
    create_document           -- new page; records a feed entry, selects it
    update_document           -- title / content / emoji edit
    rename_document           -- title change; blank titles are ignored
    move_document             -- into a folder of the same category, or to root
    change_category           -- Personal <-> Team; always lands at root
    delete_document           -- idempotent
    create_folder             -- blank names fall back to a default
    rename_folder             -- blank names are ignored
    delete_folder             -- re-roots children, then removes the folder

All mutations are optimistic: the entity store is updated before the method
returns and the gateway write runs in the background.
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Set

from ..exceptions import DocumentNotFoundError, FolderNotFoundError, ValidationError
from ..schemas.common import Category, utcnow
from ..schemas.document import DEFAULT_DOCUMENT_EMOJI, DEFAULT_DOCUMENT_TITLE, Document
from ..schemas.folder import DEFAULT_FOLDER_NAME, DEFAULT_TEAM_FOLDER_NAME, Folder
from ..schemas.user import User
from ..schemas.workspace import FolderDeleteResult, FolderNode, WorkspaceTree
from .activity_service import ACTION_DOCUMENT_CREATED, ActivityFeed
from .entity_store import EntityKind, EntityStore, Mutation

logger = logging.getLogger(__name__)

CurrentUserProvider = Callable[[], Optional[User]]


@dataclass
class WorkspaceView:
    """Ephemeral UI state. Not persisted, not part of the domain."""

    expanded_folders: Set[str] = field(default_factory=set)
    selected_doc_id: Optional[str] = None
    renaming_id: Optional[str] = None
    renaming_kind: Optional[str] = None  # 'doc' or 'folder'
    rename_buffer: str = ""

    def toggle_folder(self, folder_id: str) -> bool:
        """Flip a folder's expanded state. Returns the new state."""
        if folder_id in self.expanded_folders:
            self.expanded_folders.discard(folder_id)
            return False
        self.expanded_folders.add(folder_id)
        return True


def _clean_name(name: Optional[str]) -> Optional[str]:
    """Stripped name, or None when blank."""
    if name is None:
        return None
    stripped = name.strip()
    return stripped or None


class WorkspaceService:
    """Folder/document tree operations over the session's entity store."""

    def __init__(
        self,
        store: EntityStore,
        feed: ActivityFeed,
        current_user: CurrentUserProvider,
        view: Optional[WorkspaceView] = None,
    ):
        self.store = store
        self.feed = feed
        self._current_user = current_user
        self.view = view or WorkspaceView()

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    @property
    def user(self) -> User:
        user = self._current_user()
        if user is None:
            raise ValidationError("No user is signed in", field="user")
        return user

    def documents(self) -> List[Document]:
        return self.store.all(EntityKind.DOCS)

    def folders(self) -> List[Folder]:
        return self.store.all(EntityKind.FOLDERS)

    def get_document(self, doc_id: str) -> Document:
        doc = self.store.get(EntityKind.DOCS, doc_id)
        if doc is None:
            raise DocumentNotFoundError(doc_id)
        return doc

    def get_folder(self, folder_id: str) -> Folder:
        folder = self.store.get(EntityKind.FOLDERS, folder_id)
        if folder is None:
            raise FolderNotFoundError(folder_id)
        return folder

    # ------------------------------------------------------------------
    # Tree derivation
    # ------------------------------------------------------------------

    def personal_tree(self, user_id: Optional[str] = None) -> WorkspaceTree:
        """Personal partition for ``user_id`` (defaults to the signed-in user)."""
        owner = user_id or self.user.id
        folders = [
            f for f in self.folders()
            if f.category == Category.PERSONAL and f.user_id == owner
        ]
        docs = [
            d for d in self.documents()
            if d.category == Category.PERSONAL and d.author_id == owner
        ]
        return self._build_tree(folders, docs)

    def team_tree(self) -> WorkspaceTree:
        folders = [f for f in self.folders() if f.category == Category.TEAM]
        docs = [d for d in self.documents() if d.category == Category.TEAM]
        return self._build_tree(folders, docs)

    @staticmethod
    def _build_tree(folders: List[Folder], docs: List[Document]) -> WorkspaceTree:
        # A folder_id that does not resolve inside this partition (dangling,
        # or pointing at the other category) is shown at root.
        docs_by_folder: Dict[str, List[Document]] = {f.id: [] for f in folders}
        root_docs: List[Document] = []
        for doc in docs:
            if doc.folder_id and doc.folder_id in docs_by_folder:
                docs_by_folder[doc.folder_id].append(doc)
            else:
                root_docs.append(doc)
        return WorkspaceTree(
            root_docs=root_docs,
            folders=[FolderNode(folder=f, docs=docs_by_folder[f.id]) for f in folders],
        )

    # ------------------------------------------------------------------
    # Documents
    # ------------------------------------------------------------------

    async def create_document(
        self,
        category: Category,
        folder_id: Optional[str] = None,
        title: Optional[str] = None,
        content: str = "",
        emoji: Optional[str] = None,
        author: Optional[User] = None,
    ) -> Document:
        """Create a document, select it, and record a feed entry.

        The document is in the store when the first suspension point is
        reached; the method then waits for the feed entry only.
        """
        author = author or self.user
        if folder_id is not None:
            self._check_folder_target(folder_id, category)

        now = utcnow()
        doc = Document(
            title=_clean_name(title) or DEFAULT_DOCUMENT_TITLE,
            content=content,
            author_id=author.id,
            author_name=author.name,
            created_at=now,
            updated_at=now,
            emoji=emoji or DEFAULT_DOCUMENT_EMOJI,
            category=category,
            folder_id=folder_id,
        )
        self.store.apply_optimistic(Mutation.create(EntityKind.DOCS, doc))
        self.view.selected_doc_id = doc.id
        logger.info("Document created", extra={"doc_id": doc.id, "category": category.value})

        await self.feed.record(author.name, ACTION_DOCUMENT_CREATED, doc.title)
        return doc

    def _save_document(self, doc: Document, **changes) -> Document:
        changes["updated_at"] = utcnow()
        updated = doc.model_copy(update=changes)
        self.store.apply_optimistic(Mutation.update(EntityKind.DOCS, updated))
        return updated

    def update_document(
        self,
        doc_id: str,
        title: Optional[str] = None,
        content: Optional[str] = None,
        emoji: Optional[str] = None,
    ) -> Document:
        """Edit a document's own fields. Omitted fields are unchanged; no feed entry.

        A blank title is ignored like in ``rename_document``.
        """
        doc = self.get_document(doc_id)
        changes = {}
        cleaned = _clean_name(title)
        if cleaned is not None:
            changes["title"] = cleaned
        if content is not None:
            changes["content"] = content
        if emoji is not None:
            changes["emoji"] = emoji
        if not changes:
            return doc
        return self._save_document(doc, **changes)

    def rename_document(self, doc_id: str, title: str) -> Document:
        """Rename; a blank title leaves the document untouched and writes nothing."""
        doc = self.get_document(doc_id)
        cleaned = _clean_name(title)
        if cleaned is None:
            logger.debug("Ignored blank document title", extra={"doc_id": doc_id})
            return doc
        return self._save_document(doc, title=cleaned)

    def move_document(self, doc_id: str, folder_id: Optional[str]) -> Document:
        """Move into ``folder_id`` (same category required) or to root when None."""
        doc = self.get_document(doc_id)
        if folder_id is not None:
            self._check_folder_target(folder_id, doc.category)
        if doc.folder_id == folder_id:
            return doc
        return self._save_document(doc, folder_id=folder_id)

    def change_category(self, doc_id: str, category: Optional[Category] = None) -> Document:
        """Switch Personal/Team (toggle when ``category`` is None).

        The document always lands at the root of its new category.
        """
        doc = self.get_document(doc_id)
        target = category or doc.category.toggled()
        if target == doc.category and doc.folder_id is None:
            return doc
        return self._save_document(doc, category=target, folder_id=None)

    def delete_document(self, doc_id: str) -> bool:
        """Delete a document. Returns False if it was already gone."""
        existed = self.store.get(EntityKind.DOCS, doc_id) is not None
        self.store.apply_optimistic(Mutation.delete(EntityKind.DOCS, doc_id))
        if self.view.selected_doc_id == doc_id:
            self.view.selected_doc_id = None
        return existed

    def _check_folder_target(self, folder_id: str, category: Category) -> Folder:
        folder = self.store.get(EntityKind.FOLDERS, folder_id)
        if folder is None:
            raise ValidationError(f"Folder not found: {folder_id}", field="folder_id")
        if folder.category != category:
            raise ValidationError(
                f"Folder '{folder.name}' belongs to the {folder.category.value} workspace",
                field="folder_id",
            )
        return folder

    # ------------------------------------------------------------------
    # Folders
    # ------------------------------------------------------------------

    def create_folder(
        self,
        name: str = "",
        category: Category = Category.PERSONAL,
        owner: Optional[User] = None,
    ) -> Folder:
        owner = owner or self.user
        default = DEFAULT_TEAM_FOLDER_NAME if category == Category.TEAM else DEFAULT_FOLDER_NAME
        folder = Folder(name=_clean_name(name) or default, user_id=owner.id, category=category)
        self.store.apply_optimistic(Mutation.create(EntityKind.FOLDERS, folder))
        self.view.expanded_folders.add(folder.id)
        return folder

    def rename_folder(self, folder_id: str, name: str) -> Folder:
        """Rename; a blank name leaves the folder untouched and writes nothing."""
        folder = self.get_folder(folder_id)
        cleaned = _clean_name(name)
        if cleaned is None:
            logger.debug("Ignored blank folder name", extra={"folder_id": folder_id})
            return folder
        renamed = folder.model_copy(update={"name": cleaned})
        self.store.apply_optimistic(Mutation.update(EntityKind.FOLDERS, renamed))
        return renamed

    async def delete_folder(self, folder_id: str) -> FolderDeleteResult:
        """Delete a folder and move its documents to their category root.

        Locally both steps happen at once. Durably, every child document is
        cleared first and the folder is deleted only after all of them were
        written, so the store never holds a document pointing at a missing
        folder. Deleting an unknown folder is a no-op.
        """
        if self.store.get(EntityKind.FOLDERS, folder_id) is None:
            return FolderDeleteResult(folder_id=folder_id, rerooted_documents=0)

        now = utcnow()
        children = [d for d in self.documents() if d.folder_id == folder_id]
        cleared = [
            Mutation.update(EntityKind.DOCS, d.model_copy(update={"folder_id": None, "updated_at": now}))
            for d in children
        ]
        task = self.store.apply_staged([cleared, [Mutation.delete(EntityKind.FOLDERS, folder_id)]])
        self.view.expanded_folders.discard(folder_id)

        ok = await task
        if not ok:
            logger.warning("Folder delete did not fully persist", extra={"folder_id": folder_id})
        return FolderDeleteResult(folder_id=folder_id, rerooted_documents=len(children))

    # ------------------------------------------------------------------
    # Rename buffer
    # ------------------------------------------------------------------

    def start_rename(self, entity_id: str, kind: str) -> None:
        if kind == "folder":
            current = self.get_folder(entity_id).name
        elif kind == "doc":
            current = self.get_document(entity_id).title
        else:
            raise ValidationError(f"Unknown rename target: {kind}", field="kind")
        self.view.renaming_id = entity_id
        self.view.renaming_kind = kind
        self.view.rename_buffer = current

    def finish_rename(self, name: Optional[str] = None) -> None:
        """Commit the rename buffer (or ``name``) and clear it."""
        view = self.view
        if view.renaming_id is not None:
            value = view.rename_buffer if name is None else name
            if view.renaming_kind == "folder":
                self.rename_folder(view.renaming_id, value)
            else:
                self.rename_document(view.renaming_id, value)
        self.cancel_rename()

    def cancel_rename(self) -> None:
        self.view.renaming_id = None
        self.view.renaming_kind = None
        self.view.rename_buffer = ""
