"""Workspace endpoints: category trees, documents and folders."""

from fastapi import APIRouter, Depends

from ..core.auth import require_session
from ..schemas.assist import AssistCommand
from ..schemas.document import (
    Document,
    DocumentCategoryChange,
    DocumentCreate,
    DocumentMove,
    DocumentRename,
    DocumentUpdate,
)
from ..schemas.folder import Folder, FolderCreate, FolderRename
from ..schemas.workspace import FolderDeleteResult, WorkspaceTree
from ..services.session_service import SessionManager
from ..services.workspace_service import WorkspaceService

router = APIRouter(prefix="/api/workspace", tags=["workspace"])


async def _workspace(session: SessionManager = Depends(require_session)) -> WorkspaceService:
    return session.context.workspace


@router.get("/tree/personal", response_model=WorkspaceTree)
async def personal_tree(workspace: WorkspaceService = Depends(_workspace)):
    return workspace.personal_tree()


@router.get("/tree/team", response_model=WorkspaceTree)
async def team_tree(workspace: WorkspaceService = Depends(_workspace)):
    return workspace.team_tree()


# --- Documents ---


@router.post("/documents", response_model=Document, status_code=201)
async def create_document(body: DocumentCreate, workspace: WorkspaceService = Depends(_workspace)):
    return await workspace.create_document(
        category=body.category,
        folder_id=body.folder_id,
        title=body.title,
        content=body.content,
        emoji=body.emoji,
    )


@router.get("/documents/{doc_id}", response_model=Document)
async def get_document(doc_id: str, workspace: WorkspaceService = Depends(_workspace)):
    return workspace.get_document(doc_id)


@router.put("/documents/{doc_id}", response_model=Document)
async def update_document(doc_id: str, body: DocumentUpdate, workspace: WorkspaceService = Depends(_workspace)):
    return workspace.update_document(doc_id, title=body.title, content=body.content, emoji=body.emoji)


@router.put("/documents/{doc_id}/title", response_model=Document)
async def rename_document(doc_id: str, body: DocumentRename, workspace: WorkspaceService = Depends(_workspace)):
    return workspace.rename_document(doc_id, body.title)


@router.put("/documents/{doc_id}/folder", response_model=Document)
async def move_document(doc_id: str, body: DocumentMove, workspace: WorkspaceService = Depends(_workspace)):
    return workspace.move_document(doc_id, body.folder_id)


@router.put("/documents/{doc_id}/category", response_model=Document)
async def change_category(
    doc_id: str,
    body: DocumentCategoryChange,
    workspace: WorkspaceService = Depends(_workspace),
):
    return workspace.change_category(doc_id, body.category)


@router.delete("/documents/{doc_id}", status_code=204)
async def delete_document(doc_id: str, workspace: WorkspaceService = Depends(_workspace)):
    workspace.delete_document(doc_id)


@router.post("/documents/{doc_id}/assist/{command}", response_model=Document)
async def assist_document(
    doc_id: str,
    command: AssistCommand,
    session: SessionManager = Depends(require_session),
):
    """Run the writing assistant over a document and save the merged result."""
    return await session.context.assist.apply_to_document(doc_id, command)


# --- Folders ---


@router.post("/folders", response_model=Folder, status_code=201)
async def create_folder(body: FolderCreate, workspace: WorkspaceService = Depends(_workspace)):
    return workspace.create_folder(name=body.name, category=body.category)


@router.put("/folders/{folder_id}", response_model=Folder)
async def rename_folder(folder_id: str, body: FolderRename, workspace: WorkspaceService = Depends(_workspace)):
    return workspace.rename_folder(folder_id, body.name)


@router.delete("/folders/{folder_id}", response_model=FolderDeleteResult)
async def delete_folder(folder_id: str, workspace: WorkspaceService = Depends(_workspace)):
    return await workspace.delete_folder(folder_id)
