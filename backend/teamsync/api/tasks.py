"""Task endpoints. Tasks are personal: every route works on the caller's own list."""

from typing import List

from fastapi import APIRouter, Depends

from ..core.auth import require_session
from ..exceptions import TaskNotFoundError
from ..schemas.task import Task, TaskCreate
from ..services.session_service import SessionManager

router = APIRouter(prefix="/api/tasks", tags=["tasks"])


def _own_task(session: SessionManager, task_id: str) -> Task:
    task = session.context.tasks.get_task(task_id)
    if task.user_id != session.current_user.id:
        raise TaskNotFoundError(task_id)
    return task


@router.get("", response_model=List[Task])
async def list_tasks(session: SessionManager = Depends(require_session)):
    return session.context.tasks.list_tasks(session.current_user.id)


@router.post("", response_model=Task, status_code=201)
async def add_task(body: TaskCreate, session: SessionManager = Depends(require_session)):
    return session.context.tasks.add_task(
        session.current_user, body.title, priority=body.priority, due_date=body.due_date
    )


@router.post("/{task_id}/toggle", response_model=Task)
async def toggle_task(task_id: str, session: SessionManager = Depends(require_session)):
    _own_task(session, task_id)
    return await session.context.tasks.toggle_task(task_id, session.current_user)


@router.delete("/{task_id}", status_code=204)
async def delete_task(task_id: str, session: SessionManager = Depends(require_session)):
    """Idempotent: deleting an unknown task is not an error."""
    session.context.tasks.delete_task(task_id)
