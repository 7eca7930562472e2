"""Task API routes, nested under their project.

Key patterns:
- Every route resolves the project for the caller first, so tasks of
  someone else's project are 404 regardless of the task id
- PUT replaces title/description/due date; completion has its own
  idempotent PUT .../complete
- /search and /progress are declared before /{task_id}
"""

import uuid

from fastapi import APIRouter, Depends, Query, Response

from taskhub.api.deps import task_service
from taskhub.auth.dependencies import Principal, get_current_principal
from taskhub.db.repositories import Page
from taskhub.errors import unwrap
from taskhub.schemas.common import PageRead
from taskhub.schemas.task import ProgressRead, TaskRead, TaskWrite
from taskhub.services.task_service import TaskService

router = APIRouter(prefix="/projects/{project_id}/tasks")


def _page_read(page: Page) -> PageRead[TaskRead]:
    return PageRead[TaskRead](
        items=[TaskRead.model_validate(t) for t in page.items],
        total=page.total,
        page=page.page,
        size=page.size,
        total_pages=page.total_pages,
    )


@router.post("", response_model=TaskRead, status_code=201)
async def create_task(
    project_id: uuid.UUID,
    body: TaskWrite,
    principal: Principal = Depends(get_current_principal),
    svc: TaskService = Depends(task_service),
):
    """Create a new (not completed) task in one of the caller's projects."""
    return unwrap(
        await svc.create(
            principal.user_id,
            project_id,
            title=body.title,
            description=body.description,
            due_date=body.due_date,
        )
    )


@router.get("", response_model=PageRead[TaskRead])
async def list_tasks(
    project_id: uuid.UUID,
    page: int = Query(0, ge=0),
    size: int = Query(20, ge=1, le=100),
    principal: Principal = Depends(get_current_principal),
    svc: TaskService = Depends(task_service),
):
    return _page_read(unwrap(await svc.list(project_id, principal.user_id, page, size)))


@router.get("/search", response_model=PageRead[TaskRead])
async def search_tasks(
    project_id: uuid.UUID,
    term: str = Query(..., min_length=1, max_length=200),
    page: int = Query(0, ge=0),
    size: int = Query(20, ge=1, le=100),
    principal: Principal = Depends(get_current_principal),
    svc: TaskService = Depends(task_service),
):
    """Search tasks by title or description (case-insensitive)."""
    return _page_read(
        unwrap(await svc.search(project_id, principal.user_id, term, page, size))
    )


@router.get("/progress", response_model=ProgressRead)
async def get_progress(
    project_id: uuid.UUID,
    principal: Principal = Depends(get_current_principal),
    svc: TaskService = Depends(task_service),
):
    """Completion statistics for a project."""
    progress = unwrap(await svc.progress(project_id, principal.user_id))
    return ProgressRead(
        total_tasks=progress.total,
        completed_tasks=progress.completed,
        progress_percentage=progress.percentage,
    )


@router.get("/{task_id}", response_model=TaskRead)
async def get_task(
    project_id: uuid.UUID,
    task_id: uuid.UUID,
    principal: Principal = Depends(get_current_principal),
    svc: TaskService = Depends(task_service),
):
    return unwrap(await svc.get(task_id, project_id, principal.user_id))


@router.put("/{task_id}", response_model=TaskRead)
async def update_task(
    project_id: uuid.UUID,
    task_id: uuid.UUID,
    body: TaskWrite,
    principal: Principal = Depends(get_current_principal),
    svc: TaskService = Depends(task_service),
):
    return unwrap(
        await svc.update(
            task_id,
            project_id,
            principal.user_id,
            title=body.title,
            description=body.description,
            due_date=body.due_date,
        )
    )


@router.put("/{task_id}/complete", response_model=TaskRead)
async def complete_task(
    project_id: uuid.UUID,
    task_id: uuid.UUID,
    principal: Principal = Depends(get_current_principal),
    svc: TaskService = Depends(task_service),
):
    """Mark a task completed. Safe to repeat."""
    return unwrap(await svc.complete(task_id, project_id, principal.user_id))


@router.delete("/{task_id}", status_code=204)
async def delete_task(
    project_id: uuid.UUID,
    task_id: uuid.UUID,
    principal: Principal = Depends(get_current_principal),
    svc: TaskService = Depends(task_service),
):
    unwrap(await svc.delete(task_id, project_id, principal.user_id))
    return Response(status_code=204)
