"""Project API routes.

All routes are scoped to the authenticated principal. A project that
belongs to someone else is reported exactly like a missing one (404).
"""

import uuid

from fastapi import APIRouter, Depends, Query, Response

from taskhub.api.deps import project_service
from taskhub.auth.dependencies import Principal, get_current_principal
from taskhub.db.repositories import Page
from taskhub.errors import unwrap
from taskhub.schemas.common import PageRead
from taskhub.schemas.project import ProjectRead, ProjectWrite
from taskhub.services.project_service import ProjectService

router = APIRouter(prefix="/projects")


def _page_read(page: Page) -> PageRead[ProjectRead]:
    return PageRead[ProjectRead](
        items=[ProjectRead.model_validate(p) for p in page.items],
        total=page.total,
        page=page.page,
        size=page.size,
        total_pages=page.total_pages,
    )


@router.post("", response_model=ProjectRead, status_code=201)
async def create_project(
    body: ProjectWrite,
    principal: Principal = Depends(get_current_principal),
    svc: ProjectService = Depends(project_service),
):
    """Create a project owned by the caller."""
    return await svc.create(principal.user_id, body.title, body.description)


@router.get("", response_model=PageRead[ProjectRead])
async def list_projects(
    page: int = Query(0, ge=0),
    size: int = Query(10, ge=1, le=100),
    principal: Principal = Depends(get_current_principal),
    svc: ProjectService = Depends(project_service),
):
    """List the caller's projects, oldest first."""
    return _page_read(unwrap(await svc.list(principal.user_id, page, size)))


@router.get("/{project_id}", response_model=ProjectRead)
async def get_project(
    project_id: uuid.UUID,
    principal: Principal = Depends(get_current_principal),
    svc: ProjectService = Depends(project_service),
):
    return unwrap(await svc.get(project_id, principal.user_id))


@router.put("/{project_id}", response_model=ProjectRead)
async def update_project(
    project_id: uuid.UUID,
    body: ProjectWrite,
    principal: Principal = Depends(get_current_principal),
    svc: ProjectService = Depends(project_service),
):
    """Replace a project's title and description."""
    return unwrap(
        await svc.update(project_id, principal.user_id, body.title, body.description)
    )


@router.delete("/{project_id}", status_code=204)
async def delete_project(
    project_id: uuid.UUID,
    principal: Principal = Depends(get_current_principal),
    svc: ProjectService = Depends(project_service),
):
    """Delete a project and all of its tasks."""
    unwrap(await svc.delete(project_id, principal.user_id))
    return Response(status_code=204)
