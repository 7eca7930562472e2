"""Project service — owner-scoped project CRUD.

Service layer separates business logic from HTTP routing. Routes turn
HTTP into service calls; the service turns them into repository calls,
always resolving ownership through the OwnershipGate before reading or
writing an existing project.
"""

import uuid
from typing import Optional

import structlog

from taskhub.db.models import Project, utcnow
from taskhub.db.repositories import Page, ProjectRepository
from taskhub.outcome import Failure, Ok, Outcome, validation_error
from taskhub.services.ownership import OwnershipGate

logger = structlog.get_logger()


def check_page(page: int, size: int) -> Optional[Failure]:
    if page < 0:
        return validation_error("Page index must not be negative")
    if size <= 0:
        return validation_error("Page size must be positive")
    return None


class ProjectService:
    """Business logic for project management."""

    def __init__(self, projects: ProjectRepository, gate: OwnershipGate):
        self.projects = projects
        self.gate = gate

    async def create(
        self,
        principal_user_id: uuid.UUID,
        title: str,
        description: Optional[str] = None,
    ) -> Project:
        project = Project(
            user_id=principal_user_id,
            title=title,
            description=description,
        )
        project = await self.projects.add(project)
        logger.info(
            "project.created",
            project_id=str(project.id),
            user_id=str(principal_user_id),
        )
        return project

    async def list(
        self, principal_user_id: uuid.UUID, page: int = 0, size: int = 10
    ) -> Outcome[Page[Project]]:
        invalid = check_page(page, size)
        if invalid:
            return invalid
        return Ok(await self.projects.page(principal_user_id, page, size))

    async def get(
        self, project_id: uuid.UUID, principal_user_id: uuid.UUID
    ) -> Outcome[Project]:
        return await self.gate.resolve_project(project_id, principal_user_id)

    async def update(
        self,
        project_id: uuid.UUID,
        principal_user_id: uuid.UUID,
        title: str,
        description: Optional[str] = None,
    ) -> Outcome[Project]:
        """Replace title and description. The owner never changes."""
        resolved = await self.gate.resolve_project(project_id, principal_user_id)
        if isinstance(resolved, Failure):
            return resolved

        project = resolved.value
        project.title = title
        project.description = description
        project.updated_at = utcnow()
        return Ok(await self.projects.save(project))

    async def delete(
        self, project_id: uuid.UUID, principal_user_id: uuid.UUID
    ) -> Outcome[None]:
        """Delete a project together with all of its tasks."""
        resolved = await self.gate.resolve_project(project_id, principal_user_id)
        if isinstance(resolved, Failure):
            return resolved

        await self.projects.delete(resolved.value)
        logger.info("project.deleted", project_id=str(project_id))
        return Ok(None)
