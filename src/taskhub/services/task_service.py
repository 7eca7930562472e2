"""Task service: task CRUD, search, completion and progress.

Every operation resolves the project through the OwnershipGate first
(and then the task, scoped to that project, where one is addressed),
so a task is only ever reachable by the owner of its project.
"""

import uuid
from datetime import date
from typing import Optional

import structlog

from taskhub.db.models import Task, utcnow
from taskhub.db.repositories import Page, TaskRepository
from taskhub.outcome import Failure, Ok, Outcome
from taskhub.services.ownership import OwnershipGate
from taskhub.services.progress import Progress, ProgressAggregator
from taskhub.services.project_service import check_page

logger = structlog.get_logger()


class TaskService:
    """Business logic for task management."""

    def __init__(
        self,
        tasks: TaskRepository,
        gate: OwnershipGate,
        aggregator: ProgressAggregator,
    ):
        self.tasks = tasks
        self.gate = gate
        self.aggregator = aggregator

    # ─── Create ──────────────────────────────────────────

    async def create(
        self,
        principal_user_id: uuid.UUID,
        project_id: uuid.UUID,
        title: str,
        description: Optional[str] = None,
        due_date: Optional[date] = None,
    ) -> Outcome[Task]:
        """Create a task in an owned project. Tasks start not completed."""
        resolved = await self.gate.resolve_project(project_id, principal_user_id)
        if isinstance(resolved, Failure):
            return resolved

        task = Task(
            project_id=resolved.value.id,
            title=title,
            description=description,
            due_date=due_date,
            is_completed=False,
        )
        task = await self.tasks.add(task)
        logger.info("task.created", task_id=str(task.id), project_id=str(project_id))
        return Ok(task)

    # ─── Read ────────────────────────────────────────────

    async def list(
        self,
        project_id: uuid.UUID,
        principal_user_id: uuid.UUID,
        page: int = 0,
        size: int = 20,
    ) -> Outcome[Page[Task]]:
        invalid = check_page(page, size)
        if invalid:
            return invalid
        resolved = await self.gate.resolve_project(project_id, principal_user_id)
        if isinstance(resolved, Failure):
            return resolved
        return Ok(await self.tasks.page(resolved.value.id, page, size))

    async def search(
        self,
        project_id: uuid.UUID,
        principal_user_id: uuid.UUID,
        term: str,
        page: int = 0,
        size: int = 20,
    ) -> Outcome[Page[Task]]:
        """Case-insensitive match of `term` in title or description."""
        invalid = check_page(page, size)
        if invalid:
            return invalid
        resolved = await self.gate.resolve_project(project_id, principal_user_id)
        if isinstance(resolved, Failure):
            return resolved
        return Ok(await self.tasks.search(resolved.value.id, term, page, size))

    async def get(
        self,
        task_id: uuid.UUID,
        project_id: uuid.UUID,
        principal_user_id: uuid.UUID,
    ) -> Outcome[Task]:
        return await self.gate.resolve_task(task_id, project_id, principal_user_id)

    # ─── Update ──────────────────────────────────────────

    async def update(
        self,
        task_id: uuid.UUID,
        project_id: uuid.UUID,
        principal_user_id: uuid.UUID,
        title: str,
        description: Optional[str] = None,
        due_date: Optional[date] = None,
    ) -> Outcome[Task]:
        """Replace title, description and due date (not completion)."""
        resolved = await self.gate.resolve_task(task_id, project_id, principal_user_id)
        if isinstance(resolved, Failure):
            return resolved

        task = resolved.value
        task.title = title
        task.description = description
        task.due_date = due_date
        task.updated_at = utcnow()
        return Ok(await self.tasks.save(task))

    async def complete(
        self,
        task_id: uuid.UUID,
        project_id: uuid.UUID,
        principal_user_id: uuid.UUID,
    ) -> Outcome[Task]:
        """Mark a task completed. Completing a completed task is a no-op."""
        resolved = await self.gate.resolve_task(task_id, project_id, principal_user_id)
        if isinstance(resolved, Failure):
            return resolved

        task = resolved.value
        if task.is_completed:
            return Ok(task)

        task.is_completed = True
        task.updated_at = utcnow()
        task = await self.tasks.save(task)
        logger.info("task.completed", task_id=str(task_id))
        return Ok(task)

    # ─── Delete ──────────────────────────────────────────

    async def delete(
        self,
        task_id: uuid.UUID,
        project_id: uuid.UUID,
        principal_user_id: uuid.UUID,
    ) -> Outcome[None]:
        resolved = await self.gate.resolve_task(task_id, project_id, principal_user_id)
        if isinstance(resolved, Failure):
            return resolved

        await self.tasks.delete(resolved.value)
        logger.info("task.deleted", task_id=str(task_id))
        return Ok(None)

    # ─── Progress ────────────────────────────────────────

    async def progress(
        self, project_id: uuid.UUID, principal_user_id: uuid.UUID
    ) -> Outcome[Progress]:
        return await self.aggregator.progress(project_id, principal_user_id)
