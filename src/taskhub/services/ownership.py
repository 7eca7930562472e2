"""Ownership gate — every project/task access passes through here first.

A project is visible only to its owner; a task only to the owner of
its project. "Does not exist" and "belongs to someone else" are the
same NOT_FOUND failure, so callers can never probe for other users'
resources.
"""

import uuid

from taskhub.db.models import Project, Task
from taskhub.db.repositories import ProjectRepository, TaskRepository
from taskhub.outcome import Failure, Ok, Outcome, not_found


class OwnershipGate:
    def __init__(self, projects: ProjectRepository, tasks: TaskRepository):
        self.projects = projects
        self.tasks = tasks

    async def resolve_project(
        self, project_id: uuid.UUID, principal_user_id: uuid.UUID
    ) -> Outcome[Project]:
        project = await self.projects.find_owned(project_id, principal_user_id)
        if project is None:
            return not_found("Project")
        return Ok(project)

    async def resolve_task(
        self,
        task_id: uuid.UUID,
        project_id: uuid.UUID,
        principal_user_id: uuid.UUID,
    ) -> Outcome[Task]:
        resolved = await self.resolve_project(project_id, principal_user_id)
        if isinstance(resolved, Failure):
            return resolved

        task = await self.tasks.find_in_project(task_id, resolved.value.id)
        if task is None:
            return not_found("Task")
        return Ok(task)
