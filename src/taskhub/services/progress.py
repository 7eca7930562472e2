"""Project progress: completion statistics over a project's tasks."""

import uuid
from dataclasses import dataclass

from taskhub.db.repositories import TaskRepository
from taskhub.outcome import Failure, Ok, Outcome
from taskhub.services.ownership import OwnershipGate


@dataclass(frozen=True)
class Progress:
    total: int
    completed: int
    percentage: float


def completion_percentage(total: int, completed: int) -> float:
    if total == 0:
        return 0.0
    return completed / total * 100.0


class ProgressAggregator:
    """Counts are read from storage on every call; nothing is cached."""

    def __init__(self, gate: OwnershipGate, tasks: TaskRepository):
        self.gate = gate
        self.tasks = tasks

    async def progress(
        self, project_id: uuid.UUID, principal_user_id: uuid.UUID
    ) -> Outcome[Progress]:
        resolved = await self.gate.resolve_project(project_id, principal_user_id)
        if isinstance(resolved, Failure):
            return resolved

        total, completed = await self.tasks.count(resolved.value.id)
        return Ok(
            Progress(
                total=total,
                completed=completed,
                percentage=completion_percentage(total, completed),
            )
        )
