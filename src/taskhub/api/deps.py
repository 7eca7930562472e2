"""Service wiring for route handlers.

Each request gets its own AsyncSession; services are composed from
repositories over that session. The hasher and token codec are
process-wide and come from their own dependencies so tests can swap
them.
"""

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from taskhub.auth.jwt import TokenCodec, get_token_codec
from taskhub.auth.password import PasswordHasher, get_password_hasher
from taskhub.db.engine import get_db
from taskhub.db.repositories import ProjectRepository, TaskRepository, UserRepository
from taskhub.services.credential_service import CredentialService
from taskhub.services.ownership import OwnershipGate
from taskhub.services.progress import ProgressAggregator
from taskhub.services.project_service import ProjectService
from taskhub.services.task_service import TaskService


def credential_service(
    db: AsyncSession = Depends(get_db),
    hasher: PasswordHasher = Depends(get_password_hasher),
    tokens: TokenCodec = Depends(get_token_codec),
) -> CredentialService:
    return CredentialService(UserRepository(db), hasher, tokens)


def project_service(db: AsyncSession = Depends(get_db)) -> ProjectService:
    projects = ProjectRepository(db)
    return ProjectService(projects, OwnershipGate(projects, TaskRepository(db)))


def task_service(db: AsyncSession = Depends(get_db)) -> TaskService:
    tasks = TaskRepository(db)
    gate = OwnershipGate(ProjectRepository(db), tasks)
    return TaskService(tasks, gate, ProgressAggregator(gate, tasks))
