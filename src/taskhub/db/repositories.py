"""Repositories: the storage capability the services are built on.

Each repository wraps one AsyncSession. Mutating methods commit, so
every single create/update/delete is atomic on its own. Ownership is
never checked by fetching and then comparing: lookups that must be
owner-scoped filter on the id and the owner in the same query.
"""

import math
import uuid
from dataclasses import dataclass
from typing import Generic, Optional, TypeVar

from sqlalchemy import case, delete, func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from taskhub.db.models import Project, Task, User

T = TypeVar("T")


class DuplicateEmailError(Exception):
    """Raised when the users.email unique constraint rejects an insert."""


@dataclass
class Page(Generic[T]):
    items: list[T]
    total: int
    page: int
    size: int

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.size) if self.size else 0


def normalize_email(email: str) -> str:
    return email.strip().lower()


# ═══════════════════════════════════════════════════════════
# Users
# ═══════════════════════════════════════════════════════════


class UserRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def find_by_id(self, user_id: uuid.UUID) -> Optional[User]:
        return await self.db.get(User, user_id)

    async def find_by_email(self, email: str) -> Optional[User]:
        result = await self.db.execute(
            select(User).where(User.email == normalize_email(email))
        )
        return result.scalars().first()

    async def add(self, user: User) -> User:
        """Insert a user. The unique constraint is the last word on duplicates."""
        user.email = normalize_email(user.email)
        self.db.add(user)
        try:
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            raise DuplicateEmailError(user.email) from e
        return user

    async def save(self, user: User) -> User:
        await self.db.commit()
        return user


# ═══════════════════════════════════════════════════════════
# Projects
# ═══════════════════════════════════════════════════════════


class ProjectRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def add(self, project: Project) -> Project:
        self.db.add(project)
        await self.db.commit()
        return project

    async def find_owned(
        self, project_id: uuid.UUID, owner_id: uuid.UUID
    ) -> Optional[Project]:
        result = await self.db.execute(
            select(Project).where(
                Project.id == project_id, Project.user_id == owner_id
            )
        )
        return result.scalars().first()

    async def page(self, owner_id: uuid.UUID, page: int, size: int) -> Page[Project]:
        total = await self.db.scalar(
            select(func.count()).select_from(Project).where(Project.user_id == owner_id)
        )
        result = await self.db.execute(
            select(Project)
            .where(Project.user_id == owner_id)
            .order_by(Project.created_at, Project.id)
            .limit(size)
            .offset(page * size)
        )
        return Page(list(result.scalars().all()), total or 0, page, size)

    async def save(self, project: Project) -> Project:
        await self.db.commit()
        return project

    async def delete(self, project: Project) -> None:
        """Delete a project and its tasks in one transaction."""
        await self.db.execute(delete(Task).where(Task.project_id == project.id))
        await self.db.delete(project)
        await self.db.commit()


# ═══════════════════════════════════════════════════════════
# Tasks
# ═══════════════════════════════════════════════════════════


class TaskRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def add(self, task: Task) -> Task:
        self.db.add(task)
        await self.db.commit()
        return task

    async def find_in_project(
        self, task_id: uuid.UUID, project_id: uuid.UUID
    ) -> Optional[Task]:
        result = await self.db.execute(
            select(Task).where(Task.id == task_id, Task.project_id == project_id)
        )
        return result.scalars().first()

    async def page(self, project_id: uuid.UUID, page: int, size: int) -> Page[Task]:
        return await self._page(page, size, Task.project_id == project_id)

    async def search(
        self, project_id: uuid.UUID, term: str, page: int, size: int
    ) -> Page[Task]:
        """Case-insensitive substring match on title or description."""
        return await self._page(
            page,
            size,
            Task.project_id == project_id,
            or_(
                Task.title.icontains(term, autoescape=True),
                Task.description.icontains(term, autoescape=True),
            ),
        )

    async def count(self, project_id: uuid.UUID) -> tuple[int, int]:
        """(total, completed) for a project, read in a single query."""
        row = (
            await self.db.execute(
                select(
                    func.count(Task.id),
                    func.coalesce(
                        func.sum(case((Task.is_completed.is_(True), 1), else_=0)), 0
                    ),
                ).where(Task.project_id == project_id)
            )
        ).one()
        return int(row[0]), int(row[1])

    async def save(self, task: Task) -> Task:
        await self.db.commit()
        return task

    async def delete(self, task: Task) -> None:
        await self.db.delete(task)
        await self.db.commit()

    async def _page(self, page: int, size: int, *criteria) -> Page[Task]:
        total = await self.db.scalar(
            select(func.count()).select_from(Task).where(*criteria)
        )
        result = await self.db.execute(
            select(Task)
            .where(*criteria)
            .order_by(Task.created_at, Task.id)
            .limit(size)
            .offset(page * size)
        )
        return Page(list(result.scalars().all()), total or 0, page, size)
