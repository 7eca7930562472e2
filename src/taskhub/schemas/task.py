"""Pydantic schemas for tasks and project progress.

- TaskWrite: body for create and full update (title, description, due date)
- TaskRead: what the API returns
- ProgressRead: completion statistics for a project
"""

import uuid
from datetime import date, datetime
from typing import Optional

from pydantic import Field

from taskhub.schemas.common import ApiModel


class TaskWrite(ApiModel):
    title: str = Field(..., min_length=3, max_length=200)
    description: Optional[str] = Field(None, max_length=1000)
    due_date: Optional[date] = None


class TaskRead(ApiModel):
    id: uuid.UUID
    title: str
    description: Optional[str]
    due_date: Optional[date]
    is_completed: bool
    project_id: uuid.UUID
    created_at: datetime
    updated_at: datetime


class ProgressRead(ApiModel):
    total_tasks: int
    completed_tasks: int
    progress_percentage: float
