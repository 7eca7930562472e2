"""Pydantic schemas for projects.

Create and update share one body: an update replaces title and
description wholesale.
"""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import Field

from taskhub.schemas.common import ApiModel


class ProjectWrite(ApiModel):
    title: str = Field(..., min_length=3, max_length=200)
    description: Optional[str] = Field(None, max_length=1000)


class ProjectRead(ApiModel):
    id: uuid.UUID
    title: str
    description: Optional[str]
    user_id: uuid.UUID
    created_at: datetime
    updated_at: datetime
