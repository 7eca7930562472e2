"""Shared schema pieces: camelCase JSON and the pagination envelope.

JSON fields are camelCase on the wire (fullName, isCompleted, ...)
while Python code stays snake_case. Requests are accepted in either
spelling.
"""

from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

T = TypeVar("T")


class ApiModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class PageRead(ApiModel, Generic[T]):
    """One page of results plus enough to render a pager."""

    items: list[T]
    total: int
    page: int
    size: int
    total_pages: int
