"""
Shared Schemas

Pagination envelope used by every paginated listing.
"""
import math
from typing import Generic, TypeVar
from pydantic import BaseModel

T = TypeVar("T")


class Paginated(BaseModel, Generic[T]):
    """One page of results plus the numbers a table needs."""
    data: list[T]
    total: int
    page: int
    per_page: int
    last_page: int

    @classmethod
    def build(cls, items, total: int, page: int, per_page: int):
        return cls(
            data=items,
            total=total,
            page=page,
            per_page=per_page,
            last_page=max(1, math.ceil(total / per_page)),
        )


class MessageResponse(BaseModel):
    message: str
