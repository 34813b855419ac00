from pydantic import BaseModel
from typing import List, Generic, TypeVar

T = TypeVar("T")


class PageResponse(BaseModel, Generic[T]):
    page: int
    size: int
    total: int
    has_next: bool
    has_prev: bool
    items: List[T]

    @classmethod
    def build(cls, items: List[T], total: int, page: int, size: int):
        return cls(
            page=page,
            size=size,
            total=total,
            has_next=(page * size) < total,
            has_prev=page > 1,
            items=items,
        )
