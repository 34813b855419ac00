import enum
from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field


class CollectionSortBy(str, enum.Enum):
    NAME = "name"
    CREATED_AT = "created_at"
    UPDATED_AT = "updated_at"


class SortOrder(str, enum.Enum):
    ASC = "asc"
    DESC = "desc"


class CollectionCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    description: Optional[str] = Field(default=None, max_length=1000)


class CollectionUpdate(BaseModel):
    name: Optional[str] = Field(default=None, max_length=100)
    description: Optional[str] = Field(default=None, max_length=1000)


class CollectionOwner(BaseModel):
    id: UUID
    name: str

    class Config:
        from_attributes = True


class CollectionOut(BaseModel):
    id: UUID
    name: str
    description: Optional[str] = None
    user_id: UUID
    user: Optional[CollectionOwner] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class CollectionWithStats(CollectionOut):
    exercise_count: int = 0
    attempt_count: int = 0
    correct_count: int = 0
    accuracy: str = "0"
    coverage: float = 0.0
