from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel

from lingodrill.models.exercise_db.exercise_db import ExerciseType


class ExerciseAttemptStats(BaseModel):
    id: UUID
    question: str
    type: ExerciseType
    is_active: bool
    total_attempts: int
    correct_attempts: int
    accuracy: str


class RecentAttempt(BaseModel):
    id: UUID
    exercise_id: UUID
    question: str
    collection_name: str
    answer: Optional[str] = None
    is_correct: bool
    created_at: datetime


class UserAttemptStats(BaseModel):
    collections: int
    attempts: int
    correct_attempts: int
    accuracy: str
    recent_attempts: List[RecentAttempt] = []


class DashboardStats(BaseModel):
    users: int
    collections: int
    exercises: int
    attempts: int
    correct_attempts: int
    accuracy: str
