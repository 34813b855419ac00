from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from lingodrill.models.exercise_db.exercise_db import ExerciseType


def _drop_blank(values):
    # multipart forms send "" or "null" for empty list entries
    if values is None:
        return values
    return [v for v in values if isinstance(v, str) and v.strip().lower() not in ("", "null")]


class ExerciseCreate(BaseModel):
    collection_id: UUID
    type: ExerciseType
    question: str = Field(min_length=5, max_length=500)
    correct_answer: str = Field(min_length=1, max_length=50)
    additional_correct_answers: List[str] = []
    distractors: List[str] = []
    explanation: Optional[str] = Field(default=None, max_length=1000)
    translation: Optional[str] = Field(default=None, max_length=1000)

    @field_validator("additional_correct_answers", "distractors", mode="before")
    @classmethod
    def drop_blank_entries(cls, values):
        return _drop_blank(values)


class ExerciseUpdate(BaseModel):
    type: Optional[ExerciseType] = None
    question: Optional[str] = Field(default=None, min_length=5, max_length=500)
    correct_answer: Optional[str] = Field(default=None, min_length=1, max_length=50)
    additional_correct_answers: Optional[List[str]] = None
    distractors: Optional[List[str]] = None
    explanation: Optional[str] = Field(default=None, max_length=1000)
    translation: Optional[str] = Field(default=None, max_length=1000)
    is_active: Optional[bool] = None

    @field_validator("additional_correct_answers", "distractors", mode="before")
    @classmethod
    def drop_blank_entries(cls, values):
        return _drop_blank(values)


class ExerciseOut(BaseModel):
    id: UUID
    collection_id: UUID
    type: ExerciseType
    question: str
    correct_answer: str
    additional_correct_answers: List[str] = []
    distractors: List[str] = []
    explanation: Optional[str] = None
    translation: Optional[str] = None
    audio_url: Optional[str] = None
    image_url: Optional[str] = None
    is_active: bool
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
