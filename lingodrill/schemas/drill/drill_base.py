from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from lingodrill.models.exercise_db.exercise_db import ExerciseType


class QuizQuestion(BaseModel):
    id: UUID
    question: str
    type: ExerciseType
    audio_url: Optional[str] = None
    image_url: Optional[str] = None
    translation: Optional[str] = None
    explanation: Optional[str] = None
    distractors: List[str] = []


class UserAnswer(BaseModel):
    exercise_id: UUID
    user_answer: str = Field(min_length=1)


class SessionStatsOut(BaseModel):
    correct: int
    total: int
    streak: int
    max_streak: int


class AnswerFeedback(BaseModel):
    is_correct: bool
    correct_answer: str
    explanation: Optional[str] = None
    additional_correct_answers: Optional[List[str]] = None
    next_exercise_id: UUID
    session: Optional[SessionStatsOut] = None
