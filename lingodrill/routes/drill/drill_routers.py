from uuid import UUID

from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

from lingodrill.core.database import get_db
from lingodrill.core.security import get_current_user
from lingodrill.models.exercise_db.exercise_query import SelectionMode
from lingodrill.models.user_db.user_db import User
from lingodrill.schemas.drill.drill_base import AnswerFeedback, QuizQuestion, SessionStatsOut, UserAnswer
from lingodrill.services.quiz import QuizService
from lingodrill.services.quiz_session_store import get_session_store

drill_router = APIRouter(prefix="/drill", tags=["Drill"])


def get_quiz_service(
    db: Session = Depends(get_db),
    session_store=Depends(get_session_store),
) -> QuizService:
    return QuizService(db, session_store)


@drill_router.get("/{collection_id}", response_model=QuizQuestion)
def get_question(
    collection_id: UUID,
    mode: SelectionMode = SelectionMode.RANDOM,
    quiz: QuizService = Depends(get_quiz_service),
    current_user: User = Depends(get_current_user),
):
    return quiz.get_drill_exercise(current_user.id, collection_id, mode)


@drill_router.post("/{collection_id}/submit", response_model=AnswerFeedback)
def submit_answer(
    collection_id: UUID,
    answer: UserAnswer,
    mode: SelectionMode = SelectionMode.RANDOM,
    quiz: QuizService = Depends(get_quiz_service),
    current_user: User = Depends(get_current_user),
):
    return quiz.submit_drill_answer(
        current_user.id, collection_id, answer.exercise_id, answer.user_answer, mode
    )


@drill_router.get("/{collection_id}/session", response_model=SessionStatsOut)
def get_session(
    collection_id: UUID,
    quiz: QuizService = Depends(get_quiz_service),
    current_user: User = Depends(get_current_user),
):
    return quiz.get_session_stats(current_user.id, collection_id)


@drill_router.delete("/{collection_id}/session", status_code=204)
def reset_session(
    collection_id: UUID,
    quiz: QuizService = Depends(get_quiz_service),
    current_user: User = Depends(get_current_user),
):
    quiz.reset_session(current_user.id, collection_id)
    return Response(status_code=204)
