import logging
import random
from uuid import UUID

from sqlalchemy.orm import Session

from lingodrill.core.exceptions import NotFoundError
from lingodrill.models.attempt_db.attempt_crud import record_attempt
from lingodrill.models.collection_db.collection_crud import validate_collection_access
from lingodrill.models.exercise_db.exercise_crud import find_exercise_or_fail
from lingodrill.models.exercise_db.exercise_query import SelectionMode, select_exercise
from lingodrill.schemas.drill.drill_base import AnswerFeedback, QuizQuestion, SessionStatsOut
from lingodrill.services.answers import check_answer
from lingodrill.services.quiz_session_store import SessionStats
from lingodrill.services.shuffle import build_options

logger = logging.getLogger(__name__)


def _stats_out(stats: SessionStats) -> SessionStatsOut:
    return SessionStatsOut(
        correct=stats.correct, total=stats.total, streak=stats.streak, max_streak=stats.max_streak
    )


class QuizService:
    """Drill loop: pick a question, grade an answer, pick the next question."""

    def __init__(self, db: Session, session_store, rng: random.Random = None):
        self.db = db
        self.session_store = session_store
        self.rng = rng or random.Random()

    def get_drill_exercise(
        self, user_id: UUID, collection_id: UUID, mode: SelectionMode = SelectionMode.RANDOM
    ) -> QuizQuestion:
        validate_collection_access(self.db, user_id, collection_id)

        exercise = select_exercise(self.db, collection_id, user_id, mode, self.rng)

        return QuizQuestion(
            id=exercise.id,
            question=exercise.question,
            type=exercise.type,
            audio_url=exercise.audio_url,
            image_url=exercise.image_url,
            translation=exercise.translation,
            explanation=exercise.explanation,
            distractors=build_options(exercise, rng=self.rng),
        )

    def submit_drill_answer(
        self,
        user_id: UUID,
        collection_id: UUID,
        exercise_id: UUID,
        user_answer: str,
        mode: SelectionMode = SelectionMode.RANDOM,
    ) -> AnswerFeedback:
        validate_collection_access(self.db, user_id, collection_id)

        exercise = find_exercise_or_fail(self.db, exercise_id)
        if exercise.collection_id != collection_id:
            raise NotFoundError("Exercise not found in this collection")

        is_correct = check_answer(user_answer, exercise)

        # the attempt is committed before the next question is chosen and
        # stays recorded even if that selection fails
        record_attempt(self.db, user_id, exercise.id, is_correct, answer=user_answer)
        stats = self.session_store.record_answer(user_id, collection_id, exercise.id, is_correct)

        next_question = self.get_drill_exercise(user_id, collection_id, mode)

        return AnswerFeedback(
            is_correct=is_correct,
            correct_answer=exercise.correct_answer,
            explanation=exercise.explanation,
            additional_correct_answers=exercise.additional_correct_answers or None,
            next_exercise_id=next_question.id,
            session=_stats_out(stats),
        )

    def get_session_stats(self, user_id: UUID, collection_id: UUID) -> SessionStatsOut:
        validate_collection_access(self.db, user_id, collection_id)
        return _stats_out(self.session_store.get_stats(user_id, collection_id))

    def reset_session(self, user_id: UUID, collection_id: UUID) -> None:
        validate_collection_access(self.db, user_id, collection_id)
        self.session_store.reset(user_id, collection_id)
