import logging
from typing import List, Optional
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from lingodrill.models.attempt_db.attempt_db import Attempt

logger = logging.getLogger(__name__)


def record_attempt(
    db: Session, user_id: UUID, exercise_id: UUID, is_correct: bool, answer: Optional[str] = None
) -> Attempt:
    """Append one attempt and commit it.

    A failed insert is rolled back and re-raised, never retried.
    """
    attempt = Attempt(user_id=user_id, exercise_id=exercise_id, answer=answer, is_correct=is_correct)
    db.add(attempt)
    try:
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.error("Failed to record attempt for user %s on exercise %s", user_id, exercise_id)
        raise
    db.refresh(attempt)
    logger.debug("Recorded attempt %s (correct=%s)", attempt.id, is_correct)
    return attempt


def get_attempts(db: Session, user_id: UUID, exercise_id: UUID) -> List[Attempt]:
    return (
        db.query(Attempt)
        .filter(Attempt.user_id == user_id, Attempt.exercise_id == exercise_id)
        .order_by(Attempt.created_at)
        .all()
    )
