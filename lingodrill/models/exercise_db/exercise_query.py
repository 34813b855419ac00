import enum
import random
from typing import List, Tuple
from uuid import UUID

from sqlalchemy import and_, case, func
from sqlalchemy.orm import Session

from lingodrill.core.exceptions import NotFoundError
from lingodrill.models.attempt_db.attempt_db import Attempt
from lingodrill.models.exercise_db.exercise_db import Exercise

NO_EXERCISES_MESSAGE = "No exercises available in this collection"


class SelectionMode(str, enum.Enum):
    RANDOM = "random"
    LEAST_ATTEMPTED = "least-attempted"


def _active_in_collection(db: Session, collection_id: UUID):
    return db.query(Exercise).filter(
        Exercise.collection_id == collection_id,
        Exercise.is_active.is_(True),
    )


def get_random_active_exercise(db: Session, collection_id: UUID, rng: random.Random = None) -> Exercise:
    rng = rng or random
    query = _active_in_collection(db, collection_id)

    count = query.count()
    if count == 0:
        raise NotFoundError(NO_EXERCISES_MESSAGE)

    offset = rng.randrange(count)
    exercise = query.order_by(Exercise.created_at, Exercise.id).offset(offset).limit(1).first()
    if not exercise:
        raise NotFoundError("Exercise not found")

    return exercise


def get_least_attempted_exercise(db: Session, collection_id: UUID, user_id: UUID) -> Exercise:
    base = _active_in_collection(db, collection_id)

    # any exercise this user has never attempted wins outright
    attempted_by_user = (
        db.query(Attempt.id)
        .filter(Attempt.exercise_id == Exercise.id, Attempt.user_id == user_id)
        .exists()
    )
    untouched = base.filter(~attempted_by_user).order_by(Exercise.created_at, Exercise.id).first()
    if untouched:
        return untouched

    attempts = func.count(Attempt.id).label("attempts")
    least = (
        db.query(Exercise, attempts)
        .join(Attempt, and_(Attempt.exercise_id == Exercise.id, Attempt.user_id == user_id))
        .filter(Exercise.collection_id == collection_id, Exercise.is_active.is_(True))
        .group_by(Exercise.id)
        .order_by(attempts, Exercise.created_at, Exercise.id)
        .first()
    )
    if least is None:
        raise NotFoundError(NO_EXERCISES_MESSAGE)

    return least[0]


def select_exercise(
    db: Session,
    collection_id: UUID,
    user_id: UUID,
    mode: SelectionMode = SelectionMode.RANDOM,
    rng: random.Random = None,
) -> Exercise:
    match SelectionMode(mode):
        case SelectionMode.RANDOM:
            return get_random_active_exercise(db, collection_id, rng)
        case SelectionMode.LEAST_ATTEMPTED:
            return get_least_attempted_exercise(db, collection_id, user_id)


def get_top_most_attempted_exercises(
    db: Session,
    collection_id: UUID,
    user_id: UUID,
    limit: int = 5,
    offset: int = 0,
) -> List[Tuple[Exercise, int, int]]:
    """Exercises of a collection with this user's total and correct attempt counts.

    Every exercise of the collection is returned (zero counts included),
    ordered by total attempts, most attempted first.
    """
    total = func.count(Attempt.id)
    correct = func.coalesce(func.sum(case((Attempt.is_correct.is_(True), 1), else_=0)), 0)

    rows = (
        db.query(Exercise, total.label("total_attempts"), correct.label("correct_attempts"))
        .outerjoin(Attempt, and_(Attempt.exercise_id == Exercise.id, Attempt.user_id == user_id))
        .filter(Exercise.collection_id == collection_id)
        .group_by(Exercise.id)
        .order_by(total.desc(), Exercise.created_at, Exercise.id)
        .offset(offset)
        .limit(limit)
        .all()
    )
    return [(exercise, int(total_attempts), int(correct_attempts)) for exercise, total_attempts, correct_attempts in rows]
