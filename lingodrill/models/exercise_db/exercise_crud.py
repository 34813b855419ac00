import logging
from typing import List, Optional, Tuple
from uuid import UUID

from sqlalchemy.orm import Session

from lingodrill.core.config import settings
from lingodrill.core.exceptions import ForbiddenError, NotFoundError
from lingodrill.models.collection_db.collection_db import Collection
from lingodrill.models.exercise_db.exercise_db import Exercise, ExerciseType
from lingodrill.models.user_db.user_db import User, UserRole
from lingodrill.schemas.exercise.exercise_base import ExerciseCreate, ExerciseUpdate
from lingodrill.services.exercise_validation import validate_answers_and_distractors

logger = logging.getLogger(__name__)


def get_exercise_by_id(db: Session, exercise_id: UUID) -> Optional[Exercise]:
    return db.query(Exercise).filter(Exercise.id == exercise_id).first()


def find_exercise_or_fail(db: Session, exercise_id: UUID) -> Exercise:
    exercise = get_exercise_by_id(db, exercise_id)
    if not exercise:
        raise NotFoundError("Exercise not found")
    return exercise


def get_exercise_by_media(db: Session, column: str, filename: str) -> Optional[Exercise]:
    return db.query(Exercise).filter(getattr(Exercise, column) == filename).first()


def check_exercise_quota(db: Session, collection: Collection, user: User) -> None:
    if user.role != UserRole.USER:
        return
    count = db.query(Exercise).filter(Exercise.collection_id == collection.id).count()
    if count >= settings.USER_MAX_EXERCISES_PER_COLLECTION:
        logger.info("Collection %s hit the exercise limit", collection.id)
        raise ForbiddenError(
            f"You have reached the maximum limit of {settings.USER_MAX_EXERCISES_PER_COLLECTION} "
            "exercises in this collection."
        )


def create_exercise(
    db: Session,
    data: ExerciseCreate,
    audio_filename: Optional[str] = None,
    image_filename: Optional[str] = None,
) -> Exercise:
    validate_answers_and_distractors(
        data.correct_answer, data.additional_correct_answers, data.distractors, data.type
    )

    exercise = Exercise(
        collection_id=data.collection_id,
        type=data.type,
        question=data.question,
        correct_answer=data.correct_answer,
        additional_correct_answers=data.additional_correct_answers,
        distractors=data.distractors,
        explanation=data.explanation,
        translation=data.translation,
        audio_url=audio_filename,
        image_url=image_filename,
    )
    db.add(exercise)
    db.commit()
    db.refresh(exercise)
    logger.info("Created exercise %s in collection %s", exercise.id, exercise.collection_id)
    return exercise


def update_exercise(db: Session, exercise: Exercise, updates: ExerciseUpdate) -> Exercise:
    changes = updates.model_dump(exclude_unset=True)
    for field in ("type", "question", "correct_answer", "is_active"):
        if changes.get(field, ...) is None:
            del changes[field]
    for field in ("additional_correct_answers", "distractors"):
        if field in changes and changes[field] is None:
            changes[field] = []

    # validate the state the exercise will end up in, not just the patch
    validate_answers_and_distractors(
        changes.get("correct_answer", exercise.correct_answer),
        changes.get("additional_correct_answers", exercise.additional_correct_answers),
        changes.get("distractors", exercise.distractors),
        ExerciseType(changes.get("type", exercise.type)),
    )

    for field, value in changes.items():
        setattr(exercise, field, value)

    db.commit()
    db.refresh(exercise)
    return exercise


def delete_exercise(db: Session, exercise: Exercise) -> Exercise:
    db.delete(exercise)
    db.commit()
    logger.info("Deleted exercise %s", exercise.id)
    return exercise


def list_exercises_in_collection(
    db: Session, collection_id: UUID, page: int = 1, size: int = 10
) -> Tuple[List[Exercise], int]:
    query = db.query(Exercise).filter(Exercise.collection_id == collection_id)
    total = query.count()
    items = (
        query.order_by(Exercise.created_at.desc(), Exercise.id)
        .offset((max(page, 1) - 1) * size)
        .limit(size)
        .all()
    )
    return items, total
