"""Attempt aggregation: per-user counts, accuracy and coverage.

Everything here is scoped to one user except ``admin_dashboard_stats``,
which aggregates over all users.
"""

from typing import Dict, Iterable, List, Tuple
from uuid import UUID

from sqlalchemy import case, func
from sqlalchemy.orm import Session

from lingodrill.models.attempt_db.attempt_db import Attempt
from lingodrill.models.collection_db.collection_db import Collection
from lingodrill.models.exercise_db.exercise_db import Exercise
from lingodrill.models.exercise_db.exercise_query import get_top_most_attempted_exercises
from lingodrill.models.user_db.user_db import User
from lingodrill.schemas.collection.collection_base import CollectionOut, CollectionWithStats
from lingodrill.schemas.stats.stats_base import (
    DashboardStats,
    ExerciseAttemptStats,
    RecentAttempt,
    UserAttemptStats,
)

_correct_sum = func.coalesce(func.sum(case((Attempt.is_correct.is_(True), 1), else_=0)), 0)


def format_percentage(part: int, whole: int) -> str:
    if not whole:
        return "0"
    return f"{part / whole * 100:.1f}"


def percentage(part: int, whole: int) -> float:
    if not whole:
        return 0.0
    return round(part / whole * 100, 1)


def exercise_attempt_counts(
    db: Session, user_id: UUID, exercise_ids: Iterable[UUID]
) -> Dict[UUID, Tuple[int, int]]:
    """Map exercise id to ``(total, correct)`` attempts by this user."""
    exercise_ids = list(exercise_ids)
    if not exercise_ids:
        return {}

    rows = (
        db.query(Attempt.exercise_id, func.count(Attempt.id), _correct_sum)
        .filter(Attempt.user_id == user_id, Attempt.exercise_id.in_(exercise_ids))
        .group_by(Attempt.exercise_id)
        .all()
    )
    return {exercise_id: (int(total), int(correct)) for exercise_id, total, correct in rows}


def collection_coverage(db: Session, collection_id: UUID, user_id: UUID) -> float:
    exercise_count = db.query(Exercise).filter(Exercise.collection_id == collection_id).count()
    attempted = (
        db.query(func.count(func.distinct(Attempt.exercise_id)))
        .join(Exercise, Exercise.id == Attempt.exercise_id)
        .filter(Exercise.collection_id == collection_id, Attempt.user_id == user_id)
        .scalar()
    )
    return percentage(attempted or 0, exercise_count)


def enrich_collections_for_user(
    db: Session, collections: List[Collection], user_id: UUID
) -> List[CollectionWithStats]:
    if not collections:
        return []

    collection_ids = [c.id for c in collections]
    exercises = (
        db.query(Exercise.id, Exercise.collection_id)
        .filter(Exercise.collection_id.in_(collection_ids))
        .all()
    )
    exercise_to_collection = {exercise_id: collection_id for exercise_id, collection_id in exercises}

    exercise_counts: Dict[UUID, int] = {}
    for collection_id in exercise_to_collection.values():
        exercise_counts[collection_id] = exercise_counts.get(collection_id, 0) + 1

    totals: Dict[UUID, List[int]] = {}
    for exercise_id, (total, correct) in exercise_attempt_counts(db, user_id, exercise_to_collection).items():
        bucket = totals.setdefault(exercise_to_collection[exercise_id], [0, 0, 0])
        bucket[0] += total
        bucket[1] += correct
        bucket[2] += 1

    enriched = []
    for collection in collections:
        attempts, correct, unique = totals.get(collection.id, (0, 0, 0))
        exercise_count = exercise_counts.get(collection.id, 0)
        enriched.append(
            CollectionWithStats(
                **CollectionOut.model_validate(collection).model_dump(),
                exercise_count=exercise_count,
                attempt_count=attempts,
                correct_count=correct,
                accuracy=format_percentage(correct, attempts),
                coverage=percentage(unique, exercise_count),
            )
        )
    return enriched


def most_attempted_exercises(
    db: Session, collection_id: UUID, user_id: UUID, limit: int = 5, offset: int = 0
) -> List[ExerciseAttemptStats]:
    return [
        ExerciseAttemptStats(
            id=exercise.id,
            question=exercise.question,
            type=exercise.type,
            is_active=exercise.is_active,
            total_attempts=total,
            correct_attempts=correct,
            accuracy=format_percentage(correct, total),
        )
        for exercise, total, correct in get_top_most_attempted_exercises(
            db, collection_id, user_id, limit, offset
        )
    ]


def user_attempt_stats(db: Session, user_id: UUID, recent: int = 10) -> UserAttemptStats:
    total, correct = db.query(func.count(Attempt.id), _correct_sum).filter(Attempt.user_id == user_id).one()
    collections = db.query(Collection).filter(Collection.user_id == user_id).count()

    rows = (
        db.query(Attempt, Exercise.question, Collection.name)
        .join(Exercise, Exercise.id == Attempt.exercise_id)
        .join(Collection, Collection.id == Exercise.collection_id)
        .filter(Attempt.user_id == user_id)
        .order_by(Attempt.created_at.desc())
        .limit(recent)
        .all()
    )

    return UserAttemptStats(
        collections=collections,
        attempts=int(total),
        correct_attempts=int(correct),
        accuracy=format_percentage(int(correct), int(total)),
        recent_attempts=[
            RecentAttempt(
                id=attempt.id,
                exercise_id=attempt.exercise_id,
                question=question,
                collection_name=collection_name,
                answer=attempt.answer,
                is_correct=attempt.is_correct,
                created_at=attempt.created_at,
            )
            for attempt, question, collection_name in rows
        ],
    )


def admin_dashboard_stats(db: Session) -> DashboardStats:
    attempts, correct = db.query(func.count(Attempt.id), _correct_sum).one()
    return DashboardStats(
        users=db.query(User).count(),
        collections=db.query(Collection).count(),
        exercises=db.query(Exercise).count(),
        attempts=int(attempts),
        correct_attempts=int(correct),
        accuracy=format_percentage(int(correct), int(attempts)),
    )
