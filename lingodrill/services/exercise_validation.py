from typing import List, Optional

from lingodrill.core.config import settings
from lingodrill.core.exceptions import ConflictError
from lingodrill.models.exercise_db.exercise_db import ExerciseType


def validate_distractors(
    distractors: List[str],
    correct_answer: str,
    additional_correct_answers: Optional[List[str]] = None,
) -> None:
    if len(set(distractors)) != len(distractors):
        raise ConflictError("Distractors must be unique")

    if correct_answer in distractors:
        raise ConflictError("Distractors cannot be the same as the correct answer")

    if any(answer in distractors for answer in additional_correct_answers or []):
        raise ConflictError("Distractors cannot be the same as any additional correct answer")

    min_len = settings.MIN_DISTRACTOR_CHAR_LENGTH
    max_len = settings.MAX_DISTRACTOR_CHAR_LENGTH
    if any(len(d) < min_len or len(d) > max_len for d in distractors):
        raise ConflictError(f"Each distractor must be {min_len}-{max_len} characters")


def validate_answers_and_distractors(
    correct_answer: str,
    additional_correct_answers: Optional[List[str]] = None,
    distractors: Optional[List[str]] = None,
    exercise_type: Optional[ExerciseType] = None,
) -> None:
    """Raise ConflictError when answers and distractors break the exercise rules."""
    additional_correct_answers = additional_correct_answers or []
    distractors = distractors or []

    if correct_answer in additional_correct_answers:
        raise ConflictError("Correct answer cannot be listed as an additional correct answer")

    if len(set(additional_correct_answers)) != len(additional_correct_answers):
        raise ConflictError("Additional correct answers must be unique")

    if distractors:
        validate_distractors(distractors, correct_answer, additional_correct_answers)

    match exercise_type:
        case ExerciseType.CHOICE_SINGLE:
            minimum = settings.MIN_DISTRACTORS_FOR_EXERCISE
            if len(distractors) < minimum:
                raise ConflictError(
                    f"At least {minimum} distractors are required for single-choice questions"
                )
        case ExerciseType.TEXT | None:
            pass
