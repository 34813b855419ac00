import random
from typing import List, Optional, Sequence, TypeVar

from lingodrill.core.config import settings
from lingodrill.models.exercise_db.exercise_db import Exercise, ExerciseType

T = TypeVar("T")


def shuffle_list(items: Sequence[T], rng: random.Random = None) -> List[T]:
    """Return a Fisher-Yates shuffled copy of ``items``."""
    rng = rng or random
    shuffled = list(items)
    for i in range(len(shuffled) - 1, 0, -1):
        j = rng.randint(0, i)
        shuffled[i], shuffled[j] = shuffled[j], shuffled[i]
    return shuffled


def select_distractors(
    correct_answer: str,
    all_distractors: Sequence[str],
    k: Optional[int] = None,
    rng: random.Random = None,
) -> List[str]:
    """Pick ``k`` random distractors and mix the correct answer in.

    The result holds ``min(k, len(all_distractors)) + 1`` options with the
    correct answer exactly once, in random order.
    """
    if k is None:
        k = settings.DISTRACTORS_PER_QUESTION
    picked = shuffle_list(all_distractors, rng)[:max(k, 0)]
    return shuffle_list([*picked, correct_answer], rng)


def build_options(exercise: Exercise, k: Optional[int] = None, rng: random.Random = None) -> List[str]:
    match ExerciseType(exercise.type):
        case ExerciseType.CHOICE_SINGLE:
            return select_distractors(exercise.correct_answer, exercise.distractors or [], k, rng)
        case ExerciseType.TEXT:
            return []
