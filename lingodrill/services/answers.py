from lingodrill.models.exercise_db.exercise_db import Exercise


def normalize(answer: str) -> str:
    """Trim surrounding whitespace and lowercase, nothing more."""
    return answer.strip().lower()


def check_answer(user_answer: str, exercise: Exercise) -> bool:
    normalized = normalize(user_answer)

    if normalized == normalize(exercise.correct_answer):
        return True

    return any(normalized == normalize(alt) for alt in exercise.additional_correct_answers or [])
