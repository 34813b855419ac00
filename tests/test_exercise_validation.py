import pytest

from lingodrill.core.exceptions import ConflictError
from lingodrill.models.exercise_db.exercise_db import ExerciseType
from lingodrill.services.exercise_validation import validate_answers_and_distractors

DISTRACTORS = ["chat", "chien", "oiseau", "poisson", "cheval"]


def test_valid_choice_exercise_passes():
    validate_answers_and_distractors("lapin", ["Lapin!"], DISTRACTORS, ExerciseType.CHOICE_SINGLE)


def test_text_exercise_needs_no_distractors():
    validate_answers_and_distractors("lapin", [], [], ExerciseType.TEXT)


@pytest.mark.parametrize(
    "correct, additional, distractors, message",
    [
        ("lapin", ["lapin"], DISTRACTORS, "Correct answer cannot be listed"),
        ("lapin", ["a", "a"], DISTRACTORS, "Additional correct answers must be unique"),
        ("lapin", [], DISTRACTORS + ["chat"], "Distractors must be unique"),
        ("chat", [], DISTRACTORS, "Distractors cannot be the same as the correct answer"),
        ("lapin", ["chien"], DISTRACTORS, "additional correct answer"),
        ("lapin", [], DISTRACTORS[:4] + ["x" * 51], "characters"),
        ("lapin", [], DISTRACTORS[:4], "At least 5 distractors"),
    ],
)
def test_conflicts(correct, additional, distractors, message):
    with pytest.raises(ConflictError) as exc:
        validate_answers_and_distractors(correct, additional, distractors, ExerciseType.CHOICE_SINGLE)
    assert message in exc.value.message
