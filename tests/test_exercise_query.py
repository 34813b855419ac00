import random

import pytest

from lingodrill.core.exceptions import NotFoundError
from lingodrill.models.exercise_db.exercise_query import (
    SelectionMode,
    get_least_attempted_exercise,
    get_random_active_exercise,
    get_top_most_attempted_exercises,
    select_exercise,
)


def test_least_attempted_prefers_untouched_exercises(db, user, collection, make_exercise, add_attempts):
    a, b, c = (make_exercise(collection) for _ in range(3))
    add_attempts(user, a, count=2)

    picked = get_least_attempted_exercise(db, collection.id, user.id)

    assert picked.id in {b.id, c.id}


def test_least_attempted_picks_lowest_count_once_everything_is_touched(
    db, user, collection, make_exercise, add_attempts
):
    a, b, c = (make_exercise(collection) for _ in range(3))
    add_attempts(user, a, count=3)
    add_attempts(user, b, count=1)
    add_attempts(user, c, count=2)

    assert get_least_attempted_exercise(db, collection.id, user.id).id == b.id


def test_least_attempted_ignores_other_users_attempts(
    db, user, other_user, collection, make_exercise, add_attempts
):
    a, b = make_exercise(collection), make_exercise(collection)
    add_attempts(other_user, b, count=5)
    add_attempts(user, a, count=1)

    assert get_least_attempted_exercise(db, collection.id, user.id).id == b.id


def test_inactive_exercises_are_never_selected(db, user, collection, make_exercise, rng):
    make_exercise(collection, is_active=False)
    active = make_exercise(collection)

    for _ in range(10):
        assert get_random_active_exercise(db, collection.id, rng).id == active.id
    assert get_least_attempted_exercise(db, collection.id, user.id).id == active.id


@pytest.mark.parametrize("mode", list(SelectionMode))
def test_empty_collection_raises_not_found(db, user, collection, mode):
    with pytest.raises(NotFoundError):
        select_exercise(db, collection.id, user.id, mode, random.Random(0))


def test_random_selection_covers_all_active_exercises(db, user, collection, make_exercise, rng):
    exercises = {make_exercise(collection).id for _ in range(3)}
    seen = {select_exercise(db, collection.id, user.id, SelectionMode.RANDOM, rng).id for _ in range(60)}
    assert seen == exercises


def test_top_most_attempted_counts_and_order(db, user, collection, make_exercise, add_attempts):
    a, b, c = (make_exercise(collection) for _ in range(3))
    add_attempts(user, b, count=3)
    add_attempts(user, b, count=1, is_correct=False)
    add_attempts(user, a, count=1, is_correct=False)

    rows = get_top_most_attempted_exercises(db, collection.id, user.id, limit=5)

    assert [(e.id, total, correct) for e, total, correct in rows] == [
        (b.id, 4, 3),
        (a.id, 1, 0),
        (c.id, 0, 0),
    ]


def test_top_most_attempted_paginates(db, user, collection, make_exercise, add_attempts):
    a, b, c = (make_exercise(collection) for _ in range(3))
    add_attempts(user, c, count=2)

    rows = get_top_most_attempted_exercises(db, collection.id, user.id, limit=1, offset=1)

    assert [e.id for e, _, _ in rows] == [a.id]
