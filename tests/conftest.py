import os
import random
from datetime import datetime, timedelta

os.environ.setdefault("JWT_SECRET_KEY", "test-secret")
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["REDIS_URL"] = ""

import pytest
from fastapi.testclient import TestClient

from lingodrill.core.database import Base, SessionLocal, engine, get_db
from lingodrill.core.security import create_access_token
from lingodrill.models import all_models  # noqa: F401
from lingodrill.models.attempt_db.attempt_db import Attempt
from lingodrill.models.collection_db.collection_db import Collection
from lingodrill.models.exercise_db.exercise_db import Exercise, ExerciseType
from lingodrill.models.user_db.user_db import UserRole
from lingodrill.models.user_db.user_db_crud import create_user
from lingodrill.schemas.users.user_base import UserCreate
from lingodrill.services.files import FileStorage, get_file_storage
from lingodrill.services.quiz_session_store import InMemoryQuizSessionStore, get_session_store

from main import app

PASSWORD = "secret-pass"


@pytest.fixture
def db():
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def session_store():
    return InMemoryQuizSessionStore(ttl_seconds=3600)


@pytest.fixture
def storage(tmp_path):
    return FileStorage(root=str(tmp_path))


@pytest.fixture
def client(db, session_store, storage):
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_session_store] = lambda: session_store
    app.dependency_overrides[get_file_storage] = lambda: storage
    with TestClient(app, raise_server_exceptions=False) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def _make_user(db, email, role=UserRole.USER):
    return create_user(db, UserCreate(email=email, name=email.split("@")[0], password=PASSWORD), role=role)


@pytest.fixture
def user(db):
    return _make_user(db, "ana@example.com")


@pytest.fixture
def other_user(db):
    return _make_user(db, "bruno@example.com")


@pytest.fixture
def admin(db):
    return _make_user(db, "admin@example.com", role=UserRole.ADMIN)


def auth_headers(user):
    return {"Authorization": f"Bearer {create_access_token(user)}"}


@pytest.fixture
def collection(db, user):
    collection = Collection(name="French basics", user_id=user.id)
    db.add(collection)
    db.commit()
    db.refresh(collection)
    return collection


@pytest.fixture
def make_exercise(db):
    """Insert exercises directly, spacing created_at so ordering is stable."""
    base = datetime(2024, 1, 1)
    counter = {"n": 0}

    def _make(collection, correct_answer="Bonjour", type=ExerciseType.CHOICE_SINGLE, **kwargs):
        counter["n"] += 1
        n = counter["n"]
        exercise = Exercise(
            collection_id=collection.id,
            type=type,
            question=kwargs.pop("question", f"Translate phrase number {n}"),
            correct_answer=correct_answer,
            additional_correct_answers=kwargs.pop("additional_correct_answers", []),
            distractors=kwargs.pop(
                "distractors",
                [] if type == ExerciseType.TEXT else [f"wrong-{n}-{i}" for i in range(5)],
            ),
            created_at=base + timedelta(minutes=n),
            **kwargs,
        )
        db.add(exercise)
        db.commit()
        db.refresh(exercise)
        return exercise

    return _make


@pytest.fixture
def add_attempts(db):
    def _add(user, exercise, count=1, is_correct=True):
        for _ in range(count):
            db.add(Attempt(user_id=user.id, exercise_id=exercise.id, is_correct=is_correct))
        db.commit()

    return _add


@pytest.fixture
def rng():
    return random.Random(1234)
