import os

from sqlalchemy.exc import SQLAlchemyError

from lingodrill.core.config import settings
from lingodrill.models.attempt_db.attempt_db import Attempt
from lingodrill.routes.stats import stats_routers
from lingodrill.services.files import ExerciseFileType

from conftest import PASSWORD, auth_headers

DISTRACTORS = ["chat", "chien", "oiseau", "poisson", "cheval"]


def _exercise_form(collection_id, **overrides):
    form = {
        "collection_id": str(collection_id),
        "type": "CHOICE_SINGLE",
        "question": "How do you say rabbit?",
        "correct_answer": "lapin",
        "distractors": DISTRACTORS,
    }
    form.update(overrides)
    return form


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}


# auth


def test_register_login_and_me(client):
    payload = {"email": "carla@example.com", "name": "Carla", "password": PASSWORD}
    created = client.post("/auth/register", json=payload)
    assert created.status_code == 201
    assert created.json()["role"] == "USER"

    duplicate = client.post("/auth/register", json=payload)
    assert duplicate.status_code == 400

    login = client.post("/auth/login", json={"email": payload["email"], "password": PASSWORD})
    assert login.status_code == 200
    token = login.json()["token"]

    me = client.get("/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert me.json()["email"] == payload["email"]


def test_login_with_wrong_password(client, user):
    response = client.post("/auth/login", json={"email": user.email, "password": "not-the-password"})
    assert response.status_code == 401


def test_registration_closes_at_user_limit(client, user, monkeypatch):
    monkeypatch.setattr(settings, "MAX_REGISTERED_USERS", 1)
    response = client.post(
        "/auth/register", json={"email": "late@example.com", "name": "Late", "password": PASSWORD}
    )
    assert response.status_code == 403


def test_role_change_revokes_existing_tokens(client, user, admin):
    headers = auth_headers(user)
    assert client.get("/auth/me", headers=headers).status_code == 200

    updated = client.put(f"/users/{user.id}", json={"role": "ADMIN"}, headers=auth_headers(admin))
    assert updated.status_code == 200

    revoked = client.get("/auth/me", headers=headers)
    assert revoked.status_code == 401
    assert revoked.json()["detail"] == "Token has been revoked"


def test_deactivated_user_cannot_log_in(client, user, admin):
    client.put(f"/users/{user.id}", json={"is_active": False}, headers=auth_headers(admin))
    response = client.post("/auth/login", json={"email": user.email, "password": PASSWORD})
    assert response.status_code == 403


def test_user_management_requires_admin(client, user):
    assert client.get("/users/", headers=auth_headers(user)).status_code == 403
    assert client.get("/users/").status_code == 401


# collections


def test_create_collection_and_reject_case_insensitive_duplicate(client, user):
    headers = auth_headers(user)
    created = client.post("/collections/", json={"name": "Verbs"}, headers=headers)
    assert created.status_code == 201

    duplicate = client.post("/collections/", json={"name": "  VERBS "}, headers=headers)
    assert duplicate.status_code == 409


def test_collection_quota_applies_to_users_only(client, user, admin, monkeypatch):
    monkeypatch.setattr(settings, "USER_MAX_COLLECTIONS", 1)

    assert client.post("/collections/", json={"name": "One"}, headers=auth_headers(user)).status_code == 201
    assert client.post("/collections/", json={"name": "Two"}, headers=auth_headers(user)).status_code == 403

    for name in ("One", "Two"):
        response = client.post("/collections/", json={"name": name}, headers=auth_headers(admin))
        assert response.status_code == 201


def test_list_collections_with_stats(client, user, collection, make_exercise, add_attempts):
    exercise = make_exercise(collection)
    add_attempts(user, exercise)

    body = client.get("/collections/", headers=auth_headers(user)).json()

    assert body["total"] == 1
    [item] = body["items"]
    assert item["exercise_count"] == 1
    assert item["coverage"] == 100.0
    assert item["accuracy"] == "100.0"


def test_other_users_collection_is_forbidden(client, other_user, collection):
    response = client.get(f"/collections/{collection.id}", headers=auth_headers(other_user))
    assert response.status_code == 403


def test_update_collection_requires_a_field(client, user, collection):
    response = client.patch(f"/collections/{collection.id}", json={}, headers=auth_headers(user))
    assert response.status_code == 400


# exercises


def test_create_exercise_with_audio_and_download_it(client, user, collection, storage):
    headers = auth_headers(user)
    response = client.post(
        "/exercises/",
        data=_exercise_form(collection.id),
        files={"audio": ("clip.mp3", b"ID3audio", "audio/mpeg")},
        headers=headers,
    )
    assert response.status_code == 201
    body = response.json()
    assert body["distractors"] == DISTRACTORS
    assert body["audio_url"].endswith(".mp3")

    download = client.get(f"/exercises/files/audio/{body['audio_url']}", headers=headers)
    assert download.status_code == 200
    assert download.content == b"ID3audio"


def test_invalid_exercise_leaves_no_media_behind(client, user, collection, tmp_path):
    response = client.post(
        "/exercises/",
        data=_exercise_form(collection.id, distractors=DISTRACTORS[:4]),
        files={"image": ("pic.jpg", b"jpeg", "image/jpeg")},
        headers=auth_headers(user),
    )
    assert response.status_code == 409
    assert os.listdir(tmp_path / "images") == []


def test_exercise_quota(client, user, collection, make_exercise, monkeypatch):
    monkeypatch.setattr(settings, "USER_MAX_EXERCISES_PER_COLLECTION", 1)
    make_exercise(collection)

    response = client.post("/exercises/", data=_exercise_form(collection.id), headers=auth_headers(user))
    assert response.status_code == 403


def test_patch_exercise_validates_merged_state(client, user, collection, make_exercise):
    exercise = make_exercise(collection, correct_answer="lapin", distractors=DISTRACTORS)
    headers = auth_headers(user)

    clash = client.patch(f"/exercises/{exercise.id}", json={"correct_answer": "chat"}, headers=headers)
    assert clash.status_code == 409

    ok = client.patch(f"/exercises/{exercise.id}", json={"is_active": False}, headers=headers)
    assert ok.status_code == 200
    assert ok.json()["is_active"] is False


def test_delete_collection_removes_media(client, user, collection, storage):
    headers = auth_headers(user)
    created = client.post(
        "/exercises/",
        data=_exercise_form(collection.id),
        files={"image": ("pic.jpg", b"jpeg", "image/jpeg")},
        headers=headers,
    ).json()
    path = storage.path_for(ExerciseFileType.IMAGE, created["image_url"])
    assert os.path.exists(path)

    response = client.delete(f"/collections/{collection.id}", headers=headers)

    assert response.status_code == 200
    assert not os.path.exists(path)
    assert client.get(f"/exercises/{created['id']}", headers=headers).status_code == 404


# drill


def test_drill_flow(client, db, user, collection, make_exercise):
    exercises = {str(e.id): e for e in (make_exercise(collection, correct_answer=f"a{i}") for i in range(5))}
    headers = auth_headers(user)

    question = client.get(f"/drill/{collection.id}", headers=headers).json()
    exercise = exercises[question["id"]]
    assert len(question["distractors"]) == 4
    assert exercise.correct_answer in question["distractors"]

    feedback = client.post(
        f"/drill/{collection.id}/submit?mode=least-attempted",
        json={"exercise_id": question["id"], "user_answer": f"  {exercise.correct_answer.upper()} "},
        headers=headers,
    ).json()
    assert feedback["is_correct"] is True
    assert feedback["next_exercise_id"] in exercises
    assert feedback["next_exercise_id"] != question["id"]
    assert db.query(Attempt).filter(Attempt.exercise_id == exercise.id).count() == 1

    session = client.get(f"/drill/{collection.id}/session", headers=headers).json()
    assert session == {"correct": 1, "total": 1, "streak": 1, "max_streak": 1}

    assert client.delete(f"/drill/{collection.id}/session", headers=headers).status_code == 204
    assert client.get(f"/drill/{collection.id}/session", headers=headers).json()["total"] == 0


def test_drill_access_gate(client, other_user, admin, collection, make_exercise):
    make_exercise(collection)
    assert client.get(f"/drill/{collection.id}", headers=auth_headers(other_user)).status_code == 403
    assert client.get(f"/drill/{collection.id}", headers=auth_headers(admin)).status_code == 200


def test_drill_on_empty_collection(client, user, collection):
    response = client.get(f"/drill/{collection.id}", headers=auth_headers(user))
    assert response.status_code == 404
    assert response.json()["detail"] == "No exercises available in this collection"


def test_drill_rejects_unknown_mode(client, user, collection):
    response = client.get(f"/drill/{collection.id}?mode=hardest", headers=auth_headers(user))
    assert response.status_code == 422


# stats


def test_stats_endpoints(client, user, admin, collection, make_exercise, add_attempts):
    exercise = make_exercise(collection)
    add_attempts(user, exercise, count=2)
    headers = auth_headers(user)

    top = client.get(f"/stats/collections/{collection.id}/most-attempted", headers=headers).json()
    assert top[0]["total_attempts"] == 2

    summary = client.get(f"/stats/collections/{collection.id}", headers=headers).json()
    assert summary["coverage"] == 100.0

    assert client.get("/stats/me", headers=headers).json()["attempts"] == 2

    assert client.get("/stats/admin/dashboard", headers=headers).status_code == 403
    dashboard = client.get("/stats/admin/dashboard", headers=auth_headers(admin)).json()
    assert dashboard["attempts"] == 2


def test_unexpected_errors_are_opaque(client, user, monkeypatch):
    def explode(*args, **kwargs):
        raise RuntimeError("connection string with password")

    monkeypatch.setattr(stats_routers, "user_attempt_stats", explode)

    response = client.get("/stats/me", headers=auth_headers(user))

    assert response.status_code == 500
    assert response.json() == {"detail": "Internal server error"}


def test_download_of_missing_media_file_is_not_found(client, user, collection, make_exercise):
    make_exercise(collection, audio_url="gone.mp3")

    response = client.get("/exercises/files/audio/gone.mp3", headers=auth_headers(user))

    assert response.status_code == 404
    assert response.json()["detail"] == "File not found"


def test_replace_media_swaps_and_removes_old_file(client, user, collection, make_exercise, storage):
    exercise = make_exercise(collection)
    headers = auth_headers(user)

    first = client.put(
        f"/exercises/{exercise.id}/media/audio", files={"file": ("a.mp3", b"one", "audio/mpeg")}, headers=headers
    ).json()["audio_url"]
    second = client.put(
        f"/exercises/{exercise.id}/media/audio", files={"file": ("b.mp3", b"two", "audio/mpeg")}, headers=headers
    ).json()["audio_url"]

    assert not os.path.exists(storage.path_for(ExerciseFileType.AUDIO, first))
    assert os.path.exists(storage.path_for(ExerciseFileType.AUDIO, second))

    cleared = client.put(f"/exercises/{exercise.id}/media/audio", headers=headers)
    assert cleared.json()["audio_url"] is None
    assert not os.path.exists(storage.path_for(ExerciseFileType.AUDIO, second))


def test_replace_media_removes_upload_when_commit_fails(
    client, db, user, collection, make_exercise, tmp_path, monkeypatch
):
    exercise = make_exercise(collection)
    headers = auth_headers(user)

    def failing_commit():
        raise SQLAlchemyError("commit failed")

    monkeypatch.setattr(db, "commit", failing_commit)
    response = client.put(
        f"/exercises/{exercise.id}/media/audio", files={"file": ("a.mp3", b"one", "audio/mpeg")}, headers=headers
    )

    assert response.status_code == 500
    assert os.listdir(tmp_path / "audio") == []
