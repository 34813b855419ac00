import os
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile
from fastapi.exceptions import RequestValidationError
from fastapi.responses import FileResponse
from pydantic import ValidationError
from sqlalchemy.orm import Session

from lingodrill.core.database import get_db
from lingodrill.core.exceptions import ForbiddenError, NotFoundError
from lingodrill.core.security import get_current_user
from lingodrill.models.collection_db.collection_crud import (
    can_access_collection,
    find_collection_or_fail,
    validate_collection_access,
)
from lingodrill.models.exercise_db.exercise_crud import (
    check_exercise_quota,
    create_exercise,
    delete_exercise,
    find_exercise_or_fail,
    get_exercise_by_media,
    list_exercises_in_collection,
    update_exercise,
)
from lingodrill.models.exercise_db.exercise_db import ExerciseType
from lingodrill.models.user_db.user_db import User
from lingodrill.schemas.common.page_response import PageResponse
from lingodrill.schemas.exercise.exercise_base import ExerciseCreate, ExerciseOut, ExerciseUpdate
from lingodrill.services.files import (
    MEDIA_TYPES,
    URL_COLUMNS,
    ExerciseFileType,
    FileStorage,
    exercise_media,
    get_file_storage,
)

exercise_router = APIRouter(prefix="/exercises", tags=["Exercises"])


def _load_owned_exercise(db: Session, exercise_id: UUID, user: User):
    exercise = find_exercise_or_fail(db, exercise_id)
    collection = find_collection_or_fail(db, exercise.collection_id)
    if not can_access_collection(collection, user):
        raise ForbiddenError("You are not allowed to access this collection")
    return exercise


@exercise_router.post("/", response_model=ExerciseOut, status_code=201)
def create(
    collection_id: UUID = Form(...),
    type: ExerciseType = Form(...),
    question: str = Form(...),
    correct_answer: str = Form(...),
    additional_correct_answers: List[str] = Form([]),
    distractors: List[str] = Form([]),
    explanation: Optional[str] = Form(None),
    translation: Optional[str] = Form(None),
    audio: Optional[UploadFile] = File(None),
    image: Optional[UploadFile] = File(None),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    storage: FileStorage = Depends(get_file_storage),
):
    try:
        data = ExerciseCreate(
            collection_id=collection_id,
            type=type,
            question=question,
            correct_answer=correct_answer,
            additional_correct_answers=additional_correct_answers,
            distractors=distractors,
            explanation=explanation or None,
            translation=translation or None,
        )
    except ValidationError as e:
        raise RequestValidationError(e.errors())
    collection, user = validate_collection_access(db, current_user.id, collection_id)
    check_exercise_quota(db, collection, user)

    saved = []
    try:
        audio_filename = storage.save(ExerciseFileType.AUDIO, audio) if audio else None
        if audio_filename:
            saved.append((ExerciseFileType.AUDIO, audio_filename))
        image_filename = storage.save(ExerciseFileType.IMAGE, image) if image else None
        if image_filename:
            saved.append((ExerciseFileType.IMAGE, image_filename))

        return create_exercise(db, data, audio_filename, image_filename)
    except Exception:
        # no exercise row without its media, and no media without a row
        storage.delete_many(saved)
        raise


@exercise_router.get("/by-collection/{collection_id}", response_model=PageResponse[ExerciseOut])
def list_for_collection(
    collection_id: UUID,
    page: int = Query(1, ge=1),
    size: int = Query(10, ge=1, le=100),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    validate_collection_access(db, current_user.id, collection_id)
    exercises, total = list_exercises_in_collection(db, collection_id, page, size)
    return PageResponse[ExerciseOut].build(exercises, total, page, size)


@exercise_router.get("/files/{file_type}/{filename}")
def get_exercise_file(
    file_type: ExerciseFileType,
    filename: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    storage: FileStorage = Depends(get_file_storage),
):
    exercise = get_exercise_by_media(db, URL_COLUMNS[file_type], filename)
    if not exercise:
        raise NotFoundError("Exercise not found for the given file")
    validate_collection_access(db, current_user.id, exercise.collection_id)

    path = storage.path_for(file_type, filename)
    if not os.path.isfile(path):
        raise NotFoundError("File not found")
    return FileResponse(path, media_type=MEDIA_TYPES[file_type])


@exercise_router.get("/{exercise_id}", response_model=ExerciseOut)
def get_exercise(
    exercise_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return _load_owned_exercise(db, exercise_id, current_user)


@exercise_router.patch("/{exercise_id}", response_model=ExerciseOut)
def update(
    exercise_id: UUID,
    updates: ExerciseUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    exercise = _load_owned_exercise(db, exercise_id, current_user)
    return update_exercise(db, exercise, updates)


@exercise_router.put("/{exercise_id}/media/{file_type}", response_model=ExerciseOut)
def replace_media(
    exercise_id: UUID,
    file_type: ExerciseFileType,
    file: Optional[UploadFile] = File(None),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    storage: FileStorage = Depends(get_file_storage),
):
    """Replace the exercise's audio or image; sending no file clears it."""
    exercise = _load_owned_exercise(db, exercise_id, current_user)
    column = URL_COLUMNS[file_type]
    previous = getattr(exercise, column)

    new_filename = storage.save(file_type, file) if file else None
    try:
        setattr(exercise, column, new_filename)
        db.commit()
    except Exception:
        db.rollback()
        if new_filename:
            storage.delete_many([(file_type, new_filename)])
        raise
    db.refresh(exercise)

    if previous:
        storage.delete_many([(file_type, previous)])
    return exercise


@exercise_router.delete("/{exercise_id}", response_model=ExerciseOut)
def delete(
    exercise_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    storage: FileStorage = Depends(get_file_storage),
):
    exercise = _load_owned_exercise(db, exercise_id, current_user)
    media = exercise_media([exercise])
    deleted = ExerciseOut.model_validate(exercise)
    delete_exercise(db, exercise)
    storage.delete_many(media)
    return deleted
