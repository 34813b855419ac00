from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import Optional

from lingodrill.core.database import get_db
from lingodrill.core.exceptions import ForbiddenError
from lingodrill.core.security import admin_required, get_current_user
from lingodrill.models.collection_db.collection_crud import (
    can_access_collection,
    create_collection,
    delete_collection,
    find_collection_or_fail,
    list_all_collections,
    list_collections_for_user,
    update_collection,
)
from lingodrill.models.user_db.user_db import User
from lingodrill.schemas.collection.collection_base import (
    CollectionCreate,
    CollectionOut,
    CollectionSortBy,
    CollectionUpdate,
    CollectionWithStats,
    SortOrder,
)
from lingodrill.schemas.common.page_response import PageResponse
from lingodrill.services.analytics import enrich_collections_for_user
from lingodrill.services.files import FileStorage, exercise_media, get_file_storage

collection_router = APIRouter(prefix="/collections", tags=["Collections"])


@collection_router.post("/", response_model=CollectionOut, status_code=201)
def create(
    data: CollectionCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return create_collection(db, data, current_user)


@collection_router.get("/", response_model=PageResponse[CollectionWithStats])
def list_mine(
    page: int = Query(1, ge=1),
    size: int = Query(10, ge=1, le=100),
    search: Optional[str] = None,
    sort_by: CollectionSortBy = CollectionSortBy.UPDATED_AT,
    sort_order: SortOrder = SortOrder.DESC,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    collections, total = list_collections_for_user(
        db, current_user.id, page, size, search, sort_by, sort_order
    )
    items = enrich_collections_for_user(db, collections, current_user.id)
    return PageResponse[CollectionWithStats].build(items, total, page, size)


@collection_router.get("/all", response_model=PageResponse[CollectionOut])
def list_all(
    page: int = Query(1, ge=1),
    size: int = Query(10, ge=1, le=100),
    db: Session = Depends(get_db),
    _: User = Depends(admin_required),
):
    collections, total = list_all_collections(db, page, size)
    return PageResponse[CollectionOut].build(collections, total, page, size)


@collection_router.get("/{collection_id}", response_model=CollectionWithStats)
def get_collection(
    collection_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    collection = find_collection_or_fail(db, collection_id)
    if not can_access_collection(collection, current_user):
        raise ForbiddenError("You are not allowed to access this collection.")
    return enrich_collections_for_user(db, [collection], current_user.id)[0]


@collection_router.patch("/{collection_id}", response_model=CollectionOut)
def update(
    collection_id: UUID,
    data: CollectionUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return update_collection(db, collection_id, data, current_user)


@collection_router.delete("/{collection_id}", response_model=CollectionOut)
def delete(
    collection_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    storage: FileStorage = Depends(get_file_storage),
):
    collection = find_collection_or_fail(db, collection_id)
    if not can_access_collection(collection, current_user):
        raise ForbiddenError("You are not allowed to delete this collection.")

    media = exercise_media(collection.exercises)
    deleted = CollectionOut.model_validate(collection)
    delete_collection(db, collection_id, current_user)
    storage.delete_many(media)
    return deleted
