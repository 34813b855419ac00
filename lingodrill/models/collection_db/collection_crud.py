import logging
from typing import List, Optional, Tuple
from uuid import UUID

from sqlalchemy import func, or_
from sqlalchemy.orm import Session, joinedload

from lingodrill.core.config import settings
from lingodrill.core.exceptions import BadRequestError, ConflictError, ForbiddenError, NotFoundError
from lingodrill.models.collection_db.collection_db import Collection
from lingodrill.models.user_db.user_db import User, UserRole
from lingodrill.models.user_db.user_db_crud import find_user_or_fail
from lingodrill.schemas.collection.collection_base import (
    CollectionCreate,
    CollectionSortBy,
    CollectionUpdate,
    SortOrder,
)

logger = logging.getLogger(__name__)


def can_access_collection(collection: Collection, user: User) -> bool:
    return collection.user_id == user.id or user.role == UserRole.ADMIN


def get_collection_by_id(db: Session, collection_id: UUID) -> Optional[Collection]:
    return (
        db.query(Collection)
        .options(joinedload(Collection.user))
        .filter(Collection.id == collection_id)
        .first()
    )


def find_collection_or_fail(db: Session, collection_id: UUID) -> Collection:
    collection = get_collection_by_id(db, collection_id)
    if not collection:
        raise NotFoundError("Collection not found")
    return collection


def validate_collection_access(db: Session, user_id: UUID, collection_id: UUID) -> Tuple[Collection, User]:
    collection = find_collection_or_fail(db, collection_id)
    user = find_user_or_fail(db, user_id)

    if not can_access_collection(collection, user):
        raise ForbiddenError("You are not allowed to access this collection")

    return collection, user


def _find_duplicate_name(db: Session, owner_id: UUID, name: str, exclude_id: UUID = None):
    query = db.query(Collection.id).filter(
        Collection.user_id == owner_id,
        func.lower(Collection.name) == name.strip().lower(),
    )
    if exclude_id is not None:
        query = query.filter(Collection.id != exclude_id)
    return query.first()


def create_collection(db: Session, data: CollectionCreate, user: User) -> Collection:
    if user.role == UserRole.USER:
        owned = db.query(Collection).filter(Collection.user_id == user.id).count()
        if owned >= settings.USER_MAX_COLLECTIONS:
            logger.info("User %s hit the collection limit", user.id)
            raise ForbiddenError(
                f"You have reached the maximum limit of {settings.USER_MAX_COLLECTIONS} collections."
            )

    if _find_duplicate_name(db, user.id, data.name):
        raise ConflictError("User already has a collection with this name.")

    collection = Collection(name=data.name.strip(), description=data.description, user_id=user.id)
    db.add(collection)
    db.commit()
    db.refresh(collection)
    logger.info("Created collection %s for user %s", collection.id, user.id)
    return collection


def update_collection(db: Session, collection_id: UUID, data: CollectionUpdate, user: User) -> Collection:
    collection = find_collection_or_fail(db, collection_id)
    if not can_access_collection(collection, user):
        raise ForbiddenError("You are not allowed to update this collection.")

    name = data.name.strip() if data.name and data.name.strip() else None
    description = data.description if data.description and data.description.strip() else None

    if name is None and description is None:
        raise BadRequestError("No valid fields provided to update.")

    # nothing changes
    if (name is None or name == collection.name) and (description is None or description == collection.description):
        return collection

    if name is not None and name != collection.name:
        if _find_duplicate_name(db, collection.user_id, name, exclude_id=collection.id):
            raise ConflictError("User already has a collection with this name.")
        collection.name = name

    if description is not None:
        collection.description = description

    db.commit()
    db.refresh(collection)
    return collection


def delete_collection(db: Session, collection_id: UUID, user: User) -> Collection:
    collection = find_collection_or_fail(db, collection_id)
    if not can_access_collection(collection, user):
        raise ForbiddenError("You are not allowed to delete this collection.")

    db.delete(collection)
    db.commit()
    logger.info("Deleted collection %s", collection_id)
    return collection


def list_collections_for_user(
    db: Session,
    owner_id: UUID,
    page: int = 1,
    size: int = 10,
    search: Optional[str] = None,
    sort_by: CollectionSortBy = CollectionSortBy.UPDATED_AT,
    sort_order: SortOrder = SortOrder.DESC,
) -> Tuple[List[Collection], int]:
    query = db.query(Collection).filter(Collection.user_id == owner_id)
    if search:
        pattern = f"%{search.lower()}%"
        query = query.filter(
            or_(
                func.lower(Collection.name).like(pattern),
                func.lower(Collection.description).like(pattern),
            )
        )

    total = query.count()
    column = getattr(Collection, sort_by.value)
    order = column.asc() if sort_order == SortOrder.ASC else column.desc()
    items = (
        query.options(joinedload(Collection.user))
        .order_by(order, Collection.id)
        .offset((max(page, 1) - 1) * size)
        .limit(size)
        .all()
    )
    return items, total


def list_all_collections(db: Session, page: int = 1, size: int = 10) -> Tuple[List[Collection], int]:
    total = db.query(Collection).count()
    items = (
        db.query(Collection)
        .options(joinedload(Collection.user))
        .order_by(Collection.updated_at.desc(), Collection.id)
        .offset((max(page, 1) - 1) * size)
        .limit(size)
        .all()
    )
    return items, total
