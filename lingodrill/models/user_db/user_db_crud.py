import logging
from uuid import UUID
from sqlalchemy.orm import Session
from lingodrill.core.config import settings
from lingodrill.core.exceptions import ForbiddenError, NotFoundError
from lingodrill.models.user_db.user_db import User, UserRole
from lingodrill.schemas.users.user_base import UserCreate, UserUpdate
from lingodrill.core.security import hash_password
from typing import List

logger = logging.getLogger(__name__)


def create_user(db: Session, user: UserCreate, role: UserRole = UserRole.USER):
    if db.query(User).count() >= settings.MAX_REGISTERED_USERS:
        logger.info("Registration rejected, user limit %s reached", settings.MAX_REGISTERED_USERS)
        raise ForbiddenError("Registration is closed: the maximum number of users has been reached.")

    db_user = User(
        email=user.email,
        name=user.name,
        hashed_password=hash_password(user.password),
        role=role,
    )
    db.add(db_user)
    db.commit()
    db.refresh(db_user)
    logger.info("Registered user %s", db_user.id)
    return db_user


def get_user_by_email(db: Session, email: str):
    return db.query(User).filter(User.email == email).first()


def get_user_by_id(db: Session, user_id: UUID):
    return db.query(User).filter(User.id == user_id).first()


def find_user_or_fail(db: Session, user_id: UUID) -> User:
    user = get_user_by_id(db, user_id)
    if not user:
        raise NotFoundError("User not found")
    return user


def get_all_users(db: Session, skip: int = 0, limit: int = 100) -> List[User]:
    return db.query(User).order_by(User.created_at.desc()).offset(skip).limit(limit).all()


def update_user(db: Session, user_id: UUID, updates: UserUpdate):
    user = get_user_by_id(db, user_id)
    if not user:
        return None

    user.email = updates.email or user.email
    user.name = updates.name or user.name
    if updates.permissions is not None:
        user.permissions = updates.permissions

    revoke = False
    if updates.role is not None and updates.role != user.role:
        user.role = updates.role
        revoke = True
    if updates.is_active is not None and updates.is_active != user.is_active:
        user.is_active = updates.is_active
        revoke = True
    if revoke:
        user.token_version += 1

    db.commit()
    db.refresh(user)
    return user


def delete_user(db: Session, user_id: UUID):
    user = get_user_by_id(db, user_id)
    if not user:
        return None
    db.delete(user)
    db.commit()
    return user
