from uuid import UUID
from fastapi import APIRouter, Depends, HTTPException, Body, Query
from sqlalchemy.orm import Session
from lingodrill.core.database import get_db
from lingodrill.core.security import admin_required
from lingodrill.models.user_db.user_db import User
from lingodrill.models.user_db.user_db_crud import get_user_by_id, get_all_users, \
    update_user, delete_user, get_user_by_email
from lingodrill.schemas.common.page_response import PageResponse
from lingodrill.schemas.users.user_base import UserOut, UserUpdate


# user management is admin-only
user_router = APIRouter(prefix="/users", tags=["Users"], dependencies=[Depends(admin_required)])


@user_router.get("/{user_id}", response_model=UserOut)
def get_user(user_id: UUID, db: Session = Depends(get_db)):
    user = get_user_by_id(db, user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return user


@user_router.get("/", response_model=PageResponse[UserOut])
def list_users(
    page: int = Query(1, ge=1),
    size: int = Query(10, ge=1, le=100),
    db: Session = Depends(get_db)
):
    skip = (page - 1) * size
    total = db.query(User).count()
    users = get_all_users(db, skip=skip, limit=size)
    return PageResponse[UserOut].build(users, total, page, size)


@user_router.put("/{user_id}", response_model=UserOut)
def edit_user(
    user_id: UUID,
    updates: UserUpdate = Body(...),
    db: Session = Depends(get_db)
):
    user = get_user_by_id(db, user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")

    if updates.email:
        existing_user = get_user_by_email(db, updates.email)
        if existing_user and existing_user.id != user.id:
            raise HTTPException(status_code=400, detail="Email already registered")

    return update_user(db, user_id, updates)


@user_router.delete("/{user_id}", response_model=UserOut)
def delete_user_route(user_id: UUID, db: Session = Depends(get_db)):
    user = get_user_by_id(db, user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    deleted = UserOut.model_validate(user)
    delete_user(db, user_id)
    return deleted
