from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from lingodrill.core.database import get_db
from lingodrill.core.security import (
    verify_password,
    create_access_token,
    get_current_user
)
from lingodrill.models.user_db.user_db import User
from lingodrill.models.user_db.user_db_crud import create_user, get_user_by_email
from lingodrill.schemas.login.login_base import LoginRequest, TokenResponse
from lingodrill.schemas.users.user_base import UserCreate, UserOut

auth_router = APIRouter(prefix="/auth", tags=["Auth"])


@auth_router.post("/register", response_model=UserOut, status_code=201)
def register(user: UserCreate, db: Session = Depends(get_db)):
    if get_user_by_email(db, user.email):
        raise HTTPException(status_code=400, detail="Email already registered")
    return create_user(db, user)


@auth_router.post("/login", response_model=TokenResponse)
def login(payload: LoginRequest, db: Session = Depends(get_db)):
    user = get_user_by_email(db, payload.email)
    if not user or not verify_password(payload.password, user.hashed_password):
        raise HTTPException(status_code=401, detail="Invalid credentials")
    if not user.is_active:
        raise HTTPException(status_code=403, detail="User account is inactive")

    token = create_access_token(user)
    return {"user": user, "token": token}


@auth_router.get("/me", response_model=UserOut)
def get_me(current_user: User = Depends(get_current_user)):
    return current_user
