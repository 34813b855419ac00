from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from lingodrill.core.database import get_db
from lingodrill.core.security import admin_required, get_current_user
from lingodrill.models.collection_db.collection_crud import validate_collection_access
from lingodrill.models.user_db.user_db import User
from lingodrill.schemas.collection.collection_base import CollectionWithStats
from lingodrill.schemas.stats.stats_base import DashboardStats, ExerciseAttemptStats, UserAttemptStats
from lingodrill.services.analytics import (
    admin_dashboard_stats,
    enrich_collections_for_user,
    most_attempted_exercises,
    user_attempt_stats,
)

stats_router = APIRouter(prefix="/stats", tags=["Stats"])


@stats_router.get("/collections/{collection_id}/most-attempted", response_model=List[ExerciseAttemptStats])
def most_attempted(
    collection_id: UUID,
    limit: int = Query(5, ge=1, le=50),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    validate_collection_access(db, current_user.id, collection_id)
    return most_attempted_exercises(db, collection_id, current_user.id, limit, offset)


@stats_router.get("/collections/{collection_id}", response_model=CollectionWithStats)
def collection_summary(
    collection_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    collection, _ = validate_collection_access(db, current_user.id, collection_id)
    return enrich_collections_for_user(db, [collection], current_user.id)[0]


@stats_router.get("/me", response_model=UserAttemptStats)
def my_stats(
    recent: int = Query(10, ge=0, le=50),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return user_attempt_stats(db, current_user.id, recent)


@stats_router.get("/admin/dashboard", response_model=DashboardStats)
def dashboard(db: Session = Depends(get_db), _: User = Depends(admin_required)):
    return admin_dashboard_stats(db)
