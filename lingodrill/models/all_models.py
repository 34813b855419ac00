# Importing every model registers it on Base.metadata (alembic, create_all)
from lingodrill.models.user_db.user_db import User, UserRole
from lingodrill.models.collection_db.collection_db import Collection
from lingodrill.models.exercise_db.exercise_db import Exercise, ExerciseType
from lingodrill.models.attempt_db.attempt_db import Attempt

__all__ = ["User", "UserRole", "Collection", "Exercise", "ExerciseType", "Attempt"]
