from typing import List, Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # JWT
    JWT_SECRET_KEY: str
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 30

    # Database
    DATABASE_URL: str
    SQL_ECHO: bool = False

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_DIR: Optional[str] = None

    CORS_ORIGINS: List[str] = ["*"]

    # Drill rules
    DISTRACTORS_PER_QUESTION: int = 3
    MIN_DISTRACTORS_FOR_EXERCISE: int = 5
    MIN_DISTRACTOR_CHAR_LENGTH: int = 1
    MAX_DISTRACTOR_CHAR_LENGTH: int = 50

    # Limits for the USER role, admins are exempt
    USER_MAX_COLLECTIONS: int = 5
    USER_MAX_EXERCISES_PER_COLLECTION: int = 20
    MAX_REGISTERED_USERS: int = 100

    # Uploads (bytes)
    UPLOAD_DIR: str = "uploads"
    MAX_AUDIO_FILE_SIZE: int = 1 * 1024 * 1024
    MAX_IMAGE_FILE_SIZE: int = 1 * 1024 * 1024

    # Quiz sessions
    QUIZ_SESSION_TTL_SECONDS: int = 7200
    REDIS_URL: Optional[str] = None

    class Config:
        env_file = ".env"


settings = Settings()
