import enum
import uuid
from sqlalchemy import Column, String, Text, Boolean, DateTime, ForeignKey, Enum, JSON, Uuid
from sqlalchemy.orm import relationship
from datetime import datetime
from lingodrill.core.database import Base


class ExerciseType(str, enum.Enum):
    CHOICE_SINGLE = "CHOICE_SINGLE"
    TEXT = "TEXT"


class Exercise(Base):
    __tablename__ = "exercises"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4, unique=True, index=True)
    collection_id = Column(
        Uuid, ForeignKey("collections.id", ondelete="CASCADE"), nullable=False, index=True
    )

    type = Column(Enum(ExerciseType, name="exercise_type"), nullable=False)
    question = Column(String(500), nullable=False)
    correct_answer = Column(String(50), nullable=False)
    additional_correct_answers = Column(JSON, nullable=False, default=list)
    distractors = Column(JSON, nullable=False, default=list)

    explanation = Column(Text, nullable=True)
    translation = Column(Text, nullable=True)

    # stored filenames, served through /exercises/files/{kind}/{filename}
    audio_url = Column(String, nullable=True)
    image_url = Column(String, nullable=True)

    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    collection = relationship("Collection", back_populates="exercises")
    attempts = relationship(
        "Attempt",
        back_populates="exercise",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
