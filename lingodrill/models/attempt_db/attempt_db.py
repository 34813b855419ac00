import uuid
from sqlalchemy import Column, Boolean, DateTime, ForeignKey, String, Uuid
from sqlalchemy.orm import relationship
from datetime import datetime
from lingodrill.core.database import Base


class Attempt(Base):
    __tablename__ = "attempts"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4, index=True)
    user_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    exercise_id = Column(
        Uuid, ForeignKey("exercises.id", ondelete="CASCADE"), nullable=False, index=True
    )
    answer = Column(String, nullable=True)
    is_correct = Column(Boolean, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, index=True)

    user = relationship("User", back_populates="attempts")
    exercise = relationship("Exercise", back_populates="attempts")
