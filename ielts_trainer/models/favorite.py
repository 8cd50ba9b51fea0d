"""
Favorite model - questions a user bookmarked
"""
from sqlalchemy import Column, DateTime, ForeignKey, func
from sqlalchemy.types import Uuid
from ielts_trainer.database import Base
import uuid


class Favorite(Base):
    """
    Favorites table - existence of a row means "favorited"
    """
    __tablename__ = "favorites"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid, nullable=False, index=True)
    question_id = Column(Uuid, ForeignKey("ielts_questions.id"), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    def __repr__(self):
        return f"<Favorite(user_id={self.user_id}, question_id={self.question_id})>"
