"""
History model - one row per submitted answer
"""
from sqlalchemy import Column, Text, Boolean, DateTime, ForeignKey, func
from sqlalchemy.types import Uuid
from ielts_trainer.database import Base
import uuid


class History(Base):
    """
    History table - append-only answer attempts
    """
    __tablename__ = "history"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid, nullable=False, index=True)
    question_id = Column(Uuid, ForeignKey("ielts_questions.id"), nullable=False)
    user_answer = Column(Text, nullable=False)  # As typed, untrimmed
    is_correct = Column(Boolean, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    def __repr__(self):
        return f"<History(user_id={self.user_id}, question_id={self.question_id}, correct={self.is_correct})>"
