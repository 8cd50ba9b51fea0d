"""
Question model - the IELTS question bank (owned by the backend service)
"""
from sqlalchemy import Column, String, Text, Boolean, DateTime, JSON, func
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.types import Uuid
from ielts_trainer.database import Base
import uuid


class Question(Base):
    """
    IELTS questions table - read-only to this application
    """
    __tablename__ = "ielts_questions"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    type = Column(String(32), nullable=False)  # multiple_choice, fill_in_the_blank
    category = Column(String(20), nullable=False, index=True)
    difficulty = Column(String(20), nullable=False, index=True)
    article_content = Column(Text)  # Reading passage (HTML)
    question_text = Column(Text, nullable=False)
    options = Column(JSON().with_variant(JSONB(), "postgresql"))  # For multiple choice
    correct_answer = Column(Text, nullable=False)
    explanation = Column(Text)
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    def __repr__(self):
        return f"<Question(id={self.id}, category={self.category}, difficulty={self.difficulty})>"
