"""
Pydantic records for rows coming back from the backend store

Rows are validated here before any other code touches them.
"""
from datetime import datetime
from typing import Any, List, Literal, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from ielts_trainer.exceptions import RecordValidationError

QuestionType = Literal["multiple_choice", "fill_in_the_blank"]
Category = Literal["reading", "listening", "writing", "speaking", "mixed"]
Difficulty = Literal["easy", "medium", "hard"]


class Question(BaseModel):
    """A question from the bank"""
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    type: QuestionType
    category: str
    difficulty: str
    article_content: Optional[str] = None
    question_text: str
    options: Optional[List[str]] = None
    correct_answer: str
    explanation: Optional[str] = None

    @field_validator("question_text", "correct_answer")
    @classmethod
    def not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be blank")
        return value

    @property
    def answer_input(self) -> Literal["choice", "text"]:
        """Option buttons when there are options, a text field otherwise"""
        if self.type == "multiple_choice" and self.options:
            return "choice"
        return "text"


class HistoryRecord(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    user_id: UUID
    question_id: UUID
    user_answer: str
    is_correct: bool
    created_at: Optional[datetime] = None


class FavoriteEntry(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    user_id: UUID
    question_id: UUID
    created_at: Optional[datetime] = None


class WrongBookEntry(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    user_id: UUID
    question_id: UUID
    created_at: Optional[datetime] = None


class Profile(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    username: Optional[str] = None
    email: Optional[str] = None


def parse_question(row: Any) -> Question:
    """
    Validate one store row (mapping or ORM object) into a Question

    Raises:
        RecordValidationError: row is missing fields or has the wrong shape
    """
    try:
        if isinstance(row, dict):
            return Question.model_validate(row)
        return Question.model_validate(row, from_attributes=True)
    except ValidationError as e:
        raise RecordValidationError(f"Malformed question row: {e}") from e


class QuestionView(BaseModel):
    """
    Question as shown during a round

    Answer and explanation stay hidden until the round is graded.
    """
    id: UUID
    type: QuestionType
    category: str
    difficulty: str
    article_content: Optional[str] = None
    question_text: str
    options: Optional[List[str]] = None
    answer_input: Literal["choice", "text"] = "text"
    correct_answer: Optional[str] = None
    explanation: Optional[str] = None

    @classmethod
    def from_question(cls, question: Question, reveal: bool) -> "QuestionView":
        data = question.model_dump()
        data["answer_input"] = question.answer_input
        if not reveal:
            data["correct_answer"] = None
            data["explanation"] = None
        return cls(**data)
