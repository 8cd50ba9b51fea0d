"""
Pydantic schemas for the practice round
"""
from enum import Enum
from typing import Literal, Optional

from pydantic import BaseModel, Field

from ielts_trainer.schemas.question import Category, Difficulty, Question, QuestionView


class RoundStatus(str, Enum):
    """Where a round is in its fetch-present-submit-grade cycle"""
    IDLE = "idle"
    LOADING = "loading"
    PRESENTING = "presenting"
    GRADED = "graded"
    EMPTY = "empty"  # No question matched the filter
    FAILED = "failed"  # Fetch failed; retry by starting a new round


class PracticeRound(BaseModel):
    """Server-side state of the user's current round"""
    token: int
    category: Category
    difficulty: Difficulty
    status: RoundStatus = RoundStatus.IDLE
    question: Optional[Question] = None
    answer: Optional[str] = None
    is_correct: Optional[bool] = None
    favorited: bool = False
    error: Optional[str] = None


class RoundView(BaseModel):
    """Response describing the current round"""
    round_token: int
    category: str
    difficulty: str
    status: RoundStatus
    question: Optional[QuestionView] = None
    answer: Optional[str] = None
    result: Optional[Literal["correct", "wrong"]] = None
    favorited: bool = False
    message: Optional[str] = None

    @classmethod
    def from_round(cls, round_: PracticeRound) -> "RoundView":
        question = None
        if round_.question is not None:
            question = QuestionView.from_question(
                round_.question, reveal=round_.status == RoundStatus.GRADED
            )

        result = None
        if round_.status == RoundStatus.GRADED:
            result = "correct" if round_.is_correct else "wrong"

        message = None
        if round_.status == RoundStatus.EMPTY:
            message = "No questions available in this category yet."
        elif round_.status == RoundStatus.FAILED:
            message = "Could not load a question. Please try again."

        return cls(
            round_token=round_.token,
            category=round_.category,
            difficulty=round_.difficulty,
            status=round_.status,
            question=question,
            answer=round_.answer,
            result=result,
            favorited=round_.favorited,
            message=message,
        )


class RoundRequest(BaseModel):
    """Body for operations on the current round"""
    round_token: int = Field(..., ge=1)


class AnswerSubmission(RoundRequest):
    answer: str = Field(..., max_length=2000, description="Typed answer or selected option text")


class KeyPress(RoundRequest):
    key: str = Field(..., max_length=16, description="'Enter' or ' ' / 'Space'")
    answer: str = Field("", max_length=2000)
