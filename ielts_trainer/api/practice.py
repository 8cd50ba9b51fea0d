"""
Practice round endpoints
"""
import logging
from typing import Callable

from fastapi import APIRouter, Depends, HTTPException

from ielts_trainer.api.deps import get_practice_controller
from ielts_trainer.config import settings
from ielts_trainer.exceptions import EmptyAnswerError, RoundStateError, StoreError
from ielts_trainer.schemas.practice import AnswerSubmission, KeyPress, RoundRequest, RoundView
from ielts_trainer.schemas.question import Category, Difficulty
from ielts_trainer.services.practice_service import PracticeController

router = APIRouter(prefix="/practice", tags=["practice"])
logger = logging.getLogger(__name__)


def _run(operation: Callable, *args) -> RoundView:
    """Run a controller operation and map its errors to HTTP"""
    try:
        round_ = operation(*args)
    except RoundStateError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except EmptyAnswerError as e:
        raise HTTPException(status_code=422, detail=str(e))
    except StoreError as e:
        logger.error(f"Round state unavailable: {str(e)}")
        raise HTTPException(status_code=503, detail="Practice is temporarily unavailable")
    return RoundView.from_round(round_)


@router.get("", response_model=RoundView)
async def start_practice(
    category: Category = settings.DEFAULT_CATEGORY,
    difficulty: Difficulty = settings.DEFAULT_DIFFICULTY,
    controller: PracticeController = Depends(get_practice_controller)
):
    """
    Start a round: draw one random question

    - `mixed` ignores the difficulty filter
    - status `empty` means no question matched; `failed` means the fetch failed
    """
    return _run(controller.start_round, category, difficulty)


@router.get("/current", response_model=RoundView)
async def current_round(controller: PracticeController = Depends(get_practice_controller)):
    return _run(controller.current_round)


@router.post("/submit", response_model=RoundView)
async def submit_answer(
    submission: AnswerSubmission,
    controller: PracticeController = Depends(get_practice_controller)
):
    """
    Grade an answer (trimmed, case-insensitive exact match)

    Records history and, for a wrong answer, adds a wrong-book entry.
    """
    return _run(controller.submit_answer, submission.round_token, submission.answer)


@router.post("/favorite", response_model=RoundView)
async def toggle_favorite(
    request: RoundRequest,
    controller: PracticeController = Depends(get_practice_controller)
):
    return _run(controller.toggle_favorite, request.round_token)


@router.post("/next", response_model=RoundView)
async def next_question(
    request: RoundRequest,
    controller: PracticeController = Depends(get_practice_controller)
):
    return _run(controller.advance, request.round_token)


@router.post("/keys", response_model=RoundView)
async def key_press(
    press: KeyPress,
    controller: PracticeController = Depends(get_practice_controller)
):
    """Enter submits while presenting; Space moves on once graded"""
    return _run(controller.handle_key, press.round_token, press.key, press.answer)
