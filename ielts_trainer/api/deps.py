"""
Request-scoped dependencies
"""
from fastapi import Depends, Request
from sqlalchemy.orm import Session

from ielts_trainer.client import SessionClient
from ielts_trainer.database import get_db
from ielts_trainer.exceptions import NotAuthenticatedError
from ielts_trainer.services.practice_service import PracticeController
from ielts_trainer.utils.round_store import RoundStore, get_round_store


def get_current_user(request: Request):
    """User resolved by the route guard for this request"""
    user = getattr(request.state, "user", None)
    if user is None:
        raise NotAuthenticatedError("Sign-in required")
    return user


def get_session_client(
    request: Request,
    db: Session = Depends(get_db)
) -> SessionClient:
    return SessionClient(db, get_current_user(request))


def get_practice_controller(
    client: SessionClient = Depends(get_session_client),
    store: RoundStore = Depends(get_round_store)
) -> PracticeController:
    return PracticeController(client, store)
