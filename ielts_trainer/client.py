"""
Session-bound client for the backend store

One SessionClient is built per request from that request's database session
and the signed-in user. Every collection method is scoped to that user.
"""
import logging
import re
from enum import Enum
from typing import Any, Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel, ValidationError
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ielts_trainer.exceptions import RecordValidationError, StoreError
from ielts_trainer.models import Favorite, History, Profile, Question, WrongBookEntry
from ielts_trainer.schemas import question as records
from ielts_trainer.schemas.auth import AuthUser

logger = logging.getLogger(__name__)

_PROCEDURE_NAME = re.compile(r"^[a-z_][a-z0-9_]*$")


class Collection(str, Enum):
    """User-scoped (user, question) collections"""
    FAVORITES = "favorites"
    WRONG_BOOK = "wrong_book"


_COLLECTION_MODELS = {
    Collection.FAVORITES: Favorite,
    Collection.WRONG_BOOK: WrongBookEntry,
}

_COLLECTION_RECORDS = {
    Collection.FAVORITES: records.FavoriteEntry,
    Collection.WRONG_BOOK: records.WrongBookEntry,
}


def _validate(record_type, **values) -> BaseModel:
    try:
        return record_type(**values)
    except ValidationError as e:
        raise RecordValidationError(f"Invalid {record_type.__name__}: {e}") from e


class SessionClient:
    """Store access for one authenticated user within one request"""

    def __init__(self, db: Session, user: AuthUser):
        self.db = db
        self.user = user

    @property
    def user_id(self) -> UUID:
        return self.user.id

    # --- Remote procedures ---

    def rpc(self, name: str, params: Dict[str, Any]) -> List[Dict[str, Any]]:
        """
        Call a set-returning database function with named parameters

        Returns:
            List of rows as plain dictionaries
        """
        if not _PROCEDURE_NAME.match(name):
            raise ValueError(f"Invalid procedure name: {name!r}")

        placeholders = ", ".join(f":{key}" for key in params)
        statement = text(f"SELECT * FROM {name}({placeholders})")

        try:
            result = self.db.execute(statement, params)
            return [dict(row) for row in result.mappings()]
        except SQLAlchemyError as e:
            self.db.rollback()
            raise StoreError(f"Procedure {name} failed: {e}") from e

    # --- History ---

    def insert_history(self, question_id: UUID, user_answer: str, is_correct: bool) -> None:
        record = _validate(
            records.HistoryRecord,
            user_id=self.user_id,
            question_id=question_id,
            user_answer=user_answer,
            is_correct=is_correct,
        )
        self._add(History(**record.model_dump(exclude_none=True)))

    # --- Favorites / Wrong-Book ---

    def entry_exists(self, collection: Collection, question_id: UUID) -> bool:
        model = _COLLECTION_MODELS[collection]
        try:
            entry = self.db.query(model.id).filter(
                model.user_id == self.user_id,
                model.question_id == question_id
            ).first()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise StoreError(f"Lookup in {collection.value} failed: {e}") from e
        return entry is not None

    def add_entry(self, collection: Collection, question_id: UUID) -> None:
        record = _validate(_COLLECTION_RECORDS[collection], user_id=self.user_id, question_id=question_id)
        self._add(_COLLECTION_MODELS[collection](**record.model_dump(exclude_none=True)))

    def remove_entry(self, collection: Collection, question_id: UUID) -> int:
        """Delete the (user, question) pairing; returns rows deleted"""
        model = _COLLECTION_MODELS[collection]
        try:
            deleted = self.db.query(model).filter(
                model.user_id == self.user_id,
                model.question_id == question_id
            ).delete(synchronize_session=False)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise StoreError(f"Delete from {collection.value} failed: {e}") from e

        logger.info(f"Removed {deleted} {collection.value} row(s): user={self.user_id}, question={question_id}")
        return deleted

    def list_entry_question_ids(self, collection: Collection) -> List[UUID]:
        """Question ids in the collection, most recently added first"""
        model = _COLLECTION_MODELS[collection]
        try:
            rows = self.db.query(model.question_id).filter(
                model.user_id == self.user_id
            ).order_by(model.created_at.desc()).all()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise StoreError(f"Listing {collection.value} failed: {e}") from e
        return [row.question_id for row in rows]

    # --- Questions / Profiles ---

    def get_questions(self, question_ids: List[UUID]) -> List[Question]:
        if not question_ids:
            return []
        try:
            return self.db.query(Question).filter(Question.id.in_(question_ids)).all()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise StoreError(f"Question lookup failed: {e}") from e

    def get_profile(self) -> Optional[Profile]:
        try:
            return self.db.query(Profile).filter(Profile.id == self.user_id).first()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise StoreError(f"Profile lookup failed: {e}") from e

    def _add(self, row) -> None:
        try:
            self.db.add(row)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise StoreError(f"Insert into {row.__tablename__} failed: {e}") from e
