"""
Random question selection through the backend's get_random_questions procedure
"""
import logging
from typing import Any, Dict, List, Optional

from ielts_trainer.client import SessionClient
from ielts_trainer.exceptions import QuestionSourceError, StoreError
from ielts_trainer.schemas.question import Question, parse_question

logger = logging.getLogger(__name__)

RANDOM_QUESTIONS_PROCEDURE = "get_random_questions"
MIXED_CATEGORY = "mixed"


def build_rpc_params(category: str, difficulty: Optional[str], limit: int = 1) -> Dict[str, Any]:
    """
    Procedure arguments for a category/difficulty filter

    The mixed category draws from every category and never filters by
    difficulty, whatever difficulty was asked for.
    """
    return {
        "p_category": category,
        "p_difficulty": None if category == MIXED_CATEGORY else difficulty,
        "p_limit": limit,
    }


class QuestionSource:
    """Fetches pseudo-random questions for one session client"""

    def __init__(self, client: SessionClient):
        self.client = client

    def fetch(self, category: str, difficulty: Optional[str], limit: int = 1) -> List[Question]:
        """
        Fetch up to `limit` questions matching the filter

        An empty list means no question matched; that is not an error.

        Raises:
            QuestionSourceError: the procedure call failed
            RecordValidationError: a returned row is malformed
        """
        params = build_rpc_params(category, difficulty, limit)

        try:
            rows = self.client.rpc(RANDOM_QUESTIONS_PROCEDURE, params)
        except StoreError as e:
            raise QuestionSourceError(str(e)) from e

        # RecordValidationError propagates as-is; callers treat it as a failed fetch
        questions = [parse_question(row) for row in rows]

        logger.info(
            f"Fetched {len(questions)} question(s): category={category}, "
            f"difficulty={params['p_difficulty']}, limit={limit}"
        )
        return questions
