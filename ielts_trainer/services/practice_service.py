"""
Practice round orchestration

A round is: fetch one question, present it, grade the submitted answer,
write back history and wrong-book entries, and let the user flip the
favorite flag. Round state is kept in the RoundStore between requests.

States: idle -> loading -> presenting -> graded -> (next round) loading.
A fetch ends in presenting, empty (no match) or failed.
"""
import logging
from typing import Optional
from uuid import UUID

from ielts_trainer.client import Collection, SessionClient
from ielts_trainer.config import settings
from ielts_trainer.exceptions import (
    EmptyAnswerError, QuestionSourceError, RecordValidationError,
    RoundStateError, StaleRoundError, StoreError,
)
from ielts_trainer.schemas.practice import PracticeRound, RoundStatus
from ielts_trainer.services.grading_service import GradingService, grading_service
from ielts_trainer.services.question_source import QuestionSource
from ielts_trainer.utils.round_store import RoundStore

logger = logging.getLogger(__name__)

ENTER_KEYS = {"Enter"}
SPACE_KEYS = {" ", "Space", "Spacebar"}


class FavoriteToggle:
    """
    Flip a question's favorite flag and write it back

    The flag flips first. If every write attempt fails, the flip is rolled
    back and the original flag is returned.
    """

    def __init__(self, client: SessionClient, question_id: UUID, favorited: bool, retries: int = 0):
        self.client = client
        self.question_id = question_id
        self.favorited = favorited
        self.retries = max(retries, 0)

    def execute(self) -> bool:
        original = self.favorited
        self.favorited = not original

        for attempt in range(1, self.retries + 2):
            try:
                if self.favorited:
                    self.client.add_entry(Collection.FAVORITES, self.question_id)
                else:
                    self.client.remove_entry(Collection.FAVORITES, self.question_id)
                return self.favorited
            except StoreError as e:
                logger.warning(
                    f"Favorite write failed (attempt {attempt}/{self.retries + 1}): "
                    f"question={self.question_id}: {str(e)}"
                )

        logger.error(f"Favorite toggle rolled back for question {self.question_id}")
        self.favorited = original
        return self.favorited


class PracticeController:
    """Drives one user's practice rounds"""

    def __init__(
        self,
        client: SessionClient,
        store: RoundStore,
        source: Optional[QuestionSource] = None,
        grader: GradingService = grading_service,
        favorite_retries: int = settings.FAVORITE_WRITE_RETRIES,
    ):
        self.client = client
        self.store = store
        self.source = source or QuestionSource(client)
        self.grader = grader
        self.favorite_retries = favorite_retries

    @property
    def user_id(self) -> UUID:
        return self.client.user_id

    def start_round(self, category: str, difficulty: str) -> PracticeRound:
        """
        Request one question and present it

        Always allowed; any previous answer and grade are dropped. A fetch
        failure or an empty result is a normal outcome of the round.
        """
        token = self.store.next_token(self.user_id)
        round_ = PracticeRound(
            token=token,
            category=category,
            difficulty=difficulty,
            status=RoundStatus.LOADING,
        )
        self._commit(round_)

        try:
            questions = self.source.fetch(category, difficulty, limit=1)
        except (QuestionSourceError, RecordValidationError) as e:
            logger.error(f"Question fetch failed: user={self.user_id}, round={token}: {str(e)}")
            round_.status = RoundStatus.FAILED
            round_.error = str(e)
        else:
            if questions:
                round_.question = questions[0]
                round_.status = RoundStatus.PRESENTING
                round_.favorited = self._is_favorited(round_.question.id)
            else:
                round_.status = RoundStatus.EMPTY

        return self._commit(round_)

    def current_round(self) -> PracticeRound:
        round_ = self.store.get(self.user_id)
        if round_ is None:
            raise RoundStateError("No active round")
        return round_

    def submit_answer(self, token: int, answer: str) -> PracticeRound:
        """Grade the answer and write back history / wrong-book"""
        round_ = self._load(token)

        if round_.status != RoundStatus.PRESENTING:
            raise RoundStateError(f"Cannot submit an answer while {round_.status.value}")
        if not answer.strip():
            raise EmptyAnswerError("Answer is empty")

        question = round_.question
        is_correct = self.grader.is_correct(answer, question.correct_answer)

        self._record_outcome(question.id, answer, is_correct)

        round_.answer = answer
        round_.is_correct = is_correct
        round_.status = RoundStatus.GRADED

        logger.info(f"Answer graded: user={self.user_id}, question={question.id}, correct={is_correct}")
        return self._commit(round_)

    def toggle_favorite(self, token: int) -> PracticeRound:
        round_ = self._load(token)

        if round_.status not in (RoundStatus.PRESENTING, RoundStatus.GRADED):
            raise RoundStateError(f"Cannot favorite while {round_.status.value}")

        command = FavoriteToggle(
            self.client,
            round_.question.id,
            round_.favorited,
            retries=self.favorite_retries,
        )
        round_.favorited = command.execute()
        return self._commit(round_)

    def advance(self, token: int) -> PracticeRound:
        """Next question with the same category and difficulty"""
        round_ = self._load(token)

        if round_.status not in (RoundStatus.GRADED, RoundStatus.EMPTY, RoundStatus.FAILED):
            raise RoundStateError(f"Cannot advance while {round_.status.value}")

        return self.start_round(round_.category, round_.difficulty)

    def handle_key(self, token: int, key: str, answer: str = "") -> PracticeRound:
        """
        Keyboard shortcuts

        Enter submits while presenting with a non-blank answer; Space advances
        once graded. Anything else leaves the round untouched.
        """
        round_ = self._load(token)

        if key in ENTER_KEYS and round_.status == RoundStatus.PRESENTING and answer.strip():
            return self.submit_answer(token, answer)
        if key in SPACE_KEYS and round_.status == RoundStatus.GRADED:
            return self.advance(token)

        logger.debug(f"Ignored key {key!r} while {round_.status.value}")
        return round_

    def _is_favorited(self, question_id: UUID) -> bool:
        try:
            return self.client.entry_exists(Collection.FAVORITES, question_id)
        except StoreError as e:
            logger.warning(f"Favorite check failed for question {question_id}: {str(e)}")
            return False

    def _record_outcome(self, question_id: UUID, answer: str, is_correct: bool) -> None:
        # Independent writes; a failure of one does not undo or skip the other
        try:
            self.client.insert_history(question_id, answer, is_correct)
        except StoreError as e:
            logger.error(f"History write failed: user={self.user_id}, question={question_id}: {str(e)}")

        if is_correct:
            return

        try:
            if not self.client.entry_exists(Collection.WRONG_BOOK, question_id):
                self.client.add_entry(Collection.WRONG_BOOK, question_id)
        except StoreError as e:
            logger.error(f"Wrong-book write failed: user={self.user_id}, question={question_id}: {str(e)}")

    def _load(self, token: int) -> PracticeRound:
        round_ = self.current_round()
        if round_.token != token or self.store.current_token(self.user_id) != token:
            raise StaleRoundError(f"Round {token} is no longer current")
        return round_

    def _commit(self, round_: PracticeRound) -> PracticeRound:
        if not self.store.save_if_current(self.user_id, round_):
            logger.info(f"Discarding stale round {round_.token} for user {self.user_id}")
            raise StaleRoundError(f"Round {round_.token} was superseded")
        return round_
