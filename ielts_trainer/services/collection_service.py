"""
Favorites and Wrong-Book views
"""
import logging
from typing import List, Optional
from uuid import UUID

from ielts_trainer.client import Collection, SessionClient
from ielts_trainer.exceptions import CollectionRemovalError, RecordValidationError, StoreError
from ielts_trainer.schemas.collection import CollectionItem, CollectionResponse
from ielts_trainer.schemas.question import Question, parse_question

logger = logging.getLogger(__name__)

EMPTY_MESSAGES = {
    Collection.FAVORITES: "No favorites yet. Tap the heart on a question during practice to save it here.",
    Collection.WRONG_BOOK: "Your wrong-book is empty. Questions you miss during practice show up here.",
}


class CollectionView:
    """
    One user's Favorites or Wrong-Book list

    The list is loaded once; removals update it in place without re-fetching.
    At most one item is expanded at a time.
    """

    def __init__(self, client: SessionClient, collection: Collection):
        self.client = client
        self.collection = collection
        self.questions: List[Question] = []
        self.expanded_id: Optional[UUID] = None

    def load(self) -> List[Question]:
        """
        Load the collection, most recently added first

        Raises:
            StoreError: the collection could not be read
        """
        question_ids = self.client.list_entry_question_ids(self.collection)
        rows = {row.id: row for row in self.client.get_questions(question_ids)}

        questions = []
        for question_id in question_ids:
            row = rows.get(question_id)
            if row is None:
                continue  # Question deleted from the bank
            try:
                questions.append(parse_question(row))
            except RecordValidationError as e:
                logger.warning(f"Skipping malformed question {question_id} in {self.collection.value}: {str(e)}")

        self.questions = questions
        logger.info(f"Loaded {len(questions)} {self.collection.value} item(s) for user {self.client.user_id}")
        return self.questions

    def toggle_expand(self, question_id: UUID) -> Optional[UUID]:
        """Open the item's detail panel, closing any other; closes it if already open"""
        self.expanded_id = None if question_id == self.expanded_id else question_id
        return self.expanded_id

    def remove(self, question_id: UUID) -> bool:
        """
        Delete the (user, question) pairing and drop it from the local list

        Returns False when there was no such pairing to delete.

        Raises:
            CollectionRemovalError: the delete failed; the item stays listed
        """
        try:
            deleted = self.client.remove_entry(self.collection, question_id)
        except StoreError as e:
            logger.error(f"Failed to remove {question_id} from {self.collection.value}: {str(e)}")
            raise CollectionRemovalError("Removal failed, please try again.") from e

        self.questions = [q for q in self.questions if q.id != question_id]
        if self.expanded_id == question_id:
            self.expanded_id = None
        return deleted > 0

    def render(self) -> CollectionResponse:
        items = []
        for question in self.questions:
            expanded = question.id == self.expanded_id
            item = CollectionItem(
                id=question.id,
                type=question.type,
                category=question.category,
                difficulty=question.difficulty,
                question_text=question.question_text,
                expanded=expanded,
            )
            if expanded:
                item.correct_answer = question.correct_answer
                item.explanation = question.explanation
                item.options = question.options
                item.article_content = question.article_content
            items.append(item)

        return CollectionResponse(
            collection=self.collection.value,
            items=items,
            count=len(items),
            empty=not items,
            expanded_id=self.expanded_id,
            message=EMPTY_MESSAGES[self.collection] if not items else None,
        )
