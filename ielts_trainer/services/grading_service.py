"""
Answer grading

Fill-in-the-blank and multiple choice are graded the same way: the submitted
text (the typed answer or the selected option's text) against the stored
correct answer, ignoring case and surrounding whitespace.
"""
import logging

logger = logging.getLogger(__name__)


class GradingService:
    """Case-insensitive, trim-insensitive exact match"""

    @staticmethod
    def normalize(answer: str) -> str:
        return answer.strip().lower()

    def is_correct(self, submitted: str, correct_answer: str) -> bool:
        """
        Grade one answer

        Args:
            submitted: Answer text as entered by the user
            correct_answer: Answer stored with the question

        Returns:
            True when both match after trimming and lower-casing
        """
        return self.normalize(submitted) == self.normalize(correct_answer)


# Global instance
grading_service = GradingService()
