"""
Database models package
"""
from ielts_trainer.models.question import Question
from ielts_trainer.models.history import History
from ielts_trainer.models.wrong_book import WrongBookEntry
from ielts_trainer.models.favorite import Favorite
from ielts_trainer.models.profile import Profile

__all__ = ["Question", "History", "WrongBookEntry", "Favorite", "Profile"]
