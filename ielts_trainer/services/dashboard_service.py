"""
Dashboard view: greeting and practice categories
"""
import logging
from urllib.parse import urlencode

from ielts_trainer.client import SessionClient
from ielts_trainer.config import settings
from ielts_trainer.exceptions import StoreError
from ielts_trainer.schemas.auth import CategoryCard, DashboardResponse
from ielts_trainer.schemas.question import Profile

logger = logging.getLogger(__name__)

DEFAULT_DISPLAY_NAME = "Student"

CATEGORIES = [
    ("mixed", "Mixed practice", "Random questions drawn from listening, speaking, reading and writing"),
    ("reading", "Reading", "Long sentences and comprehension"),
    ("listening", "Listening", "Intensive listening practice"),
    ("writing", "Writing", "Task 1 and Task 2 structure"),
    ("speaking", "Speaking", "Speaking topic drills"),
]


def display_name(profile: Profile) -> str:
    """Username, else the local part of the email, else a generic name"""
    if profile.username:
        return profile.username
    if profile.email:
        local_part = profile.email.split("@")[0]
        if local_part:
            return local_part
    return DEFAULT_DISPLAY_NAME


def practice_url(category: str, difficulty: str = None) -> str:
    query = urlencode({"category": category, "difficulty": difficulty or settings.DEFAULT_DIFFICULTY})
    return f"/practice?{query}"


class DashboardService:

    def load_profile(self, client: SessionClient) -> Profile:
        """Read the profile once; fall back to the auth email when missing"""
        try:
            row = client.get_profile()
        except StoreError as e:
            logger.error(f"Profile fetch error: {str(e)}")
            row = None

        if row is None:
            return Profile(username=None, email=client.user.email)
        return Profile.model_validate(row, from_attributes=True)

    def get_dashboard(self, client: SessionClient) -> DashboardResponse:
        profile = self.load_profile(client)
        return DashboardResponse(
            display_name=display_name(profile),
            username=profile.username,
            email=profile.email,
            categories=[
                CategoryCard(id=cid, name=name, description=desc, practice_url=practice_url(cid))
                for cid, name, desc in CATEGORIES
            ],
        )


# Global instance
dashboard_service = DashboardService()
