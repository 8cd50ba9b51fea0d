"""
Profile model - public user profile keyed by auth user id
"""
from sqlalchemy import Column, String
from sqlalchemy.types import Uuid
from ielts_trainer.database import Base


class Profile(Base):
    __tablename__ = "profiles"

    id = Column(Uuid, primary_key=True)  # Same as the auth user id
    username = Column(String(100))
    email = Column(String(255))

    def __repr__(self):
        return f"<Profile(id={self.id}, username={self.username})>"
