"""
Pydantic schemas for the Favorites and Wrong-Book views
"""
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel


class CollectionItem(BaseModel):
    """One question in a collection; detail fields only when expanded"""
    id: UUID
    type: str
    category: str
    difficulty: str
    question_text: str
    expanded: bool = False
    correct_answer: Optional[str] = None
    explanation: Optional[str] = None
    options: Optional[List[str]] = None
    article_content: Optional[str] = None


class CollectionResponse(BaseModel):
    collection: str
    items: List[CollectionItem]
    count: int
    empty: bool
    expanded_id: Optional[UUID] = None
    message: Optional[str] = None


class RemovalResponse(BaseModel):
    collection: str
    question_id: UUID
    removed: bool
