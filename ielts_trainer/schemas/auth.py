"""
Pydantic schemas for login, sessions and the dashboard
"""
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field


class AuthUser(BaseModel):
    """User as reported by the auth provider"""
    id: UUID
    email: Optional[str] = None


class AuthSession(BaseModel):
    """Tokens returned by a code exchange or refresh"""
    access_token: str
    refresh_token: str
    expires_in: int = 3600
    user: AuthUser


class LoginRequest(BaseModel):
    email: EmailStr = Field(..., description="Address that receives the sign-in link")


class LoginResponse(BaseModel):
    message: str
    email: str


class CategoryCard(BaseModel):
    id: str
    name: str
    description: str
    practice_url: str


class DashboardResponse(BaseModel):
    display_name: str
    username: Optional[str] = None
    email: Optional[str] = None
    categories: List[CategoryCard]
    favorites_url: str = "/favorites"
    wrong_book_url: str = "/wrong-book"
