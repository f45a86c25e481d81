"""Pydantic schemas for user data validation."""

from datetime import date
from typing import Optional
from pydantic import BaseModel, Field


class UserBase(BaseModel):
    """Base user schema."""
    login: str = Field(..., min_length=3, max_length=50)
    full_name: Optional[str] = Field(None, max_length=100)
    currency: str = Field("KES", min_length=3, max_length=3)


class UserCreate(UserBase):
    """Schema for user creation."""
    password: str = Field(..., min_length=6)


class UserUpdate(BaseModel):
    """Schema for user update."""
    login: str = Field(..., min_length=3, max_length=50)
    full_name: Optional[str] = Field(None, max_length=100)
    currency: Optional[str] = Field(None, min_length=3, max_length=3)
    password: Optional[str] = Field(None, min_length=6)


class User(UserBase):
    """Schema for user response."""
    id: int
    registration_date: date

    class Config:
        from_attributes = True


class UserWithToken(User):
    """Schema for user response with access token."""
    access_token: str
    token_type: str = "bearer"
