"""Pydantic schemas for category data validation."""

from typing import List, Literal, Optional
from pydantic import BaseModel, Field


class CategoryBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    type: Literal["income", "expense", "both"] = "expense"
    description: Optional[str] = Field(None, max_length=500)
    subcategories: List[str] = Field(default_factory=list)


class CategoryCreate(CategoryBase):
    """Schema for category creation."""
    pass


class Category(CategoryBase):
    """Schema for category response."""
    id: int
    user_id: Optional[int] = None
    is_system: bool

    class Config:
        from_attributes = True
