"""Category endpoints for the API."""

from typing import List, Literal, Optional
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from components.category import schemas
from components.category.repository import CategoryRepository
from components.core.init_db import get_db
from components.core.schemas import Message
from restapi.endpoints.auth import get_current_user
from components.user.models import User

router = APIRouter(
    prefix="/categories",
    tags=["categories"],
    responses={404: {"description": "Not found"}},
)


@router.get("/", response_model=List[schemas.Category])
async def list_categories(
    type: Optional[Literal["income", "expense"]] = Query(None, description="Filter by category type"),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Get system categories and the ones created by the user."""
    return await CategoryRepository(db).list_for_user(current_user.id, type)


@router.post("/", response_model=schemas.Category)
async def create_category(
    category: schemas.CategoryCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Create a category of the user."""
    repo = CategoryRepository(db)
    if await repo.get_by_name(current_user.id, category.name):
        raise HTTPException(status_code=400, detail="Category with this name already exists")
    return await repo.create(current_user.id, category)


@router.delete("/{category_id}", response_model=Message)
async def delete_category(
    category_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Delete a category of the user."""
    if not await CategoryRepository(db).delete(current_user.id, category_id):
        raise HTTPException(status_code=404, detail="Category not found")
    return Message(message="Category deleted successfully")
