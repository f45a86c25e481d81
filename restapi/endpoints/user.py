"""Profile endpoints for the logged in budget owner."""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from components.core.init_db import get_db
from components.core.schemas import Message
from components.user import schemas
from components.user.models import User
from components.user.repository import UserRepository
from restapi.endpoints.auth import get_current_user

router = APIRouter(prefix="/users", tags=["users"])


@router.get("/me", response_model=schemas.User)
async def read_profile(current_user: User = Depends(get_current_user)):
    return current_user


@router.put("/me", response_model=schemas.User)
async def update_profile(
    changes: schemas.UserUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Change login, name, currency or password."""
    users = UserRepository(db)
    if changes.login != current_user.login and await users.exists(changes.login):
        raise HTTPException(status_code=400, detail="Login is already taken by another user")
    return await users.update(current_user.id, changes)


@router.delete("/me", response_model=Message)
async def delete_profile(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Close the account along with its budgets, transactions and plans."""
    await UserRepository(db).delete(current_user.id)
    return Message(message="User deleted successfully")
