"""Registration, login and the bearer-token dependency used by every budget route."""

import logging
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer, OAuth2PasswordRequestForm
from sqlalchemy.ext.asyncio import AsyncSession

from components.core.init_db import get_db
from components.core.security import create_access_token, token_subject, verify_password
from components.user.models import User
from components.user.repository import UserRepository
from components.user.schemas import UserCreate, User as UserSchema, UserWithToken

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["authentication"])
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="auth/login")


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_user(
    token: str = Depends(oauth2_scheme),
    db: AsyncSession = Depends(get_db),
) -> User:
    """Resolve the budget owner from the bearer token."""
    user_id = token_subject(token)
    if user_id is None:
        raise _unauthorized("Could not validate credentials")

    user = await UserRepository(db).get_by_id(user_id)
    if user is None:
        raise _unauthorized("User not found")
    return user


def _with_token(user: User) -> UserWithToken:
    profile = UserSchema.model_validate(user).model_dump()
    return UserWithToken(**profile, access_token=create_access_token({"sub": str(user.id)}))


@router.post("/register", response_model=UserWithToken)
async def register(user_in: UserCreate, db: AsyncSession = Depends(get_db)) -> Any:
    """Open an account and hand back a token for it."""
    users = UserRepository(db)
    if await users.exists(user_in.login):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Login already registered")
    return _with_token(await users.create(user_in))


@router.post("/login", response_model=UserWithToken)
async def login(
    form_data: OAuth2PasswordRequestForm = Depends(),
    db: AsyncSession = Depends(get_db),
) -> Any:
    user = await UserRepository(db).get_by_login(form_data.username)
    if user is None or not verify_password(form_data.password, user.password):
        logger.warning("Failed login for %s", form_data.username)
        raise _unauthorized("Incorrect login or password")
    return _with_token(user)
