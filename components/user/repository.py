"""Persistence for budget owners."""

import logging
from datetime import date
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from components.core.security import get_password_hash
from components.user.models import User
from components.user.schemas import UserCreate, UserUpdate

logger = logging.getLogger(__name__)


class UserRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def _first(self, *criteria) -> Optional[User]:
        result = await self.session.execute(select(User).where(*criteria))
        return result.scalar_one_or_none()

    async def get_by_id(self, user_id: int) -> Optional[User]:
        return await self._first(User.id == user_id)

    async def get_by_login(self, login: str) -> Optional[User]:
        return await self._first(User.login == login)

    async def exists(self, login: str) -> bool:
        """True if ``login`` is already registered."""
        found = await self.session.scalar(select(User.id).where(User.login == login))
        return found is not None

    async def create(self, user_in: UserCreate) -> User:
        """Register an owner; the password is stored salted and hashed."""
        user = User(
            **user_in.model_dump(exclude={"password"}),
            password=get_password_hash(user_in.password),
            registration_date=date.today(),
        )
        self.session.add(user)
        await self.session.commit()
        logger.info("Registered user %s (id=%s)", user.login, user.id)
        return user

    async def update(self, user_id: int, changes: UserUpdate) -> Optional[User]:
        """Apply a profile change. Unset optional fields keep their value."""
        user = await self.get_by_id(user_id)
        if user is None:
            return None

        fields = changes.model_dump(exclude_none=True)
        password = fields.pop("password", None)
        for name, value in fields.items():
            setattr(user, name, value)
        if password:
            user.password = get_password_hash(password)

        await self.session.commit()
        return user

    async def delete(self, user_id: int) -> bool:
        """Remove the owner. Owned rows go with it through ``ON DELETE CASCADE``."""
        user = await self.get_by_id(user_id)
        if user is None:
            return False

        await self.session.delete(user)
        await self.session.commit()
        logger.info("Deleted user id=%s", user_id)
        return True
