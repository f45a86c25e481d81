"""Repository for category operations."""

import logging
from typing import List, Optional
from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from components.allocation.rules import CATEGORY_ALLOCATION_RULES
from components.category.models import Category
from components.category.schemas import CategoryCreate

logger = logging.getLogger(__name__)

INCOME_CATEGORY = ("Income", ["Salary", "Business", "Investments", "Other"])


def default_categories() -> List[Category]:
    """System categories: one per allocation rule plus a catch-all income category."""
    categories = [
        Category(
            name=name,
            type="expense",
            subcategories=list(rule.subcategory_weights),
            is_system=True,
        )
        for name, rule in CATEGORY_ALLOCATION_RULES.items()
    ]
    name, subcategories = INCOME_CATEGORY
    categories.append(Category(name=name, type="income", subcategories=subcategories, is_system=True))
    return categories


class CategoryRepository:
    """Repository for category operations."""

    def __init__(self, session: AsyncSession):
        """Initialize repository with database session."""
        self.session = session

    async def ensure_default_categories(self) -> int:
        """Insert missing system categories, returns how many were added."""
        result = await self.session.execute(
            select(Category.name).where(Category.user_id.is_(None))
        )
        existing = set(result.scalars().all())
        missing = [category for category in default_categories() if category.name not in existing]
        if missing:
            self.session.add_all(missing)
            await self.session.commit()
            logger.info("Seeded %d system categories", len(missing))
        return len(missing)

    async def list_for_user(self, user_id: int, type_: Optional[str] = None) -> List[Category]:
        """System categories plus the ones created by the user."""
        query = select(Category).where(
            or_(Category.user_id.is_(None), Category.user_id == user_id)
        )
        if type_:
            query = query.where(Category.type.in_([type_, "both"]))
        result = await self.session.execute(query.order_by(Category.is_system.desc(), Category.name))
        return list(result.scalars().all())

    async def get_by_name(self, user_id: int, name: str) -> Optional[Category]:
        """Get a category visible to the user by name."""
        result = await self.session.execute(
            select(Category).where(
                Category.name == name,
                or_(Category.user_id.is_(None), Category.user_id == user_id),
            )
        )
        return result.scalars().first()

    async def create(self, user_id: int, category: CategoryCreate) -> Category:
        """Create a user category."""
        db_category = Category(
            user_id=user_id,
            name=category.name,
            type=category.type,
            description=category.description,
            subcategories=category.subcategories,
            is_system=False,
        )
        self.session.add(db_category)
        await self.session.commit()
        return db_category

    async def delete(self, user_id: int, category_id: int) -> bool:
        """Delete a user category; system categories cannot be deleted."""
        result = await self.session.execute(
            select(Category).where(Category.id == category_id, Category.user_id == user_id)
        )
        db_category = result.scalar_one_or_none()
        if not db_category:
            return False
        await self.session.delete(db_category)
        await self.session.commit()
        return True
