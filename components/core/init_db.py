"""Database initialization and dependency injection."""

from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession

from components.core.database import DatabaseManager
# Import all models to ensure they're registered
import components.user.models
import components.category.models
import components.transaction.models
import components.budget.models
import components.yearly_plan.models

# Create a single instance of DatabaseManager
db_manager = DatabaseManager()


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency for getting database sessions."""
    async with db_manager.get_db() as session:
        yield session


async def init_db() -> None:
    """Create missing tables and seed the system categories."""
    from components.category.repository import CategoryRepository

    await db_manager.create_all()
    async with db_manager.get_db() as session:
        await CategoryRepository(session).ensure_default_categories()
