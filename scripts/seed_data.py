"""Script to seed demo data into the database."""

import asyncio
import logging
from datetime import date
from decimal import Decimal

from components.budget.repository import MonthlyBudgetRepository
from components.budget.schemas import GuidedMonthlyBudgetIn
from components.category.repository import CategoryRepository
from components.core.init_db import db_manager
from components.core.logging import setup_logging
from components.transaction.models import Transaction
from components.user.models import User
from components.user.repository import UserRepository
from components.user.schemas import UserCreate

logger = logging.getLogger(__name__)

DEMO_LOGIN = "demo_user"
DEMO_PASSWORD = "password123"
DEMO_INCOME = Decimal("150000")

# (day, amount, category, subcategory, description)
MONTHLY_EXPENSES = [
    (1, Decimal("45000"), "Housing", "Rent/Mortgage", "Rent"),
    (3, Decimal("6200"), "Housing", "Utilities", "Electricity and water"),
    (5, Decimal("12500"), "Food", "Groceries Shopping", "Supermarket"),
    (9, Decimal("3400"), "Food", "Dining out", "Dinner"),
    (12, Decimal("7000"), "Transportation", "Fuel", "Fuel"),
    (15, Decimal("2500"), "Entertainment", "Streaming Services", "Subscriptions"),
    (20, Decimal("20000"), "Savings/Investments", "Emergency Fund", "Transfer to savings"),
]

SELECTED_CATEGORIES = {
    "Housing": {"selected": True, "subcategories": {"Rent/Mortgage": True, "Utilities": True}},
    "Food": {"selected": True, "subcategories": {"Groceries Shopping": True, "Dining out": True}},
    "Transportation": {"selected": True, "subcategories": {"Fuel": True}},
    "Entertainment": {"selected": True, "subcategories": {"Streaming Services": True}},
    "Savings/Investments": {"selected": True, "subcategories": {"Emergency Fund": True}},
}


async def seed_data(year: int, months: int = 3):
    """Create a demo user with a few months of transactions and guided budgets."""
    await db_manager.create_all()
    async with db_manager.get_db() as db:
        await CategoryRepository(db).ensure_default_categories()

        users = UserRepository(db)
        existing = await users.get_by_login(DEMO_LOGIN)
        if existing:
            await users.delete(existing.id)

        user: User = await users.create(UserCreate(
            login=DEMO_LOGIN,
            password=DEMO_PASSWORD,
            full_name="Demo User",
        ))

        budgets = MonthlyBudgetRepository(db)
        for month in range(1, months + 1):
            db.add(Transaction(
                user_id=user.id,
                amount=DEMO_INCOME,
                type="income",
                category="Income",
                subcategory="Salary",
                description="Salary",
                date=date(year, month, 1),
                payment_method="bank_transfer",
            ))
            for day, amount, category, subcategory, description in MONTHLY_EXPENSES:
                db.add(Transaction(
                    user_id=user.id,
                    amount=-amount,
                    type="expense",
                    category=category,
                    subcategory=subcategory,
                    description=description,
                    date=date(year, month, day),
                    payment_method="mobile_money",
                ))
            await db.commit()

            await budgets.create_guided(user.id, year, month, GuidedMonthlyBudgetIn(
                income=DEMO_INCOME,
                priority="increase-savings",
                selected_categories=SELECTED_CATEGORIES,
            ))
            await budgets.sync(user.id, year, month)

        logger.info("Seeded user %s with %d months of budgets for %s", DEMO_LOGIN, months, year)


if __name__ == "__main__":
    setup_logging()
    asyncio.run(seed_data(date.today().year))
