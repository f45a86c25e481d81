"""Repositories for monthly and annual budget operations."""

import logging
from collections import OrderedDict
from datetime import date
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from components.allocation.engine import AllocationPeriod, allocate
from components.budget import schemas
from components.budget.models import AnnualBudget, AnnualBudgetItem, MonthlyBudget
from components.budget.reconciliation import MatchPolicy, sync_annual_budget, sync_monthly_budget
from components.budget.template import DEFAULT_BUDGET_TEMPLATE, template_categories
from components.core.utils import MONTH_NAMES, percentage, to_decimal, utcnow
from components.transaction.repository import TransactionRepository
from components.yearly_plan.repository import YearlyPlanRepository

logger = logging.getLogger(__name__)


async def _save(session: AsyncSession, budget):
    """Recalculate the totals of a budget and commit it."""
    budget.recalculate_totals()
    budget.updated_at = utcnow()
    session.add(budget)
    try:
        await session.commit()
    except SQLAlchemyError:
        await session.rollback()
        raise
    return budget


class MonthlyBudgetRepository:
    """Repository for monthly budget operations."""

    def __init__(self, session: AsyncSession):
        """Initialize repository with database session."""
        self.session = session

    async def find(self, user_id: int, year: int, month: int) -> Optional[MonthlyBudget]:
        result = await self.session.execute(
            select(MonthlyBudget).where(
                MonthlyBudget.user_id == user_id,
                MonthlyBudget.year == year,
                MonthlyBudget.month == month,
            )
        )
        return result.scalar_one_or_none()

    async def list_for_year(self, user_id: int, year: int) -> List[MonthlyBudget]:
        result = await self.session.execute(
            select(MonthlyBudget)
            .where(MonthlyBudget.user_id == user_id, MonthlyBudget.year == year)
            .order_by(MonthlyBudget.month)
        )
        return list(result.scalars().all())

    async def save(self, budget: MonthlyBudget) -> MonthlyBudget:
        return await _save(self.session, budget)

    async def get(self, user_id: int, year: int, month: int) -> Optional[MonthlyBudget]:
        """Find the budget of the month and refresh its actuals, None when there is no budget."""
        budget = await self.find(user_id, year, month)
        if budget is None:
            return None
        await sync_monthly_budget(self.session, budget)
        return await self.save(budget)

    async def create_or_update(
        self, user_id: int, year: int, month: int, payload: schemas.MonthlyBudgetIn
    ) -> MonthlyBudget:
        """
        Create the budget of a month or replace its income and line items.

        The month summary of the yearly plan is updated as well.
        """
        budget = await self.find(user_id, year, month)
        created = budget is None
        if created:
            budget = MonthlyBudget(user_id=user_id, year=year, month=month, items=[])

        budget.income_monthly = payload.income.monthly
        budget.income_annual = payload.income.resolved_annual()
        budget.income_sources = [source.model_dump(mode="json") for source in payload.income.sources]
        budget.set_line_items(payload.categories)
        budget.creation_method = payload.creation_method
        budget.priority = payload.priority.value if payload.priority else None
        if payload.profile is not None:
            budget.life_stage = payload.profile.life_stage.value if payload.profile.life_stage else None
            budget.living_situation = (
                payload.profile.living_situation.value if payload.profile.living_situation else None
            )
            budget.dependents = payload.profile.dependents
            budget.goals = list(payload.profile.goals)

        await self.save(budget)
        logger.info(
            "%s monthly budget %s for user %s with %d line items",
            "Created" if created else "Updated", budget.period, user_id, len(budget.items),
        )
        await YearlyPlanRepository(self.session).update_monthly_summary(user_id, year, month, budget)
        return budget

    async def create_guided(
        self, user_id: int, year: int, month: int, request: schemas.GuidedMonthlyBudgetIn
    ) -> MonthlyBudget:
        """Create or replace the budget of a month with the recommended line items."""
        result = allocate(
            request.income,
            priority=request.priority,
            profile=request.profile,
            selected_categories=request.selected_categories,
            period=AllocationPeriod.MONTHLY,
        )
        payload = schemas.MonthlyBudgetIn(
            income=schemas.IncomeIn(monthly=request.income, sources=request.income_sources),
            categories=[
                schemas.LineItemIn(
                    category=item.category,
                    subcategory=item.subcategory,
                    monthly_budget=item.monthly_budget,
                    annual_budget=item.annual_budget,
                    is_essential=item.is_essential,
                    frequency=item.frequency,
                )
                for item in result.line_items
            ],
            creation_method="guided",
            priority=request.priority,
            profile=request.profile,
        )
        return await self.create_or_update(user_id, year, month, payload)

    async def sync(
        self, user_id: int, year: int, month: int, policy: MatchPolicy = MatchPolicy.EXACT
    ) -> Optional[schemas.SyncResult]:
        budget = await self.find(user_id, year, month)
        if budget is None:
            return None
        sync_result = await sync_monthly_budget(self.session, budget, policy)
        await self.save(budget)
        await YearlyPlanRepository(self.session).update_monthly_summary(user_id, year, month, budget)
        return sync_result

    async def get_performance(self, user_id: int, year: int, month: int) -> Optional[schemas.MonthlyPerformance]:
        budget = await self.get(user_id, year, month)
        if budget is None:
            return None
        return budget.get_performance_data()

    async def delete(self, user_id: int, year: int, month: int) -> bool:
        """Delete the budget of a month and drop it from the yearly plan."""
        budget = await self.find(user_id, year, month)
        if budget is None:
            return False

        await YearlyPlanRepository(self.session).remove_month(user_id, year, month)
        await self.session.delete(budget)
        await self.session.commit()
        logger.info("Deleted monthly budget %s for user %s", budget.period, user_id)
        return True


class AnnualBudgetRepository:
    """Repository for annual budget operations."""

    def __init__(self, session: AsyncSession):
        """Initialize repository with database session."""
        self.session = session

    async def find(self, user_id: int, year: int) -> Optional[AnnualBudget]:
        result = await self.session.execute(
            select(AnnualBudget).where(AnnualBudget.user_id == user_id, AnnualBudget.year == year)
        )
        return result.scalar_one_or_none()

    async def save(self, budget: AnnualBudget) -> AnnualBudget:
        return await _save(self.session, budget)

    async def create_from_template(
        self, user_id: int, year: int, template=DEFAULT_BUDGET_TEMPLATE
    ) -> AnnualBudget:
        budget = AnnualBudget(
            user_id=user_id,
            year=year,
            title=f"Annual Budget {year}",
            is_active=True,
            items=[
                AnnualBudgetItem(
                    category=line.category,
                    subcategory=line.subcategory,
                    monthly_budget=Decimal(line.monthly_budget),
                    annual_budget=Decimal(line.annual_budget or line.monthly_budget * 12),
                    monthly_actual=Decimal(0),
                    annual_actual=Decimal(0),
                    position=position,
                )
                for position, line in enumerate(template)
            ],
        )
        await self.save(budget)
        logger.info("Created annual budget %s for user %s from the default template", year, user_id)
        return budget

    async def get(self, user_id: int, year: int, today: Optional[date] = None) -> AnnualBudget:
        """Get the budget of the year, created from the default template when absent, with fresh actuals."""
        budget = await self.find(user_id, year)
        if budget is None:
            budget = await self.create_from_template(user_id, year)
        await sync_annual_budget(self.session, budget, today=today)
        return await self.save(budget)

    async def create_or_update(self, user_id: int, year: int, payload: schemas.AnnualBudgetIn) -> AnnualBudget:
        budget = await self.find(user_id, year)
        created = budget is None
        if created:
            budget = AnnualBudget(user_id=user_id, year=year, items=[])

        budget.title = payload.title or budget.title or f"Annual Budget {year}"
        budget.currency = payload.currency
        budget.income_monthly = payload.income.monthly
        budget.income_annual = payload.income.resolved_annual()
        budget.set_line_items(payload.categories)

        await self.save(budget)
        logger.info(
            "%s annual budget %s for user %s with %d line items",
            "Created" if created else "Updated", year, user_id, len(budget.items),
        )
        return budget

    async def sync(self, user_id: int, year: int, today: Optional[date] = None) -> Optional[AnnualBudget]:
        budget = await self.find(user_id, year)
        if budget is None:
            return None
        await sync_annual_budget(self.session, budget, today=today)
        return await self.save(budget)

    async def get_performance(
        self, user_id: int, year: int, today: Optional[date] = None
    ) -> Optional[schemas.AnnualPerformanceSummary]:
        """Sync the budget and summarize spending against it, grouped by category."""
        budget = await self.sync(user_id, year, today=today)
        if budget is None:
            return None

        groups: "OrderedDict[str, List[schemas.AnnualLineItemPerformance]]" = OrderedDict()
        for item in budget.get_category_performance():
            groups.setdefault(item.category, []).append(item)

        categories = []
        for category, items in groups.items():
            budgeted = sum(item.annual_budget for item in items)
            spent = sum(item.annual_actual for item in items)
            categories.append(schemas.CategoryGroupPerformance(
                category=category,
                budgeted=budgeted,
                spent=spent,
                variance=spent - budgeted,
                progress=percentage(spent, budgeted),
                subcategories=items,
            ))

        elapsed = budget.months_elapsed(today)
        total_spent = to_decimal(budget.total_actual_spending)
        average = total_spent / elapsed if elapsed > 0 else Decimal(0)
        return schemas.AnnualPerformanceSummary(
            year=year,
            total_budgeted=float(budget.total_annual_budget),
            total_spent=float(total_spent),
            variance=float(budget.variance),
            progress=budget.progress,
            remaining_budget=float(budget.remaining_budget),
            months_elapsed=elapsed,
            average_monthly_spending=float(average),
            projected_annual_spending=float(average * 12),
            categories=categories,
            last_sync_date=budget.last_sync_date,
        )

    async def monthly_breakdown(self, user_id: int, year: int) -> Optional[schemas.MonthlyBreakdown]:
        """Expenses of every month of the year against the monthly budget total."""
        budget = await self.find(user_id, year)
        if budget is None:
            return None

        spent = await TransactionRepository(self.session).monthly_totals(user_id, year)
        monthly_budget = to_decimal(budget.total_monthly_budget)
        months = []
        for month in range(1, 13):
            actual = spent.get(month, Decimal(0))
            months.append(schemas.MonthlyBreakdownRow(
                month=month,
                month_name=MONTH_NAMES[month - 1],
                budgeted=float(monthly_budget),
                actual=float(actual),
                variance=float(actual - monthly_budget),
                progress=percentage(actual, monthly_budget),
            ))

        return schemas.MonthlyBreakdown(
            year=year,
            months=months,
            total_budgeted=float(budget.total_annual_budget),
            total_spent=float(budget.total_actual_spending),
            average_monthly_budget=float(monthly_budget),
            average_monthly_spent=float(sum(spent.values(), Decimal(0)) / 12),
        )

    async def delete(self, user_id: int, year: int) -> bool:
        budget = await self.find(user_id, year)
        if budget is None:
            return False
        await self.session.delete(budget)
        await self.session.commit()
        logger.info("Deleted annual budget %s for user %s", year, user_id)
        return True


def budget_template() -> schemas.BudgetTemplate:
    """The default annual template with its categories and totals."""
    return schemas.BudgetTemplate(
        template=[schemas.TemplateItem(**line._asdict()) for line in DEFAULT_BUDGET_TEMPLATE],
        categories=template_categories(),
        total_monthly_budget=sum(line.monthly_budget for line in DEFAULT_BUDGET_TEMPLATE),
        total_annual_budget=sum(line.annual_budget for line in DEFAULT_BUDGET_TEMPLATE),
    )
