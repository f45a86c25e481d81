"""Repository for yearly plan operations."""

import logging
from decimal import Decimal
from typing import Dict, List, Optional, Tuple

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from components.budget.models import MonthlyBudget
from components.core.config import settings
from components.core.utils import MONTH_NAMES, percentage, to_decimal, utcnow
from components.yearly_plan import schemas
from components.yearly_plan.models import CategoryTrend, YearlyGoal, YearlyPlan
from components.yearly_plan.trends import build_category_trends

logger = logging.getLogger(__name__)


class YearlyPlanRepository:
    """Repository for yearly plan operations."""

    def __init__(self, session: AsyncSession):
        """Initialize repository with database session."""
        self.session = session

    async def find(self, user_id: int, year: int) -> Optional[YearlyPlan]:
        result = await self.session.execute(
            select(YearlyPlan).where(YearlyPlan.user_id == user_id, YearlyPlan.year == year)
        )
        return result.scalar_one_or_none()

    async def monthly_budgets_for_year(self, user_id: int, year: int) -> List[MonthlyBudget]:
        """Monthly budgets of the year in month order."""
        result = await self.session.execute(
            select(MonthlyBudget)
            .where(MonthlyBudget.user_id == user_id, MonthlyBudget.year == year)
            .order_by(MonthlyBudget.month)
        )
        return list(result.scalars().all())

    async def save(self, plan: YearlyPlan) -> YearlyPlan:
        plan.updated_at = utcnow()
        self.session.add(plan)
        try:
            await self.session.commit()
        except SQLAlchemyError:
            await self.session.rollback()
            raise
        return plan

    async def get_or_create(self, user_id: int, year: int) -> YearlyPlan:
        """
        Find the plan of the year or start a new one.

        A new plan gets a summary for every monthly budget that already
        exists for the year. Nothing is committed here.
        """
        plan = await self.find(user_id, year)
        if plan is not None:
            return plan

        plan = YearlyPlan(
            user_id=user_id,
            year=year,
            default_currency=settings.DEFAULT_CURRENCY,
            months=[],
            trends=[],
            goals=[],
        )
        for budget in await self.monthly_budgets_for_year(user_id, year):
            plan.update_monthly_summary(budget.month, budget)
        plan.recalculate_overview()
        self.session.add(plan)
        logger.info("Created yearly plan %s for user %s", year, user_id)
        return plan

    async def get(self, user_id: int, year: int) -> YearlyPlan:
        """Get the plan of the year, creating it when absent, with fresh category trends."""
        plan = await self.get_or_create(user_id, year)
        await self.generate_category_trends(plan)
        return await self.save(plan)

    async def generate_category_trends(self, plan: YearlyPlan) -> List[CategoryTrend]:
        """Rebuild the category trends of a plan from its year's monthly budgets."""
        budgets = await self.monthly_budgets_for_year(plan.user_id, plan.year)
        plan.trends = [
            CategoryTrend(position=position, **trend)
            for position, trend in enumerate(build_category_trends(budgets))
        ]
        logger.info("Generated %d category trends for yearly plan %s", len(plan.trends), plan.year)
        return plan.trends

    async def update_monthly_summary(self, user_id: int, year: int, month: int, budget: MonthlyBudget) -> YearlyPlan:
        """Record a monthly budget in the plan of its year."""
        plan = await self.get_or_create(user_id, year)
        plan.update_monthly_summary(month, budget)
        logger.info(
            "Updated yearly plan %s with month %s: %d months with budgets",
            year, month, plan.months_with_budgets,
        )
        return await self.save(plan)

    async def remove_month(self, user_id: int, year: int, month: int) -> bool:
        """Drop the summary of a month and recompute the overview."""
        plan = await self.find(user_id, year)
        if plan is None or not plan.remove_monthly_summary(month):
            return False
        await self.save(plan)
        logger.info("Removed month %s from yearly plan %s", month, year)
        return True

    async def update_goals(self, user_id: int, year: int, goals: List[schemas.GoalCreate]) -> YearlyPlan:
        """Replace all goals of the year."""
        plan = await self.get_or_create(user_id, year)
        plan.goals = [YearlyGoal(**goal.model_dump()) for goal in goals]
        return await self.save(plan)

    async def update_settings(self, user_id: int, year: int, plan_settings: schemas.PlanSettings) -> Optional[YearlyPlan]:
        plan = await self.find(user_id, year)
        if plan is None:
            return None
        for field, value in plan_settings.model_dump(exclude_none=True).items():
            setattr(plan, field, value)
        return await self.save(plan)

    async def delete(self, user_id: int, year: int) -> bool:
        plan = await self.find(user_id, year)
        if plan is None:
            return False
        await self.session.delete(plan)
        await self.session.commit()
        logger.info("Deleted yearly plan %s for user %s", year, user_id)
        return True

    async def get_year_summary(self, user_id: int, year: int) -> schemas.YearSummary:
        """
        Summarize the monthly budgets of a year.

        Returns twelve month rows (zeros for months without a budget), the
        yearly overview, line item performance across months and the goals
        and trends stored on the plan, if there is one.
        """
        plan = await self.find(user_id, year)
        budgets = {budget.month: budget for budget in await self.monthly_budgets_for_year(user_id, year)}

        total_income = total_budgeted = total_actual = Decimal(0)
        monthly_data = []
        for month in range(1, 13):
            budget = budgets.get(month)
            if budget is None:
                monthly_data.append(schemas.MonthRow(month=month, month_name=MONTH_NAMES[month - 1]))
                continue

            income = to_decimal(budget.income_monthly)
            budgeted = to_decimal(budget.monthly_budgeted_expenses)
            actual = to_decimal(budget.monthly_actual_expenses)
            total_income += income
            total_budgeted += budgeted
            total_actual += actual
            monthly_data.append(schemas.MonthRow(
                month=month,
                month_name=MONTH_NAMES[month - 1],
                income=float(income),
                budgeted=float(budgeted),
                actual=float(actual),
                savings=float(income - actual),
                variance=float(budgeted - actual),
                has_budget=True,
            ))

        performance: Dict[Tuple[str, str], schemas.LineItemYearPerformance] = {}
        for month, budget in budgets.items():
            for item in budget.items:
                key = (item.category, item.subcategory)
                if key not in performance:
                    performance[key] = schemas.LineItemYearPerformance(
                        category=item.category,
                        subcategory=item.subcategory,
                        total_budgeted=0,
                        total_actual=0,
                        months=[],
                    )
                entry = performance[key]
                entry.total_budgeted += float(to_decimal(item.monthly_budget))
                entry.total_actual += float(to_decimal(item.monthly_actual))
                entry.months.append(schemas.LineItemMonth(
                    month=month,
                    budgeted=float(to_decimal(item.monthly_budget)),
                    actual=float(to_decimal(item.monthly_actual)),
                ))

        months_with_budgets = len(budgets)
        overview = schemas.YearOverview(
            total_income=float(total_income),
            total_budgeted_expenses=float(total_budgeted),
            total_actual_expenses=float(total_actual),
            total_savings=float(total_income - total_actual),
            budgeted_savings=float(total_income - total_budgeted),
            savings_rate=percentage(total_income - total_actual, total_income),
            months_with_budgets=months_with_budgets,
            avg_monthly_income=float(total_income / months_with_budgets) if months_with_budgets else 0,
            avg_monthly_expenses=float(total_actual / months_with_budgets) if months_with_budgets else 0,
        )

        return schemas.YearSummary(
            year=year,
            overview=overview,
            monthly_data=monthly_data,
            category_performance=list(performance.values()),
            goals=[schemas.Goal.model_validate(goal) for goal in plan.goals] if plan else [],
            trends=[schemas.CategoryTrend.model_validate(trend) for trend in plan.trends] if plan else [],
        )
