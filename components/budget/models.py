"""Monthly and annual budget models for the database."""

from datetime import date
from decimal import Decimal
from typing import Iterable, List, Optional

from sqlalchemy import (
    Boolean, Column, Date, DateTime, ForeignKey, Integer, JSON, Numeric, String, UniqueConstraint,
)
from sqlalchemy.orm import relationship

from components.core.database import Base
from components.core.utils import MONTH_NAMES, percentage, quantize_money, to_decimal, utcnow
from components.budget import schemas

MONTHS_IN_YEAR = 12


def months_elapsed(year: int, today: Optional[date] = None) -> int:
    """Months of `year` that have started by `today` (0 for future years, 12 for past ones)."""
    today = today or date.today()
    if today.year != year:
        return MONTHS_IN_YEAR if today.year > year else 0
    return today.month


class LineItemColumns:
    """Columns shared by monthly and annual budget line items."""
    id = Column(Integer, primary_key=True, index=True)
    category = Column(String(100), nullable=False)
    subcategory = Column(String(100), nullable=False)
    monthly_budget = Column(Numeric(14, 2), nullable=False, default=0)
    annual_budget = Column(Numeric(14, 2), nullable=False, default=0)
    monthly_actual = Column(Numeric(14, 2), nullable=False, default=0)
    annual_actual = Column(Numeric(14, 2), nullable=False, default=0)
    is_essential = Column(Boolean, nullable=False, default=False)
    is_recurring = Column(Boolean, nullable=False, default=True)
    position = Column(Integer, nullable=False, default=0)


class BudgetItemsMixin:
    """Line item bookkeeping shared by both budget variants."""
    item_class = None

    def set_line_items(self, items: Iterable[schemas.LineItemIn]) -> None:
        """
        Replace the budgeted part of the line items.

        Items are matched on (category, subcategory) so that kept items keep
        their rows and actuals; items missing from `items` are removed.
        """
        existing = {(item.category, item.subcategory): item for item in self.items}
        updated = []
        for position, data in enumerate(items):
            item = existing.pop((data.category, data.subcategory), None)
            if item is None:
                item = self.item_class(
                    category=data.category,
                    subcategory=data.subcategory,
                    monthly_actual=Decimal(0),
                    annual_actual=Decimal(0),
                )
            item.monthly_budget = to_decimal(data.monthly_budget)
            item.annual_budget = to_decimal(data.resolved_annual_budget())
            item.is_essential = data.is_essential
            item.is_recurring = data.is_recurring
            item.position = position
            if hasattr(item, "frequency"):
                item.frequency = data.frequency
            updated.append(item)
        self.items = updated

    def find_line_item(self, category: str, subcategory: str):
        return next(
            (item for item in self.items if item.category == category and item.subcategory == subcategory),
            None,
        )


class MonthlyBudgetItem(LineItemColumns, Base):
    """Line item of a monthly budget."""
    __tablename__ = "monthly_budget_items"
    __table_args__ = (
        UniqueConstraint("budget_id", "category", "subcategory", name="uq_monthly_item_category"),
    )

    budget_id = Column(Integer, ForeignKey("monthly_budgets.id", ondelete="CASCADE"), nullable=False, index=True)
    frequency = Column(String(10), nullable=False, default="monthly")  # monthly | annual

    budget = relationship("MonthlyBudget", back_populates="items")


class MonthlyBudget(BudgetItemsMixin, Base):
    """Budget of one user for one calendar month."""
    __tablename__ = "monthly_budgets"
    __table_args__ = (
        UniqueConstraint("user_id", "year", "month", name="uq_monthly_budget_period"),
    )
    item_class = MonthlyBudgetItem

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    year = Column(Integer, nullable=False, index=True)
    month = Column(Integer, nullable=False, index=True)

    # Income
    income_monthly = Column(Numeric(14, 2), nullable=False, default=0)
    income_annual = Column(Numeric(14, 2), nullable=False, default=0)
    income_sources = Column(JSON, nullable=False, default=list)

    # Totals, kept in sync by recalculate_totals()
    monthly_budgeted_expenses = Column(Numeric(14, 2), nullable=False, default=0)
    monthly_actual_expenses = Column(Numeric(14, 2), nullable=False, default=0)
    monthly_difference = Column(Numeric(14, 2), nullable=False, default=0)
    annual_budgeted_expenses = Column(Numeric(14, 2), nullable=False, default=0)
    annual_actual_expenses = Column(Numeric(14, 2), nullable=False, default=0)
    annual_difference = Column(Numeric(14, 2), nullable=False, default=0)

    # How the budget was made
    creation_method = Column(String(10), nullable=False, default="manual")
    priority = Column(String(30), nullable=True)
    life_stage = Column(String(30), nullable=True)
    living_situation = Column(String(30), nullable=True)
    dependents = Column(Integer, nullable=True)
    goals = Column(JSON, nullable=False, default=list)

    last_sync_date = Column(DateTime, nullable=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow)

    items = relationship(
        "MonthlyBudgetItem",
        back_populates="budget",
        cascade="all, delete-orphan",
        order_by="MonthlyBudgetItem.position",
        lazy="selectin",
    )

    @property
    def period(self) -> str:
        return f"{MONTH_NAMES[self.month - 1]} {self.year}"

    @property
    def annual_projection(self) -> Decimal:
        """Monthly budget times twelve plus the annual-frequency items."""
        annual_items = sum(
            (to_decimal(item.annual_budget) for item in self.items if item.frequency == "annual"),
            Decimal(0),
        )
        monthly_items = sum(
            (to_decimal(item.monthly_budget) for item in self.items if item.frequency != "annual"),
            Decimal(0),
        )
        return monthly_items * MONTHS_IN_YEAR + annual_items

    def recalculate_totals(self) -> None:
        """Recompute the totals from the line items and the income."""
        monthly_budgeted = monthly_actual = annual_budgeted = annual_actual = Decimal(0)

        for item in self.items:
            if item.frequency == "annual":
                # Annual budgets are spread over twelve months for the monthly view
                monthly_budgeted += to_decimal(item.annual_budget) / MONTHS_IN_YEAR
                annual_budgeted += to_decimal(item.annual_budget)
            else:
                monthly_budgeted += to_decimal(item.monthly_budget)
                annual_budgeted += to_decimal(item.monthly_budget) * MONTHS_IN_YEAR
            # Sync writes this month's spending to monthly_actual whatever the frequency
            monthly_actual += to_decimal(item.monthly_actual)
            annual_actual += to_decimal(item.monthly_actual) * MONTHS_IN_YEAR

        self.monthly_budgeted_expenses = quantize_money(monthly_budgeted)
        self.monthly_actual_expenses = quantize_money(monthly_actual)
        self.monthly_difference = quantize_money(to_decimal(self.income_monthly) - monthly_budgeted)
        self.annual_budgeted_expenses = quantize_money(annual_budgeted)
        self.annual_actual_expenses = quantize_money(annual_actual)
        self.annual_difference = quantize_money(to_decimal(self.income_annual) - annual_budgeted)

    def get_performance_data(self) -> schemas.MonthlyPerformance:
        """Budgeted against actual per line item and overall."""
        categories = []
        for item in self.items:
            budgeted = to_decimal(item.monthly_budget)
            actual = to_decimal(item.monthly_actual)
            categories.append(schemas.LineItemPerformance(
                category=item.category,
                subcategory=item.subcategory,
                budgeted=float(budgeted),
                actual=float(actual),
                variance=float(actual - budgeted),
                percentage_used=percentage(actual, budgeted),
                is_over_budget=actual > budgeted,
                remaining=float(max(budgeted - actual, Decimal(0))),
                frequency=item.frequency,
            ))

        total_budgeted = to_decimal(self.monthly_budgeted_expenses)
        total_actual = to_decimal(self.monthly_actual_expenses)
        return schemas.MonthlyPerformance(
            year=self.year,
            month=self.month,
            period=self.period,
            overall=schemas.OverallPerformance(
                income=float(to_decimal(self.income_monthly)),
                total_budgeted=float(total_budgeted),
                total_actual=float(total_actual),
                variance=float(total_actual - total_budgeted),
                unallocated=float(to_decimal(self.monthly_difference)),
                percentage_used=percentage(total_actual, total_budgeted),
            ),
            categories=categories,
        )


class AnnualBudgetItem(LineItemColumns, Base):
    """Line item of an annual budget."""
    __tablename__ = "annual_budget_items"
    __table_args__ = (
        UniqueConstraint("budget_id", "category", "subcategory", name="uq_annual_item_category"),
    )

    budget_id = Column(Integer, ForeignKey("annual_budgets.id", ondelete="CASCADE"), nullable=False, index=True)

    budget = relationship("AnnualBudget", back_populates="items")


class AnnualBudget(BudgetItemsMixin, Base):
    """Budget of one user for one calendar year."""
    __tablename__ = "annual_budgets"
    __table_args__ = (
        UniqueConstraint("user_id", "year", name="uq_annual_budget_year"),
    )
    item_class = AnnualBudgetItem

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    year = Column(Integer, nullable=False)
    title = Column(String(200), nullable=False)
    currency = Column(String(3), nullable=False, default="KES")

    # Income
    income_monthly = Column(Numeric(14, 2), nullable=False, default=0)
    income_annual = Column(Numeric(14, 2), nullable=False, default=0)
    income_actual_monthly = Column(Numeric(14, 2), nullable=False, default=0)
    income_actual_annual = Column(Numeric(14, 2), nullable=False, default=0)

    # Totals, kept in sync by recalculate_totals()
    total_monthly_budget = Column(Numeric(14, 2), nullable=False, default=0)
    total_annual_budget = Column(Numeric(14, 2), nullable=False, default=0)
    total_actual_spending = Column(Numeric(14, 2), nullable=False, default=0)

    is_active = Column(Boolean, nullable=False, default=True)
    is_template = Column(Boolean, nullable=False, default=False)

    last_sync_date = Column(DateTime, nullable=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow)

    items = relationship(
        "AnnualBudgetItem",
        back_populates="budget",
        cascade="all, delete-orphan",
        order_by="AnnualBudgetItem.position",
        lazy="selectin",
    )

    @property
    def progress(self) -> int:
        """Share of the annual budget already spent, in whole percent."""
        return round(percentage(self.total_actual_spending, self.total_annual_budget))

    @property
    def remaining_budget(self) -> Decimal:
        return max(Decimal(0), to_decimal(self.total_annual_budget) - to_decimal(self.total_actual_spending))

    @property
    def variance(self) -> Decimal:
        return to_decimal(self.total_actual_spending) - to_decimal(self.total_annual_budget)

    def months_elapsed(self, today: Optional[date] = None) -> int:
        return months_elapsed(self.year, today)

    def recalculate_totals(self) -> None:
        """Recompute the totals from the line items."""
        self.total_monthly_budget = quantize_money(sum(
            (to_decimal(item.monthly_budget) for item in self.items), Decimal(0)
        ))
        self.total_annual_budget = quantize_money(sum(
            (to_decimal(item.annual_budget) for item in self.items), Decimal(0)
        ))
        self.total_actual_spending = quantize_money(sum(
            (to_decimal(item.annual_actual) for item in self.items), Decimal(0)
        ))

    def get_category_performance(self) -> List[schemas.AnnualLineItemPerformance]:
        performance = []
        for item in self.items:
            monthly_budget = to_decimal(item.monthly_budget)
            monthly_actual = to_decimal(item.monthly_actual)
            annual_budget = to_decimal(item.annual_budget)
            annual_actual = to_decimal(item.annual_actual)
            performance.append(schemas.AnnualLineItemPerformance(
                category=item.category,
                subcategory=item.subcategory,
                monthly_budget=float(monthly_budget),
                monthly_actual=float(monthly_actual),
                annual_budget=float(annual_budget),
                annual_actual=float(annual_actual),
                monthly_variance=float(monthly_actual - monthly_budget),
                annual_variance=float(annual_actual - annual_budget),
                monthly_progress=percentage(monthly_actual, monthly_budget),
                annual_progress=percentage(annual_actual, annual_budget),
                is_over_budget=annual_actual > annual_budget,
                remaining_budget=float(max(Decimal(0), annual_budget - annual_actual)),
            ))
        return performance
