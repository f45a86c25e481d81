"""Yearly plan models for the database."""

from decimal import Decimal

from sqlalchemy import (
    Boolean, Column, Date, DateTime, ForeignKey, Integer, JSON, Numeric, String, UniqueConstraint,
)
from sqlalchemy.orm import relationship

from components.core.database import Base
from components.core.utils import quantize_money, to_decimal, utcnow


class YearlyPlan(Base):
    """Roll-up of a user's monthly budgets for one year."""
    __tablename__ = "yearly_plans"
    __table_args__ = (
        UniqueConstraint("user_id", "year", name="uq_yearly_plan_year"),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    year = Column(Integer, nullable=False)

    # Overview, kept in sync by recalculate_overview()
    total_income = Column(Numeric(14, 2), nullable=False, default=0)
    total_expenses = Column(Numeric(14, 2), nullable=False, default=0)
    total_savings = Column(Numeric(14, 2), nullable=False, default=0)
    months_with_budgets = Column(Integer, nullable=False, default=0)

    # Settings
    budgeting_method = Column(String(20), nullable=False, default="50-30-20")
    auto_create_monthly_budgets = Column(Boolean, nullable=False, default=False)
    default_currency = Column(String(3), nullable=False, default="KES")

    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow)

    months = relationship(
        "YearlyPlanMonth",
        back_populates="plan",
        cascade="all, delete-orphan",
        order_by="YearlyPlanMonth.month",
        lazy="selectin",
    )
    trends = relationship(
        "CategoryTrend",
        back_populates="plan",
        cascade="all, delete-orphan",
        order_by="CategoryTrend.position",
        lazy="selectin",
    )
    goals = relationship(
        "YearlyGoal",
        back_populates="plan",
        cascade="all, delete-orphan",
        order_by="YearlyGoal.id",
        lazy="selectin",
    )

    def update_monthly_summary(self, month: int, budget) -> "YearlyPlanMonth":
        """Insert or replace the summary of `month` from a monthly budget and refresh the overview."""
        summary = next((row for row in self.months if row.month == month), None)
        if summary is None:
            summary = YearlyPlanMonth(month=month)
            self.months = sorted([*self.months, summary], key=lambda row: row.month)

        income = to_decimal(budget.income_monthly)
        budgeted = to_decimal(budget.monthly_budgeted_expenses)
        actual = to_decimal(budget.monthly_actual_expenses)
        summary.monthly_budget_id = budget.id
        summary.income = quantize_money(income)
        summary.expenses = quantize_money(actual)
        summary.budgeted_expenses = quantize_money(budgeted)
        summary.actual_expenses = quantize_money(actual)
        summary.savings = quantize_money(income - actual)
        summary.variance = quantize_money(budgeted - actual)

        self.recalculate_overview()
        return summary

    def remove_monthly_summary(self, month: int) -> bool:
        remaining = [row for row in self.months if row.month != month]
        removed = len(remaining) != len(self.months)
        if removed:
            self.months = remaining
            self.recalculate_overview()
        return removed

    def recalculate_overview(self) -> None:
        self.total_income = quantize_money(sum((to_decimal(row.income) for row in self.months), Decimal(0)))
        self.total_expenses = quantize_money(sum((to_decimal(row.expenses) for row in self.months), Decimal(0)))
        self.total_savings = quantize_money(sum((to_decimal(row.savings) for row in self.months), Decimal(0)))
        self.months_with_budgets = len(self.months)


class YearlyPlanMonth(Base):
    """Summary of one month of a yearly plan."""
    __tablename__ = "yearly_plan_months"
    __table_args__ = (
        UniqueConstraint("plan_id", "month", name="uq_yearly_plan_month"),
    )

    id = Column(Integer, primary_key=True, index=True)
    plan_id = Column(Integer, ForeignKey("yearly_plans.id", ondelete="CASCADE"), nullable=False, index=True)
    month = Column(Integer, nullable=False)
    monthly_budget_id = Column(Integer, ForeignKey("monthly_budgets.id", ondelete="SET NULL"), nullable=True)
    income = Column(Numeric(14, 2), nullable=False, default=0)
    expenses = Column(Numeric(14, 2), nullable=False, default=0)
    savings = Column(Numeric(14, 2), nullable=False, default=0)
    budgeted_expenses = Column(Numeric(14, 2), nullable=False, default=0)
    actual_expenses = Column(Numeric(14, 2), nullable=False, default=0)
    variance = Column(Numeric(14, 2), nullable=False, default=0)

    plan = relationship("YearlyPlan", back_populates="months")


class CategoryTrend(Base):
    """Month-by-month budgeted and actual amounts of one category."""
    __tablename__ = "category_trends"

    id = Column(Integer, primary_key=True, index=True)
    plan_id = Column(Integer, ForeignKey("yearly_plans.id", ondelete="CASCADE"), nullable=False, index=True)
    category = Column(String(100), nullable=False)
    monthly_data = Column(JSON, nullable=False, default=list)  # [{month, budgeted, actual}]
    yearly_budgeted = Column(Numeric(14, 2), nullable=False, default=0)
    yearly_actual = Column(Numeric(14, 2), nullable=False, default=0)
    trend = Column(String(20), nullable=False, default="stable")
    position = Column(Integer, nullable=False, default=0)

    plan = relationship("YearlyPlan", back_populates="trends")


class YearlyGoal(Base):
    """Savings or spending goal set for a year."""
    __tablename__ = "yearly_goals"

    id = Column(Integer, primary_key=True, index=True)
    plan_id = Column(Integer, ForeignKey("yearly_plans.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String(200), nullable=False)
    target_amount = Column(Numeric(14, 2), nullable=False)
    current_amount = Column(Numeric(14, 2), nullable=False, default=0)
    category = Column(String(100), nullable=True)
    deadline = Column(Date, nullable=True)
    priority = Column(String(10), nullable=False, default="medium")
    achieved = Column(Boolean, nullable=False, default=False)

    plan = relationship("YearlyPlan", back_populates="goals")
