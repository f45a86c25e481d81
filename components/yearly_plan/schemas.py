"""Pydantic schemas for yearly plan data validation."""

from datetime import date, datetime
from decimal import Decimal
from typing import List, Literal, Optional

from pydantic import BaseModel, Field


class MonthSummary(BaseModel):
    """Schema for the stored summary of one month."""
    month: int
    monthly_budget_id: Optional[int] = None
    income: float
    expenses: float
    savings: float
    budgeted_expenses: float
    actual_expenses: float
    variance: float

    class Config:
        from_attributes = True


class TrendPoint(BaseModel):
    month: int
    budgeted: float
    actual: float


class CategoryTrend(BaseModel):
    """Schema for category trend."""
    category: str
    monthly_data: List[TrendPoint]
    yearly_budgeted: float
    yearly_actual: float
    trend: Literal["increasing", "decreasing", "stable", "volatile"]

    class Config:
        from_attributes = True


class GoalBase(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    target_amount: Decimal = Field(..., ge=0)
    current_amount: Decimal = Field(Decimal(0), ge=0)
    category: Optional[str] = None
    deadline: Optional[date] = None
    priority: Literal["high", "medium", "low"] = "medium"
    achieved: bool = False


class GoalCreate(GoalBase):
    """Schema for goal creation."""
    pass


class Goal(BaseModel):
    """Schema for goal response."""
    id: int
    title: str
    target_amount: float
    current_amount: float
    category: Optional[str] = None
    deadline: Optional[date] = None
    priority: str
    achieved: bool

    class Config:
        from_attributes = True


class PlanSettings(BaseModel):
    """Schema for a partial settings update."""
    budgeting_method: Optional[Literal["50-30-20", "zero-based", "envelope", "custom"]] = None
    auto_create_monthly_budgets: Optional[bool] = None
    default_currency: Optional[str] = Field(None, min_length=3, max_length=3)


class YearlyPlan(BaseModel):
    """Schema for yearly plan response."""
    id: int
    year: int
    total_income: float
    total_expenses: float
    total_savings: float
    months_with_budgets: int
    budgeting_method: str
    auto_create_monthly_budgets: bool
    default_currency: str
    updated_at: datetime
    months: List[MonthSummary]
    trends: List[CategoryTrend]
    goals: List[Goal]

    class Config:
        from_attributes = True


class MonthRow(BaseModel):
    """Schema for one month of the yearly summary."""
    month: int
    month_name: str
    income: float = 0
    budgeted: float = 0
    actual: float = 0
    savings: float = 0
    variance: float = 0
    has_budget: bool = False


class YearOverview(BaseModel):
    total_income: float
    total_budgeted_expenses: float
    total_actual_expenses: float
    total_savings: float
    budgeted_savings: float
    savings_rate: float
    months_with_budgets: int
    avg_monthly_income: float
    avg_monthly_expenses: float


class LineItemMonth(BaseModel):
    month: int
    budgeted: float
    actual: float


class LineItemYearPerformance(BaseModel):
    """Budgeted against actual of one line item across the year."""
    category: str
    subcategory: str
    total_budgeted: float
    total_actual: float
    months: List[LineItemMonth]


class YearSummary(BaseModel):
    """Schema for yearly summary."""
    year: int
    overview: YearOverview
    monthly_data: List[MonthRow]
    category_performance: List[LineItemYearPerformance]
    goals: List[Goal]
    trends: List[CategoryTrend]
