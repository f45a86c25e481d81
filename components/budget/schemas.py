"""Pydantic schemas for budget data validation."""

from datetime import datetime
from decimal import Decimal
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, Field, model_validator

from components.allocation.rules import Priority
from components.allocation.schemas import CategorySelection, UserProfile
from components.core.config import settings


class LineItemIn(BaseModel):
    """Schema for a budget line item sent by the client."""
    category: str = Field(..., min_length=1, max_length=100)
    subcategory: str = Field(..., min_length=1, max_length=100)
    monthly_budget: Decimal = Field(Decimal(0), ge=0)
    annual_budget: Optional[Decimal] = Field(None, ge=0)
    is_essential: bool = False
    is_recurring: bool = True
    frequency: Literal["monthly", "annual"] = "monthly"

    def resolved_annual_budget(self) -> Decimal:
        """Annual budget, twelve monthly budgets when not given."""
        if self.annual_budget is not None:
            return self.annual_budget
        return self.monthly_budget * 12


def _check_unique_items(items: List[LineItemIn]) -> None:
    seen = set()
    for item in items:
        key = (item.category, item.subcategory)
        if key in seen:
            raise ValueError(f"Duplicate line item: {item.category} / {item.subcategory}")
        seen.add(key)


class IncomeSource(BaseModel):
    source: str
    amount: Decimal = Field(..., ge=0)
    frequency: Literal["monthly", "annual", "weekly", "one-time"] = "monthly"


class IncomeIn(BaseModel):
    """Schema for budget income."""
    monthly: Decimal = Field(..., ge=0)
    annual: Optional[Decimal] = Field(None, ge=0)
    sources: List[IncomeSource] = Field(default_factory=list)

    def resolved_annual(self) -> Decimal:
        if self.annual is not None:
            return self.annual
        return self.monthly * 12


class MonthlyBudgetIn(BaseModel):
    """Schema for creating or replacing a monthly budget."""
    income: IncomeIn
    categories: List[LineItemIn] = Field(default_factory=list)
    creation_method: Literal["guided", "manual"] = "manual"
    priority: Optional[Priority] = None
    profile: Optional[UserProfile] = None

    @model_validator(mode="after")
    def unique_items(self):
        _check_unique_items(self.categories)
        return self


class GuidedMonthlyBudgetIn(BaseModel):
    """Schema for creating a monthly budget straight from a recommendation."""
    income: Decimal = Field(..., gt=0)
    priority: Optional[Priority] = None
    profile: UserProfile = Field(default_factory=UserProfile)
    selected_categories: Dict[str, CategorySelection] = Field(default_factory=dict)
    income_sources: List[IncomeSource] = Field(default_factory=list)


class AnnualBudgetIn(BaseModel):
    """Schema for creating or replacing an annual budget."""
    title: Optional[str] = Field(None, max_length=200)
    currency: str = Field(settings.DEFAULT_CURRENCY, min_length=3, max_length=3)
    income: IncomeIn
    categories: List[LineItemIn] = Field(default_factory=list)

    @model_validator(mode="after")
    def unique_items(self):
        _check_unique_items(self.categories)
        return self


class LineItem(BaseModel):
    """Schema for a stored line item."""
    id: int
    category: str
    subcategory: str
    monthly_budget: float
    annual_budget: float
    monthly_actual: float
    annual_actual: float
    is_essential: bool
    is_recurring: bool

    class Config:
        from_attributes = True


class MonthlyLineItem(LineItem):
    frequency: str


class MonthlyBudget(BaseModel):
    """Schema for monthly budget response."""
    id: int
    user_id: int
    year: int
    month: int
    period: str
    income_monthly: float
    income_annual: float
    income_sources: List[Dict] = Field(default_factory=list)
    monthly_budgeted_expenses: float
    monthly_actual_expenses: float
    monthly_difference: float
    annual_budgeted_expenses: float
    annual_actual_expenses: float
    annual_difference: float
    creation_method: str
    priority: Optional[str] = None
    life_stage: Optional[str] = None
    living_situation: Optional[str] = None
    last_sync_date: Optional[datetime] = None
    items: List[MonthlyLineItem]

    class Config:
        from_attributes = True


class AnnualBudget(BaseModel):
    """Schema for annual budget response."""
    id: int
    user_id: int
    year: int
    title: str
    currency: str
    income_monthly: float
    income_annual: float
    total_monthly_budget: float
    total_annual_budget: float
    total_actual_spending: float
    progress: int
    is_active: bool
    last_sync_date: Optional[datetime] = None
    items: List[LineItem]

    class Config:
        from_attributes = True


class LineItemPerformance(BaseModel):
    """Budgeted against actual for one monthly line item."""
    category: str
    subcategory: str
    budgeted: float
    actual: float
    variance: float
    percentage_used: float
    is_over_budget: bool
    remaining: float
    frequency: str = "monthly"


class OverallPerformance(BaseModel):
    income: float
    total_budgeted: float
    total_actual: float
    variance: float
    unallocated: float
    percentage_used: float


class MonthlyPerformance(BaseModel):
    """Schema for monthly budget performance."""
    year: int
    month: int
    period: str
    overall: OverallPerformance
    categories: List[LineItemPerformance]


class AnnualLineItemPerformance(BaseModel):
    """Budgeted against actual for one annual line item."""
    category: str
    subcategory: str
    monthly_budget: float
    monthly_actual: float
    annual_budget: float
    annual_actual: float
    monthly_variance: float
    annual_variance: float
    monthly_progress: float
    annual_progress: float
    is_over_budget: bool
    remaining_budget: float


class CategoryGroupPerformance(BaseModel):
    """Line item performance of one category."""
    category: str
    budgeted: float
    spent: float
    variance: float
    progress: float
    subcategories: List[AnnualLineItemPerformance]


class AnnualPerformanceSummary(BaseModel):
    """Schema for annual budget performance."""
    year: int
    total_budgeted: float
    total_spent: float
    variance: float
    progress: float
    remaining_budget: float
    months_elapsed: int
    average_monthly_spending: float
    projected_annual_spending: float
    categories: List[CategoryGroupPerformance]
    last_sync_date: Optional[datetime] = None


class MonthlyBreakdownRow(BaseModel):
    month: int
    month_name: str
    budgeted: float
    actual: float
    variance: float
    progress: float


class MonthlyBreakdown(BaseModel):
    """Schema for the month-by-month view of an annual budget."""
    year: int
    months: List[MonthlyBreakdownRow]
    total_budgeted: float
    total_spent: float
    average_monthly_budget: float
    average_monthly_spent: float


class TemplateItem(BaseModel):
    category: str
    subcategory: str
    monthly_budget: float
    annual_budget: float


class BudgetTemplate(BaseModel):
    """Schema for the default annual budget template."""
    template: List[TemplateItem]
    categories: List[str]
    total_monthly_budget: float
    total_annual_budget: float


class SyncResult(BaseModel):
    """Schema for the outcome of a transaction sync."""
    matched_transactions: int
    unmatched_transactions: int
    unmatched_amount: float
    total_actual: float
    last_sync_date: datetime
