"""Pydantic schemas for budget recommendations."""

from decimal import Decimal
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from components.allocation.engine import AllocationPeriod, AllocationResult
from components.allocation.rules import Bucket, LifeStage, LivingSituation, Priority


class CategorySelection(BaseModel):
    """Whether a category is picked and which of its subcategories are."""
    selected: bool = False
    subcategories: Dict[str, bool] = Field(default_factory=dict)


class UserProfile(BaseModel):
    """Personal situation used to adjust the income split."""
    life_stage: Optional[LifeStage] = None
    living_situation: Optional[LivingSituation] = None
    dependents: Optional[int] = Field(None, ge=0)
    goals: List[str] = Field(default_factory=list)


class RecommendationRequest(BaseModel):
    """Schema for a budget recommendation request."""
    income: Decimal = Field(..., gt=0, description="Monthly or annual income depending on the endpoint")
    priority: Optional[Priority] = None
    profile: UserProfile = Field(default_factory=UserProfile)
    selected_categories: Dict[str, CategorySelection] = Field(default_factory=dict)


class RecommendedLineItem(BaseModel):
    category: str
    subcategory: str
    monthly_budget: float
    annual_budget: float
    is_essential: bool
    bucket: Bucket
    frequency: str = "monthly"


class BucketSplit(BaseModel):
    essential: float
    lifestyle: float
    savings: float


class RecommendationTotals(BaseModel):
    monthly_allocated: float
    annual_allocated: float
    monthly_remaining: float
    annual_remaining: float


class RecommendationSummary(BaseModel):
    savings_rate: float
    budgeting_method: str
    corrections: List[str] = Field(default_factory=list)


class RecommendationResponse(BaseModel):
    """Schema for a budget recommendation."""
    period: AllocationPeriod
    monthly_income: float
    annual_income: float
    categories: List[RecommendedLineItem]
    breakdown: BucketSplit
    percentages: BucketSplit
    totals: RecommendationTotals
    recommendations: RecommendationSummary

    @classmethod
    def from_result(cls, result: AllocationResult, priority: Optional[Priority] = None) -> "RecommendationResponse":
        if result.period is AllocationPeriod.MONTHLY:
            monthly_income, annual_income = result.income, result.income * 12
            monthly_allocated, annual_allocated = result.total_monthly, result.total_monthly * 12
        else:
            monthly_income, annual_income = result.income / 12, result.income
            monthly_allocated, annual_allocated = result.total_annual / 12, result.total_annual

        savings = result.bucket_total(Bucket.SAVINGS)
        savings_rate = round(float(savings / result.income * 100))
        method = "{:.0f}/{:.0f}/{:.0f}".format(*(share * 100 for share in result.percentages))
        if priority is Priority.INCREASE_SAVINGS:
            method += " (High Savings)"

        return cls(
            period=result.period,
            monthly_income=float(monthly_income),
            annual_income=float(annual_income),
            categories=[
                RecommendedLineItem(
                    category=item.category,
                    subcategory=item.subcategory,
                    monthly_budget=float(item.monthly_budget),
                    annual_budget=float(item.annual_budget),
                    is_essential=item.is_essential,
                    bucket=item.bucket,
                    frequency=item.frequency,
                )
                for item in result.line_items
            ],
            breakdown=BucketSplit(**{k: float(v) for k, v in result.breakdown._asdict().items()}),
            percentages=BucketSplit(**{k: float(v) for k, v in result.percentages._asdict().items()}),
            totals=RecommendationTotals(
                monthly_allocated=float(monthly_allocated),
                annual_allocated=float(annual_allocated),
                monthly_remaining=float(monthly_income - monthly_allocated),
                annual_remaining=float(annual_income - annual_allocated),
            ),
            recommendations=RecommendationSummary(
                savings_rate=savings_rate,
                budgeting_method=method,
                corrections=[
                    f"{c.reason}:{c.bucket.value}" if c.bucket else c.reason
                    for c in result.corrections
                ],
            ),
        )
