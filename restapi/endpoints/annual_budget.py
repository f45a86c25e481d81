"""Annual budget endpoints for the API."""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from components.allocation.engine import AllocationPeriod, allocate
from components.allocation.schemas import RecommendationRequest, RecommendationResponse
from components.budget import schemas
from components.budget.repository import AnnualBudgetRepository, budget_template
from components.core.init_db import get_db
from components.core.schemas import Message
from restapi.endpoints.auth import get_current_user
from restapi.endpoints.params import Year
from components.user.models import User

router = APIRouter(
    prefix="/annual-budgets",
    tags=["annual budgets"],
    responses={404: {"description": "Not found"}},
)


@router.get("/template", response_model=schemas.BudgetTemplate)
async def read_budget_template(current_user: User = Depends(get_current_user)):
    """Get the default line items of a new annual budget."""
    return budget_template()


@router.post("/recommendations", response_model=RecommendationResponse)
async def recommend_annual_budget(
    request: RecommendationRequest,
    current_user: User = Depends(get_current_user)
):
    """
    Recommend line items for an annual income.

    Unlike the monthly recommendation, the total is only scaled down when
    it exceeds the income by more than 2%.
    """
    try:
        result = allocate(
            request.income,
            priority=request.priority,
            profile=request.profile,
            selected_categories=request.selected_categories,
            period=AllocationPeriod.ANNUAL,
        )
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))
    return RecommendationResponse.from_result(result, request.priority)


@router.get("/{year}", response_model=schemas.AnnualBudget)
async def read_annual_budget(
    year: Year,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Get the budget of a year synced with its transactions, created from the template when absent."""
    return await AnnualBudgetRepository(db).get(current_user.id, year)


@router.put("/{year}", response_model=schemas.AnnualBudget)
async def save_annual_budget(
    year: Year,
    budget: schemas.AnnualBudgetIn,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Create the budget of a year or replace its income and line items."""
    return await AnnualBudgetRepository(db).create_or_update(current_user.id, year, budget)


@router.get("/{year}/performance", response_model=schemas.AnnualPerformanceSummary)
async def read_annual_performance(
    year: Year,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """
    Get spending against the annual budget.

    Returns the totals, the months elapsed with the average and projected
    spending, and per-category groups of line item performance.
    """
    performance = await AnnualBudgetRepository(db).get_performance(current_user.id, year)
    if performance is None:
        raise HTTPException(status_code=404, detail="Annual budget not found for the specified year")
    return performance


@router.get("/{year}/monthly-breakdown", response_model=schemas.MonthlyBreakdown)
async def read_monthly_breakdown(
    year: Year,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Get the expenses of every month against the monthly budget total."""
    breakdown = await AnnualBudgetRepository(db).monthly_breakdown(current_user.id, year)
    if breakdown is None:
        raise HTTPException(status_code=404, detail="Annual budget not found")
    return breakdown


@router.post("/{year}/sync", response_model=schemas.AnnualBudget)
async def sync_annual_budget(
    year: Year,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Recompute the actuals of an annual budget from the year's expenses."""
    budget = await AnnualBudgetRepository(db).sync(current_user.id, year)
    if budget is None:
        raise HTTPException(status_code=404, detail="Annual budget not found")
    return budget


@router.delete("/{year}", response_model=Message)
async def delete_annual_budget(
    year: Year,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Delete the budget of a year."""
    if not await AnnualBudgetRepository(db).delete(current_user.id, year):
        raise HTTPException(status_code=404, detail="Annual budget not found")
    return Message(message="Annual budget deleted successfully")
