"""Monthly budget endpoints for the API."""

from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from components.allocation.engine import AllocationPeriod, allocate
from components.allocation.schemas import RecommendationRequest, RecommendationResponse
from components.budget import schemas
from components.budget.repository import MonthlyBudgetRepository
from components.core.init_db import get_db
from components.core.schemas import Message
from components.core.utils import month_bounds
from components.transaction import schemas as transaction_schemas
from components.transaction.repository import TransactionRepository
from restapi.endpoints.auth import get_current_user
from restapi.endpoints.params import Month, Year
from components.user.models import User

router = APIRouter(
    prefix="/monthly-budgets",
    tags=["monthly budgets"],
    responses={404: {"description": "Not found"}},
)


@router.post("/recommendations", response_model=RecommendationResponse)
async def recommend_monthly_budget(
    request: RecommendationRequest,
    current_user: User = Depends(get_current_user)
):
    """
    Recommend line items for a monthly income.

    The income is split into essential, lifestyle and savings parts
    (50/30/20 unless the priority or profile says otherwise) and each
    selected category gets its share. The recommended monthly budgets
    always add up to the income.
    """
    try:
        result = allocate(
            request.income,
            priority=request.priority,
            profile=request.profile,
            selected_categories=request.selected_categories,
            period=AllocationPeriod.MONTHLY,
        )
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))
    return RecommendationResponse.from_result(result, request.priority)


@router.get("/{year}", response_model=List[schemas.MonthlyBudget])
async def read_monthly_budgets(
    year: Year,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Get all monthly budgets of a year in month order."""
    return await MonthlyBudgetRepository(db).list_for_year(current_user.id, year)


@router.get("/{year}/{month}", response_model=Optional[schemas.MonthlyBudget])
async def read_monthly_budget(
    year: Year,
    month: Month,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Get the budget of a month synced with its transactions, null when there is none."""
    return await MonthlyBudgetRepository(db).get(current_user.id, year, month)


@router.put("/{year}/{month}", response_model=schemas.MonthlyBudget)
async def save_monthly_budget(
    year: Year,
    month: Month,
    budget: schemas.MonthlyBudgetIn,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Create the budget of a month or replace its income and line items."""
    return await MonthlyBudgetRepository(db).create_or_update(current_user.id, year, month, budget)


@router.post("/{year}/{month}/guided", response_model=schemas.MonthlyBudget)
async def create_guided_monthly_budget(
    year: Year,
    month: Month,
    request: schemas.GuidedMonthlyBudgetIn,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Create the budget of a month from the recommended line items."""
    return await MonthlyBudgetRepository(db).create_guided(current_user.id, year, month, request)


@router.get("/{year}/{month}/performance", response_model=schemas.MonthlyPerformance)
async def read_monthly_performance(
    year: Year,
    month: Month,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Get budgeted against actual spending per line item."""
    performance = await MonthlyBudgetRepository(db).get_performance(current_user.id, year, month)
    if performance is None:
        raise HTTPException(status_code=404, detail="Monthly budget not found")
    return performance


@router.get("/{year}/{month}/transactions", response_model=List[transaction_schemas.Transaction])
async def read_month_expenses(
    year: Year,
    month: Month,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Expenses dated within the month, the ones a sync would match."""
    start, end = month_bounds(year, month)
    return await TransactionRepository(db).find_in_range(current_user.id, start, end)


@router.post("/{year}/{month}/sync", response_model=schemas.SyncResult)
async def sync_monthly_budget(
    year: Year,
    month: Month,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Recompute the actuals of a monthly budget from the month's expenses."""
    result = await MonthlyBudgetRepository(db).sync(current_user.id, year, month)
    if result is None:
        raise HTTPException(status_code=404, detail="Monthly budget not found")
    return result


@router.delete("/{year}/{month}", response_model=Message)
async def delete_monthly_budget(
    year: Year,
    month: Month,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Delete the budget of a month."""
    if not await MonthlyBudgetRepository(db).delete(current_user.id, year, month):
        raise HTTPException(status_code=404, detail="Monthly budget not found")
    return Message(message="Monthly budget deleted successfully")
