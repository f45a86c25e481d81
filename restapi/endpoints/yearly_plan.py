"""Yearly plan endpoints for the API."""

from typing import List
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from components.core.init_db import get_db
from components.core.schemas import Message
from components.yearly_plan import schemas
from components.yearly_plan.repository import YearlyPlanRepository
from restapi.endpoints.auth import get_current_user
from restapi.endpoints.params import Year
from components.user.models import User

router = APIRouter(
    prefix="/yearly-plans",
    tags=["yearly plans"],
    responses={404: {"description": "Not found"}},
)


@router.get("/{year}", response_model=schemas.YearlyPlan)
async def read_yearly_plan(
    year: Year,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Get the plan of a year, created from the existing monthly budgets when absent."""
    return await YearlyPlanRepository(db).get(current_user.id, year)


@router.get("/{year}/summary", response_model=schemas.YearSummary)
async def read_year_summary(
    year: Year,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """
    Get summarized monthly information for a given year.

    Returns twelve month rows with income, budgeted and actual expenses,
    savings and variance (zeros where there is no monthly budget), the
    yearly overview, line item performance, goals and category trends.
    """
    return await YearlyPlanRepository(db).get_year_summary(current_user.id, year)


@router.get("/{year}/trends", response_model=List[schemas.CategoryTrend])
async def read_category_trends(
    year: Year,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Regenerate and get the category trends of a year."""
    repo = YearlyPlanRepository(db)
    plan = await repo.find(current_user.id, year)
    if plan is None:
        raise HTTPException(status_code=404, detail="Yearly plan not found")
    await repo.generate_category_trends(plan)
    await repo.save(plan)
    return plan.trends


@router.put("/{year}/goals", response_model=schemas.YearlyPlan)
async def update_yearly_goals(
    year: Year,
    goals: List[schemas.GoalCreate],
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Replace the goals of a year."""
    return await YearlyPlanRepository(db).update_goals(current_user.id, year, goals)


@router.put("/{year}/settings", response_model=schemas.YearlyPlan)
async def update_yearly_settings(
    year: Year,
    plan_settings: schemas.PlanSettings,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Update the settings of a yearly plan."""
    plan = await YearlyPlanRepository(db).update_settings(current_user.id, year, plan_settings)
    if plan is None:
        raise HTTPException(status_code=404, detail="Yearly plan not found")
    return plan


@router.delete("/{year}", response_model=Message)
async def delete_yearly_plan(
    year: Year,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Delete the plan of a year."""
    if not await YearlyPlanRepository(db).delete(current_user.id, year):
        raise HTTPException(status_code=404, detail="Yearly plan not found")
    return Message(message="Yearly plan deleted successfully")
