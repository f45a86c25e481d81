"""Matching of expense transactions to budget line items."""

import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Iterable, Optional, Sequence, Tuple

from sqlalchemy.ext.asyncio import AsyncSession

from components.budget.models import AnnualBudget, MonthlyBudget
from components.budget.schemas import SyncResult
from components.core.config import settings
from components.core.utils import month_bounds, quantize_money, to_decimal, utcnow, year_bounds
from components.transaction.repository import TransactionRepository

logger = logging.getLogger(__name__)

# Category name used for transactions without one
FALLBACK_CATEGORY = "Other"

CategoryTotal = Tuple[str, Optional[str], Decimal, int]


class MatchPolicy(str, Enum):
    """How a transaction category finds its line item."""
    EXACT = "exact"          # category and subcategory are equal
    SUBSTRING = "substring"  # case-insensitive containment on category names


@dataclass(frozen=True)
class MatchOutcome:
    matched: int = 0
    unmatched: int = 0
    unmatched_amount: Decimal = Decimal(0)


def _contains_either_way(text: str, name: str) -> bool:
    text = text.lower()
    return bool(text) and (name in text or text in name)


def match_line_item(items: Sequence, category: Optional[str], subcategory: Optional[str], policy: MatchPolicy):
    """Return the first line item the transaction category belongs to, or None."""
    if policy is MatchPolicy.EXACT:
        return next(
            (item for item in items if item.category == category and item.subcategory == subcategory),
            None,
        )

    name = (category or FALLBACK_CATEGORY).strip().lower()
    if not name:
        return None
    return next(
        (
            item for item in items
            if _contains_either_way(item.category, name) or _contains_either_way(item.subcategory, name)
        ),
        None,
    )


def apply_category_totals(
    items: Sequence, totals: Iterable[CategoryTotal], policy: MatchPolicy, field: str
) -> MatchOutcome:
    """
    Reset `field` on every line item and add the matched totals to it.

    Args:
        items: Line items in their display order
        totals: (category, subcategory, absolute amount, transaction count) rows
        policy: Matching policy
        field: Line item attribute receiving the actual amount
    """
    for item in items:
        setattr(item, field, Decimal(0))

    matched = unmatched = 0
    unmatched_amount = Decimal(0)
    for category, subcategory, amount, count in totals:
        item = match_line_item(items, category, subcategory, policy)
        if item is None:
            unmatched += count
            unmatched_amount += to_decimal(amount)
            continue
        setattr(item, field, to_decimal(getattr(item, field)) + to_decimal(amount))
        matched += count

    for item in items:
        setattr(item, field, quantize_money(getattr(item, field)))

    return MatchOutcome(matched=matched, unmatched=unmatched, unmatched_amount=unmatched_amount)


async def _category_totals(
    repository: TransactionRepository, user_id: int, start: date, end: date, policy: MatchPolicy
):
    if policy is MatchPolicy.EXACT:
        return await repository.sum_by_category_and_subcategory(user_id, start, end)
    rows = await repository.sum_by_category(user_id, start, end)
    return [(category, None, total, count) for category, total, count in rows]


def annual_match_policy() -> MatchPolicy:
    return MatchPolicy.SUBSTRING if settings.ANNUAL_SUBSTRING_MATCH else MatchPolicy.EXACT


async def sync_monthly_budget(
    session: AsyncSession, budget: MonthlyBudget, policy: MatchPolicy = MatchPolicy.EXACT
) -> SyncResult:
    """
    Recompute the monthly actuals of a budget from the expenses of its month.

    Running it twice over the same transactions gives the same actuals.
    The budget is not committed here.
    """
    start, end = month_bounds(budget.year, budget.month)
    totals = await _category_totals(TransactionRepository(session), budget.user_id, start, end, policy)
    outcome = apply_category_totals(budget.items, totals, policy, "monthly_actual")

    budget.recalculate_totals()
    budget.last_sync_date = utcnow()
    logger.info(
        "Synced monthly budget %s (%s): %d transactions matched, %d unmatched",
        budget.id, budget.period, outcome.matched, outcome.unmatched,
    )
    return SyncResult(
        matched_transactions=outcome.matched,
        unmatched_transactions=outcome.unmatched,
        unmatched_amount=float(outcome.unmatched_amount),
        total_actual=float(budget.monthly_actual_expenses),
        last_sync_date=budget.last_sync_date,
    )


async def sync_annual_budget(
    session: AsyncSession,
    budget: AnnualBudget,
    policy: Optional[MatchPolicy] = None,
    today: Optional[date] = None,
) -> SyncResult:
    """
    Recompute the annual actuals of a budget from the expenses of its year.

    Monthly actuals become the annual actual spread over the months elapsed;
    they stay zero for a year that has not started. The budget is not
    committed here.
    """
    policy = policy or annual_match_policy()
    start, end = year_bounds(budget.year)
    totals = await _category_totals(TransactionRepository(session), budget.user_id, start, end, policy)
    outcome = apply_category_totals(budget.items, totals, policy, "annual_actual")

    elapsed = budget.months_elapsed(today)
    for item in budget.items:
        item.monthly_actual = (
            quantize_money(to_decimal(item.annual_actual) / elapsed) if elapsed > 0 else Decimal(0)
        )

    budget.recalculate_totals()
    budget.last_sync_date = utcnow()
    logger.info(
        "Synced annual budget %s (%s): %d transactions matched, %d unmatched",
        budget.id, budget.year, outcome.matched, outcome.unmatched,
    )
    return SyncResult(
        matched_transactions=outcome.matched,
        unmatched_transactions=outcome.unmatched,
        unmatched_amount=float(outcome.unmatched_amount),
        total_actual=float(budget.total_actual_spending),
        last_sync_date=budget.last_sync_date,
    )
