"""Budget recommendation engine.

Turns an income figure, a budgeting priority, a personal profile and the
categories a user picked into budget line items. The computation is pure:
the same inputs always give the same line items.

Steps:
1. Pick the income split (base 50/30/20, replaced by the priority, then the
   life stage, then the living situation) and normalize it to 100%.
2. Fund every selected category from its bucket(s) and split the category
   amount between the selected subcategories by weight.
3. Scale a bucket down when the selected categories use more than 100% of it.
4. Fit the result to the income: the monthly plan always sums exactly to the
   income, the annual plan is capped at 102% of it.
"""

import logging
from dataclasses import dataclass, field, replace
from decimal import Decimal, ROUND_FLOOR, ROUND_HALF_UP
from enum import Enum
from functools import reduce
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from components.allocation.rules import (
    BASE_SPLIT,
    CATEGORY_ALLOCATION_RULES,
    LIFE_STAGE_SPLITS,
    LIVING_SITUATION_SPLITS,
    PRIORITY_SPLITS,
    Bucket,
    CategoryAllocationRule,
    LifeStage,
    LivingSituation,
    Priority,
    Split,
)

logger = logging.getLogger(__name__)

NORMALIZATION_TOLERANCE = Decimal("0.01")
ANNUAL_CAP = Decimal("1.02")
ANNUAL_TARGET = Decimal("0.98")
UNIT = Decimal("1")
MONTHS_IN_YEAR = 12


class AllocationPeriod(str, Enum):
    """Which income figure the engine is fed with."""
    MONTHLY = "monthly"
    ANNUAL = "annual"


@dataclass(frozen=True)
class BucketUsage:
    """Sum of category percentages applied per bucket so far."""
    essential: Decimal = Decimal(0)
    lifestyle: Decimal = Decimal(0)
    savings: Decimal = Decimal(0)

    def add(self, bucket: Bucket, share: Decimal) -> "BucketUsage":
        return replace(self, **{bucket.value: getattr(self, bucket.value) + share})

    def for_bucket(self, bucket: Bucket) -> Decimal:
        return getattr(self, bucket.value)


@dataclass(frozen=True)
class DraftItem:
    """Unrounded allocation of a single subcategory."""
    category: str
    subcategory: str
    bucket: Bucket
    amount: Decimal


@dataclass(frozen=True)
class AllocationState:
    """Accumulator threaded through the category fold."""
    items: Tuple[DraftItem, ...] = ()
    usage: BucketUsage = BucketUsage()


@dataclass(frozen=True)
class Correction:
    """Scaling applied to keep the plan inside the income."""
    reason: str
    factor: Decimal
    bucket: Optional[Bucket] = None


@dataclass
class AllocatedLineItem:
    category: str
    subcategory: str
    monthly_budget: Decimal
    annual_budget: Decimal
    is_essential: bool
    bucket: Bucket
    frequency: str = "monthly"

    def as_dict(self) -> Dict[str, Any]:
        return {
            "category": self.category,
            "subcategory": self.subcategory,
            "monthly_budget": self.monthly_budget,
            "annual_budget": self.annual_budget,
            "is_essential": self.is_essential,
        }


@dataclass
class AllocationResult:
    period: AllocationPeriod
    income: Decimal
    line_items: List[AllocatedLineItem]
    breakdown: Split
    percentages: Split
    corrections: List[Correction] = field(default_factory=list)

    @property
    def total_monthly(self) -> Decimal:
        return sum((item.monthly_budget for item in self.line_items), Decimal(0))

    @property
    def total_annual(self) -> Decimal:
        return sum((item.annual_budget for item in self.line_items), Decimal(0))

    def bucket_total(self, bucket: Bucket) -> Decimal:
        """Allocated amount of one bucket, in the period's own units."""
        attr = "monthly_budget" if self.period is AllocationPeriod.MONTHLY else "annual_budget"
        return sum((getattr(item, attr) for item in self.line_items if item.bucket is bucket), Decimal(0))


def _enum_or_none(enum_cls, value):
    if value is None or isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        logger.debug("Ignoring unknown %s value %r", enum_cls.__name__, value)
        return None


def _read(source: Any, *names: str, default: Any = None) -> Any:
    """Read an attribute of a pydantic model, dataclass or a plain mapping."""
    if source is None:
        return default
    for name in names:
        if isinstance(source, Mapping):
            if name in source:
                return source[name]
        elif hasattr(source, name):
            return getattr(source, name)
    return default


def resolve_split(
    priority: Optional[Any] = None,
    life_stage: Optional[Any] = None,
    living_situation: Optional[Any] = None,
) -> Split:
    """Income split after applying the overrides in order of precedence."""
    split = BASE_SPLIT
    priority = _enum_or_none(Priority, priority)
    life_stage = _enum_or_none(LifeStage, life_stage)
    living_situation = _enum_or_none(LivingSituation, living_situation)

    if priority in PRIORITY_SPLITS:
        split = PRIORITY_SPLITS[priority]
    if life_stage in LIFE_STAGE_SPLITS:
        split = LIFE_STAGE_SPLITS[life_stage]
    if living_situation in LIVING_SITUATION_SPLITS:
        split = LIVING_SITUATION_SPLITS[living_situation]
    return split


def normalize_split(split: Split) -> Split:
    """Rescale the split proportionally when it is more than 1% off 100%."""
    total = split.total()
    if total <= 0 or abs(total - 1) <= NORMALIZATION_TOLERANCE:
        return split
    logger.info("Normalizing income split %s (sum %s)", tuple(split), total)
    return Split(*(share / total for share in split))


def distribute(amount: Decimal, weights: Mapping[str, Optional[Decimal]]) -> Dict[str, Decimal]:
    """
    Split `amount` between subcategories proportionally to their weights.

    Subcategories without a configured weight share 1/N each, N being the
    number of unweighted subcategories. Weights are renormalized over the
    given subcategories only.
    """
    unweighted = [name for name, weight in weights.items() if weight is None]
    resolved = {
        name: (Decimal(1) / len(unweighted) if weight is None else weight)
        for name, weight in weights.items()
    }
    total_weight = sum(resolved.values(), Decimal(0))
    if total_weight <= 0:
        return {name: Decimal(0) for name in resolved}
    return {name: amount * weight / total_weight for name, weight in resolved.items()}


def _selected_subcategories(selection: Any) -> List[str]:
    subcategories = _read(selection, "subcategories", default={}) or {}
    return [name for name, is_selected in subcategories.items() if is_selected]


def _allocate_category(
    state: AllocationState,
    category: str,
    subcategories: Iterable[str],
    rule: CategoryAllocationRule,
    amounts: Split,
) -> AllocationState:
    # Group the selected subcategories by the bucket that funds them
    pools: Dict[Bucket, Dict[str, Optional[Decimal]]] = {}
    for subcategory in subcategories:
        bucket, weight = rule.resolve(subcategory)
        pools.setdefault(bucket, {})[subcategory] = weight

    items = list(state.items)
    usage = state.usage
    for bucket, weights in pools.items():
        share = rule.bucket_percentage(bucket)
        if share <= 0:
            continue
        usage = usage.add(bucket, share)
        pool_amount = amounts.for_bucket(bucket) * share
        for subcategory, amount in distribute(pool_amount, weights).items():
            if amount > 0:
                items.append(DraftItem(category, subcategory, bucket, amount))
    return AllocationState(items=tuple(items), usage=usage)


def _scale_over_allocated(state: AllocationState) -> Tuple[List[DraftItem], List[Correction]]:
    """Scale every bucket whose categories use more than 100% of it."""
    factors: Dict[Bucket, Decimal] = {}
    corrections = []
    for bucket in (Bucket.ESSENTIAL, Bucket.LIFESTYLE, Bucket.SAVINGS):
        used = state.usage.for_bucket(bucket)
        if used > 1:
            factors[bucket] = Decimal(1) / used
            corrections.append(Correction("bucket_over_allocated", factors[bucket], bucket))
            logger.warning(
                "%s bucket over-allocated at %.1f%%, scaling its items by %.4f",
                bucket.value, used * 100, factors[bucket],
            )
    items = [
        replace(item, amount=item.amount * factors[item.bucket]) if item.bucket in factors else item
        for item in state.items
    ]
    return items, corrections


def _round_to_total(amounts: List[Decimal], target: Decimal) -> List[Decimal]:
    """Round to whole units so that the rounded values sum exactly to `target`."""
    if not amounts:
        return []
    rounded = [amount.quantize(UNIT, rounding=ROUND_FLOOR) for amount in amounts]
    units = int((target - sum(rounded)) // UNIT)
    # Largest remainders get the spare units first
    order = sorted(range(len(amounts)), key=lambda i: (amounts[i] - rounded[i], amounts[i]), reverse=True)
    for index in order[:max(units, 0)]:
        rounded[index] += UNIT
    leftover = target - sum(rounded)
    if leftover:
        largest = max(range(len(amounts)), key=lambda i: amounts[i])
        rounded[largest] += leftover
    return rounded


def _fit_monthly(items: List[DraftItem], income: Decimal, corrections: List[Correction]) -> List[AllocatedLineItem]:
    total = sum((item.amount for item in items), Decimal(0))
    if total > 0 and total != income:
        factor = income / total
        corrections.append(Correction("monthly_exact_fit", factor))
        logger.info("Scaling monthly allocation of %.2f to income %.2f", total, income)
        items = [replace(item, amount=item.amount * factor) for item in items]
        total = income
    monthly = _round_to_total([item.amount for item in items], total)
    return [
        AllocatedLineItem(
            category=item.category,
            subcategory=item.subcategory,
            monthly_budget=amount,
            annual_budget=amount * MONTHS_IN_YEAR,
            is_essential=item.bucket is Bucket.ESSENTIAL,
            bucket=item.bucket,
        )
        for item, amount in zip(items, monthly)
    ]


def _fit_annual(items: List[DraftItem], income: Decimal, corrections: List[Correction]) -> List[AllocatedLineItem]:
    total = sum((item.amount for item in items), Decimal(0))
    if total > income * ANNUAL_CAP:
        factor = income * ANNUAL_TARGET / total
        corrections.append(Correction("annual_income_cap", factor))
        logger.info("Annual allocation of %.2f exceeds income %.2f, scaling by %.4f", total, income, factor)
        items = [replace(item, amount=item.amount * factor) for item in items]
    rounding = ROUND_HALF_UP
    if sum((item.amount.quantize(UNIT, rounding=rounding) for item in items), Decimal(0)) > income * ANNUAL_CAP:
        rounding = ROUND_FLOOR
    result = []
    for item in items:
        result.append(AllocatedLineItem(
            category=item.category,
            subcategory=item.subcategory,
            monthly_budget=(item.amount / MONTHS_IN_YEAR).quantize(UNIT, rounding=rounding),
            annual_budget=item.amount.quantize(UNIT, rounding=rounding),
            is_essential=item.bucket is Bucket.ESSENTIAL,
            bucket=item.bucket,
        ))
    return result


def allocate(
    income: Any,
    priority: Optional[Any] = None,
    profile: Optional[Any] = None,
    selected_categories: Optional[Mapping[str, Any]] = None,
    period: AllocationPeriod = AllocationPeriod.MONTHLY,
    rules: Mapping[str, CategoryAllocationRule] = CATEGORY_ALLOCATION_RULES,
) -> AllocationResult:
    """
    Recommend budget line items for the selected categories.

    Args:
        income: Monthly income for the monthly period, annual income otherwise
        priority: Budgeting priority (see rules.Priority)
        profile: Object or mapping with optional life_stage / living_situation
        selected_categories: Category name -> {selected, subcategories: {name: bool}}
        period: Whether income and the final fitting step are monthly or annual
        rules: Category allocation rules

    Returns:
        AllocationResult with rounded line items, bucket amounts and percentages
    """
    income = Decimal(str(income)) if not isinstance(income, Decimal) else income
    if income <= 0:
        raise ValueError("Income must be greater than zero")
    period = AllocationPeriod(period)

    percentages = normalize_split(resolve_split(
        priority,
        _read(profile, "life_stage", "lifeStage"),
        _read(profile, "living_situation", "livingSituation"),
    ))
    breakdown = Split(*(income * share for share in percentages))

    selections = []
    for category, selection in (selected_categories or {}).items():
        if not _read(selection, "selected", default=False):
            continue
        rule = rules.get(category)
        subcategories = _selected_subcategories(selection)
        if rule is None or not subcategories:
            continue
        selections.append((category, subcategories, rule))

    state = reduce(
        lambda acc, entry: _allocate_category(acc, entry[0], entry[1], entry[2], breakdown),
        selections,
        AllocationState(),
    )
    items, corrections = _scale_over_allocated(state)

    if period is AllocationPeriod.MONTHLY:
        line_items = _fit_monthly(items, income, corrections)
    else:
        line_items = _fit_annual(items, income, corrections)

    return AllocationResult(
        period=period,
        income=income,
        line_items=line_items,
        breakdown=breakdown,
        percentages=percentages,
        corrections=corrections,
    )
