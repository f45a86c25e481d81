"""Static allocation tables used by the budget recommendation engine.

A rule tells the engine which income bucket feeds a category, how big a
share of that bucket the category gets, and how the category amount is
split between its subcategories.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from types import MappingProxyType
from typing import Mapping, NamedTuple, Optional, Tuple, Union


class Bucket(str, Enum):
    """Top-level spending purpose of a share of income."""
    ESSENTIAL = "essential"
    LIFESTYLE = "lifestyle"
    SAVINGS = "savings"
    MIXED = "mixed"


class Priority(str, Enum):
    LIVE_WITHIN_MEANS = "live-within-means"
    INCREASE_SAVINGS = "increase-savings"
    DETAILED_TRACKING = "detailed-tracking"
    HEALTHY_LIFESTYLE = "healthy-lifestyle"
    RESPONSIBLE_SPENDING = "responsible-spending"
    SPECIFIC_GOAL = "specific-goal"


class LifeStage(str, Enum):
    STUDENT = "student"
    EARLY_CAREER = "early-career"
    ESTABLISHED = "established"
    APPROACHING_RETIREMENT = "approaching-retirement"


class LivingSituation(str, Enum):
    WITH_PARENTS = "with-parents"
    RENTING_ALONE = "renting-alone"
    RENTING_SHARED = "renting-shared"
    HOMEOWNER = "homeowner"


class Split(NamedTuple):
    """Shares (or amounts) of income per bucket."""
    essential: Decimal
    lifestyle: Decimal
    savings: Decimal

    def total(self) -> Decimal:
        return self.essential + self.lifestyle + self.savings

    def for_bucket(self, bucket: Bucket) -> Decimal:
        return getattr(self, bucket.value)


def _split(essential: str, lifestyle: str, savings: str) -> Split:
    return Split(Decimal(essential), Decimal(lifestyle), Decimal(savings))


BASE_SPLIT = _split("0.50", "0.30", "0.20")

# Each override replaces the whole split. Applied in this order, so a later
# table wins: priority, then life stage, then living situation.
PRIORITY_SPLITS: Mapping[Priority, Split] = MappingProxyType({
    Priority.INCREASE_SAVINGS: _split("0.45", "0.25", "0.30"),
    Priority.LIVE_WITHIN_MEANS: _split("0.50", "0.35", "0.15"),
    Priority.HEALTHY_LIFESTYLE: _split("0.45", "0.35", "0.20"),
    Priority.RESPONSIBLE_SPENDING: _split("0.50", "0.25", "0.25"),
    Priority.DETAILED_TRACKING: BASE_SPLIT,
})

LIFE_STAGE_SPLITS: Mapping[LifeStage, Split] = MappingProxyType({
    LifeStage.STUDENT: _split("0.55", "0.35", "0.10"),
    LifeStage.APPROACHING_RETIREMENT: _split("0.40", "0.20", "0.40"),
})

LIVING_SITUATION_SPLITS: Mapping[LivingSituation, Split] = MappingProxyType({
    LivingSituation.WITH_PARENTS: _split("0.25", "0.35", "0.40"),
    LivingSituation.RENTING_SHARED: _split("0.40", "0.35", "0.25"),
})


@dataclass(frozen=True)
class PlainWeight:
    """Subcategory weight that inherits the category bucket."""
    weight: Decimal


@dataclass(frozen=True)
class TaggedWeight:
    """Subcategory weight that names its own bucket."""
    bucket: Bucket
    weight: Decimal


Weight = Union[PlainWeight, TaggedWeight]


@dataclass(frozen=True)
class CategoryAllocationRule:
    """How a category is funded from the income buckets."""
    bucket: Bucket
    percentage: Decimal = Decimal(0)
    essential_percentage: Decimal = Decimal(0)
    lifestyle_percentage: Decimal = Decimal(0)
    subcategory_weights: Mapping[str, Weight] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, "subcategory_weights", MappingProxyType(dict(self.subcategory_weights)))
        if self.bucket is Bucket.MIXED:
            for name, weight in self.subcategory_weights.items():
                if not isinstance(weight, TaggedWeight):
                    raise ValueError(f"Subcategory '{name}' of a mixed category needs an explicit bucket")
        for name, weight in self.subcategory_weights.items():
            if isinstance(weight, TaggedWeight) and weight.bucket is Bucket.MIXED:
                raise ValueError(f"Subcategory '{name}' cannot be tagged as mixed")

    def bucket_percentage(self, bucket: Bucket) -> Decimal:
        """Share of `bucket`'s amount assigned to this category."""
        if self.bucket is Bucket.MIXED:
            if bucket is Bucket.ESSENTIAL:
                return self.essential_percentage
            if bucket is Bucket.LIFESTYLE:
                return self.lifestyle_percentage
            return Decimal(0)
        return self.percentage if bucket is self.bucket else Decimal(0)

    def resolve(self, subcategory: str) -> Tuple[Bucket, Optional[Decimal]]:
        """Bucket and configured weight of a subcategory (None when unweighted)."""
        weight = self.subcategory_weights.get(subcategory)
        if isinstance(weight, TaggedWeight):
            return weight.bucket, weight.weight
        if isinstance(weight, PlainWeight):
            return self.bucket, weight.weight
        # Unknown subcategories of mixed categories count as discretionary
        if self.bucket is Bucket.MIXED:
            return Bucket.LIFESTYLE, None
        return self.bucket, None


def _plain(**weights: str) -> Mapping[str, Weight]:
    return {name: PlainWeight(Decimal(value)) for name, value in weights.items()}


def _tagged(*weights: Tuple[str, Bucket, str]) -> Mapping[str, Weight]:
    return {name: TaggedWeight(bucket, Decimal(value)) for name, bucket, value in weights}


CATEGORY_ALLOCATION_RULES: Mapping[str, CategoryAllocationRule] = MappingProxyType({
    "Housing": CategoryAllocationRule(
        bucket=Bucket.ESSENTIAL,
        percentage=Decimal("0.75"),
        subcategory_weights={
            "Rent/Mortgage": PlainWeight(Decimal("0.7")),
            "Utilities": PlainWeight(Decimal("0.15")),
            "Phone": PlainWeight(Decimal("0.05")),
            "Internet": PlainWeight(Decimal("0.05")),
            "Supplies Shopping": PlainWeight(Decimal("0.03")),
            "Rental Management": PlainWeight(Decimal("0.02")),
        },
    ),
    "Transportation": CategoryAllocationRule(
        bucket=Bucket.ESSENTIAL,
        percentage=Decimal("0.15"),
        subcategory_weights={
            "Fuel": PlainWeight(Decimal("0.5")),
            "Bus/taxi fare": PlainWeight(Decimal("0.3")),
            "Insurance": PlainWeight(Decimal("0.15")),
            "Licensing": PlainWeight(Decimal("0.05")),
        },
    ),
    "Food": CategoryAllocationRule(
        bucket=Bucket.MIXED,
        essential_percentage=Decimal("0.1"),
        lifestyle_percentage=Decimal("0.3"),
        subcategory_weights=_tagged(
            ("Groceries Shopping", Bucket.ESSENTIAL, "0.8"),
            ("Water", Bucket.ESSENTIAL, "0.2"),
            ("Dining out", Bucket.LIFESTYLE, "0.5"),
            ("Office lunch", Bucket.LIFESTYLE, "0.3"),
            ("Energy drinks", Bucket.LIFESTYLE, "0.2"),
        ),
    ),
    "Personal Care": CategoryAllocationRule(
        bucket=Bucket.MIXED,
        essential_percentage=Decimal("0.05"),
        lifestyle_percentage=Decimal("0.2"),
        subcategory_weights=_tagged(
            ("Medical", Bucket.ESSENTIAL, "0.6"),
            ("Grooming Shopping", Bucket.ESSENTIAL, "0.4"),
            ("Hair/nails", Bucket.LIFESTYLE, "0.3"),
            ("Clothing", Bucket.LIFESTYLE, "0.4"),
            ("Haircare Products", Bucket.LIFESTYLE, "0.15"),
            ("Skincare Products", Bucket.LIFESTYLE, "0.15"),
        ),
    ),
    "Insurance": CategoryAllocationRule(
        bucket=Bucket.ESSENTIAL,
        percentage=Decimal("0.05"),
        subcategory_weights=_plain(Health="1.0"),
    ),
    "Loans": CategoryAllocationRule(
        bucket=Bucket.ESSENTIAL,
        percentage=Decimal("0.0"),
        subcategory_weights={
            "Mortgage": PlainWeight(Decimal("0.7")),
            "Personal Loans": PlainWeight(Decimal("0.2")),
            "Student Loans": PlainWeight(Decimal("0.1")),
        },
    ),
    "Entertainment": CategoryAllocationRule(
        bucket=Bucket.LIFESTYLE,
        percentage=Decimal("0.4"),
        subcategory_weights={
            "Streaming Services": PlainWeight(Decimal("0.2")),
            "Dates": PlainWeight(Decimal("0.3")),
            "Cinema": PlainWeight(Decimal("0.2")),
            "Hobbies": PlainWeight(Decimal("0.2")),
            "Music Subscriptions": PlainWeight(Decimal("0.1")),
        },
    ),
    "Pets": CategoryAllocationRule(
        bucket=Bucket.LIFESTYLE,
        percentage=Decimal("0.1"),
        subcategory_weights=_plain(Food="0.5", Medical="0.3", Grooming="0.15", Toys="0.05"),
    ),
    "Savings/Investments": CategoryAllocationRule(
        bucket=Bucket.SAVINGS,
        percentage=Decimal("1.0"),
        subcategory_weights={
            "Emergency Fund": PlainWeight(Decimal("0.5")),
            "Retirement account": PlainWeight(Decimal("0.3")),
            "Investment account": PlainWeight(Decimal("0.15")),
            "Annual Payments Fund": PlainWeight(Decimal("0.05")),
        },
    ),
})
