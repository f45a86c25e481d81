"""Unit tests for the allocation engine."""

from decimal import Decimal

import pytest

from components.allocation import engine
from components.allocation.engine import AllocationPeriod, allocate, distribute, normalize_split, resolve_split
from components.allocation.rules import (
    BASE_SPLIT,
    Bucket,
    CategoryAllocationRule,
    PlainWeight,
    Priority,
    Split,
    TaggedWeight,
)
from components.allocation.schemas import RecommendationResponse


def _split(*values):
    return tuple(Decimal(value) for value in values)


class TestResolveSplit:
    """Income split overrides."""

    def test_base_split(self):
        assert tuple(resolve_split()) == _split("0.50", "0.30", "0.20")

    @pytest.mark.parametrize("priority, expected", [
        ("increase-savings", ("0.45", "0.25", "0.30")),
        ("live-within-means", ("0.50", "0.35", "0.15")),
        ("healthy-lifestyle", ("0.45", "0.35", "0.20")),
        ("responsible-spending", ("0.50", "0.25", "0.25")),
        ("detailed-tracking", ("0.50", "0.30", "0.20")),
        ("specific-goal", ("0.50", "0.30", "0.20")),
    ])
    def test_priority_overrides(self, priority, expected):
        assert tuple(resolve_split(priority)) == _split(*expected)

    def test_life_stage_wins_over_priority(self):
        assert tuple(resolve_split("increase-savings", "student")) == _split("0.55", "0.35", "0.10")
        assert tuple(resolve_split("live-within-means", "approaching-retirement")) == _split("0.40", "0.20", "0.40")

    def test_living_situation_wins_over_everything(self):
        assert tuple(resolve_split("increase-savings", "student", "with-parents")) == _split("0.25", "0.35", "0.40")
        assert tuple(resolve_split(None, "approaching-retirement", "renting-shared")) == _split("0.40", "0.35", "0.25")

    def test_unknown_values_are_ignored(self):
        assert resolve_split("get-rich-quick", "retired", "castle") == BASE_SPLIT


class TestNormalizeSplit:
    def test_split_within_tolerance_is_kept(self):
        split = Split(Decimal("0.5"), Decimal("0.3"), Decimal("0.205"))
        assert normalize_split(split) == split

    def test_split_is_rescaled_to_one(self):
        split = normalize_split(Split(Decimal("0.5"), Decimal("0.5"), Decimal("0.5")))
        assert abs(split.total() - 1) < Decimal("1e-6")
        assert split.essential == split.lifestyle == split.savings


class TestDistribute:
    def test_unweighted_subcategories_share_equally(self):
        result = distribute(Decimal(90), {"a": None, "b": None, "c": None})
        assert set(result) == {"a", "b", "c"}
        assert all(abs(amount - 30) < Decimal("1e-20") for amount in result.values())

    def test_weights_are_renormalized_over_selection(self):
        result = distribute(Decimal(100), {"a": Decimal("0.3"), "b": Decimal("0.1")})
        assert result["a"] == Decimal(75)
        assert result["b"] == Decimal(25)


class TestRules:
    def test_mixed_category_requires_tagged_weights(self):
        with pytest.raises(ValueError):
            CategoryAllocationRule(
                bucket=Bucket.MIXED,
                essential_percentage=Decimal("0.1"),
                lifestyle_percentage=Decimal("0.1"),
                subcategory_weights={"Plain": PlainWeight(Decimal(1))},
            )

    def test_subcategory_cannot_be_tagged_mixed(self):
        with pytest.raises(ValueError):
            CategoryAllocationRule(
                bucket=Bucket.ESSENTIAL,
                percentage=Decimal("0.1"),
                subcategory_weights={"Odd": TaggedWeight(Bucket.MIXED, Decimal(1))},
            )


class TestAllocateMonthly:
    """Monthly allocations always add up to the income."""

    def test_single_category_takes_whole_income(self):
        result = allocate(
            100000,
            priority="increase-savings",
            profile={},
            selected_categories={"Housing": {"selected": True, "subcategories": {"Rent/Mortgage": True}}},
        )

        assert len(result.line_items) == 1
        item = result.line_items[0]
        assert (item.category, item.subcategory) == ("Housing", "Rent/Mortgage")
        assert item.monthly_budget == Decimal(100000)
        assert item.annual_budget == Decimal(1200000)
        assert item.is_essential
        assert [c.reason for c in result.corrections] == ["monthly_exact_fit"]

    def test_sum_equals_income_for_many_categories(self):
        selected = {
            "Housing": {"selected": True, "subcategories": {"Rent/Mortgage": True, "Utilities": True, "Phone": True}},
            "Food": {"selected": True, "subcategories": {"Groceries Shopping": True, "Dining out": True}},
            "Entertainment": {"selected": True, "subcategories": {"Cinema": True, "Hobbies": True}},
            "Savings/Investments": {"selected": True, "subcategories": {"Emergency Fund": True}},
        }

        result = allocate(Decimal("87345"), priority="healthy-lifestyle", selected_categories=selected)

        assert result.total_monthly == Decimal("87345")
        assert all(item.monthly_budget == item.monthly_budget.to_integral_value() for item in result.line_items)
        assert abs(result.percentages.total() - 1) < Decimal("1e-6")

    def test_mixed_category_splits_between_buckets(self):
        selected = {"Food": {"selected": True, "subcategories": {"Groceries Shopping": True, "Dining out": True}}}

        result = allocate(10000, selected_categories=selected)

        items = {item.subcategory: item for item in result.line_items}
        assert items["Groceries Shopping"].bucket is Bucket.ESSENTIAL
        assert items["Groceries Shopping"].is_essential
        assert items["Dining out"].bucket is Bucket.LIFESTYLE
        assert not items["Dining out"].is_essential
        # 500 essential vs 900 lifestyle before fitting to the income
        assert items["Groceries Shopping"].monthly_budget == Decimal(3571)
        assert items["Dining out"].monthly_budget == Decimal(6429)

    @pytest.mark.parametrize("selected", [
        {},
        {"Housing": {"selected": False, "subcategories": {"Rent/Mortgage": True}}},
        {"Housing": {"selected": True, "subcategories": {"Rent/Mortgage": False}}},
        {"Unknown": {"selected": True, "subcategories": {"Anything": True}}},
    ])
    def test_nothing_selected_gives_no_items(self, selected):
        result = allocate(50000, selected_categories=selected)

        assert result.line_items == []
        assert result.total_monthly == 0
        assert result.corrections == []

    @pytest.mark.parametrize("income", [0, -100, Decimal("-0.01")])
    def test_non_positive_income_is_rejected(self, income):
        with pytest.raises(ValueError):
            allocate(income)


class TestAllocateAnnual:
    def test_subcategory_weights_renormalized(self):
        selected = {"Housing": {"selected": True, "subcategories": {"Rent/Mortgage": True, "Utilities": True}}}

        result = allocate(120000, selected_categories=selected, period=AllocationPeriod.ANNUAL)

        items = {item.subcategory: item for item in result.line_items}
        # 60000 essential * 0.75 Housing, split 0.7 : 0.15
        assert items["Rent/Mortgage"].annual_budget == Decimal(37059)
        assert items["Utilities"].annual_budget == Decimal(7941)
        assert result.total_annual == Decimal(45000)
        assert result.corrections == []

    def test_over_allocated_bucket_is_scaled(self, caplog):
        selected = {
            "Housing": {"selected": True, "subcategories": {"Rent/Mortgage": True}},
            "Transportation": {"selected": True, "subcategories": {"Fuel": True}},
            "Insurance": {"selected": True, "subcategories": {"Health": True}},
            "Food": {"selected": True, "subcategories": {"Groceries Shopping": True}},
            "Personal Care": {"selected": True, "subcategories": {"Medical": True}},
        }

        with caplog.at_level("WARNING"):
            result = allocate(1200000, selected_categories=selected, period=AllocationPeriod.ANNUAL)

        # Essential categories use 110% of the bucket
        correction = result.corrections[0]
        assert correction.reason == "bucket_over_allocated"
        assert correction.bucket is Bucket.ESSENTIAL
        assert result.bucket_total(Bucket.ESSENTIAL) <= Decimal(600000) + len(result.line_items)
        assert "over-allocated" in caplog.text

    def test_income_cap(self):
        corrections = []
        items = [
            engine.DraftItem("Housing", "Rent", Bucket.ESSENTIAL, Decimal(800)),
            engine.DraftItem("Food", "Dining out", Bucket.LIFESTYLE, Decimal(400)),
        ]

        result = engine._fit_annual(items, Decimal(1000), corrections)

        assert sum(item.annual_budget for item in result) <= Decimal(1020)
        assert [item.annual_budget for item in result] == [Decimal(653), Decimal(327)]
        assert corrections[0].reason == "annual_income_cap"

    def test_monthly_budget_is_a_twelfth(self):
        selected = {"Savings/Investments": {"selected": True, "subcategories": {"Emergency Fund": True}}}

        result = allocate(240000, selected_categories=selected, period=AllocationPeriod.ANNUAL)

        item = result.line_items[0]
        assert item.annual_budget == Decimal(48000)
        assert item.monthly_budget == Decimal(4000)


class TestRecommendationResponse:
    def test_method_label_and_totals(self):
        selected = {
            "Housing": {"selected": True, "subcategories": {"Rent/Mortgage": True}},
            "Savings/Investments": {"selected": True, "subcategories": {"Emergency Fund": True}},
        }
        result = allocate(100000, priority="increase-savings", selected_categories=selected)

        response = RecommendationResponse.from_result(result)

        assert response.recommendations.budgeting_method == "45/25/30"
        assert response.totals.monthly_allocated == 100000
        assert response.totals.monthly_remaining == 0
        assert response.annual_income == 1200000

    def test_high_savings_label(self):
        selected = {"Savings/Investments": {"selected": True, "subcategories": {"Emergency Fund": True}}}
        result = allocate(100000, priority="increase-savings", selected_categories=selected)

        response = RecommendationResponse.from_result(result, Priority.INCREASE_SAVINGS)

        assert response.recommendations.budgeting_method == "45/25/30 (High Savings)"
        assert response.recommendations.savings_rate == 100
