"""Tests for budget totals and performance figures."""

from datetime import date
from decimal import Decimal

import pytest

from components.budget.models import (
    AnnualBudget,
    AnnualBudgetItem,
    MonthlyBudget,
    MonthlyBudgetItem,
    months_elapsed,
)
from components.budget.schemas import LineItemIn, MonthlyBudgetIn


def _monthly_item(category, subcategory, budget, actual=0, frequency="monthly", annual=None):
    return MonthlyBudgetItem(
        category=category,
        subcategory=subcategory,
        monthly_budget=Decimal(budget),
        annual_budget=Decimal(annual if annual is not None else budget * 12),
        monthly_actual=Decimal(actual),
        annual_actual=Decimal(0),
        frequency=frequency,
    )


@pytest.fixture
def monthly_budget():
    return MonthlyBudget(
        year=2025,
        month=3,
        income_monthly=Decimal(100000),
        income_annual=Decimal(1200000),
        items=[
            _monthly_item("Housing", "Rent/Mortgage", 40000, actual=40000),
            _monthly_item("Food", "Groceries Shopping", 10000, actual=12500),
            _monthly_item("Entertainment", "Cinema", 2000, actual=500),
        ],
    )


class TestMonthlyBudgetTotals:
    def test_recalculate_totals(self, monthly_budget):
        monthly_budget.recalculate_totals()

        assert monthly_budget.monthly_budgeted_expenses == Decimal("52000.00")
        assert monthly_budget.monthly_actual_expenses == Decimal("53000.00")
        assert monthly_budget.monthly_difference == Decimal("48000.00")
        assert monthly_budget.annual_budgeted_expenses == Decimal("624000.00")
        assert monthly_budget.annual_difference == Decimal("576000.00")

    def test_recalculate_totals_is_idempotent(self, monthly_budget):
        monthly_budget.recalculate_totals()
        first = (
            monthly_budget.monthly_budgeted_expenses,
            monthly_budget.monthly_actual_expenses,
            monthly_budget.annual_budgeted_expenses,
        )
        monthly_budget.recalculate_totals()

        assert (
            monthly_budget.monthly_budgeted_expenses,
            monthly_budget.monthly_actual_expenses,
            monthly_budget.annual_budgeted_expenses,
        ) == first

    def test_annual_items_are_spread_over_twelve_months(self, monthly_budget):
        monthly_budget.items.append(
            _monthly_item("Insurance", "Health", 0, frequency="annual", annual=24000)
        )

        monthly_budget.recalculate_totals()

        assert monthly_budget.monthly_budgeted_expenses == Decimal("54000.00")
        assert monthly_budget.annual_budgeted_expenses == Decimal("648000.00")
        assert monthly_budget.annual_projection == Decimal(648000)

    def test_annual_item_spending_counts_in_actual_totals(self, monthly_budget):
        monthly_budget.items.append(
            _monthly_item("Insurance", "Health", 0, actual=6000, frequency="annual", annual=12000)
        )

        monthly_budget.recalculate_totals()

        assert monthly_budget.monthly_budgeted_expenses == Decimal("53000.00")
        assert monthly_budget.monthly_actual_expenses == Decimal("59000.00")
        assert monthly_budget.annual_actual_expenses == Decimal("708000.00")

    def test_overspent_budget_has_negative_difference(self):
        budget = MonthlyBudget(
            year=2025,
            month=1,
            income_monthly=Decimal(1000),
            income_annual=Decimal(12000),
            items=[_monthly_item("Housing", "Rent/Mortgage", 1500)],
        )

        budget.recalculate_totals()

        assert budget.monthly_difference == Decimal("-500.00")

    def test_period(self, monthly_budget):
        assert monthly_budget.period == "March 2025"


class TestMonthlyPerformance:
    def test_line_items_and_overall(self, monthly_budget):
        monthly_budget.recalculate_totals()

        performance = monthly_budget.get_performance_data()

        assert performance.period == "March 2025"
        groceries = performance.categories[1]
        assert groceries.subcategory == "Groceries Shopping"
        assert groceries.variance == 2500
        assert groceries.percentage_used == 125
        assert groceries.is_over_budget
        assert groceries.remaining == 0

        cinema = performance.categories[2]
        assert cinema.variance == -1500
        assert cinema.remaining == 1500
        assert not cinema.is_over_budget

        assert performance.overall.total_budgeted == 52000
        assert performance.overall.total_actual == 53000
        assert performance.overall.variance == 1000
        assert performance.overall.unallocated == 48000

    def test_zero_budget_has_zero_percentage(self):
        budget = MonthlyBudget(
            year=2025,
            month=1,
            income_monthly=Decimal(0),
            income_annual=Decimal(0),
            items=[_monthly_item("Pets", "Toys", 0, actual=300)],
        )
        budget.recalculate_totals()

        performance = budget.get_performance_data()

        assert performance.categories[0].percentage_used == 0
        assert performance.categories[0].is_over_budget
        assert performance.overall.percentage_used == 0


class TestSetLineItems:
    def test_kept_items_keep_their_actuals(self, monthly_budget):
        rent = monthly_budget.items[0]

        monthly_budget.set_line_items([
            LineItemIn(category="Housing", subcategory="Rent/Mortgage", monthly_budget=Decimal(45000)),
            LineItemIn(category="Pets", subcategory="Food", monthly_budget=Decimal(3000)),
        ])

        assert [item.subcategory for item in monthly_budget.items] == ["Rent/Mortgage", "Food"]
        assert monthly_budget.items[0] is rent
        assert rent.monthly_budget == Decimal(45000)
        assert rent.annual_budget == Decimal(540000)
        assert rent.monthly_actual == Decimal(40000)
        assert monthly_budget.items[1].monthly_actual == 0
        assert [item.position for item in monthly_budget.items] == [0, 1]

    def test_explicit_annual_budget_is_kept(self, monthly_budget):
        monthly_budget.set_line_items([
            LineItemIn(
                category="Insurance",
                subcategory="Health",
                annual_budget=Decimal(24000),
                frequency="annual",
            ),
        ])

        item = monthly_budget.find_line_item("Insurance", "Health")
        assert item.annual_budget == Decimal(24000)
        assert item.frequency == "annual"
        assert monthly_budget.find_line_item("Housing", "Rent/Mortgage") is None

    def test_duplicate_line_items_are_rejected(self):
        with pytest.raises(ValueError):
            MonthlyBudgetIn(
                income={"monthly": 1000},
                categories=[
                    {"category": "Food", "subcategory": "Water", "monthly_budget": 10},
                    {"category": "Food", "subcategory": "Water", "monthly_budget": 20},
                ],
            )


class TestAnnualBudget:
    @pytest.fixture
    def annual_budget(self):
        return AnnualBudget(
            year=2025,
            title="Annual Budget 2025",
            items=[
                AnnualBudgetItem(
                    category="Housing", subcategory="Rent",
                    monthly_budget=Decimal(1000), annual_budget=Decimal(12000),
                    monthly_actual=Decimal(1000), annual_actual=Decimal(6000),
                ),
                AnnualBudgetItem(
                    category="Food", subcategory="Dining out",
                    monthly_budget=Decimal(500), annual_budget=Decimal(6000),
                    monthly_actual=Decimal(1200), annual_actual=Decimal(7200),
                ),
            ],
        )

    def test_totals_and_progress(self, annual_budget):
        annual_budget.recalculate_totals()

        assert annual_budget.total_monthly_budget == Decimal("1500.00")
        assert annual_budget.total_annual_budget == Decimal("18000.00")
        assert annual_budget.total_actual_spending == Decimal("13200.00")
        assert annual_budget.progress == 73
        assert annual_budget.remaining_budget == Decimal("4800.00")
        assert annual_budget.variance == Decimal("-4800.00")

    def test_category_performance(self, annual_budget):
        performance = annual_budget.get_category_performance()

        dining = performance[1]
        assert dining.is_over_budget
        assert dining.annual_variance == 1200
        assert dining.remaining_budget == 0
        assert dining.annual_progress == 120
        assert performance[0].annual_progress == 50


@pytest.mark.parametrize("year, today, expected", [
    (2025, date(2025, 3, 15), 3),
    (2025, date(2025, 1, 1), 1),
    (2024, date(2025, 3, 15), 12),
    (2026, date(2025, 3, 15), 0),
])
def test_months_elapsed(year, today, expected):
    assert months_elapsed(year, today) == expected
