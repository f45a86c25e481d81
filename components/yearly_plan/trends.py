"""Category trend detection across the monthly budgets of a year."""

from collections import OrderedDict
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Sequence

from components.core.utils import quantize_money, to_decimal

MIN_TREND_POINTS = 3
VOLATILITY_RATIO = Decimal("0.2")
INCREASE_RATIO = Decimal("1.1")
DECREASE_RATIO = Decimal("0.9")


def classify_trend(amounts: Sequence[Any]) -> str:
    """
    Classify a month-ordered series of budgeted amounts.

    Returns one of "stable", "volatile", "increasing", "decreasing".
    Series shorter than three points are "stable". The first and last
    halves are compared by their means; the middle point of an odd series
    belongs to neither half.
    """
    values = [to_decimal(amount) for amount in amounts]
    if len(values) < MIN_TREND_POINTS:
        return "stable"

    half = len(values) // 2
    first_avg = sum(values[:half], Decimal(0)) / half
    last_avg = sum(values[-half:], Decimal(0)) / half

    mean = sum(values, Decimal(0)) / len(values)
    variance = sum(((value - mean) ** 2 for value in values), Decimal(0)) / len(values)

    if variance > first_avg * VOLATILITY_RATIO:
        return "volatile"
    if last_avg > first_avg * INCREASE_RATIO:
        return "increasing"
    if last_avg < first_avg * DECREASE_RATIO:
        return "decreasing"
    return "stable"


def build_category_trends(monthly_budgets: Iterable) -> List[Dict[str, Any]]:
    """
    Group the line items of month-ordered monthly budgets by category.

    Subcategories of a category are summed, giving one data point per month.
    """
    grouped: "OrderedDict[str, OrderedDict[int, Dict[str, Decimal]]]" = OrderedDict()
    for budget in sorted(monthly_budgets, key=lambda b: b.month):
        for item in budget.items:
            months = grouped.setdefault(item.category, OrderedDict())
            point = months.setdefault(budget.month, {"budgeted": Decimal(0), "actual": Decimal(0)})
            point["budgeted"] += to_decimal(item.monthly_budget)
            point["actual"] += to_decimal(item.monthly_actual)

    trends = []
    for category, months in grouped.items():
        budgeted_series = [point["budgeted"] for point in months.values()]
        trends.append({
            "category": category,
            "monthly_data": [
                {
                    "month": month,
                    "budgeted": float(quantize_money(point["budgeted"])),
                    "actual": float(quantize_money(point["actual"])),
                }
                for month, point in months.items()
            ],
            "yearly_budgeted": quantize_money(sum(budgeted_series, Decimal(0))),
            "yearly_actual": quantize_money(sum((point["actual"] for point in months.values()), Decimal(0))),
            "trend": classify_trend(budgeted_series),
        })
    return trends
