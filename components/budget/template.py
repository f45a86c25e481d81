"""Default line items of a new annual budget."""

from typing import NamedTuple, Tuple


class TemplateLine(NamedTuple):
    category: str
    subcategory: str
    monthly_budget: int
    annual_budget: int


DEFAULT_BUDGET_TEMPLATE: Tuple[TemplateLine, ...] = (
    # Housing
    TemplateLine("Housing", "Rent", 38000, 456000),
    TemplateLine("Housing", "Phone", 2000, 24000),
    TemplateLine("Housing", "Second Phone", 2500, 30000),
    TemplateLine("Housing", "Electricity", 5000, 60000),
    TemplateLine("Housing", "Water and sewer", 4000, 48000),
    TemplateLine("Housing", "Internet", 4100, 49200),
    TemplateLine("Housing", "Supplies Shopping", 5000, 60000),
    TemplateLine("Housing", "Rental Management", 1000, 12000),
    # Transportation
    TemplateLine("Transportation", "Bus/taxi fare", 3000, 36000),
    TemplateLine("Transportation", "Insurance", 0, 10085),
    TemplateLine("Transportation", "Licensing", 0, 1300),
    TemplateLine("Transportation", "Fuel", 9000, 108000),
    # Loans
    TemplateLine("Loans", "Mortgage", 38473, 461676),
    # Insurance
    TemplateLine("Insurance", "Health", 0, 7500),
    TemplateLine("Insurance", "Second Health", 0, 7500),
    # Entertainment
    TemplateLine("Entertainment", "Spotify", 439, 5268),
    TemplateLine("Entertainment", "Netflix", 1100, 13200),
    TemplateLine("Entertainment", "Showmax", 650, 7800),
    TemplateLine("Entertainment", "Dates", 4000, 48000),
    TemplateLine("Entertainment", "Cinema", 2500, 30000),
    # Food
    TemplateLine("Food", "Groceries Shopping", 20000, 240000),
    TemplateLine("Food", "Dining out", 10000, 120000),
    TemplateLine("Food", "Office lunch", 10000, 120000),
    TemplateLine("Food", "Water", 1400, 16800),
    TemplateLine("Food", "Energy drinks", 3360, 40320),
    # Personal Care
    TemplateLine("Personal Care", "Medical", 7900, 94800),
    TemplateLine("Personal Care", "Second Medical", 7200, 86400),
    TemplateLine("Personal Care", "Hair/nails", 2000, 24000),
    TemplateLine("Personal Care", "Second Hair/nails", 4000, 48000),
    TemplateLine("Personal Care", "Grooming Shopping", 4000, 48000),
    TemplateLine("Personal Care", "Clothing", 8000, 96000),
    TemplateLine("Personal Care", "Haircare Products", 0, 14000),
    TemplateLine("Personal Care", "Skincare Products", 8000, 96000),
    # Pets
    TemplateLine("Pets", "Food", 3858, 46296),
    TemplateLine("Pets", "Medical", 0, 5000),
    TemplateLine("Pets", "Grooming", 4500, 54000),
    TemplateLine("Pets", "Toys", 500, 6000),
    # Savings/Investments
    TemplateLine("Savings/Investments", "Retirement account", 40000, 480000),
    TemplateLine("Savings/Investments", "Second Investment account", 5000, 60000),
    TemplateLine("Savings/Investments", "Rainy Day Fund", 5000, 60000),
    TemplateLine("Savings/Investments", "Annual Payments Fund", 3782, 45384),
)


def template_categories(template=DEFAULT_BUDGET_TEMPLATE):
    """Distinct category names in template order."""
    return list(dict.fromkeys(line.category for line in template))
