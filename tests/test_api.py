"""API tests going through the FastAPI app with an in-memory database."""

import pytest
from sqlalchemy import func, select

from components.budget.models import MonthlyBudget, MonthlyBudgetItem
from components.category.repository import CategoryRepository
from components.yearly_plan.models import YearlyPlan

HOUSING_AND_SAVINGS = {
    "Housing": {"selected": True, "subcategories": {"Rent/Mortgage": True, "Utilities": True}},
    "Savings/Investments": {"selected": True, "subcategories": {"Emergency Fund": True}},
}

MONTHLY_BUDGET = {
    "income": {"monthly": 100000, "sources": [{"source": "Salary", "amount": 100000}]},
    "categories": [
        {"category": "Housing", "subcategory": "Rent/Mortgage", "monthly_budget": 40000, "is_essential": True},
        {"category": "Food", "subcategory": "Groceries Shopping", "monthly_budget": 10000, "is_essential": True},
    ],
}


async def test_health_check(client):
    response = await client.get("/health_check/")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


class TestAuth:
    async def test_register_and_login(self, client):
        response = await client.post("/auth/register", json={"login": "bob", "password": "secret123"})
        assert response.status_code == 200

        response = await client.post("/auth/register", json={"login": "bob", "password": "other123"})
        assert response.status_code == 400

        response = await client.post("/auth/login", data={"username": "bob", "password": "secret123"})
        assert response.status_code == 200
        token = response.json()["access_token"]

        response = await client.get("/users/me", headers={"Authorization": f"Bearer {token}"})
        assert response.json()["login"] == "bob"

    async def test_wrong_password(self, client):
        await client.post("/auth/register", json={"login": "bob", "password": "secret123"})

        response = await client.post("/auth/login", data={"username": "bob", "password": "wrong-one"})

        assert response.status_code == 401

    async def test_update_and_delete_profile(self, client, auth_headers, db_session):
        await client.post("/auth/register", json={"login": "taken", "password": "secret123"})

        response = await client.put("/users/me", headers=auth_headers, json={"login": "taken"})
        assert response.status_code == 400

        response = await client.put("/users/me", headers=auth_headers, json={
            "login": "apiuser", "full_name": "Api User", "currency": "USD",
        })
        assert response.status_code == 200
        assert response.json()["currency"] == "USD"
        user_id = response.json()["id"]
        await client.put("/monthly-budgets/2025/3", headers=auth_headers, json=MONTHLY_BUDGET)

        response = await client.delete("/users/me", headers=auth_headers)
        assert response.status_code == 200
        assert (await client.get("/users/me", headers=auth_headers)).status_code == 401

        budgets = await db_session.scalar(
            select(func.count()).select_from(MonthlyBudget).where(MonthlyBudget.user_id == user_id)
        )
        items = await db_session.scalar(select(func.count()).select_from(MonthlyBudgetItem))
        plans = await db_session.scalar(
            select(func.count()).select_from(YearlyPlan).where(YearlyPlan.user_id == user_id)
        )
        assert (budgets, items, plans) == (0, 0, 0)

    async def test_budgets_need_a_token(self, client):
        response = await client.get("/monthly-budgets/2025/3")

        assert response.status_code == 401


class TestRecommendations:
    async def test_monthly_recommendation(self, client, auth_headers):
        response = await client.post("/monthly-budgets/recommendations", headers=auth_headers, json={
            "income": 100000,
            "priority": "increase-savings",
            "selected_categories": HOUSING_AND_SAVINGS,
        })

        assert response.status_code == 200
        data = response.json()
        assert data["period"] == "monthly"
        assert sum(item["monthly_budget"] for item in data["categories"]) == 100000
        assert data["recommendations"]["budgeting_method"] == "45/25/30 (High Savings)"

    async def test_annual_recommendation(self, client, auth_headers):
        response = await client.post("/annual-budgets/recommendations", headers=auth_headers, json={
            "income": 1200000,
            "selected_categories": HOUSING_AND_SAVINGS,
        })

        assert response.status_code == 200
        data = response.json()
        assert data["period"] == "annual"
        assert data["monthly_income"] == 100000
        assert sum(item["annual_budget"] for item in data["categories"]) <= 1200000 * 1.02

    @pytest.mark.parametrize("income", [0, -10])
    async def test_income_must_be_positive(self, client, auth_headers, income):
        response = await client.post(
            "/monthly-budgets/recommendations", headers=auth_headers, json={"income": income}
        )

        assert response.status_code == 422

    async def test_unknown_priority_is_rejected(self, client, auth_headers):
        response = await client.post(
            "/monthly-budgets/recommendations", headers=auth_headers,
            json={"income": 1000, "priority": "get-rich-quick"},
        )

        assert response.status_code == 422


class TestMonthlyBudgets:
    async def test_missing_budget_is_null(self, client, auth_headers):
        response = await client.get("/monthly-budgets/2025/3", headers=auth_headers)

        assert response.status_code == 200
        assert response.json() is None

    @pytest.mark.parametrize("path", [
        "/monthly-budgets/2025/13",
        "/monthly-budgets/2025/0",
        "/monthly-budgets/2019/5",
        "/monthly-budgets/2051/5",
    ])
    async def test_invalid_period(self, client, auth_headers, path):
        response = await client.get(path, headers=auth_headers)

        assert response.status_code == 422

    async def test_save_and_read(self, client, auth_headers):
        response = await client.put("/monthly-budgets/2025/3", headers=auth_headers, json=MONTHLY_BUDGET)
        assert response.status_code == 200
        saved = response.json()
        assert saved["period"] == "March 2025"
        assert saved["income_annual"] == 1200000
        assert saved["monthly_budgeted_expenses"] == 50000
        assert saved["monthly_difference"] == 50000

        response = await client.get("/monthly-budgets/2025/3", headers=auth_headers)
        assert [item["subcategory"] for item in response.json()["items"]] == ["Rent/Mortgage", "Groceries Shopping"]

        response = await client.get("/monthly-budgets/2025", headers=auth_headers)
        assert [budget["month"] for budget in response.json()] == [3]

    async def test_sync_and_performance(self, client, auth_headers):
        await client.put("/monthly-budgets/2025/3", headers=auth_headers, json=MONTHLY_BUDGET)
        await client.post("/transactions/", headers=auth_headers, json={
            "amount": -12000,
            "type": "expense",
            "category": "Food",
            "subcategory": "Groceries Shopping",
            "description": "Supermarket",
            "date": "2025-03-10",
        })

        response = await client.post("/monthly-budgets/2025/3/sync", headers=auth_headers)
        assert response.status_code == 200
        assert response.json()["matched_transactions"] == 1

        response = await client.get("/monthly-budgets/2025/3/performance", headers=auth_headers)
        groceries = response.json()["categories"][1]
        assert groceries["actual"] == 12000
        assert groceries["is_over_budget"] is True

        response = await client.get("/monthly-budgets/2025/3/transactions", headers=auth_headers)
        assert [t["description"] for t in response.json()] == ["Supermarket"]
        assert (await client.get("/monthly-budgets/2025/4/transactions", headers=auth_headers)).json() == []

    async def test_guided_budget(self, client, auth_headers):
        response = await client.post("/monthly-budgets/2025/4/guided", headers=auth_headers, json={
            "income": 100000,
            "priority": "increase-savings",
            "selected_categories": HOUSING_AND_SAVINGS,
        })

        assert response.status_code == 200
        budget = response.json()
        assert budget["creation_method"] == "guided"
        assert budget["priority"] == "increase-savings"
        assert budget["monthly_budgeted_expenses"] == 100000
        assert budget["monthly_difference"] == 0

        response = await client.post("/monthly-budgets/recommendations", headers=auth_headers, json={
            "income": 100000,
            "priority": "increase-savings",
            "selected_categories": HOUSING_AND_SAVINGS,
        })
        recommended = [
            (item["category"], item["subcategory"], item["monthly_budget"]) for item in response.json()["categories"]
        ]
        response = await client.get("/monthly-budgets/2025/4", headers=auth_headers)
        stored = [(item["category"], item["subcategory"], item["monthly_budget"]) for item in response.json()["items"]]
        assert stored == recommended

    async def test_duplicate_line_items(self, client, auth_headers):
        payload = dict(MONTHLY_BUDGET, categories=MONTHLY_BUDGET["categories"] * 2)

        response = await client.put("/monthly-budgets/2025/3", headers=auth_headers, json=payload)

        assert response.status_code == 422

    async def test_missing_budget_routes(self, client, auth_headers):
        assert (await client.post("/monthly-budgets/2025/3/sync", headers=auth_headers)).status_code == 404
        assert (await client.get("/monthly-budgets/2025/3/performance", headers=auth_headers)).status_code == 404
        assert (await client.delete("/monthly-budgets/2025/3", headers=auth_headers)).status_code == 404

    async def test_delete(self, client, auth_headers):
        await client.put("/monthly-budgets/2025/3", headers=auth_headers, json=MONTHLY_BUDGET)

        response = await client.delete("/monthly-budgets/2025/3", headers=auth_headers)

        assert response.status_code == 200
        assert (await client.get("/monthly-budgets/2025/3", headers=auth_headers)).json() is None


class TestAnnualBudgets:
    async def test_template(self, client, auth_headers):
        response = await client.get("/annual-budgets/template", headers=auth_headers)

        data = response.json()
        assert len(data["template"]) == 41
        assert "Housing" in data["categories"]

    async def test_budget_is_created_from_template(self, client, auth_headers):
        response = await client.get("/annual-budgets/2025", headers=auth_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["title"] == "Annual Budget 2025"
        assert len(data["items"]) == 41
        assert data["progress"] == 0

    async def test_missing_budget_routes(self, client, auth_headers):
        assert (await client.get("/annual-budgets/2025/performance", headers=auth_headers)).status_code == 404
        assert (await client.post("/annual-budgets/2025/sync", headers=auth_headers)).status_code == 404
        assert (await client.delete("/annual-budgets/2025", headers=auth_headers)).status_code == 404


class TestYearlyPlans:
    async def test_summary_follows_monthly_budgets(self, client, auth_headers):
        await client.put("/monthly-budgets/2025/3", headers=auth_headers, json=MONTHLY_BUDGET)

        response = await client.get("/yearly-plans/2025/summary", headers=auth_headers)

        assert response.status_code == 200
        data = response.json()
        assert len(data["monthly_data"]) == 12
        assert data["monthly_data"][2]["has_budget"] is True
        assert data["overview"]["months_with_budgets"] == 1

    async def test_plan_and_goals(self, client, auth_headers):
        await client.put("/monthly-budgets/2025/3", headers=auth_headers, json=MONTHLY_BUDGET)

        response = await client.put("/yearly-plans/2025/goals", headers=auth_headers, json=[
            {"title": "Emergency fund", "target_amount": 300000, "priority": "high"},
        ])

        assert response.status_code == 200
        plan = response.json()
        assert plan["months_with_budgets"] == 1
        assert plan["goals"][0]["title"] == "Emergency fund"

    async def test_trends_need_a_plan(self, client, auth_headers):
        response = await client.get("/yearly-plans/2025/trends", headers=auth_headers)

        assert response.status_code == 404


class TestCategories:
    async def test_system_and_user_categories(self, client, auth_headers, db_session):
        await CategoryRepository(db_session).ensure_default_categories()

        response = await client.post("/categories/", headers=auth_headers, json={
            "name": "Travel", "subcategories": ["Flights", "Hotels"],
        })
        assert response.status_code == 200
        travel_id = response.json()["id"]

        response = await client.post("/categories/", headers=auth_headers, json={"name": "Housing"})
        assert response.status_code == 400

        response = await client.get("/categories/?type=income", headers=auth_headers)
        assert [category["name"] for category in response.json()] == ["Income"]

        response = await client.get("/categories/", headers=auth_headers)
        names = [category["name"] for category in response.json()]
        assert "Savings/Investments" in names and "Travel" in names

        assert (await client.delete(f"/categories/{travel_id}", headers=auth_headers)).status_code == 200
        assert (await client.delete(f"/categories/{travel_id}", headers=auth_headers)).status_code == 404

    async def test_default_categories_are_seeded_once(self, db_session):
        repository = CategoryRepository(db_session)

        assert await repository.ensure_default_categories() == 10
        assert await repository.ensure_default_categories() == 0
