"""Tests for recording and importing transactions."""

import io
from datetime import date
from decimal import Decimal

from components.transaction.repository import TransactionRepository
from components.user.repository import UserRepository
from components.user.schemas import UserCreate

VALID_CSV = b"""date,amount,type,category,subcategory,description,payment_method
2025-03-01,-40000,expense,Housing,Rent/Mortgage,Rent,bank_transfer
05.03.2025,-1250.50,Expense,Food,Groceries Shopping,Supermarket,
2025-03-01,100000,income,Income,Salary,March salary,bank_transfer
"""

INVALID_CSV = b"""date,amount,type,category,description
2025-03-01,-40000,expense,Housing,Rent
2025-13-01,-100,expense,Food,Snacks
2025-03-02,abc,expense,Food,Snacks
2025-03-03,0,expense,Food,Snacks
2025-03-04,-10,gift,Food,Snacks
"""


class TestCsvImport:
    async def test_import(self, db_session, user):
        repository = TransactionRepository(db_session)

        success, message, imported, errors = await repository.import_from_csv(user.id, io.BytesIO(VALID_CSV))

        assert success, message
        assert imported == 3
        assert errors == []
        transactions = await repository.get_all(user.id, type_="expense")
        assert [t.date for t in transactions] == [date(2025, 3, 5), date(2025, 3, 1)]
        groceries = transactions[0]
        assert groceries.type == "expense"
        assert groceries.amount == Decimal("-1250.50")
        assert groceries.payment_method == "other"

    async def test_invalid_rows_reject_whole_file(self, db_session, user):
        repository = TransactionRepository(db_session)

        success, message, imported, errors = await repository.import_from_csv(user.id, io.BytesIO(INVALID_CSV))

        assert not success
        assert imported == 0
        assert [error["row"] for error in errors] == [3, 4, 5, 6]
        assert "Invalid date" in errors[0]["message"]
        assert "Invalid amount" in errors[1]["message"]
        assert errors[2]["message"] == "Amount cannot be zero"
        assert "Invalid transaction type" in errors[3]["message"]
        assert await repository.get_all(user.id) == []

    async def test_missing_columns(self, db_session, user):
        csv_data = b"date,amount,category\n2025-03-01,-10,Food\n"

        success, message, imported, _ = await TransactionRepository(db_session).import_from_csv(
            user.id, io.BytesIO(csv_data)
        )

        assert not success
        assert "type" in message and "description" in message
        assert imported == 0


class TestTransactionTotals:
    async def test_monthly_totals_use_absolute_amounts(self, db_session, user):
        repository = TransactionRepository(db_session)
        await repository.import_from_csv(user.id, io.BytesIO(VALID_CSV))

        totals = await repository.monthly_totals(user.id, 2025)

        assert totals == {3: Decimal("41250.50")}

    async def test_find_in_range(self, db_session, user):
        repository = TransactionRepository(db_session)
        other = await UserRepository(db_session).create(UserCreate(login="bob", password="secret123"))
        await repository.import_from_csv(user.id, io.BytesIO(VALID_CSV))
        await repository.import_from_csv(other.id, io.BytesIO(VALID_CSV))

        expenses = await repository.find_in_range(user.id, date(2025, 3, 1), date(2025, 3, 5))

        assert [(t.date, t.subcategory) for t in expenses] == [
            (date(2025, 3, 1), "Rent/Mortgage"),
            (date(2025, 3, 5), "Groceries Shopping"),
        ]
        assert {t.user_id for t in expenses} == {user.id}
        assert await repository.find_in_range(user.id, date(2025, 3, 2), date(2025, 3, 4)) == []
        income = await repository.find_in_range(user.id, date(2025, 3, 1), date(2025, 3, 1), type_="income")
        assert [t.description for t in income] == ["March salary"]

    async def test_sum_by_category_only_counts_the_window(self, db_session, user):
        repository = TransactionRepository(db_session)
        await repository.import_from_csv(user.id, io.BytesIO(VALID_CSV))

        rows = await repository.sum_by_category(user.id, date(2025, 3, 2), date(2025, 3, 31))

        assert rows == [("Food", Decimal("1250.50"), 1)]
