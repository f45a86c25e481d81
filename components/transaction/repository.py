"""Repository for transaction operations."""

import csv
import logging
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import BinaryIO, Dict, List, Optional, Tuple

import pandas as pd
from sqlalchemy import Numeric, cast, extract, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from components.core.utils import to_decimal, year_bounds
from components.transaction.models import PAYMENT_METHODS, TRANSACTION_TYPES, Transaction
from components.transaction.schemas import TransactionCreate, TransactionUpdate

logger = logging.getLogger(__name__)

CSV_REQUIRED_COLUMNS = ("date", "amount", "type", "category", "description")
CSV_DATE_FORMATS = ("%Y-%m-%d", "%d.%m.%Y")


def _abs_sum():
    return cast(func.sum(func.abs(Transaction.amount)), Numeric(14, 2))


class TransactionRepository:
    """Repository for transaction operations."""

    def __init__(self, session: AsyncSession):
        """Initialize repository with database session."""
        self.session = session

    async def create(self, user_id: int, transaction: TransactionCreate) -> Transaction:
        """Record a new transaction."""
        db_transaction = Transaction(user_id=user_id, **transaction.model_dump())
        self.session.add(db_transaction)
        await self.session.commit()
        return db_transaction

    async def get(self, user_id: int, transaction_id: int) -> Optional[Transaction]:
        """Get a transaction of the user by ID."""
        result = await self.session.execute(
            select(Transaction).where(
                Transaction.id == transaction_id,
                Transaction.user_id == user_id,
            )
        )
        return result.scalar_one_or_none()

    async def get_all(
        self,
        user_id: int,
        type_: Optional[str] = None,
        category: Optional[str] = None,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
        skip: int = 0,
        limit: int = 100,
    ) -> List[Transaction]:
        """Get the user's transactions with optional filtering, newest first."""
        query = select(Transaction).where(Transaction.user_id == user_id)

        if type_:
            query = query.where(Transaction.type == type_)
        if category:
            query = query.where(Transaction.category == category)
        if date_from:
            query = query.where(Transaction.date >= date_from)
        if date_to:
            query = query.where(Transaction.date <= date_to)

        query = query.order_by(Transaction.date.desc(), Transaction.id.desc()).offset(skip).limit(limit)
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def update(
        self, user_id: int, transaction_id: int, transaction: TransactionUpdate
    ) -> Optional[Transaction]:
        """Update the given fields of a transaction."""
        db_transaction = await self.get(user_id, transaction_id)
        if not db_transaction:
            return None

        for field, value in transaction.model_dump(exclude_unset=True).items():
            setattr(db_transaction, field, value)

        await self.session.commit()
        return db_transaction

    async def delete(self, user_id: int, transaction_id: int) -> bool:
        """Delete a transaction."""
        db_transaction = await self.get(user_id, transaction_id)
        if not db_transaction:
            return False

        await self.session.delete(db_transaction)
        await self.session.commit()
        return True

    async def find_in_range(
        self, user_id: int, start: date, end: date, type_: str = "expense"
    ) -> List[Transaction]:
        """Transactions of one type dated within [start, end]."""
        result = await self.session.execute(
            select(Transaction)
            .where(
                Transaction.user_id == user_id,
                Transaction.type == type_,
                Transaction.date >= start,
                Transaction.date <= end,
            )
            .order_by(Transaction.date, Transaction.id)
        )
        return list(result.scalars().all())

    async def sum_by_category_and_subcategory(
        self, user_id: int, start: date, end: date, type_: str = "expense"
    ) -> List[Tuple[str, Optional[str], Decimal, int]]:
        """Absolute amounts summed per (category, subcategory) in a date window."""
        result = await self.session.execute(
            select(
                Transaction.category,
                Transaction.subcategory,
                _abs_sum(),
                func.count(Transaction.id),
            )
            .where(
                Transaction.user_id == user_id,
                Transaction.type == type_,
                Transaction.date >= start,
                Transaction.date <= end,
            )
            .group_by(Transaction.category, Transaction.subcategory)
        )
        return [(category, subcategory, to_decimal(total), count) for category, subcategory, total, count in result.all()]

    async def sum_by_category(
        self, user_id: int, start: date, end: date, type_: str = "expense"
    ) -> List[Tuple[str, Decimal, int]]:
        """Absolute amounts summed per category in a date window."""
        result = await self.session.execute(
            select(Transaction.category, _abs_sum(), func.count(Transaction.id))
            .where(
                Transaction.user_id == user_id,
                Transaction.type == type_,
                Transaction.date >= start,
                Transaction.date <= end,
            )
            .group_by(Transaction.category)
        )
        return [(category, to_decimal(total), count) for category, total, count in result.all()]

    async def monthly_totals(self, user_id: int, year: int, type_: str = "expense") -> Dict[int, Decimal]:
        """Absolute amounts summed per calendar month of a year."""
        start, end = year_bounds(year)
        month = extract("month", Transaction.date)
        result = await self.session.execute(
            select(month, _abs_sum())
            .where(
                Transaction.user_id == user_id,
                Transaction.type == type_,
                Transaction.date >= start,
                Transaction.date <= end,
            )
            .group_by(month)
        )
        return {int(month_number): to_decimal(total) for month_number, total in result.all()}

    async def import_from_csv(
        self, user_id: int, file_content: BinaryIO
    ) -> Tuple[bool, str, int, List[Dict]]:
        """
        Import transactions from a CSV file.

        Required columns: date, amount, type, category, description.
        Optional columns: subcategory, payment_method, notes.
        Dates are YYYY-MM-DD or DD.MM.YYYY. All rows are validated before
        anything is written; a single invalid row rejects the whole file.

        Returns:
            Tuple of success flag, message, number of imported rows and
            a list of row errors
        """
        try:
            frame = pd.read_csv(file_content, sep=None, engine="python", dtype=str, keep_default_na=False)
        except (ValueError, csv.Error, pd.errors.ParserError) as e:
            return False, f"Error reading file: {e}", 0, []

        frame.columns = [str(column).strip().lower() for column in frame.columns]
        missing = [column for column in CSV_REQUIRED_COLUMNS if column not in frame.columns]
        if missing:
            return False, f"CSV file is missing required columns: {', '.join(missing)}", 0, []

        errors = []
        transactions = []
        for row_num, row in enumerate(frame.to_dict("records"), start=2):  # Row 1 is the header
            row = {key: (value or "").strip() for key, value in row.items()}

            parsed_date = self._parse_date(row["date"])
            if parsed_date is None:
                errors.append({
                    "row": row_num,
                    "message": f"Invalid date: {row['date']}. Expected YYYY-MM-DD or DD.MM.YYYY",
                })
                continue

            try:
                amount = Decimal(row["amount"].replace(" ", ""))
            except InvalidOperation:
                amount = None
            if amount is None or not amount.is_finite():
                errors.append({"row": row_num, "message": f"Invalid amount value: {row['amount']}"})
                continue
            if amount == 0:
                errors.append({"row": row_num, "message": "Amount cannot be zero"})
                continue

            type_ = row["type"].lower()
            if type_ not in TRANSACTION_TYPES:
                errors.append({"row": row_num, "message": f"Invalid transaction type: {row['type']}"})
                continue

            if not row["category"]:
                errors.append({"row": row_num, "message": "Category cannot be empty"})
                continue

            payment_method = row.get("payment_method", "").lower() or "other"
            if payment_method not in PAYMENT_METHODS:
                errors.append({"row": row_num, "message": f"Invalid payment method: {row['payment_method']}"})
                continue

            transactions.append(Transaction(
                user_id=user_id,
                date=parsed_date,
                amount=amount,
                type=type_,
                category=row["category"],
                subcategory=row.get("subcategory") or None,
                description=row["description"] or row["category"],
                notes=row.get("notes") or None,
                payment_method=payment_method,
            ))

        if errors:
            logger.warning("Rejected transaction import for user %s: %d invalid rows", user_id, len(errors))
            return False, "Validation errors occurred", 0, errors

        self.session.add_all(transactions)
        await self.session.commit()
        logger.info("Imported %d transactions for user %s", len(transactions), user_id)
        return True, "Transactions imported successfully", len(transactions), []

    @staticmethod
    def _parse_date(value: str) -> Optional[date]:
        for date_format in CSV_DATE_FORMATS:
            try:
                return datetime.strptime(value, date_format).date()
            except ValueError:
                continue
        return None
