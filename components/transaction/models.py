"""Transaction model for the database."""

from sqlalchemy import Column, Integer, String, Date, DateTime, ForeignKey, Numeric, Index

from components.core.database import Base
from components.core.utils import utcnow

TRANSACTION_TYPES = ("income", "expense", "transfer")
PAYMENT_METHODS = (
    "cash", "bank_transfer", "credit_card", "debit_card", "mobile_money", "cheque", "other",
)


class Transaction(Base):
    """Transaction model for recorded income and expenses."""
    __tablename__ = "transactions"
    __table_args__ = (
        Index("ix_transactions_user_type_date", "user_id", "type", "date"),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    amount = Column(Numeric(14, 2), nullable=False)
    type = Column(String(10), nullable=False)
    category = Column(String(100), nullable=False)
    subcategory = Column(String(100), nullable=True)
    description = Column(String(500), nullable=False)
    notes = Column(String(1000), nullable=True)
    date = Column(Date, nullable=False)
    payment_method = Column(String(20), nullable=False, default="other")
    created_at = Column(DateTime, nullable=False, default=utcnow)
