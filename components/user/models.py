"""Budget owner table."""

from sqlalchemy import Column, Integer, String, Date

from components.core.config import settings
from components.core.database import Base


class User(Base):
    """An account that owns budgets, transactions and yearly plans."""
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    login = Column(String(50), unique=True, nullable=False)
    password = Column(String(255), nullable=False)  # salt:sha256
    full_name = Column(String(100), nullable=True)
    currency = Column(String(3), nullable=False, default=settings.DEFAULT_CURRENCY)
    registration_date = Column(Date, nullable=False)
