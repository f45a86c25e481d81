"""Category model for the database."""

from sqlalchemy import Boolean, Column, ForeignKey, Integer, JSON, String, UniqueConstraint

from components.core.database import Base


class Category(Base):
    """Category model storing the names transactions are filed under."""
    __tablename__ = "categories"
    __table_args__ = (
        UniqueConstraint("user_id", "name", name="uq_categories_user_name"),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=True, index=True)  # NULL for system categories
    name = Column(String(100), nullable=False)
    type = Column(String(10), nullable=False, default="expense")  # income | expense | both
    description = Column(String(500), nullable=True)
    subcategories = Column(JSON, nullable=False, default=list)
    is_system = Column(Boolean, nullable=False, default=False)
