"""SQLAlchemy ORM models for the transaction store (read-only from this service)"""

from sqlalchemy import Column, BigInteger, DateTime, ForeignKey, Index, Text
from sqlalchemy.orm import declarative_base, relationship
from sqlalchemy.sql import func

Base = declarative_base()


class Category(Base):
    """User-defined transaction category"""

    __tablename__ = "categories"

    id = Column(Text, primary_key=True)
    user_id = Column(Text, nullable=False, index=True)
    name = Column(Text, nullable=False)
    kind = Column(Text, nullable=False, default="expense")  # income | expense

    transactions = relationship("TransactionRecord", back_populates="category")


class TransactionRecord(Base):
    """Money movement; amount_minor is never negative, direction carries the sign"""

    __tablename__ = "transactions"
    __table_args__ = (Index("ix_transactions_user_occurred", "user_id", "occurred_at"),)

    id = Column(Text, primary_key=True)
    user_id = Column(Text, nullable=False)
    occurred_at = Column(DateTime(timezone=True), nullable=False)
    amount_minor = Column(BigInteger, nullable=False)
    direction = Column(Text, nullable=False)  # income | expense | transfer
    category_id = Column(Text, ForeignKey("categories.id", ondelete="SET NULL"), nullable=True)
    description = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    category = relationship("Category", back_populates="transactions")
