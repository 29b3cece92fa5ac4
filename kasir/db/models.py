"""SQLAlchemy models for the remote backend."""
from __future__ import annotations

from sqlalchemy import (
    Column,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    func,
)
from sqlalchemy.orm import relationship

from .session import Base


class ProductRow(Base):
    __tablename__ = "products"

    id = Column(String(64), primary_key=True)
    name = Column(String(255), nullable=False)
    price = Column(Numeric(14, 2), nullable=False)
    stock = Column(Integer, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)


class TransactionRow(Base):
    __tablename__ = "transactions"

    id = Column(String(64), primary_key=True)
    transaction_number = Column(String(64), nullable=False)
    total = Column(Numeric(14, 2), nullable=False)
    payment_method = Column(String(32), nullable=False)
    cash_received = Column(Numeric(14, 2), nullable=True)
    change_amount = Column(Numeric(14, 2), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False)

    items = relationship(
        "TransactionItemRow",
        back_populates="transaction",
        cascade="all,delete-orphan",
        order_by="TransactionItemRow.position",
    )


class TransactionItemRow(Base):
    __tablename__ = "transaction_items"

    id = Column(String(80), primary_key=True)
    transaction_id = Column(String(64), ForeignKey("transactions.id", ondelete="CASCADE"), nullable=False)
    position = Column(Integer, nullable=False, default=0)
    product_id = Column(String(64), nullable=True)
    product_name = Column(String(255), nullable=False)
    price = Column(Numeric(14, 2), nullable=False)
    quantity = Column(Integer, nullable=False)
    subtotal = Column(Numeric(14, 2), nullable=False)

    transaction = relationship("TransactionRow", back_populates="items")
