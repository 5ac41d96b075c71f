"""
Transaction Model

Ledger of token balance changes. Amounts are signed: spends are negative,
purchases, bonuses and admin top-ups positive.
"""
from sqlalchemy import Column, String, DateTime, ForeignKey, Integer, Index
from sqlalchemy.orm import relationship
from datetime import datetime
from saas_console.database import Base
import enum


class TransactionType(str, enum.Enum):
    SPEND = "spend"
    PURCHASE = "purchase"
    BONUS = "bonus"
    ADMIN_ADJUSTMENT = "admin_adjustment"


class Transaction(Base):
    __tablename__ = "transactions"

    id = Column(Integer, primary_key=True, autoincrement=True)

    user_id = Column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )

    amount = Column(Integer, nullable=False)
    type = Column(String(50), nullable=False, index=True)
    description = Column(String(255), nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    user = relationship("User", back_populates="transactions")

    __table_args__ = (
        Index("idx_transaction_type_created", "type", "created_at"),
    )

    def __repr__(self):
        return f"<Transaction {self.type} {self.amount} (user={self.user_id})>"
