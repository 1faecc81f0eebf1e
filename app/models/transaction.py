import enum
from sqlalchemy import Column, Integer, String, ForeignKey, Enum, Index
from sqlalchemy.orm import relationship
from app.core.database import Base
from app.models.base import TimestampMixin
from app.models.columns import DecimalString


class TransactionType(str, enum.Enum):
    DEPOSIT = "deposit"
    BET = "bet"
    WIN = "win"


class Transaction(Base, TimestampMixin):
    __tablename__ = "transactions"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    tx_type = Column("type", Enum(TransactionType, values_callable=lambda e: [m.value for m in e]), nullable=False)
    # Always non-negative; the sign is implied by tx_type.
    amount = Column(DecimalString, nullable=False)
    description = Column(String(255), nullable=False)

    user = relationship("User", back_populates="transactions")


Index("ix_transactions_user_type", Transaction.user_id, Transaction.tx_type)
