import enum
from sqlalchemy import Column, Integer, String, ForeignKey, Enum, Index
from sqlalchemy.orm import relationship
from app.core.database import Base
from app.models.base import TimestampMixin
from app.models.columns import DecimalString


class DepositStatus(str, enum.Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    FAILED = "failed"


class Deposit(Base, TimestampMixin):
    __tablename__ = "deposits"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    amount = Column(DecimalString, nullable=False)
    currency = Column(String(16), default="USDT", nullable=False)
    wallet_address = Column(String(42), nullable=False)
    transaction_hash = Column(String(66), nullable=True)
    status = Column(
        Enum(DepositStatus, values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=DepositStatus.PENDING,
    )

    user = relationship("User", back_populates="deposits")


Index("ix_deposits_user_status", Deposit.user_id, Deposit.status)
