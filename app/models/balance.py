from decimal import Decimal
from sqlalchemy import Column, Integer, ForeignKey, String
from sqlalchemy.orm import relationship
from app.core.database import Base
from app.models.base import TimestampMixin
from app.models.columns import DecimalString


class Balance(Base, TimestampMixin):
    __tablename__ = "balances"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), unique=True, nullable=False, index=True)
    amount = Column(DecimalString, default=Decimal("0"), nullable=False)
    currency = Column(String(16), default="USDT", nullable=False)

    user = relationship("User", back_populates="balance")
