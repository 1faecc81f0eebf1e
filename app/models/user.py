from sqlalchemy import Column, Integer, String, Boolean, Index
from sqlalchemy.orm import relationship
from app.core.database import Base
from app.models.base import TimestampMixin


class User(Base, TimestampMixin):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(64), unique=True, nullable=False, index=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    hashed_password = Column(String(255), nullable=False)
    wallet_address = Column(String(42), nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)

    balance = relationship("Balance", back_populates="user", uselist=False)
    transactions = relationship("Transaction", back_populates="user")
    bets = relationship("Bet", back_populates="user")
    deposits = relationship("Deposit", back_populates="user")


Index("ix_users_active", User.is_active)
