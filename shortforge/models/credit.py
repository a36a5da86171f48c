"""
Credit Models
Prepaid credit balance per user plus an append-only transaction log.
"""

import uuid
from datetime import datetime
from sqlalchemy import Column, String, Integer, DateTime, JSON

from shortforge.core.database import Base


class CreditBalance(Base):
    __tablename__ = "credit_balances"

    user_id = Column(String, primary_key=True)
    credits = Column(Integer, default=0, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class CreditTransaction(Base):
    __tablename__ = "credit_transactions"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String, nullable=False, index=True)
    amount = Column(Integer, nullable=False)  # Positive for credits added/refunded, negative for spent
    feature = Column(String, nullable=False)
    description = Column(String, nullable=False)
    details = Column(JSON, default=dict)
    created_at = Column(DateTime, default=datetime.utcnow)
