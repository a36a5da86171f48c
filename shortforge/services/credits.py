"""
Credit Ledger
Prepaid credit balance per user. Every balance change is paired with an
append-only CreditTransaction row in the same database transaction.

Called by the HTTP layer around pipeline runs (validate -> debit -> run ->
refund on failure); the pipeline itself never touches credits.
"""

import logging
import math
from typing import Optional

from sqlalchemy import update
from sqlalchemy.orm import Session

from shortforge.core.config import settings
from shortforge.models.credit import CreditBalance, CreditTransaction
from shortforge.pipeline.base import PipelineError

logger = logging.getLogger(__name__)


class CreditFeature:
    """Billable feature keys."""
    SHORT_GENERATION = "short_generation"
    GRANT = "grant"


class InsufficientCreditsError(PipelineError):
    """The user's balance does not cover the operation."""

    def __init__(self, required: int, available: int):
        super().__init__(
            f"Insufficient credits: {required} required, {available} available",
            details={"required": required, "available": available},
        )
        self.required = required
        self.available = available


def estimate_short_credits(target_duration: Optional[int]) -> int:
    """Flat base price plus one credit per started block of seconds."""
    seconds = target_duration or 0
    return settings.SHORT_BASE_CREDITS + math.ceil(seconds / settings.SHORT_SECONDS_PER_CREDIT)


class CreditLedger:
    """Credit operations bound to one database session."""

    def __init__(self, db: Session):
        self.db = db

    def get_balance(self, user_id: str) -> int:
        row = self.db.get(CreditBalance, user_id)
        return row.credits if row else 0

    def validate(self, user_id: str, feature: str, amount: int):
        """
        Check the balance covers ``amount``.

        Raises:
            InsufficientCreditsError: If it does not
        """
        available = self.get_balance(user_id)
        if available < amount:
            logger.warning(f"[Credits] {user_id} cannot afford {feature}: {amount} > {available}")
            raise InsufficientCreditsError(required=amount, available=available)

    def debit(self, user_id: str, feature: str, amount: int, details: Optional[dict] = None) -> int:
        """
        Spend ``amount`` credits and return the new balance.

        The balance check and decrement happen in one conditional UPDATE, so two
        concurrent debits can never overdraw the account.

        Raises:
            InsufficientCreditsError: If the balance no longer covers ``amount``
        """
        result = self.db.execute(
            update(CreditBalance)
            .where(CreditBalance.user_id == user_id, CreditBalance.credits >= amount)
            .values(credits=CreditBalance.credits - amount)
        )
        if result.rowcount == 0:
            self.db.rollback()
            raise InsufficientCreditsError(required=amount, available=self.get_balance(user_id))

        self.db.add(CreditTransaction(
            user_id=user_id,
            amount=-amount,
            feature=feature,
            description=f"Used {amount} credits for {feature}",
            details=details or {},
        ))
        self.db.commit()

        balance = self.get_balance(user_id)
        logger.info(f"[Credits] Debited {amount} from {user_id} for {feature} (balance={balance})")
        return balance

    def refund(
        self,
        user_id: str,
        feature: str,
        amount: int,
        reason: str,
        details: Optional[dict] = None,
    ) -> int:
        """Return ``amount`` credits after a failed operation; returns the new balance."""
        self._add(user_id, amount)
        self.db.add(CreditTransaction(
            user_id=user_id,
            amount=amount,
            feature=feature,
            description=f"Refund for {feature}: {reason}",
            details={**(details or {}), "reason": reason},
        ))
        self.db.commit()

        balance = self.get_balance(user_id)
        logger.info(f"[Credits] Refunded {amount} to {user_id} for {feature} (balance={balance})")
        return balance

    def grant(self, user_id: str, amount: int, description: str = "Credits granted") -> int:
        """Add credits outside of a purchase flow (seeding, support)."""
        self._add(user_id, amount)
        self.db.add(CreditTransaction(
            user_id=user_id,
            amount=amount,
            feature=CreditFeature.GRANT,
            description=description,
            details={},
        ))
        self.db.commit()
        return self.get_balance(user_id)

    def _add(self, user_id: str, amount: int):
        result = self.db.execute(
            update(CreditBalance)
            .where(CreditBalance.user_id == user_id)
            .values(credits=CreditBalance.credits + amount)
        )
        if result.rowcount == 0:
            self.db.add(CreditBalance(user_id=user_id, credits=amount))
            self.db.flush()
