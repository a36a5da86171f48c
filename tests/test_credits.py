import pytest

from shortforge.models import CreditTransaction
from shortforge.services.credits import (
    CreditFeature,
    CreditLedger,
    InsufficientCreditsError,
    estimate_short_credits,
)


@pytest.mark.parametrize(
    "duration,expected",
    [(30, 16), (31, 17), (5, 11), (0, 10), (None, 10)],
)
def test_estimate_short_credits(duration, expected):
    assert estimate_short_credits(duration) == expected


def test_unknown_user_has_no_credits(db):
    assert CreditLedger(db).get_balance("nobody") == 0


def test_grant_and_debit(db, fund):
    fund(amount=100)
    ledger = CreditLedger(db)

    balance = ledger.debit("user_1", CreditFeature.SHORT_GENERATION, 16, details={"short_id": "short_1"})

    assert balance == 84
    assert ledger.get_balance("user_1") == 84
    debit = (
        db.query(CreditTransaction)
        .filter(CreditTransaction.user_id == "user_1", CreditTransaction.amount < 0)
        .one()
    )
    assert debit.amount == -16
    assert debit.feature == CreditFeature.SHORT_GENERATION
    assert debit.details == {"short_id": "short_1"}


def test_validate_raises_with_amounts(db, fund):
    fund(amount=5)

    with pytest.raises(InsufficientCreditsError) as exc_info:
        CreditLedger(db).validate("user_1", CreditFeature.SHORT_GENERATION, 16)

    assert exc_info.value.required == 16
    assert exc_info.value.available == 5


def test_debit_never_overdraws(db, fund):
    fund(amount=20)
    ledger = CreditLedger(db)
    ledger.debit("user_1", CreditFeature.SHORT_GENERATION, 16)

    with pytest.raises(InsufficientCreditsError):
        ledger.debit("user_1", CreditFeature.SHORT_GENERATION, 16)

    assert ledger.get_balance("user_1") == 4
    assert db.query(CreditTransaction).filter(CreditTransaction.amount == -16).count() == 1


def test_refund_restores_balance(db, fund):
    fund(amount=50)
    ledger = CreditLedger(db)
    ledger.debit("user_1", CreditFeature.SHORT_GENERATION, 16)

    balance = ledger.refund("user_1", CreditFeature.SHORT_GENERATION, 16, "script stage failed")

    assert balance == 50
    refund = db.query(CreditTransaction).filter(CreditTransaction.description.like("Refund%")).one()
    assert refund.amount == 16
    assert refund.details["reason"] == "script stage failed"


def test_transactions_sum_to_balance(db, fund):
    fund(amount=40)
    ledger = CreditLedger(db)
    ledger.debit("user_1", CreditFeature.SHORT_GENERATION, 16)
    ledger.refund("user_1", CreditFeature.SHORT_GENERATION, 16, "failed")
    ledger.debit("user_1", CreditFeature.SHORT_GENERATION, 11)

    total = sum(t.amount for t in db.query(CreditTransaction).filter(CreditTransaction.user_id == "user_1"))
    assert total == ledger.get_balance("user_1") == 29
