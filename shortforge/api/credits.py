"""
Credits API Routes
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from shortforge.api.deps import get_db, get_current_user_id
from shortforge.models.credit import CreditTransaction
from shortforge.services.credits import CreditLedger

router = APIRouter()


@router.get("/me")
async def get_my_credits(
    limit: int = 20,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """Current balance and the most recent transactions."""
    transactions = (
        db.query(CreditTransaction)
        .filter(CreditTransaction.user_id == user_id)
        .order_by(CreditTransaction.created_at.desc())
        .limit(limit)
        .all()
    )
    return {
        "user_id": user_id,
        "credits": CreditLedger(db).get_balance(user_id),
        "transactions": [
            {
                "id": t.id,
                "amount": t.amount,
                "feature": t.feature,
                "description": t.description,
                "details": t.details or {},
                "created_at": t.created_at.isoformat() if t.created_at else None,
            }
            for t in transactions
        ],
    }
