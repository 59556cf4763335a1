# finance_tracker/reconciliation.py
"""Keep a borrowed/lent record's repaid amount and status in line with its payments.

Two paths update ``repaid_amount``:

* incremental, on payment creation and on the repay action:
  ``min(old_repaid + payment, amount)``
* recomputed from the payment rows, on payment update/delete and when the
  record's own amount changes: ``min(sum(payments), amount)``

Either way ``status`` is re-derived from the clamped value. Callers load the
record with ``for_update=True`` and commit the payment write together with the
record update, so concurrent repayments on one record serialize on the row lock.
"""

from sqlalchemy import func
from sqlalchemy.orm import Session
import structlog

from .errors import ConflictError
from .models import BorrowedMoney, Payment, round_money

logger = structlog.get_logger(__name__)

PENDING = "pending"
PARTIAL = "partial"
REPAID = "repaid"


def derive_status(repaid_amount: float, amount: float) -> str:
    repaid_amount, amount = round_money(repaid_amount), round_money(amount)
    if repaid_amount <= 0:
        return PENDING
    if repaid_amount >= amount:
        return REPAID
    return PARTIAL


def clamp_repaid(repaid_amount: float, amount: float) -> float:
    return max(0.0, min(round_money(repaid_amount), round_money(amount)))


def _apply(record: BorrowedMoney, repaid_amount: float):
    record.repaid_amount = clamp_repaid(repaid_amount, record.amount)
    record.status = derive_status(record.repaid_amount, record.amount)
    return record


def apply_incremental(record: BorrowedMoney, payment_amount: float):
    previous = record.repaid_amount or 0
    _apply(record, previous + payment_amount)
    logger.info(
        "borrowed_reconciled",
        strategy="incremental",
        borrowed_id=record.id,
        previous_repaid=previous,
        repaid_amount=record.repaid_amount,
        status=record.status,
    )
    return record


def sum_payments(db: Session, record: BorrowedMoney) -> float:
    total = db.query(func.coalesce(func.sum(Payment.amount), 0)).filter(
        Payment.user_id == record.user_id,
        Payment.type == "borrowed",
        Payment.borrowed_id == record.id,
    ).scalar()
    return round_money(total)


def recompute_from_payments(db: Session, record: BorrowedMoney):
    # Pending deletes/edits must be visible to the SUM
    db.flush()
    previous = record.repaid_amount or 0
    _apply(record, sum_payments(db, record))
    logger.info(
        "borrowed_reconciled",
        strategy="recompute",
        borrowed_id=record.id,
        previous_repaid=previous,
        repaid_amount=record.repaid_amount,
        status=record.status,
    )
    return record


def check_repayment(record: BorrowedMoney, payment_amount: float):
    """Reject a repayment larger than what is still owed, without touching the record."""
    remaining = record.remaining_amount
    if round_money(payment_amount) > remaining:
        raise ConflictError(
            f"Repayment amount ({payment_amount:g}) cannot exceed remaining amount ({remaining:g})",
            field="amount",
            value=payment_amount,
            remaining_amount=remaining,
        )
