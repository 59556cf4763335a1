# finance_tracker/borrowed_utils.py

from sqlalchemy.orm import Session
import structlog

from . import reconciliation
from .errors import ConflictError, NotFoundError
from .models import BorrowedMoney, Expense, Payment
from .validators import parse_id

logger = structlog.get_logger(__name__)


def get_all_borrowed(db: Session, user_id: int, type: str = None, status: str = None):
    query = db.query(BorrowedMoney).filter(BorrowedMoney.user_id == user_id)
    if type:
        query = query.filter(BorrowedMoney.type == type)
    if status:
        query = query.filter(BorrowedMoney.status == status)
    return query.order_by(BorrowedMoney.created_at.desc(), BorrowedMoney.id.desc()).all()


def get_borrowed_by_id(db: Session, user_id: int, borrowed_id, for_update=False):
    query = db.query(BorrowedMoney).filter(
        BorrowedMoney.id == parse_id(borrowed_id), BorrowedMoney.user_id == user_id
    )
    if for_update:
        query = query.with_for_update()
    record = query.first()
    if not record:
        raise NotFoundError("Record not found")
    return record


def get_repayments(db: Session, user_id: int, record: BorrowedMoney):
    return db.query(Payment).filter(
        Payment.user_id == user_id,
        Payment.type == "borrowed",
        Payment.borrowed_id == record.id,
    ).order_by(Payment.payment_date.desc(), Payment.id.desc()).all()


def add_borrowed(db: Session, user_id: int, data: dict):
    record = BorrowedMoney(
        user_id=user_id,
        name=data["name"],
        phone=data.get("phone"),
        amount=data["amount"],
        type=data["type"],
        note=data.get("note"),
        repaid_amount=0,
        status=reconciliation.PENDING,
    )
    db.add(record)
    db.commit()
    db.refresh(record)
    logger.info("borrowed_created", user_id=user_id, borrowed_id=record.id, type=record.type,
                amount=record.amount)
    return record


def update_borrowed(db: Session, user_id: int, borrowed_id, changes: dict):
    record = get_borrowed_by_id(db, user_id, borrowed_id, for_update=True)
    for field in ("name", "amount", "type"):
        if changes.get(field) is not None:
            setattr(record, field, changes[field])
    for field in ("phone", "note"):
        if field in changes:
            setattr(record, field, changes[field])

    # A new principal can move the clamp and the status
    if changes.get("amount") is not None:
        reconciliation.recompute_from_payments(db, record)

    db.commit()
    db.refresh(record)
    logger.info("borrowed_updated", user_id=user_id, borrowed_id=record.id, fields=sorted(changes))
    return record


def repay(db: Session, user_id: int, borrowed_id, data: dict):
    """Record a repayment and move the record forward in one transaction."""
    record = get_borrowed_by_id(db, user_id, borrowed_id, for_update=True)
    reconciliation.check_repayment(record, data["amount"])

    payment = Payment(
        user_id=user_id,
        type="borrowed",
        borrowed_id=record.id,
        amount=data["amount"],
        payment_date=data["payment_date"],
        note=data.get("note") or f"Repayment for {record.name}",
        payment_method=data.get("payment_method") or "cash",
    )
    db.add(payment)
    reconciliation.apply_incremental(record, data["amount"])
    db.commit()
    db.refresh(payment)
    db.refresh(record)
    logger.info("borrowed_repaid", user_id=user_id, borrowed_id=record.id, payment_id=payment.id,
                amount=payment.amount, remaining=record.remaining_amount)
    return payment, record


def delete_borrowed(db: Session, user_id: int, borrowed_id):
    record = get_borrowed_by_id(db, user_id, borrowed_id)

    has_payments = db.query(Payment.id).filter(
        Payment.user_id == user_id, Payment.type == "borrowed", Payment.borrowed_id == record.id
    ).first()
    if has_payments:
        logger.info("borrowed_delete_blocked", user_id=user_id, borrowed_id=record.id, reason="payments")
        raise ConflictError("Cannot delete record with payment history. Please delete payments first.")

    has_expenses = db.query(Expense.id).filter(
        Expense.user_id == user_id, Expense.borrowed_id == record.id
    ).first()
    if has_expenses:
        logger.info("borrowed_delete_blocked", user_id=user_id, borrowed_id=record.id, reason="expenses")
        raise ConflictError(
            "Cannot delete record with associated expenses. Please update or delete expenses first."
        )

    deleted_id = record.id
    db.delete(record)
    db.commit()
    logger.info("borrowed_deleted", user_id=user_id, borrowed_id=deleted_id)
