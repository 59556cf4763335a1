# finance_tracker/payment_utils.py

from sqlalchemy.orm import Session, joinedload
import structlog

from . import reconciliation
from .crud import apply_amount_range, apply_date_range, apply_sort, paginate
from .errors import NotFoundError, ValidationError
from .models import BorrowedMoney, Payment
from .validators import parse_id, resolve_payment_reference

logger = structlog.get_logger(__name__)

PAYMENT_SORT_FIELDS = ("payment_date", "amount", "created_at")


def _payment_query(db: Session, user_id: int):
    return db.query(Payment).options(
        joinedload(Payment.credit_card), joinedload(Payment.borrowed)
    ).filter(Payment.user_id == user_id)


def get_payment_by_id(db: Session, user_id: int, payment_id):
    payment = _payment_query(db, user_id).filter(Payment.id == parse_id(payment_id)).first()
    if not payment:
        raise NotFoundError("Payment not found")
    return payment


def get_filtered_payments(
    db: Session,
    user_id: int,
    page: int = 1,
    limit: int = 20,
    type: str = None,
    start_date=None,
    end_date=None,
    min_amount: float = None,
    max_amount: float = None,
    sort_by: str = "payment_date",
    sort_order: str = "desc",
):
    query = _payment_query(db, user_id)
    if type:
        query = query.filter(Payment.type == type)
    query = apply_date_range(query, Payment.payment_date, start_date, end_date)
    query = apply_amount_range(query, Payment.amount, min_amount, max_amount)
    query = apply_sort(query, Payment, sort_by, sort_order, PAYMENT_SORT_FIELDS)
    return paginate(query, page, limit)


def _locked_borrowed(db: Session, payment: Payment):
    return db.query(BorrowedMoney).filter(
        BorrowedMoney.id == payment.borrowed_id
    ).with_for_update().first()


def add_payment(db: Session, user_id: int, data: dict):
    payment_type = data["type"]
    reference = resolve_payment_reference(db, user_id, payment_type, data["reference_id"])

    payment = Payment(
        user_id=user_id,
        type=payment_type,
        amount=data["amount"],
        note=data.get("note"),
        payment_method=data.get("payment_method") or "bank_transfer",
    )
    if data.get("payment_date"):
        payment.payment_date = data["payment_date"]

    if payment_type == "credit_card":
        payment.credit_card_id = reference.id
    else:
        payment.borrowed_id = reference.id
        record = _locked_borrowed(db, payment)
        reconciliation.apply_incremental(record, payment.amount)

    db.add(payment)
    db.commit()
    db.refresh(payment)
    logger.info("payment_created", user_id=user_id, payment_id=payment.id, type=payment.type,
                reference_id=payment.reference_id, amount=payment.amount)
    return payment


def update_payment(db: Session, user_id: int, payment_id, changes: dict):
    payment = get_payment_by_id(db, user_id, payment_id)

    if "amount" in changes and changes["amount"] is None:
        raise ValidationError("amount cannot be empty", field="amount")

    for field in ("amount", "payment_date", "payment_method"):
        if changes.get(field) is not None:
            setattr(payment, field, changes[field])
    if "note" in changes:
        payment.note = changes["note"]

    if payment.type == "borrowed":
        record = _locked_borrowed(db, payment)
        if record is not None:
            reconciliation.recompute_from_payments(db, record)

    db.commit()
    db.refresh(payment)
    logger.info("payment_updated", user_id=user_id, payment_id=payment.id, fields=sorted(changes))
    return payment


def delete_payment(db: Session, user_id: int, payment_id):
    payment = get_payment_by_id(db, user_id, payment_id)
    deleted_id = payment.id
    is_borrowed = payment.type == "borrowed"
    record = _locked_borrowed(db, payment) if is_borrowed else None

    db.delete(payment)
    if record is not None:
        # Sum what is left, so removing the last payment lands on zero/pending
        reconciliation.recompute_from_payments(db, record)

    db.commit()
    logger.info("payment_deleted", user_id=user_id, payment_id=deleted_id)
