# finance_tracker/credit_card_utils.py

from sqlalchemy.orm import Session
import structlog

from .errors import ConflictError, NotFoundError
from .models import CreditCard, Expense, Payment
from .validators import parse_id

logger = structlog.get_logger(__name__)


def get_all_credit_cards(db: Session, user_id: int):
    return db.query(CreditCard).filter(CreditCard.user_id == user_id).order_by(
        CreditCard.bank_name.asc(), CreditCard.id.asc()
    ).all()


def get_credit_card_by_id(db: Session, user_id: int, card_id):
    card = db.query(CreditCard).filter(
        CreditCard.id == parse_id(card_id), CreditCard.user_id == user_id
    ).first()
    if not card:
        raise NotFoundError("Credit card not found")
    return card


def add_credit_card(db: Session, user_id: int, data: dict):
    card = CreditCard(
        user_id=user_id,
        bank_name=data["bank_name"],
        card_number=data["card_number"],
        limit_amount=data.get("limit_amount"),
        due_date=data["due_date"],
    )
    db.add(card)
    db.commit()
    db.refresh(card)
    logger.info("credit_card_created", user_id=user_id, credit_card_id=card.id)
    return card


def update_credit_card(db: Session, user_id: int, card_id, changes: dict):
    card = get_credit_card_by_id(db, user_id, card_id)
    for field in ("bank_name", "card_number", "due_date", "is_active"):
        if changes.get(field) is not None:
            setattr(card, field, changes[field])
    # An explicit null clears the limit
    if "limit_amount" in changes:
        card.limit_amount = changes["limit_amount"]
    db.commit()
    db.refresh(card)
    logger.info("credit_card_updated", user_id=user_id, credit_card_id=card.id, fields=sorted(changes))
    return card


def delete_credit_card(db: Session, user_id: int, card_id):
    card = get_credit_card_by_id(db, user_id, card_id)

    has_expenses = db.query(Expense.id).filter(
        Expense.user_id == user_id, Expense.credit_card_id == card.id
    ).first()
    if has_expenses:
        logger.info("credit_card_delete_blocked", user_id=user_id, credit_card_id=card.id, reason="expenses")
        raise ConflictError(
            "Cannot delete credit card with associated expenses. Please update or delete expenses first."
        )

    has_payments = db.query(Payment.id).filter(
        Payment.user_id == user_id, Payment.type == "credit_card", Payment.credit_card_id == card.id
    ).first()
    if has_payments:
        logger.info("credit_card_delete_blocked", user_id=user_id, credit_card_id=card.id, reason="payments")
        raise ConflictError("Cannot delete credit card with payment history. Please delete payments first.")

    deleted_id = card.id
    db.delete(card)
    db.commit()
    logger.info("credit_card_deleted", user_id=user_id, credit_card_id=deleted_id)


def get_credit_card_payments(db: Session, user_id: int, card_id):
    card = get_credit_card_by_id(db, user_id, card_id)
    return db.query(Payment).filter(
        Payment.user_id == user_id,
        Payment.type == "credit_card",
        Payment.credit_card_id == card.id,
    ).order_by(Payment.payment_date.desc(), Payment.id.desc()).all()
