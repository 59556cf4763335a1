# finance_tracker/credit_cards.py

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from . import credit_card_utils as cards
from .auth import get_current_user
from .config import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from .crud import get_filtered_expenses
from .database import get_db
from .schemas import CreditCardCreate, CreditCardUpdate
from .serializers import credit_card_to_dict, expense_to_dict, payment_to_dict
from .summary_utils import get_credit_card_summary

router = APIRouter(prefix="/credit-cards", tags=["credit cards"])


@router.post("", status_code=status.HTTP_201_CREATED)
def create_credit_card(
    payload: CreditCardCreate,
    user_id: int = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    card = cards.add_credit_card(db, user_id, payload.model_dump())
    return {"message": "Credit card added successfully", "creditCard": credit_card_to_dict(card)}


@router.get("")
def list_credit_cards(user_id: int = Depends(get_current_user), db: Session = Depends(get_db)):
    return {"creditCards": [credit_card_to_dict(c) for c in cards.get_all_credit_cards(db, user_id)]}


@router.get("/{card_id}")
def get_credit_card(card_id: str, user_id: int = Depends(get_current_user), db: Session = Depends(get_db)):
    card = cards.get_credit_card_by_id(db, user_id, card_id)
    return {"summary": get_credit_card_summary(db, user_id, card)}


@router.put("/{card_id}")
def update_credit_card(
    card_id: str,
    payload: CreditCardUpdate,
    user_id: int = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    card = cards.update_credit_card(db, user_id, card_id, payload.model_dump(exclude_unset=True))
    return {"message": "Credit card updated successfully", "creditCard": credit_card_to_dict(card)}


@router.delete("/{card_id}")
def delete_credit_card(card_id: str, user_id: int = Depends(get_current_user), db: Session = Depends(get_db)):
    cards.delete_credit_card(db, user_id, card_id)
    return {"message": "Credit card deleted successfully"}


@router.get("/{card_id}/expenses")
def list_credit_card_expenses(
    card_id: str,
    page: int = Query(1, ge=1),
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    user_id: int = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    card = cards.get_credit_card_by_id(db, user_id, card_id)
    expenses, meta = get_filtered_expenses(
        db, user_id, page=page, limit=limit, start_date=start_date, end_date=end_date,
        credit_card_id=card.id,
    )
    meta.pop("hasNext", None)
    meta.pop("hasPrev", None)
    return {"expenses": [expense_to_dict(e) for e in expenses], **meta}


@router.get("/{card_id}/payments")
def list_credit_card_payments(card_id: str, user_id: int = Depends(get_current_user), db: Session = Depends(get_db)):
    payments = cards.get_credit_card_payments(db, user_id, card_id)
    return {"payments": [payment_to_dict(p) for p in payments]}
