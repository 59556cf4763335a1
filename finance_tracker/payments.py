# finance_tracker/payments.py

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from . import payment_utils
from .auth import get_current_user
from .config import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from .database import get_db
from .schemas import PaymentCreate, PaymentType, PaymentUpdate
from .serializers import payment_to_dict
from .summary_utils import get_payment_totals

router = APIRouter(prefix="/payments", tags=["payments"])


@router.post("", status_code=status.HTTP_201_CREATED)
def create_payment(
    payload: PaymentCreate,
    user_id: int = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    payment = payment_utils.add_payment(db, user_id, payload.model_dump())
    return {"message": "Payment recorded successfully", "payment": payment_to_dict(payment, with_reference=True)}


@router.get("")
def list_payments(
    page: int = Query(1, ge=1),
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    type: Optional[PaymentType] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    min_amount: Optional[float] = None,
    max_amount: Optional[float] = None,
    sort_by: str = "payment_date",
    sort_order: str = "desc",
    user_id: int = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    payments, meta = payment_utils.get_filtered_payments(
        db,
        user_id,
        page=page,
        limit=limit,
        type=type,
        start_date=start_date,
        end_date=end_date,
        min_amount=min_amount,
        max_amount=max_amount,
        sort_by=sort_by,
        sort_order=sort_order,
    )
    return {"payments": [payment_to_dict(p) for p in payments], **meta}


@router.get("/summary/totals")
def payment_totals(
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    user_id: int = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return {"totals": get_payment_totals(db, user_id, start_date, end_date)}


@router.get("/{payment_id}")
def get_payment(payment_id: str, user_id: int = Depends(get_current_user), db: Session = Depends(get_db)):
    payment = payment_utils.get_payment_by_id(db, user_id, payment_id)
    return {"payment": payment_to_dict(payment, with_reference=True)}


@router.put("/{payment_id}")
def update_payment(
    payment_id: str,
    payload: PaymentUpdate,
    user_id: int = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    payment = payment_utils.update_payment(db, user_id, payment_id, payload.model_dump(exclude_unset=True))
    return {"message": "Payment updated successfully", "payment": payment_to_dict(payment)}


@router.delete("/{payment_id}")
def delete_payment(payment_id: str, user_id: int = Depends(get_current_user), db: Session = Depends(get_db)):
    payment_utils.delete_payment(db, user_id, payment_id)
    return {"message": "Payment deleted successfully"}
