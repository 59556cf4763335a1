# finance_tracker/borrowed_money.py

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from . import borrowed_utils, summary_utils
from .auth import get_current_user
from .database import get_db
from .schemas import BorrowedCreate, BorrowedStatus, BorrowedType, BorrowedUpdate, RepayIn
from .serializers import borrowed_to_dict, payment_to_dict

router = APIRouter(prefix="/borrowed-money", tags=["borrowed money"])


@router.post("", status_code=status.HTTP_201_CREATED)
def create_borrowed(
    payload: BorrowedCreate,
    user_id: int = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    record = borrowed_utils.add_borrowed(db, user_id, payload.model_dump())
    label = "Borrowed" if record.type == "borrowed" else "Lent"
    return {"message": f"{label} money recorded successfully", "borrowedMoney": borrowed_to_dict(record)}


@router.get("")
def list_borrowed(
    type: Optional[BorrowedType] = None,
    status: Optional[BorrowedStatus] = None,
    user_id: int = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    records = borrowed_utils.get_all_borrowed(db, user_id, type=type, status=status)
    return {"borrowedMoney": [borrowed_to_dict(r) for r in records]}


# Fixed paths are declared before /{borrowed_id} so they are matched first
@router.get("/overdue")
def overdue(user_id: int = Depends(get_current_user), db: Session = Depends(get_db)):
    return summary_utils.get_overdue_records(db, user_id)


@router.get("/summary/totals")
def borrowed_totals(user_id: int = Depends(get_current_user), db: Session = Depends(get_db)):
    return {"totals": summary_utils.get_borrowed_totals(db, user_id)}


@router.get("/repayments/all")
def all_repayments(
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    user_id: int = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return summary_utils.get_all_repayments(db, user_id, start_date, end_date)


@router.get("/repayments/summary")
def repayment_summary(
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    user_id: int = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return {"summary": summary_utils.get_repayment_summary(db, user_id, start_date, end_date)}


@router.get("/{borrowed_id}")
def get_borrowed(borrowed_id: str, user_id: int = Depends(get_current_user), db: Session = Depends(get_db)):
    record = borrowed_utils.get_borrowed_by_id(db, user_id, borrowed_id)
    payments = borrowed_utils.get_repayments(db, user_id, record)
    return {"summary": summary_utils.get_borrowed_history(record, payments)}


@router.get("/{borrowed_id}/repayments")
def get_repayments(borrowed_id: str, user_id: int = Depends(get_current_user), db: Session = Depends(get_db)):
    record = borrowed_utils.get_borrowed_by_id(db, user_id, borrowed_id)
    payments = borrowed_utils.get_repayments(db, user_id, record)
    return {"summary": summary_utils.get_borrowed_history(record, payments)}


@router.put("/{borrowed_id}")
def update_borrowed(
    borrowed_id: str,
    payload: BorrowedUpdate,
    user_id: int = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    record = borrowed_utils.update_borrowed(db, user_id, borrowed_id, payload.model_dump(exclude_unset=True))
    return {"message": "Record updated successfully", "borrowedMoney": borrowed_to_dict(record)}


@router.post("/{borrowed_id}/repay", status_code=status.HTTP_201_CREATED)
def repay(
    borrowed_id: str,
    payload: RepayIn,
    user_id: int = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    payment, record = borrowed_utils.repay(db, user_id, borrowed_id, payload.model_dump())
    return {
        "message": "Repayment recorded successfully",
        "payment": payment_to_dict(payment, with_reference=True),
        "borrowedMoney": borrowed_to_dict(record),
        "remaining_amount": record.remaining_amount,
    }


@router.delete("/{borrowed_id}")
def delete_borrowed(borrowed_id: str, user_id: int = Depends(get_current_user), db: Session = Depends(get_db)):
    borrowed_utils.delete_borrowed(db, user_id, borrowed_id)
    return {"message": "Record deleted successfully"}
