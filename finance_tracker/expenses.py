# finance_tracker/expenses.py

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from . import crud
from .auth import get_current_user
from .config import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from .database import get_db
from .schemas import ExpenseCreate, ExpenseUpdate, PaymentMode
from .serializers import expense_to_dict
from .summary_utils import get_expense_analytics

router = APIRouter(prefix="/expenses", tags=["expenses"])


@router.post("", status_code=status.HTTP_201_CREATED)
def create_expense(
    payload: ExpenseCreate,
    user_id: int = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    expense = crud.add_expense(db, user_id, payload.model_dump())
    return {"message": "Expense created successfully", "expense": expense_to_dict(expense)}


@router.get("")
def list_expenses(
    page: int = Query(1, ge=1),
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    category_id: Optional[str] = None,
    payment_mode: Optional[PaymentMode] = None,
    min_amount: Optional[float] = None,
    max_amount: Optional[float] = None,
    sort_by: str = "date",
    sort_order: str = "desc",
    user_id: int = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    expenses, meta = crud.get_filtered_expenses(
        db,
        user_id,
        page=page,
        limit=limit,
        start_date=start_date,
        end_date=end_date,
        category_id=category_id,
        payment_mode=payment_mode,
        min_amount=min_amount,
        max_amount=max_amount,
        sort_by=sort_by,
        sort_order=sort_order,
    )
    return {"expenses": [expense_to_dict(e) for e in expenses], **meta}


@router.get("/analytics/summary")
def expense_analytics(
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    user_id: int = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return get_expense_analytics(db, user_id, start_date, end_date)


@router.get("/{expense_id}")
def get_expense(expense_id: str, user_id: int = Depends(get_current_user), db: Session = Depends(get_db)):
    expense = crud.get_expense_by_id(db, user_id, expense_id)
    return {"expense": expense_to_dict(expense)}


@router.put("/{expense_id}")
def update_expense(
    expense_id: str,
    payload: ExpenseUpdate,
    user_id: int = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    expense = crud.update_expense(db, user_id, expense_id, payload.model_dump(exclude_unset=True))
    return {"message": "Expense updated successfully", "expense": expense_to_dict(expense)}


@router.delete("/{expense_id}")
def delete_expense(expense_id: str, user_id: int = Depends(get_current_user), db: Session = Depends(get_db)):
    crud.delete_expense(db, user_id, expense_id)
    return {"message": "Expense deleted successfully"}
