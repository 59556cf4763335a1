# finance_tracker/crud.py

import math

from sqlalchemy.orm import Session, joinedload
import structlog

from .errors import NotFoundError, ValidationError
from .models import Expense
from .validators import parse_id, validate_expense_references

logger = structlog.get_logger(__name__)

EXPENSE_SORT_FIELDS = ("date", "amount", "created_at")


# --- Shared list helpers ---
def apply_date_range(query, column, start_date=None, end_date=None):
    # Both bounds inclusive
    if start_date:
        query = query.filter(column >= start_date)
    if end_date:
        query = query.filter(column <= end_date)
    return query


def apply_amount_range(query, column, min_amount=None, max_amount=None):
    if min_amount is not None:
        query = query.filter(column >= min_amount)
    if max_amount is not None:
        query = query.filter(column <= max_amount)
    return query


def apply_sort(query, model, sort_by: str, sort_order: str, allowed):
    if sort_by not in allowed:
        raise ValidationError(
            f"Invalid sort field. Must be one of: {', '.join(allowed)}", field="sort_by", value=sort_by
        )
    if sort_order not in ("asc", "desc"):
        raise ValidationError("Sort order must be 'asc' or 'desc'", field="sort_order", value=sort_order)
    column = getattr(model, sort_by)
    primary = column.desc() if sort_order == "desc" else column.asc()
    # id as tie-breaker keeps pages stable
    return query.order_by(primary, model.id.desc() if sort_order == "desc" else model.id.asc())


def paginate(query, page: int, limit: int):
    total = query.count()
    items = query.offset((page - 1) * limit).limit(limit).all()
    return items, {
        "total": total,
        "totalPages": math.ceil(total / limit) if limit else 0,
        "currentPage": page,
    }


# --- Expenses ---
def _expense_query(db: Session, user_id: int):
    return db.query(Expense).options(
        joinedload(Expense.category),
        joinedload(Expense.credit_card),
        joinedload(Expense.borrowed),
    ).filter(Expense.user_id == user_id)


def add_expense(db: Session, user_id: int, data: dict):
    refs = validate_expense_references(db, user_id, data)
    expense = Expense(
        user_id=user_id,
        amount=data["amount"],
        payment_mode=data["payment_mode"],
        note=data.get("note"),
        is_recurring=bool(data.get("is_recurring")),
        recurring_frequency=data.get("recurring_frequency"),
        **refs,
    )
    if data.get("date"):
        expense.date = data["date"]
    db.add(expense)
    db.commit()
    db.refresh(expense)
    logger.info("expense_created", user_id=user_id, expense_id=expense.id, amount=expense.amount,
                payment_mode=expense.payment_mode)
    return expense


def get_expense_by_id(db: Session, user_id: int, expense_id):
    expense = _expense_query(db, user_id).filter(Expense.id == parse_id(expense_id)).first()
    if not expense:
        raise NotFoundError("Expense not found")
    return expense


def get_filtered_expenses(
    db: Session,
    user_id: int,
    page: int = 1,
    limit: int = 20,
    start_date=None,
    end_date=None,
    category_id=None,
    payment_mode: str = None,
    min_amount: float = None,
    max_amount: float = None,
    sort_by: str = "date",
    sort_order: str = "desc",
    credit_card_id=None,
):
    query = _expense_query(db, user_id)
    query = apply_date_range(query, Expense.date, start_date, end_date)

    category_id = parse_id(category_id, "category_id")
    if category_id:
        query = query.filter(Expense.category_id == category_id)
    if credit_card_id:
        query = query.filter(Expense.credit_card_id == credit_card_id)
    if payment_mode:
        query = query.filter(Expense.payment_mode == payment_mode)

    query = apply_amount_range(query, Expense.amount, min_amount, max_amount)
    query = apply_sort(query, Expense, sort_by, sort_order, EXPENSE_SORT_FIELDS)

    expenses, meta = paginate(query, page, limit)
    meta["hasNext"] = page * limit < meta["total"]
    meta["hasPrev"] = page > 1
    return expenses, meta


def update_expense(db: Session, user_id: int, expense_id, changes: dict):
    expense = get_expense_by_id(db, user_id, expense_id)

    for field in ("amount", "payment_mode", "is_recurring"):
        if field in changes and changes[field] is None:
            raise ValidationError(f"{field} cannot be empty", field=field)

    # Validate the expense as it will look after the update
    merged = {
        "category_id": expense.category_id,
        "payment_mode": expense.payment_mode,
        "credit_card_id": expense.credit_card_id,
        "borrowed_id": expense.borrowed_id,
    }
    merged.update({k: v for k, v in changes.items() if k in merged})
    refs = validate_expense_references(db, user_id, merged)

    for field in ("amount", "payment_mode", "note", "is_recurring", "recurring_frequency"):
        if field in changes:
            setattr(expense, field, changes[field])
    if changes.get("date"):
        expense.date = changes["date"]
    for field, value in refs.items():
        setattr(expense, field, value)

    db.commit()
    db.refresh(expense)
    logger.info("expense_updated", user_id=user_id, expense_id=expense.id, fields=sorted(changes))
    return expense


def delete_expense(db: Session, user_id: int, expense_id):
    expense = get_expense_by_id(db, user_id, expense_id)
    deleted_id = expense.id
    db.delete(expense)
    db.commit()
    logger.info("expense_deleted", user_id=user_id, expense_id=deleted_id)
