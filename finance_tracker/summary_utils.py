# finance_tracker/summary_utils.py
# Read-only aggregate reports. Empty result sets come back as zeros/empty lists.

import calendar
from datetime import date, datetime

from sqlalchemy import extract, func
from sqlalchemy.orm import Session, joinedload

from .crud import apply_date_range
from .models import BorrowedMoney, Category, CreditCard, Expense, Payment, round_money, utcnow
from .reconciliation import PARTIAL, PENDING
from .serializers import borrowed_to_dict, credit_card_to_dict, payment_to_dict

MONTHLY_TREND_LIMIT = 12


def _current_month_bounds(today: date = None):
    today = today or date.today()
    last_day = calendar.monthrange(today.year, today.month)[1]
    return today.replace(day=1), today.replace(day=last_day)


def _datetime_bounds(start_date=None, end_date=None):
    # created_at is a timestamp; make the end date cover the whole day
    start = datetime.combine(start_date, datetime.min.time()) if start_date else None
    end = datetime.combine(end_date, datetime.max.time()) if end_date else None
    return start, end


def get_expense_analytics(db: Session, user_id: int, start_date=None, end_date=None):
    def scoped(query):
        query = query.filter(Expense.user_id == user_id)
        return apply_date_range(query, Expense.date, start_date, end_date)

    total_amount, total_count = scoped(
        db.query(func.coalesce(func.sum(Expense.amount), 0), func.count(Expense.id))
    ).one()

    by_category = scoped(
        db.query(
            Category.id.label("category_id"),
            Category.name,
            Category.color,
            Category.icon,
            func.sum(Expense.amount).label("total"),
            func.count(Expense.id).label("count"),
        ).select_from(Expense).join(Category, Expense.category_id == Category.id)
    ).group_by(Category.id, Category.name, Category.color, Category.icon).order_by(
        func.sum(Expense.amount).desc()
    ).all()

    by_payment_mode = scoped(
        db.query(
            Expense.payment_mode,
            func.sum(Expense.amount).label("total"),
            func.count(Expense.id).label("count"),
        )
    ).group_by(Expense.payment_mode).order_by(func.sum(Expense.amount).desc()).all()

    year = extract("year", Expense.date)
    month = extract("month", Expense.date)
    monthly = scoped(
        db.query(
            year.label("year"),
            month.label("month"),
            func.sum(Expense.amount).label("total"),
            func.count(Expense.id).label("count"),
        )
    ).group_by(year, month).order_by(year.desc(), month.desc()).limit(MONTHLY_TREND_LIMIT).all()
    # Most recent buckets, oldest first
    monthly = list(reversed(monthly))

    return {
        "summary": {
            "total_amount": float(total_amount or 0),
            "total_count": total_count or 0,
        },
        "by_category": [
            {
                "category_id": row.category_id,
                "category_name": row.name,
                "category_color": row.color,
                "category_icon": row.icon,
                "total": float(row.total),
                "count": row.count,
            }
            for row in by_category
        ],
        "by_payment_mode": [
            {"payment_mode": row.payment_mode, "total": float(row.total), "count": row.count}
            for row in by_payment_mode
        ],
        "monthly_trend": [
            {"year": int(row.year), "month": int(row.month), "total": float(row.total), "count": row.count}
            for row in monthly
        ],
    }


def get_credit_card_summary(db: Session, user_id: int, card: CreditCard, today: date = None):
    start, end = _current_month_bounds(today)

    month_total, month_count = db.query(
        func.coalesce(func.sum(Expense.amount), 0), func.count(Expense.id)
    ).filter(
        Expense.user_id == user_id,
        Expense.credit_card_id == card.id,
        Expense.date >= start,
        Expense.date <= end,
    ).one()
    month_total = float(month_total or 0)

    last_payment = db.query(Payment).filter(
        Payment.user_id == user_id,
        Payment.type == "credit_card",
        Payment.credit_card_id == card.id,
    ).order_by(Payment.payment_date.desc(), Payment.id.desc()).first()

    return {
        "creditCard": credit_card_to_dict(card),
        "current_month": {"expenses": month_total, "count": month_count or 0},
        "last_payment": payment_to_dict(last_payment) if last_payment else None,
        "available_limit": card.limit_amount - month_total if card.limit_amount is not None else None,
    }


def get_payment_totals(db: Session, user_id: int, start_date=None, end_date=None):
    query = db.query(
        Payment.type, func.sum(Payment.amount), func.count(Payment.id)
    ).filter(Payment.user_id == user_id)
    query = apply_date_range(query, Payment.payment_date, start_date, end_date)

    totals = {
        "credit_card": {"amount": 0, "count": 0},
        "borrowed": {"amount": 0, "count": 0},
    }
    for payment_type, amount, count in query.group_by(Payment.type).all():
        if payment_type in totals:
            totals[payment_type] = {"amount": float(amount or 0), "count": count}
    return totals


def get_borrowed_totals(db: Session, user_id: int):
    rows = db.query(
        BorrowedMoney.type,
        func.sum(BorrowedMoney.amount),
        func.sum(BorrowedMoney.repaid_amount),
        func.count(BorrowedMoney.id),
    ).filter(BorrowedMoney.user_id == user_id).group_by(BorrowedMoney.type).all()

    totals = {
        "borrowed": {"amount": 0, "repaid": 0, "remaining": 0, "count": 0},
        "lent": {"amount": 0, "repaid": 0, "remaining": 0, "count": 0},
    }
    for record_type, amount, repaid, count in rows:
        if record_type in totals:
            amount, repaid = float(amount or 0), float(repaid or 0)
            totals[record_type] = {
                "amount": amount,
                "repaid": repaid,
                "remaining": round_money(amount - repaid),
                "count": count,
            }
    return totals


def get_overdue_records(db: Session, user_id: int, now: datetime = None):
    now = now or utcnow()
    records = db.query(BorrowedMoney).filter(
        BorrowedMoney.user_id == user_id,
        BorrowedMoney.status.in_([PENDING, PARTIAL]),
    ).order_by(BorrowedMoney.created_at.desc(), BorrowedMoney.id.desc()).all()

    overdue = [
        {
            "id": record.id,
            "name": record.name,
            "amount": record.amount,
            "type": record.type,
            "repaid_amount": record.repaid_amount,
            "remaining_amount": record.remaining_amount,
            "status": record.status,
            "created_at": record.created_at.isoformat(),
            "days_since_created": max((now - record.created_at).days, 0),
        }
        for record in records
    ]
    return {
        "overdue_records": overdue,
        "count": len(overdue),
        "total_remaining": round_money(sum(r["remaining_amount"] for r in overdue)),
    }


def get_repayment_summary(db: Session, user_id: int, start_date=None, end_date=None):
    start, end = _datetime_bounds(start_date, end_date)

    def scoped(query):
        query = query.filter(BorrowedMoney.user_id == user_id)
        return apply_date_range(query, BorrowedMoney.created_at, start, end)

    by_status = scoped(
        db.query(
            BorrowedMoney.status,
            func.count(BorrowedMoney.id),
            func.sum(BorrowedMoney.amount),
            func.sum(BorrowedMoney.repaid_amount),
        )
    ).group_by(BorrowedMoney.status).all()

    count, amount, repaid = scoped(
        db.query(
            func.count(BorrowedMoney.id),
            func.coalesce(func.sum(BorrowedMoney.amount), 0),
            func.coalesce(func.sum(BorrowedMoney.repaid_amount), 0),
        )
    ).one()
    amount, repaid = float(amount or 0), float(repaid or 0)

    return {
        "by_status": [
            {
                "status": status,
                "count": status_count,
                "total_amount": float(status_amount or 0),
                "total_repaid": float(status_repaid or 0),
            }
            for status, status_count, status_amount, status_repaid in by_status
        ],
        "total": {
            "count": count or 0,
            "amount": amount,
            "repaid": repaid,
            "remaining": round_money(amount - repaid),
        },
    }


def get_all_repayments(db: Session, user_id: int, start_date=None, end_date=None):
    query = db.query(Payment).options(joinedload(Payment.borrowed)).filter(
        Payment.user_id == user_id, Payment.type == "borrowed"
    )
    query = apply_date_range(query, Payment.payment_date, start_date, end_date)
    payments = query.order_by(Payment.payment_date.desc(), Payment.id.desc()).all()

    total_repaid = round_money(sum(p.amount for p in payments))
    total_amount = db.query(func.coalesce(func.sum(BorrowedMoney.amount), 0)).filter(
        BorrowedMoney.user_id == user_id
    ).scalar()
    total_amount = float(total_amount or 0)

    return {
        "payments": [payment_to_dict(p, with_reference=True) for p in payments],
        "summary": {
            "total_amount": total_amount,
            "total_repaid": total_repaid,
            "total_remaining": round_money(total_amount - total_repaid),
            "payment_count": len(payments),
        },
    }


def get_borrowed_history(record: BorrowedMoney, payments):
    return {
        "borrowedMoney": borrowed_to_dict(record),
        "payments": [payment_to_dict(p) for p in payments],
        "total_paid": record.repaid_amount,
        "total_remaining": record.remaining_amount,
        "payment_count": len(payments),
    }
