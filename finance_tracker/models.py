# finance_tracker/models.py

from datetime import date, datetime, timezone

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from .database import Base

# Amounts are stored as Float; compare and store them at cent precision
MONEY_PLACES = 2


def round_money(value) -> float:
    return round(float(value or 0), MONEY_PLACES)


def utcnow() -> datetime:
    """Current UTC time as a naive datetime, matching the DateTime columns."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class TimestampMixin:
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)


class User(TimestampMixin, Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    email = Column(String, unique=True, nullable=False)
    password = Column(String, nullable=False)

    categories = relationship("Category", back_populates="owner")
    expenses = relationship("Expense", back_populates="owner")


class Category(TimestampMixin, Base):
    __tablename__ = "categories"
    __table_args__ = (UniqueConstraint("user_id", "name", name="uq_category_user_name"),)

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    name = Column(String(50), nullable=False)
    color = Column(String, nullable=False, default="#667eea")
    icon = Column(String, nullable=False, default="💰")
    is_default = Column(Boolean, nullable=False, default=False)

    owner = relationship("User", back_populates="categories")
    expenses = relationship("Expense", back_populates="category")


class CreditCard(TimestampMixin, Base):
    __tablename__ = "credit_cards"
    __table_args__ = (
        CheckConstraint("due_date BETWEEN 1 AND 31", name="ck_credit_card_due_date"),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    bank_name = Column(String(100), nullable=False)
    card_number = Column(String(4), nullable=False)  # last 4 digits only
    limit_amount = Column(Float, nullable=True)
    due_date = Column(Integer, nullable=False)  # day of month
    is_active = Column(Boolean, nullable=False, default=True)

    expenses = relationship("Expense", back_populates="credit_card")
    payments = relationship("Payment", back_populates="credit_card")


class BorrowedMoney(TimestampMixin, Base):
    __tablename__ = "borrowed_money"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    name = Column(String(100), nullable=False)
    phone = Column(String(20))
    amount = Column(Float, nullable=False)
    type = Column(String, nullable=False)  # 'borrowed' or 'lent'
    status = Column(String, nullable=False, default="pending")  # derived, see reconciliation
    repaid_amount = Column(Float, nullable=False, default=0)
    note = Column(String(500))

    expenses = relationship("Expense", back_populates="borrowed")
    payments = relationship("Payment", back_populates="borrowed")

    @property
    def remaining_amount(self):
        return round_money((self.amount or 0) - (self.repaid_amount or 0))


class Expense(TimestampMixin, Base):
    __tablename__ = "expenses"
    __table_args__ = (
        Index("ix_expenses_user_date", "user_id", "date"),
        Index("ix_expenses_user_category", "user_id", "category_id"),
        Index("ix_expenses_user_payment_mode", "user_id", "payment_mode"),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    amount = Column(Float, nullable=False)
    category_id = Column(Integer, ForeignKey("categories.id"), nullable=False)
    payment_mode = Column(String, nullable=False)  # 'cash', 'credit_card' or 'borrowed'
    credit_card_id = Column(Integer, ForeignKey("credit_cards.id"), nullable=True)
    borrowed_id = Column(Integer, ForeignKey("borrowed_money.id"), nullable=True)
    date = Column(Date, nullable=False, default=date.today)
    note = Column(String(500))
    is_recurring = Column(Boolean, nullable=False, default=False)
    recurring_frequency = Column(String, nullable=True)

    owner = relationship("User", back_populates="expenses")
    category = relationship("Category", back_populates="expenses")
    credit_card = relationship("CreditCard", back_populates="expenses")
    borrowed = relationship("BorrowedMoney", back_populates="expenses")


class Payment(TimestampMixin, Base):
    """A payment against a credit card or a borrowed/lent record.

    The reference is a tagged union on ``type``: exactly one of
    ``credit_card_id`` / ``borrowed_id`` is set, matching the tag.
    """

    __tablename__ = "payments"
    __table_args__ = (
        CheckConstraint(
            "(type = 'credit_card' AND credit_card_id IS NOT NULL AND borrowed_id IS NULL) OR "
            "(type = 'borrowed' AND borrowed_id IS NOT NULL AND credit_card_id IS NULL)",
            name="ck_payment_reference_matches_type",
        ),
        Index("ix_payments_user_date", "user_id", "payment_date"),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    type = Column(String, nullable=False)  # 'credit_card' or 'borrowed'
    credit_card_id = Column(Integer, ForeignKey("credit_cards.id"), nullable=True)
    borrowed_id = Column(Integer, ForeignKey("borrowed_money.id"), nullable=True)
    amount = Column(Float, nullable=False)
    payment_date = Column(Date, nullable=False, default=date.today)
    note = Column(String(500))
    payment_method = Column(String, nullable=False, default="bank_transfer")

    credit_card = relationship("CreditCard", back_populates="payments")
    borrowed = relationship("BorrowedMoney", back_populates="payments")

    @property
    def reference_id(self):
        return self.credit_card_id if self.type == "credit_card" else self.borrowed_id

    @property
    def reference(self):
        return self.credit_card if self.type == "credit_card" else self.borrowed
