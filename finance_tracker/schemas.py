# finance_tracker/schemas.py

import datetime
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, BeforeValidator, Field

PaymentMode = Literal["cash", "credit_card", "borrowed"]
RecurringFrequency = Literal["daily", "weekly", "monthly", "yearly"]
BorrowedType = Literal["borrowed", "lent"]
BorrowedStatus = Literal["pending", "partial", "repaid"]
PaymentMethod = Literal["cash", "bank_transfer", "upi", "cheque"]
PaymentType = Literal["credit_card", "borrowed"]

# Ids arrive as JSON numbers or strings; validators.parse_id checks the shape
EntityId = Optional[Union[int, str]]


def _strip(value):
    return value.strip() if isinstance(value, str) else value


StrippedStr = Annotated[str, BeforeValidator(_strip)]


# --- Auth ---
class RegisterIn(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    email: str = Field(..., min_length=3, max_length=255)
    password: str = Field(..., min_length=6, max_length=72)


class LoginIn(BaseModel):
    email: str
    password: str


# --- Categories ---
class CategoryCreate(BaseModel):
    name: StrippedStr = Field(..., min_length=1, max_length=50)
    color: Optional[str] = None
    icon: Optional[str] = None


class CategoryUpdate(BaseModel):
    name: Optional[StrippedStr] = Field(None, min_length=1, max_length=50)
    color: Optional[str] = None
    icon: Optional[str] = None


# --- Credit cards ---
class CreditCardCreate(BaseModel):
    bank_name: StrippedStr = Field(..., min_length=1, max_length=100)
    card_number: StrippedStr = Field(..., pattern=r"^\d{4}$")
    limit_amount: Optional[float] = Field(None, ge=0)
    due_date: int = Field(..., ge=1, le=31)


class CreditCardUpdate(BaseModel):
    bank_name: Optional[StrippedStr] = Field(None, min_length=1, max_length=100)
    card_number: Optional[StrippedStr] = Field(None, pattern=r"^\d{4}$")
    limit_amount: Optional[float] = Field(None, ge=0)
    due_date: Optional[int] = Field(None, ge=1, le=31)
    is_active: Optional[bool] = None


# --- Borrowed money ---
class BorrowedCreate(BaseModel):
    name: StrippedStr = Field(..., min_length=1, max_length=100)
    phone: Optional[StrippedStr] = Field(None, max_length=20)
    amount: float = Field(..., gt=0)
    type: BorrowedType
    note: Optional[StrippedStr] = Field(None, max_length=500)


class BorrowedUpdate(BaseModel):
    name: Optional[StrippedStr] = Field(None, min_length=1, max_length=100)
    phone: Optional[StrippedStr] = Field(None, max_length=20)
    amount: Optional[float] = Field(None, gt=0)
    type: Optional[BorrowedType] = None
    note: Optional[StrippedStr] = Field(None, max_length=500)


class RepayIn(BaseModel):
    amount: float = Field(..., gt=0)
    payment_date: datetime.date
    note: Optional[StrippedStr] = Field(None, max_length=500)
    payment_method: Optional[PaymentMethod] = None


# --- Expenses ---
class ExpenseCreate(BaseModel):
    amount: float = Field(..., gt=0)
    category_id: EntityId = None
    payment_mode: PaymentMode
    credit_card_id: EntityId = None
    borrowed_id: EntityId = None
    date: Optional[datetime.date] = None
    note: Optional[StrippedStr] = Field(None, max_length=500)
    is_recurring: bool = False
    recurring_frequency: Optional[RecurringFrequency] = None


class ExpenseUpdate(BaseModel):
    amount: Optional[float] = Field(None, gt=0)
    category_id: EntityId = None
    payment_mode: Optional[PaymentMode] = None
    credit_card_id: EntityId = None
    borrowed_id: EntityId = None
    date: Optional[datetime.date] = None
    note: Optional[StrippedStr] = Field(None, max_length=500)
    is_recurring: Optional[bool] = None
    recurring_frequency: Optional[RecurringFrequency] = None


# --- Payments ---
class PaymentCreate(BaseModel):
    type: PaymentType
    reference_id: Union[int, str]
    amount: float = Field(..., gt=0)
    payment_date: Optional[datetime.date] = None
    note: Optional[StrippedStr] = Field(None, max_length=500)
    payment_method: PaymentMethod = "bank_transfer"


class PaymentUpdate(BaseModel):
    amount: Optional[float] = Field(None, gt=0)
    payment_date: Optional[datetime.date] = None
    note: Optional[StrippedStr] = Field(None, max_length=500)
    payment_method: Optional[PaymentMethod] = None
