# finance_tracker/validators.py
# Existence/ownership checks run before any write that references another entity.

from sqlalchemy.orm import Session

from .errors import InvalidIdFormat, InvalidReferenceError, ValidationError
from .models import BorrowedMoney, Category, CreditCard

# Largest value an Integer primary key holds on Postgres
MAX_ID = 2**31 - 1

ENTITY_LABELS = {
    "category_id": "Category",
    "credit_card_id": "Credit card",
    "borrowed_id": "Borrowed money",
    "reference_id": "Reference",
}


def parse_id(value, field: str = "id"):
    """Return ``value`` as an int id, or None when it is empty.

    Raises InvalidIdFormat for anything that is not a positive integer so a
    malformed id never reaches the store.
    """
    if value is None:
        return None
    if isinstance(value, bool):
        raise InvalidIdFormat(f"Invalid {field} format. ID must be a positive integer.", field=field, value=value)
    if isinstance(value, int):
        entity_id = value
    else:
        text = str(value).strip()
        if text == "":
            return None
        if not (text.isascii() and text.isdigit()):
            raise InvalidIdFormat(f"Invalid {field} format. ID must be a positive integer.", field=field, value=value)
        entity_id = int(text)
    if entity_id <= 0 or entity_id > MAX_ID:
        raise InvalidIdFormat(f"Invalid {field} format. ID must be a positive integer.", field=field, value=value)
    return entity_id


def require_id(value, field: str = "id"):
    entity_id = parse_id(value, field)
    if entity_id is None:
        label = ENTITY_LABELS.get(field, field)
        raise ValidationError(f"{label} is required", field=field)
    return entity_id


def _get_owned(db: Session, model, user_id: int, entity_id: int, field: str, for_update=False):
    query = db.query(model).filter(model.id == entity_id, model.user_id == user_id)
    if for_update:
        query = query.with_for_update()
    entity = query.first()
    if entity is None:
        label = ENTITY_LABELS.get(field, model.__name__)
        raise InvalidReferenceError(
            f"{label} not found or does not belong to you", field=field, value=entity_id
        )
    return entity


def get_owned_category(db: Session, user_id: int, category_id, field="category_id"):
    return _get_owned(db, Category, user_id, require_id(category_id, field), field)


def get_owned_credit_card(db: Session, user_id: int, card_id, field="credit_card_id"):
    return _get_owned(db, CreditCard, user_id, require_id(card_id, field), field)


def get_owned_borrowed(db: Session, user_id: int, borrowed_id, field="borrowed_id", for_update=False):
    return _get_owned(db, BorrowedMoney, user_id, require_id(borrowed_id, field), field, for_update)


# Payment.type -> lookup for its reference
PAYMENT_REFERENCE_LOOKUPS = {
    "credit_card": get_owned_credit_card,
    "borrowed": get_owned_borrowed,
}


def resolve_payment_reference(db: Session, user_id: int, payment_type: str, reference_id):
    lookup = PAYMENT_REFERENCE_LOOKUPS.get(payment_type)
    if lookup is None:
        raise ValidationError(
            'Invalid payment type. Must be either "credit_card" or "borrowed"',
            field="type",
            value=payment_type,
        )
    return lookup(db, user_id, reference_id, field="reference_id")


def validate_expense_references(db: Session, user_id: int, data: dict):
    """Check the category and the mode-dependent reference of an expense.

    ``data`` holds the merged field values the expense will end up with.
    Returns the cleaned reference ids; only the reference that matches the
    payment mode is kept.
    """
    get_owned_category(db, user_id, data.get("category_id"))

    mode = data.get("payment_mode")
    refs = {"category_id": parse_id(data.get("category_id"), "category_id"),
            "credit_card_id": None, "borrowed_id": None}

    if mode == "credit_card":
        if parse_id(data.get("credit_card_id"), "credit_card_id") is None:
            raise ValidationError("Credit card is required for credit card payment", field="credit_card_id")
        refs["credit_card_id"] = get_owned_credit_card(db, user_id, data.get("credit_card_id")).id
    elif mode == "borrowed":
        if parse_id(data.get("borrowed_id"), "borrowed_id") is None:
            raise ValidationError("Borrowed money reference is required", field="borrowed_id")
        refs["borrowed_id"] = get_owned_borrowed(db, user_id, data.get("borrowed_id")).id

    return refs
