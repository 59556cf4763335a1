# finance_tracker/serializers.py
# Shape ORM rows into JSON-ready dicts for the route handlers.


def _iso(value):
    return value.isoformat() if value is not None else None


def _timestamps(obj):
    return {"created_at": _iso(obj.created_at), "updated_at": _iso(obj.updated_at)}


def category_to_dict(category):
    return {
        "id": category.id,
        "name": category.name,
        "color": category.color,
        "icon": category.icon,
        "is_default": category.is_default,
        **_timestamps(category),
    }


def credit_card_to_dict(card):
    return {
        "id": card.id,
        "bank_name": card.bank_name,
        "card_number": card.card_number,
        "limit_amount": card.limit_amount,
        "due_date": card.due_date,
        "is_active": card.is_active,
        **_timestamps(card),
    }


def borrowed_to_dict(record):
    return {
        "id": record.id,
        "name": record.name,
        "phone": record.phone,
        "amount": record.amount,
        "type": record.type,
        "status": record.status,
        "repaid_amount": record.repaid_amount,
        "remaining_amount": record.remaining_amount,
        "note": record.note,
        **_timestamps(record),
    }


def expense_to_dict(expense):
    category = expense.category
    card = expense.credit_card
    borrowed = expense.borrowed
    return {
        "id": expense.id,
        "amount": expense.amount,
        "category_id": expense.category_id,
        "category": {
            "id": category.id,
            "name": category.name,
            "color": category.color,
            "icon": category.icon,
        } if category else None,
        "payment_mode": expense.payment_mode,
        "credit_card_id": expense.credit_card_id,
        "credit_card": {
            "id": card.id,
            "bank_name": card.bank_name,
            "card_number": card.card_number,
        } if card else None,
        "borrowed_id": expense.borrowed_id,
        "borrowed": {
            "id": borrowed.id,
            "name": borrowed.name,
            "amount": borrowed.amount,
            "type": borrowed.type,
        } if borrowed else None,
        "date": _iso(expense.date),
        "note": expense.note,
        "is_recurring": expense.is_recurring,
        "recurring_frequency": expense.recurring_frequency,
        **_timestamps(expense),
    }


def payment_to_dict(payment, with_reference=False):
    data = {
        "id": payment.id,
        "type": payment.type,
        "reference_id": payment.reference_id,
        "amount": payment.amount,
        "payment_date": _iso(payment.payment_date),
        "note": payment.note,
        "payment_method": payment.payment_method,
        **_timestamps(payment),
    }
    if with_reference:
        ref = payment.reference
        if ref is None:
            data["reference"] = None
        elif payment.type == "borrowed":
            data["reference"] = {"id": ref.id, "name": ref.name, "amount": ref.amount, "type": ref.type}
        else:
            data["reference"] = {"id": ref.id, "bank_name": ref.bank_name, "card_number": ref.card_number}
    return data
