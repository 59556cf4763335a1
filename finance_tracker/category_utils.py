# finance_tracker/category_utils.py

from sqlalchemy import func
from sqlalchemy.orm import Session
import structlog

from .errors import ConflictError, NotFoundError
from .models import Category, Expense
from .validators import parse_id

logger = structlog.get_logger(__name__)

DEFAULT_COLOR = "#667eea"
DEFAULT_ICON = "💰"

DEFAULT_CATEGORIES = [
    {"name": "Food & Dining", "color": "#FF6B6B", "icon": "🍽️"},
    {"name": "Transportation", "color": "#4ECDC4", "icon": "🚗"},
    {"name": "Shopping", "color": "#45B7D1", "icon": "🛍️"},
    {"name": "Entertainment", "color": "#96CEB4", "icon": "🎬"},
    {"name": "Healthcare", "color": "#FFEAA7", "icon": "🏥"},
    {"name": "Utilities", "color": "#DDA0DD", "icon": "💡"},
    {"name": "Travel", "color": "#98D8C8", "icon": "✈️"},
    {"name": "Education", "color": "#F7DC6F", "icon": "📚"},
    {"name": "Gifts", "color": "#BB8FCE", "icon": "🎁"},
    {"name": "Other", "color": "#AEB6BF", "icon": "📌"},
]


def get_all_categories(db: Session, user_id: int):
    """Default categories first, then alphabetical"""
    return db.query(Category).filter(Category.user_id == user_id).order_by(
        Category.is_default.desc(), Category.name.asc()
    ).all()


def get_category_by_id(db: Session, user_id: int, category_id):
    category = db.query(Category).filter(
        Category.id == parse_id(category_id), Category.user_id == user_id
    ).first()
    if not category:
        raise NotFoundError("Category not found")
    return category


def _ensure_unique_name(db: Session, user_id: int, name: str, exclude_id: int = None):
    # Case-insensitive per user
    query = db.query(Category).filter(
        Category.user_id == user_id, func.lower(Category.name) == name.lower()
    )
    if exclude_id is not None:
        query = query.filter(Category.id != exclude_id)
    if query.first():
        raise ConflictError("Category with this name already exists", field="name", value=name)


def add_category(db: Session, user_id: int, name: str, color: str = None, icon: str = None):
    _ensure_unique_name(db, user_id, name)
    category = Category(
        user_id=user_id,
        name=name,
        color=color or DEFAULT_COLOR,
        icon=icon or DEFAULT_ICON,
    )
    db.add(category)
    db.commit()
    db.refresh(category)
    logger.info("category_created", user_id=user_id, category_id=category.id, name=name)
    return category


def update_category(db: Session, user_id: int, category_id, changes: dict):
    category = get_category_by_id(db, user_id, category_id)

    if changes.get("name"):
        _ensure_unique_name(db, user_id, changes["name"], exclude_id=category.id)
        category.name = changes["name"]
    if changes.get("color"):
        category.color = changes["color"]
    if changes.get("icon"):
        category.icon = changes["icon"]

    db.commit()
    db.refresh(category)
    logger.info("category_updated", user_id=user_id, category_id=category.id)
    return category


def delete_category(db: Session, user_id: int, category_id):
    category = get_category_by_id(db, user_id, category_id)

    if category.is_default:
        raise ConflictError("Cannot delete default categories")

    in_use = db.query(Expense.id).filter(
        Expense.user_id == user_id, Expense.category_id == category.id
    ).first()
    if in_use:
        logger.info("category_delete_blocked", user_id=user_id, category_id=category.id)
        raise ConflictError(
            "Cannot delete category with associated expenses. Please update or delete expenses first."
        )

    deleted_id = category.id
    db.delete(category)
    db.commit()
    logger.info("category_deleted", user_id=user_id, category_id=deleted_id)


def setup_default_categories(db: Session, user_id: int):
    """Seed the fixed default categories; only allowed while the user has none."""
    existing = db.query(Category.id).filter(Category.user_id == user_id).first()
    if existing:
        raise ConflictError("Default categories already set up")

    for cat in DEFAULT_CATEGORIES:
        db.add(Category(user_id=user_id, is_default=True, **cat))
    db.commit()
    logger.info("default_categories_created", user_id=user_id, count=len(DEFAULT_CATEGORIES))
    return len(DEFAULT_CATEGORIES)
