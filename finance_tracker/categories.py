# finance_tracker/categories.py

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from . import category_utils
from .auth import get_current_user
from .database import get_db
from .schemas import CategoryCreate, CategoryUpdate
from .serializers import category_to_dict

router = APIRouter(prefix="/categories", tags=["categories"])


@router.post("", status_code=status.HTTP_201_CREATED)
def add_category(
    payload: CategoryCreate,
    user_id: int = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    category = category_utils.add_category(db, user_id, payload.name, payload.color, payload.icon)
    return {"message": "Category created successfully", "category": category_to_dict(category)}


@router.get("")
def view_categories(user_id: int = Depends(get_current_user), db: Session = Depends(get_db)):
    categories = category_utils.get_all_categories(db, user_id)
    return {"categories": [category_to_dict(c) for c in categories]}


@router.post("/setup-defaults")
def setup_defaults(user_id: int = Depends(get_current_user), db: Session = Depends(get_db)):
    count = category_utils.setup_default_categories(db, user_id)
    return {"message": "Default categories created successfully", "count": count}


@router.get("/{category_id}")
def get_category(category_id: str, user_id: int = Depends(get_current_user), db: Session = Depends(get_db)):
    category = category_utils.get_category_by_id(db, user_id, category_id)
    return {"category": category_to_dict(category)}


@router.put("/{category_id}")
def update_category(
    category_id: str,
    payload: CategoryUpdate,
    user_id: int = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    category = category_utils.update_category(db, user_id, category_id, payload.model_dump(exclude_unset=True))
    return {"message": "Category updated successfully", "category": category_to_dict(category)}


@router.delete("/{category_id}")
def delete_category(category_id: str, user_id: int = Depends(get_current_user), db: Session = Depends(get_db)):
    category_utils.delete_category(db, user_id, category_id)
    return {"message": "Category deleted successfully"}
