# finance_tracker/auth.py

import re

from fastapi import APIRouter, Depends, HTTPException, Request, status
from passlib.hash import bcrypt
from sqlalchemy.orm import Session
import structlog

from .config import BCRYPT_ROUNDS
from .database import get_db
from .errors import ConflictError, ValidationError
from .models import User
from .schemas import LoginIn, RegisterIn

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


def is_valid_email(email: str) -> bool:
    pattern = r"^[\w\.\+-]+@[\w\.-]+\.[A-Za-z]{2,}$"
    return re.match(pattern, email) is not None


# Dependency to get logged-in user
def get_current_user(request: Request) -> int:
    user_id = request.session.get("user_id")
    if not user_id:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Authentication required")
    return user_id


def _user_to_dict(user: User):
    return {"id": user.id, "name": user.name, "email": user.email}


@router.post("/register", status_code=status.HTTP_201_CREATED)
def register(payload: RegisterIn, db: Session = Depends(get_db)):
    email = payload.email.strip().lower()
    if not is_valid_email(email):
        raise ValidationError("Invalid email format (e.g. name@gmail.com).", field="email", value=payload.email)

    if db.query(User).filter(User.email == email).first():
        raise ConflictError("Email already registered.", field="email", value=email)

    hashed_password = bcrypt.using(rounds=BCRYPT_ROUNDS).hash(payload.password)
    user = User(name=payload.name.strip(), email=email, password=hashed_password)
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info("user_registered", user_id=user.id)

    return {"message": "Registration successful", "user": _user_to_dict(user)}


@router.post("/login")
def login(payload: LoginIn, request: Request, db: Session = Depends(get_db)):
    user = db.query(User).filter(User.email == payload.email.strip().lower()).first()
    if not user or not bcrypt.verify(payload.password, user.password):
        logger.info("login_failed")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid email or password.")

    request.session["user_id"] = user.id
    request.session["name"] = user.name
    logger.info("user_logged_in", user_id=user.id)
    return {"message": "Login successful", "user": _user_to_dict(user)}


@router.post("/logout")
def logout(request: Request):
    request.session.clear()
    return {"message": "Logged out"}


@router.get("/me")
def me(user_id: int = Depends(get_current_user), db: Session = Depends(get_db)):
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Authentication required")
    return {"user": _user_to_dict(user)}
