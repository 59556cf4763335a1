# finance_tracker/main.py

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.sessions import SessionMiddleware

from . import auth, borrowed_money, categories, credit_cards, expenses, payments
from .config import SECRET_KEY
from .database import Base, engine
from .errors import (
    FinanceError,
    finance_error_handler,
    request_validation_handler,
    unhandled_error_handler,
)
from .logging_config import configure_logging

configure_logging()

app = FastAPI(title="Finance Tracker API")

# Create tables if not already created
Base.metadata.create_all(bind=engine)

# Session Middleware (use a secure secret key in production!)
app.add_middleware(SessionMiddleware, secret_key=SECRET_KEY)


async def http_error_handler(request, exc: StarletteHTTPException):
    return JSONResponse(status_code=exc.status_code, content={"message": exc.detail}, headers=exc.headers)


app.add_exception_handler(FinanceError, finance_error_handler)
app.add_exception_handler(RequestValidationError, request_validation_handler)
app.add_exception_handler(StarletteHTTPException, http_error_handler)
app.add_exception_handler(Exception, unhandled_error_handler)

# Include auth routes (register/login/logout)
app.include_router(auth.router)
app.include_router(categories.router)
app.include_router(credit_cards.router)
app.include_router(borrowed_money.router)
app.include_router(expenses.router)
app.include_router(payments.router)


@app.get("/health")
def health():
    return {"status": "ok"}
