"""
Shared fixtures.

Each test gets a fresh in-memory SQLite database wired in through the
``get_db`` dependency, and API clients that are already logged in.
"""

import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("LOG_JSON", "false")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from finance_tracker.database import Base, get_db
from finance_tracker.main import app


@pytest.fixture()
def session_factory():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    factory = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    yield factory
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture()
def db_session(session_factory):
    db = session_factory()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture()
def make_client(session_factory):
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    clients = []

    def _make(email=None, name="Test User", password="secret123", login=True):
        client = TestClient(app)
        clients.append(client)
        if email is not None:
            resp = client.post("/auth/register", json={"name": name, "email": email, "password": password})
            assert resp.status_code == 201, resp.text
            if login:
                resp = client.post("/auth/login", json={"email": email, "password": password})
                assert resp.status_code == 200, resp.text
        return client

    yield _make

    for client in clients:
        client.close()
    app.dependency_overrides.clear()


@pytest.fixture()
def client(make_client):
    """Logged-in client for the primary test user."""
    return make_client("alice@example.com", name="Alice")


@pytest.fixture()
def other_client(make_client):
    """Logged-in client for a second, unrelated user."""
    return make_client("bob@example.com", name="Bob")


@pytest.fixture()
def category(client):
    resp = client.post("/categories", json={"name": "Groceries", "color": "#00ff00", "icon": "🛒"})
    assert resp.status_code == 201, resp.text
    return resp.json()["category"]


@pytest.fixture()
def credit_card(client):
    resp = client.post(
        "/credit-cards",
        json={"bank_name": "HDFC", "card_number": "1234", "limit_amount": 50000, "due_date": 15},
    )
    assert resp.status_code == 201, resp.text
    return resp.json()["creditCard"]


@pytest.fixture()
def borrowed(client):
    resp = client.post("/borrowed-money", json={"name": "Ravi", "amount": 1000, "type": "borrowed"})
    assert resp.status_code == 201, resp.text
    return resp.json()["borrowedMoney"]
