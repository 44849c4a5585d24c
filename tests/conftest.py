"""
Shared test fixtures.

Sets up an isolated test database so tests never touch
the real database. Tables are created before each test and
dropped after it, so every test starts from an empty ledger.
"""

import os

# Settings are read at import time, so the environment has to be
# in place before anything from bank_ledger is imported.
os.environ.setdefault("DATABASE_URL", "sqlite:///./test.db")
os.environ.setdefault("JWT_SECRET", "test-access-secret")
os.environ.setdefault("REFRESH_SECRET", "test-refresh-secret")
os.environ.setdefault("LOG_JSON", "false")

import itertools
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from bank_ledger.main import app
from bank_ledger.models.base import Base, get_db
from bank_ledger.models.enums import AccountType, UserRole
from bank_ledger.schemas.customer import CustomerCreate
from bank_ledger.services.auth_service import AuthService
from bank_ledger.services.customer_service import CustomerService
from bank_ledger.services.ledger_engine import LedgerEngine


# SQLite keeps the suite free of external infrastructure.
# The generous timeout lets concurrent writers queue on the
# database lock instead of failing straight away.
TEST_DATABASE_URL = "sqlite:///./test.db"

engine = create_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False, "timeout": 30},
)

TestSessionLocal = sessionmaker(
    bind=engine,
    autocommit=False,
    autoflush=False,
)


@pytest.fixture(autouse=True)
def setup_database():
    """
    Create all tables before each test, drop them after.

    autouse=True means every test gets this automatically.
    """
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db_session():
    """Provide a database session for direct service testing."""
    session = TestSessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


@pytest.fixture
def session_factory():
    """Hands out independent sessions, one per simulated caller."""
    return TestSessionLocal


@pytest.fixture
def client(db_session):
    """
    Provide a test client with the test database.

    We override the get_db dependency so the FastAPI app
    uses our test session instead of the real database.
    """
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


def register(client, username, role="staff"):
    response = client.post("/auth/register", json={
        "username": username,
        "password": "s3cret-pass",
        "full_name": username.title(),
        "role": role,
    })
    assert response.status_code == 201, response.text
    return response.json()


@pytest.fixture
def auth_headers(client):
    tokens = register(client, "teller")
    return {"Authorization": f"Bearer {tokens['access_token']}"}


@pytest.fixture
def admin_headers(client, db_session):
    """Admins cannot self-register, so one is created directly."""
    AuthService(db_session).create_user("manager", "s3cret-pass", role=UserRole.ADMIN)
    response = client.post("/auth/login", json={
        "username": "manager",
        "password": "s3cret-pass",
    })
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


# --- Ledger factories ---

@pytest.fixture
def make_customer(db_session):
    """Create customers with distinct national IDs."""
    counter = itertools.count(1)

    def _make(first="Jane", last="Banda", national_id=None):
        number = next(counter)
        return CustomerService(db_session).create_customer(CustomerCreate(
            first_name=first,
            last_name=last,
            national_id=national_id or f"NID-{number:04d}",
            phone="0999000111",
            email=f"{first.lower()}{number}@example.com",
        ))

    return _make


@pytest.fixture
def make_account(db_session, make_customer):
    """Open an account, creating a customer for it when none is given."""
    def _make(balance="0.00", customer_id=None, account_type=AccountType.SAVINGS):
        if customer_id is None:
            customer_id = make_customer().id
        return LedgerEngine(db_session).open_account(
            customer_id, account_type, Decimal(balance)
        )

    return _make
