"""Pytest configuration and fixtures."""

import os
import uuid
from datetime import date
from typing import Generator

import pytest
from fastapi.testclient import TestClient
from dotenv import load_dotenv

# Load .env file
load_dotenv()

# Set test environment before importing app
os.environ["APP_ENV"] = "testing"
os.environ.setdefault("SUPABASE_URL", "https://test-project.supabase.co")
os.environ.setdefault("SUPABASE_SECRET_KEY", "test-secret-key")
os.environ.setdefault("SUPABASE_PUBLISHABLE_KEY", "test-publishable-key")

TEST_USER_ID = "user-test-1"
TEST_TODAY = date(2024, 10, 15)


class FakeDatabase:
    """In-memory stand-in for app.database.Database."""

    def __init__(self):
        self.users: dict[str, dict] = {}
        self.budgets: dict[tuple[str, str], dict] = {}
        self.transactions: dict[str, dict] = {}

    def get_user_by_id(self, user_id: str) -> dict | None:
        return self.users.get(user_id)

    def create_user(self, user_data: dict) -> dict:
        self.users[user_data["id"]] = dict(user_data)
        return self.users[user_data["id"]]

    def get_budget(self, user_id: str, month: str) -> dict | None:
        return self.budgets.get((user_id, month))

    def upsert_budget(self, budget_data: dict) -> dict:
        key = (budget_data["user_id"], budget_data["month"])
        existing = self.budgets.get(key)
        row = {"id": existing["id"] if existing else str(uuid.uuid4()), **budget_data}
        self.budgets[key] = row
        return row

    def delete_budget(self, user_id: str, month: str) -> bool:
        return self.budgets.pop((user_id, month), None) is not None

    def get_transactions(
        self,
        user_id: str,
        date_from: str | None = None,
        date_before: str | None = None,
    ) -> list[dict]:
        rows = [row for row in self.transactions.values() if row["user_id"] == user_id]
        if date_from:
            rows = [row for row in rows if row["date"] >= date_from]
        if date_before:
            rows = [row for row in rows if row["date"] < date_before]
        return sorted(rows, key=lambda row: row["date"], reverse=True)

    def get_transaction_by_id(self, transaction_id: str) -> dict | None:
        return self.transactions.get(transaction_id)

    def create_transaction(self, transaction_data: dict) -> dict:
        row = {"id": str(uuid.uuid4()), **transaction_data}
        self.transactions[row["id"]] = row
        return row

    def update_transaction(self, transaction_id: str, updates: dict) -> dict | None:
        row = self.transactions.get(transaction_id)
        if row is None:
            return None
        row.update(updates)
        return row

    def delete_transaction(self, transaction_id: str) -> bool:
        return self.transactions.pop(transaction_id, None) is not None


@pytest.fixture
def make_budget():
    """Factory for Budget models: make_budget(5000, [("housing", "Housing", 2000)])."""
    from app.schemas.budget import Budget, BudgetCategory

    def _make(income: float, categories: list[tuple[str, str, float]], month: str = "2024-10"):
        return Budget(
            id="budget-1",
            user_id=TEST_USER_ID,
            month=month,
            monthly_income=income,
            categories=[
                BudgetCategory(id=cat_id, name=name, allocated_amount=allocated)
                for cat_id, name, allocated in categories
            ],
        )

    return _make


@pytest.fixture
def make_txn():
    """Factory for Transaction models: make_txn(42.5, "food", date(2024, 10, 3))."""
    from app.schemas.transaction import Transaction

    counter = iter(range(1, 10_000))

    def _make(amount: float, category_id: str, on: date = TEST_TODAY, name: str | None = None):
        return Transaction(
            id=f"txn-{next(counter)}",
            user_id=TEST_USER_ID,
            amount=amount,
            description="Test expense",
            category_id=category_id,
            category_name=name,
            date=on,
        )

    return _make


@pytest.fixture
def fake_db() -> FakeDatabase:
    db = FakeDatabase()
    db.create_user({"id": TEST_USER_ID, "email": "test@example.com", "display_name": None})
    return db


@pytest.fixture(scope="session")
def app():
    """Create test application."""
    from app.main import app
    return app


@pytest.fixture(scope="session")
def client(app) -> Generator:
    """Create test client."""
    with TestClient(app) as c:
        yield c


@pytest.fixture
def auth_overrides(app, fake_db):
    """Authenticate every request as the test user against the fake database."""
    from app.dependencies import get_current_user_with_token, get_database, get_today

    async def _user_and_token():
        return fake_db.get_user_by_id(TEST_USER_ID), "test-token"

    async def _database():
        return fake_db

    async def _today():
        return TEST_TODAY

    app.dependency_overrides[get_current_user_with_token] = _user_and_token
    app.dependency_overrides[get_database] = _database
    app.dependency_overrides[get_today] = _today
    yield fake_db
    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers():
    """Bearer header so the HTTPBearer scheme accepts the request."""
    return {"Authorization": "Bearer test-token"}
