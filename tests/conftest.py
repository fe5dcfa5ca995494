"""Pytest fixtures for testing"""

import pytest
from datetime import date, datetime, time
from typing import Generator
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from finance_analytics.api.main import create_app
from finance_analytics.api.dependencies import get_advice_client, get_transaction_source
from finance_analytics.domain.models import Transaction
from finance_analytics.infrastructure.clients.advice import AdviceClient
from finance_analytics.infrastructure.database.models import Base, Category, TransactionRecord
from finance_analytics.infrastructure.database.repositories import DatabaseTransactionSource
from finance_analytics.utils.date_utils import add_months


# Test database
TEST_DATABASE_URL = "sqlite:///./test.db"
engine = create_engine(TEST_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

TEST_USER = "user_1"
SEEDED_MONTHS = 4


@pytest.fixture
def db() -> Generator[Session, None, None]:
    """Create test database and session"""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def seeded_db(db: Session) -> Session:
    """
    Four calendar months ending with the current one, every transaction on day 1:
    salary 5000.00, groceries 800.00, restaurants climbing 200.00 per month,
    and a transfer that must never count as income or expense.
    """
    db.add_all(
        [
            Category(id="cat_salary", user_id=TEST_USER, name="Salary", kind="income"),
            Category(id="cat_groceries", user_id=TEST_USER, name="Groceries", kind="expense"),
            Category(id="cat_restaurants", user_id=TEST_USER, name="Restaurants", kind="expense"),
        ]
    )

    first_of_month = date.today().replace(day=1)
    for offset in range(SEEDED_MONTHS):
        day = datetime.combine(add_months(first_of_month, -offset), time(12, 0))
        step = SEEDED_MONTHS - offset
        db.add_all(
            [
                TransactionRecord(id=f"salary_{offset}", user_id=TEST_USER, occurred_at=day,
                                  amount_minor=500000, direction="income", category_id="cat_salary"),
                TransactionRecord(id=f"groceries_{offset}", user_id=TEST_USER, occurred_at=day,
                                  amount_minor=80000, direction="expense", category_id="cat_groceries"),
                TransactionRecord(id=f"restaurants_{offset}", user_id=TEST_USER, occurred_at=day,
                                  amount_minor=20000 * step, direction="expense", category_id="cat_restaurants"),
                TransactionRecord(id=f"transfer_{offset}", user_id=TEST_USER, occurred_at=day,
                                  amount_minor=100000, direction="transfer", category_id=None),
            ]
        )
    db.commit()
    return db


@pytest.fixture
def transaction_source(db: Session) -> DatabaseTransactionSource:
    return DatabaseTransactionSource(TestingSessionLocal)


@pytest.fixture
def client(seeded_db: Session, transaction_source: DatabaseTransactionSource) -> TestClient:
    """Create FastAPI test client over the seeded test database, advice in fallback mode"""
    app = create_app()

    app.dependency_overrides[get_transaction_source] = lambda: transaction_source
    app.dependency_overrides[get_advice_client] = lambda: AdviceClient()
    return TestClient(app)


def make_transaction(
    txn_id: str,
    occurred_at: date,
    amount: int,
    direction: str = "expense",
    category: str = "Groceries",
) -> Transaction:
    return Transaction(
        id=txn_id,
        occurred_at=occurred_at,
        amount=amount,
        direction=direction,
        category_id=f"cat_{category.lower()}",
        category_name=category,
    )


@pytest.fixture
def make_txn():
    """Factory for strict Transaction objects"""
    return make_transaction


@pytest.fixture
def sample_transactions() -> list[Transaction]:
    """January to March 2025: salary, groceries 100.00/100.00/150.00 and one transfer"""
    return [
        make_transaction("inc_1", date(2025, 1, 1), 300000, "income", "Salary"),
        make_transaction("inc_2", date(2025, 2, 1), 300000, "income", "Salary"),
        make_transaction("inc_3", date(2025, 3, 1), 300000, "income", "Salary"),
        make_transaction("groc_1", date(2025, 1, 10), 10000),
        make_transaction("groc_2", date(2025, 2, 10), 10000),
        make_transaction("groc_3", date(2025, 3, 10), 15000),
        make_transaction("move_1", date(2025, 2, 15), 50000, "transfer", "Savings"),
    ]
