"""Pytest fixtures for testing"""

from datetime import date, timedelta
from typing import Generator, List

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session, sessionmaker

from fakes import FakeClients, make_account
from icarus_finance.api.main import create_app
from icarus_finance.domain.models import FinancialAccount, MonthlyFinancialData
from icarus_finance.infrastructure.database.models import Base
from icarus_finance.infrastructure.database.session import build_engine, get_db


# Test database
TEST_DATABASE_URL = "sqlite:///./test.db"
engine = build_engine(TEST_DATABASE_URL)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


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
def app(db: Session):
    """Application wired to the test database, with no external credentials"""
    app = create_app()

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.state.clients = FakeClients()
    return app


@pytest.fixture
def client(app) -> TestClient:
    """Create FastAPI test client with test database"""
    return TestClient(app)


@pytest.fixture
def flat_months() -> List[MonthlyFinancialData]:
    """Three identical months of history"""
    return [
        MonthlyFinancialData(month=f"2024-0{i}", income=10000.0, expense=8000.0, net_flow=2000.0)
        for i in range(1, 4)
    ]


@pytest.fixture
def twelve_months() -> List[MonthlyFinancialData]:
    """A year of steady history with a mild upward drift"""
    months = []
    for i in range(12):
        income = 50000.0 + i * 100
        expense = 40000.0 + i * 50
        months.append(
            MonthlyFinancialData(
                month=f"2024-{i + 1:02d}",
                income=income,
                expense=expense,
                net_flow=income - expense,
            )
        )
    return months


@pytest.fixture
def overdue_receivables() -> List[FinancialAccount]:
    yesterday = date.today() - timedelta(days=1)
    return [
        make_account(id="r1", status="overdue", final_amount=40000.0, due_date=yesterday),
        make_account(id="r2", status="overdue", final_amount=20000.0, due_date=yesterday),
    ]
