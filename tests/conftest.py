"""Pytest fixtures for testing"""

import pytest
from typing import Generator
from unittest.mock import AsyncMock
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from microcredit_gateway.api.main import create_app
from microcredit_gateway.api.dependencies import (
    get_classifier_client,
    get_score_registry,
    get_score_service_client,
    get_utility_bill_client,
)
from microcredit_gateway.domain.models import FinancialProfile, ScoreRecord
from microcredit_gateway.domain.score_store import ScoreRegistry
from microcredit_gateway.infrastructure.database.models import Base
from microcredit_gateway.infrastructure.database.session import get_db


# Test database
TEST_DATABASE_URL = "sqlite:///./test.db"
engine = create_engine(TEST_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

TEST_USER_ID = "user_42"


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
def registry() -> ScoreRegistry:
    """Fresh per-test score registry"""
    return ScoreRegistry()


@pytest.fixture
def score_client() -> AsyncMock:
    """Score backend stub echoing a stored record"""
    client = AsyncMock()
    client.calculate_score.return_value = ScoreRecord(score=681, monthly_income=20000)
    client.get_score.return_value = ScoreRecord(score=None)
    return client


@pytest.fixture
def classifier_client() -> AsyncMock:
    client = AsyncMock()
    client.predict.return_value = "Good"
    return client


@pytest.fixture
def utility_bill_client() -> AsyncMock:
    client = AsyncMock()
    client.upload.return_value = {"message": "Bill uploaded"}
    return client


@pytest.fixture
def client(
    db: Session,
    registry: ScoreRegistry,
    score_client: AsyncMock,
    classifier_client: AsyncMock,
    utility_bill_client: AsyncMock,
) -> TestClient:
    """Create FastAPI test client with test database and stubbed upstream services"""
    app = create_app()

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_score_registry] = lambda: registry
    app.dependency_overrides[get_score_service_client] = lambda: score_client
    app.dependency_overrides[get_classifier_client] = lambda: classifier_client
    app.dependency_overrides[get_utility_bill_client] = lambda: utility_bill_client
    return TestClient(app)


@pytest.fixture
def auth_headers() -> dict:
    return {"X-User-Id": TEST_USER_ID}


@pytest.fixture
def sample_profile() -> FinancialProfile:
    """Questionnaire answers scoring 681 (tiers 75 / 50 / 25 / 100)"""
    return FinancialProfile(
        monthly_income=20000,
        grocery_spending=4000,
        utility_bills=1500,
        total_savings=500,
        rent_emi=6000,
        medical_expenses=100,
        transportation_cost=1000,
        loan_repayment=2000,
    )


@pytest.fixture
def sample_profile_payload(sample_profile: FinancialProfile) -> dict:
    return sample_profile.amounts()
