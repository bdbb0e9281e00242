"""Pytest fixtures for testing"""

from datetime import datetime, timezone
from typing import Any, Callable, Dict

import pytest
from fastapi.testclient import TestClient

from fundability_engine.api.main import create_app
from fundability_engine.domain.models import FundabilityInput, PrimaryGoal
from fundability_engine.infrastructure.analytics.store import AnalyticsStore

FROZEN_NOW = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def frozen_now() -> datetime:
    return FROZEN_NOW


@pytest.fixture
def valid_body() -> Dict[str, Any]:
    """Request body for a strong, complete credit profile"""
    return {
        "first_name": "Ada",
        "last_name": "Lovelace",
        "email": "ada@example.com",
        "credit_score": 720,
        "revolving_utilization_pct": 25,
        "dti_pct": 30,
        "inquiries_6m": 1,
        "oldest_account_years": 10,
        "open_tradelines": 8,
        "recent_derogs_24m": 0,
        "bk_or_major_event": False,
        "requested_amount": 50000,
        "primary_goal": "business_funding",
    }


@pytest.fixture
def make_input() -> Callable[..., FundabilityInput]:
    """Factory for validated inputs with overridable fields"""

    def _make(**overrides: Any) -> FundabilityInput:
        fields: Dict[str, Any] = {
            "first_name": "Ada",
            "last_name": "Lovelace",
            "email": "ada@example.com",
            "credit_score": 720,
            "revolving_utilization_pct": 25,
            "dti_pct": 30,
            "inquiries_6m": 1,
            "oldest_account_years": 10,
            "open_tradelines": 8,
            "recent_derogs_24m": 0,
            "bk_or_major_event": False,
            "requested_amount": 50000,
            "primary_goal": PrimaryGoal.BUSINESS_FUNDING,
        }
        fields.update(overrides)
        return FundabilityInput(**fields)

    return _make


@pytest.fixture
def store() -> AnalyticsStore:
    return AnalyticsStore(max_entries=100, window_days=30)


@pytest.fixture
def client(store: AnalyticsStore) -> TestClient:
    """Create FastAPI test client with an isolated analytics store"""
    app = create_app(analytics_store=store)
    return TestClient(app)
