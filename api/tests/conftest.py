"""
Pytest fixtures for Peptide Protocol Engine tests.

Provides an in-memory database and catalog/history fixtures,
enabling tests to run entirely without MongoDB or network calls.
"""

import pytest
import pytest_asyncio
from datetime import datetime, timedelta
from typing import AsyncIterator

from httpx import AsyncClient, ASGITransport

from api.tests.mocks import MockDatabase


# ============================================================================
# Mock Service Fixtures
# ============================================================================


@pytest.fixture
def mock_db() -> MockDatabase:
    """Create a fresh mock database instance."""
    return MockDatabase()


# ============================================================================
# Application Fixtures with Dependency Override
# ============================================================================


@pytest_asyncio.fixture
async def app_with_mocks(mock_db: MockDatabase):
    """
    FastAPI app with the database mocked.

    Uses the setter functions in deps.py to inject the mock.
    """
    from api import deps
    from api.main import app

    deps.reset_for_testing()
    deps.set_database(mock_db)

    yield app, mock_db

    deps.reset_for_testing()


@pytest_asyncio.fixture
async def client(app_with_mocks) -> AsyncIterator[AsyncClient]:
    """
    Async HTTP client for testing API endpoints.

    Usage:
        async def test_endpoint(client):
            response = await client.get("/health")
            assert response.status_code == 200
    """
    app, mock_db = app_with_mocks

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def user_headers() -> dict:
    """Identity header forwarded by the gateway."""
    return {"X-User-Id": "user-123"}


# ============================================================================
# Stored Document Fixtures
# ============================================================================


@pytest.fixture
def compound_docs() -> list[dict]:
    """Catalog compounds as stored in MongoDB."""
    return [
        {
            "compound_id": "bpc-157",
            "name": "BPC-157",
            "slug": "bpc-157",
            "description": "Body protection compound studied for tendon and gut healing",
            "lanes": {
                "clinical": None,
                "expert": {"dose_min": 250, "dose_max": 500, "unit": "mcg", "frequency": "daily"},
                "experimental": {"dose_min": 500, "dose_max": 750, "unit": "mcg", "frequency": "2x daily"},
            },
            "contraindications": ["active cancer"],
            "interactions": [],
        },
        {
            "compound_id": "tb-500",
            "name": "TB-500",
            "slug": "tb-500",
            "description": "Thymosin beta-4 fragment used for recovery and healing",
            "lanes": {
                "expert": {"dose_min": 2000, "dose_max": 5000, "unit": "mcg", "frequency": "2x/week"},
            },
            "contraindications": ["active cancer"],
            "interactions": [],
        },
        {
            "compound_id": "semaglutide",
            "name": "Semaglutide",
            "slug": "semaglutide",
            "description": "GLP-1 agonist for weight loss and glycemic control",
            "lanes": {
                "clinical": {"dose_min": 250, "dose_max": 2400, "unit": "mcg", "frequency": "weekly"},
            },
            "contraindications": ["medullary thyroid carcinoma"],
            "interactions": [
                {
                    "target_id": "tirzepatide",
                    "target_name": "Tirzepatide",
                    "severity": "avoid",
                    "note": "duplicate incretin therapy",
                },
            ],
        },
        {
            "compound_id": "ipamorelin",
            "name": "Ipamorelin",
            "slug": "ipamorelin",
            "description": "Growth hormone secretagogue for sleep and recovery",
            "lanes": {
                "expert": {"dose_min": 100, "dose_max": 300, "unit": "mcg", "frequency": "5x/week"},
            },
            "contraindications": [],
            "interactions": [
                {
                    "target_id": "cjc-1295",
                    "target_name": "CJC-1295",
                    "severity": "caution",
                    "note": "stacked GH release",
                },
            ],
        },
    ]


@pytest.fixture
def template_docs() -> list[dict]:
    """Protocol templates as stored in MongoDB."""
    return [
        {
            "template_id": "wolverine",
            "name": "Wolverine Stack",
            "description": "Injury recovery stack",
            "compound_ids": ["bpc-157", "tb-500", "retired-compound"],
        },
    ]


@pytest.fixture
def catalog_db(mock_db: MockDatabase, compound_docs: list[dict], template_docs: list[dict]):
    """Database pre-seeded with the compound catalog and templates."""
    mock_db.seed_data("compounds", compound_docs)
    mock_db.seed_data("protocol_templates", template_docs)
    return mock_db


@pytest.fixture
def protocol_start() -> datetime:
    return datetime(2024, 1, 1, 8, 0)


@pytest.fixture
def history_db(mock_db: MockDatabase, protocol_start: datetime):
    """
    Database pre-seeded with one user running one 28-day protocol:
    daily doses in weeks 1 and 3, every other day in weeks 2 and 4,
    and a daily energy score tracking the dose count.
    """
    mock_db.seed_data("users", [{"user_id": "user-123", "email": "test@example.com"}])
    mock_db.seed_data("user_protocols", [
        {
            "protocol_id": "proto-1",
            "user_id": "user-123",
            "name": "BPC-157 Healing",
            "status": "active",
            "start_date": protocol_start,
            "end_date": protocol_start + timedelta(days=28),
            "compounds": [{"compound_id": "bpc-157", "dose": 250, "frequency": "daily"}],
        },
        {
            "protocol_id": "proto-other",
            "user_id": "user-456",
            "name": "Someone Else",
            "status": "active",
            "start_date": protocol_start,
            "compounds": [],
        },
    ])

    doses = []
    outcomes = []
    for day in range(28):
        week = day // 7
        taken_at = protocol_start + timedelta(days=day)
        if week % 2 == 0 or day % 2 == 0:
            doses.append({
                "user_id": "user-123",
                "protocol_id": "proto-1",
                "taken_at": taken_at,
                "amount": 250,
            })
        outcomes.append({
            "user_id": "user-123",
            "metric": "energy",
            "value": 8.0 if week % 2 == 0 else 5.0,
            "recorded_at": taken_at + timedelta(hours=12),
        })
    mock_db.seed_data("dose_logs", doses)
    mock_db.seed_data("outcome_logs", outcomes)

    mock_db.seed_data("protocol_events", [
        {
            "user_id": "user-123",
            "protocol_id": "proto-1",
            "event_type": "side_effect",
            "title": "Injection site redness",
            "severity": "low",
            "occurred_at": protocol_start + timedelta(days=2),
        },
        {
            "user_id": "user-123",
            "protocol_id": "proto-1",
            "event_type": "side_effect",
            "title": "Injection site redness",
            "severity": "moderate",
            "occurred_at": protocol_start + timedelta(days=9),
        },
        {
            "user_id": "user-123",
            "protocol_id": "proto-1",
            "event_type": "note",
            "title": "Switched injection site",
            "occurred_at": protocol_start + timedelta(days=10),
        },
    ])
    return mock_db
