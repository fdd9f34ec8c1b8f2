"""
Tests for the protocol engine service and API routes.

Uses the in-memory mock database seeded with a small compound catalog.
"""

import pytest
from httpx import AsyncClient

from api.protocol_engine_service import ProtocolEngineService
from engine.errors import NotFoundError
from models.catalog import SuggestionRequest, PersonalizeRequest, RiskAppetite


class TestProtocolEngineService:
    """
    Unit tests for ProtocolEngineService.

    These tests verify the service layer without HTTP overhead.
    """

    @pytest.mark.asyncio
    async def test_catalog_loads_in_name_order(self, catalog_db):
        service = ProtocolEngineService(catalog_db)
        catalog = await service.load_catalog()
        assert [c.name for c in catalog] == ["BPC-157", "Ipamorelin", "Semaglutide", "TB-500"]

    @pytest.mark.asyncio
    async def test_conservative_suggestion(self, catalog_db):
        service = ProtocolEngineService(catalog_db)
        result = await service.suggest_protocol(
            "user-123", SuggestionRequest(
                goals=["healing"], risk_appetite=RiskAppetite.CONSERVATIVE
            )
        )
        assert [c.compound_id for c in result.compounds] == ["semaglutide"]
        assert result.blocked_reasons == [
            "BPC-157 blocked: no lane available at conservative risk level",
            "Ipamorelin blocked: no lane available at conservative risk level",
            "TB-500 blocked: no lane available at conservative risk level",
        ]

    @pytest.mark.asyncio
    async def test_moderate_suggestion_respects_injection_limit(self, catalog_db):
        service = ProtocolEngineService(catalog_db)
        result = await service.suggest_protocol("user-123", SuggestionRequest(
            goals=["healing"],
            risk_appetite=RiskAppetite.MODERATE,
            max_injections_per_week=7,
        ))
        assert [c.compound_id for c in result.compounds] == ["bpc-157"]
        assert result.total_injections_per_week == 7
        assert result.blocked_reasons == [
            "TB-500 skipped: would exceed 7 injections/week limit",
            "Ipamorelin skipped: would exceed 7 injections/week limit",
        ]

    @pytest.mark.asyncio
    async def test_conditions_and_interactions(self, catalog_db):
        service = ProtocolEngineService(catalog_db)
        result = await service.suggest_protocol("user-123", SuggestionRequest(
            goals=[],
            risk_appetite=RiskAppetite.MODERATE,
            conditions=["Active Cancer"],
            current_compound_ids=["tirzepatide", "cjc-1295"],
            max_injections_per_week=21,
        ))
        assert [c.compound_id for c in result.compounds] == ["ipamorelin"]
        assert result.blocked_reasons == [
            "Semaglutide blocked: AVOID interaction with Tirzepatide - duplicate incretin therapy"
        ]
        assert [(w.compound, w.other_compound) for w in result.warnings] == [
            ("Ipamorelin", "CJC-1295")
        ]

    @pytest.mark.asyncio
    async def test_personalize_template(self, catalog_db):
        service = ProtocolEngineService(catalog_db)
        result = await service.personalize_template(
            "user-123", "wolverine", PersonalizeRequest(max_injections_per_week=10)
        )
        assert [c.compound_id for c in result.compounds] == ["bpc-157", "tb-500"]
        assert result.total_injections_per_week == 9

    @pytest.mark.asyncio
    async def test_unknown_template(self, catalog_db):
        service = ProtocolEngineService(catalog_db)
        with pytest.raises(NotFoundError):
            await service.personalize_template("user-123", "missing", PersonalizeRequest())


# =============================================================================
# HTTP ROUTES
# =============================================================================

class TestProtocolEngineRoutes:
    """API tests through the ASGI app with the mock database injected"""

    @pytest.mark.asyncio
    async def test_suggest(self, client: AsyncClient, catalog_db, user_headers):
        response = await client.post(
            "/api/v1/protocol-engine/suggest",
            json={"goals": ["weight loss"], "risk_appetite": "conservative", "budget": 1},
            headers=user_headers,
        )
        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        data = body["data"]
        assert data["compounds"][0]["slug"] == "semaglutide"
        assert data["compounds"][0]["lane"] == "clinical"
        # 250 * 0.01 * 1 * 4.33
        assert data["estimated_monthly_cost"] == pytest.approx(10.83)
        assert data["blocked_reasons"][-1].startswith("Estimated monthly cost ($10.83)")
        assert data["blocked_reasons"][-1].endswith("exceeds budget ($1)")

    @pytest.mark.asyncio
    async def test_suggest_requires_user_header(self, client: AsyncClient, catalog_db):
        response = await client.post("/api/v1/protocol-engine/suggest", json={})
        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_suggest_requires_risk_appetite(self, client: AsyncClient, catalog_db, user_headers):
        response = await client.post(
            "/api/v1/protocol-engine/suggest",
            json={"goals": ["healing"]},
            headers=user_headers,
        )
        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_suggest_rejects_out_of_range_limits(self, client: AsyncClient, user_headers):
        response = await client.post(
            "/api/v1/protocol-engine/suggest",
            json={"max_compounds": 0},
            headers=user_headers,
        )
        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_personalize(self, client: AsyncClient, catalog_db, user_headers):
        response = await client.post(
            "/api/v1/protocol-engine/personalize/wolverine",
            json={"risk_appetite": "aggressive"},
            headers=user_headers,
        )
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["compounds"][0]["lane"] == "expert"
        assert data["blocked_reasons"] == ["TB-500 skipped: would exceed 7 injections/week limit"]

    @pytest.mark.asyncio
    async def test_personalize_unknown_template(self, client: AsyncClient, catalog_db, user_headers):
        response = await client.post(
            "/api/v1/protocol-engine/personalize/nope",
            json={},
            headers=user_headers,
        )
        assert response.status_code == 404
        assert response.json()["type"] == "not_found"
