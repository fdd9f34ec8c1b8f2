"""
Tests for the insight service and API routes.

The seeded history is one 28-day daily protocol with 20 logged doses
(7, 3, 7, 3 per week) and a daily energy score of 8 or 5 that moves
with the weekly dose count.
"""

import pytest
from datetime import datetime, timedelta, timezone
from httpx import AsyncClient

from api.insight_service import InsightService
from engine.errors import NotFoundError
from models.tracking import TrendLabel, CorrelationDirection, CorrelationConfidence


class TestInsightService:
    """
    Unit tests for InsightService.

    These tests verify the service layer without HTTP overhead.
    """

    @pytest.mark.asyncio
    async def test_protocol_analysis(self, history_db):
        service = InsightService(history_db)
        analysis = await service.get_protocol_analysis("user-123", "proto-1")

        assert analysis.protocol_name == "BPC-157 Healing"
        assert analysis.duration_days == 28
        assert analysis.total_doses == 20
        # 20 of 28 expected daily doses
        assert analysis.adherence_rate == 0.71

    @pytest.mark.asyncio
    async def test_protocol_metric_summary(self, history_db):
        service = InsightService(history_db)
        analysis = await service.get_protocol_analysis("user-123", "proto-1")

        assert len(analysis.metric_summaries) == 1
        energy = analysis.metric_summaries[0]
        assert energy.count == 28
        assert energy.mean == 6.5
        assert energy.latest == 5.0
        assert energy.trend == TrendLabel.STABLE

    @pytest.mark.asyncio
    async def test_outcomes_outside_window_are_ignored(self, history_db, protocol_start):
        history_db.seed_data("outcome_logs", [
            {"user_id": "user-123", "metric": "energy", "value": 1.0,
             "recorded_at": protocol_start - timedelta(days=1)},
            {"user_id": "user-123", "metric": "energy", "value": 1.0,
             "recorded_at": protocol_start + timedelta(days=30)},
        ])
        service = InsightService(history_db)
        analysis = await service.get_protocol_analysis("user-123", "proto-1")

        assert analysis.metric_summaries[0].count == 28
        assert analysis.metric_summaries[0].mean == 6.5

    @pytest.mark.asyncio
    async def test_protocol_correlation(self, history_db):
        service = InsightService(history_db)
        analysis = await service.get_protocol_analysis("user-123", "proto-1")

        assert len(analysis.correlations) == 1
        correlation = analysis.correlations[0]
        assert correlation.metric == "energy"
        assert correlation.direction == CorrelationDirection.POSITIVE
        assert correlation.confidence == CorrelationConfidence.HIGH
        assert correlation.coefficient == 1.0

    @pytest.mark.asyncio
    async def test_protocol_side_effects(self, history_db):
        service = InsightService(history_db)
        analysis = await service.get_protocol_analysis("user-123", "proto-1")

        assert [(s.title, s.severity, s.count) for s in analysis.side_effects] == [
            ("Injection site redness", "moderate", 2)
        ]

    @pytest.mark.asyncio
    async def test_running_protocol_with_aware_dates(self, mock_db):
        start = datetime.now(timezone.utc) - timedelta(days=10) + timedelta(hours=1)
        mock_db.seed_data("users", [{"user_id": "user-123"}])
        mock_db.seed_data("user_protocols", [{
            "protocol_id": "proto-live",
            "user_id": "user-123",
            "name": "Running",
            "status": "active",
            "start_date": start,
            "compounds": [{"compound_id": "bpc-157", "dose": 250, "frequency": "daily"}],
        }])
        mock_db.seed_data("dose_logs", [
            {"user_id": "user-123", "protocol_id": "proto-live",
             "taken_at": start + timedelta(days=d), "amount": 250}
            for d in range(5)
        ])
        mock_db.seed_data("outcome_logs", [
            {"user_id": "user-123", "metric": "energy", "value": 6.0,
             "recorded_at": start + timedelta(days=d, hours=2)}
            for d in range(4)
        ])
        service = InsightService(mock_db)

        analysis = await service.get_protocol_analysis("user-123", "proto-live")
        assert analysis.duration_days == 10
        assert analysis.total_doses == 5
        # 5 of 10 expected daily doses
        assert analysis.adherence_rate == 0.5
        assert analysis.metric_summaries[0].count == 4

        insights = await service.get_user_insights("user-123")
        assert insights.adherence_rate == 0.5

    @pytest.mark.asyncio
    async def test_other_users_protocol(self, history_db):
        service = InsightService(history_db)
        with pytest.raises(PermissionError):
            await service.get_protocol_analysis("user-123", "proto-other")

    @pytest.mark.asyncio
    async def test_unknown_protocol(self, history_db):
        service = InsightService(history_db)
        with pytest.raises(NotFoundError):
            await service.get_protocol_analysis("user-123", "missing")

    @pytest.mark.asyncio
    async def test_user_insights(self, history_db, protocol_start):
        service = InsightService(history_db)
        insights = await service.get_user_insights(
            "user-123", as_of=protocol_start + timedelta(days=28)
        )

        assert insights.active_protocols == 1
        assert insights.total_doses_logged == 20
        assert insights.total_outcomes_logged == 28
        assert insights.adherence_rate == 0.71
        assert [m.metric for m in insights.top_metrics] == ["energy"]

    @pytest.mark.asyncio
    async def test_recent_events_newest_first(self, history_db):
        service = InsightService(history_db)
        insights = await service.get_user_insights("user-123")

        titles = [e["title"] for e in insights.recent_events]
        assert titles[0] == "Switched injection site"
        assert len(titles) == 3
        assert all("_id" not in e for e in insights.recent_events)

    @pytest.mark.asyncio
    async def test_windows_follow_settings(self, history_db):
        class Settings:
            insights_top_metrics = 10
            insights_outcome_window = 4
            insights_recent_events = 1

        service = InsightService(history_db, Settings())
        insights = await service.get_user_insights("user-123")

        assert insights.top_metrics[0].count == 4
        assert len(insights.recent_events) == 1
        # Totals are not windowed
        assert insights.total_outcomes_logged == 28

    @pytest.mark.asyncio
    async def test_unknown_user(self, history_db):
        service = InsightService(history_db)
        with pytest.raises(NotFoundError):
            await service.get_user_insights("ghost")

    @pytest.mark.asyncio
    async def test_user_without_history(self, mock_db):
        mock_db.seed_data("users", [{"user_id": "new-user"}])
        service = InsightService(mock_db)
        insights = await service.get_user_insights("new-user")

        assert insights.active_protocols == 0
        assert insights.adherence_rate == 0.0
        assert insights.top_metrics == []
        assert insights.recent_events == []


# =============================================================================
# HTTP ROUTES
# =============================================================================

class TestInsightRoutes:
    """API tests through the ASGI app with the mock database injected"""

    @pytest.mark.asyncio
    async def test_my_insights(self, client: AsyncClient, history_db, user_headers):
        response = await client.get("/api/v1/insights/me", headers=user_headers)
        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["data"]["total_doses_logged"] == 20
        assert body["data"]["recent_events"][0]["event_type"] == "note"

    @pytest.mark.asyncio
    async def test_my_insights_unknown_user(self, client: AsyncClient, history_db):
        response = await client.get("/api/v1/insights/me", headers={"X-User-Id": "ghost"})
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_protocol_analysis(self, client: AsyncClient, history_db, user_headers):
        response = await client.get("/api/v1/insights/protocol/proto-1", headers=user_headers)
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["adherence_rate"] == 0.71
        assert data["correlations"][0]["direction"] == "positive"

    @pytest.mark.asyncio
    async def test_protocol_analysis_forbidden(self, client: AsyncClient, history_db, user_headers):
        response = await client.get("/api/v1/insights/protocol/proto-other", headers=user_headers)
        assert response.status_code == 403
        assert response.json()["type"] == "permission_error"

    @pytest.mark.asyncio
    async def test_protocol_analysis_not_found(self, client: AsyncClient, history_db, user_headers):
        response = await client.get("/api/v1/insights/protocol/missing", headers=user_headers)
        assert response.status_code == 404
