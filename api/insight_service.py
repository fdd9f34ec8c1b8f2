"""
Peptide Protocol Engine - Insight Service

Loads a user's logged history and runs the analytics engines over it:
adherence, metric summaries and trends, dose/outcome correlation.
"""

from typing import Optional, List, Dict, Any
from datetime import datetime
import logging

from models.tracking import (
    UserProtocol, DoseEvent, OutcomeSample, SideEffectEvent,
    ProtocolAnalysis, UserInsights, ProtocolStatus
)
from engine.errors import NotFoundError
from engine.adherence import now_like
from engine.reports import build_protocol_analysis, build_user_insights

logger = logging.getLogger(__name__)

SIDE_EFFECT_EVENT = "side_effect"


class InsightService:
    """
    Service for outcome analytics

    Handles:
    - User-level insights (adherence rollup, top metrics, recent events)
    - Per-protocol analysis (metrics, side effects, correlations)
    """

    def __init__(self, db, settings=None):
        """
        Initialize with database connection

        db should have collections:
        - users
        - user_protocols
        - dose_logs
        - outcome_logs
        - protocol_events
        """
        self.db = db
        self.top_metrics = getattr(settings, "insights_top_metrics", 10)
        self.outcome_window = getattr(settings, "insights_outcome_window", 200)
        self.recent_events = getattr(settings, "insights_recent_events", 10)

    # =========================================================================
    # USER INSIGHTS
    # =========================================================================

    async def get_user_insights(
        self,
        user_id: str,
        as_of: Optional[datetime] = None
    ) -> UserInsights:
        """
        Aggregate insights across a user's history.
        Raises NotFoundError for an unknown user.
        """
        user = await self.db.users.find_one({"user_id": user_id})
        if not user:
            raise NotFoundError("User", user_id)

        active = []
        cursor = self.db.user_protocols.find({
            "user_id": user_id,
            "status": ProtocolStatus.ACTIVE.value
        })
        async for doc in cursor:
            protocol = UserProtocol(**doc)
            actual = await self.db.dose_logs.count_documents({"protocol_id": protocol.protocol_id})
            active.append((protocol, actual))

        total_doses = await self.db.dose_logs.count_documents({"user_id": user_id})
        total_outcomes = await self.db.outcome_logs.count_documents({"user_id": user_id})

        outcome_docs = await self.db.outcome_logs.find(
            {"user_id": user_id}
        ).sort("recorded_at", -1).limit(self.outcome_window).to_list(length=self.outcome_window)
        samples = [OutcomeSample(**doc) for doc in outcome_docs]

        event_docs = await self.db.protocol_events.find(
            {"user_id": user_id}
        ).sort("occurred_at", -1).limit(self.recent_events).to_list(length=self.recent_events)

        insights = build_user_insights(
            active_protocols=active,
            total_doses=total_doses,
            total_outcomes=total_outcomes,
            recent_samples=samples,
            recent_events=[self._strip_id(doc) for doc in event_docs],
            top_n=self.top_metrics,
            as_of=as_of,
        )

        logger.info(
            f"Insights for user {user_id}: {insights.active_protocols} active protocols, "
            f"adherence {insights.adherence_rate:.2f}"
        )
        return insights

    # =========================================================================
    # PROTOCOL ANALYSIS
    # =========================================================================

    async def get_protocol_analysis(
        self,
        user_id: str,
        protocol_id: str,
        as_of: Optional[datetime] = None
    ) -> ProtocolAnalysis:
        """
        Analyze one protocol over its period.
        Raises NotFoundError for an unknown protocol and PermissionError
        when it belongs to another user.
        """
        doc = await self.db.user_protocols.find_one({"protocol_id": protocol_id})
        if not doc:
            raise NotFoundError("Protocol", protocol_id)

        protocol = UserProtocol(**doc)
        if protocol.user_id != user_id:
            raise PermissionError("Access denied to this protocol")

        end = protocol.end_date or as_of or now_like(protocol.start_date)

        doses = await self._get_doses(protocol_id)
        samples = await self._get_outcomes(user_id, protocol.start_date, end)
        side_effects = await self._get_side_effects(protocol_id)

        analysis = build_protocol_analysis(protocol, doses, samples, side_effects, as_of=end)

        logger.info(
            f"Protocol {protocol_id} analyzed: {analysis.total_doses} doses, "
            f"{len(analysis.metric_summaries)} metrics, {len(analysis.correlations)} correlations"
        )
        return analysis

    async def _get_doses(self, protocol_id: str) -> List[DoseEvent]:
        cursor = self.db.dose_logs.find({"protocol_id": protocol_id}).sort("taken_at", 1)
        doses = []
        async for doc in cursor:
            doses.append(DoseEvent(**doc))
        return doses

    async def _get_outcomes(
        self,
        user_id: str,
        start: datetime,
        end: datetime
    ) -> List[OutcomeSample]:
        cursor = self.db.outcome_logs.find({
            "user_id": user_id,
            "recorded_at": {"$gte": start, "$lte": end}
        }).sort("recorded_at", 1)
        samples = []
        async for doc in cursor:
            samples.append(OutcomeSample(**doc))
        return samples

    async def _get_side_effects(self, protocol_id: str) -> List[SideEffectEvent]:
        cursor = self.db.protocol_events.find({
            "protocol_id": protocol_id,
            "event_type": SIDE_EFFECT_EVENT
        }).sort("occurred_at", 1)
        events = []
        async for doc in cursor:
            events.append(SideEffectEvent(**doc))
        return events

    @staticmethod
    def _strip_id(doc: Dict[str, Any]) -> Dict[str, Any]:
        """Drop Mongo's internal _id before returning a raw document"""
        return {k: v for k, v in doc.items() if k != "_id"}
