"""
Peptide Protocol Engine - Insight Endpoints

Read-only analytics over the caller's logged doses, outcomes and events.
"""

from fastapi import APIRouter, Depends

from api.deps import get_database, get_settings, get_current_user_id
from api.insight_service import InsightService

router = APIRouter()


@router.get("/insights/me")
async def get_my_insights(user_id: str = Depends(get_current_user_id)):
    """Aggregate insights for the caller"""
    db = get_database()
    service = InsightService(db, get_settings())

    insights = await service.get_user_insights(user_id)

    return {"success": True, "data": insights.model_dump(mode="json")}


@router.get("/insights/protocol/{protocol_id}")
async def get_protocol_analysis(
    protocol_id: str,
    user_id: str = Depends(get_current_user_id)
):
    """Analysis of one of the caller's protocols"""
    db = get_database()
    service = InsightService(db, get_settings())

    analysis = await service.get_protocol_analysis(user_id, protocol_id)

    return {"success": True, "data": analysis.model_dump(mode="json")}
