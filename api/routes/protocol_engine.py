"""
Peptide Protocol Engine - Recommendation Endpoints

Catalog-wide protocol suggestions and template personalization.
"""

from fastapi import APIRouter, Depends

from api.deps import get_database, get_current_user_id
from api.protocol_engine_service import ProtocolEngineService
from models.catalog import SuggestionRequest, PersonalizeRequest

router = APIRouter()


# =============================================================================
# RECOMMENDATION ENDPOINTS
# =============================================================================

@router.post("/protocol-engine/suggest")
async def suggest_protocol(
    body: SuggestionRequest,
    user_id: str = Depends(get_current_user_id)
):
    """Suggest a protocol from the whole compound catalog"""
    db = get_database()
    service = ProtocolEngineService(db)

    suggestion = await service.suggest_protocol(user_id, body)

    return {"success": True, "data": suggestion.model_dump(mode="json")}


@router.post("/protocol-engine/personalize/{template_id}")
async def personalize_template(
    template_id: str,
    body: PersonalizeRequest,
    user_id: str = Depends(get_current_user_id)
):
    """Personalize a protocol template to the caller's constraints"""
    db = get_database()
    service = ProtocolEngineService(db)

    suggestion = await service.personalize_template(user_id, template_id, body)

    return {"success": True, "data": suggestion.model_dump(mode="json")}
