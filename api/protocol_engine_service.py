"""
Peptide Protocol Engine - Recommendation Service

Loads catalog records from the store and runs the recommendation engine.
The engine itself is pure; all I/O happens here, before and after it runs.
"""

from typing import List
import logging

from models.catalog import (
    Compound, ProtocolTemplate, SuggestionRequest, PersonalizeRequest,
    ProtocolSuggestion
)
from engine.catalog import compound_from_document, index_by_id, template_from_document
from engine.errors import NotFoundError
from engine.selection import suggest, personalize

logger = logging.getLogger(__name__)


class ProtocolEngineService:
    """
    Service for protocol suggestions

    Handles:
    - Catalog loading (compounds with lanes, contraindications, interactions)
    - Catalog-wide suggestions
    - Template personalization
    """

    def __init__(self, db):
        """
        Initialize with database connection

        db should have collections:
        - compounds
        - protocol_templates
        """
        self.db = db

    # =========================================================================
    # CATALOG
    # =========================================================================

    async def load_catalog(self) -> List[Compound]:
        """All catalog compounds, in name order"""
        cursor = self.db.compounds.find({}).sort("name", 1)
        compounds = []
        async for doc in cursor:
            compounds.append(compound_from_document(doc))
        return compounds

    async def get_template(self, template_id: str) -> ProtocolTemplate:
        """Load a template with its compounds materialized in template order"""
        doc = await self.db.protocol_templates.find_one({"template_id": template_id})
        if not doc:
            raise NotFoundError("Protocol template", template_id)

        cursor = self.db.compounds.find({"compound_id": {"$in": doc.get("compound_ids", [])}})
        compounds = []
        async for compound_doc in cursor:
            compounds.append(compound_from_document(compound_doc))

        return template_from_document(doc, index_by_id(compounds))

    # =========================================================================
    # RECOMMENDATION
    # =========================================================================

    async def suggest_protocol(
        self,
        user_id: str,
        request: SuggestionRequest
    ) -> ProtocolSuggestion:
        """Suggest a protocol from the whole catalog"""
        catalog = await self.load_catalog()
        suggestion = suggest(catalog, request)

        logger.info(
            f"Protocol suggestion for user {user_id}: {len(suggestion.compounds)} compounds, "
            f"{len(suggestion.warnings)} warnings, {len(suggestion.blocked_reasons)} blocks"
        )
        return suggestion

    async def personalize_template(
        self,
        user_id: str,
        template_id: str,
        request: PersonalizeRequest
    ) -> ProtocolSuggestion:
        """
        Personalize a template to the user's constraints.
        Raises NotFoundError for an unknown template id.
        """
        template = await self.get_template(template_id)
        suggestion = personalize(template, request)

        logger.info(
            f'Template "{template.name}" personalized for user {user_id}: '
            f"{len(suggestion.compounds)}/{len(template.compounds)} compounds kept"
        )
        return suggestion
