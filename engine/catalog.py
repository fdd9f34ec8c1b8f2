"""
Peptide Protocol Engine - Catalog Shaping

Turns stored catalog documents into engine records. The store joins lane
data, contraindications and interaction edges before handing them over.
"""

from typing import Any, Dict, Iterable, List, Mapping
import logging

from models.catalog import Compound, EvidenceLane, ProtocolTemplate

logger = logging.getLogger(__name__)


def compound_from_document(doc: Mapping[str, Any]) -> Compound:
    """
    Build a Compound from a stored document.

    Lane sub-documents that are empty or null are dropped so the lane set
    always matches the populated lane data.
    """
    lanes = {}
    for lane in EvidenceLane:
        detail = (doc.get("lanes") or {}).get(lane.value)
        if detail:
            lanes[lane] = detail

    return Compound(
        id=doc.get("compound_id") or doc["id"],
        name=doc["name"],
        slug=doc.get("slug") or doc["name"].lower().replace(" ", "-"),
        route=doc.get("route", "subcutaneous"),
        description=doc.get("description", ""),
        lanes=lanes,
        contraindications=doc.get("contraindications", []),
        interactions=doc.get("interactions", []),
    )


def index_by_id(compounds: Iterable[Compound]) -> Dict[str, Compound]:
    """Map compound id -> compound, keeping first occurrence"""
    index: Dict[str, Compound] = {}
    for compound in compounds:
        index.setdefault(compound.id, compound)
    return index


def template_from_document(
    doc: Mapping[str, Any],
    compounds_by_id: Mapping[str, Compound]
) -> ProtocolTemplate:
    """Materialize a template's compounds in their stored order"""
    template_id = doc.get("template_id") or doc["id"]
    ordered: List[Compound] = []
    for compound_id in doc.get("compound_ids", []):
        compound = compounds_by_id.get(compound_id)
        if compound is None:
            logger.warning(
                f"Template {template_id} references unknown compound {compound_id}, skipping"
            )
            continue
        ordered.append(compound)

    return ProtocolTemplate(
        id=template_id,
        name=doc["name"],
        description=doc.get("description", ""),
        compounds=ordered,
    )
