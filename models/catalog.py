"""
Peptide Protocol Engine - Catalog & Recommendation Models

This module contains the Pydantic models for:
- Catalog reference data (compounds, evidence lanes, interactions)
- Protocol templates
- Suggestion / personalization requests
- Protocol suggestions returned by the recommendation engine
"""

from pydantic import BaseModel, Field
from typing import Optional, List, Dict
from enum import Enum


# =============================================================================
# ENUMS
# =============================================================================

class EvidenceLane(str, Enum):
    """Evidence tier a compound's dosing guidance is published under"""
    CLINICAL = "clinical"           # Human trials / label data
    EXPERT = "expert"               # Coach and practitioner protocols
    EXPERIMENTAL = "experimental"   # Community n=1 reports


class RiskAppetite(str, Enum):
    """User-chosen setting that widens which lanes are eligible"""
    CONSERVATIVE = "conservative"
    MODERATE = "moderate"
    AGGRESSIVE = "aggressive"


class InteractionSeverity(str, Enum):
    """Severity of a directed compound interaction"""
    AVOID = "avoid"         # Hard exclusion
    CAUTION = "caution"     # Soft warning


class AdministrationRoute(str, Enum):
    """How the compound is administered"""
    SUBCUTANEOUS = "subcutaneous"
    INTRAMUSCULAR = "intramuscular"
    INTRANASAL = "intranasal"
    ORAL = "oral"
    TOPICAL = "topical"
    INTRAVENOUS = "intravenous"


# =============================================================================
# CATALOG MODELS
# =============================================================================

class LaneDetail(BaseModel):
    """Dosing guidance for a single evidence lane"""
    dose_min: float = Field(..., ge=0)
    dose_max: float = Field(..., ge=0)
    unit: str = "mcg"
    frequency: str                          # Free text, e.g. "2x/week", "EOD"
    indication: Optional[str] = None


class Interaction(BaseModel):
    """
    Directed interaction edge from the owning compound to another one.
    Only the stored direction is ever checked.
    """
    target_id: str
    target_name: str
    severity: InteractionSeverity
    note: str = ""


class Compound(BaseModel):
    """
    A catalog compound with its lane data already joined.

    The keys of `lanes` are the compound's lane set, so a lane can never be
    marked present without data.
    """
    id: str
    name: str
    slug: str
    route: AdministrationRoute = AdministrationRoute.SUBCUTANEOUS
    description: str = ""
    lanes: Dict[EvidenceLane, LaneDetail] = {}
    contraindications: List[str] = []       # Condition names
    interactions: List[Interaction] = []


class ProtocolTemplate(BaseModel):
    """A named, ordered list of compounds curated as a starting protocol"""
    id: str
    name: str
    description: str = ""
    compounds: List[Compound] = []          # Materialized, in template order


# =============================================================================
# REQUEST MODELS
# =============================================================================

class SuggestionRequest(BaseModel):
    """Constraints for a catalog-wide protocol suggestion"""
    goals: List[str]                        # Free-text tags, e.g. "healing"
    risk_appetite: RiskAppetite
    current_compound_ids: List[str] = []    # For interaction checking
    conditions: List[str] = []              # For contraindication filtering
    max_compounds: int = Field(3, ge=1, le=10)
    max_injections_per_week: float = Field(7, ge=1, le=21)
    budget: Optional[float] = Field(None, ge=0)     # Monthly, USD


class PersonalizeRequest(BaseModel):
    """Constraints for personalizing a template; every field is optional"""
    risk_appetite: Optional[RiskAppetite] = None    # Defaults to moderate
    current_compound_ids: List[str] = []
    conditions: List[str] = []
    max_compounds: Optional[int] = Field(None, ge=1, le=10)  # Defaults to template size
    max_injections_per_week: float = Field(7, ge=1, le=21)
    budget: Optional[float] = Field(None, ge=0)


# =============================================================================
# SUGGESTION MODELS
# =============================================================================

class SuggestedCompound(BaseModel):
    """A compound selected into a protocol, with the lane that was chosen"""
    compound_id: str
    name: str
    slug: str
    lane: EvidenceLane
    dose: float
    unit: str
    frequency: str
    route: AdministrationRoute
    weekly_injections: float
    rationale: str


class InteractionWarning(BaseModel):
    """Caution-level interaction between a suggested and an in-use compound"""
    compound: str
    other_compound: str
    severity: InteractionSeverity = InteractionSeverity.CAUTION
    note: str = ""


class ProtocolSuggestion(BaseModel):
    """
    Result of a suggestion or personalization.

    Business-rule exclusions never raise; they land in `blocked_reasons`.
    """
    compounds: List[SuggestedCompound] = []
    warnings: List[InteractionWarning] = []
    blocked_reasons: List[str] = []
    total_injections_per_week: float = 0
    estimated_monthly_cost: Optional[float] = None
