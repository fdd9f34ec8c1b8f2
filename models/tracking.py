"""
Peptide Protocol Engine - Tracking & Analytics Models

Logged history (doses, outcomes, protocol events) and the
analytics records derived from it.
"""

from pydantic import BaseModel, Field
from typing import Optional, List, Dict, Any
from datetime import datetime
from enum import Enum


# =============================================================================
# ENUMS
# =============================================================================

class TrendLabel(str, Enum):
    """Coarse direction of a metric between the two halves of its history"""
    IMPROVING = "improving"
    DECLINING = "declining"
    STABLE = "stable"
    INSUFFICIENT_DATA = "insufficient_data"


class CorrelationDirection(str, Enum):
    POSITIVE = "positive"
    NEGATIVE = "negative"


class CorrelationConfidence(str, Enum):
    LOW = "low"             # 0.3 < |r| <= 0.5
    MODERATE = "moderate"   # 0.5 < |r| <= 0.7
    HIGH = "high"           # |r| > 0.7


class ProtocolStatus(str, Enum):
    """Lifecycle of a user's running protocol"""
    ACTIVE = "active"
    PAUSED = "paused"
    COMPLETED = "completed"
    ARCHIVED = "archived"


# =============================================================================
# LOGGED HISTORY
# =============================================================================

class OutcomeSample(BaseModel):
    """A single time-stamped measurement, e.g. energy=7"""
    metric: str
    value: float
    recorded_at: datetime


class DoseEvent(BaseModel):
    """A logged dose. Only its presence matters for correlation."""
    taken_at: datetime
    amount: float = 1.0
    frequency: Optional[str] = None


class SideEffectEvent(BaseModel):
    """A side effect reported as a protocol event"""
    title: str = "Unknown"
    severity: str = "low"
    occurred_at: Optional[datetime] = None


class ProtocolCompound(BaseModel):
    """A compound inside a user's running protocol"""
    compound_id: str
    dose: Optional[float] = None
    frequency: str = ""


class UserProtocol(BaseModel):
    """A protocol the user is (or was) running"""
    protocol_id: str
    user_id: str
    name: str
    status: ProtocolStatus = ProtocolStatus.ACTIVE
    start_date: datetime
    end_date: Optional[datetime] = None
    compounds: List[ProtocolCompound] = []

    def frequencies(self) -> List[str]:
        return [c.frequency for c in self.compounds]


# =============================================================================
# ANALYTICS OUTPUT
# =============================================================================

class MetricSummary(BaseModel):
    """Summary statistics of one metric"""
    metric: str
    count: int
    mean: float
    min: float
    max: float
    latest: float
    trend: TrendLabel


class Correlation(BaseModel):
    """Weekly dose-count vs weekly metric-average correlation"""
    metric: str
    direction: CorrelationDirection
    confidence: CorrelationConfidence
    coefficient: float                      # Pearson r, 2 dp


class SideEffectSummary(BaseModel):
    title: str
    severity: str
    count: int


class ProtocolAnalysis(BaseModel):
    """Detailed analysis of a single user protocol"""
    protocol_id: str
    protocol_name: str
    duration_days: int
    total_doses: int
    adherence_rate: float
    metric_summaries: List[MetricSummary] = []
    side_effects: List[SideEffectSummary] = []
    correlations: List[Correlation] = []


class UserInsights(BaseModel):
    """User-level rollup across all protocols"""
    active_protocols: int
    total_doses_logged: int
    total_outcomes_logged: int
    adherence_rate: float
    top_metrics: List[MetricSummary] = []
    recent_events: List[Dict[str, Any]] = Field(default_factory=list)
