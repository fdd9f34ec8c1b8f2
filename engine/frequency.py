"""
Peptide Protocol Engine - Lane & Frequency Tables

Immutable lookup data used by selection, personalization and adherence:
- Which evidence lanes each risk appetite may draw from, in priority order
- Keyword rules turning free-text dosing frequencies into weekly injections
"""

from types import MappingProxyType
from typing import Mapping, Optional, Tuple

from models.catalog import Compound, EvidenceLane, LaneDetail, RiskAppetite


# Lanes eligible per risk appetite, best evidence first
LANE_PRIORITY: Mapping[RiskAppetite, Tuple[EvidenceLane, ...]] = MappingProxyType({
    RiskAppetite.CONSERVATIVE: (EvidenceLane.CLINICAL,),
    RiskAppetite.MODERATE: (EvidenceLane.CLINICAL, EvidenceLane.EXPERT),
    RiskAppetite.AGGRESSIVE: (
        EvidenceLane.CLINICAL,
        EvidenceLane.EXPERT,
        EvidenceLane.EXPERIMENTAL,
    ),
})

# (substrings, exact matches, injections per week); first matching rule wins.
# "biweekly" must be tested before "weekly".
FREQUENCY_RULES: Tuple[Tuple[Tuple[str, ...], Tuple[str, ...], float], ...] = (
    (("daily",), ("7x/week",), 7),
    (("2x", "twice"), (), 2),
    (("3x",), (), 3),
    (("5x", "5 times"), (), 5),
    (("eod", "every other"), (), 3.5),
    (("biweekly", "2 weeks"), (), 0.5),
    (("weekly",), ("1x/week",), 1),
)

DEFAULT_WEEKLY_INJECTIONS = 3


def weekly_injections(frequency: Optional[str]) -> float:
    """
    Estimate weekly injections from a free-text frequency.

    Unrecognized text falls back to 3 per week.
    """
    text = (frequency or "").strip().lower()
    for substrings, exact, per_week in FREQUENCY_RULES:
        if text in exact or any(s in text for s in substrings):
            return per_week
    return DEFAULT_WEEKLY_INJECTIONS


def best_lane(
    compound: Compound,
    risk_appetite: RiskAppetite
) -> Optional[Tuple[EvidenceLane, LaneDetail]]:
    """First populated lane allowed at this risk appetite, or None"""
    for lane in LANE_PRIORITY[risk_appetite]:
        detail = compound.lanes.get(lane)
        if detail is not None:
            return lane, detail
    return None
