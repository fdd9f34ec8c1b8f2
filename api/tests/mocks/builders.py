"""
Record builders for engine tests.

Short constructors for catalog compounds and logged history so test
cases state only the fields they care about.
"""

from datetime import datetime, timedelta
from typing import Optional

from models.catalog import Compound, EvidenceLane, LaneDetail, Interaction, InteractionSeverity
from models.tracking import OutcomeSample, DoseEvent


def make_compound(
    compound_id: str,
    description: str = "",
    lanes: Optional[dict] = None,
    contraindications: Optional[list] = None,
    interactions: Optional[list] = None,
) -> Compound:
    """Build a catalog compound; lanes map lane name -> (dose, frequency)."""
    lanes = lanes if lanes is not None else {"clinical": (100, "daily")}
    return Compound(
        id=compound_id,
        name=compound_id,
        slug=compound_id.lower(),
        description=description,
        lanes={
            EvidenceLane(lane): LaneDetail(dose_min=dose, dose_max=dose * 2, frequency=freq)
            for lane, (dose, freq) in lanes.items()
        },
        contraindications=contraindications or [],
        interactions=interactions or [],
    )


def make_interaction(target_id: str, severity: str, note: str = "") -> Interaction:
    return Interaction(
        target_id=target_id,
        target_name=target_id,
        severity=InteractionSeverity(severity),
        note=note,
    )


def make_samples(metric: str, values: list, start: datetime, step: timedelta) -> list[OutcomeSample]:
    """Samples of one metric spaced `step` apart"""
    return [
        OutcomeSample(metric=metric, value=value, recorded_at=start + step * i)
        for i, value in enumerate(values)
    ]


def make_doses(times: list[datetime]) -> list[DoseEvent]:
    return [DoseEvent(taken_at=t) for t in times]
