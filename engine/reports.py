"""
Peptide Protocol Engine - Analytics Reports

Merges the independent analytics passes (metric summaries, adherence,
correlation, side effects) over one user's history into a single report.
"""

from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from models.tracking import (
    UserProtocol, DoseEvent, OutcomeSample, SideEffectEvent,
    ProtocolAnalysis, UserInsights
)
from engine.adherence import AdherencePeriod, elapsed_days, estimate, estimate_rollup
from engine.correlation import correlate
from engine.metrics import summarize, summarize_side_effects, top_metrics, DEFAULT_TOP_METRICS


def build_protocol_analysis(
    protocol: UserProtocol,
    doses: Sequence[DoseEvent],
    samples: Sequence[OutcomeSample],
    side_effects: Iterable[SideEffectEvent] = (),
    as_of: Optional[datetime] = None
) -> ProtocolAnalysis:
    """
    Analyze one protocol over its period (start date to end date, or to
    `as_of` while it is still running).
    """
    end = protocol.end_date or as_of
    duration = elapsed_days(protocol.start_date, end)

    return ProtocolAnalysis(
        protocol_id=protocol.protocol_id,
        protocol_name=protocol.name,
        duration_days=duration,
        total_doses=len(doses),
        adherence_rate=estimate(protocol.frequencies(), duration, len(doses)),
        metric_summaries=summarize(samples),
        side_effects=summarize_side_effects(side_effects),
        correlations=correlate(doses, samples),
    )


def build_user_insights(
    active_protocols: Iterable[Tuple[UserProtocol, int]],
    total_doses: int,
    total_outcomes: int,
    recent_samples: Iterable[OutcomeSample],
    recent_events: Optional[List[Dict[str, Any]]] = None,
    top_n: int = DEFAULT_TOP_METRICS,
    as_of: Optional[datetime] = None
) -> UserInsights:
    """
    Roll up a user's history.

    `active_protocols` pairs each active protocol with its logged dose
    count; adherence is computed from their summed expected and actual
    doses since each protocol started.
    """
    active = list(active_protocols)
    periods = [
        AdherencePeriod(
            frequencies=protocol.frequencies(),
            elapsed_days=elapsed_days(protocol.start_date, as_of),
            actual_doses=actual,
        )
        for protocol, actual in active
    ]

    return UserInsights(
        active_protocols=len(active),
        total_doses_logged=total_doses,
        total_outcomes_logged=total_outcomes,
        adherence_rate=estimate_rollup(periods),
        top_metrics=top_metrics(summarize(recent_samples), top_n),
        recent_events=recent_events or [],
    )
