"""
Peptide Protocol Engine - Metric Aggregation & Trends

Summarizes a user's outcome history per metric and labels the movement
between the first and second half of each series.
"""

from typing import Dict, Iterable, List, Sequence
import statistics

from models.tracking import (
    OutcomeSample, MetricSummary, TrendLabel,
    SideEffectEvent, SideEffectSummary
)
from engine.rounding import round_half_up

MIN_TREND_SAMPLES = 4
STABLE_CHANGE_PERCENT = 5
DEFAULT_TOP_METRICS = 10


def group_by_metric(samples: Iterable[OutcomeSample]) -> Dict[str, List[OutcomeSample]]:
    """Group samples by metric name, in first-appearance order"""
    groups: Dict[str, List[OutcomeSample]] = {}
    for sample in samples:
        groups.setdefault(sample.metric, []).append(sample)
    return groups


def classify_trend(values: Sequence[float]) -> TrendLabel:
    """
    Label a chronologically sorted series.

    The series is split at floor(n/2) and the second-half mean is compared
    with the first-half mean. A first-half mean of zero has no percent
    change and is reported as insufficient data.
    """
    if len(values) < MIN_TREND_SAMPLES:
        return TrendLabel.INSUFFICIENT_DATA

    mid = len(values) // 2
    first_mean = statistics.fmean(values[:mid])
    second_mean = statistics.fmean(values[mid:])

    if first_mean == 0:
        return TrendLabel.INSUFFICIENT_DATA

    change_percent = (second_mean - first_mean) / first_mean * 100

    if abs(change_percent) < STABLE_CHANGE_PERCENT:
        return TrendLabel.STABLE
    if change_percent > 0:
        return TrendLabel.IMPROVING
    return TrendLabel.DECLINING


def summarize_metric(metric: str, samples: Sequence[OutcomeSample]) -> MetricSummary:
    """Count, mean, min, max, latest value and trend of one metric"""
    if not samples:
        raise ValueError(f"No samples for metric {metric}")

    ordered = sorted(samples, key=lambda s: s.recorded_at)
    values = [s.value for s in ordered]

    return MetricSummary(
        metric=metric,
        count=len(values),
        mean=round_half_up(statistics.fmean(values)),
        min=min(values),
        max=max(values),
        latest=values[-1],
        trend=classify_trend(values),
    )


def summarize(samples: Iterable[OutcomeSample]) -> List[MetricSummary]:
    """One summary per metric, in first-appearance order"""
    return [
        summarize_metric(metric, group)
        for metric, group in group_by_metric(samples).items()
    ]


def top_metrics(
    summaries: Iterable[MetricSummary],
    limit: int = DEFAULT_TOP_METRICS
) -> List[MetricSummary]:
    """Most-sampled metrics first; ties keep their order"""
    return sorted(summaries, key=lambda s: s.count, reverse=True)[:limit]


def summarize_side_effects(events: Iterable[SideEffectEvent]) -> List[SideEffectSummary]:
    """Tally side effects by title; the latest reported severity wins"""
    tally: Dict[str, SideEffectSummary] = {}
    for event in events:
        existing = tally.get(event.title)
        count = existing.count + 1 if existing else 1
        tally[event.title] = SideEffectSummary(
            title=event.title, severity=event.severity, count=count
        )
    return list(tally.values())
