"""
Peptide Protocol Engine - Dose/Outcome Correlation

Buckets doses and outcome samples into ISO weeks (Monday start, UTC) and
correlates weekly dose counts with weekly metric averages per metric.
"""

from datetime import date, datetime, timedelta, timezone
from typing import Dict, Iterable, List, Sequence
import logging
import math

from models.tracking import (
    DoseEvent, OutcomeSample, Correlation,
    CorrelationDirection, CorrelationConfidence
)
from engine.metrics import group_by_metric
from engine.rounding import round_half_up

logger = logging.getLogger(__name__)

MIN_DOSE_EVENTS = 5
MIN_OUTCOME_SAMPLES = 5
MIN_COMMON_WEEKS = 3

REPORT_THRESHOLD = 0.3
MODERATE_THRESHOLD = 0.5
HIGH_THRESHOLD = 0.7


def week_key(timestamp: datetime) -> str:
    """ISO date of the Monday (UTC) starting the timestamp's week"""
    if timestamp.tzinfo is not None:
        timestamp = timestamp.astimezone(timezone.utc)
    day: date = timestamp.date()
    return (day - timedelta(days=day.weekday())).isoformat()


def weekly_dose_counts(doses: Iterable[DoseEvent]) -> Dict[str, int]:
    counts: Dict[str, int] = {}
    for dose in doses:
        key = week_key(dose.taken_at)
        counts[key] = counts.get(key, 0) + 1
    return counts


def weekly_averages(samples: Iterable[OutcomeSample]) -> Dict[str, float]:
    buckets: Dict[str, List[float]] = {}
    for sample in samples:
        buckets.setdefault(week_key(sample.recorded_at), []).append(sample.value)
    return {key: sum(values) / len(values) for key, values in buckets.items()}


def pearson(x: Sequence[float], y: Sequence[float]) -> float:
    """
    Pearson r from the sum formula.

    Returns 0 for empty input or a zero denominator (a constant series).
    """
    n = len(x)
    if n == 0 or n != len(y):
        return 0.0

    sum_x = sum(x)
    sum_y = sum(y)
    sum_xy = sum(xi * yi for xi, yi in zip(x, y))
    sum_x2 = sum(xi * xi for xi in x)
    sum_y2 = sum(yi * yi for yi in y)

    numerator = n * sum_xy - sum_x * sum_y
    spread = (n * sum_x2 - sum_x ** 2) * (n * sum_y2 - sum_y ** 2)
    if spread <= 0:
        return 0.0
    return numerator / math.sqrt(spread)


def confidence_band(r: float) -> CorrelationConfidence:
    magnitude = abs(r)
    if magnitude > HIGH_THRESHOLD:
        return CorrelationConfidence.HIGH
    if magnitude > MODERATE_THRESHOLD:
        return CorrelationConfidence.MODERATE
    return CorrelationConfidence.LOW


def correlate(
    doses: Sequence[DoseEvent],
    samples: Sequence[OutcomeSample]
) -> List[Correlation]:
    """
    Correlate weekly dose counts with weekly averages of each metric.

    Nothing is reported below 5 doses or 5 samples overall. A metric needs
    5 samples of its own and 3 weeks shared with the doses, and is only
    reported when |r| > 0.3.
    """
    if len(doses) < MIN_DOSE_EVENTS or len(samples) < MIN_OUTCOME_SAMPLES:
        return []

    dose_counts = weekly_dose_counts(doses)
    correlations: List[Correlation] = []

    for metric, metric_samples in group_by_metric(samples).items():
        if len(metric_samples) < MIN_OUTCOME_SAMPLES:
            continue

        averages = weekly_averages(metric_samples)
        common_weeks = sorted(set(dose_counts) & set(averages))
        if len(common_weeks) < MIN_COMMON_WEEKS:
            logger.debug(f"{metric}: only {len(common_weeks)} weeks overlap with doses")
            continue

        r = pearson(
            [dose_counts[w] for w in common_weeks],
            [averages[w] for w in common_weeks],
        )
        if abs(r) <= REPORT_THRESHOLD:
            continue

        correlations.append(Correlation(
            metric=metric,
            direction=CorrelationDirection.POSITIVE if r > 0 else CorrelationDirection.NEGATIVE,
            confidence=confidence_band(r),
            coefficient=round_half_up(r),
        ))

    return correlations
