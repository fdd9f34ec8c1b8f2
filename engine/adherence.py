"""
Peptide Protocol Engine - Adherence Estimation

Compares logged dose counts with the doses a protocol's declared
frequencies imply. Totals only: doses are not matched to specific
compounds or days.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, Optional, Sequence
import math

from engine.frequency import weekly_injections
from engine.rounding import round_half_up, round_whole

SECONDS_PER_DAY = 86400


@dataclass
class AdherencePeriod:
    """Declared frequencies, elapsed days and logged doses of one protocol"""
    frequencies: Sequence[str]
    elapsed_days: float
    actual_doses: int


def now_like(reference: datetime) -> datetime:
    """Current time, aware in the reference's zone or naive UTC to match it"""
    if reference.tzinfo:
        return datetime.now(reference.tzinfo)
    return datetime.utcnow()


def elapsed_days(start: datetime, end: Optional[datetime] = None) -> int:
    """Whole days from start to end (ceiling), never negative"""
    if end is None:
        end = now_like(start)
    seconds = (end - start).total_seconds()
    return max(0, math.ceil(seconds / SECONDS_PER_DAY))


def expected_doses(frequencies: Iterable[str], days: float) -> int:
    """Doses the frequencies imply over `days`, rounded to a whole dose"""
    total = sum(weekly_injections(f) / 7 * days for f in frequencies)
    return round_whole(total)


def adherence_rate(expected: int, actual: int) -> float:
    """min(1, actual / expected) to 2 dp; 0 when nothing was expected"""
    if expected <= 0:
        return 0.0
    return round_half_up(min(1.0, actual / expected))


def estimate(frequencies: Iterable[str], days: float, actual_doses: int) -> float:
    """Adherence of a single protocol"""
    return adherence_rate(expected_doses(frequencies, days), actual_doses)


def estimate_rollup(periods: Iterable[AdherencePeriod]) -> float:
    """Adherence across several protocols, from summed expected and actual doses"""
    total_expected = 0
    total_actual = 0
    for period in periods:
        total_expected += expected_doses(period.frequencies, period.elapsed_days)
        total_actual += period.actual_doses
    return adherence_rate(total_expected, total_actual)
