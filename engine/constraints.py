"""
Peptide Protocol Engine - Constraint Filter

Removes candidates a user must not take:
- Contraindications against the user's declared conditions
- AVOID-severity interactions with compounds already in use

CAUTION-severity interactions keep the candidate and produce a warning.
Interaction edges are directed; only candidate -> in-use edges are checked.
"""

from dataclasses import dataclass, field
from typing import Iterable, List, Set

from models.catalog import Compound, InteractionSeverity, InteractionWarning


@dataclass
class CompoundCheck:
    """Constraint verdict for a single compound"""
    compound: Compound
    contraindicated: List[str] = field(default_factory=list)
    warnings: List[InteractionWarning] = field(default_factory=list)
    avoid_reasons: List[str] = field(default_factory=list)

    @property
    def allowed(self) -> bool:
        return not self.contraindicated and not self.avoid_reasons


@dataclass
class FilterResult:
    """Survivors of the constraint filter, in candidate order"""
    survivors: List[Compound] = field(default_factory=list)
    warnings: List[InteractionWarning] = field(default_factory=list)
    blocked_reasons: List[str] = field(default_factory=list)


def _normalize(values: Iterable[str]) -> Set[str]:
    return {v.strip().lower() for v in values if v}


def check_compound(
    compound: Compound,
    conditions: Iterable[str],
    in_use_ids: Iterable[str]
) -> CompoundCheck:
    """
    Check one compound against the user's conditions and in-use compounds.

    A contraindicated compound is not checked for interactions.
    """
    conditions_lc = _normalize(conditions)
    check = CompoundCheck(compound=compound)

    check.contraindicated = [
        c for c in compound.contraindications if c.strip().lower() in conditions_lc
    ]
    if check.contraindicated:
        return check

    in_use = set(in_use_ids)
    warnings = []
    for edge in compound.interactions:
        if edge.target_id not in in_use:
            continue
        if edge.severity == InteractionSeverity.AVOID:
            reason = f"{compound.name} blocked: AVOID interaction with {edge.target_name}"
            if edge.note:
                reason += f" - {edge.note}"
            check.avoid_reasons.append(reason)
        else:
            warnings.append(InteractionWarning(
                compound=compound.name,
                other_compound=edge.target_name,
                severity=edge.severity,
                note=edge.note,
            ))

    # Blocked compounds carry no warnings
    if not check.avoid_reasons:
        check.warnings = warnings
    return check


def filter_candidates(
    candidates: Iterable[Compound],
    conditions: Iterable[str],
    in_use_ids: Iterable[str]
) -> FilterResult:
    """
    Drop contraindicated and AVOID-blocked candidates.

    Contraindicated candidates are dropped without a reason; AVOID blocks
    are reported naming both compounds.
    """
    conditions = list(conditions)
    in_use = set(in_use_ids)
    result = FilterResult()

    for candidate in candidates:
        check = check_compound(candidate, conditions, in_use)
        if check.contraindicated:
            continue
        if check.avoid_reasons:
            result.blocked_reasons.extend(check.avoid_reasons)
            continue
        result.survivors.append(candidate)
        result.warnings.extend(check.warnings)

    return result
