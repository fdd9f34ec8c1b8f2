"""
Peptide Protocol Engine - Scoring & Selection

Builds a protocol from constraint-filtered candidates:
1. Score each candidate by goal relevance and lane availability
2. Keep the top N by score (stable, ties keep catalog order)
3. Walk them greedily under the weekly injection limit
4. Flag (but never enforce) a monthly budget overrun

Personalization runs the same checks over a template's fixed compound
order instead of a ranked list.

Selection is greedy: a skipped candidate is never replaced by a cheaper
combination found later.
"""

from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Sequence, Tuple
import logging

from models.catalog import (
    Compound, EvidenceLane, LaneDetail, RiskAppetite,
    SuggestionRequest, PersonalizeRequest, ProtocolTemplate,
    ProtocolSuggestion, SuggestedCompound, InteractionWarning
)
from engine.constraints import check_compound, filter_candidates
from engine.frequency import best_lane, weekly_injections
from engine.rounding import round_half_up

logger = logging.getLogger(__name__)

GOAL_MATCH_POINTS = 10
LANE_FOUND_POINTS = 1

# Heuristic unit-price proxy: dose * 0.01 USD per injection, 4.33 weeks/month
PRICE_PER_DOSE_UNIT = 0.01
WEEKS_PER_MONTH = 4.33

DEFAULT_PERSONALIZE_RISK = RiskAppetite.MODERATE


@dataclass
class ScoredCandidate:
    """A candidate with its chosen lane and ranking score"""
    compound: Compound
    lane: EvidenceLane
    detail: LaneDetail
    score: int
    matched_goals: List[str] = field(default_factory=list)

    @property
    def injections_per_week(self) -> float:
        return weekly_injections(self.detail.frequency)


def matched_goals(compound: Compound, goals: Iterable[str]) -> List[str]:
    """Goal tags found (case-insensitive substring) in the description"""
    description = compound.description.lower()
    return [g for g in goals if g.strip() and g.strip().lower() in description]


def score_candidates(
    survivors: Iterable[Compound],
    goals: Sequence[str],
    risk_appetite: RiskAppetite
) -> Tuple[List[ScoredCandidate], List[str]]:
    """
    Score candidates that have a lane at this risk appetite.

    Returns the scored candidates in input order and a block reason for
    each candidate without an eligible lane.
    """
    scored: List[ScoredCandidate] = []
    blocked: List[str] = []

    for compound in survivors:
        lane = best_lane(compound, risk_appetite)
        if lane is None:
            blocked.append(_no_lane_reason(compound, risk_appetite))
            continue

        goals_hit = matched_goals(compound, goals)
        scored.append(ScoredCandidate(
            compound=compound,
            lane=lane[0],
            detail=lane[1],
            score=len(goals_hit) * GOAL_MATCH_POINTS + LANE_FOUND_POINTS,
            matched_goals=goals_hit,
        ))

    return scored, blocked


def monthly_cost(compounds: Iterable[SuggestedCompound]) -> float:
    """Unrounded estimated monthly cost of a set of suggested compounds"""
    return sum(
        c.dose * PRICE_PER_DOSE_UNIT * c.weekly_injections * WEEKS_PER_MONTH
        for c in compounds
    )


def select(
    survivors: Iterable[Compound],
    request: SuggestionRequest,
    warnings: Iterable[InteractionWarning] = (),
    blocked_reasons: Iterable[str] = ()
) -> ProtocolSuggestion:
    """
    Rank survivors and greedily build a suggestion within the limits.

    `warnings` and `blocked_reasons` from an earlier constraint pass are
    carried into the result ahead of the ones produced here.
    """
    blocked = list(blocked_reasons)

    scored, no_lane = score_candidates(survivors, request.goals, request.risk_appetite)
    blocked.extend(no_lane)

    # sorted() is stable, so equal scores keep catalog order
    ranked = sorted(scored, key=lambda c: c.score, reverse=True)
    shortlist = ranked[:request.max_compounds]

    compounds: List[SuggestedCompound] = []
    total_injections = 0.0

    for candidate in shortlist:
        injections = candidate.injections_per_week
        if total_injections + injections > request.max_injections_per_week:
            blocked.append(_injection_limit_reason(
                candidate.compound, request.max_injections_per_week
            ))
            continue

        total_injections += injections
        compounds.append(_suggested(candidate, _goal_rationale(candidate, request.risk_appetite)))

    suggestion = _finish(compounds, list(warnings), blocked, total_injections, request.budget)
    logger.debug(
        f"Selected {len(compounds)}/{len(shortlist)} shortlisted compounds "
        f"({total_injections:g} injections/week)"
    )
    return suggestion


def suggest(candidates: Iterable[Compound], request: SuggestionRequest) -> ProtocolSuggestion:
    """Constraint filter followed by scoring & selection"""
    filtered = filter_candidates(
        candidates, request.conditions, request.current_compound_ids
    )
    return select(
        filtered.survivors,
        request,
        warnings=filtered.warnings,
        blocked_reasons=filtered.blocked_reasons,
    )


def personalize(template: ProtocolTemplate, request: PersonalizeRequest) -> ProtocolSuggestion:
    """
    Fit a template to a user's constraints, keeping template order.

    Each compound is checked on its own and either kept or skipped with a
    reason. There is no ranking step.
    """
    risk = request.risk_appetite or DEFAULT_PERSONALIZE_RISK
    max_compounds = request.max_compounds or len(template.compounds)
    limit = request.max_injections_per_week

    compounds: List[SuggestedCompound] = []
    warnings: List[InteractionWarning] = []
    blocked: List[str] = []
    total_injections = 0.0

    for compound in template.compounds:
        if len(compounds) >= max_compounds:
            blocked.append(f"{compound.name} skipped: maxCompounds ({max_compounds}) reached")
            continue

        check = check_compound(compound, request.conditions, request.current_compound_ids)
        if check.contraindicated:
            blocked.append(f"{compound.name} blocked: contraindication with user condition")
            continue
        if check.avoid_reasons:
            blocked.extend(check.avoid_reasons)
            continue

        lane = best_lane(compound, risk)
        if lane is None:
            blocked.append(_no_lane_reason(compound, risk))
            continue

        candidate = ScoredCandidate(compound=compound, lane=lane[0], detail=lane[1], score=0)
        injections = candidate.injections_per_week
        if total_injections + injections > limit:
            blocked.append(_injection_limit_reason(compound, limit))
            continue

        total_injections += injections
        warnings.extend(check.warnings)
        compounds.append(_suggested(
            candidate,
            f'From template "{template.name}", personalized to {candidate.lane.value} lane.'
        ))

    return _finish(compounds, warnings, blocked, total_injections, request.budget)


# =============================================================================
# HELPERS
# =============================================================================

def _suggested(candidate: ScoredCandidate, rationale: str) -> SuggestedCompound:
    compound = candidate.compound
    return SuggestedCompound(
        compound_id=compound.id,
        name=compound.name,
        slug=compound.slug,
        lane=candidate.lane,
        dose=candidate.detail.dose_min,
        unit=candidate.detail.unit,
        frequency=candidate.detail.frequency,
        route=compound.route,
        weekly_injections=candidate.injections_per_week,
        rationale=rationale,
    )


def _goal_rationale(candidate: ScoredCandidate, risk: RiskAppetite) -> str:
    lane_text = f"{candidate.lane.value.capitalize()} lane ({risk.value})."
    if candidate.matched_goals:
        return f"Matches goals: {', '.join(candidate.matched_goals)}. {lane_text}"
    return f"No direct goal match. {lane_text}"


def _no_lane_reason(compound: Compound, risk: RiskAppetite) -> str:
    return f"{compound.name} blocked: no lane available at {risk.value} risk level"


def _plain_number(value: float) -> str:
    """10.0 -> "10", 12.5 -> "12.5"; no exponent notation"""
    if float(value).is_integer():
        return str(int(value))
    return str(value)


def _injection_limit_reason(compound: Compound, limit: float) -> str:
    return f"{compound.name} skipped: would exceed {limit:g} injections/week limit"


def _finish(
    compounds: List[SuggestedCompound],
    warnings: List[InteractionWarning],
    blocked: List[str],
    total_injections: float,
    budget: Optional[float]
) -> ProtocolSuggestion:
    """Attach the advisory budget check; never removes a compound"""
    cost = None
    if budget is not None:
        raw_cost = monthly_cost(compounds)
        cost = round_half_up(raw_cost)
        if raw_cost > budget:
            blocked.append(
                f"Estimated monthly cost (${cost:.2f}) exceeds budget (${_plain_number(budget)})"
            )

    return ProtocolSuggestion(
        compounds=compounds,
        warnings=warnings,
        blocked_reasons=blocked,
        total_injections_per_week=total_injections,
        estimated_monthly_cost=cost,
    )
