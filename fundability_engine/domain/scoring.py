"""Fundability scoring engine - core business logic for credit fundability snapshots"""

import math
import operator
from datetime import datetime
from typing import Callable, List, Optional, Sequence, Tuple, TypeVar

from fundability_engine.domain.insights import (
    funding_range,
    generate_high_impact_actions,
    generate_risks,
    generate_strengths,
    goal_path,
    optimized_funding_range,
)
from fundability_engine.domain.models import (
    FundabilityInput,
    FundabilitySnapshot,
    SnapshotFlags,
    SnapshotMeta,
    Subscores,
    Tier,
)
from fundability_engine.utils.date_utils import to_iso, utc_now

ENGINE_VERSION = "fs_engine_v1.0"

T = TypeVar("T")

# Band tables are evaluated top-down; the first matching threshold wins.
CREDIT_SCORE_BANDS: List[Tuple[int, int]] = [
    (750, 95),
    (720, 90),
    (680, 80),
    (640, 65),
    (600, 45),
    (550, 30),
]
CREDIT_SCORE_FLOOR = 15
CREDIT_SCORE_MISSING = 40

UTILIZATION_BANDS: List[Tuple[float, int]] = [
    (10, 95),
    (30, 90),
    (50, 75),
    (75, 50),
    (90, 30),
]
UTILIZATION_FLOOR = 15

DTI_BANDS: List[Tuple[float, int]] = [
    (25, 95),
    (35, 85),
    (45, 70),
    (55, 45),
]
DTI_FLOOR = 25
DTI_MISSING = 55

INQUIRY_BANDS: List[Tuple[int, int]] = [
    (1, 95),
    (3, 80),
    (5, 60),
    (8, 35),
]
INQUIRY_FLOOR = 20

# ((min oldest account years, min open tradelines), subscore)
DEPTH_MIX_BANDS: List[Tuple[Tuple[float, int], int]] = [
    ((10, 6), 95),
    ((7, 4), 85),
    ((3, 3), 70),
]
DEPTH_MIX_FLOOR = 45

BK_OR_MAJOR_EVENT_PENALTY = -25
DEROG_PENALTIES: List[Tuple[int, int]] = [
    (3, -20),
    (1, -10),
]
PENALTY_FLOOR = -35

WEIGHTS = {
    "credit": 0.30,
    "utilization": 0.25,
    "dti": 0.20,
    "inquiry": 0.10,
    "depth_mix": 0.10,
}

TIERS: List[Tuple[int, Tier]] = [
    (85, Tier(1, "Tier 1 – Ready Now (Prime)")),
    (70, Tier(2, "Tier 2 – Tune-Up Then Ready")),
    (55, Tier(3, "Tier 3 – Optimization Required")),
]
TIER_FLOOR = Tier(4, "Tier 4 – Rehab / Long-Term Plan")


def _first_band(
    value: T,
    bands: Sequence[Tuple[T, int]],
    matches: Callable[[T, T], bool],
    default: int,
) -> int:
    for threshold, subscore in bands:
        if matches(value, threshold):
            return subscore
    return default


def credit_score_subscore(credit_score: Optional[int]) -> int:
    if credit_score is None:
        return CREDIT_SCORE_MISSING
    return _first_band(credit_score, CREDIT_SCORE_BANDS, operator.ge, CREDIT_SCORE_FLOOR)


def utilization_subscore(utilization_pct: float) -> int:
    return _first_band(utilization_pct, UTILIZATION_BANDS, operator.lt, UTILIZATION_FLOOR)


def dti_subscore(dti_pct: Optional[float]) -> int:
    if dti_pct is None:
        return DTI_MISSING
    return _first_band(dti_pct, DTI_BANDS, operator.lt, DTI_FLOOR)


def inquiry_subscore(inquiries: int) -> int:
    return _first_band(inquiries, INQUIRY_BANDS, operator.le, INQUIRY_FLOOR)


def depth_mix_subscore(oldest_account_years: float, open_tradelines: int) -> int:
    """Credit depth and mix: both account age and tradeline count must clear a band"""
    for (min_years, min_tradelines), subscore in DEPTH_MIX_BANDS:
        if oldest_account_years >= min_years and open_tradelines >= min_tradelines:
            return subscore
    return DEPTH_MIX_FLOOR


def penalty_points(bk_or_major_event: bool, recent_derogs: int) -> int:
    """
    Negative adjustment for derogatory events.

    Bankruptcy / major event costs 25 points; recent derogatory marks cost a
    further 10 (1-2 marks) or 20 (3+ marks). The total never drops below -35.
    """
    penalty = BK_OR_MAJOR_EVENT_PENALTY if bk_or_major_event else 0
    penalty += _first_band(recent_derogs, DEROG_PENALTIES, operator.ge, 0)
    return max(penalty, PENALTY_FLOOR)


def calculate_subscores(fundability_input: FundabilityInput) -> Subscores:
    return Subscores(
        credit_score_subscore=credit_score_subscore(fundability_input.credit_score),
        utilization_subscore=utilization_subscore(fundability_input.revolving_utilization_pct),
        dti_subscore=dti_subscore(fundability_input.dti_pct),
        inquiry_subscore=inquiry_subscore(fundability_input.inquiries_6m),
        depth_mix_subscore=depth_mix_subscore(
            fundability_input.oldest_account_years,
            fundability_input.open_tradelines,
        ),
        penalty_points=penalty_points(
            fundability_input.bk_or_major_event,
            fundability_input.recent_derogs_24m,
        ),
    )


def calculate_weighted_score(subscores: Subscores) -> int:
    """
    Weighted fundability score from 0 to 100.

    Scoring weights:
    - 30%: Credit score
    - 25%: Revolving utilization
    - 20%: Debt-to-income
    - 10%: Recent inquiries
    - 10%: Depth and mix

    Penalty points are added unweighted after the weighted sum. Halves round up.
    """
    weighted_sum = (
        subscores.credit_score_subscore * WEIGHTS["credit"]
        + subscores.utilization_subscore * WEIGHTS["utilization"]
        + subscores.dti_subscore * WEIGHTS["dti"]
        + subscores.inquiry_subscore * WEIGHTS["inquiry"]
        + subscores.depth_mix_subscore * WEIGHTS["depth_mix"]
    )
    raw_score = weighted_sum + subscores.penalty_points

    return max(0, min(100, math.floor(raw_score + 0.5)))


def determine_tier(score: int) -> Tier:
    """
    Map fundability score to a tier.

    Score bands:
    - 85+:   Tier 1 (ready now)
    - 70-84: Tier 2 (tune-up)
    - 55-69: Tier 3 (optimization required)
    - <55:   Tier 4 (rehab / long-term plan)
    """
    for threshold, tier in TIERS:
        if score >= threshold:
            return tier
    return TIER_FLOOR


def calculate_fundability_snapshot(
    fundability_input: FundabilityInput,
    now: datetime | None = None,
) -> FundabilitySnapshot:
    """
    Main entry point: score a validated input and build its snapshot.

    The result depends only on the input, except meta.generated_at which is
    taken from `now` (default: current UTC time).
    """
    subscores = calculate_subscores(fundability_input)
    score = calculate_weighted_score(subscores)
    tier = determine_tier(score)

    return FundabilitySnapshot(
        fundability_score=score,
        fundability_tier_numeric=tier.numeric,
        fundability_tier_label=tier.label,
        subscores=subscores,
        key_strengths=generate_strengths(subscores),
        key_risks=generate_risks(subscores),
        high_impact_actions=generate_high_impact_actions(fundability_input, subscores),
        funding_range_now=funding_range(tier.numeric),
        funding_range_after_optimization=optimized_funding_range(
            tier.numeric, fundability_input, subscores
        ),
        goal_path=goal_path(fundability_input.primary_goal, tier.numeric),
        flags=SnapshotFlags(
            missing_credit_score=fundability_input.credit_score is None,
            missing_utilization=False,  # Utilization is a required field
            missing_dti=fundability_input.dti_pct is None,
            high_risk_profile=tier.numeric == 4 or subscores.penalty_points <= -20,
        ),
        meta=SnapshotMeta(
            version=ENGINE_VERSION,
            generated_at=to_iso(now or utc_now()),
        ),
    )
