"""Narrative insights, funding ranges and goal pathways derived from subscores"""

from typing import Dict, List, NamedTuple, Tuple

from fundability_engine.domain.models import FundabilityInput, PrimaryGoal, Subscores

MAX_STRENGTHS = 3
MAX_RISKS = 3
MAX_ACTIONS = 5

FALLBACK_STRENGTH = "Active credit profile with opportunity for strategic optimization"
FALLBACK_RISK = "Profile requires fine-tuning to maximize funding potential"

FUNDING_RANGES: Dict[int, str] = {
    1: "Moderate–High ($50K–$150K+)",
    2: "Moderate ($25K–$75K)",
    3: "Low–Moderate ($10K–$50K)",
    4: "Low ($5K–$25K)",
}

OPTIMIZED_FUNDING_RANGES: Dict[int, str] = {
    1: "High ($75K–$200K+)",
    2: "Moderate–High ($50K–$125K)",
    3: "Moderate ($25K–$75K)",
    4: "Low–Moderate ($15K–$50K)",
}

# goal -> (tier 1-2 path, tier 3-4 path)
GOAL_PATHS: Dict[PrimaryGoal, Tuple[str, str]] = {
    PrimaryGoal.STARTUP_FUNDING: (
        "Direct path to startup funding with credit-backed business lines and term loans",
        "Credit optimization → secured/alternative startup capital → traditional business funding",
    ),
    PrimaryGoal.BUSINESS_FUNDING: (
        "Ready for unsecured business lines, equipment financing, and SBA products",
        "Strengthen credit profile → explore revenue-based or collateral-backed options → scale to unsecured lines",
    ),
    PrimaryGoal.DEBT_CONSOLIDATION: (
        "Consolidate with balance transfer or personal loan → leverage improved profile for business capital",
        "Targeted consolidation of high-APR debt → rebuild utilization → qualify for larger business funding",
    ),
    PrimaryGoal.IMPROVE_CREDIT: (
        "Execute high-impact actions over 90-180 days → re-position for prime funding opportunities",
    ) * 2,
    PrimaryGoal.LOWER_UTILIZATION: (
        "Strategic utilization reduction → immediate access to expanded credit lines and funding",
        "Pay down revolving debt or secure consolidation loan → improved scores unlock better funding products",
    ),
    PrimaryGoal.RAISE_SCORE_FAST: (
        "Focus on rapid-impact tactics: utilization reduction, dispute errors, add authorized user tradelines",
    ) * 2,
    PrimaryGoal.NOT_SURE: (
        "Strong fundability position - evaluate business vs personal funding needs and optimal structure",
        "Strengthen fundability foundation → explore funding options aligned with business goals",
    ),
}


class ActionItem(NamedTuple):
    priority: int
    action: str


def _format_number(value: float) -> str:
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return str(value)


def generate_strengths(subscores: Subscores) -> List[str]:
    strengths = []

    if subscores.credit_score_subscore >= 80:
        strengths.append("Strong core credit score positioning you favorably with lenders")
    if subscores.utilization_subscore >= 80:
        strengths.append("Low revolving utilization demonstrating strong credit management")
    if subscores.dti_subscore >= 80:
        strengths.append("Healthy debt-to-income profile showing strong repayment capacity")
    if subscores.depth_mix_subscore >= 80:
        strengths.append("Established credit history with good depth and account mix")

    if not strengths:
        strengths.append(FALLBACK_STRENGTH)

    return strengths[:MAX_STRENGTHS]


def generate_risks(subscores: Subscores) -> List[str]:
    risks = []

    if subscores.utilization_subscore <= 50:
        risks.append("High utilization is suppressing score and limiting available credit")
    if subscores.dti_subscore <= 45:
        risks.append("Elevated DTI ratio is constraining approval odds and loan amounts")
    if subscores.inquiry_subscore <= 60:
        risks.append("Recent inquiry activity is raising risk flags with underwriters")
    if subscores.penalty_points < 0:
        risks.append("Recent derogatory events are significantly impacting approval probability")

    if not risks:
        risks.append(FALLBACK_RISK)

    return risks[:MAX_RISKS]


def generate_high_impact_actions(
    fundability_input: FundabilityInput,
    subscores: Subscores,
) -> List[str]:
    """
    Rank improvement actions by expected impact.

    Candidates are collected in a fixed order, then stably sorted by priority
    (highest first), so equal priorities keep their collection order.
    """
    actions: List[ActionItem] = []
    utilization = _format_number(fundability_input.revolving_utilization_pct)

    if subscores.utilization_subscore <= 75:
        actions.append(ActionItem(
            100 if subscores.utilization_subscore <= 50 else 80,
            f"Pay down revolving balances to reduce utilization below 30% - current {utilization}% is limiting approvals",
        ))

    if subscores.dti_subscore <= 70:
        actions.append(ActionItem(
            95 if subscores.dti_subscore <= 45 else 75,
            "Target paying off 1-2 highest monthly payment accounts to improve DTI and boost approval odds",
        ))

    if subscores.inquiry_subscore <= 60:
        actions.append(ActionItem(
            85,
            f"Avoid new credit applications for 60-90 days to let {fundability_input.inquiries_6m} recent inquiries age off impact period",
        ))

    if subscores.penalty_points < 0:
        actions.append(ActionItem(
            90,
            "Review and dispute any inaccurate derogatory marks; negotiate payment-for-deletion on valid collections",
        ))

    if subscores.depth_mix_subscore <= 70:
        actions.append(ActionItem(
            60,
            "Add 1-2 new tradelines (authorized user or credit builder loan) to strengthen credit mix and depth",
        ))

    if subscores.credit_score_subscore <= 65:
        actions.append(ActionItem(
            70,
            "Focus on on-time payments for next 6 months - payment history is the #1 score driver",
        ))

    # Fires independently of the utilization subscore rule above
    if fundability_input.revolving_utilization_pct >= 50 and subscores.credit_score_subscore >= 65:
        actions.append(ActionItem(
            85,
            "Consider balance transfer or consolidation product to restructure expensive revolving debt at lower rates",
        ))

    ranked = sorted(actions, key=lambda item: item.priority, reverse=True)
    return [item.action for item in ranked[:MAX_ACTIONS]]


def funding_range(tier: int) -> str:
    return FUNDING_RANGES[tier]


def has_optimization_potential(fundability_input: FundabilityInput, subscores: Subscores) -> bool:
    """
    Whether the profile has room to move up a funding band.

    Utilization and DTI are tested on the raw percentages while inquiries are
    tested on the subscore. A missing DTI satisfies its clause.
    """
    dti_pct = fundability_input.dti_pct
    return (
        fundability_input.revolving_utilization_pct <= 75
        or dti_pct is None
        or dti_pct <= 70
        or subscores.inquiry_subscore <= 60
    )


def optimized_funding_range(
    tier: int,
    fundability_input: FundabilityInput,
    subscores: Subscores,
) -> str:
    if not has_optimization_potential(fundability_input, subscores):
        return funding_range(tier)

    optimized_tier = max(1, tier - 1)
    return OPTIMIZED_FUNDING_RANGES[optimized_tier]


def goal_path(goal: PrimaryGoal, tier: int) -> str:
    ready_path, rebuild_path = GOAL_PATHS[PrimaryGoal(goal)]
    return rebuild_path if tier >= 3 else ready_path
