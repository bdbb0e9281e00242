"""Domain models - pure Python dataclasses representing assessment inputs and results"""

from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any, Dict, List, Optional


class PrimaryGoal(str, Enum):
    """Applicant's stated funding objective"""

    STARTUP_FUNDING = "startup_funding"
    BUSINESS_FUNDING = "business_funding"
    DEBT_CONSOLIDATION = "debt_consolidation"
    IMPROVE_CREDIT = "improve_credit"
    LOWER_UTILIZATION = "lower_utilization"
    RAISE_SCORE_FAST = "raise_score_fast"
    NOT_SURE = "not_sure"

    @classmethod
    def values(cls) -> List[str]:
        return [goal.value for goal in cls]


@dataclass(frozen=True)
class FundabilityInput:
    """Validated assessment input, one per scoring call"""

    # Identity
    first_name: str
    last_name: str
    email: str

    # Required credit attributes and funding context
    revolving_utilization_pct: float
    open_tradelines: int
    requested_amount: float
    primary_goal: PrimaryGoal

    # Nullable / defaulted credit attributes
    credit_score: Optional[int] = None
    dti_pct: Optional[float] = None
    inquiries_6m: int = 0
    oldest_account_years: float = 0
    recent_derogs_24m: int = 0
    bk_or_major_event: bool = False

    # Optional property
    estimated_home_value: Optional[float] = None
    mortgage_balance: Optional[float] = None

    # Optional meta
    source: Optional[str] = None
    external_contact_id: Optional[str] = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


@dataclass(frozen=True)
class Subscores:
    """Normalized 0-100 ratings per dimension, plus negative penalty points"""

    credit_score_subscore: int
    utilization_subscore: int
    dti_subscore: int
    inquiry_subscore: int
    depth_mix_subscore: int
    penalty_points: int


@dataclass(frozen=True)
class Tier:
    numeric: int
    label: str


@dataclass(frozen=True)
class SnapshotFlags:
    missing_credit_score: bool
    missing_utilization: bool
    missing_dti: bool
    high_risk_profile: bool


@dataclass(frozen=True)
class SnapshotMeta:
    version: str
    generated_at: str


@dataclass(frozen=True)
class FundabilitySnapshot:
    """Output of a fundability assessment"""

    fundability_score: int
    fundability_tier_numeric: int
    fundability_tier_label: str
    subscores: Subscores
    key_strengths: List[str]
    key_risks: List[str]
    high_impact_actions: List[str]
    funding_range_now: str
    funding_range_after_optimization: str
    goal_path: str
    flags: SnapshotFlags
    meta: SnapshotMeta

    def to_dict(self) -> Dict[str, Any]:
        """JSON-ready representation using the public snake_case field names"""
        return asdict(self)
