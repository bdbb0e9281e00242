"""Pydantic schemas for API request/response validation"""

from datetime import datetime
from typing import Annotated, Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, Strict, field_validator

from fundability_engine.domain.models import PrimaryGoal
from fundability_engine.utils.date_utils import parse_iso_datetime

EMAIL_PATTERN = r"^[^\s@]+@[^\s@]+\.[^\s@]+$"

# Strict types: booleans and numeric strings are rejected, floats must be finite
NonEmptyStr = Annotated[str, Strict(), Field(min_length=1)]
Count = Annotated[int, Strict(), Field(ge=0)]
Percentage = Annotated[float, Strict(), Field(ge=0, le=100, allow_inf_nan=False)]


class FundabilityRequest(BaseModel):
    """Request body for POST /v1/fs-snapshot"""

    model_config = ConfigDict(allow_inf_nan=False)

    first_name: NonEmptyStr
    last_name: NonEmptyStr
    email: Annotated[str, Strict(), Field(pattern=EMAIL_PATTERN)]

    credit_score: Optional[Annotated[int, Strict(), Field(ge=300, le=850)]] = None
    revolving_utilization_pct: Percentage
    dti_pct: Optional[Percentage] = None
    inquiries_6m: Count = 0
    oldest_account_years: Annotated[float, Strict(), Field(ge=0, allow_inf_nan=False)] = 0
    open_tradelines: Count
    recent_derogs_24m: Count = 0
    bk_or_major_event: Annotated[bool, Strict()] = False

    requested_amount: Annotated[float, Strict(), Field(gt=0, allow_inf_nan=False)]
    primary_goal: PrimaryGoal

    # Passed through unvalidated
    estimated_home_value: Any = None
    mortgage_balance: Any = None
    source: Any = None
    external_contact_id: Any = None

    @field_validator("inquiries_6m", "oldest_account_years", "recent_derogs_24m", "bk_or_major_event", mode="before")
    @classmethod
    def null_as_default(cls, value: Any, info) -> Any:
        """An explicit null takes the field default"""
        return cls.model_fields[info.field_name].default if value is None else value


class SubscoresSchema(BaseModel):
    """Per-dimension subscores and penalty points"""

    model_config = ConfigDict(from_attributes=True)

    credit_score_subscore: int
    utilization_subscore: int
    dti_subscore: int
    inquiry_subscore: int
    depth_mix_subscore: int
    penalty_points: int


class FlagsSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    missing_credit_score: bool
    missing_utilization: bool
    missing_dti: bool
    high_risk_profile: bool


class MetaSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    version: str
    generated_at: str


class SnapshotResponse(BaseModel):
    """Response for POST /v1/fs-snapshot"""

    model_config = ConfigDict(from_attributes=True)

    fundability_score: int
    fundability_tier_numeric: int
    fundability_tier_label: str
    subscores: SubscoresSchema
    key_strengths: List[str]
    key_risks: List[str]
    high_impact_actions: List[str]
    funding_range_now: str
    funding_range_after_optimization: str
    goal_path: str
    flags: FlagsSchema
    meta: MetaSchema


class ErrorResponse(BaseModel):
    """Error envelope for 4xx/5xx responses"""

    error: str
    details: List[str] = []


class AnalyticsFilters(BaseModel):
    """Query parameters for GET /v1/fs-analytics"""

    start_date: Optional[datetime] = Field(None, description="Window start (ISO date), default 30 days ago")
    end_date: Optional[datetime] = Field(None, description="Window end (ISO date), default now")
    tier: Optional[int] = Field(None, ge=1, le=4, description="Filter by tier (1-4)")
    goal: Optional[PrimaryGoal] = Field(None, description="Filter by primary_goal")

    @field_validator("tier", "goal", mode="before")
    @classmethod
    def blank_as_none(cls, value: Any) -> Any:
        return None if value == "" else value

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def parse_date(cls, value: Any, info) -> Any:
        # A bare end date covers that whole day
        if value == "":
            return None
        if isinstance(value, str):
            return parse_iso_datetime(value, end_of_day=info.field_name == "end_date")
        return value


class AnalyticsTotals(BaseModel):
    assessments: int
    unique_clients: int
    avg_score: float


class StrengthCount(BaseModel):
    strength: str
    count: int


class RiskCount(BaseModel):
    risk: str
    count: int


class ActionCount(BaseModel):
    action: str
    count: int


class AnalyticsData(BaseModel):
    """Aggregate metrics over tracked assessments"""

    model_config = ConfigDict(from_attributes=True)

    period: Dict[str, str]
    totals: AnalyticsTotals
    tier_distribution: Dict[str, int]
    goal_distribution: Dict[str, int]
    score_ranges: Dict[str, int]
    flags: Dict[str, int]
    top_strengths: List[StrengthCount]
    top_risks: List[RiskCount]
    top_actions: List[ActionCount]
    funding_ranges: Dict[str, int]


class AnalyticsResponse(BaseModel):
    """Response for GET /v1/fs-analytics"""

    success: bool = True
    data: AnalyticsData
    meta: MetaSchema
