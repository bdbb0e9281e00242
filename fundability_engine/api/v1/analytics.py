"""GET /v1/fs-analytics - Aggregate metrics over recent assessments"""

from typing import Annotated, Dict

from fastapi import APIRouter, Depends, Query

from fundability_engine.api.dependencies import get_analytics_store
from fundability_engine.api.v1.schemas import (
    AnalyticsData,
    AnalyticsFilters,
    AnalyticsResponse,
    ErrorResponse,
    MetaSchema,
)
from fundability_engine.domain.models import PrimaryGoal
from fundability_engine.infrastructure.analytics.store import ANALYTICS_VERSION, AnalyticsQuery, AnalyticsStore
from fundability_engine.utils.date_utils import to_iso, utc_now

router = APIRouter()

# Query parameter -> message reported when its value is rejected
FILTER_MESSAGES: Dict[str, str] = {
    "start_date": "start_date must be an ISO-8601 date or datetime",
    "end_date": "end_date must be an ISO-8601 date or datetime",
    "tier": "tier must be one of: 1, 2, 3, 4",
    "goal": f"goal must be one of: {', '.join(PrimaryGoal.values())}",
}


@router.get(
    "/fs-analytics",
    response_model=AnalyticsResponse,
    responses={400: {"model": ErrorResponse}},
)
def get_analytics(
    filters: Annotated[AnalyticsFilters, Query()],
    store: AnalyticsStore = Depends(get_analytics_store),
):
    """
    Aggregate metrics for dashboards and trend tracking.

    Examples:
        GET /v1/fs-analytics?start_date=2024-01-01&end_date=2024-01-31
        GET /v1/fs-analytics?tier=4&goal=debt_consolidation
    """
    query = AnalyticsQuery(
        start_date=filters.start_date,
        end_date=filters.end_date,
        tier=filters.tier,
        goal=filters.goal.value if filters.goal else None,
    )
    metrics = store.calculate(query)

    return AnalyticsResponse(
        success=True,
        data=AnalyticsData.model_validate(metrics),
        meta=MetaSchema(version=ANALYTICS_VERSION, generated_at=to_iso(utc_now())),
    )
