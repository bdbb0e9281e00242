"""POST /v1/fs-snapshot - Fundability snapshot endpoint"""

import json
import logging
import time
from typing import List

from fastapi import APIRouter, BackgroundTasks, Depends, Request
from fastapi.responses import JSONResponse

from fundability_engine.api.dependencies import (
    get_analytics_store,
    get_request_id,
    get_webhook_client,
    get_webhook_configs,
)
from fundability_engine.api.v1.schemas import ErrorResponse, SnapshotResponse
from fundability_engine.config import settings
from fundability_engine.domain.models import FundabilityInput, FundabilitySnapshot
from fundability_engine.domain.scoring import calculate_fundability_snapshot
from fundability_engine.domain.validation import validate_input
from fundability_engine.infrastructure.analytics.store import AnalyticsStore
from fundability_engine.infrastructure.clients.webhook import WebhookClient
from fundability_engine.infrastructure.observability.logging import log_assessment, log_assessment_error
from fundability_engine.infrastructure.observability.metrics import record_assessment, validation_failure_counter
from fundability_engine.infrastructure.webhooks.formatters import WebhookConfig, create_webhook_payload

router = APIRouter()

GENERIC_ERROR_DETAIL = "An unexpected error occurred processing your request"


def error_response(status_code: int, error: str, details: List[str]) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=error, details=details).model_dump(),
    )


def _track_assessment(
    store: AnalyticsStore,
    fundability_input: FundabilityInput,
    snapshot: FundabilitySnapshot,
    request_id: str,
) -> None:
    # Analytics must never fail the assessment response
    try:
        store.track(fundability_input, snapshot)
    except Exception as e:
        logging.error(f"Analytics tracking failed: {e}", exc_info=e, extra={"request_id": request_id})


def _schedule_webhooks(
    background_tasks: BackgroundTasks,
    webhook_client: WebhookClient,
    webhook_configs: List[WebhookConfig],
    fundability_input: FundabilityInput,
    snapshot: FundabilitySnapshot,
    request_id: str,
) -> None:
    if not webhook_configs:
        return
    try:
        payload = create_webhook_payload(fundability_input, snapshot)
    except Exception as e:
        logging.error(f"Webhook preparation failed: {e}", exc_info=e, extra={"request_id": request_id})
        return

    background_tasks.add_task(webhook_client.broadcast, webhook_configs, payload)


@router.post(
    "/fs-snapshot",
    response_model=SnapshotResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def create_snapshot(
    request: Request,
    background_tasks: BackgroundTasks,
    store: AnalyticsStore = Depends(get_analytics_store),
    webhook_client: WebhookClient = Depends(get_webhook_client),
    webhook_configs: List[WebhookConfig] = Depends(get_webhook_configs),
):
    """
    Compute a fundability snapshot for one applicant.

    Flow:
    1. Validate the JSON body (all violations reported together)
    2. Score the validated input
    3. Track the assessment for analytics
    4. Schedule webhook notifications to run after the response
    5. Return the snapshot
    """
    start_time = time.time()
    request_id = get_request_id(request)

    try:
        try:
            body = await request.json()
        except (json.JSONDecodeError, UnicodeDecodeError):
            validation_failure_counter.inc()
            return error_response(400, "Validation failed", ["Request body must be valid JSON"])

        # 1. Validate
        validation = validate_input(body)
        if not validation.valid:
            validation_failure_counter.inc()
            logging.info(
                "Assessment input rejected",
                extra={"request_id": request_id, "errors": validation.errors},
            )
            return error_response(400, "Validation failed", validation.errors)

        fundability_input = validation.data

        # 2. Score
        snapshot = calculate_fundability_snapshot(fundability_input)

        # 3-4. Analytics and webhooks are isolated from the response
        _track_assessment(store, fundability_input, snapshot, request_id)
        _schedule_webhooks(
            background_tasks, webhook_client, webhook_configs, fundability_input, snapshot, request_id
        )

        # Record metrics and logs
        duration_ms = (time.time() - start_time) * 1000
        record_assessment(
            snapshot.fundability_score,
            snapshot.fundability_tier_numeric,
            snapshot.flags.high_risk_profile,
        )
        if settings.debug:
            log_assessment(
                request_id,
                fundability_input.email,
                snapshot.fundability_score,
                snapshot.fundability_tier_numeric,
                duration_ms,
            )

        return SnapshotResponse.model_validate(snapshot)

    except Exception as e:
        log_assessment_error(request_id, e)
        detail = str(e) if settings.is_development else GENERIC_ERROR_DETAIL
        return error_response(500, "Internal server error", [detail])
