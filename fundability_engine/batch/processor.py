"""Batch processing of fundability assessments with chunked concurrency"""

import asyncio
import logging
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence

from fundability_engine.config import settings
from fundability_engine.domain.models import FundabilitySnapshot
from fundability_engine.domain.scoring import calculate_fundability_snapshot
from fundability_engine.domain.validation import ensure_valid
from fundability_engine.infrastructure.clients.webhook import WebhookClient
from fundability_engine.infrastructure.observability.metrics import batch_item_counter
from fundability_engine.infrastructure.webhooks.formatters import WebhookConfig, create_webhook_payload

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int], None]
ErrorCallback = Callable[[Mapping[str, Any], Exception], None]


@dataclass
class BatchItem:
    """Outcome for one record in a batch"""

    status: str  # "success" or "failed"
    client: Dict[str, str]
    result: Optional[FundabilitySnapshot] = None
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        item: Dict[str, Any] = {"status": self.status, "client": self.client}
        if self.result is not None:
            item["result"] = self.result.to_dict()
        if self.error is not None:
            item["error"] = self.error
        return item


@dataclass
class BatchResult:
    success: List[BatchItem] = field(default_factory=list)
    failed: List[BatchItem] = field(default_factory=list)
    summary: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": [item.to_dict() for item in self.success],
            "failed": [item.to_dict() for item in self.failed],
            "summary": self.summary,
        }


def _client_identity(record: Mapping[str, Any]) -> Dict[str, str]:
    first = record.get("first_name") or ""
    last = record.get("last_name") or ""
    return {
        "name": f"{first} {last}".strip(),
        "email": record.get("email") or "",
    }


def _chunks(records: Sequence[Any], size: int) -> List[Sequence[Any]]:
    return [records[i:i + size] for i in range(0, len(records), size)]


async def _process_one(
    record: Mapping[str, Any],
    webhooks: Sequence[WebhookConfig],
    webhook_client: Optional[WebhookClient],
    on_error: Optional[ErrorCallback],
) -> BatchItem:
    client = _client_identity(record)
    try:
        fundability_input = ensure_valid(record)
        snapshot = calculate_fundability_snapshot(fundability_input)

        if webhooks and webhook_client is not None:
            payload = create_webhook_payload(fundability_input, snapshot)
            await webhook_client.broadcast(webhooks, payload)

        return BatchItem(status="success", client=client, result=snapshot)

    except Exception as e:
        logger.warning(f"Batch record failed: {e}", extra={"email": client["email"]})
        if on_error is not None:
            on_error(record, e)
        return BatchItem(status="failed", client=client, error=str(e))


async def process_batch(
    clients: Sequence[Mapping[str, Any]],
    concurrency: int | None = None,
    delay_ms: int | None = None,
    webhooks: Sequence[WebhookConfig] = (),
    webhook_client: Optional[WebhookClient] = None,
    on_progress: Optional[ProgressCallback] = None,
    on_error: Optional[ErrorCallback] = None,
) -> BatchResult:
    """
    Validate and score many records, a chunk at a time.

    Records within a chunk run concurrently; the runner pauses `delay_ms`
    between chunks as a courtesy to webhook destinations. A failing record is
    captured as a failed item and never aborts the rest of the batch.

    Args:
        clients: Untyped input records (same shape as the HTTP request body)
        concurrency: Records per chunk (default from settings)
        delay_ms: Pause between chunks (default from settings)
        webhooks: Destinations notified for each successful record
        webhook_client: Client used for delivery (created when webhooks are given)
        on_progress: Called with (processed, total) after each record
        on_error: Called with (record, exception) for each failed record
    """
    start_time = time.time()
    concurrency = max(1, concurrency or settings.batch_concurrency)
    delay_ms = settings.batch_delay_ms if delay_ms is None else delay_ms
    if webhooks and webhook_client is None:
        webhook_client = WebhookClient()

    result = BatchResult()
    chunks = _chunks(clients, concurrency)
    processed = 0

    for index, chunk in enumerate(chunks):
        items = await asyncio.gather(
            *(_process_one(record, webhooks, webhook_client, on_error) for record in chunk)
        )

        for item in items:
            if item.status == "success":
                result.success.append(item)
            else:
                result.failed.append(item)
            batch_item_counter.labels(status=item.status).inc()
            processed += 1
            if on_progress is not None:
                on_progress(processed, len(clients))

        if index < len(chunks) - 1:
            await asyncio.sleep(delay_ms / 1000)

    result.summary = {
        "total": len(clients),
        "successful": len(result.success),
        "failed": len(result.failed),
        "duration_ms": round((time.time() - start_time) * 1000),
    }
    return result
