"""Webhook delivery client with per-destination isolation and exponential backoff"""

import asyncio
import logging
from typing import Dict, List, Sequence

import httpx

from fundability_engine.config import Settings, settings
from fundability_engine.domain.exceptions import WebhookDeliveryError
from fundability_engine.infrastructure.observability.metrics import (
    webhook_failure_counter,
    webhook_latency_histogram,
)
from fundability_engine.infrastructure.webhooks.formatters import (
    WebhookConfig,
    WebhookPayload,
    WebhookType,
    format_for_platform,
)

logger = logging.getLogger(__name__)


def webhook_configs_from_settings(config: Settings = settings) -> List[WebhookConfig]:
    """Build the destination list from configured webhook URLs"""
    urls = {
        WebhookType.SLACK: config.slack_webhook_url,
        WebhookType.DISCORD: config.discord_webhook_url,
        WebhookType.HUBSPOT: config.hubspot_webhook_url,
        WebhookType.GENERIC: config.generic_webhook_url,
    }
    return [
        WebhookConfig(
            url=url,
            type=webhook_type,
            secret=config.webhook_secret,
            enabled=config.enable_webhooks,
        )
        for webhook_type, url in urls.items()
        if url
    ]


class WebhookClient:
    """Client for sending assessment notifications to external systems"""

    def __init__(
        self,
        timeout: float | None = None,
        max_retries: int | None = None,
        backoff_base: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.timeout = timeout or settings.http_timeout_seconds
        self.max_retries = max(1, max_retries or settings.webhook_max_retries)
        self.backoff_base = settings.webhook_backoff_base if backoff_base is None else backoff_base
        self.transport = transport

    async def _post(self, client: httpx.AsyncClient, config: WebhookConfig, body: WebhookPayload) -> None:
        """
        POST one formatted payload, retrying on 5xx errors and network failures.

        Retry strategy:
        - Exponential backoff: base, 2*base, 4*base, ... (base * 2^(attempt-1))
        - 4xx responses are not retried

        Raises:
            WebhookDeliveryError: When every attempt failed
        """
        headers = {"Content-Type": "application/json"}
        if config.secret:
            headers["Authorization"] = f"Bearer {config.secret}"

        platform = WebhookType(config.type).value
        attempt = 0
        while attempt < self.max_retries:
            try:
                with webhook_latency_histogram.labels(platform=platform).time():
                    response = await client.post(config.url, json=body, headers=headers)
                    response.raise_for_status()
                    return  # Success

            except (httpx.HTTPStatusError, httpx.RequestError) as e:
                attempt += 1
                retryable = not isinstance(e, httpx.HTTPStatusError) or e.response.status_code >= 500

                if attempt >= self.max_retries or not retryable:
                    raise WebhookDeliveryError(f"{platform} webhook failed: {e}") from e

                backoff = self.backoff_base * (2 ** (attempt - 1))
                await asyncio.sleep(backoff)

    async def send(self, config: WebhookConfig, payload: WebhookPayload) -> bool:
        """
        Deliver a payload to one destination.

        Returns:
            True on a 2xx response; False when the destination is disabled or
            delivery failed (failures are logged, never raised)
        """
        if not config.enabled:
            return False

        body = format_for_platform(config.type, payload)

        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            try:
                await self._post(client, config, body)
            except WebhookDeliveryError as e:
                webhook_failure_counter.labels(platform=WebhookType(config.type).value).inc()
                logger.warning(str(e), extra={"webhook_url": config.url})
                return False

        return True

    async def broadcast(self, configs: Sequence[WebhookConfig], payload: WebhookPayload) -> Dict[str, int]:
        """Send to every destination concurrently; one failure never blocks another"""
        results = await asyncio.gather(
            *(self.send(config, payload) for config in configs),
            return_exceptions=True,
        )

        success = 0
        for config, result in zip(configs, results):
            if isinstance(result, Exception):
                logger.error(
                    f"Webhook delivery crashed: {result}",
                    exc_info=result,
                    extra={"webhook_url": config.url},
                )
            elif result is True:
                success += 1

        return {"success": success, "failed": len(results) - success}
