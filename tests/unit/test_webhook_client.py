"""Unit tests for webhook delivery"""

import json

import httpx

from fundability_engine.config import Settings
from fundability_engine.infrastructure.clients.webhook import WebhookClient, webhook_configs_from_settings
from fundability_engine.infrastructure.webhooks.formatters import WebhookConfig, WebhookType

PAYLOAD = {
    "event": "fundability_calculated",
    "timestamp": "2024-06-01T12:00:00.000Z",
    "client": {"name": "Ada Lovelace", "email": "ada@example.com"},
    "score": {"value": 86, "tier": 1, "tier_label": "Tier 1 – Ready Now (Prime)"},
    "summary": {
        "strengths": ["Strong core credit score positioning you favorably with lenders"],
        "risks": ["Profile requires fine-tuning to maximize funding potential"],
        "top_actions": [],
        "funding_range": "Moderate–High ($50K–$150K+)",
    },
    "flags": {"high_risk": False, "missing_data": False},
}


class RecordingTransport:
    """Mock transport replaying a fixed sequence of status codes"""

    def __init__(self, *status_codes):
        self.status_codes = list(status_codes)
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        status = self.status_codes.pop(0) if self.status_codes else 200
        return httpx.Response(status)

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)


def _client(recorder, max_retries=3):
    return WebhookClient(timeout=1.0, max_retries=max_retries, backoff_base=0, transport=recorder.transport())


async def test_send_success_posts_formatted_body():
    recorder = RecordingTransport(200)
    config = WebhookConfig(url="https://hooks.slack.test/abc", type=WebhookType.SLACK)

    delivered = await _client(recorder).send(config, PAYLOAD)

    assert delivered is True
    assert len(recorder.requests) == 1
    body = json.loads(recorder.requests[0].content)
    assert "attachments" in body
    assert "Authorization" not in recorder.requests[0].headers


async def test_send_adds_bearer_secret():
    recorder = RecordingTransport(204)
    config = WebhookConfig(url="https://example.test/hook", secret="s3cret")

    assert await _client(recorder).send(config, PAYLOAD) is True
    assert recorder.requests[0].headers["Authorization"] == "Bearer s3cret"
    assert json.loads(recorder.requests[0].content) == PAYLOAD


async def test_send_disabled_config_skips_request():
    recorder = RecordingTransport()
    config = WebhookConfig(url="https://example.test/hook", enabled=False)

    assert await _client(recorder).send(config, PAYLOAD) is False
    assert recorder.requests == []


async def test_send_retries_server_errors():
    recorder = RecordingTransport(503, 502, 200)
    config = WebhookConfig(url="https://example.test/hook")

    assert await _client(recorder).send(config, PAYLOAD) is True
    assert len(recorder.requests) == 3


async def test_send_gives_up_after_max_retries():
    recorder = RecordingTransport(500, 500, 500, 500)
    config = WebhookConfig(url="https://example.test/hook")

    assert await _client(recorder).send(config, PAYLOAD) is False
    assert len(recorder.requests) == 3


async def test_send_does_not_retry_client_errors():
    recorder = RecordingTransport(400)
    config = WebhookConfig(url="https://example.test/hook")

    assert await _client(recorder).send(config, PAYLOAD) is False
    assert len(recorder.requests) == 1


async def test_send_handles_network_errors():
    attempts = []

    def handler(request: httpx.Request) -> httpx.Response:
        attempts.append(request)
        raise httpx.ConnectError("connection refused", request=request)

    client = WebhookClient(timeout=1.0, max_retries=2, backoff_base=0, transport=httpx.MockTransport(handler))

    assert await client.send(WebhookConfig(url="https://example.test/hook"), PAYLOAD) is False
    assert len(attempts) == 2


async def test_broadcast_isolates_failures():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500 if request.url.host == "down.test" else 200)

    client = WebhookClient(timeout=1.0, max_retries=1, backoff_base=0, transport=httpx.MockTransport(handler))
    configs = [
        WebhookConfig(url="https://up.test/slack", type=WebhookType.SLACK),
        WebhookConfig(url="https://down.test/hook"),
        WebhookConfig(url="https://up.test/discord", type=WebhookType.DISCORD),
    ]

    results = await client.broadcast(configs, PAYLOAD)

    assert results == {"success": 2, "failed": 1}


async def test_broadcast_with_no_destinations():
    client = WebhookClient(transport=httpx.MockTransport(lambda request: httpx.Response(200)))

    assert await client.broadcast([], PAYLOAD) == {"success": 0, "failed": 0}


def test_configs_from_settings():
    config = Settings(
        enable_webhooks=True,
        slack_webhook_url="https://hooks.slack.test/abc",
        hubspot_webhook_url="https://hubspot.test/hook",
        webhook_secret="s3cret",
    )

    configs = webhook_configs_from_settings(config)

    assert [c.type for c in configs] == [WebhookType.SLACK, WebhookType.HUBSPOT]
    assert all(c.enabled and c.secret == "s3cret" for c in configs)


def test_configs_from_settings_disabled_by_default():
    configs = webhook_configs_from_settings(Settings(generic_webhook_url="https://example.test/hook"))

    assert len(configs) == 1
    assert configs[0].enabled is False
