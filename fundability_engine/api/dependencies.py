"""Dependency injection for FastAPI endpoints"""

from typing import List

from fastapi import Request

from fundability_engine.config import settings
from fundability_engine.infrastructure.analytics.store import AnalyticsStore
from fundability_engine.infrastructure.clients.webhook import WebhookClient, webhook_configs_from_settings
from fundability_engine.infrastructure.webhooks.formatters import WebhookConfig


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_analytics_store(request: Request) -> AnalyticsStore:
    """Provide the analytics store owned by the running app"""
    return request.app.state.analytics_store


def get_webhook_client(request: Request) -> WebhookClient:
    """Provide the webhook client owned by the running app"""
    return request.app.state.webhook_client


def get_webhook_configs() -> List[WebhookConfig]:
    """Provide enabled webhook destinations from settings"""
    return [config for config in webhook_configs_from_settings(settings) if config.enabled]
