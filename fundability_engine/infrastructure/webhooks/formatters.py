"""Platform-specific webhook payload formatting (Slack, Discord, HubSpot, generic)"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from fundability_engine.domain.models import FundabilityInput, FundabilitySnapshot
from fundability_engine.utils.date_utils import parse_iso_datetime, to_iso, utc_now

WebhookPayload = Dict[str, Any]

TIER_EMOJI = {1: "🟢", 2: "🟡", 3: "🟠", 4: "🔴"}
DEFAULT_EMOJI = "⚪"

SLACK_COLORS = {1: "#4CAF50", 2: "#FFC107", 3: "#FF9800", 4: "#F44336"}
SLACK_DEFAULT_COLOR = "#9E9E9E"

DISCORD_COLORS = {1: 0x4CAF50, 2: 0xFFC107, 3: 0xFF9800, 4: 0xF44336}
DISCORD_DEFAULT_COLOR = 0x9E9E9E

CHAT_TOP_ACTIONS = 3


class WebhookType(str, Enum):
    SLACK = "slack"
    DISCORD = "discord"
    HUBSPOT = "hubspot"
    GENERIC = "generic"


@dataclass(frozen=True)
class WebhookConfig:
    """One notification destination"""

    url: str
    type: WebhookType = WebhookType.GENERIC
    secret: Optional[str] = None
    enabled: bool = True


def create_webhook_payload(
    fundability_input: FundabilityInput,
    snapshot: FundabilitySnapshot,
    now: datetime | None = None,
) -> WebhookPayload:
    """Platform-neutral event describing one completed assessment"""
    return {
        "event": "fundability_calculated",
        "timestamp": to_iso(now or utc_now()),
        "client": {
            "name": fundability_input.full_name,
            "email": fundability_input.email,
        },
        "score": {
            "value": snapshot.fundability_score,
            "tier": snapshot.fundability_tier_numeric,
            "tier_label": snapshot.fundability_tier_label,
        },
        "summary": {
            "strengths": list(snapshot.key_strengths),
            "risks": list(snapshot.key_risks),
            "top_actions": list(snapshot.high_impact_actions),
            "funding_range": snapshot.funding_range_now,
        },
        "flags": {
            "high_risk": snapshot.flags.high_risk_profile,
            "missing_data": snapshot.flags.missing_credit_score or snapshot.flags.missing_dti,
        },
    }


def _bullets(items: List[str]) -> str:
    return "\n".join(f"• {item}" for item in items)


def _numbered(items: List[str]) -> str:
    return "\n".join(f"{index}. {item}" for index, item in enumerate(items[:CHAT_TOP_ACTIONS], start=1))


def _display_time(timestamp: str) -> str:
    return parse_iso_datetime(timestamp).strftime("%Y-%m-%d %H:%M:%S UTC")


def format_slack_message(payload: WebhookPayload) -> WebhookPayload:
    tier = payload["score"]["tier"]
    summary = payload["summary"]

    return {
        "attachments": [
            {
                "color": SLACK_COLORS.get(tier, SLACK_DEFAULT_COLOR),
                "blocks": [
                    {
                        "type": "header",
                        "text": {
                            "type": "plain_text",
                            "text": f"{TIER_EMOJI.get(tier, DEFAULT_EMOJI)} New Fundability Assessment",
                            "emoji": True,
                        },
                    },
                    {
                        "type": "section",
                        "fields": [
                            {"type": "mrkdwn", "text": f"*Client:*\n{payload['client']['name']}"},
                            {"type": "mrkdwn", "text": f"*Score:*\n{payload['score']['value']}/100"},
                            {"type": "mrkdwn", "text": f"*Tier:*\n{payload['score']['tier_label']}"},
                            {"type": "mrkdwn", "text": f"*Funding Range:*\n{summary['funding_range']}"},
                        ],
                    },
                    {
                        "type": "section",
                        "text": {"type": "mrkdwn", "text": f"*💪 Key Strengths*\n{_bullets(summary['strengths'])}"},
                    },
                    {
                        "type": "section",
                        "text": {"type": "mrkdwn", "text": f"*⚠️ Key Risks*\n{_bullets(summary['risks'])}"},
                    },
                    {
                        "type": "section",
                        "text": {"type": "mrkdwn", "text": f"*🎯 Top Actions*\n{_numbered(summary['top_actions'])}"},
                    },
                    {
                        "type": "context",
                        "elements": [
                            {
                                "type": "mrkdwn",
                                "text": f"📧 {payload['client']['email']} | ⏰ {_display_time(payload['timestamp'])}",
                            },
                        ],
                    },
                ],
            },
        ],
    }


def format_discord_message(payload: WebhookPayload) -> WebhookPayload:
    tier = payload["score"]["tier"]
    summary = payload["summary"]

    return {
        "embeds": [
            {
                "title": f"{TIER_EMOJI.get(tier, DEFAULT_EMOJI)} Fundability Assessment: {payload['client']['name']}",
                "color": DISCORD_COLORS.get(tier, DISCORD_DEFAULT_COLOR),
                "fields": [
                    {
                        "name": "Score",
                        "value": f"**{payload['score']['value']}/100** ({payload['score']['tier_label']})",
                        "inline": True,
                    },
                    {"name": "Funding Range", "value": summary["funding_range"], "inline": True},
                    {"name": "💪 Key Strengths", "value": _bullets(summary["strengths"]) or "None", "inline": False},
                    {"name": "⚠️ Key Risks", "value": _bullets(summary["risks"]) or "None", "inline": False},
                    {"name": "🎯 Top Actions", "value": _numbered(summary["top_actions"]) or "None", "inline": False},
                ],
                "footer": {
                    "text": f"{payload['client']['email']} • {_display_time(payload['timestamp'])}",
                },
            },
        ],
    }


def format_hubspot_payload(payload: WebhookPayload) -> WebhookPayload:
    """Contact property update for a HubSpot workflow webhook"""
    summary = payload["summary"]

    return {
        "email": payload["client"]["email"],
        "properties": {
            "fundability_score": payload["score"]["value"],
            "fundability_tier": payload["score"]["tier"],
            "fundability_tier_label": payload["score"]["tier_label"],
            "funding_range_current": summary["funding_range"],
            "key_strengths": "; ".join(summary["strengths"]),
            "key_risks": "; ".join(summary["risks"]),
            "recommended_actions": "; ".join(summary["top_actions"]),
            "high_risk_flag": payload["flags"]["high_risk"],
            "assessment_date": payload["timestamp"],
        },
    }


def format_generic_payload(payload: WebhookPayload) -> WebhookPayload:
    return payload


FORMATTERS: Dict[WebhookType, Callable[[WebhookPayload], WebhookPayload]] = {
    WebhookType.SLACK: format_slack_message,
    WebhookType.DISCORD: format_discord_message,
    WebhookType.HUBSPOT: format_hubspot_payload,
    WebhookType.GENERIC: format_generic_payload,
}


def format_for_platform(webhook_type: WebhookType | str, payload: WebhookPayload) -> WebhookPayload:
    """Dispatch to the platform formatter; unknown types fall back to the generic payload"""
    try:
        formatter = FORMATTERS[WebhookType(webhook_type)]
    except ValueError:
        formatter = format_generic_payload
    return formatter(payload)
