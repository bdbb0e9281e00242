"""In-memory analytics store for recent fundability assessments"""

import math
import threading
from collections import Counter, deque
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any, Deque, Dict, Iterable, List, Optional

from fundability_engine.config import settings
from fundability_engine.domain.models import (
    FundabilityInput,
    FundabilitySnapshot,
    SnapshotFlags,
)
from fundability_engine.utils.date_utils import to_iso, utc_now

ANALYTICS_VERSION = "fs_analytics_v1.0"
TOP_N = 5
ACTIONS_PER_RECORD = 3

# Funding range label prefix (before the dollar amounts) -> bucket key
FUNDING_RANGE_BUCKETS = {
    "Low": "low",
    "Low–Moderate": "low_moderate",
    "Moderate": "moderate",
    "Moderate–High": "moderate_high",
    "High": "high",
}


@dataclass(frozen=True)
class AssessmentRecord:
    """One tracked (input, snapshot) observation"""

    timestamp: datetime
    client_email: str
    client_name: str
    score: int
    tier: int
    tier_label: str
    primary_goal: str
    strengths: List[str]
    risks: List[str]
    actions: List[str]
    funding_range: str
    flags: SnapshotFlags


@dataclass(frozen=True)
class AnalyticsQuery:
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    tier: Optional[int] = None
    goal: Optional[str] = None


@dataclass
class AnalyticsMetrics:
    period: Dict[str, str]
    totals: Dict[str, Any]
    tier_distribution: Dict[str, int]
    goal_distribution: Dict[str, int]
    score_ranges: Dict[str, int]
    flags: Dict[str, int]
    top_strengths: List[Dict[str, Any]] = field(default_factory=list)
    top_risks: List[Dict[str, Any]] = field(default_factory=list)
    top_actions: List[Dict[str, Any]] = field(default_factory=list)
    funding_ranges: Dict[str, int] = field(default_factory=dict)


def funding_range_bucket(label: str) -> Optional[str]:
    """'Moderate–High ($50K–$150K+)' -> 'moderate_high'"""
    prefix = label.split(" (", 1)[0].strip()
    return FUNDING_RANGE_BUCKETS.get(prefix)


def _top(counts: Counter, key: str) -> List[Dict[str, Any]]:
    # Counter.most_common keeps first-seen order among equal counts
    return [{key: text, "count": count} for text, count in counts.most_common(TOP_N)]


class AnalyticsStore:
    """
    Bounded, thread-safe store of recent assessments.

    Only the most recent `max_entries` observations are retained; the oldest
    are evicted on append once the ceiling is reached. Instances are owned by
    the hosting process (the FastAPI app state, a CLI run, a test) rather than
    shared through module globals.
    """

    def __init__(self, max_entries: int | None = None, window_days: int | None = None):
        self.max_entries = max_entries or settings.analytics_max_entries
        self.window_days = window_days or settings.analytics_window_days
        self._records: Deque[AssessmentRecord] = deque(maxlen=self.max_entries)
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._records)

    def track(
        self,
        fundability_input: FundabilityInput,
        snapshot: FundabilitySnapshot,
        timestamp: datetime | None = None,
    ) -> AssessmentRecord:
        """Store an assessment result for analytics"""
        record = AssessmentRecord(
            timestamp=timestamp or utc_now(),
            client_email=fundability_input.email,
            client_name=fundability_input.full_name,
            score=snapshot.fundability_score,
            tier=snapshot.fundability_tier_numeric,
            tier_label=snapshot.fundability_tier_label,
            primary_goal=fundability_input.primary_goal.value,
            strengths=list(snapshot.key_strengths),
            risks=list(snapshot.key_risks),
            actions=list(snapshot.high_impact_actions),
            funding_range=snapshot.funding_range_now,
            flags=snapshot.flags,
        )
        with self._lock:
            self._records.append(record)
        return record

    def records(self) -> List[AssessmentRecord]:
        with self._lock:
            return list(self._records)

    def clear(self) -> None:
        with self._lock:
            self._records.clear()

    def _filter(self, start: datetime, end: datetime, query: AnalyticsQuery) -> List[AssessmentRecord]:
        return [
            record
            for record in self.records()
            if start <= record.timestamp <= end
            and (query.tier is None or record.tier == query.tier)
            and (query.goal is None or record.primary_goal == query.goal)
        ]

    def calculate(self, query: AnalyticsQuery | None = None, now: datetime | None = None) -> AnalyticsMetrics:
        """
        Aggregate metrics over tracked assessments.

        The window defaults to the last `window_days` days ending now; both
        bounds are inclusive. Tier and goal filters are applied on top.
        """
        query = query or AnalyticsQuery()
        now = now or utc_now()
        start = query.start_date or now - timedelta(days=self.window_days)
        end = query.end_date or now

        filtered = self._filter(start, end, query)
        total = len(filtered)
        avg_score = sum(r.score for r in filtered) / total if total else 0

        return AnalyticsMetrics(
            period={"start": to_iso(start), "end": to_iso(end)},
            totals={
                "assessments": total,
                "unique_clients": len({r.client_email for r in filtered}),
                "avg_score": math.floor(avg_score * 10 + 0.5) / 10,
            },
            tier_distribution={f"tier_{tier}": sum(1 for r in filtered if r.tier == tier) for tier in range(1, 5)},
            goal_distribution=dict(Counter(r.primary_goal for r in filtered)),
            score_ranges={
                "85-100": sum(1 for r in filtered if r.score >= 85),
                "70-84": sum(1 for r in filtered if 70 <= r.score < 85),
                "55-69": sum(1 for r in filtered if 55 <= r.score < 70),
                "0-54": sum(1 for r in filtered if r.score < 55),
            },
            flags={
                "high_risk": sum(1 for r in filtered if r.flags.high_risk_profile),
                "missing_credit": sum(1 for r in filtered if r.flags.missing_credit_score),
                "missing_dti": sum(1 for r in filtered if r.flags.missing_dti),
            },
            top_strengths=_top(Counter(_flatten(r.strengths for r in filtered)), "strength"),
            top_risks=_top(Counter(_flatten(r.risks for r in filtered)), "risk"),
            top_actions=_top(Counter(_flatten(r.actions[:ACTIONS_PER_RECORD] for r in filtered)), "action"),
            funding_ranges=_funding_range_counts(filtered),
        )


def _flatten(groups: Iterable[List[str]]) -> List[str]:
    return [item for group in groups for item in group]


def _funding_range_counts(records: List[AssessmentRecord]) -> Dict[str, int]:
    counts = {bucket: 0 for bucket in FUNDING_RANGE_BUCKETS.values()}
    for record in records:
        bucket = funding_range_bucket(record.funding_range)
        if bucket:
            counts[bucket] += 1
    return counts
