"""
Leads Analytics Hub — Lead Pydantic Models
============================================

Lead records as read from the store, the filter used to fetch them,
and every derived statistic served to the dashboard.
"""
from __future__ import annotations

import json
from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, FrozenSet, List, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator


# ─── Source Records ─────────────────────────────────────────

class Lead(BaseModel):
    """A single captured contact attributed to an account and activity."""
    model_config = ConfigDict(frozen=True)

    account: str
    activity: str
    name: Optional[str] = None
    postal_code: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    collected_at: Optional[str] = Field(None, description="ISO-8601 timestamp as stored")
    source: Optional[str] = None
    form_id: Optional[str] = None
    raw_payload: Optional[Union[Dict[str, Any], bytes]] = Field(
        None, description="Opaque original payload, never inspected",
    )

    @classmethod
    def from_row(cls, row: Mapping[str, Any], column_map: Mapping[str, str]) -> "Lead":
        """Build a Lead from a store row, renaming columns via column_map."""
        fields = {column_map.get(col, col): val for col, val in row.items()}
        fields = {k: v for k, v in fields.items() if k in cls.model_fields}

        collected = fields.get("collected_at")
        if isinstance(collected, datetime):
            fields["collected_at"] = collected.isoformat()
        elif collected is not None and not isinstance(collected, str):
            # Kept as text; the analyzers drop it from day-keyed views
            fields["collected_at"] = str(collected)

        payload = fields.get("raw_payload")
        if payload is not None and not isinstance(payload, (dict, bytes)):
            fields["raw_payload"] = json.dumps(payload, default=str).encode("utf-8")

        return cls(**fields)


class LeadsFilter(BaseModel):
    """Criteria applied by the fetch boundary."""
    model_config = ConfigDict(frozen=True)

    date_from: Optional[date] = None
    date_to: Optional[date] = None
    accounts: FrozenSet[str] = Field(
        default_factory=frozenset, description="Empty means all accounts",
    )
    activity: Optional[str] = Field(None, description="None means all activities")
    search: str = ""

    @model_validator(mode="after")
    def _check_range(self) -> "LeadsFilter":
        if self.date_from and self.date_to and self.date_from > self.date_to:
            raise ValueError("date_from must be on or before date_to")
        return self


# ─── Aggregates ─────────────────────────────────────────────

class AccountStat(BaseModel):
    """Lead volume for one account."""
    name: str
    count: int
    percentage_of_total: float
    pv_count: int = 0


class ActivityStat(BaseModel):
    """Lead volume for one activity type."""
    name: str
    count: int
    percentage_of_total: float
    color: str


class DateStat(BaseModel):
    """Lead volume for one calendar day."""
    date: str = Field(description="YYYY-MM-DD")
    count: int
    by_account: Optional[Dict[str, int]] = None


class HeatmapCell(BaseModel):
    """Lead volume for one (account, day) pair."""
    account: str
    date: str
    value: int


class TopEntry(BaseModel):
    name: str
    count: int
    percentage: float


class BestDay(BaseModel):
    date: str
    count: int


class LeadStats(BaseModel):
    """Everything the dashboard summary cards need."""
    total: int
    by_account: List[AccountStat] = Field(default_factory=list)
    by_activity: List[ActivityStat] = Field(default_factory=list)
    by_date: List[DateStat] = Field(default_factory=list)
    top_account: TopEntry
    top_activity: TopEntry
    active_accounts: int = 0
    daily_average: float = 0.0
    total_days: int = 0
    best_day: BestDay
    weekly_trend: float = 0.0


class ComparisonEntry(BaseModel):
    """Side-by-side metrics for one account."""
    account_name: str
    total_count: int
    daily_average: float
    weekly_trend_percent: float
    time_series: List[DateStat] = Field(default_factory=list)


# ─── Insights ───────────────────────────────────────────────

class Insight(BaseModel):
    """One observation for the insights panel."""
    type: str = Field(description="success | warning | info")
    title: str
    description: str
    metric: Optional[str] = None


class ComparisonHighlights(BaseModel):
    """Leaders among compared accounts."""
    best_total: Optional[ComparisonEntry] = None
    best_daily_average: Optional[ComparisonEntry] = None
    best_trend: Optional[ComparisonEntry] = None


# ─── Fetch State ────────────────────────────────────────────

class FetchStatus(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    SUCCESS = "success"
    ERROR = "error"


class FetchState(BaseModel):
    """Where a lead fetch stands: idle, loading, success(leads) or error(reason)."""
    status: FetchStatus = FetchStatus.IDLE
    leads: List[Lead] = Field(default_factory=list)
    error: Optional[str] = None

    @classmethod
    def idle(cls) -> "FetchState":
        return cls()

    @classmethod
    def loading(cls) -> "FetchState":
        return cls(status=FetchStatus.LOADING)

    @classmethod
    def success(cls, leads: List[Lead]) -> "FetchState":
        return cls(status=FetchStatus.SUCCESS, leads=list(leads))

    @classmethod
    def failed(cls, reason: str) -> "FetchState":
        return cls(status=FetchStatus.ERROR, error=reason)

    @property
    def is_success(self) -> bool:
        return self.status == FetchStatus.SUCCESS
