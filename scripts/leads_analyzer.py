"""
Leads Analyzer
==============
Turns a filtered list of Lead records into dashboard statistics:
account and activity breakdowns, daily time series, the account x day
heatmap, and multi-account comparison.

Every function here is pure: it reads only its arguments, keeps no state
between calls, and never raises on bad data. Leads whose collected_at
cannot be parsed are logged and left out of anything keyed by day, but
still count towards totals and per-account/per-activity figures.

Exports:
    compute_stats, compute_account_stats, compute_activity_stats,
    compute_time_series, compute_heatmap, compare_accounts, weekly_trend
"""
from __future__ import annotations

from collections import Counter, defaultdict
from typing import Dict, Iterable, List, Sequence, Tuple

from models.lead_models import (
    AccountStat,
    ActivityStat,
    BestDay,
    ComparisonEntry,
    DateStat,
    HeatmapCell,
    Lead,
    LeadStats,
    TopEntry,
)
from scripts.lib.config import ACTIVITY_COLORS, DEFAULT_ACTIVITY_COLOR, PV_ACTIVITY
from scripts.lib.logger import setup_logger
from scripts.lib.utils import day_key, safe_div

logger = setup_logger(__name__)

TREND_WINDOW_DAYS = 7

NO_TOP_ENTRY = {"name": "N/A", "count": 0, "percentage": 0.0}


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _lead_days(leads: Iterable[Lead]) -> List[Tuple[Lead, str]]:
    """Pair each lead with its day key, dropping (and logging) unparsable ones."""
    dated = []
    for lead in leads:
        day = day_key(lead.collected_at)
        if day is None:
            logger.warning("Invalid date format: %r (account %s)", lead.collected_at, lead.account)
            continue
        dated.append((lead, day))
    return dated


def _daily_counts(leads: Iterable[Lead]) -> List[DateStat]:
    counts: Counter = Counter(day for _, day in _lead_days(leads))
    return [DateStat(date=day, count=n) for day, n in sorted(counts.items())]


def weekly_trend(series: Sequence[DateStat]) -> float:
    """
    Percentage change between the last 7 active days and the 7 before them.

    Windows are taken over entries, not calendar days, so with fewer than
    14 active days they are short (and the earlier one may be empty).
    Returns 0 when the earlier window sums to 0.
    """
    last = series[-TREND_WINDOW_DAYS:]
    prev = series[-2 * TREND_WINDOW_DAYS:-TREND_WINDOW_DAYS]
    last_total = sum(d.count for d in last)
    prev_total = sum(d.count for d in prev)
    if prev_total <= 0:
        return 0.0
    return (last_total - prev_total) / prev_total * 100


# ---------------------------------------------------------------------------
# Aggregator
# ---------------------------------------------------------------------------

def compute_account_stats(leads: Sequence[Lead]) -> List[AccountStat]:
    """Per-account counts, largest first; ties keep first-seen order."""
    total = len(leads)
    counts: Dict[str, int] = {}
    pv_counts: Counter = Counter()

    # dict preserves first-seen order, sorted() is stable
    for lead in leads:
        counts[lead.account] = counts.get(lead.account, 0) + 1
        if lead.activity == PV_ACTIVITY:
            pv_counts[lead.account] += 1

    stats = [
        AccountStat(
            name=name,
            count=count,
            percentage_of_total=safe_div(count, total) * 100,
            pv_count=pv_counts[name],
        )
        for name, count in counts.items()
    ]
    return sorted(stats, key=lambda s: s.count, reverse=True)


def compute_activity_stats(leads: Sequence[Lead]) -> List[ActivityStat]:
    """Per-activity counts with chart colours, largest first."""
    total = len(leads)
    counts: Dict[str, int] = {}
    for lead in leads:
        counts[lead.activity] = counts.get(lead.activity, 0) + 1

    stats = [
        ActivityStat(
            name=name,
            count=count,
            percentage_of_total=safe_div(count, total) * 100,
            color=ACTIVITY_COLORS.get(name, DEFAULT_ACTIVITY_COLOR),
        )
        for name, count in counts.items()
    ]
    return sorted(stats, key=lambda s: s.count, reverse=True)


def compute_stats(leads: Sequence[Lead]) -> LeadStats:
    """Summary statistics for the dashboard cards and breakdown charts."""
    total = len(leads)

    by_account = compute_account_stats(leads)
    by_activity = compute_activity_stats(leads)
    by_date = _daily_counts(leads)

    top_account = (
        TopEntry(name=by_account[0].name, count=by_account[0].count,
                 percentage=by_account[0].percentage_of_total)
        if by_account
        else TopEntry(**NO_TOP_ENTRY)
    )
    top_activity = (
        TopEntry(name=by_activity[0].name, count=by_activity[0].count,
                 percentage=by_activity[0].percentage_of_total)
        if by_activity
        else TopEntry(**NO_TOP_ENTRY)
    )

    total_days = len(by_date)

    best_day = BestDay(date="", count=0)
    for day in by_date:
        # strict > keeps the earliest day on ties
        if day.count > best_day.count:
            best_day = BestDay(date=day.date, count=day.count)

    stats = LeadStats(
        total=total,
        by_account=by_account,
        by_activity=by_activity,
        by_date=by_date,
        top_account=top_account,
        top_activity=top_activity,
        active_accounts=sum(1 for s in by_account if s.count > 0),
        daily_average=safe_div(total, total_days),
        total_days=total_days,
        best_day=best_day,
        weekly_trend=weekly_trend(by_date),
    )
    logger.debug(
        "Computed stats: %d leads, %d accounts, %d days",
        total, stats.active_accounts, total_days,
    )
    return stats


# ---------------------------------------------------------------------------
# Time series
# ---------------------------------------------------------------------------

def compute_time_series(leads: Sequence[Lead], split_by_account: bool = False) -> List[DateStat]:
    """
    One entry per active day, ascending.

    With split_by_account, each entry also carries by_account: every account
    seen that day mapped to its count, with count being the day's total.
    """
    if not split_by_account:
        return _daily_counts(leads)

    per_day: Dict[str, Counter] = defaultdict(Counter)
    for lead, day in _lead_days(leads):
        per_day[day][lead.account] += 1

    return [
        DateStat(date=day, count=sum(accounts.values()), by_account=dict(accounts))
        for day, accounts in sorted(per_day.items())
    ]


# ---------------------------------------------------------------------------
# Heatmap
# ---------------------------------------------------------------------------

def compute_heatmap(leads: Sequence[Lead]) -> List[HeatmapCell]:
    """Sparse account x day matrix: one cell per observed pair."""
    cells: Counter = Counter((lead.account, day) for lead, day in _lead_days(leads))
    return [
        HeatmapCell(account=account, date=day, value=value)
        for (account, day), value in sorted(cells.items())
    ]


# ---------------------------------------------------------------------------
# Comparison
# ---------------------------------------------------------------------------

def _compare_one(account_name: str, leads: Sequence[Lead]) -> ComparisonEntry:
    account_leads = [lead for lead in leads if lead.account == account_name]
    series = _daily_counts(account_leads)
    return ComparisonEntry(
        account_name=account_name,
        total_count=len(account_leads),
        daily_average=safe_div(len(account_leads), len(series)),
        weekly_trend_percent=weekly_trend(series),
        time_series=series,
    )


def compare_accounts(
    account_names: Sequence[str],
    leads: Sequence[Lead],
) -> List[ComparisonEntry]:
    """
    Comparison metrics for each requested account, in request order.

    Each name is computed independently; repeats produce repeated entries
    and unknown names produce all-zero entries.
    """
    return [_compare_one(name, leads) for name in account_names]
