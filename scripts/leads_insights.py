"""
Leads Insights
==============
Presentation-side reading of the analyzer's output: rounded labels,
trend direction, insight cards, recommendations, and comparison leaders.

Rounding happens only here. LeadStats and ComparisonEntry keep exact
floats so they stay testable.
"""
from __future__ import annotations

from typing import List, Optional, Sequence

from models.lead_models import ComparisonEntry, ComparisonHighlights, Insight, LeadStats

# Trend badge threshold (percentage points)
TREND_FLAT_BAND = 5.0

GAP_WARNING_RATIO = 0.3
UNDERPERFORMER_RATIO = 0.7
DOMINANT_SHARE_PCT = 40.0
TREND_ACTION_PCT = 10.0
UNEVEN_VARIANCE = 50.0


# ---------------------------------------------------------------------------
# Formatting
# ---------------------------------------------------------------------------

def format_percent(value: float, digits: int = 1) -> str:
    """Percentage label, e.g. 66.666 -> '66.7%'."""
    return f"{value:.{digits}f}%"


def format_trend(value: float, digits: int = 1) -> str:
    """Signed trend label, e.g. 12.5 -> '+12.5%', -3 -> '-3.0%'."""
    sign = "+" if value > 0 else ""
    return f"{sign}{value:.{digits}f}%"


def trend_direction(value: float, threshold: float = TREND_FLAT_BAND) -> str:
    """'up' above +threshold, 'down' below -threshold, else 'flat'."""
    if value > threshold:
        return "up"
    if value < -threshold:
        return "down"
    return "flat"


# ---------------------------------------------------------------------------
# Insights panel
# ---------------------------------------------------------------------------

def _daily_rates(stats: LeadStats) -> List[float]:
    return [account.count / stats.total_days for account in stats.by_account]


def build_insights(stats: LeadStats) -> List[Insight]:
    """Insight cards for the current filter's statistics."""
    accounts = stats.by_account
    if not accounts or stats.total_days == 0:
        return []

    insights: List[Insight] = []
    best, worst = accounts[0], accounts[-1]

    insights.append(Insight(
        type="success",
        title="Best account",
        description=(
            f"{best.name} generated {best.count} leads "
            f"({format_percent(best.percentage_of_total)} of total)"
        ),
        metric=f"{best.count} leads",
    ))

    if len(accounts) > 1:
        gap = best.count - worst.count
        if gap > best.count * GAP_WARNING_RATIO:
            insights.append(Insight(
                type="warning",
                title="Large performance gap",
                description=(
                    f"{gap / best.count * 100:.0f}% gap between {best.name} and "
                    f"{worst.name}. Review what differs in their strategy."
                ),
                metric=f"{gap} leads",
            ))

    avg_per_account = stats.daily_average / len(accounts)
    rates = _daily_rates(stats)

    above = [a.name for a, rate in zip(accounts, rates) if rate > avg_per_account]
    if above:
        insights.append(Insight(
            type="info",
            title="Above-average accounts",
            description=(
                f"{len(above)} account(s) above the average of "
                f"{avg_per_account:.1f} leads/day"
            ),
            metric=", ".join(above),
        ))

    if stats.weekly_trend != 0:
        rising = stats.weekly_trend > 0
        insights.append(Insight(
            type="success" if rising else "warning",
            title="Positive trend" if rising else "Negative trend",
            description=(
                f"{'Growth' if rising else 'Decline'} of "
                f"{abs(stats.weekly_trend):.1f}% over the last 7 days"
            ),
            metric=format_trend(stats.weekly_trend),
        ))

    # Spread of per-account daily share around the per-account average
    shares = [rate * 100 for rate in rates]
    variance = sum((s - avg_per_account) ** 2 for s in shares) / len(shares)
    if variance > UNEVEN_VARIANCE:
        insights.append(Insight(
            type="info",
            title="Uneven distribution",
            description=(
                "Performance varies significantly between accounts. "
                "Consider aligning their strategies."
            ),
        ))

    return insights


def build_recommendations(stats: LeadStats) -> List[str]:
    """Actionable suggestions derived from the same statistics."""
    accounts = stats.by_account
    if not accounts or stats.total_days == 0:
        return []

    recs: List[str] = []
    best = accounts[0]
    avg_per_account = stats.daily_average / len(accounts)
    rates = _daily_rates(stats)

    under = [a.name for a, rate in zip(accounts, rates) if rate < avg_per_account * UNDERPERFORMER_RATIO]
    if under:
        recs.append(f"Optimise {', '.join(under)} by applying the best practices of {best.name}")

    if best.percentage_of_total > DOMINANT_SHARE_PCT:
        recs.append(
            f"Increase the budget of {best.name}, which generates "
            f"{best.percentage_of_total:.0f}% of leads"
        )

    if stats.weekly_trend < -TREND_ACTION_PCT:
        recs.append("The trend is negative. Review creatives and targeting quickly")
    elif stats.weekly_trend > TREND_ACTION_PCT:
        recs.append("The trend is positive. Capitalise by increasing budgets")

    if len(accounts) > 1 and max(rates) > min(rates) * 2:
        recs.append("Rebalance performance between accounts for more stability")

    return recs


# ---------------------------------------------------------------------------
# Comparison
# ---------------------------------------------------------------------------

def best_entry(entries: Sequence[ComparisonEntry], metric: str) -> Optional[ComparisonEntry]:
    """Entry with the highest value of metric; the first one wins on ties."""
    best = None
    for entry in entries:
        if best is None or getattr(entry, metric) > getattr(best, metric):
            best = entry
    return best


def comparison_highlights(entries: Sequence[ComparisonEntry]) -> ComparisonHighlights:
    """Best volume, best daily average and best trend among compared accounts."""
    return ComparisonHighlights(
        best_total=best_entry(entries, "total_count"),
        best_daily_average=best_entry(entries, "daily_average"),
        best_trend=best_entry(entries, "weekly_trend_percent"),
    )
