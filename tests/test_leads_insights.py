"""Tests for insight cards, recommendations and display formatting."""

import pytest

from models.lead_models import ComparisonEntry, Lead
from scripts.leads_analyzer import compute_stats
from scripts.leads_insights import (
    best_entry,
    build_insights,
    build_recommendations,
    comparison_highlights,
    format_percent,
    format_trend,
    trend_direction,
)


def _leads(account, count, day="2024-01-01"):
    return [Lead(account=account, activity="PV", collected_at=f"{day}T10:00:00") for _ in range(count)]


def _daily(account, counts):
    """One entry per consecutive day from 2024-01-01 with the given lead counts."""
    leads = []
    for i, count in enumerate(counts):
        leads += _leads(account, count, f"2024-01-{i + 1:02d}")
    return leads


def _entry(name, total, average, trend):
    return ComparisonEntry(
        account_name=name, total_count=total, daily_average=average, weekly_trend_percent=trend,
    )


class TestFormatting:
    def test_format_percent(self):
        assert format_percent(66.6666) == "66.7%"
        assert format_percent(0) == "0.0%"
        assert format_percent(33.333, digits=2) == "33.33%"

    def test_format_trend_is_signed(self):
        assert format_trend(12.5) == "+12.5%"
        assert format_trend(-3) == "-3.0%"
        assert format_trend(0) == "0.0%"

    @pytest.mark.parametrize("value,expected", [
        (12.0, "up"),
        (5.0, "flat"),
        (0.0, "flat"),
        (-5.0, "flat"),
        (-5.1, "down"),
    ])
    def test_trend_direction(self, value, expected):
        assert trend_direction(value) == expected


class TestBuildInsights:
    def test_empty_stats_have_no_insights(self):
        stats = compute_stats([])
        assert build_insights(stats) == []
        assert build_recommendations(stats) == []

    def test_best_account_card(self):
        stats = compute_stats(_leads("INVF", 10) + _leads("INVC3", 5))
        best = build_insights(stats)[0]
        assert best.type == "success"
        assert best.title == "Best account"
        assert best.description == "INVF generated 10 leads (66.7% of total)"
        assert best.metric == "10 leads"

    def test_large_gap_warning(self):
        stats = compute_stats(_leads("INVF", 10) + _leads("INVC3", 5))
        titles = [i.title for i in build_insights(stats)]
        assert "Large performance gap" in titles

    def test_no_gap_warning_for_close_accounts(self):
        stats = compute_stats(_leads("INVF", 10) + _leads("INVC3", 9))
        titles = [i.title for i in build_insights(stats)]
        assert "Large performance gap" not in titles

    def test_above_average_accounts(self):
        stats = compute_stats(_leads("INVF", 10) + _leads("INVC3", 5))
        above = next(i for i in build_insights(stats) if i.title == "Above-average accounts")
        assert above.metric == "INVF"

    def test_trend_cards(self):
        rising = _daily("INVF", [1] * 7 + [2] * 7)
        falling = _daily("INVF", [2] * 7 + [1] * 7)

        up = next(i for i in build_insights(compute_stats(rising)) if "trend" in i.title)
        down = next(i for i in build_insights(compute_stats(falling)) if "trend" in i.title)

        assert up.title == "Positive trend"
        assert up.metric == "+100.0%"
        assert down.title == "Negative trend"
        assert down.type == "warning"

    def test_flat_trend_has_no_card(self):
        stats = compute_stats(_leads("INVF", 3))
        assert all("trend" not in i.title for i in build_insights(stats))


class TestBuildRecommendations:
    def test_dominant_and_underperforming_accounts(self):
        stats = compute_stats(_leads("INVF", 10) + _leads("INVC3", 5) + _leads("INVC4", 1))
        recs = build_recommendations(stats)

        assert "Optimise INVC4 by applying the best practices of INVF" in recs
        assert "Increase the budget of INVF, which generates 62% of leads" in recs
        assert "Rebalance performance between accounts for more stability" in recs

    def test_trend_recommendations(self):
        falling = _daily("INVF", [2] * 7 + [1] * 7)
        rising = _daily("INVF", [1] * 7 + [2] * 7)

        assert "The trend is negative. Review creatives and targeting quickly" in \
            build_recommendations(compute_stats(falling))
        assert "The trend is positive. Capitalise by increasing budgets" in \
            build_recommendations(compute_stats(rising))

    def test_balanced_accounts_need_no_rebalancing(self):
        stats = compute_stats(_leads("INVF", 5) + _leads("INVC3", 5))
        assert "Rebalance performance between accounts for more stability" not in \
            build_recommendations(stats)


class TestComparisonHighlights:
    def test_picks_leader_per_metric(self):
        entries = [
            _entry("INVF", 30, 2.0, -10.0),
            _entry("INVC3", 20, 4.0, 5.0),
            _entry("INVC4", 10, 1.0, 25.0),
        ]
        highlights = comparison_highlights(entries)
        assert highlights.best_total.account_name == "INVF"
        assert highlights.best_daily_average.account_name == "INVC3"
        assert highlights.best_trend.account_name == "INVC4"

    def test_first_entry_wins_ties(self):
        entries = [_entry("INVF", 10, 1.0, 0.0), _entry("INVC3", 10, 1.0, 0.0)]
        assert best_entry(entries, "total_count").account_name == "INVF"

    def test_empty(self):
        highlights = comparison_highlights([])
        assert highlights.best_total is None
        assert highlights.best_trend is None
