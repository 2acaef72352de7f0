"""
Leads Service
=============
Orchestrates fetch + aggregate: one fetch per filter, then every analyzer
runs on that same snapshot.

Usage:
    from scripts.leads_service import LeadsService
    from scripts.lib.supabase_client import SupabaseLeadSource, create_supabase_client

    service = LeadsService(SupabaseLeadSource(create_supabase_client()))
    dashboard = service.get_dashboard(LeadsFilter(date_from=date(2024, 1, 1)))

The service holds no results between calls. Fetch failures propagate as
DataFetchError (or surface as FetchState.failed via load()); nothing is
ever computed from a previous snapshot.
"""
from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence

from models.lead_models import (
    ActivityStat,
    ComparisonEntry,
    DateStat,
    FetchState,
    HeatmapCell,
    Lead,
    LeadsFilter,
    LeadStats,
)
from scripts import leads_analyzer, leads_insights
from scripts.lib.config import KNOWN_ACCOUNTS, KNOWN_ACTIVITIES
from scripts.lib.errors import DataFetchError
from scripts.lib.logger import setup_logger
from scripts.lib.supabase_client import LeadSource

logger = setup_logger(__name__)


class LeadsService:
    """Dashboard queries over an injected lead source."""

    def __init__(self, source: LeadSource, accounts: Sequence[str] = None):
        self.source = source
        self.accounts = list(accounts if accounts is not None else KNOWN_ACCOUNTS)

    def fetch_leads(self, filters: LeadsFilter) -> List[Lead]:
        return self.source.fetch_leads(filters)

    def load(self, filters: LeadsFilter) -> FetchState:
        """Fetch into a FetchState: success(leads) or failed(reason)."""
        try:
            return FetchState.success(self.fetch_leads(filters))
        except DataFetchError as e:
            logger.error("Lead fetch failed: %s", e.message)
            return FetchState.failed(e.message)

    # ------------------------------------------------------------------
    # Single views (each fetches once)
    # ------------------------------------------------------------------

    def get_stats(self, filters: LeadsFilter) -> LeadStats:
        return leads_analyzer.compute_stats(self.fetch_leads(filters))

    def get_activity_stats(self, filters: LeadsFilter) -> List[ActivityStat]:
        return leads_analyzer.compute_activity_stats(self.fetch_leads(filters))

    def get_time_series(self, filters: LeadsFilter, split_by_account: bool = False) -> List[DateStat]:
        return leads_analyzer.compute_time_series(self.fetch_leads(filters), split_by_account)

    def get_heatmap(self, filters: LeadsFilter) -> List[HeatmapCell]:
        return leads_analyzer.compute_heatmap(self.fetch_leads(filters))

    def compare_accounts(
        self, account_names: Sequence[str], filters: LeadsFilter,
    ) -> List[ComparisonEntry]:
        if not account_names:
            return []
        return leads_analyzer.compare_accounts(account_names, self.fetch_leads(filters))

    def get_accounts(self) -> List[str]:
        return list(self.accounts)

    def get_activities(self) -> List[str]:
        return list(KNOWN_ACTIVITIES)

    # ------------------------------------------------------------------
    # Combined view
    # ------------------------------------------------------------------

    def get_dashboard(
        self,
        filters: LeadsFilter,
        compare: Optional[Sequence[str]] = None,
    ) -> Dict[str, Any]:
        """Every dashboard view computed from a single fetch."""
        leads = self.fetch_leads(filters)
        stats = leads_analyzer.compute_stats(leads)
        comparison = leads_analyzer.compare_accounts(compare or [], leads)

        logger.info(
            "Dashboard built: %d leads, %d days, %d compared accounts",
            stats.total, stats.total_days, len(comparison),
        )
        return {
            "stats": stats,
            "time_series": leads_analyzer.compute_time_series(leads),
            "time_series_by_account": leads_analyzer.compute_time_series(leads, split_by_account=True),
            "heatmap": leads_analyzer.compute_heatmap(leads),
            "comparison": comparison,
            "comparison_highlights": leads_insights.comparison_highlights(comparison),
            "insights": leads_insights.build_insights(stats),
            "recommendations": leads_insights.build_recommendations(stats),
        }
