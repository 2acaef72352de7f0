"""
Leads Analytics Hub — Leads Router
====================================
Filterable lead analytics. Every endpoint fetches the filtered leads once
through the app's lead source and aggregates them in memory.

Common query params: date_from, date_to (YYYY-MM-DD, inclusive),
accounts (repeatable), activity (PV/PAC/ITE or "all"), search.

Endpoints:
  GET /api/leads               - Filtered lead rows
  GET /api/leads/stats         - Totals, account/activity/day breakdowns, trend
  GET /api/leads/activities    - Activity breakdown
  GET /api/leads/timeseries    - Daily counts (optionally split by account)
  GET /api/leads/heatmap       - Sparse account x day matrix
  GET /api/leads/compare       - Side-by-side metrics for selected accounts
  GET /api/leads/accounts      - Selectable accounts and activities
  GET /api/leads/insights      - Insight cards and recommendations
  GET /api/leads/dashboard     - All of the above from one fetch
"""
from __future__ import annotations

from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from pydantic import ValidationError

from models.lead_models import LeadsFilter
from scripts import leads_insights
from scripts.leads_service import LeadsService
from scripts.lib.config import default_filter_values
from scripts.lib.errors import DataFetchError
from scripts.lib.logger import setup_logger

logger = setup_logger("leads_router")

router = APIRouter(prefix="/api/leads", tags=["leads"])


def get_leads_service(request: Request) -> LeadsService:
    """The LeadsService built at startup (503 if no lead source is configured)."""
    service = getattr(request.app.state, "leads_service", None)
    if service is None:
        raise HTTPException(status_code=503, detail="Lead source not configured")
    return service


def leads_filter(
    date_from: Optional[date] = Query(None, description="First day, inclusive (YYYY-MM-DD)"),
    date_to: Optional[date] = Query(None, description="Last day, inclusive (YYYY-MM-DD)"),
    accounts: List[str] = Query(default=[], description="Account allow-list (empty = all)"),
    activity: Optional[str] = Query(None, description="PV, PAC, ITE or 'all'"),
    search: str = Query("", description="Case-insensitive match on name or email"),
) -> LeadsFilter:
    """Build a LeadsFilter from query params, falling back to configured defaults."""
    defaults = default_filter_values()
    if not activity:
        activity = defaults["activity"]
    elif activity.lower() == "all":
        # Explicit override of any configured default
        activity = None

    try:
        return LeadsFilter(
            date_from=date_from,
            date_to=date_to,
            accounts=frozenset(accounts) or defaults["accounts"],
            activity=activity,
            search=search,
        )
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=[err["msg"] for err in e.errors()])


@router.get("")
def list_leads(
    filters: LeadsFilter = Depends(leads_filter),
    service: LeadsService = Depends(get_leads_service),
):
    """Filtered lead rows for the detail table."""
    try:
        leads = service.fetch_leads(filters)
    except DataFetchError as e:
        logger.error("List leads failed: %s", e)
        raise HTTPException(status_code=502, detail=e.message)

    return {"results": leads, "count": len(leads)}


@router.get("/stats")
def lead_stats(
    filters: LeadsFilter = Depends(leads_filter),
    service: LeadsService = Depends(get_leads_service),
):
    """Totals, per-account/activity/day breakdowns, best day and weekly trend."""
    try:
        return service.get_stats(filters)
    except DataFetchError as e:
        logger.error("Lead stats failed: %s", e)
        raise HTTPException(status_code=502, detail=e.message)


@router.get("/activities")
def activity_stats(
    filters: LeadsFilter = Depends(leads_filter),
    service: LeadsService = Depends(get_leads_service),
):
    """Lead volume per activity type."""
    try:
        return {"activities": service.get_activity_stats(filters)}
    except DataFetchError as e:
        logger.error("Activity stats failed: %s", e)
        raise HTTPException(status_code=502, detail=e.message)


@router.get("/timeseries")
def time_series(
    split_by_account: bool = Query(False, description="Include per-account counts per day"),
    filters: LeadsFilter = Depends(leads_filter),
    service: LeadsService = Depends(get_leads_service),
):
    """Daily lead counts for charting."""
    try:
        series = service.get_time_series(filters, split_by_account=split_by_account)
    except DataFetchError as e:
        logger.error("Time series failed: %s", e)
        raise HTTPException(status_code=502, detail=e.message)

    return {"series": series, "split_by_account": split_by_account}


@router.get("/heatmap")
def heatmap(
    filters: LeadsFilter = Depends(leads_filter),
    service: LeadsService = Depends(get_leads_service),
):
    """Non-zero (account, day) cells."""
    try:
        return {"cells": service.get_heatmap(filters)}
    except DataFetchError as e:
        logger.error("Heatmap failed: %s", e)
        raise HTTPException(status_code=502, detail=e.message)


@router.get("/compare")
def compare_accounts(
    compare: List[str] = Query(default=[], description="Accounts to compare, in display order"),
    filters: LeadsFilter = Depends(leads_filter),
    service: LeadsService = Depends(get_leads_service),
):
    """Totals, daily average and weekly trend per selected account."""
    try:
        entries = service.compare_accounts(compare, filters)
    except DataFetchError as e:
        logger.error("Account comparison failed: %s", e)
        raise HTTPException(status_code=502, detail=e.message)

    return {
        "comparison": entries,
        "highlights": leads_insights.comparison_highlights(entries),
    }


@router.get("/accounts")
def list_accounts(service: LeadsService = Depends(get_leads_service)):
    """Accounts and activities offered by the filter controls."""
    return {
        "accounts": service.get_accounts(),
        "activities": service.get_activities(),
    }


@router.get("/insights")
def insights(
    filters: LeadsFilter = Depends(leads_filter),
    service: LeadsService = Depends(get_leads_service),
):
    """Insight cards and recommendations for the current filter."""
    try:
        stats = service.get_stats(filters)
    except DataFetchError as e:
        logger.error("Insights failed: %s", e)
        raise HTTPException(status_code=502, detail=e.message)

    return {
        "insights": leads_insights.build_insights(stats),
        "recommendations": leads_insights.build_recommendations(stats),
        "weekly_trend": {
            "value": stats.weekly_trend,
            "label": leads_insights.format_trend(stats.weekly_trend),
            "direction": leads_insights.trend_direction(stats.weekly_trend),
        },
    }


@router.get("/dashboard")
def dashboard(
    compare: List[str] = Query(default=[], description="Accounts to compare"),
    filters: LeadsFilter = Depends(leads_filter),
    service: LeadsService = Depends(get_leads_service),
):
    """Every dashboard view computed from a single fetch."""
    try:
        return service.get_dashboard(filters, compare=compare)
    except DataFetchError as e:
        logger.error("Dashboard build failed: %s", e)
        raise HTTPException(status_code=502, detail=e.message)
