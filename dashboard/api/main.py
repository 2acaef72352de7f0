"""
Leads Analytics Hub — API Server
==================================

Serves lead analytics computed in memory from a Supabase lead table.

Route groups:
  /api/health              - Health check
  /api/leads/*             - Filtered leads, stats, time series, heatmap,
                             account comparison, insights

The lead source is built once at startup and stored on app.state;
routes reach it through a dependency, never through a module global.
"""
from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from scripts.leads_service import LeadsService
from scripts.lib.config import CORS_ORIGINS
from scripts.lib.errors import ConfigError
from scripts.lib.supabase_client import SupabaseLeadSource, create_supabase_client

logger = logging.getLogger(__name__)

VERSION = "1.0.0"


def _build_service() -> Optional[LeadsService]:
    """LeadsService over Supabase, or None when credentials are missing."""
    try:
        return LeadsService(SupabaseLeadSource(create_supabase_client()))
    except ConfigError as e:
        logger.warning("Supabase not configured, lead routes will return 503: %s", e)
        return None


def create_app(service: Optional[LeadsService] = None) -> FastAPI:
    """
    Build the API app.

    Args:
        service: Pre-built LeadsService (e.g. over an in-memory source).
            When omitted, one is built over Supabase at startup.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Starting Leads Analytics Hub...")
        if app.state.leads_service is None:
            app.state.leads_service = _build_service()
        logger.info("Leads Analytics Hub ready")
        yield
        logger.info("Shutting down Leads Analytics Hub...")

    app = FastAPI(
        title="Leads Analytics Hub",
        version=VERSION,
        description="Marketing lead analytics: accounts, activities, trends and comparisons",
        lifespan=lifespan,
    )
    app.state.leads_service = service

    app.add_middleware(
        CORSMiddleware,
        allow_origins=CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    from dashboard.api.routers.leads import router as leads_router

    app.include_router(leads_router)

    @app.get("/api/health", tags=["system"])
    def health(request: Request):
        """Health check with lead source status."""
        return {
            "status": "healthy",
            "service": "Leads Analytics Hub",
            "version": VERSION,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "integrations": {
                "lead_source": request.app.state.leads_service is not None,
            },
        }

    return app


app = create_app()
