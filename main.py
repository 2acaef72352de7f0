"""
Leads Analytics Hub — Entry Point
===================================

Run: python main.py
"""

import logging
import os

from scripts.lib.config import DASHBOARD_PORT, DEBUG, LEADS_TABLE

# Configure logging
logging.basicConfig(
    level=getattr(logging, os.getenv("LOG_LEVEL", "INFO").upper(), logging.INFO),
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
)
logger = logging.getLogger("leads-analytics-hub")

if __name__ == "__main__":
    import uvicorn

    logger.info("=" * 60)
    logger.info("  LEADS ANALYTICS HUB — Lead Acquisition Dashboard")
    logger.info("=" * 60)
    logger.info(f"  Lead table  : {LEADS_TABLE}")
    logger.info(f"  Server      : http://0.0.0.0:{DASHBOARD_PORT}")
    logger.info(f"  API Docs    : http://localhost:{DASHBOARD_PORT}/docs")
    logger.info(f"  Debug       : {DEBUG}")
    logger.info("=" * 60)

    uvicorn.run(
        "dashboard.api.main:app",
        host="0.0.0.0",
        port=DASHBOARD_PORT,
        reload=DEBUG,
    )
