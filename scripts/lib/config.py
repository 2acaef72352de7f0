"""
Settings for Leads Analytics Hub.
Reads the project .env once and exposes typed constants.

Usage:
    from scripts.lib.config import LEADS_TABLE, default_filter_values
"""
import os
from pathlib import Path
from typing import Dict, List, Optional

from dotenv import load_dotenv

PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
load_dotenv(PROJECT_ROOT / ".env")


def _env(name: str, default: str = "") -> str:
    # Hosted env panels often leave trailing newlines in pasted keys
    return os.environ.get(name, default).strip()


def _env_list(name: str) -> List[str]:
    return [item.strip() for item in _env(name).split(",") if item.strip()]


def _env_int(name: str, default: int) -> int:
    value = _env(name)
    if not value:
        return default
    try:
        return int(value)
    except ValueError:
        return default


# ---------------------------------------------------------------------------
# Supabase
# ---------------------------------------------------------------------------
SUPABASE_URL = _env("SUPABASE_URL")
SUPABASE_KEY = (
    _env("SUPABASE_SERVICE_ROLE_KEY")
    or _env("SUPABASE_KEY")
    or _env("SUPABASE_ANON_KEY")
)

# ---------------------------------------------------------------------------
# Lead table
# ---------------------------------------------------------------------------
LEADS_TABLE = _env("LEADS_TABLE", "NEW-FACEBOOK")

# Store column -> Lead field
LEAD_COLUMN_MAP: Dict[str, str] = {
    "compte": "account",
    "activité": "activity",
    "nom": "name",
    "code_postal": "postal_code",
    "email": "email",
    "tel": "phone",
    "date_collecte": "collected_at",
    "source": "source",
    "formulaire_id": "form_id",
    "données_brutes": "raw_payload",
}

LEADS_PAGE_SIZE = _env_int("LEADS_PAGE_SIZE", 1000)
LEADS_FETCH_RETRIES = _env_int("LEADS_FETCH_RETRIES", 3)

# Accounts offered to the UI when nothing narrower is configured
KNOWN_ACCOUNTS: List[str] = _env_list("LEADS_ACCOUNTS") or ["INVF", "INVC3", "INVC4"]

# Narrowed deployments pin these; empty means "all"
LEADS_DEFAULT_ACCOUNTS: List[str] = _env_list("LEADS_DEFAULT_ACCOUNTS")
LEADS_DEFAULT_ACTIVITY: Optional[str] = _env("LEADS_DEFAULT_ACTIVITY") or None

# ---------------------------------------------------------------------------
# Presentation
# ---------------------------------------------------------------------------
PV_ACTIVITY = "PV"
KNOWN_ACTIVITIES: List[str] = ["PV", "PAC", "ITE"]

ACTIVITY_COLORS: Dict[str, str] = {
    "PV": "#3b82f6",   # blue-500
    "ITE": "#f97316",  # orange-500
    "PAC": "#10b981",  # emerald-500
}
DEFAULT_ACTIVITY_COLOR = "#6b7280"

# ---------------------------------------------------------------------------
# Server
# ---------------------------------------------------------------------------
DASHBOARD_PORT = _env_int("DASHBOARD_PORT", 8001)
CORS_ORIGINS = _env_list("CORS_ORIGINS") or ["http://localhost:3000", "http://localhost:8001"]
DEBUG = _env("DEBUG", "false").lower() == "true"


def default_filter_values() -> Dict:
    """Keyword defaults for LeadsFilter from the narrowed-deployment settings."""
    return {
        "accounts": frozenset(LEADS_DEFAULT_ACCOUNTS),
        "activity": LEADS_DEFAULT_ACTIVITY,
    }
