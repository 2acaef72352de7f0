"""
Supabase lead source for Leads Analytics Hub.
Provides client construction and the fetch boundary that turns a
LeadsFilter into a list of Lead records.

Usage:
    from scripts.lib.supabase_client import create_supabase_client, SupabaseLeadSource

    source = SupabaseLeadSource(create_supabase_client())
    leads = source.fetch_leads(LeadsFilter(accounts={"INVF"}))

There is no module-level client: whoever orchestrates fetch + aggregate
builds a source once and passes it along. InMemoryLeadSource applies the
same filter semantics to a fixed list of leads for tests.
"""
from __future__ import annotations

from typing import Any, Dict, Iterable, List, Mapping, Optional, Protocol

import httpx
from pydantic import ValidationError
from tenacity import (
    Retrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from models.lead_models import Lead, LeadsFilter
from scripts.lib import config
from scripts.lib.errors import ConfigError, DataFetchError
from scripts.lib.logger import setup_logger
from scripts.lib.utils import parse_timestamp

logger = setup_logger(__name__)

# PostgREST or-filter syntax uses these as separators
_OR_FILTER_RESERVED = str.maketrans("", "", ",()")


class LeadSource(Protocol):
    """Anything that can return leads for a filter."""

    def fetch_leads(self, filters: LeadsFilter) -> List[Lead]:
        ...


def create_supabase_client(url: str = None, key: str = None):
    """Create a Supabase client from explicit credentials or the environment."""
    url = (url or config.SUPABASE_URL).strip()
    key = (key or config.SUPABASE_KEY).strip()

    if not url or not key:
        raise ConfigError(
            "SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY (or SUPABASE_KEY) must be set in .env",
            setting="SUPABASE_URL",
        )

    from supabase import create_client
    client = create_client(url, key)
    logger.info("Supabase client connected to %s", url)
    return client


def filter_leads(leads: Iterable[Lead], filters: LeadsFilter) -> List[Lead]:
    """
    Apply LeadsFilter semantics in Python.

    Mirrors the Supabase query: account allow-list, activity equality,
    inclusive day bounds, case-insensitive substring on name OR email.
    Leads with an unparsable timestamp fail any date bound.
    """
    search = filters.search.strip().lower()
    matched = []

    for lead in leads:
        if filters.accounts and lead.account not in filters.accounts:
            continue
        if filters.activity and lead.activity != filters.activity:
            continue

        if filters.date_from or filters.date_to:
            collected = parse_timestamp(lead.collected_at)
            if collected is None:
                continue
            day = collected.date()
            if filters.date_from and day < filters.date_from:
                continue
            if filters.date_to and day > filters.date_to:
                continue

        if search:
            name = (lead.name or "").lower()
            email = (lead.email or "").lower()
            if search not in name and search not in email:
                continue

        matched.append(lead)

    return matched


class InMemoryLeadSource:
    """Lead source backed by a fixed list, filtered like the real store."""

    def __init__(self, leads: Iterable[Lead] = ()):
        self._leads = list(leads)

    def fetch_leads(self, filters: LeadsFilter) -> List[Lead]:
        leads = filter_leads(self._leads, filters)
        logger.debug("In-memory source matched %d/%d leads", len(leads), len(self._leads))
        return leads


class SupabaseLeadSource:
    """
    Fetch boundary over a Supabase table of leads.

    Args:
        client: A supabase Client (or anything with the same query builder).
        table: Table holding the leads.
        column_map: Store column -> Lead field mapping.
        page_size: Rows requested per range() call.
        max_attempts: Attempts per page on transport errors.
        retry_wait: tenacity wait strategy between attempts.
    """

    def __init__(
        self,
        client,
        table: str = None,
        column_map: Mapping[str, str] = None,
        page_size: int = None,
        max_attempts: int = None,
        retry_wait=None,
    ):
        self.client = client
        self.table = table or config.LEADS_TABLE
        self.column_map = dict(column_map or config.LEAD_COLUMN_MAP)
        self.page_size = page_size or config.LEADS_PAGE_SIZE
        self.max_attempts = max(1, max_attempts or config.LEADS_FETCH_RETRIES)
        self.retry_wait = retry_wait or wait_exponential(multiplier=1, min=1, max=8)
        self._columns = {field: column for column, field in self.column_map.items()}

    def _column(self, field: str) -> str:
        return self._columns.get(field, field)

    def _build_query(self, filters: LeadsFilter):
        query = self.client.table(self.table).select("*")

        if filters.accounts:
            query = query.in_(self._column("account"), sorted(filters.accounts))
        if filters.activity:
            query = query.eq(self._column("activity"), filters.activity)

        # Day bounds compare against timestamps, not dates
        date_col = self._column("collected_at")
        if filters.date_from:
            query = query.gte(date_col, f"{filters.date_from.isoformat()}T00:00:00")
        if filters.date_to:
            query = query.lte(date_col, f"{filters.date_to.isoformat()}T23:59:59")

        search = filters.search.strip().translate(_OR_FILTER_RESERVED)
        if search:
            query = query.or_(
                f"{self._column('name')}.ilike.%{search}%,"
                f"{self._column('email')}.ilike.%{search}%"
            )

        return query.order(date_col)

    def _execute_page(self, filters: LeadsFilter, start: int) -> List[Dict[str, Any]]:
        retrying = Retrying(
            stop=stop_after_attempt(self.max_attempts),
            wait=self.retry_wait,
            retry=retry_if_exception_type(httpx.TransportError),
            reraise=True,
        )
        for attempt in retrying:
            with attempt:
                if attempt.retry_state.attempt_number > 1:
                    logger.warning(
                        "Retrying %s page at offset %d (attempt %d/%d)",
                        self.table, start, attempt.retry_state.attempt_number,
                        self.max_attempts,
                    )
                query = self._build_query(filters).range(start, start + self.page_size - 1)
                result = query.execute()
        return result.data or []

    def _to_lead(self, row: Mapping[str, Any]) -> Optional[Lead]:
        try:
            return Lead.from_row(row, self.column_map)
        except ValidationError as e:
            logger.warning(
                "Skipping malformed row in %s: %d validation error(s)",
                self.table, e.error_count(),
            )
            return None

    def fetch_leads(self, filters: LeadsFilter) -> List[Lead]:
        """Return every lead matching filters, paging through the table."""
        rows: List[Dict[str, Any]] = []
        start = 0

        try:
            while True:
                page = self._execute_page(filters, start)
                rows.extend(page)
                if len(page) < self.page_size:
                    break
                start += self.page_size
        except Exception as e:
            logger.error("Supabase query failed on %s: %s", self.table, e)
            raise DataFetchError(f"Failed to fetch leads: {e}", source=self.table) from e

        leads = [lead for lead in (self._to_lead(row) for row in rows) if lead is not None]
        logger.info("Fetched %d leads from %s (%d rows)", len(leads), self.table, len(rows))
        return leads
