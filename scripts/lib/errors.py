"""
Custom error classes for Leads Analytics Hub.
Structured error handling with error codes across all modules.

Hierarchy:
    LeadsHubError
    └── DataError
        ├── ConfigError
        └── DataFetchError
"""


class LeadsHubError(Exception):
    """Base exception for all Leads Analytics Hub errors."""

    def __init__(self, message: str, code: str = "UNKNOWN", details: dict = None):
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(f"[{code}] {message}")


# --- Data Errors ---

class DataError(LeadsHubError):
    """Base class for data processing errors."""
    pass


class ConfigError(DataError):
    """Missing or invalid configuration."""

    def __init__(self, message: str, setting: str = None):
        super().__init__(
            message, code="CONFIG_ERROR",
            details={"setting": setting},
        )


class DataFetchError(DataError):
    """Failed to fetch leads from the record store."""

    def __init__(self, message: str, source: str = None):
        super().__init__(
            message, code="DATA_FETCH_FAILED", details={"source": source},
        )
