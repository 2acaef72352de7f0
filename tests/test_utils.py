"""Tests for shared helpers: timestamps, arithmetic, logging."""

from scripts.lib.logger import setup_logger
from scripts.lib.utils import day_key, parse_timestamp, safe_div


class TestTimestamps:
    def test_parses_iso_variants(self):
        assert parse_timestamp("2024-01-01T10:00:00").hour == 10
        assert parse_timestamp("2024-01-01T10:00:00Z").utcoffset().total_seconds() == 0
        assert parse_timestamp(" 2024-01-01 ") is not None

    def test_rejects_garbage(self):
        assert parse_timestamp("yesterday") is None
        assert parse_timestamp("") is None
        assert parse_timestamp(None) is None

    def test_day_key_keeps_own_date(self):
        assert day_key("2024-03-31T23:30:00-05:00") == "2024-03-31"
        assert day_key("not a date") is None

    def test_trimmed_fractional_seconds_and_short_offset(self):
        assert day_key("2024-01-15T10:30:00.12345+00:00") == "2024-01-15"
        assert day_key("2024-01-15T10:30:00.1+00") == "2024-01-15"
        assert parse_timestamp("2024-01-15T10:30:00.12345+00:00").microsecond == 123450


class TestSafeDiv:
    def test_zero_denominator(self):
        assert safe_div(5, 0) == 0.0
        assert safe_div(5, 0, default=-1) == -1

    def test_regular_division(self):
        assert safe_div(15, 2) == 7.5


class TestLogger:
    def test_writes_daily_file_when_enabled(self, tmp_path):
        logger = setup_logger("tests.file_logger", log_to_file=True, log_dir=tmp_path)
        logger.info("hello leads")
        for handler in logger.handlers:
            handler.flush()

        files = list(tmp_path.glob("*_leads_hub.log"))
        assert len(files) == 1
        assert "hello leads" in files[0].read_text(encoding="utf-8")

    def test_reuses_configured_logger(self):
        first = setup_logger("tests.same_logger", log_to_file=False)
        second = setup_logger("tests.same_logger", log_to_file=False)
        assert first is second
        assert len(second.handlers) == 1
