"""
Report Family Detection Test Module

Covers the ordered fingerprints and detect_format.
"""

import pytest

from concierge_ingest.models import DetectedFormat, ReportFamily
from concierge_ingest.services.format_detection import (
    FINGERPRINTS,
    detect_format,
    looks_daily,
    looks_weekly,
)
from concierge_ingest.services.sheet import RawSheet


AGENTS = ('Ace', 'Adam', 'Angee', 'Tupac', 'Leo', 'Julia')


class TestDetectFormat:
    """Tests for detect_format."""

    def test_daily_dates_are_not_weekly(self):
        """Date-like leading cells without agent columns are a daily log."""
        sheet = RawSheet.from_rows([
            ['12.1.24', '', ''],
            ['John Smith', 'Billing question', ''],
            ['12.2.24', '', ''],
            ['Pat Lee', 'Card replacement', 'Mailed'],
        ])
        assert detect_format(sheet, AGENTS) == DetectedFormat.DAILY

    def test_weekly(self, weekly_rows):
        assert detect_format(RawSheet.from_rows(weekly_rows), AGENTS) == DetectedFormat.WEEKLY

    def test_weekly_with_agents_in_named_columns(self):
        sheet = RawSheet.from_rows(
            [['12.01.24-12.07.24', '', ''], ['Members attended to', '1', '2']],
            columns=['', 'Ace', 'Adam'],
        )
        assert detect_format(sheet, AGENTS) == DetectedFormat.WEEKLY

    def test_weekly_needs_known_agents(self):
        sheet = RawSheet.from_rows([['12.01.24-12.07.24', 'Bob'], ['Members attended to', '1']])
        assert not looks_weekly(sheet, AGENTS)
        assert looks_weekly(sheet, ('Bob',))

    def test_after_hours(self, after_hours_rows):
        assert detect_format(RawSheet.from_rows(after_hours_rows), AGENTS) == DetectedFormat.AFTER_HOURS

    def test_after_hours_needs_phone_suffix(self):
        sheet = RawSheet.from_rows([['Dec 5, 2024, 11:45:00 pm', 'Jane Doe', '']])
        assert detect_format(sheet, AGENTS) == DetectedFormat.UNKNOWN

    def test_daily_column_bounds(self):
        narrow = RawSheet.from_rows([['12.1.24']])
        wide = RawSheet.from_rows([['12.1.24', 'a', 'b', 'c', 'd']])
        assert not looks_daily(narrow, AGENTS)
        assert not looks_daily(wide, AGENTS)
        assert looks_daily(RawSheet.from_rows([['12.1.24', 'a']]), AGENTS)

    @pytest.mark.parametrize('rows', [[], [['hello', 'world']], [['', '']]])
    def test_unknown(self, rows):
        assert detect_format(RawSheet.from_rows(rows), AGENTS) == DetectedFormat.UNKNOWN

    def test_fingerprint_order(self):
        """Weekly is tried before the families whose cells it resembles."""
        assert [detected for detected, _ in FINGERPRINTS] == [
            DetectedFormat.WEEKLY,
            DetectedFormat.AFTER_HOURS,
            DetectedFormat.DAILY,
        ]

    def test_detected_format_family(self):
        assert DetectedFormat.DAILY.family == ReportFamily.DAILY
        assert DetectedFormat.AFTER_HOURS.family == ReportFamily.AFTER_HOURS
        assert DetectedFormat.UNKNOWN.family is None
