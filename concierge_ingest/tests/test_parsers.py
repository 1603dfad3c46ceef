"""
Cell Parser Test Module

Covers the pure cell-level parsers shared by the three report families:
weekly date ranges, Phone Time durations, task pairs, daily dates,
after-hours timestamps and the caller 'Name (+phone)' cell.
"""

from datetime import datetime

import pytest

from concierge_ingest.services.classifiers import is_date_range_row
from concierge_ingest.services.parsers import (
    DateRange,
    MemberPhone,
    TaskPair,
    extract_member_name_and_phone,
    format_phone_number,
    is_recognized_phone_time,
    parse_after_hours_timestamp,
    parse_daily_interaction_date,
    parse_incomplete_tasks_pair,
    parse_phone_time_duration,
    parse_weekly_date_range,
)


# =============================================================================
# Weekly date range
# =============================================================================

class TestParseWeeklyDateRange:
    """Tests for parse_weekly_date_range."""

    def test_zero_padded_range(self):
        """A fully padded range parses to itself."""
        assert parse_weekly_date_range('12.01.24-12.07.24') == DateRange('12.01.24', '12.07.24')

    def test_single_digit_parts_are_padded(self):
        """One-digit months and days are zero-padded."""
        result = parse_weekly_date_range('1.5.25-1.11.25')
        assert result == DateRange(start='01.05.25', end='01.11.25'), f"Got {result}"

    def test_range_inside_surrounding_text(self):
        """The range may sit inside a longer header cell."""
        assert parse_weekly_date_range('Week 12.8.24-12.14.24') == DateRange('12.08.24', '12.14.24')

    @pytest.mark.parametrize('text', ['', 'Members attended to', '12.1.24', '12/1/24-12/7/24'])
    def test_non_ranges_return_none(self, text):
        """Cells without a dotted range yield None."""
        assert parse_weekly_date_range(text) is None

    def test_calendar_values_not_checked(self):
        """The parser is pattern-only; month 13 still parses."""
        assert parse_weekly_date_range('13.01.24-13.07.24') is not None

    @pytest.mark.parametrize('text', [
        '12.01.24-12.07.24',
        '1.5.25-1.11.25',
        '12.8.24-12.14.24',
        'Week 3.30.25-4.5.25',
        '13.01.24-13.07.24',
    ])
    def test_rebuilt_range_parses_to_the_same_value(self, text):
        """'start-end' rebuilt from a parsed range is itself a valid range."""
        parsed = parse_weekly_date_range(text)
        rebuilt = f"{parsed.start}-{parsed.end}"

        assert is_date_range_row(rebuilt)
        assert parse_weekly_date_range(rebuilt) == parsed

    @pytest.mark.parametrize('text', ['12.01.24-12.07.24', '1.5.25-1.11.25', 'Week 12.8.24-12.14.24'])
    def test_parsing_is_idempotent(self, text):
        assert parse_weekly_date_range(text) == parse_weekly_date_range(text)


# =============================================================================
# Phone Time
# =============================================================================

class TestParsePhoneTimeDuration:
    """Tests for parse_phone_time_duration and is_recognized_phone_time."""

    @pytest.mark.parametrize('text,expected', [
        ('1:30 hours', 1.5),
        ('7:15 hours', 7.25),
        ('12.5 hours', 12.5),
        ('6 hours', 6.0),
        ('1 hour', 1.0),
        ('45 minutes', 0.75),
        ('30 MINUTES', 0.5),
    ])
    def test_recognized_forms(self, text, expected):
        """Each accepted form converts to decimal hours."""
        result = parse_phone_time_duration(text)
        assert result == pytest.approx(expected), f"{text!r} -> {result}, expected {expected}"
        assert is_recognized_phone_time(text)

    @pytest.mark.parametrize('text', ['', '7', 'about a day', 'N/A'])
    def test_unrecognized_forms_are_zero(self, text):
        """A bare number or free text is zero hours."""
        assert parse_phone_time_duration(text) == 0.0
        assert not is_recognized_phone_time(text)


# =============================================================================
# Task pairs
# =============================================================================

class TestParseIncompleteTasksPair:
    """Tests for parse_incomplete_tasks_pair."""

    def test_pair(self):
        assert parse_incomplete_tasks_pair('3 | 5') == TaskPair(3, 5)

    def test_pair_without_spaces(self):
        assert parse_incomplete_tasks_pair('10|2') == TaskPair(10, 2)

    def test_single_number(self):
        """A lone number is the incomplete count."""
        assert parse_incomplete_tasks_pair('4') == TaskPair(incomplete=4, next_week=0)

    def test_no_numbers(self):
        assert parse_incomplete_tasks_pair('none') == TaskPair(0, 0)
        assert parse_incomplete_tasks_pair('') == TaskPair(0, 0)


# =============================================================================
# Daily dates
# =============================================================================

class TestParseDailyInteractionDate:
    """Tests for parse_daily_interaction_date."""

    @pytest.mark.parametrize('text,expected', [
        ('12.1.24', '12.01.24'),
        ('12.05.24', '12.05.24'),
        ('1.9.25', '01.09.25'),
        ('12/3/2024', '12.03.24'),
        (' 12.1.24 ', '12.01.24'),
    ])
    def test_accepted_shapes(self, text, expected):
        assert parse_daily_interaction_date(text) == expected

    @pytest.mark.parametrize('text', ['', 'Dec 5', '12.1.2024', '12/3/24', '12.1.24 notes'])
    def test_rejected_shapes(self, text):
        assert parse_daily_interaction_date(text) is None


# =============================================================================
# After-hours timestamps
# =============================================================================

class TestParseAfterHoursTimestamp:
    """Tests for parse_after_hours_timestamp."""

    def test_evening_call(self):
        result = parse_after_hours_timestamp('Dec 5, 2024, 11:45:00 pm')
        assert result == datetime(2024, 12, 5, 23, 45, 0)

    def test_midnight_is_hour_zero(self):
        """12 am is midnight."""
        result = parse_after_hours_timestamp('Dec 5, 2024, 12:05:00 am')
        assert result is not None and result.hour == 0, f"Got {result}"

    def test_noon_is_hour_twelve(self):
        """12 pm is noon."""
        result = parse_after_hours_timestamp('Dec 5, 2024, 12:30:00 pm')
        assert result is not None and result.hour == 12, f"Got {result}"

    def test_month_and_meridiem_case_insensitive(self):
        result = parse_after_hours_timestamp('dec 7, 2024, 2:10:15 AM')
        assert result == datetime(2024, 12, 7, 2, 10, 15)

    def test_result_is_naive(self):
        result = parse_after_hours_timestamp('Jan 1, 2025, 1:00:00 am')
        assert result.tzinfo is None

    @pytest.mark.parametrize('text', [
        '',
        '12/5/2024 11:45 pm',
        'Dec 5 2024 11:45:00 pm',
        'Xyz 5, 2024, 11:45:00 pm',
        'Feb 30, 2024, 1:00:00 am',
        'Dec 5, 2024, 13:00:00 pm',
        'Dec 5, 2024, 0:15:00 am',
        'Dec 5, 2024, 11:75:00 pm',
    ])
    def test_invalid_timestamps(self, text):
        """Wrong layout, unknown month and impossible values yield None."""
        assert parse_after_hours_timestamp(text) is None, f"{text!r} should not parse"

    @pytest.mark.parametrize('text', [
        'Dec 5, 2024, 11:45:00 pm',
        'Dec 7, 2024, 2:10:00 am',
        'Jan 1, 2025, 12:00:00 am',
    ])
    def test_parsing_is_idempotent(self, text):
        first = parse_after_hours_timestamp(text)
        assert first is not None
        assert parse_after_hours_timestamp(text) == first


# =============================================================================
# Caller cell
# =============================================================================

class TestExtractMemberNameAndPhone:
    """Tests for extract_member_name_and_phone and format_phone_number."""

    def test_name_with_phone(self):
        result = extract_member_name_and_phone('Jane Doe (+15551234567)')
        assert result == MemberPhone(name='Jane Doe', phone='15551234567')

    def test_phone_without_plus(self):
        assert extract_member_name_and_phone('Sam Roe (5557654321)').phone == '5557654321'

    def test_name_only(self):
        assert extract_member_name_and_phone('  Jane Doe ') == MemberPhone('Jane Doe', '')

    def test_empty_cell(self):
        assert extract_member_name_and_phone('') == MemberPhone('', '')

    @pytest.mark.parametrize('phone,expected', [
        ('5551234567', '(555) 123-4567'),
        ('15551234567', '+1 (555) 123-4567'),
        ('445551234567', '+44 (555) 123-4567'),
        ('12345', '12345'),
    ])
    def test_format_phone_number(self, phone, expected):
        assert format_phone_number(phone) == expected
