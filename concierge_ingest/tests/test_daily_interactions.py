"""
Daily Member-Interactions Test Module

Covers the daily section fold, the per-record validator, the batch summary
and the issue analytics (volume, common issues, category trends).
"""

import pytest

from concierge_ingest.models import (
    DailyInteraction,
    IngestionRules,
    IssueUrgency,
    TrendDirection,
)
from concierge_ingest.services.classifiers import NO_CALLS_MEMBER_NAME
from concierge_ingest.services.daily_interactions import (
    DailySectionState,
    advance_daily,
    analyze_trends_by_category,
    calculate_daily_volume,
    date_sort_key,
    identify_common_issues,
    summarize_daily_interactions,
    transform_daily_sheet,
    validate_daily_interaction,
)
from concierge_ingest.services.sheet import RawSheet


def make_interaction(
    date: str = '12.01.24',
    member: str = 'John Smith',
    issue: str = 'Billing question',
    row_number: int = 2,
) -> DailyInteraction:
    return DailyInteraction(
        row_number=row_number,
        interaction_date=date,
        member_name=member,
        issue_description=issue,
    )


# =============================================================================
# Transformer
# =============================================================================

class TestDailyTransform:
    """Tests for advance_daily and transform_daily_sheet."""

    def test_no_calls_day_and_cleaned_member(self, rules):
        """A NO CALLS day and a cleaned interaction on the next day."""
        sheet = RawSheet.from_rows([
            ['12.1.24'],
            ['NO CALLS', '', ''],
            ['12.2.24'],
            ['John Smith x102', 'Billing question', ''],
        ])
        records = transform_daily_sheet(sheet, rules)

        assert len(records) == 2, f"Expected 2 records, got {records}"
        assert records[0].member_name == NO_CALLS_MEMBER_NAME
        assert records[0].interaction_date == '12.01.24'
        assert records[1].member_name == 'John Smith'
        assert records[1].interaction_date == '12.02.24'
        assert records[1].issue_description == 'Billing question'
        assert records[1].notes is None

    def test_full_sheet(self, daily_rows, rules):
        records = transform_daily_sheet(RawSheet.from_rows(daily_rows), rules)

        assert [r.member_name for r in records] == [
            NO_CALLS_MEMBER_NAME, 'John Smith', 'Mary Jones', 'Pat Lee',
        ]
        assert [r.row_number for r in records] == [3, 5, 6, 9]
        assert records[2].notes == 'Mailed new card'
        assert records[3].interaction_date == '12.03.24'

    def test_ignored_names_are_dropped(self, rules):
        sheet = RawSheet.from_rows([['12.1.24'], ['Advisor', 'Internal note']])
        assert transform_daily_sheet(sheet, rules) == []

    def test_ignored_names_are_configurable(self):
        rules = IngestionRules(ignored_daily_names=('Front Desk',))
        sheet = RawSheet.from_rows([
            ['12.1.24'],
            ['front desk', 'handover'],
            ['Advisor', 'kept'],
        ])
        records = transform_daily_sheet(sheet, rules)
        assert [r.member_name for r in records] == ['Advisor']

    def test_rows_before_first_date_are_dropped(self, rules):
        sheet = RawSheet.from_rows([['Jane Doe', 'Question'], ['12.1.24'], ['Pat Lee', 'Card']])
        records = transform_daily_sheet(sheet, rules)
        assert [r.member_name for r in records] == ['Pat Lee']

    def test_empty_first_cell_is_dropped(self, rules):
        sheet = RawSheet.from_rows([['12.1.24', ''], ['', 'orphan issue']])
        assert transform_daily_sheet(sheet, rules) == []

    def test_no_calls_ignores_other_cells(self, rules):
        sheet = RawSheet.from_rows([['12.1.24'], ['No calls', 'slow day', 'note']])
        record = transform_daily_sheet(sheet, rules)[0]
        assert record.member_name == NO_CALLS_MEMBER_NAME
        assert record.issue_description == ''
        assert record.notes is None

    def test_advance_daily_threads_current_date(self, rules):
        state, emitted = advance_daily(DailySectionState(), 1, ['12/3/2024'], rules)
        assert emitted == []
        assert state.current_date == '12.03.24'

        same_state, emitted = advance_daily(state, 2, ['Pat Lee', 'Card'], rules)
        assert same_state == state
        assert emitted[0].interaction_date == '12.03.24'


# =============================================================================
# Validator
# =============================================================================

class TestValidateDailyInteraction:
    """Tests for validate_daily_interaction."""

    def test_valid_record(self):
        assert validate_daily_interaction(make_interaction()).valid

    def test_no_calls_record_is_valid(self):
        record = make_interaction(member=NO_CALLS_MEMBER_NAME, issue='')
        assert validate_daily_interaction(record).valid

    def test_missing_member(self):
        verdict = validate_daily_interaction(make_interaction(member=''))
        assert verdict.errors == ["Member name is required"]

    def test_invalid_date(self):
        verdict = validate_daily_interaction(make_interaction(date='Dec 1'))
        assert verdict.errors == ["Invalid date format: Dec 1"]

    def test_missing_date(self):
        verdict = validate_daily_interaction(make_interaction(date=''))
        assert verdict.errors == ["Interaction date is required"]


# =============================================================================
# Analytics & summary
# =============================================================================

class TestDailyAnalytics:
    """Tests for the daily summary and issue analytics."""

    def test_summary(self, daily_rows, rules):
        records = transform_daily_sheet(RawSheet.from_rows(daily_rows), rules)
        summary = summarize_daily_interactions(records)

        assert summary.total_interactions == 3
        assert summary.total_days == 3
        assert summary.no_calls_days == 1
        assert summary.issue_categories == {'billing': 1, 'card': 1, 'cancelling': 1}
        assert len(summary.top_issues) == 3

    def test_no_calls_days_counts_distinct_dates(self):
        records = [
            make_interaction(member=NO_CALLS_MEMBER_NAME, issue='', row_number=2),
            make_interaction(member=NO_CALLS_MEMBER_NAME, issue='', row_number=3),
        ]
        summary = summarize_daily_interactions(records)
        assert summary.no_calls_days == 1
        assert summary.total_interactions == 0

    def test_top_issues_most_frequent_first(self):
        records = [make_interaction(issue='Card replacement') for _ in range(3)]
        records.append(make_interaction(issue='Billing question'))
        summary = summarize_daily_interactions(records)
        assert summary.top_issues[0].issue == 'card'
        assert summary.top_issues[0].count == 3

    def test_daily_volume_is_chronological(self):
        records = [
            make_interaction(date='01.02.25'),
            make_interaction(date='12.31.24'),
            make_interaction(date='12.31.24'),
            make_interaction(date='12.30.24', member=NO_CALLS_MEMBER_NAME, issue=''),
        ]
        volume = calculate_daily_volume(records)
        assert [(v.date, v.count) for v in volume] == [('12.31.24', 2), ('01.02.25', 1)]

    def test_date_sort_key(self):
        assert date_sort_key('01.02.25') > date_sort_key('12.31.24')
        assert date_sort_key('garbage') == (0, 0, 0)

    def test_common_issues_threshold_and_urgency(self):
        records = [make_interaction(issue='Wants to cancel') for _ in range(3)]
        records += [make_interaction(issue='Card replacement') for _ in range(2)]

        common = identify_common_issues(records)
        assert len(common) == 1
        assert common[0].category == 'cancelling'
        assert common[0].count == 3
        assert common[0].urgency == IssueUrgency.HIGH

    def test_common_issues_custom_minimum(self):
        records = [make_interaction(issue='Card replacement') for _ in range(2)]
        common = identify_common_issues(records, min_occurrences=2)
        assert common[0].category == 'card'
        assert common[0].urgency == IssueUrgency.LOW

    def test_increasing_trend(self):
        records = [make_interaction(date='12.01.24', issue='Other thing')]
        records += [make_interaction(date='12.02.24', issue='Billing issue') for _ in range(3)]

        trends = analyze_trends_by_category(records)
        assert trends['billing'].trend == TrendDirection.INCREASING
        assert trends['billing'].total == 3
        assert trends['billing'].avg_per_day == pytest.approx(1.5)

    def test_decreasing_trend(self):
        records = [make_interaction(date='12.01.24', issue='Billing issue') for _ in range(3)]
        records.append(make_interaction(date='12.02.24', issue='Other thing'))

        trends = analyze_trends_by_category(records)
        assert trends['billing'].trend == TrendDirection.DECREASING

    def test_single_day_is_stable(self):
        records = [make_interaction(issue='Billing issue') for _ in range(4)]
        trends = analyze_trends_by_category(records)
        assert trends['billing'].trend == TrendDirection.STABLE
        assert trends['billing'].avg_per_day == pytest.approx(4.0)
