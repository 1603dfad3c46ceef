'''
Concierge Ingestion Test Suite

Test Modules:
-------------
- test_parsers.py: date range, phone time, task pair, daily date, timestamp
  and phone parsers
- test_classifiers.py: row predicates, member-name cleanup, issue categories
- test_sheet.py: delimited-text reader and parse failures
- test_weekly_metrics.py: weekly fold, validator, summary, agent scoring
- test_daily_interactions.py: daily fold, validator, summary, trends
- test_after_hours.py: after-hours transform, validator, summary, duplicates
- test_format_detection.py: fingerprint order and unknown sheets
- test_ingestion.py: orchestrator state machine and batch accounting
- test_persistence.py: PostgresConciergeStore against a mock asyncpg pool
- test_api.py: upload endpoints with the store overridden

Running Tests:
--------------
    pip install -e ".[test]"
    pytest concierge_ingest/tests -v
'''

__all__ = []
