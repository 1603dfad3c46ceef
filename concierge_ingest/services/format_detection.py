"""
Structural report-family detection.

Used when an upload does not declare its family. Each family has a
fingerprint (a predicate over the whole sheet); fingerprints are tried in a
fixed order and the first match wins:

    1. Weekly:      a date-range cell, an agent-name column and a metric row
    2. After-hours: a strict after-hours timestamp and a '(+digits)' phone suffix
    3. Daily:       a bare-date first cell and 2 to 4 columns

Weekly goes first because its leading cells also look like dates; checked
after Daily, a narrow weekly sheet would be misread as a daily log.
"""

from typing import Callable, List, Sequence, Tuple
import logging
import re

from concierge_ingest.models import DetectedFormat
from concierge_ingest.services.classifiers import (
    is_date_row,
    is_metric_row,
    match_agent_name,
)
from concierge_ingest.services.parsers import (
    AFTER_HOURS_TIMESTAMP_PATTERN,
    WEEKLY_DATE_RANGE_PATTERN,
)
from concierge_ingest.services.sheet import RawSheet

logger = logging.getLogger(__name__)


PHONE_SUFFIX_PATTERN = re.compile(r'\(\+?\d+\)')

DAILY_MIN_COLUMNS: int = 2
DAILY_MAX_COLUMNS: int = 4

Fingerprint = Callable[[RawSheet, Sequence[str]], bool]


def _all_cells(sheet: RawSheet):
    for cells in sheet.rows:
        for cell in cells:
            yield cell


def _first_cells(sheet: RawSheet):
    for cells in sheet.rows:
        yield cells[0] if cells else ''


def looks_weekly(sheet: RawSheet, known_agents: Sequence[str]) -> bool:
    has_date_range = any(WEEKLY_DATE_RANGE_PATTERN.search(c) for c in _all_cells(sheet))

    header_cells: List[str] = list(sheet.columns[1:]) if sheet.columns else []
    for cells in sheet.rows:
        header_cells.extend(cells[1:])
    has_agent_column = any(match_agent_name(c, known_agents) for c in header_cells)

    has_metric_row = any(is_metric_row(c) for c in _first_cells(sheet))

    return has_date_range and has_agent_column and has_metric_row


def looks_after_hours(sheet: RawSheet, known_agents: Sequence[str]) -> bool:
    has_timestamp = any(AFTER_HOURS_TIMESTAMP_PATTERN.match(c) for c in _all_cells(sheet))
    has_phone = any(PHONE_SUFFIX_PATTERN.search(c) for c in _all_cells(sheet))
    return has_timestamp and has_phone


def looks_daily(sheet: RawSheet, known_agents: Sequence[str]) -> bool:
    has_bare_date = any(is_date_row(c) for c in _first_cells(sheet))
    return has_bare_date and DAILY_MIN_COLUMNS <= sheet.width <= DAILY_MAX_COLUMNS


FINGERPRINTS: List[Tuple[DetectedFormat, Fingerprint]] = [
    (DetectedFormat.WEEKLY, looks_weekly),
    (DetectedFormat.AFTER_HOURS, looks_after_hours),
    (DetectedFormat.DAILY, looks_daily),
]


def detect_format(sheet: RawSheet, known_agents: Sequence[str]) -> DetectedFormat:
    """
    Return the first family whose fingerprint matches, else UNKNOWN.

    Args:
        sheet: Parsed sheet.
        known_agents: Agent names that mark weekly header columns.
    """
    if not sheet.rows:
        return DetectedFormat.UNKNOWN

    for detected, fingerprint in FINGERPRINTS:
        if fingerprint(sheet, known_agents):
            logger.info(f"Detected report family: {detected.value}")
            return detected

    logger.info("No report family fingerprint matched")
    return DetectedFormat.UNKNOWN


__all__ = [
    'FINGERPRINTS',
    'looks_weekly',
    'looks_after_hours',
    'looks_daily',
    'detect_format',
]
